"""Nominatim（OpenStreetMap）によるフリーテキスト検索・逆ジオコーディング"""
from typing import Any, Optional

from ..domain.models import GeoPoint
from ....shared.exceptions.errors import (
    GeocodingProviderError,
    HTTPError,
    LocationNotFoundError,
    ParsingError,
    ValidationError,
)
from ....shared.http.client import HTTPClient
from ....shared.http.rate_limiter import RateLimiter
from ....shared.logging.config import get_logger
from ....shared.utils.text import parse_float

logger = get_logger(__name__)

# 逆ジオコーディング結果から地名を取り出す優先順
PLACE_NAME_KEYS = ("city", "town", "village")


def point_from_search_payload(payload: Any, query: str = "") -> GeoPoint:
    """
    Nominatim /search のレスポンス（候補の配列）を GeoPoint に変換

    先頭の候補の lat/lon（数値文字列）を使用する。

    Raises:
        LocationNotFoundError: 候補が0件の場合
        GeocodingProviderError: 形式や座標値が不正な場合
    """
    if not isinstance(payload, list):
        raise GeocodingProviderError(f"Unexpected search response for {query!r}")

    if not payload:
        raise LocationNotFoundError(f"No search results for {query!r}")

    candidate = payload[0]
    if not isinstance(candidate, dict):
        raise GeocodingProviderError(f"Unexpected search candidate for {query!r}")

    latitude = parse_float(candidate.get("lat"))
    longitude = parse_float(candidate.get("lon"))
    if latitude is None or longitude is None:
        raise GeocodingProviderError(
            f"Invalid coordinates in search result for {query!r}: "
            f"({candidate.get('lat')!r}, {candidate.get('lon')!r})"
        )

    try:
        return GeoPoint(latitude=latitude, longitude=longitude)
    except ValidationError as e:
        raise GeocodingProviderError(f"Invalid coordinates in search result for {query!r}: {e}") from e


def place_name_from_reverse_payload(payload: Any) -> Optional[str]:
    """
    Nominatim /reverse のレスポンスから地名を取得

    address.city → address.town → address.village の順に最初に存在するもの。

    Returns:
        Optional[str]: 地名（見つからない場合はNone）
    """
    if not isinstance(payload, dict):
        return None

    address = payload.get("address")
    if not isinstance(address, dict):
        return None

    for key in PLACE_NAME_KEYS:
        name = address.get(key)
        if isinstance(name, str) and name.strip():
            return name.strip()

    return None


class NominatimGeocoder:
    """Nominatim API実装"""

    def __init__(
        self,
        http_client: Optional[HTTPClient] = None,
        base_url: str = "https://nominatim.openstreetmap.org",
        rate_limiter: Optional[RateLimiter] = None,
    ) -> None:
        """
        Args:
            http_client: HTTPクライアント（Noneの場合は新規作成）
            base_url: APIのベースURL
            rate_limiter: レート制限（Noneの場合は1リクエスト/秒）
        """
        self.http_client = http_client or HTTPClient()
        self.base_url = base_url.rstrip("/")
        self.rate_limiter = rate_limiter or RateLimiter(requests_per_second=1.0)

        logger.info(f"NominatimGeocoder initialized: {self.base_url}")

    def search(self, query: str) -> GeoPoint:
        """
        フリーテキストをジオコーディング

        Args:
            query: 検索語（例: "London"）

        Returns:
            GeoPoint: 先頭候補の地点

        Raises:
            LocationNotFoundError: 候補がない場合
            GeocodingProviderError: 通信・解析に失敗した場合
        """
        payload = self._get(f"{self.base_url}/search", {"format": "json", "q": query})

        point = point_from_search_payload(payload, query)

        logger.debug(f"Geocoded query: {query} -> ({point.latitude}, {point.longitude})")

        return point

    def reverse(self, point: GeoPoint) -> Any:
        """
        座標から住所情報を取得（逆ジオコーディング）

        Args:
            point: 地点

        Returns:
            デコード済みJSON（address を含む）

        Raises:
            GeocodingProviderError: 通信・解析に失敗した場合
        """
        logger.debug(f"Reverse geocoding: ({point.latitude}, {point.longitude})")

        return self._get(
            f"{self.base_url}/reverse",
            {"lat": point.latitude, "lon": point.longitude, "format": "json"},
        )

    def _get(self, url: str, params: dict[str, Any]) -> Any:
        self.rate_limiter.wait()

        try:
            return self.http_client.get_json(url, params=params)
        except (HTTPError, ParsingError) as e:
            raise GeocodingProviderError(f"Nominatim request failed: {e}") from e
