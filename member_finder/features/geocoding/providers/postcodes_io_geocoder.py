"""postcodes.io による英国郵便番号ジオコーディング"""
from typing import Any, Optional
from urllib.parse import quote

from ..domain.models import GeoPoint
from ....shared.exceptions.errors import (
    GeocodingProviderError,
    HTTPError,
    LocationNotFoundError,
    ParsingError,
    ValidationError,
)
from ....shared.http.client import HTTPClient
from ....shared.logging.config import get_logger
from ....shared.utils.text import parse_float

logger = get_logger(__name__)


def point_from_postcode_payload(payload: Any, postcode: str = "") -> GeoPoint:
    """
    postcodes.io のレスポンスエンベロープを GeoPoint に変換

    {"status": 200, "result": {"latitude": ..., "longitude": ...}}

    Args:
        payload: デコード済みJSON
        postcode: ログ・エラーメッセージ用の郵便番号

    Returns:
        GeoPoint: 郵便番号の代表地点

    Raises:
        LocationNotFoundError: ステータスが200以外、または結果が空の場合
        GeocodingProviderError: エンベロープの形式や座標値が不正な場合
    """
    if not isinstance(payload, dict):
        raise GeocodingProviderError(f"Unexpected postcode response for {postcode!r}")

    if payload.get("status") != 200:
        raise LocationNotFoundError(
            f"Postcode not found: {postcode!r} ({payload.get('error', payload.get('status'))})"
        )

    result = payload.get("result")
    if not result:
        raise LocationNotFoundError(f"Postcode has no result: {postcode!r}")
    if not isinstance(result, dict):
        raise GeocodingProviderError(f"Unexpected postcode result for {postcode!r}")

    raw_latitude = result.get("latitude")
    raw_longitude = result.get("longitude")

    # 一部の郵便番号（チャネル諸島など）は座標がnullで返る
    if raw_latitude is None or raw_longitude is None:
        raise LocationNotFoundError(f"Postcode has no coordinates: {postcode!r}")

    latitude = parse_float(raw_latitude)
    longitude = parse_float(raw_longitude)
    if latitude is None or longitude is None:
        raise GeocodingProviderError(
            f"Invalid coordinates for postcode {postcode!r}: ({raw_latitude}, {raw_longitude})"
        )

    try:
        return GeoPoint(latitude=latitude, longitude=longitude)
    except ValidationError as e:
        raise GeocodingProviderError(f"Invalid coordinates for postcode {postcode!r}: {e}") from e


class PostcodesIoGeocoder:
    """postcodes.io API実装"""

    def __init__(
        self,
        http_client: Optional[HTTPClient] = None,
        base_url: str = "https://api.postcodes.io",
    ) -> None:
        """
        Args:
            http_client: HTTPクライアント（Noneの場合は新規作成）
            base_url: APIのベースURL
        """
        self.http_client = http_client or HTTPClient()
        self.base_url = base_url.rstrip("/")

        logger.info(f"PostcodesIoGeocoder initialized: {self.base_url}")

    def lookup(self, postcode: str) -> GeoPoint:
        """
        郵便番号をジオコーディング

        Args:
            postcode: 郵便番号（例: "SW1A 1AA"）

        Returns:
            GeoPoint: 郵便番号の代表地点

        Raises:
            LocationNotFoundError: 該当する郵便番号がない場合
            GeocodingProviderError: 通信・解析に失敗した場合
        """
        url = f"{self.base_url}/postcodes/{quote(postcode, safe='')}"

        try:
            # 404もJSONエンベロープで返るため、ステータスはエンベロープで判定する
            payload = self.http_client.get_json(url, raise_for_status=False)
        except (HTTPError, ParsingError) as e:
            raise GeocodingProviderError(f"Postcode lookup failed for {postcode!r}: {e}") from e

        point = point_from_postcode_payload(payload, postcode)

        logger.debug(f"Geocoded postcode: {postcode} -> ({point.latitude}, {point.longitude})")

        return point
