"""フォワードジオコーディングサービス（検索語 → 地点）"""

import re

from ....shared.exceptions.errors import GeocodingError, GeocodingProviderError, LocationNotFoundError
from ....shared.logging.config import get_logger
from ....shared.utils.text import normalize_text
from ..domain.enums import QueryKind
from ..domain.models import GeoPoint
from ..providers.nominatim_geocoder import NominatimGeocoder
from ..providers.postcodes_io_geocoder import PostcodesIoGeocoder

logger = get_logger(__name__)

# 英数字1〜4文字 + 半角スペース1つ + 英数字1〜4文字（例: "SW1A 1AA", "M1 1AE"）
POSTCODE_PATTERN = re.compile(r"^[A-Z0-9]{1,4} [A-Z0-9]{1,4}$", re.IGNORECASE)


def classify_query(query: str) -> QueryKind:
    """
    検索語が郵便番号かフリーテキストかを判定

    前後の空白と連続する空白は正規化してから判定する。
    """
    normalized = normalize_text(query) or ""

    if POSTCODE_PATTERN.match(normalized):
        return QueryKind.POSTCODE

    return QueryKind.FREE_TEXT


class ForwardGeocoder:
    """
    検索語の形から郵便番号APIとフリーテキスト検索APIを使い分けるジオコーダー

    共有状態は持たず、ネットワーク呼び出し以外の副作用はない。
    """

    def __init__(
        self,
        postcode_geocoder: PostcodesIoGeocoder,
        search_geocoder: NominatimGeocoder,
    ) -> None:
        """
        Args:
            postcode_geocoder: 郵便番号ジオコーダー
            search_geocoder: フリーテキストジオコーダー
        """
        self.postcode_geocoder = postcode_geocoder
        self.search_geocoder = search_geocoder

    def resolve(self, query: str) -> GeoPoint:
        """
        検索語を地点に変換

        Args:
            query: 郵便番号または地名・住所

        Returns:
            GeoPoint: 地点

        Raises:
            LocationNotFoundError: 該当する地点がない場合
            GeocodingProviderError: 通信・解析に失敗した場合
        """
        normalized = normalize_text(query)
        if not normalized:
            raise LocationNotFoundError("Empty search query")

        kind = classify_query(normalized)
        logger.info(f"Resolving {kind.value} query: {normalized}")

        try:
            if kind is QueryKind.POSTCODE:
                return self.postcode_geocoder.lookup(normalized)
            return self.search_geocoder.search(normalized)

        except GeocodingError:
            raise
        except Exception as e:
            raise GeocodingProviderError(
                f"Unexpected error during geocoding of {normalized!r}: {e}"
            ) from e
