"""逆ジオコーディングサービス（地点 → 表示用の地名）"""

from ....shared.logging.config import get_logger
from ..domain.models import UNKNOWN_LOCATION_LABEL, GeoPoint
from ..providers.nominatim_geocoder import NominatimGeocoder, place_name_from_reverse_payload

logger = get_logger(__name__)


class ReverseGeocoder:
    """
    地点を市・町・村の名前に変換する

    ラベルは表示用のため、失敗しても例外を投げず番兵文字列を返す。
    """

    def __init__(self, geocoder: NominatimGeocoder) -> None:
        """
        Args:
            geocoder: 逆ジオコーディングに使うプロバイダー
        """
        self.geocoder = geocoder

    def label(self, point: GeoPoint) -> str:
        """
        地点の表示名を取得

        Args:
            point: 地点

        Returns:
            str: 地名（取得できない場合は "unknown location"）
        """
        try:
            payload = self.geocoder.reverse(point)
        except Exception as e:
            logger.warning(
                f"Reverse geocoding failed for ({point.latitude}, {point.longitude}): {e}"
            )
            return UNKNOWN_LOCATION_LABEL

        name = place_name_from_reverse_payload(payload)
        if not name:
            logger.info(f"No place name for ({point.latitude}, {point.longitude})")
            return UNKNOWN_LOCATION_LABEL

        logger.debug(f"Reverse geocoded: ({point.latitude}, {point.longitude}) -> {name}")

        return name
