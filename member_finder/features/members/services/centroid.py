"""サービス提供エリアの代表地点（重心）計算"""

from typing import Optional

from ....shared.exceptions.errors import ValidationError
from ....shared.logging.config import get_logger
from ...geocoding.domain.models import GeoPoint
from ..domain.models import Region

logger = get_logger(__name__)


def compute_centroid(region: Region) -> Optional[GeoPoint]:
    """
    頂点の緯度・経度の算術平均を代表地点とする

    球面上の面積重心ではない近似だが、エリアが地球半径に比べて十分小さい前提で使う。

    Args:
        region: サービス提供エリアの頂点

    Returns:
        Optional[GeoPoint]: 代表地点。次の場合は無効（None）:
            - 頂点がない
            - 先頭の頂点の緯度・経度のどちらかが欠けている（None または 0）
            - いずれかの頂点に座標の欠けがある、または範囲外
    """
    if not region:
        return None

    first = region[0]
    if not first.lat or not first.lng:
        return None

    if any(vertex.lat is None or vertex.lng is None for vertex in region):
        logger.debug("Region has vertices without coordinates")
        return None

    latitude = sum(vertex.lat for vertex in region) / len(region)
    longitude = sum(vertex.lng for vertex in region) / len(region)

    try:
        return GeoPoint(latitude=latitude, longitude=longitude)
    except ValidationError as e:
        logger.debug(f"Region centroid out of range: {e}")
        return None
