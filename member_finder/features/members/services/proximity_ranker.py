"""近接ランキングサービス"""

import math
from dataclasses import replace
from typing import Iterable, Optional

from ....shared.logging.config import get_logger
from ...geocoding.domain.models import GeoPoint
from ..domain.models import MemberRecord
from .centroid import compute_centroid

logger = get_logger(__name__)

# 地球半径（メートル）。地図表示側の距離計算と同じ値を使う
EARTH_RADIUS_M = 6_371_000.0

DEFAULT_LIMIT = 6

RankedResult = tuple[MemberRecord, ...]


def haversine_distance_m(a: GeoPoint, b: GeoPoint) -> float:
    """
    2地点間の大円距離をHaversine公式で計算

    Returns:
        距離（メートル）
    """
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    dlat = math.radians(b.latitude - a.latitude)
    dlon = math.radians(b.longitude - a.longitude)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.asin(min(1.0, math.sqrt(h)))

    return EARTH_RADIUS_M * c


class ProximityRanker:
    """
    指定地点から近い順にメンバーを並べる

    副作用のない同期処理で、入力のメンバーは変更せず
    distance_meters を設定したコピーを返す。
    """

    def __init__(self, limit: int = DEFAULT_LIMIT) -> None:
        """
        Args:
            limit: 返す最大件数
        """
        if limit < 0:
            raise ValueError(f"limit must be non-negative: {limit}")
        self.limit = limit

    def rank(
        self,
        point: GeoPoint,
        members: Iterable[MemberRecord],
        limit: Optional[int] = None,
    ) -> RankedResult:
        """
        メンバーを距離の昇順に並べ、上位を返す

        エリアの代表地点が無効なメンバーは候補から除外する。
        距離が同じ場合は入力順を保つ。

        Args:
            point: 基準地点
            members: メンバー
            limit: 返す最大件数（Noneの場合はコンストラクタの値）

        Returns:
            RankedResult: min(limit, 有効なメンバー数) 件
        """
        if limit is None:
            limit = self.limit
        if limit < 0:
            raise ValueError(f"limit must be non-negative: {limit}")

        candidates: list[tuple[float, MemberRecord]] = []
        excluded = 0

        for member in members:
            centroid = compute_centroid(member.region)
            if centroid is None:
                excluded += 1
                continue
            candidates.append((haversine_distance_m(point, centroid), member))

        if excluded:
            logger.debug(f"Excluded {excluded} members without a valid region")

        # sorted は安定ソートのため、同距離は入力順のまま
        candidates = sorted(candidates, key=lambda candidate: candidate[0])

        return tuple(
            replace(member, distance_meters=distance) for distance, member in candidates[:limit]
        )
