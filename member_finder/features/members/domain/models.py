"""メンバー機能のドメインモデル"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class RegionVertex:
    """サービス提供エリア（ポリゴン）の頂点。座標が欠けている場合はNone"""

    lat: Optional[float]
    lng: Optional[float]


# 頂点の並び（ポリゴンとしての順序は保持するが、重心計算には影響しない）
Region = tuple[RegionVertex, ...]


@dataclass(frozen=True)
class MemberRecord:
    """
    メンバー情報（メンバーディレクトリから取得、読み取り専用）

    distance_meters は ProximityRanker が返すコピーにのみ設定される。
    """

    member_id: str
    full_name: str = ""
    trading_name: str = ""  # 屋号
    email: Optional[str] = None
    username: Optional[str] = None
    contact_number: Optional[str] = None
    formatted_address: Optional[str] = None
    profile_url: Optional[str] = None
    avatar_url: Optional[str] = None

    # 住所
    city: Optional[str] = None
    state: Optional[str] = None
    postcode: Optional[str] = None
    country: Optional[str] = None

    # 会員区分
    subscription_status: Optional[str] = None
    product_id: Optional[str] = None

    region: Region = ()

    # ランキング時に設定（検索地点ごとに再計算）
    distance_meters: Optional[float] = None

    @property
    def display_name(self) -> str:
        """表示名（屋号を優先）"""
        return self.trading_name or self.full_name or self.member_id

    def to_dict(self) -> dict[str, Any]:
        """表示境界（API・CLI）向けの辞書に変換"""
        return {
            "id": self.member_id,
            "full_name": self.full_name,
            "trading_name": self.trading_name,
            "email": self.email,
            "contact_number": self.contact_number,
            "formatted_address": self.formatted_address,
            "profile_url": self.profile_url,
            "avatar_url": self.avatar_url,
            "city": self.city,
            "postcode": self.postcode,
            "distance_meters": self.distance_meters,
        }
