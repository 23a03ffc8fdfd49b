"""ジオコーディング機能の列挙型"""

from enum import Enum


class LocationSource(str, Enum):
    """地点の取得元"""

    DEVICE = "device"  # 端末の位置情報
    FALLBACK = "fallback"  # 既定地点
    SEARCH = "search"  # ユーザー検索


class QueryKind(str, Enum):
    """検索語の種別"""

    POSTCODE = "postcode"
    FREE_TEXT = "free_text"


class PositionErrorReason(str, Enum):
    """端末の位置取得に失敗した理由"""

    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"
    CAPABILITY_ABSENT = "capability_absent"


class ResolverState(str, Enum):
    """現在地解決の状態"""

    IDLE = "idle"
    REQUESTING_DEVICE_POSITION = "requesting_device_position"
    RESOLVED_DEVICE = "resolved_device"
    RESOLVED_FALLBACK = "resolved_fallback"
