"""ジオコーディング機能のドメインモデル"""
import math
from dataclasses import dataclass, replace
from typing import Any, Optional

from ....shared.exceptions.errors import ValidationError
from .enums import LocationSource, PositionErrorReason

# 逆ジオコーディングで地名が得られなかった場合の表示名
UNKNOWN_LOCATION_LABEL = "unknown location"


@dataclass(frozen=True)
class GeoPoint:
    """地理的位置（WGS84）"""

    latitude: float  # 緯度
    longitude: float  # 経度

    def __post_init__(self) -> None:
        for name, value, bound in (
            ("latitude", self.latitude, 90.0),
            ("longitude", self.longitude, 180.0),
        ):
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise ValidationError(f"{name} must be a number: {value!r}")
            if not math.isfinite(value) or not -bound <= value <= bound:
                raise ValidationError(f"{name} out of range: {value}")

    def __repr__(self) -> str:
        return f"GeoPoint(lat={self.latitude}, lng={self.longitude})"

    @property
    def is_sentinel(self) -> bool:
        """(0, 0) は「不明」を表す番兵値として扱う"""
        return self.latitude == 0 and self.longitude == 0

    def to_tuple(self) -> tuple[float, float]:
        """(緯度, 経度)のタプルとして返す"""
        return (self.latitude, self.longitude)

    def to_dict(self) -> dict[str, float]:
        return {"latitude": self.latitude, "longitude": self.longitude}


@dataclass(frozen=True)
class ResolvedLocation:
    """
    解決済みの地点

    labelがNoneの場合は逆ジオコーディングの結果待ち。
    インスタンスは変更せず、ラベル確定時は with_label で新しいインスタンスを作る。
    """

    point: GeoPoint
    source: LocationSource
    label: Optional[str] = None

    @property
    def is_label_pending(self) -> bool:
        return self.label is None

    def with_label(self, label: str) -> "ResolvedLocation":
        """ラベルを設定した新しいインスタンスを返す"""
        return replace(self, label=label)

    def to_dict(self) -> dict[str, Any]:
        return {
            "latitude": self.point.latitude,
            "longitude": self.point.longitude,
            "source": self.source.value,
            "label": self.label,
        }


@dataclass(frozen=True)
class PositionResult:
    """端末の位置取得結果（成功時はpoint、失敗時はerror）"""

    point: Optional[GeoPoint] = None
    error: Optional[PositionErrorReason] = None

    def __post_init__(self) -> None:
        if (self.point is None) == (self.error is None):
            raise ValidationError("PositionResult requires exactly one of point or error")

    @classmethod
    def ok(cls, point: GeoPoint) -> "PositionResult":
        return cls(point=point)

    @classmethod
    def err(cls, reason: PositionErrorReason) -> "PositionResult":
        return cls(error=reason)

    @property
    def is_ok(self) -> bool:
        return self.point is not None
