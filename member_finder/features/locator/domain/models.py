"""メンバー検索セッションのドメインモデル"""

from dataclasses import dataclass
from typing import Any, Optional

from ...geocoding.domain.models import ResolvedLocation
from ...members.domain.models import MemberRecord

# 検索に失敗した場合にユーザーへ表示するメッセージ
SEARCH_NOT_FOUND_MESSAGE = "No such location"


@dataclass(frozen=True)
class DisplayState:
    """表示側に渡す状態のスナップショット（変更のたびに新しく作る）"""

    location: Optional[ResolvedLocation] = None
    ranked: tuple[MemberRecord, ...] = ()
    searching: bool = False
    search_error: Optional[str] = None
    generation: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "location": self.location.to_dict() if self.location else None,
            "members": [member.to_dict() for member in self.ranked],
            "searching": self.searching,
            "search_error": self.search_error,
            "generation": self.generation,
        }
