"""メンバー検索セッションの列挙型"""

from enum import Enum


class SearchStatus(str, Enum):
    """検索の結果"""

    RESOLVED = "resolved"  # 地点が見つかり、ランキングを更新した
    NOT_FOUND = "not_found"  # 地点が見つからない（プロバイダーエラーを含む）
    EMPTY_QUERY = "empty_query"  # 検索語が空
    BUSY = "busy"  # 別の検索が実行中
    CLOSED = "closed"  # セッション終了済み
