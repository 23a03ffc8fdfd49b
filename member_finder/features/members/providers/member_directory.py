"""メンバーディレクトリ（メンバー一覧の取得元）"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional, Union

from ....shared.exceptions.errors import HTTPError, MemberDirectoryError, ParsingError
from ....shared.http.client import HTTPClient
from ....shared.logging.config import get_logger
from ..domain.models import MemberRecord
from ..parsers.member_parser import MemberParser

logger = get_logger(__name__)


class AbstractMemberSource(ABC):
    """メンバー一覧の取得元の抽象基底クラス"""

    def __init__(self, parser: Optional[MemberParser] = None) -> None:
        self.parser = parser or MemberParser()

    @abstractmethod
    def fetch_payload(self) -> Any:
        """ディレクトリのレスポンス全体（{"data": [...]}）を取得"""
        pass

    def fetch_members(self) -> list[MemberRecord]:
        """
        ランキング対象のメンバー一覧を取得

        Returns:
            list[MemberRecord]: active かつエリアを持つメンバー

        Raises:
            MemberDirectoryError: 取得・解析に失敗した場合
        """
        payload = self.fetch_payload()

        if isinstance(payload, dict):
            records = payload.get("data")
        else:
            records = payload

        if not isinstance(records, list):
            raise MemberDirectoryError("Member directory response has no data array")

        try:
            return self.parser.parse_many(records)
        except Exception as e:
            raise MemberDirectoryError(f"Failed to parse member directory: {e}") from e


class HttpMemberDirectory(AbstractMemberSource):
    """メンバー一覧APIから取得"""

    def __init__(
        self,
        url: str,
        http_client: Optional[HTTPClient] = None,
        parser: Optional[MemberParser] = None,
    ) -> None:
        """
        Args:
            url: メンバー一覧APIのURL
            http_client: HTTPクライアント（Noneの場合は新規作成）
            parser: パーサー
        """
        super().__init__(parser)
        self.url = url
        self.http_client = http_client or HTTPClient()

        logger.info(f"HttpMemberDirectory initialized: {self.url}")

    def fetch_payload(self) -> Any:
        try:
            return self.http_client.get_json(self.url)
        except (HTTPError, ParsingError) as e:
            raise MemberDirectoryError(f"Failed to fetch members: {e}") from e


class JsonFileMemberDirectory(AbstractMemberSource):
    """APIと同じ形式のJSONファイルから取得（オフライン実行用）"""

    def __init__(self, path: Union[str, Path], parser: Optional[MemberParser] = None) -> None:
        super().__init__(parser)
        self.path = Path(path)

    def fetch_payload(self) -> Any:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise MemberDirectoryError(f"Failed to read members from {self.path}: {e}") from e
