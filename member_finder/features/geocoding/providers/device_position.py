"""端末の位置情報プロバイダー"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional

from ....shared.logging.config import get_logger
from ..domain.enums import PositionErrorReason
from ..domain.models import GeoPoint, PositionResult

logger = get_logger(__name__)


class AbstractDevicePositionProvider(ABC):
    """端末の位置情報プロバイダーの抽象基底クラス"""

    @abstractmethod
    async def current_position(self) -> PositionResult:
        """
        現在地を1回だけ取得

        Returns:
            PositionResult: 成功時は地点、失敗時は理由
        """
        pass


class StaticDevicePosition(AbstractDevicePositionProvider):
    """
    ホストから与えられた座標を返すプロバイダー

    CLIの --lat/--lon などで座標が与えられる環境向け。
    座標がない場合は位置取得機能なし、denied=True の場合は許可拒否として振る舞う。
    """

    def __init__(self, point: Optional[GeoPoint] = None, denied: bool = False) -> None:
        """
        Args:
            point: 端末の座標（Noneの場合は位置取得機能なし）
            denied: 位置情報の利用が拒否されているか
        """
        self.point = point
        self.denied = denied

    async def current_position(self) -> PositionResult:
        if self.denied:
            return PositionResult.err(PositionErrorReason.PERMISSION_DENIED)
        if self.point is None:
            return PositionResult.err(PositionErrorReason.CAPABILITY_ABSENT)
        return PositionResult.ok(self.point)


class CallbackDevicePosition(AbstractDevicePositionProvider):
    """任意の非同期関数をプロバイダーとして使う（ホスト連携・テスト用）"""

    def __init__(self, callback: Callable[[], Awaitable[PositionResult]]) -> None:
        self.callback = callback

    async def current_position(self) -> PositionResult:
        return await self.callback()
