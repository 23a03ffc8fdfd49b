"""現在地解決サービス"""

import asyncio
from typing import Callable, Optional

from ....shared.exceptions.errors import LocationResolverError
from ....shared.logging.config import get_logger
from ..domain.enums import LocationSource, PositionErrorReason, ResolverState
from ..domain.models import GeoPoint, PositionResult, ResolvedLocation
from ..providers.device_position import AbstractDevicePositionProvider
from .reverse_geocoder import ReverseGeocoder

logger = get_logger(__name__)


class LocationResolver:
    """
    起動時に1回だけ現在地を解決する

    状態遷移:
    IDLE → REQUESTING_DEVICE_POSITION → RESOLVED_DEVICE / RESOLVED_FALLBACK

    端末の位置取得が拒否・失敗・未対応・タイムアウトの場合は既定地点を使う。
    地点確定後、逆ジオコーディングでラベルを非同期に取得する。
    """

    def __init__(
        self,
        device_provider: AbstractDevicePositionProvider,
        reverse_geocoder: ReverseGeocoder,
        default_location: GeoPoint,
        positioning_timeout: float = 5.0,
    ) -> None:
        """
        Args:
            device_provider: 端末の位置情報プロバイダー
            reverse_geocoder: 逆ジオコーダー
            default_location: フォールバック地点
            positioning_timeout: 位置取得の最大待ち時間（秒）
        """
        self.device_provider = device_provider
        self.reverse_geocoder = reverse_geocoder
        self.default_location = default_location
        self.positioning_timeout = positioning_timeout

        self._state = ResolverState.IDLE
        self.label_task: Optional["asyncio.Task[ResolvedLocation]"] = None

    @property
    def state(self) -> ResolverState:
        return self._state

    async def acquire(
        self, on_label: Optional[Callable[[ResolvedLocation], None]] = None
    ) -> ResolvedLocation:
        """
        現在地を解決

        返す地点はすぐに利用でき、ラベルは未確定（None）。
        ラベル確定後のインスタンスは on_label に渡され、label_task の結果にもなる。

        Args:
            on_label: ラベル確定時のコールバック

        Returns:
            ResolvedLocation: 解決した地点（source は device または fallback）

        Raises:
            LocationResolverError: 2回以上呼び出した場合
        """
        if self._state is not ResolverState.IDLE:
            raise LocationResolverError("Location has already been acquired")

        self._state = ResolverState.REQUESTING_DEVICE_POSITION
        logger.info("Requesting device position")

        result = await self._request_device_position()

        if result.is_ok:
            resolved = ResolvedLocation(point=result.point, source=LocationSource.DEVICE)
            self._state = ResolverState.RESOLVED_DEVICE
            logger.info(f"Device position acquired: {result.point}")
        else:
            resolved = ResolvedLocation(point=self.default_location, source=LocationSource.FALLBACK)
            self._state = ResolverState.RESOLVED_FALLBACK
            logger.warning(
                f"Device position unavailable ({result.error.value}), "
                f"using default location {self.default_location}"
            )

        self.label_task = asyncio.create_task(self._label(resolved, on_label))

        return resolved

    async def _request_device_position(self) -> PositionResult:
        try:
            result = await asyncio.wait_for(
                self.device_provider.current_position(),
                timeout=self.positioning_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Device position timed out after {self.positioning_timeout}s")
            return PositionResult.err(PositionErrorReason.TIMEOUT)
        except Exception as e:
            logger.error(f"Device position request failed: {e}")
            return PositionResult.err(PositionErrorReason.POSITION_UNAVAILABLE)

        # (0, 0) は有効な現在地として扱わない
        if result.is_ok and result.point.is_sentinel:
            logger.warning("Device returned sentinel position (0, 0)")
            return PositionResult.err(PositionErrorReason.POSITION_UNAVAILABLE)

        return result

    async def _label(
        self,
        resolved: ResolvedLocation,
        on_label: Optional[Callable[[ResolvedLocation], None]],
    ) -> ResolvedLocation:
        label = await asyncio.to_thread(self.reverse_geocoder.label, resolved.point)
        labelled = resolved.with_label(label)

        logger.info(f"Location labelled: {label} ({resolved.source.value})")

        if on_label is not None:
            on_label(labelled)

        return labelled
