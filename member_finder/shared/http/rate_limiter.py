"""レート制限ユーティリティ"""

import threading
import time
from typing import Optional

from ..logging.config import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """
    レート制限を実装するクラス

    Nominatimの利用規約（最大1リクエスト/秒）を守るため、
    同一プロバイダーへのリクエスト間に最小間隔を設ける。
    リクエストはワーカースレッドから発行されるためロックで保護する。
    """

    def __init__(
        self,
        min_interval: float = 1.0,
        requests_per_second: Optional[float] = None,
    ):
        """
        Args:
            min_interval: リクエスト間の最小間隔（秒）
            requests_per_second: 秒あたりの最大リクエスト数（設定時はmin_intervalを上書き）
        """
        if requests_per_second:
            self.min_interval = 1.0 / requests_per_second
        else:
            self.min_interval = min_interval

        self.last_request_time: Optional[float] = None
        self._lock = threading.Lock()

        logger.debug(f"RateLimiter initialized: min_interval={self.min_interval:.2f}s")

    def wait(self) -> None:
        """
        必要な時間だけスリープ

        前回のリクエストからの経過時間を考慮し、
        最小間隔に満たない分だけ待機する
        """
        with self._lock:
            current_time = time.monotonic()

            if self.last_request_time is not None:
                elapsed = current_time - self.last_request_time

                if elapsed < self.min_interval:
                    sleep_duration = self.min_interval - elapsed
                    logger.debug(f"Rate limiting: sleeping for {sleep_duration:.2f}s")
                    time.sleep(sleep_duration)

            self.last_request_time = time.monotonic()

    def reset(self) -> None:
        """レート制限をリセット"""
        with self._lock:
            self.last_request_time = None
        logger.debug("RateLimiter reset")
