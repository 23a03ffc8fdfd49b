"""メンバー検索オーケストレーター"""

from typing import Optional

from ...infrastructure.config.settings import Settings
from ...shared.exceptions.errors import ConfigurationError
from ...shared.http.client import HTTPClient
from ...shared.http.rate_limiter import RateLimiter
from ...shared.logging.config import get_logger
from ..geocoding.providers.device_position import AbstractDevicePositionProvider, StaticDevicePosition
from ..geocoding.providers.nominatim_geocoder import NominatimGeocoder
from ..geocoding.providers.postcodes_io_geocoder import PostcodesIoGeocoder
from ..geocoding.services.forward_geocoder import ForwardGeocoder
from ..geocoding.services.location_resolver import LocationResolver
from ..geocoding.services.reverse_geocoder import ReverseGeocoder
from ..members.providers.member_directory import (
    AbstractMemberSource,
    HttpMemberDirectory,
    JsonFileMemberDirectory,
)
from ..members.services.proximity_ranker import ProximityRanker
from .session import MemberLocatorSession

logger = get_logger(__name__)


class LocatorOrchestrator:
    """
    メンバー検索オーケストレーター

    各Featureを統合し、依存性注入を行う
    """

    def __init__(self, settings: Settings) -> None:
        """
        Args:
            settings: アプリケーション設定
        """
        self.settings = settings

        # HTTPクライアントを初期化（全プロバイダーで共有）
        self.http_client = HTTPClient(
            timeout=settings.http_timeout,
            max_retries=settings.http_retry,
            user_agent=settings.user_agent,
        )

        # ジオコーダーを初期化（Nominatimは検索・逆ジオコーディングで同じレート制限を共有）
        self.postcode_geocoder = PostcodesIoGeocoder(
            http_client=self.http_client,
            base_url=settings.postcode_api_base_url,
        )
        self.nominatim_geocoder = NominatimGeocoder(
            http_client=self.http_client,
            base_url=settings.nominatim_base_url,
            rate_limiter=RateLimiter(requests_per_second=settings.nominatim_requests_per_second),
        )

        self.forward_geocoder = ForwardGeocoder(self.postcode_geocoder, self.nominatim_geocoder)
        self.reverse_geocoder = ReverseGeocoder(self.nominatim_geocoder)

        logger.info("LocatorOrchestrator initialized")

    def create_session(
        self, device_provider: Optional[AbstractDevicePositionProvider] = None
    ) -> MemberLocatorSession:
        """
        メンバー検索セッションを作成

        Args:
            device_provider: 端末の位置情報プロバイダー（Noneの場合は位置取得機能なし）

        Returns:
            MemberLocatorSession: 新しいセッション
        """
        resolver = LocationResolver(
            device_provider=device_provider or StaticDevicePosition(),
            reverse_geocoder=self.reverse_geocoder,
            default_location=self.settings.default_location,
            positioning_timeout=self.settings.positioning_timeout_seconds,
        )

        return MemberLocatorSession(
            location_resolver=resolver,
            forward_geocoder=self.forward_geocoder,
            ranker=ProximityRanker(limit=self.settings.result_limit),
        )

    def create_member_source(self, member_file: Optional[str] = None) -> AbstractMemberSource:
        """
        メンバー一覧の取得元を作成（ファイル指定があればファイル、なければAPI）

        Raises:
            ConfigurationError: ファイルもAPIのURLも設定されていない場合
        """
        path = member_file or self.settings.member_file
        if path:
            logger.info(f"Using member file: {path}")
            return JsonFileMemberDirectory(path)

        if not self.settings.member_directory_url:
            raise ConfigurationError("Either member_file or member_directory_url must be set")

        return HttpMemberDirectory(self.settings.member_directory_url, http_client=self.http_client)

    def close(self) -> None:
        """リソースをクリーンアップ"""
        self.http_client.close()
        logger.info("LocatorOrchestrator closed")
