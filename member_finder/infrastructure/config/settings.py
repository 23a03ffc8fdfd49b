"""アプリケーション設定（Pydantic Settings）"""
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ...features.geocoding.domain.models import GeoPoint


class Settings(BaseSettings):
    """アプリケーション設定"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Project
    project_name: str = Field(
        default="member-finder",
        description="プロジェクト名",
    )
    environment: str = Field(
        default="development",
        description="環境 (development, staging, production)",
    )

    # Location
    default_latitude: float = Field(
        default=51.509865,
        ge=-90,
        le=90,
        description="現在地が取得できない場合のフォールバック緯度（ロンドン中心部）",
    )
    default_longitude: float = Field(
        default=-0.118092,
        ge=-180,
        le=180,
        description="現在地が取得できない場合のフォールバック経度（ロンドン中心部）",
    )
    positioning_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="端末の位置取得を待つ最大時間（秒）。超過時はフォールバック",
    )

    # Ranking
    result_limit: int = Field(
        default=6,
        ge=0,
        description="近いメンバーとして表示する最大件数",
    )

    # HTTP
    http_timeout: float = Field(
        default=10.0,
        description="HTTPリクエストのタイムアウト（秒）",
    )
    http_retry: int = Field(
        default=3,
        description="HTTPリクエストのリトライ回数",
    )
    user_agent: str = Field(
        default="member-finder/1.0 (+https://www.animalultrasoundassociation.org)",
        description="User-Agent（Nominatimの利用規約上、アプリを識別できる値が必要）",
    )

    # Geocoding providers
    postcode_api_base_url: str = Field(
        default="https://api.postcodes.io",
        description="郵便番号検索APIのベースURL",
    )
    nominatim_base_url: str = Field(
        default="https://nominatim.openstreetmap.org",
        description="Nominatim（フリーテキスト検索・逆ジオコーディング）のベースURL",
    )
    nominatim_requests_per_second: float = Field(
        default=1.0,
        gt=0,
        description="Nominatimへの最大リクエスト数（リクエスト/秒）",
    )

    # Member directory
    member_directory_url: str = Field(
        default="https://www.animalultrasoundassociation.org/wp-json/aua/v1/members",
        description="メンバー一覧APIのURL",
    )
    member_file: Optional[str] = Field(
        default=None,
        description="メンバー一覧JSONファイルのパス（設定時はAPIの代わりに使用）",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="ログレベル (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # HTTP server
    port: int = Field(
        default=8080,
        description="HTTPサーバーのポート番号",
    )

    @property
    def default_location(self) -> GeoPoint:
        """フォールバック地点"""
        return GeoPoint(latitude=self.default_latitude, longitude=self.default_longitude)

    @property
    def is_production(self) -> bool:
        """本番環境かどうか"""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """開発環境かどうか"""
        return self.environment.lower() == "development"
