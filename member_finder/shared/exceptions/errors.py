"""カスタム例外定義"""


class MemberFinderError(Exception):
    """メンバー検索アプリケーションの基底例外"""

    pass


class HTTPError(MemberFinderError):
    """HTTP関連のエラー"""

    pass


class ParsingError(MemberFinderError):
    """レスポンス解析エラー"""

    pass


class GeocodingError(MemberFinderError):
    """ジオコーディングエラー"""

    pass


class LocationNotFoundError(GeocodingError):
    """検索語に一致する地点が存在しない"""

    pass


class GeocodingProviderError(GeocodingError):
    """ジオコーディングプロバイダーの通信・解析エラー"""

    pass


class LocationResolverError(MemberFinderError):
    """現在地解決のエラー"""

    pass


class MemberDirectoryError(MemberFinderError):
    """メンバー一覧取得のエラー"""

    pass


class ConfigurationError(MemberFinderError):
    """設定エラー"""

    pass


class ValidationError(MemberFinderError):
    """バリデーションエラー"""

    pass
