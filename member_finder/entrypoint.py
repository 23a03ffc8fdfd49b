"""CLIエントリーポイント"""
import argparse
import asyncio
import sys
from typing import Optional

from .features.geocoding.domain.models import GeoPoint
from .features.geocoding.providers.device_position import StaticDevicePosition
from .features.locator.domain.enums import SearchStatus
from .features.locator.domain.models import DisplayState
from .features.locator.orchestrator import LocatorOrchestrator
from .infrastructure.config.settings import Settings
from .shared.logging.config import get_logger, setup_logging
from .shared.utils.text import truncate_text

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="近くのメンバーを検索するツール")

    parser.add_argument(
        "--query",
        "-q",
        type=str,
        help="郵便番号または地名（例: 'SW1A 1AA', 'Manchester'）",
    )

    parser.add_argument("--lat", type=float, help="端末の現在地（緯度）")
    parser.add_argument("--lon", type=float, help="端末の現在地（経度）")

    parser.add_argument(
        "--deny-location",
        action="store_true",
        help="位置情報の利用を拒否した状態で実行（既定地点を使用）",
    )

    parser.add_argument(
        "--member-file",
        type=str,
        help="メンバー一覧JSONファイルのパス（指定がなければAPIから取得）",
    )

    parser.add_argument("--limit", type=int, help="表示する最大件数")

    parser.add_argument(
        "--env-file",
        type=str,
        default=".env",
        help="環境変数ファイルのパス（デフォルト: .env）",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="ログレベル",
    )

    return parser


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """引数を解析し、組み合わせを検証"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if (args.lat is None) != (args.lon is None):
        parser.error("--lat and --lon must be given together")

    return args


def format_state(state: DisplayState) -> str:
    """表示状態を表形式の文字列にする"""
    lines = []

    if state.location is not None:
        label = state.location.label or "locating..."
        lines.append(f"Your location: {label} ({state.location.source.value})")

    if state.search_error:
        lines.append(f"Search failed: {state.search_error}")

    if not state.ranked:
        lines.append("No members found")
        return "\n".join(lines)

    lines.append("Closest members:")
    for index, member in enumerate(state.ranked, start=1):
        distance_km = (member.distance_meters or 0.0) / 1000
        lines.append(
            f"{index:>2}. {truncate_text(member.display_name, 40):<40} "
            f"{distance_km:>8.1f} km  {member.formatted_address or ''}"
        )

    return "\n".join(lines)


async def run(settings: Settings, args: argparse.Namespace) -> int:
    """
    現在地解決 → メンバー取得 → （任意）検索 → 結果表示

    Returns:
        int: 終了コード
    """
    device_point: Optional[GeoPoint] = None
    if args.lat is not None and args.lon is not None:
        device_point = GeoPoint(latitude=args.lat, longitude=args.lon)

    orchestrator = LocatorOrchestrator(settings)
    session = orchestrator.create_session(
        StaticDevicePosition(point=device_point, denied=args.deny_location)
    )

    try:
        await session.load_members(orchestrator.create_member_source(args.member_file))
        await session.start()

        exit_code = 0
        if args.query:
            status = await session.search(args.query)
            logger.info(f"Search finished: {status.value}")
            if status is not SearchStatus.RESOLVED:
                exit_code = 1
        else:
            await session.wait_for_label()

        print(format_state(session.state))
        return exit_code

    finally:
        session.close()
        orchestrator.close()


def main() -> int:
    """
    メインエントリーポイント

    Returns:
        int: 終了コード（0: 成功, 1: 失敗）
    """
    args = parse_args()

    try:
        # 設定を読み込み
        settings = Settings(_env_file=args.env_file)

        # ログレベルを上書き
        if args.log_level:
            settings.log_level = args.log_level
        if args.limit is not None:
            settings.result_limit = args.limit

        setup_logging(level=settings.log_level)

        logger.info("Starting member finder")
        logger.info(f"Environment: {settings.environment}")

        return asyncio.run(run(settings, args))

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130  # SIGINT
    except Exception as e:
        logger.error(f"Application failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
