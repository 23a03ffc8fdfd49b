"""設定とCLIのテスト"""

import pytest

from member_finder.entrypoint import build_parser, format_state, parse_args
from member_finder.features.geocoding.domain.enums import LocationSource
from member_finder.features.geocoding.domain.models import GeoPoint, ResolvedLocation
from member_finder.features.locator.domain.models import DisplayState
from member_finder.features.locator.orchestrator import LocatorOrchestrator
from member_finder.features.members.domain.models import MemberRecord
from member_finder.features.members.providers.member_directory import HttpMemberDirectory, JsonFileMemberDirectory
from member_finder.infrastructure.config.settings import Settings
from member_finder.shared.exceptions.errors import ConfigurationError


def test_settings_defaults(monkeypatch) -> None:
    """既定値はロンドン中心部・6件"""
    for name in ("DEFAULT_LATITUDE", "DEFAULT_LONGITUDE", "RESULT_LIMIT"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.default_location == GeoPoint(51.509865, -0.118092)
    assert settings.result_limit == 6
    assert settings.nominatim_requests_per_second == 1.0
    assert settings.is_development


def test_settings_from_environment(monkeypatch) -> None:
    """環境変数で上書きできる"""
    monkeypatch.setenv("DEFAULT_LATITUDE", "55.9533")
    monkeypatch.setenv("DEFAULT_LONGITUDE", "-3.1883")
    monkeypatch.setenv("ENVIRONMENT", "production")

    settings = Settings(_env_file=None)

    assert settings.default_location == GeoPoint(55.9533, -3.1883)
    assert settings.is_production


def test_settings_reject_invalid_default_location(monkeypatch) -> None:
    """範囲外の既定地点は設定エラー"""
    monkeypatch.setenv("DEFAULT_LATITUDE", "123")

    with pytest.raises(ValueError):
        Settings(_env_file=None)


def test_parser_options() -> None:
    """CLI引数"""
    args = build_parser().parse_args(["-q", "SW1A 1AA", "--deny-location", "--limit", "3"])

    assert args.query == "SW1A 1AA"
    assert args.deny_location is True
    assert args.limit == 3
    assert args.lat is None
    assert args.env_file == ".env"


def test_parse_args_with_device_position() -> None:
    """--lat と --lon を両方指定"""
    args = parse_args(["--lat", "53.48", "--lon", "-2.24"])

    assert (args.lat, args.lon) == (53.48, -2.24)


@pytest.mark.parametrize("argv", [["--lat", "53.48"], ["--lon", "-2.24"]])
def test_parse_args_rejects_partial_position(argv: list[str], capsys) -> None:
    """片方だけの指定は引数エラー"""
    with pytest.raises(SystemExit) as exc_info:
        parse_args(argv)

    assert exc_info.value.code == 2
    assert "--lat and --lon must be given together" in capsys.readouterr().err


def test_format_state_lists_members() -> None:
    """地点と近いメンバーを番号付きで表示"""
    state = DisplayState(
        location=ResolvedLocation(GeoPoint(51.5, -0.12), LocationSource.FALLBACK, "Westminster"),
        ranked=(
            MemberRecord(member_id="1", trading_name="Smith Scanning", distance_meters=1234.0),
            MemberRecord(member_id="2", full_name="Tom Jones", distance_meters=150000.0),
        ),
    )

    lines = format_state(state).splitlines()

    assert lines[0] == "Your location: Westminster (fallback)"
    assert lines[1] == "Closest members:"
    assert lines[2].startswith(" 1. Smith Scanning")
    assert "1.2 km" in lines[2]
    assert "Tom Jones" in lines[3]
    assert "150.0 km" in lines[3]


def test_format_state_with_search_error() -> None:
    """検索失敗のメッセージと、該当なしの表示"""
    state = DisplayState(
        location=ResolvedLocation(GeoPoint(51.5, -0.12), LocationSource.DEVICE),
        search_error="No such location",
    )

    assert format_state(state).splitlines() == [
        "Your location: locating... (device)",
        "Search failed: No such location",
        "No members found",
    ]


def test_orchestrator_member_source(tmp_path) -> None:
    """ファイル指定があればファイル、なければAPIから取得"""
    settings = Settings(_env_file=None)
    orchestrator = LocatorOrchestrator(settings)

    try:
        assert isinstance(orchestrator.create_member_source(), HttpMemberDirectory)
        assert isinstance(
            orchestrator.create_member_source(str(tmp_path / "members.json")),
            JsonFileMemberDirectory,
        )
    finally:
        orchestrator.close()


def test_orchestrator_requires_member_source() -> None:
    """取得元が設定されていなければ ConfigurationError"""
    orchestrator = LocatorOrchestrator(Settings(_env_file=None, member_directory_url=""))

    try:
        with pytest.raises(ConfigurationError):
            orchestrator.create_member_source()
    finally:
        orchestrator.close()


def test_orchestrator_session_uses_settings() -> None:
    """セッションは設定の既定地点と件数を使う"""
    settings = Settings(_env_file=None, result_limit=2, positioning_timeout_seconds=1.5)
    orchestrator = LocatorOrchestrator(settings)

    try:
        session = orchestrator.create_session()
        assert session.ranker.limit == 2
        assert session.location_resolver.default_location == settings.default_location
        assert session.location_resolver.positioning_timeout == 1.5
    finally:
        orchestrator.close()
