"""メンバーディレクトリのテスト"""

import asyncio
import json

import pytest

from member_finder.features.geocoding.domain.models import GeoPoint
from member_finder.features.geocoding.providers.device_position import StaticDevicePosition
from member_finder.features.geocoding.services.location_resolver import LocationResolver
from member_finder.features.locator.session import MemberLocatorSession
from member_finder.features.members.domain.models import RegionVertex
from member_finder.features.members.parsers.member_parser import MemberParser
from member_finder.features.members.providers.member_directory import (
    HttpMemberDirectory,
    JsonFileMemberDirectory,
)
from member_finder.features.members.services.proximity_ranker import ProximityRanker
from member_finder.shared.exceptions.errors import HTTPError, MemberDirectoryError, ParsingError

DIRECTORY_URL = "https://www.animalultrasoundassociation.org/wp-json/aua/v1/members"


def test_parse_many_keeps_active_members_with_regions(directory_payload) -> None:
    """active かつエリアありのみ。IDの重複は先勝ち"""
    members = MemberParser().parse_many(directory_payload["data"])

    assert [member.member_id for member in members] == ["101", "104"]


def test_parse_member_fields(directory_payload) -> None:
    """表示用フィールドとエリアを取り出す"""
    member = MemberParser().parse(directory_payload["data"][0])

    assert member is not None
    assert member.trading_name == "Smith Scanning"
    assert member.full_name == "Jane Smith"
    assert member.contact_number == "07700 900123"
    assert member.postcode == "SW1A 1AA"
    assert member.state is None
    assert member.product_id == "42"
    assert member.subscription_status == "active"
    assert member.region[1] == RegionVertex(lat=51.7, lng=-0.2)
    assert len(member.region) == 4
    assert member.distance_meters is None


def test_full_name_falls_back_to_first_and_last_name(directory_payload) -> None:
    """full_name がなければ姓名から作る"""
    member = MemberParser().parse(directory_payload["data"][4])

    assert member is not None
    assert member.full_name == "Tom Jones"
    assert member.display_name == "Valleys Vets"


def test_parse_region_keeps_missing_coordinates() -> None:
    """欠けた座標はNoneとして保持する"""
    region = MemberParser().parse_region([{"lat": "", "lng": -1.0}, "junk", {"lat": 52.0, "lng": "x"}])

    assert region == (
        RegionVertex(lat=None, lng=-1.0),
        RegionVertex(lat=None, lng=None),
        RegionVertex(lat=52.0, lng=None),
    )


def test_parse_rejects_non_object_record() -> None:
    """オブジェクト以外のレコードは ParsingError"""
    with pytest.raises(ParsingError):
        MemberParser().parse(["not", "a", "record"])


def test_parse_many_skips_malformed_records(directory_payload) -> None:
    """壊れたレコードは読み飛ばす"""
    records = ["garbage", {"id": ""}] + directory_payload["data"]

    members = MemberParser().parse_many(records)

    assert [member.member_id for member in members] == ["101", "104"]


def test_http_directory(fake_http, directory_payload) -> None:
    """APIレスポンスの data 配列を読む"""
    http_client = fake_http({DIRECTORY_URL: directory_payload})

    members = HttpMemberDirectory(DIRECTORY_URL, http_client=http_client).fetch_members()

    assert len(members) == 2


def test_http_directory_failure(fake_http) -> None:
    """通信失敗は MemberDirectoryError"""
    http_client = fake_http({DIRECTORY_URL: HTTPError("503 Service Unavailable")})

    with pytest.raises(MemberDirectoryError):
        HttpMemberDirectory(DIRECTORY_URL, http_client=http_client).fetch_members()


def test_http_directory_without_data_array(fake_http) -> None:
    """data 配列がなければ MemberDirectoryError"""
    http_client = fake_http({DIRECTORY_URL: {"message": "rest_no_route"}})

    with pytest.raises(MemberDirectoryError):
        HttpMemberDirectory(DIRECTORY_URL, http_client=http_client).fetch_members()


def test_json_file_directory(tmp_path, directory_payload) -> None:
    """APIと同じ形式のファイルから読む"""
    path = tmp_path / "members.json"
    path.write_text(json.dumps(directory_payload), encoding="utf-8")

    members = JsonFileMemberDirectory(path).fetch_members()

    assert [member.member_id for member in members] == ["101", "104"]


def test_json_file_directory_missing_file(tmp_path) -> None:
    """ファイルがなければ MemberDirectoryError"""
    with pytest.raises(MemberDirectoryError):
        JsonFileMemberDirectory(tmp_path / "missing.json").fetch_members()


def test_parse_many_accepts_numeric_fields(directory_payload) -> None:
    """数値のフィールドは文字列として扱い、他のレコードも読み込む"""
    numeric_contact = {
        "id": 7,
        "custom_fields": {
            "mepr_business_trading_name": "Numbers Vets",
            "mepr_contact_number": 7700900123,
            "mepr-address-zip": 12345,
            "mepr_polygon_array": [{"lat": 53.4, "lng": -2.2}],
        },
        "subscription": {"status": "active"},
    }
    numeric_status = {
        "id": 8,
        "custom_fields": {"mepr_polygon_array": [{"lat": 52.0, "lng": -1.0}]},
        "subscription": {"status": 1},
    }
    nested_email = {
        "id": 9,
        "email": {"address": "vet@example.co.uk"},
        "custom_fields": {"mepr_polygon_array": [{"lat": 52.0, "lng": -1.0}]},
        "subscription": {"status": "active"},
    }
    records = [directory_payload["data"][0], numeric_contact, numeric_status, nested_email]

    members = MemberParser().parse_many(records)

    assert [member.member_id for member in members] == ["101", "7"]
    assert members[1].contact_number == "7700900123"
    assert members[1].postcode == "12345"


def test_load_members_from_file_with_numeric_fields(tmp_path, directory_payload) -> None:
    """数値フィールドを含むファイルでもセッションに読み込める"""
    directory_payload["data"].append(
        {
            "id": 7,
            "custom_fields": {
                "mepr_contact_number": 7700900123,
                "mepr_polygon_array": [{"lat": 53.4, "lng": -2.2}],
            },
            "subscription": {"status": "active"},
        }
    )
    path = tmp_path / "members.json"
    path.write_text(json.dumps(directory_payload), encoding="utf-8")

    session = MemberLocatorSession(
        location_resolver=LocationResolver(
            device_provider=StaticDevicePosition(denied=True),
            reverse_geocoder=None,
            default_location=GeoPoint(51.509865, -0.118092),
        ),
        forward_geocoder=None,
        ranker=ProximityRanker(),
    )

    loaded = asyncio.run(session.load_members(JsonFileMemberDirectory(path)))

    assert loaded is True
    assert [member.member_id for member in session.members] == ["101", "104", "7"]


def test_unexpected_parser_failure_is_directory_error(directory_payload) -> None:
    """パーサーの想定外の例外も MemberDirectoryError"""

    class BrokenParser(MemberParser):
        def parse_many(self, records):
            raise TypeError("unexpected record shape")

    source = JsonFileMemberDirectory("unused.json", parser=BrokenParser())
    source.fetch_payload = lambda: directory_payload

    with pytest.raises(MemberDirectoryError):
        source.fetch_members()
