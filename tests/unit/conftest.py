"""共通フィクスチャ"""

from typing import Any, Callable, Optional

import pytest

from member_finder.features.geocoding.domain.models import GeoPoint
from member_finder.features.members.domain.models import MemberRecord, RegionVertex
from member_finder.shared.exceptions.errors import HTTPError


class FakeHTTPClient:
    """URLごとに用意したレスポンスを返すHTTPクライアント"""

    def __init__(self, responses: Optional[dict[str, Any]] = None) -> None:
        self.responses = responses or {}
        self.calls: list[dict[str, Any]] = []

    def get_json(
        self,
        url: str,
        params: Optional[dict[str, Any]] = None,
        raise_for_status: bool = True,
    ) -> Any:
        self.calls.append({"url": url, "params": params, "raise_for_status": raise_for_status})

        if url not in self.responses:
            raise HTTPError(f"Failed to GET {url}: 404 Client Error")

        response = self.responses[url]
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        pass


@pytest.fixture
def fake_http() -> Callable[..., FakeHTTPClient]:
    """FakeHTTPClientのファクトリ"""

    def factory(responses: Optional[dict[str, Any]] = None) -> FakeHTTPClient:
        return FakeHTTPClient(responses)

    return factory


def square_region(latitude: float, longitude: float, half_size: float = 0.05) -> tuple[RegionVertex, ...]:
    return (
        RegionVertex(lat=latitude - half_size, lng=longitude - half_size),
        RegionVertex(lat=latitude + half_size, lng=longitude - half_size),
        RegionVertex(lat=latitude + half_size, lng=longitude + half_size),
        RegionVertex(lat=latitude - half_size, lng=longitude + half_size),
    )


@pytest.fixture
def make_member() -> Callable[..., MemberRecord]:
    """指定地点を中心とする正方形エリアのメンバーを作る"""

    def factory(
        member_id: str,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        region: Optional[tuple[RegionVertex, ...]] = None,
    ) -> MemberRecord:
        if region is None:
            region = square_region(latitude, longitude) if latitude is not None else ()
        return MemberRecord(
            member_id=member_id,
            full_name=f"Member {member_id}",
            trading_name=f"Clinic {member_id}",
            region=region,
        )

    return factory


@pytest.fixture
def london() -> GeoPoint:
    return GeoPoint(latitude=51.5, longitude=-0.12)


@pytest.fixture
def directory_payload() -> dict[str, Any]:
    """メンバー一覧APIのレスポンス例"""
    return {
        "data": [
            {
                "id": "101",
                "email": "vet@example.co.uk",
                "username": "jsmith",
                "avatar_url": "https://example.co.uk/a.png",
                "profile_url": "https://example.co.uk/members/jsmith",
                "custom_fields": {
                    "first_name": "Jane",
                    "last_name": "Smith",
                    "mepr_business_trading_name": "  Smith   Scanning ",
                    "mepr_contact_number": "07700 900123",
                    "mepr-address-city": "London",
                    "mepr-address-state": "",
                    "mepr-address-zip": "SW1A 1AA",
                    "mepr-address-country": "GB",
                    "mepr_polygon_array": [
                        {"lat": 51.5, "lng": -0.2},
                        {"lat": "51.7", "lng": "-0.2"},
                        {"lat": 51.7, "lng": 0.0},
                        {"lat": 51.5, "lng": 0.0},
                    ],
                },
                "subscription": {"status": "active", "product_id": 42},
                "formatted_address": "London, SW1A 1AA",
                "full_name": "Jane Smith",
            },
            {
                "id": "102",
                "custom_fields": {
                    "mepr_business_trading_name": "Lapsed Ltd",
                    "mepr_polygon_array": [{"lat": 53.4, "lng": -2.2}],
                },
                "subscription": {"status": "expired"},
                "full_name": "Lapsed Member",
            },
            {
                "id": "103",
                "custom_fields": {
                    "mepr_business_trading_name": "No Region",
                    "mepr_polygon_array": [],
                },
                "subscription": {"status": "active"},
                "full_name": "No Region",
            },
            {
                "id": "101",
                "custom_fields": {
                    "mepr_business_trading_name": "Duplicate",
                    "mepr_polygon_array": [{"lat": 50.0, "lng": -3.0}],
                },
                "subscription": {"status": "active"},
                "full_name": "Duplicate",
            },
            {
                "id": "104",
                "custom_fields": {
                    "first_name": "Tom",
                    "last_name": "Jones",
                    "mepr_business_trading_name": "Valleys Vets",
                    "mepr_polygon_array": [{"lat": 51.48, "lng": -3.18}],
                },
                "subscription": {"status": "active"},
            },
        ]
    }
