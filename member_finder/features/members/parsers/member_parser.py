"""メンバーディレクトリのパーサー"""

from typing import Any, Iterable, Optional

from ....shared.exceptions.errors import ParsingError
from ....shared.logging.config import get_logger
from ....shared.utils.text import normalize_text, parse_float
from ..domain.models import MemberRecord, Region, RegionVertex

logger = get_logger(__name__)

ACTIVE_STATUS = "active"


class MemberParser:
    """
    メンバーディレクトリのJSONデータをMemberRecordに変換します。

    ランキング対象になるのは、会員ステータスが active で
    サービス提供エリア（mepr_polygon_array）を持つメンバーのみ。
    """

    def parse(self, data: dict[str, Any]) -> Optional[MemberRecord]:
        """
        JSONデータからメンバー情報を抽出

        Args:
            data: メンバー情報の辞書（APIレスポンスの1レコード）

        Returns:
            Optional[MemberRecord]: メンバー（対象外・IDなしの場合はNone）

        Raises:
            ParsingError: レコードの形式が不正な場合
        """
        if not isinstance(data, dict):
            raise ParsingError(f"Member record must be an object: {type(data).__name__}")

        member_id = str(data.get("id") or "").strip()
        if not member_id:
            logger.warning("Member ID not found in data")
            return None

        custom_fields = data.get("custom_fields") or {}
        subscription = data.get("subscription") or {}
        if not isinstance(custom_fields, dict) or not isinstance(subscription, dict):
            raise ParsingError(f"Malformed member record: {member_id}")

        status = self._text(subscription.get("status"))
        if status != ACTIVE_STATUS:
            logger.debug(f"Skipping member {member_id}: subscription status {status}")
            return None

        region = self.parse_region(custom_fields.get("mepr_polygon_array"))
        if not region:
            logger.debug(f"Skipping member {member_id}: no service region")
            return None

        full_name = self._text(data.get("full_name"))
        if not full_name:
            first = self._text(custom_fields.get("first_name")) or ""
            last = self._text(custom_fields.get("last_name")) or ""
            full_name = f"{first} {last}".strip()

        product_id = subscription.get("product_id")

        return MemberRecord(
            member_id=member_id,
            full_name=full_name,
            trading_name=self._text(custom_fields.get("mepr_business_trading_name")) or "",
            email=self._text(data.get("email")),
            username=self._text(data.get("username")),
            contact_number=self._text(custom_fields.get("mepr_contact_number")),
            formatted_address=self._text(data.get("formatted_address")),
            profile_url=self._text(data.get("profile_url")),
            avatar_url=self._text(data.get("avatar_url")),
            city=self._text(custom_fields.get("mepr-address-city")),
            state=self._text(custom_fields.get("mepr-address-state")),
            postcode=self._text(custom_fields.get("mepr-address-zip")),
            country=self._text(custom_fields.get("mepr-address-country")),
            subscription_status=status,
            product_id=str(product_id) if product_id is not None else None,
            region=region,
        )

    def _text(self, value: Any) -> Optional[str]:
        """
        文字列フィールドを正規化

        電話番号などは数値で返ることがあるため、数値は文字列にしてから扱う。

        Raises:
            ParsingError: 文字列・数値以外の値の場合
        """
        if value is None:
            return None

        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise ParsingError(f"Expected text but got {type(value).__name__}: {value!r}")

        return normalize_text(str(value))

    def parse_region(self, polygon: Any) -> Region:
        """
        mepr_polygon_array（[{lat, lng}, ...]）を頂点の並びに変換

        欠けた座標はNoneのまま保持し、重心計算側で無効として扱う。
        """
        if not isinstance(polygon, list):
            return ()

        vertices = []
        for point in polygon:
            if not isinstance(point, dict):
                vertices.append(RegionVertex(lat=None, lng=None))
                continue
            vertices.append(
                RegionVertex(lat=parse_float(point.get("lat")), lng=parse_float(point.get("lng")))
            )

        return tuple(vertices)

    def parse_many(self, records: Iterable[Any]) -> list[MemberRecord]:
        """
        複数のレコードを変換（対象外を除外し、IDの重複は先勝ち）

        Args:
            records: APIレスポンスの data 配列

        Returns:
            list[MemberRecord]: 元の順序を保ったメンバーのリスト
        """
        members: list[MemberRecord] = []
        seen_ids: set[str] = set()
        skipped = 0

        for record in records:
            try:
                member = self.parse(record)
            except ParsingError as e:
                logger.warning(f"Failed to parse member record: {e}")
                skipped += 1
                continue

            if member is None:
                skipped += 1
                continue

            if member.member_id in seen_ids:
                logger.debug(f"Duplicate member ignored: {member.member_id}")
                skipped += 1
                continue

            seen_ids.add(member.member_id)
            members.append(member)

        logger.info(f"Parsed {len(members)} members ({skipped} skipped)")

        return members
