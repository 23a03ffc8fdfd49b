"""メンバー検索セッション"""

import asyncio
from typing import Callable, Iterable, Optional

from ...shared.exceptions.errors import GeocodingError, LocationNotFoundError, MemberDirectoryError
from ...shared.logging.config import get_logger
from ...shared.utils.text import normalize_text
from ..geocoding.domain.enums import LocationSource
from ..geocoding.domain.models import ResolvedLocation
from ..geocoding.services.forward_geocoder import ForwardGeocoder
from ..geocoding.services.location_resolver import LocationResolver
from ..members.domain.models import MemberRecord
from ..members.providers.member_directory import AbstractMemberSource
from ..members.services.proximity_ranker import ProximityRanker
from .domain.enums import SearchStatus
from .domain.models import SEARCH_NOT_FOUND_MESSAGE, DisplayState

logger = get_logger(__name__)

Listener = Callable[[DisplayState], None]


class MemberLocatorSession:
    """
    現在地・検索地点と近いメンバーの表示状態を管理する

    - 起動時の現在地解決と検索は、発行順の世代番号（トークン）を持つ
    - 地点の更新は、表示中の地点より新しい世代の場合のみ反映する
    - ラベルの更新は、表示中の地点と同じ世代の場合のみ反映する
    - 検索は同時に1つだけ実行でき、実行中の検索要求は拒否する
    - close() 後に完了した非同期処理は何もしない
    """

    def __init__(
        self,
        location_resolver: LocationResolver,
        forward_geocoder: ForwardGeocoder,
        ranker: ProximityRanker,
        members: Iterable[MemberRecord] = (),
    ) -> None:
        """
        Args:
            location_resolver: 現在地解決サービス
            forward_geocoder: 検索語のジオコーダー
            ranker: 近接ランキング
            members: 初期のメンバー一覧
        """
        self.location_resolver = location_resolver
        self.forward_geocoder = forward_geocoder
        self.ranker = ranker

        self._members: tuple[MemberRecord, ...] = tuple(members)
        self._location: Optional[ResolvedLocation] = None
        self._ranked: tuple[MemberRecord, ...] = ()
        self._searching = False
        self._search_error: Optional[str] = None

        # 世代番号
        self._issued_generation = 0
        self._applied_generation = 0

        self._listeners: list[Listener] = []
        self._closed = False

    @property
    def state(self) -> DisplayState:
        """現在の表示状態"""
        return DisplayState(
            location=self._location,
            ranked=self._ranked,
            searching=self._searching,
            search_error=self._search_error,
            generation=self._applied_generation,
        )

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def members(self) -> tuple[MemberRecord, ...]:
        return self._members

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        状態変更の通知先を登録

        Returns:
            登録解除用の関数
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def start(self) -> Optional[ResolvedLocation]:
        """
        起動時の現在地解決を実行

        地点はすぐにランキングへ反映し、ラベルは逆ジオコーディング完了後に反映する。

        Returns:
            Optional[ResolvedLocation]: 解決した地点（終了済み・より新しい検索で上書き済みの場合はNone）
        """
        if self._closed:
            return None

        token = self._next_generation()

        location = await self.location_resolver.acquire(
            on_label=lambda labelled: self._apply_label(token, labelled)
        )

        if not self._apply_location(token, location):
            return None

        return location

    async def wait_for_label(self) -> None:
        """起動時のラベル取得が完了するまで待つ（CLI用）"""
        task = self.location_resolver.label_task
        if task is not None and not task.done():
            await asyncio.wait({task})

    async def search(self, query: str) -> SearchStatus:
        """
        検索語の地点を基準にランキングを更新

        失敗した場合は直前の地点とランキングを保ち、search_error を設定する。

        Args:
            query: 郵便番号または地名・住所

        Returns:
            SearchStatus: 検索の結果
        """
        if self._closed:
            return SearchStatus.CLOSED

        normalized = normalize_text(query)
        if not normalized:
            return SearchStatus.EMPTY_QUERY

        if self._searching:
            logger.warning(f"Search rejected while another search is running: {normalized}")
            return SearchStatus.BUSY

        token = self._next_generation()
        self._searching = True
        self._search_error = None
        self._emit()

        try:
            point = await asyncio.to_thread(self.forward_geocoder.resolve, normalized)

        except GeocodingError as e:
            if self._closed:
                return SearchStatus.CLOSED

            if isinstance(e, LocationNotFoundError):
                logger.info(f"Location not found: {normalized}")
            else:
                logger.error(f"Search failed for {normalized}: {e}")

            self._searching = False
            self._search_error = SEARCH_NOT_FOUND_MESSAGE
            self._emit()
            return SearchStatus.NOT_FOUND

        finally:
            self._searching = False

        if self._closed:
            return SearchStatus.CLOSED

        # ラベルは入力された検索語をそのまま使う（ジオコーディングには正規化後の値を使う）
        location = ResolvedLocation(point=point, source=LocationSource.SEARCH, label=query.strip())
        self._apply_location(token, location)

        return SearchStatus.RESOLVED

    def set_members(self, members: Iterable[MemberRecord]) -> None:
        """メンバー一覧を差し替えてランキングを再計算"""
        if self._closed:
            return

        self._members = tuple(members)
        self._rerank()
        self._emit()

    async def load_members(self, source: AbstractMemberSource) -> bool:
        """
        メンバー一覧を取得して差し替える

        取得に失敗した場合は現在の一覧を保つ。

        Returns:
            bool: 差し替えた場合True
        """
        try:
            members = await asyncio.to_thread(source.fetch_members)
        except MemberDirectoryError as e:
            logger.error(f"Failed to load members: {e}")
            return False

        if self._closed:
            return False

        logger.info(f"Loaded {len(members)} members")
        self.set_members(members)
        return True

    def close(self) -> None:
        """表示側の終了。以降に完了した処理は状態を変更しない"""
        if self._closed:
            return

        self._closed = True
        self._listeners.clear()

        task = self.location_resolver.label_task
        if task is not None and not task.done():
            task.cancel()

        logger.info("MemberLocatorSession closed")

    def _next_generation(self) -> int:
        self._issued_generation += 1
        return self._issued_generation

    def _apply_location(self, token: int, location: ResolvedLocation) -> bool:
        if self._closed:
            return False

        if token <= self._applied_generation:
            logger.info(
                f"Discarding superseded {location.source.value} location "
                f"(generation {token} <= {self._applied_generation})"
            )
            return False

        self._applied_generation = token
        self._location = location
        self._rerank()
        self._emit()
        return True

    def _apply_label(self, token: int, labelled: ResolvedLocation) -> None:
        if self._closed:
            return

        if token != self._applied_generation:
            logger.debug(f"Discarding stale label {labelled.label!r} (generation {token})")
            return

        # ラベルのみの更新ではランキングを再計算しない
        self._location = labelled
        self._emit()

    def _rerank(self) -> None:
        if self._location is None:
            self._ranked = ()
            return

        self._ranked = self.ranker.rank(self._location.point, self._members)

    def _emit(self) -> None:
        state = self.state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                logger.error(f"Display listener failed: {e}", exc_info=True)
