from __future__ import annotations

import hashlib
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from threading import Lock
from time import monotonic
from typing import Optional

from bakery_admin.core.bakery_api import BakeryAPIClient, unwrap_list
from bakery_admin.core.errors import (
    MISSING_TOKEN_MESSAGE,
    BakeryRequestError,
    normalize_api_error,
)
from bakery_admin.domain.category_ordering import (
    Category,
    ParentFilter,
    ReorderResult,
    apply_move,
    build_sort_payload,
    sort_categories,
    view,
)

logger = logging.getLogger(__name__)

CATEGORIES_PATH = "/api/categories"
CATEGORIES_SORT_PATH = "/api/categories/sort"
LOAD_QUERY = {"sortBy": "id", "order": "ASC"}

DEFAULT_SAVE_BANNER_SECONDS = 5
DEFAULT_AUTH_WARNING_SECONDS = 5
DEFAULT_SESSION_TTL_SECONDS = 1800


@dataclass
class CategoryReorderSession:
    session_key: str
    categories: list[Category] = field(default_factory=list)
    parent_filter: ParentFilter = field(default_factory=ParentFilter)
    loaded: bool = False
    is_dirty: bool = False
    revision: int = 0
    error: Optional[str] = None
    save_error: Optional[str] = None
    save_succeeded_at: Optional[float] = None
    auth_warning_at: Optional[float] = None
    last_access: float = 0.0


class CategoryReorderService:
    def __init__(
        self,
        *,
        save_banner_seconds: int = DEFAULT_SAVE_BANNER_SECONDS,
        auth_warning_seconds: int = DEFAULT_AUTH_WARNING_SECONDS,
        clock: Callable[[], float] = monotonic,
    ):
        self.save_banner_seconds = save_banner_seconds
        self.auth_warning_seconds = auth_warning_seconds
        self.clock = clock

    async def load(self, session: CategoryReorderSession, client: BakeryAPIClient) -> None:
        session.error = None
        try:
            payload = await client.api_get(CATEGORIES_PATH, params=LOAD_QUERY)
        except Exception as exc:
            error = normalize_api_error(exc)
            logger.warning("獲取分類錯誤: %s", error.message)
            session.error = error.message
            if error.auth_required:
                session.auth_warning_at = self.clock()
            return

        categories = [Category.from_api(item) for item in unwrap_list(payload, "data")]
        session.categories = sort_categories(categories)
        session.loaded = True
        session.is_dirty = False
        logger.info("loaded %s categories for reordering", len(categories))

    def set_filter(self, session: CategoryReorderSession, parent_filter: ParentFilter) -> None:
        session.parent_filter = parent_filter

    def move(
        self, session: CategoryReorderSession, active_id: int, over_id: int
    ) -> Optional[ReorderResult]:
        if not session.loaded or session.error:
            raise BakeryRequestError("分類資料尚未載入", status_code=409)

        result = apply_move(session.categories, session.parent_filter, active_id, over_id)
        if result is None:
            return None

        session.categories = result.categories
        session.is_dirty = True
        session.revision += 1
        logger.info(
            "category %s moved to sort %s (renumbered=%s, scope=%r)",
            result.moved_id,
            result.new_sort,
            result.renumbered,
            session.parent_filter.to_query_value() or "all",
        )
        return result

    def build_sort_payload(self, session: CategoryReorderSession) -> dict:
        return {"sortData": build_sort_payload(session.categories)}

    async def save(self, session: CategoryReorderSession, client: BakeryAPIClient) -> bool:
        session.save_error = None
        session.save_succeeded_at = None
        if not client.access_token:
            session.save_error = MISSING_TOKEN_MESSAGE
            return False

        payload = self.build_sort_payload(session)
        revision = session.revision
        try:
            await client.api_put(CATEGORIES_SORT_PATH, payload)
        except Exception as exc:
            error = normalize_api_error(exc)
            logger.warning("保存排序錯誤: %s", error.message)
            session.save_error = error.message
            if error.auth_required:
                session.auth_warning_at = self.clock()
            return False

        # moves made while the request was in flight are still unsaved
        if session.revision == revision:
            session.is_dirty = False
        session.save_succeeded_at = self.clock()
        logger.info("saved sort order for %s categories", len(payload["sortData"]))
        return True

    def _within(self, started_at: Optional[float], seconds: int) -> bool:
        if started_at is None:
            return False
        return self.clock() - started_at < seconds

    def snapshot(self, session: CategoryReorderSession) -> dict:
        visible = [] if session.error else view(session.categories, session.parent_filter)
        return {
            "categories": [c.to_dict() for c in visible],
            "parent_filter": session.parent_filter.to_query_value(),
            "parent_options": [
                {"id": c.id, "name": c.name} for c in session.categories if c.level == 1
            ],
            "total": len(session.categories),
            "is_dirty": session.is_dirty,
            "error": session.error,
            "save_error": session.save_error,
            "save_success": self._within(session.save_succeeded_at, self.save_banner_seconds),
            "auth_warning": self._within(session.auth_warning_at, self.auth_warning_seconds),
        }


class ReorderSessionStore:
    """In-memory reorder sessions keyed by access token.

    A different token maps to a different session, which starts unloaded.
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS,
        clock: Callable[[], float] = monotonic,
    ) -> None:
        self._lock = Lock()
        self._sessions: dict[str, CategoryReorderSession] = {}
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    @staticmethod
    def _key(access_token: str) -> str:
        return hashlib.sha256(access_token.encode("utf-8")).hexdigest()

    def get_or_create(self, access_token: str) -> CategoryReorderSession:
        key = self._key(access_token)
        now = self.clock()
        with self._lock:
            self._evict_expired(now)
            session = self._sessions.get(key)
            if session is None:
                session = CategoryReorderSession(session_key=key)
                self._sessions[key] = session
            session.last_access = now
            return session

    def discard(self, access_token: str) -> None:
        with self._lock:
            self._sessions.pop(self._key(access_token), None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _evict_expired(self, now: float) -> None:
        stale_keys = [
            key
            for key, session in self._sessions.items()
            if now - session.last_access > self.ttl_seconds
        ]
        for key in stale_keys:
            self._sessions.pop(key, None)
