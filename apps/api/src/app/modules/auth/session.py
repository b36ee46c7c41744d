"""
Live Session Context

Keeps the signed-in identity, the caller's user document and their school
document current for one client connection.

Subscriptions are chained: the user document is watched first, and the
school subscription follows whatever ``school_id`` the user document holds.
When that id changes the old school subscription is dropped and a new one
is opened. Every change produces a fresh snapshot on ``updates()``.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

from app.core.auth import CurrentUser
from app.core.database import async_session_maker
from app.core.events import DocumentEventBus
from app.modules.schools.repository import SchoolRepository
from app.modules.schools.schemas import SchoolResponse
from app.modules.users.repository import UserRepository
from app.modules.users.schemas import MemberResponse

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"
SCHOOLS_COLLECTION = "schools"

DocumentLoader = Callable[[str], Awaitable[dict[str, Any] | None]]


async def load_user_document(user_id: str) -> dict[str, Any] | None:
    async with async_session_maker() as db:
        user = await UserRepository.get_by_id(db, user_id)
        if user is None:
            return None
        return MemberResponse.model_validate(user).model_dump(mode="json")


async def load_school_document(school_id: str) -> dict[str, Any] | None:
    async with async_session_maker() as db:
        school = await SchoolRepository.get_by_id(db, school_id)
        if school is None:
            return None
        return SchoolResponse.model_validate(school).model_dump(mode="json")


class SessionContext:
    """
    Per-connection view of identity, user document and school document.

    Args:
        bus: Change feed to subscribe on
        load_user: Reads a user document by id
        load_school: Reads a school document by id
    """

    def __init__(
        self,
        bus: DocumentEventBus,
        load_user: DocumentLoader = load_user_document,
        load_school: DocumentLoader = load_school_document,
    ) -> None:
        self._bus = bus
        self._load_user = load_user
        self._load_school = load_school

        self.identity: CurrentUser | None = None
        self.user: dict[str, Any] | None = None
        self.school: dict[str, Any] | None = None
        self.is_loading = True

        self._school_id: str | None = None
        self._unwatch_user: Callable[[], None] | None = None
        self._unwatch_school: Callable[[], None] | None = None
        self._queue: asyncio.Queue[dict[str, Any] | None] = asyncio.Queue()
        self._closed = False

    def snapshot(self) -> dict[str, Any]:
        identity = None
        if self.identity is not None:
            identity = {
                "id": self.identity.id,
                "email": self.identity.email,
                "role": self.identity.role,
            }
        return {
            "identity": identity,
            "user": self.user,
            "school": self.school,
            "is_loading": self.is_loading,
        }

    def _emit(self) -> None:
        if not self._closed:
            self._queue.put_nowait(self.snapshot())

    def _drop_subscriptions(self) -> None:
        if self._unwatch_school is not None:
            self._unwatch_school()
            self._unwatch_school = None
        if self._unwatch_user is not None:
            self._unwatch_user()
            self._unwatch_user = None
        self._school_id = None

    async def set_identity(self, identity: CurrentUser | None) -> None:
        """
        Switch to a new identity (or sign out with ``None``).

        All existing subscriptions are torn down first.
        """
        self._drop_subscriptions()
        self.identity = identity
        self.user = None
        self.school = None

        if identity is None:
            self.is_loading = False
            self._emit()
            return

        self.is_loading = True
        self._unwatch_user = self._bus.watch(USERS_COLLECTION, identity.id, self._on_user_changed)
        await self._refresh_user()
        self.is_loading = False
        self._emit()

    start = set_identity

    async def _refresh_user(self) -> None:
        if self.identity is None:
            return
        self.user = await self._load_user(self.identity.id)
        school_id = (self.user or {}).get("school_id")
        if school_id != self._school_id:
            await self._follow_school(school_id)

    async def _follow_school(self, school_id: str | None) -> None:
        if self._unwatch_school is not None:
            self._unwatch_school()
            self._unwatch_school = None

        self._school_id = school_id
        if school_id is None:
            self.school = None
            return

        logger.debug(f"Session for {self.identity.id if self.identity else None} following school {school_id}")
        self._unwatch_school = self._bus.watch(SCHOOLS_COLLECTION, school_id, self._on_school_changed)
        self.school = await self._load_school(school_id)

    async def _on_user_changed(self, collection: str, doc_id: str) -> None:
        await self._refresh_user()
        self._emit()

    async def _on_school_changed(self, collection: str, doc_id: str) -> None:
        if doc_id != self._school_id:
            return
        self.school = await self._load_school(doc_id)
        self._emit()

    async def updates(self) -> AsyncIterator[dict[str, Any]]:
        """Yield a snapshot for every change until the context is closed."""
        while True:
            item = await self._queue.get()
            if item is None:
                return
            yield item

    async def close(self) -> None:
        if self._closed:
            return
        self._drop_subscriptions()
        self._closed = True
        self._queue.put_nowait(None)
