"""
Document Change Feed

In-process publish/subscribe for document changes. Services publish after a
successful commit; two kinds of consumers listen:

- Watchers follow one document (collection + id) and are awaited on every
  change. The live session context uses these to re-read the user and
  school documents.
- Creation handlers run once for every new document in a collection, as
  background tasks with their own database sessions (welcome emails,
  announcement fan-out).

Events carry only the collection and document id; consumers re-read the
persisted state, so nothing downstream relies on the publisher's copy.
"""

import asyncio
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

WatchCallback = Callable[[str, str], Awaitable[None]]
CreateHandler = Callable[[str], Awaitable[Any]]


class DocumentEventBus:
    """Per-process change feed for persisted documents."""

    def __init__(self) -> None:
        self._watchers: dict[tuple[str, str], list[WatchCallback]] = defaultdict(list)
        self._create_handlers: dict[str, list[CreateHandler]] = defaultdict(list)
        self._tasks: set[asyncio.Task] = set()

    def watch(self, collection: str, doc_id: str, callback: WatchCallback) -> Callable[[], None]:
        """
        Subscribe to changes of a single document.

        Returns:
            A function that removes the subscription (safe to call twice)
        """
        key = (collection, doc_id)
        self._watchers[key].append(callback)

        def unsubscribe() -> None:
            callbacks = self._watchers.get(key)
            if callbacks and callback in callbacks:
                callbacks.remove(callback)
                if not callbacks:
                    del self._watchers[key]

        return unsubscribe

    def watcher_count(self, collection: str, doc_id: str) -> int:
        return len(self._watchers.get((collection, doc_id), []))

    def on_create(self, collection: str, handler: CreateHandler) -> None:
        """Register a handler that runs for every document created in a collection."""
        self._create_handlers[collection].append(handler)
        logger.info(f"Registered creation handler {handler.__name__} for '{collection}'")

    def clear_handlers(self) -> None:
        self._create_handlers.clear()

    async def _notify_watchers(self, collection: str, doc_id: str) -> None:
        for callback in list(self._watchers.get((collection, doc_id), [])):
            try:
                await callback(collection, doc_id)
            except Exception as e:
                logger.error(
                    f"Watcher for {collection}/{doc_id} failed: {e}",
                    exc_info=True,
                )

    def _spawn(self, handler: CreateHandler, collection: str, doc_id: str) -> asyncio.Task:
        task = asyncio.create_task(handler(doc_id), name=f"{collection}:{handler.__name__}:{doc_id}")
        self._tasks.add(task)

        def _done(t: asyncio.Task) -> None:
            self._tasks.discard(t)
            if not t.cancelled() and t.exception() is not None:
                logger.error(
                    f"Creation handler {handler.__name__} failed for {collection}/{doc_id}",
                    exc_info=t.exception(),
                )

        task.add_done_callback(_done)
        return task

    async def publish_created(self, collection: str, doc_id: str) -> list[asyncio.Task]:
        """
        Announce a newly committed document.

        Creation handlers are scheduled in the background; watchers are awaited.

        Returns:
            The scheduled handler tasks
        """
        tasks = [
            self._spawn(handler, collection, doc_id)
            for handler in self._create_handlers.get(collection, [])
        ]
        await self._notify_watchers(collection, doc_id)
        return tasks

    async def publish_updated(self, collection: str, doc_id: str) -> None:
        """Announce a committed change to an existing document."""
        await self._notify_watchers(collection, doc_id)

    async def publish_deleted(self, collection: str, doc_id: str) -> None:
        """Announce a removed document."""
        await self._notify_watchers(collection, doc_id)

    async def drain(self) -> None:
        """Wait for all in-flight creation handlers (used on shutdown and in tests)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


event_bus = DocumentEventBus()
