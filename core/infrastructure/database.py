"""
Database utilities and transaction management.
"""

import asyncio
import contextlib
import contextvars
import logging
import weakref
from abc import ABC, abstractmethod
from typing import AsyncContextManager, AsyncGenerator, Awaitable, Callable, List, Optional

from asgiref.sync import sync_to_async
from django.db import transaction

logger = logging.getLogger(__name__)

CommitCallback = Callable[[], Awaitable[None]]

# Callbacks of the outermost open block; None outside of any block.
_pending_callbacks: contextvars.ContextVar[Optional[List[CommitCallback]]] = (
    contextvars.ContextVar("unit_of_work_callbacks", default=None)
)


class UnitOfWork(ABC):
    """
    Transaction boundary shared by the application services.

    Usage:
        async with uow.atomic():
            await repository.update(...)
            await audit_log.append(...)
            await uow.on_commit(publish_events)
    """

    @property
    def in_transaction(self) -> bool:
        """True while an atomic block is open in the current context."""
        return _pending_callbacks.get() is not None

    @contextlib.asynccontextmanager
    async def atomic(self) -> AsyncGenerator[None, None]:
        """
        Open an atomic block. Nested blocks join the outermost one.

        Commit callbacks run after the outermost block commits and are
        dropped when it rolls back.
        """
        if self.in_transaction:
            yield
            return

        callbacks: List[CommitCallback] = []
        token = _pending_callbacks.set(callbacks)
        try:
            async with self._transaction():
                yield
        finally:
            _pending_callbacks.reset(token)

        for callback in callbacks:
            try:
                await callback()
            except Exception:
                logger.error("Post-commit callback failed", exc_info=True)

    async def on_commit(self, callback: CommitCallback) -> None:
        """
        Run callback once the current transaction commits.

        Outside of a transaction the callback runs immediately.

        Args:
            callback: Coroutine function taking no arguments
        """
        callbacks = _pending_callbacks.get()
        if callbacks is None:
            await callback()
        else:
            callbacks.append(callback)

    @abstractmethod
    def _transaction(self) -> AsyncContextManager[None]:
        """Open the underlying storage transaction."""
        pass


class DjangoUnitOfWork(UnitOfWork):
    """
    Unit of work over django.db.transaction.atomic.

    The atomic block is entered and left on the thread-sensitive
    sync_to_async executor, the same thread every repository call runs on.

    That thread holds a single connection for the whole process, so two
    blocks open at once on one event loop would share one database
    transaction. The per-loop lock is held across the block's I/O to keep
    them apart. Cross-process races are left to the conditional updates.
    """

    def __init__(self, using: Optional[str] = None):
        self.using = using
        self._locks: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Lock]" = (
            weakref.WeakKeyDictionary()
        )

    def _lock(self) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        lock = self._locks.get(loop)
        if lock is None:
            lock = self._locks[loop] = asyncio.Lock()
        return lock

    @contextlib.asynccontextmanager
    async def _transaction(self) -> AsyncGenerator[None, None]:
        async with self._lock():
            atomic = transaction.atomic(using=self.using)
            await sync_to_async(atomic.__enter__)()
            try:
                yield
            except BaseException as exc:
                await sync_to_async(atomic.__exit__)(type(exc), exc, exc.__traceback__)
                raise
            else:
                await sync_to_async(atomic.__exit__)(None, None, None)
