"""Exclusive access to an Engine shared by several tasks.

Engine performs no synchronization of its own. ExclusiveEngine serializes
access with an asyncio.Lock: a task acquires the handle, runs any sequence
of send/recv calls, and releases it. Sessions are numbered so log lines can
be attributed to the task that produced them.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from uci_gateway.core.models import Session

if TYPE_CHECKING:
    from .engine import Engine

logger = logging.getLogger(__name__)


class ExclusiveEngine:
    """Lock-guarded handle to a single Engine."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._lock = asyncio.Lock()
        # Session 0 is reserved for the operator.
        self._session_ids = itertools.count(1)

    def new_session(self) -> Session:
        return Session(next(self._session_ids))

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    @asynccontextmanager
    async def acquire(
        self, session: Session | None = None, *, newgame: bool = False
    ) -> AsyncIterator[tuple[Session, Engine]]:
        """Hold the engine for the duration of the ``async with`` block.

        Waiting for the lock has no timeout; wrap the block in
        asyncio.wait_for or asyncio.timeout to bound it.

        Args:
            session: Session to attribute commands to; a fresh one by default.
            newgame: If True, run ensure_newgame() before handing the engine
                out, so the holder starts from a clean, idle engine.

        Yields:
            The session to use for this block and the engine itself.
        """
        if session is None:
            session = self.new_session()
        async with self._lock:
            logger.debug("%s: acquired engine", session)
            try:
                if newgame:
                    await self._engine.ensure_newgame(session)
                yield session, self._engine
            finally:
                logger.debug("%s: released engine", session)
