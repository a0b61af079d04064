"""SwapSessionManager keeps the live swap sessions of this process."""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from ...config import settings
from ..errors import SessionNotFoundError
from .session import SettlementHandler, SwapSession

if TYPE_CHECKING:
    from ...services.price_feed import PriceFeed


class SwapSessionManager:
    """In-memory registry of swap sessions wired to the price feed.

    Sessions idle for longer than ``idle_ttl_seconds`` are dropped, and once
    ``max_sessions`` are open the least recently used one is evicted.
    """

    def __init__(
        self,
        feed: PriceFeed,
        *,
        settle: Optional[SettlementHandler] = None,
        logger: Optional[logging.Logger] = None,
        idle_ttl_seconds: Optional[float] = None,
        max_sessions: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._feed = feed
        self._settle = settle
        self._logger = logger or logging.getLogger(__name__)
        self.idle_ttl_seconds = (
            idle_ttl_seconds if idle_ttl_seconds is not None else settings.swap_session_idle_ttl_seconds
        )
        self.max_sessions = max_sessions if max_sessions is not None else settings.swap_session_max
        self._clock = clock
        # Least recently used first
        self._sessions: OrderedDict[str, SwapSession] = OrderedDict()
        self._last_used: Dict[str, float] = {}

    def create(self) -> SwapSession:
        self.prune()
        while len(self._sessions) >= self.max_sessions:
            oldest = next(iter(self._sessions))
            self._logger.info("Evicting least recently used swap session %s", oldest)
            self._drop(oldest)

        session = SwapSession(self._feed.assets, settle=self._settle, logger=self._logger)
        self._feed.subscribe(session.sync_assets)
        self._sessions[session.session_id] = session
        self._last_used[session.session_id] = self._clock()
        self._logger.info("Opened swap session %s", session.session_id)
        return session

    def get(self, session_id: str) -> SwapSession:
        self.prune()
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        self._sessions.move_to_end(session_id)
        self._last_used[session_id] = self._clock()
        return session

    def close(self, session_id: str) -> None:
        if session_id not in self._sessions:
            raise SessionNotFoundError(session_id)
        self._drop(session_id)
        self._logger.info("Closed swap session %s", session_id)

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self.close(session_id)

    def prune(self) -> int:
        """Drop idle sessions; returns how many were removed."""
        now = self._clock()
        expired = [
            session_id
            for session_id, session in self._sessions.items()
            if now - self._last_used[session_id] >= self.idle_ttl_seconds and not session.busy
        ]
        for session_id in expired:
            self._logger.info("Expired idle swap session %s", session_id)
            self._drop(session_id)
        return len(expired)

    def list_ids(self) -> List[str]:
        return list(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    def _drop(self, session_id: str) -> None:
        session = self._sessions.pop(session_id)
        self._last_used.pop(session_id, None)
        self._feed.unsubscribe(session.sync_assets)
