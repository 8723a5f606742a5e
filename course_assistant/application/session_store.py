"""
Session store.

Per-session conversation memory: a rolling window of the last turns and the
course whose enrollment link was last shown. Turns for one session key are
serialized through ``lock(key)``; different keys proceed concurrently.

Dependencies: asyncio (stdlib), course_assistant.models.session
System role: Conversation state owned by the request-handling layer
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager

from course_assistant.models.session import ChatTurn, OfferedCourse, SessionState

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """Storage interface for session state."""

    @abstractmethod
    async def get(self, key: str) -> SessionState:
        """Session state for ``key`` (empty state when unknown)."""

    @abstractmethod
    async def put(self, key: str, state: SessionState) -> None:
        """Replace the state for ``key``."""

    @abstractmethod
    async def append_turn(self, key: str, user_message: str, assistant_message: str) -> None:
        """Append one user/assistant exchange, dropping the oldest entries."""

    @abstractmethod
    async def set_last_offered(self, key: str, offered: OfferedCourse) -> None:
        """Remember the course whose enrollment link was just shown."""

    @abstractmethod
    def lock(self, key: str) -> AbstractAsyncContextManager[None]:
        """Exclusive access to ``key`` for the duration of one turn."""


class InMemorySessionStore(SessionStore):
    """
    Process-local session store.

    State is lost on restart. One asyncio.Lock per session key.
    """

    def __init__(self, history_turns: int = 3) -> None:
        """
        Initialize the store.

        Args:
            history_turns: Exchanges kept per session (two entries each)
        """
        self._max_entries = history_turns * 2
        self._sessions: dict[str, SessionState] = {}
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def __len__(self) -> int:
        return len(self._sessions)

    @asynccontextmanager
    async def lock(self, key: str) -> AsyncIterator[None]:
        async with self._locks[key]:
            yield

    async def get(self, key: str) -> SessionState:
        state = self._sessions.get(key)
        if state is None:
            return SessionState()
        return state.model_copy(deep=True)

    async def put(self, key: str, state: SessionState) -> None:
        history = state.history[-self._max_entries:] if self._max_entries else []
        self._sessions[key] = state.model_copy(update={"history": list(history)}, deep=True)

    async def append_turn(self, key: str, user_message: str, assistant_message: str) -> None:
        state = await self.get(key)
        state.history.extend([
            ChatTurn(role="user", content=user_message),
            ChatTurn(role="assistant", content=assistant_message),
        ])
        await self.put(key, state)
        logger.debug("Session updated", extra={"session_key": key, "entries": len(self._sessions[key].history)})

    async def set_last_offered(self, key: str, offered: OfferedCourse) -> None:
        state = await self.get(key)
        state.last_offered_course = offered
        await self.put(key, state)
