"""Exchange cycle state: IDLE -> PENDING -> (ERROR) -> IDLE."""

from __future__ import annotations

import asyncio
from enum import Enum
import logging

LOGGER = logging.getLogger(__name__)


class ConversationState(str, Enum):
    """Where the controller is in the send/receive cycle."""

    IDLE = "IDLE"
    PENDING = "PENDING"
    ERROR = "ERROR"


class StateManager:
    """Own the cycle state; every change happens under one ``asyncio.Lock``.

    Each committed change is logged as ``state.transition``.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._state = ConversationState.IDLE

    @property
    def state(self) -> ConversationState:
        """Last committed state, readable from synchronous render code."""
        return self._state

    async def begin_exchange(self) -> bool:
        """Enter PENDING from IDLE. ``False`` means an exchange is running."""
        return await self._move(
            ConversationState.PENDING, only_from=ConversationState.IDLE
        )

    async def mark_failed(self) -> None:
        """Record that the running exchange failed."""
        await self._move(ConversationState.ERROR, only_from=ConversationState.PENDING)

    async def finish_exchange(self) -> None:
        """Return to IDLE from PENDING or ERROR."""
        await self._move(ConversationState.IDLE)

    async def _move(
        self,
        new_state: ConversationState,
        only_from: ConversationState | None = None,
    ) -> bool:
        async with self._lock:
            previous = self._state
            if only_from is not None and previous != only_from:
                return False
            if previous == new_state:
                return True
            self._state = new_state
        LOGGER.info(
            "state.transition",
            extra={
                "event": "state.transition",
                "from_state": previous.value,
                "to_state": new_state.value,
            },
        )
        return True
