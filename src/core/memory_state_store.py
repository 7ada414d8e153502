import asyncio
import logging

from abstractions.state_store import StateStore

logger = logging.getLogger(__name__)


class MemoryStateStore(StateStore):
    """
    In-process down-state store. State lives only as long as the process.
    """

    def __init__(self):
        self._is_down = {}  # identity -> bool
        self._lock = asyncio.Lock()
        logger.info("MemoryStateStore initialized")

    async def get_is_down(self, identity: str) -> bool:
        async with self._lock:
            return self._is_down.get(identity, False)

    async def set_is_down(self, identity: str, is_down: bool) -> None:
        async with self._lock:
            self._is_down[identity] = is_down
        logger.debug(f"Down-state for {identity} set to {is_down}")

    def snapshot(self) -> dict:
        """Return a copy of every stored flag, keyed by identity."""
        return dict(self._is_down)
