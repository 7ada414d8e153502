"""
State store factory for creating down-state store instances.
"""
import logging

from abstractions.state_store import StateStore
from config.config import Config
from core.memory_state_store import MemoryStateStore
from core.redis_state_store import RedisStateStore

logger = logging.getLogger(__name__)

SUPPORTED_TYPES = ["memory", "redis"]


class StateStoreFactory:
    """
    Factory class for creating down-state store instances.
    """

    @staticmethod
    def create_state_store(config: Config) -> StateStore:
        """
        Create a state store based on configuration.

        Args:
            config (Config): Monitor configuration; ``state_store_type`` picks
                the implementation.

        Returns:
            StateStore: A state store instance.

        Raises:
            ValueError: If an unsupported store type is specified.
        """
        store_type = config.state_store_type.lower()
        logger.info(f"Creating {store_type} state store")

        if store_type == "memory":
            return MemoryStateStore()

        if store_type == "redis":
            return RedisStateStore(
                redis_url=config.redis_url,
                db=config.redis_db,
                key_prefix=config.state_key_prefix,
            )

        raise ValueError(
            f"Unsupported state store type: {config.state_store_type}. "
            f"Supported types: {SUPPORTED_TYPES}"
        )
