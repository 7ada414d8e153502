import asyncio
import logging
from typing import Optional

from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError

from abstractions.state_store import StateStore
from contracts.errors import StateStoreError

logger = logging.getLogger(__name__)

IS_DOWN_FIELD = "isCurrentlyDown"


class RedisStateStore(StateStore):
    """
    Redis-backed down-state store. Each endpoint is one hash,
    ``<key_prefix><identity>``, holding a single ``isCurrentlyDown`` field.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379",
        db: int = 0,
        key_prefix: str = "server:",
    ):
        """
        Initialize the RedisStateStore. The connection is opened lazily.

        Args:
            redis_url (str): Redis connection URL.
            db (int): Redis database number to use.
            key_prefix (str): Prefix for per-endpoint keys.
        """
        self.redis_url = redis_url
        self.db = db
        self.key_prefix = key_prefix
        self._redis: Optional[Redis] = None
        self._connection_lock = asyncio.Lock()  # Only for connection management
        self._connection_healthy = False

        logger.info(
            f"RedisStateStore initialized with redis_url={self.redis_url}, "
            f"db={self.db}, key_prefix={self.key_prefix}"
        )

    async def _get_redis(self) -> Redis:
        """
        Get the Redis connection, creating and pinging it if needed.

        Returns:
            Redis: Redis connection instance.
        """
        # Fast path: if connection exists and is healthy, return immediately
        if self._redis and self._connection_healthy:
            return self._redis

        async with self._connection_lock:
            if self._redis and self._connection_healthy:
                return self._redis

            if self._redis:
                await self._discard_connection()

            redis = Redis.from_url(
                self.redis_url,
                db=self.db,
                decode_responses=True,
                socket_connect_timeout=3,
                socket_timeout=3,
            )
            try:
                await redis.ping()
            except RedisError as e:
                logger.error(f"Redis connection failed: {e}")
                await redis.aclose()
                raise
            self._redis = redis
            self._connection_healthy = True
            logger.info(f"Redis connected: {self.redis_url}")

        return self._redis

    async def _discard_connection(self):
        redis, self._redis = self._redis, None
        self._connection_healthy = False
        try:
            await redis.aclose()
        except RedisError as e:
            logger.debug(f"Ignoring error while closing Redis connection: {e}")

    async def _execute_redis_operation(self, operation):
        """
        Run an operation against Redis, reconnecting and retrying once on a
        connection error.

        Args:
            operation: Async function that takes the redis connection.

        Returns:
            Result of the operation.

        Raises:
            StateStoreError: If the operation fails.
        """
        try:
            try:
                redis = await self._get_redis()
                return await operation(redis)
            except (RedisConnectionError, OSError):
                self._connection_healthy = False
                redis = await self._get_redis()
                return await operation(redis)
        except (RedisError, OSError) as e:
            raise StateStoreError(f"Redis operation failed: {e}") from e

    def _get_key(self, identity: str) -> str:
        return f"{self.key_prefix}{identity}"

    async def get_is_down(self, identity: str) -> bool:
        key = self._get_key(identity)

        async def _get_operation(redis):
            return await redis.hget(key, IS_DOWN_FIELD)

        value = await self._execute_redis_operation(_get_operation)
        if value is None:
            return False
        if value not in ("0", "1"):
            raise StateStoreError(f"Unexpected {IS_DOWN_FIELD} value {value!r} at {key}")
        return value == "1"

    async def set_is_down(self, identity: str, is_down: bool) -> None:
        key = self._get_key(identity)

        async def _set_operation(redis):
            await redis.hset(key, IS_DOWN_FIELD, "1" if is_down else "0")

        await self._execute_redis_operation(_set_operation)
        logger.debug(f"Down-state for {identity} set to {is_down}")

    async def close(self) -> None:
        async with self._connection_lock:
            if self._redis:
                await self._discard_connection()

    async def __aenter__(self):
        await self._get_redis()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
