from abc import ABC, abstractmethod


class StateStore(ABC):
    """
    Abstract base class for the persistent per-endpoint "currently down" flag.
    """

    @abstractmethod
    async def get_is_down(self, identity: str) -> bool:
        """
        Read whether an endpoint was down as of the last processed run.

        Args:
            identity (str): The endpoint identity (host:port).

        Returns:
            bool: The stored flag; False when no record exists.

        Raises:
            StateStoreError: If the backing store cannot be read.
        """

    @abstractmethod
    async def set_is_down(self, identity: str, is_down: bool) -> None:
        """
        Persist whether an endpoint is currently down.

        Args:
            identity (str): The endpoint identity (host:port).
            is_down (bool): The new flag value.

        Raises:
            StateStoreError: If the backing store cannot be written.
        """

    async def close(self) -> None:
        """Release any connection held by the store."""
