import asyncio
from abc import ABC, abstractmethod


class LivenessCheck(ABC):
    """
    Abstract base class for the protocol-level check run over an open connection.
    """

    @abstractmethod
    async def run(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> bool:
        """
        Run the check over an already established connection.

        The caller owns the connection and closes it afterwards.

        Args:
            reader (asyncio.StreamReader): Stream to read server data from.
            writer (asyncio.StreamWriter): Stream to send client data to.

        Returns:
            bool: True if the server is alive, False otherwise.
        """
