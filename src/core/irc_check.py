import asyncio
import logging

from abstractions.liveness_check import LivenessCheck

logger = logging.getLogger(__name__)

RPL_WELCOME = "001"
ERR_NICKNAMEINUSE = "433"


class IrcLivenessCheck(LivenessCheck):
    """
    Checks that an IRC server accepts a client registration.

    The server is alive once it sends RPL_WELCOME (001). An ERROR line, an
    error numeric (4xx/5xx other than a nick collision) or the server closing
    the connection first means it is not.
    """

    def __init__(self, nick: str = "healthcheck", max_nick_attempts: int = 3):
        self.nick = nick
        self.max_nick_attempts = max_nick_attempts

    async def run(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> bool:
        nick = self.nick
        attempts = 1
        await self._send(writer, f"NICK {nick}", f"USER {nick} 0 * :{nick}")

        while True:
            try:
                raw = await reader.readline()
            except ValueError:
                # Line longer than the stream buffer limit.
                logger.info("IRC server sent an oversized line")
                return False
            if not raw:
                logger.info("IRC server closed the connection before registration")
                return False
            line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
            command, params = self._parse(line)

            if command == "PING":
                await self._send(writer, f"PONG {params}")
            elif command == RPL_WELCOME:
                await self._send(writer, "QUIT :healthcheck complete")
                return True
            elif command == ERR_NICKNAMEINUSE:
                if attempts >= self.max_nick_attempts:
                    logger.info(f"Gave up after {attempts} nick collisions")
                    return False
                attempts += 1
                nick = f"{nick}_"
                await self._send(writer, f"NICK {nick}")
            elif command == "ERROR":
                logger.info(f"IRC server refused registration: {params}")
                return False
            elif len(command) == 3 and command.isdigit() and command[0] in "45":
                logger.info(f"IRC server replied with error numeric {command}: {params}")
                return False

    @staticmethod
    def _parse(line: str):
        # Drop the optional ":prefix" and split the command from its parameters.
        if line.startswith(":"):
            _, _, line = line.partition(" ")
        command, _, params = line.partition(" ")
        return command.upper(), params

    @staticmethod
    async def _send(writer: asyncio.StreamWriter, *lines: str):
        writer.write("".join(f"{line}\r\n" for line in lines).encode("utf-8"))
        await writer.drain()
