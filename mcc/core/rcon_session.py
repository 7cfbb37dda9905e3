"""Line-based RCON command session with the running server."""
from typing import Callable

from mcrcon import MCRcon, MCRconException

from mcc.core.errors import ConsoleStreamError
from mcc.core.logger import get_logger

logger = get_logger(__name__)

RCON_TIMEOUT = 5


class RconSession:
    """Sends one RCON command per input line and prints the responses.

    Ends on EOF or Ctrl-C on the input side; the server keeps running.
    """

    def __init__(
        self,
        host: str,
        port: int,
        password: str,
        prompt: str,
        read_line: Callable[[str], str],
        write_output: Callable[[str], None],
        timeout: int = RCON_TIMEOUT,
    ):
        self.host = host
        self.port = port
        self.password = password
        self.prompt = prompt
        self.read_line = read_line
        self.write_output = write_output
        self.timeout = timeout

    def run(self) -> int:
        """Run until the input ends.

        Returns:
            Number of commands sent

        Raises:
            ConsoleStreamError: If the connection or a command fails
        """
        logger.debug(f"Establishing RCON connection to {self.host}:{self.port}")
        sent = 0
        try:
            with MCRcon(self.host, self.password, port=self.port, timeout=self.timeout) as mcr:
                while True:
                    try:
                        line = self.read_line(self.prompt)
                    except (EOFError, KeyboardInterrupt):
                        break

                    command = line.strip()
                    if not command:
                        continue
                    response = mcr.command(command)
                    sent += 1
                    if response:
                        self.write_output(response)
        except (OSError, MCRconException) as e:
            raise ConsoleStreamError("rcon", f"{self.host}:{self.port}: {e}") from e

        return sent
