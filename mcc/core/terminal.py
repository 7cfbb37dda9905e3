"""Scoped raw-mode handling for the local terminal."""
import os
import termios
import tty
from contextlib import contextmanager
from typing import Iterator

from mcc.core.logger import get_logger

logger = get_logger(__name__)


@contextmanager
def raw_terminal(fd: int) -> Iterator[bool]:
    """Put the terminal behind fd into raw mode for the duration of the block.

    The saved attributes are restored on every exit path, including errors
    and KeyboardInterrupt. Non-terminal descriptors (pipes, files) are left
    alone.

    Args:
        fd: File descriptor of the local input terminal

    Yields:
        True if raw mode was enabled, False if fd is not a terminal

    Usage:
        with raw_terminal(sys.stdin.fileno()):
            # proxy bytes
            pass
    """
    if not os.isatty(fd):
        yield False
        return

    saved = termios.tcgetattr(fd)
    try:
        tty.setraw(fd, termios.TCSANOW)
        yield True
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)
        logger.debug("Restored terminal mode")
