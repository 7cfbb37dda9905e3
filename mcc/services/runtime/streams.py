"""Byte stream wrapper around an attached container socket."""
import socket
import threading

from mcc.core.logger import get_logger

logger = get_logger(__name__)

READ_SIZE = 4096


class SocketStream:
    """One attach socket used as both InputSink and OutputSource.

    Docker hands back the hijacked HTTP connection either as a raw socket or
    as a SocketIO wrapping one; both are accepted.
    """

    def __init__(self, raw):
        self._raw = raw
        self._sock = getattr(raw, "_sock", raw)
        self._closed = threading.Event()

    def write(self, data: bytes) -> None:
        self._sock.sendall(data)

    def read(self, size: int = READ_SIZE) -> bytes:
        """Read up to size bytes; b"" means the remote side closed."""
        if self._closed.is_set():
            return b""
        return self._sock.recv(size)

    def fileno(self) -> int:
        return self._sock.fileno()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self) -> None:
        """Shut the socket down, waking any reader blocked in another thread."""
        if self._closed.is_set():
            return
        self._closed.set()
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError as e:
            # Already disconnected by the peer
            logger.debug(f"Attach socket shutdown: {e}")
        self._sock.close()
        if self._raw is not self._sock:
            self._raw.close()
