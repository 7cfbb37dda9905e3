"""Interactive console attached to the server process.

Two threads copy bytes, one per direction, so a burst of server output never
stalls typed input and vice versa:

    local input  --(escape detection)-->  container stdin
    local output <------------------------  container stdout

The session ends on the first of: the detach sequence (Ctrl-P Ctrl-Q), the
interrupt key or a SIGINT, the server closing its stream, or EOF on local
input. Detaching never stops the server.
"""
import os
import select
import threading
from enum import Enum
from typing import Optional, Tuple

from mcc.core.errors import ConsoleStreamError
from mcc.core.logger import get_logger
from mcc.core.terminal import raw_terminal
from mcc.services.runtime.base import InputSink, OutputSource

logger = get_logger(__name__)

# Ctrl-P Ctrl-Q, the same detach keys docker attach uses
DETACH_KEYS = b"\x10\x11"
DETACH_HINT = "Ctrl-P Ctrl-Q"
# Ctrl-C in raw mode arrives as a byte instead of a signal
INTERRUPT_KEY = 0x03

READ_SIZE = 4096
POLL_INTERVAL = 0.05
JOIN_TIMEOUT = 2.0


class SessionEnd(Enum):
    """Why a console session ended."""
    DETACHED = "detached"
    INTERRUPTED = "interrupted"
    REMOTE_CLOSED = "remote_closed"
    LOCAL_CLOSED = "local_closed"


class EscapeDetector:
    """Finds the detach sequence and the interrupt key in typed input.

    Bytes that could be the start of the detach sequence are held back until
    the next byte shows whether the sequence completes; if it does not, they
    are forwarded unchanged. Input after a detach or interrupt is discarded.
    """

    def __init__(self, detach_keys: bytes = DETACH_KEYS, interrupt_key: Optional[int] = INTERRUPT_KEY):
        if not detach_keys:
            raise ValueError("detach_keys must not be empty")
        self.detach_keys = detach_keys
        self.interrupt_key = interrupt_key
        self._pending = b""

    @property
    def pending(self) -> bytes:
        return self._pending

    def feed(self, data: bytes) -> Tuple[bytes, Optional[SessionEnd]]:
        """Scan one chunk of input.

        Returns:
            (bytes to forward, SessionEnd if the chunk ends the session)
        """
        forward = bytearray()
        for byte in data:
            if self.interrupt_key is not None and byte == self.interrupt_key:
                forward += self._pending
                self._pending = b""
                return bytes(forward), SessionEnd.INTERRUPTED

            candidate = self._pending + bytes([byte])
            if not self.detach_keys.startswith(candidate):
                # Held bytes were not a detach after all; retry the current
                # byte as the start of a new sequence
                forward += self._pending
                candidate = bytes([byte])
                if not self.detach_keys.startswith(candidate):
                    self._pending = b""
                    forward.append(byte)
                    continue

            if candidate == self.detach_keys:
                self._pending = b""
                return bytes(forward), SessionEnd.DETACHED
            self._pending = candidate

        return bytes(forward), None


class ConsoleSession:
    """One attach of the local terminal to the server's process stream.

    Owns the raw-mode toggle of the local terminal; it is restored before
    run() returns or raises.
    """

    def __init__(
        self,
        input_sink: InputSink,
        output_source: OutputSource,
        local_input_fd: int,
        local_output_fd: int,
        detector: Optional[EscapeDetector] = None,
        poll_interval: float = POLL_INTERVAL,
    ):
        self.input_sink = input_sink
        self.output_source = output_source
        self.local_input_fd = local_input_fd
        self.local_output_fd = local_output_fd
        self.detector = detector or EscapeDetector()
        self.poll_interval = poll_interval

        self.attached = threading.Event()
        self._done = threading.Event()
        self._lock = threading.Lock()
        self._end: Optional[SessionEnd] = None
        self._error: Optional[Tuple[str, BaseException]] = None

    @property
    def end(self) -> Optional[SessionEnd]:
        return self._end

    def run(self) -> SessionEnd:
        """Proxy bytes until the session ends.

        Returns:
            The reason the session ended

        Raises:
            ConsoleStreamError: If either direction failed (terminal already restored)
        """
        with raw_terminal(self.local_input_fd):
            self._proxy()

        if self._error is not None:
            direction, error = self._error
            raise ConsoleStreamError("console", f"{direction} stream failed: {error}") from error

        logger.debug(f"Console session ended: {self._end.value}")
        return self._end

    def _proxy(self) -> None:
        threads = [
            threading.Thread(target=self._forward_input, name="console-input", daemon=True),
            threading.Thread(target=self._forward_output, name="console-output", daemon=True),
        ]
        try:
            for thread in threads:
                thread.start()
            self.attached.set()
            while not self._done.wait(self.poll_interval):
                pass
        except KeyboardInterrupt:
            self._finish(SessionEnd.INTERRUPTED)
        finally:
            self._done.set()
            self._close_remote()
            for thread in threads:
                if thread.is_alive():
                    thread.join(timeout=JOIN_TIMEOUT)

    def _finish(self, end: SessionEnd) -> None:
        """Record the session outcome; the first one wins."""
        with self._lock:
            if self._end is None:
                self._end = end
        self._done.set()

    def _fail(self, direction: str, error: BaseException) -> None:
        with self._lock:
            if self._end is None and self._error is None:
                self._error = (direction, error)
                self._end = SessionEnd.REMOTE_CLOSED
        self._done.set()

    def _close_remote(self) -> None:
        # Closing wakes the output thread if it is blocked in read()
        self.input_sink.close()
        if self.output_source is not self.input_sink:
            self.output_source.close()

    def _forward_input(self) -> None:
        try:
            while not self._done.is_set():
                ready, _, _ = select.select([self.local_input_fd], [], [], self.poll_interval)
                if not ready:
                    continue

                data = os.read(self.local_input_fd, READ_SIZE)
                if not data:
                    self._finish(SessionEnd.LOCAL_CLOSED)
                    return

                forward, end = self.detector.feed(data)
                if forward:
                    self.input_sink.write(forward)
                if end is not None:
                    self._finish(end)
                    return
        except OSError as e:
            if not self._done.is_set():
                self._fail("input", e)

    def _forward_output(self) -> None:
        try:
            while True:
                data = self.output_source.read(READ_SIZE)
                if not data:
                    self._finish(SessionEnd.REMOTE_CLOSED)
                    return
                self._write_local(data)
        except OSError as e:
            if not self._done.is_set():
                self._fail("output", e)

    def _write_local(self, data: bytes) -> None:
        view = memoryview(data)
        while view:
            written = os.write(self.local_output_fd, view)
            view = view[written:]
