"""Tests for the interactive console proxy."""
import os
import pty
import signal
import socket
import termios
import threading

import pytest

from mcc.core.console_session import (
    DETACH_KEYS,
    ConsoleSession,
    EscapeDetector,
    SessionEnd,
)
from mcc.core.errors import ConsoleStreamError
from mcc.services.runtime.streams import SocketStream

PAYLOAD = bytes(0x20 + (i * 7) % 95 for i in range(10_000))


class RecordingSink:
    def __init__(self):
        self.data = bytearray()
        self.closed = False

    def write(self, data):
        self.data += data

    def close(self):
        self.closed = True


class BrokenSource:
    def read(self, size=4096):
        raise ConnectionResetError("connection reset by peer")

    def close(self):
        pass


@pytest.fixture
def pipes():
    """Local input pipe, local output pipe and a socketpair standing in for the container."""
    in_r, in_w = os.pipe()
    out_r, out_w = os.pipe()
    local_side, remote_side = socket.socketpair()
    remote_side.settimeout(5)
    opened = [in_r, in_w, out_r, out_w]

    yield {
        "in_r": in_r, "in_w": in_w,
        "out_r": out_r, "out_w": out_w,
        "stream": SocketStream(local_side),
        "remote": remote_side,
    }

    for fd in opened:
        try:
            os.close(fd)
        except OSError:
            pass
    remote_side.close()
    local_side.close()


def make_session(pipes, input_fd=None):
    stream = pipes["stream"]
    return ConsoleSession(
        stream,
        stream,
        input_fd if input_fd is not None else pipes["in_r"],
        pipes["out_w"],
        poll_interval=0.01,
    )


def recv_all(sock):
    received = bytearray()
    while True:
        chunk = sock.recv(65536)
        if not chunk:
            return bytes(received)
        received += chunk


def read_exactly(fd, size):
    received = bytearray()
    while len(received) < size:
        chunk = os.read(fd, size - len(received))
        if not chunk:
            break
        received += chunk
    return bytes(received)


def run_in_background(session):
    outcome = {}

    def target():
        try:
            outcome["end"] = session.run()
        except Exception as e:  # surfaced to the test thread below
            outcome["error"] = e

    thread = threading.Thread(target=target, daemon=True)
    thread.start()
    return thread, outcome


class TestEscapeDetector:
    def test_plain_input_passes_through(self):
        detector = EscapeDetector()
        assert detector.feed(b"say hello\r") == (b"say hello\r", None)

    def test_detach_sequence_is_consumed(self):
        detector = EscapeDetector()
        forward, end = detector.feed(b"list\r" + DETACH_KEYS + b"ignored")
        assert forward == b"list\r"
        assert end is SessionEnd.DETACHED

    def test_detach_split_across_chunks(self):
        detector = EscapeDetector()
        assert detector.feed(b"ab\x10") == (b"ab", None)
        assert detector.pending == b"\x10"
        assert detector.feed(b"\x11") == (b"", SessionEnd.DETACHED)

    def test_partial_prefix_is_flushed_on_mismatch(self):
        detector = EscapeDetector()
        assert detector.feed(b"\x10") == (b"", None)
        assert detector.feed(b"a") == (b"\x10a", None)
        assert detector.pending == b""

    def test_repeated_prefix_byte(self):
        detector = EscapeDetector()
        forward, end = detector.feed(b"\x10\x10\x11")
        assert forward == b"\x10"
        assert end is SessionEnd.DETACHED

    def test_interrupt_key(self):
        detector = EscapeDetector()
        forward, end = detector.feed(b"stop\x03more")
        assert forward == b"stop"
        assert end is SessionEnd.INTERRUPTED

    def test_interrupt_flushes_held_prefix(self):
        detector = EscapeDetector()
        detector.feed(b"\x10")
        assert detector.feed(b"\x03") == (b"\x10", SessionEnd.INTERRUPTED)

    def test_interrupt_key_can_be_disabled(self):
        detector = EscapeDetector(interrupt_key=None)
        assert detector.feed(b"\x03") == (b"\x03", None)

    def test_custom_detach_keys(self):
        detector = EscapeDetector(detach_keys=b"~.")
        assert detector.feed(b"a~b~.") == (b"a~b", SessionEnd.DETACHED)

    def test_empty_detach_keys_rejected(self):
        with pytest.raises(ValueError):
            EscapeDetector(detach_keys=b"")


class TestConsoleSession:
    def test_local_input_reaches_server_in_order(self, pipes):
        os.write(pipes["in_w"], PAYLOAD + DETACH_KEYS)
        session = make_session(pipes)

        assert session.run() is SessionEnd.DETACHED
        assert recv_all(pipes["remote"]) == PAYLOAD

    def test_server_output_reaches_terminal_in_order(self, pipes):
        pipes["remote"].sendall(PAYLOAD)
        pipes["remote"].shutdown(socket.SHUT_WR)
        session = make_session(pipes)

        assert session.run() is SessionEnd.REMOTE_CLOSED
        assert read_exactly(pipes["out_r"], len(PAYLOAD)) == PAYLOAD

    def test_both_directions_at_once(self, pipes):
        session = make_session(pipes)
        thread, outcome = run_in_background(session)
        assert session.attached.wait(5)

        pipes["remote"].sendall(PAYLOAD)
        os.write(pipes["in_w"], PAYLOAD)

        received = bytearray()
        while len(received) < len(PAYLOAD):
            received += pipes["remote"].recv(65536)
        assert bytes(received) == PAYLOAD
        assert read_exactly(pipes["out_r"], len(PAYLOAD)) == PAYLOAD

        os.write(pipes["in_w"], DETACH_KEYS)
        thread.join(5)
        assert outcome == {"end": SessionEnd.DETACHED}

    def test_detach_keys_are_not_forwarded(self, pipes):
        os.write(pipes["in_w"], b"list\r" + DETACH_KEYS)
        session = make_session(pipes)

        assert session.run() is SessionEnd.DETACHED
        assert recv_all(pipes["remote"]) == b"list\r"

    def test_incomplete_detach_is_forwarded(self, pipes):
        os.write(pipes["in_w"], b"\x10a" + DETACH_KEYS)
        session = make_session(pipes)

        session.run()
        assert recv_all(pipes["remote"]) == b"\x10a"

    def test_interrupt_key_ends_session(self, pipes):
        os.write(pipes["in_w"], b"say hi\x03")
        session = make_session(pipes)

        assert session.run() is SessionEnd.INTERRUPTED
        assert recv_all(pipes["remote"]) == b"say hi"

    def test_sigint_ends_session(self, pipes):
        session = make_session(pipes)

        def send_sigint():
            session.attached.wait(5)
            os.kill(os.getpid(), signal.SIGINT)

        threading.Thread(target=send_sigint, daemon=True).start()

        assert session.run() is SessionEnd.INTERRUPTED
        assert pipes["stream"].closed

    def test_local_eof_ends_session(self, pipes):
        os.write(pipes["in_w"], b"help\r")
        os.close(pipes["in_w"])
        session = make_session(pipes)

        assert session.run() is SessionEnd.LOCAL_CLOSED
        assert recv_all(pipes["remote"]) == b"help\r"

    def test_remote_close_ends_session(self, pipes):
        pipes["remote"].close()
        session = make_session(pipes)

        assert session.run() is SessionEnd.REMOTE_CLOSED

    def test_stream_failure_is_reported(self, pipes):
        sink = RecordingSink()
        session = ConsoleSession(sink, BrokenSource(), pipes["in_r"], pipes["out_w"], poll_interval=0.01)

        with pytest.raises(ConsoleStreamError, match="output stream failed"):
            session.run()
        assert sink.closed


class TestTerminalRestore:
    @pytest.fixture
    def terminal(self):
        master, slave = pty.openpty()
        yield master, slave
        os.close(master)
        os.close(slave)

    def test_raw_mode_during_session_and_restored_after_detach(self, pipes, terminal):
        master, slave = terminal
        before = termios.tcgetattr(slave)
        session = make_session(pipes, input_fd=slave)
        during = {}

        def detach():
            session.attached.wait(5)
            during["lflag"] = termios.tcgetattr(slave)[3]
            os.write(master, DETACH_KEYS)

        threading.Thread(target=detach, daemon=True).start()

        assert session.run() is SessionEnd.DETACHED
        assert not during["lflag"] & termios.ICANON
        assert not during["lflag"] & termios.ECHO
        assert termios.tcgetattr(slave) == before

    def test_restored_after_stream_failure(self, pipes, terminal):
        _, slave = terminal
        before = termios.tcgetattr(slave)
        session = ConsoleSession(RecordingSink(), BrokenSource(), slave, pipes["out_w"], poll_interval=0.01)

        with pytest.raises(ConsoleStreamError):
            session.run()
        assert termios.tcgetattr(slave) == before

    def test_restored_when_remote_closes_during_detach(self, terminal):
        """Whichever end wins the race, the terminal comes back."""
        master, slave = terminal
        before = termios.tcgetattr(slave)

        for _ in range(10):
            out_r, out_w = os.pipe()
            local_side, remote_side = socket.socketpair()
            stream = SocketStream(local_side)
            session = ConsoleSession(stream, stream, slave, out_w, poll_interval=0.01)

            def race(session=session, remote=remote_side):
                session.attached.wait(5)
                os.write(master, DETACH_KEYS)
                remote.close()

            racer = threading.Thread(target=race, daemon=True)
            racer.start()
            try:
                end = session.run()
            finally:
                racer.join(5)
                remote_side.close()
                os.close(out_r)
                os.close(out_w)
                local_side.close()

            assert end in (SessionEnd.DETACHED, SessionEnd.REMOTE_CLOSED)
            assert termios.tcgetattr(slave) == before
            termios.tcflush(slave, termios.TCIFLUSH)
