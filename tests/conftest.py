"""Shared fakes for the protocol and device tests."""

from __future__ import annotations

import threading
import time
from collections import deque

import pytest

from nango_mcp.errors import SerialTimeoutError
from nango_mcp.protocol.dispatcher import Dispatcher


class FakeConnection:
    """Records written bytes and answers each flushed request from a script.

    ``replies`` is consumed one entry per ``read_line``; ``None`` simulates a
    board that never answers.
    """

    def __init__(self, replies=(), port: str = "fake", write_delay: float = 0.0) -> None:
        self.port = port
        self.replies = deque(replies)
        self.default_reply = b"0"
        self.write_delay = write_delay
        self.suspect = False
        self.is_open = True
        self.pending = bytearray()
        self.flushed = bytearray()
        self.writes: list[tuple[str, bytes]] = []
        self.requests: list[list[str]] = []
        self.flush_count = 0
        self.discard_count = 0
        self._lock = threading.Lock()

    def write(self, data: bytes) -> None:
        with self._lock:
            self.writes.append((threading.current_thread().name, data))
            self.pending += data
        if self.write_delay:
            time.sleep(self.write_delay)

    def flush(self) -> None:
        with self._lock:
            self.flush_count += 1
            self.flushed += self.pending
            fields = bytes(self.pending).split(b"\x00")[:-1]
            self.requests.append([f.decode() for f in fields])
            self.pending.clear()

    def discard(self) -> None:
        self.discard_count += 1

    def read_line(self) -> bytes:
        reply = self.replies.popleft() if self.replies else self.default_reply
        if reply is None:
            self.discard()
            raise SerialTimeoutError(self.port)
        return reply


@pytest.fixture
def fake_conn():
    return FakeConnection()


@pytest.fixture
def dispatcher(fake_conn):
    return Dispatcher.exclusive(fake_conn)
