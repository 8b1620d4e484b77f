from __future__ import annotations

from collections import deque

import pytest

from xmrecv.block import Block
from xmrecv.errors import TransportTimeout


class ScriptedTransport:
    """In-memory peer: replays scripted inbound chunks and records writes.

    ``reads`` items are bytes (served across as many reads as needed; ``b""``
    means end of stream) or exceptions to raise. An exhausted script behaves
    like a silent peer. ``write_errors`` items are raised by successive
    writes; ``None`` lets that write through.
    """

    def __init__(self, reads=(), write_errors=()):
        self.reads = deque(reads)
        self.write_errors = deque(write_errors)
        self.written: list[bytes] = []
        self.write_attempts = 0
        self.read_deadlines: list[float] = []
        self.write_deadlines: list[float] = []

    def read(self, size: int) -> bytes:
        if not self.reads:
            raise TransportTimeout("peer silent")
        item = self.reads.popleft()
        if isinstance(item, Exception):
            raise item
        if len(item) > size:
            self.reads.appendleft(item[size:])
            item = item[:size]
        return item

    def write(self, data: bytes) -> int:
        self.write_attempts += 1
        if self.write_errors:
            err = self.write_errors.popleft()
            if err is not None:
                raise err
        self.written.append(bytes(data))
        return len(data)

    def set_read_deadline(self, deadline: float) -> None:
        self.read_deadlines.append(deadline)

    def set_write_deadline(self, deadline: float) -> None:
        self.write_deadlines.append(deadline)


def make_frame(seq: int, payload: bytes = b"") -> bytes:
    return Block.data(seq, payload).to_bytes()


def corrupt(frame: bytes, index: int = 100) -> bytes:
    damaged = bytearray(frame)
    damaged[index] ^= 0x01
    return bytes(damaged)


@pytest.fixture
def payloads() -> tuple[bytes, bytes]:
    first = bytes(range(256)) * 4
    second = bytes(reversed(range(256))) * 4
    return first, second
