from __future__ import annotations

import random
import socket
import time
from dataclasses import dataclass
from typing import Protocol

from .errors import ErrorKind, TransportError, TransportTimeout


class Transport(Protocol):
    """Duplex byte stream with deadline-bounded operations.

    Deadlines are absolute ``time.monotonic()`` values. ``read`` returns
    ``b""`` at end of stream. Failures are raised as TransportError.
    """

    def read(self, size: int) -> bytes: ...

    def write(self, data: bytes) -> int: ...

    def set_read_deadline(self, deadline: float) -> None: ...

    def set_write_deadline(self, deadline: float) -> None: ...


@dataclass(frozen=True, slots=True)
class Impairment:
    corrupt_rate: float = 0.0

    def should_corrupt(self) -> bool:
        return random.random() < self.corrupt_rate

    def apply(self, data: bytes) -> bytes:
        # single-byte reads carry control codes; only block bodies are damaged
        if len(data) <= 1 or not self.should_corrupt():
            return data
        damaged = bytearray(data)
        bit = random.randrange(len(damaged) * 8)
        damaged[bit // 8] ^= 1 << (bit % 8)
        return bytes(damaged)


_CLOSED_ERRORS = (ConnectionResetError, ConnectionAbortedError, BrokenPipeError)


def _classify(exc: OSError) -> TransportError:
    if isinstance(exc, socket.timeout):
        return TransportTimeout(str(exc) or "deadline exceeded")
    if isinstance(exc, _CLOSED_ERRORS):
        return TransportError(ErrorKind.CLOSED, str(exc))
    return TransportError(ErrorKind.OTHER, str(exc))


class SocketTransport:
    def __init__(self, sock: socket.socket, impairment: Impairment | None = None):
        self.sock = sock
        self.impairment = impairment or Impairment()
        self._read_deadline: float | None = None
        self._write_deadline: float | None = None

    @classmethod
    def connect(cls, host: str, port: int, timeout_s: float, impairment: Impairment | None = None) -> "SocketTransport":
        try:
            sock = socket.create_connection((host, port), timeout=timeout_s)
        except OSError as exc:
            raise _classify(exc) from exc
        return cls(sock, impairment)

    @classmethod
    def accept(cls, host: str, port: int, impairment: Impairment | None = None) -> "SocketTransport":
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as listener:
            listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            try:
                listener.bind((host, port))
                listener.listen(1)
                sock, _ = listener.accept()
            except OSError as exc:
                raise _classify(exc) from exc
        return cls(sock, impairment)

    def set_read_deadline(self, deadline: float) -> None:
        self._read_deadline = deadline

    def set_write_deadline(self, deadline: float) -> None:
        self._write_deadline = deadline

    def _arm(self, deadline: float | None) -> None:
        if deadline is None:
            self.sock.settimeout(None)
            return
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise TransportTimeout()
        self.sock.settimeout(remaining)

    def read(self, size: int) -> bytes:
        self._arm(self._read_deadline)
        try:
            data = self.sock.recv(size)
        except OSError as exc:
            raise _classify(exc) from exc
        return self.impairment.apply(data)

    def write(self, data: bytes) -> int:
        self._arm(self._write_deadline)
        try:
            self.sock.sendall(data)
        except OSError as exc:
            raise _classify(exc) from exc
        return len(data)

    def close(self) -> None:
        self.sock.close()
