from __future__ import annotations

import enum


class ErrorKind(enum.Enum):
    TIMEOUT = "timeout"
    CLOSED = "closed"
    OTHER = "other"


class XmodemError(Exception):
    pass


class TransportError(XmodemError):
    """A read or write on the underlying connection failed."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind


class TransportTimeout(TransportError):
    def __init__(self, message: str = "deadline exceeded") -> None:
        super().__init__(ErrorKind.TIMEOUT, message)


class HandshakeTimeout(TransportTimeout):
    """Every attempt to announce CRC mode timed out."""


class FramingError(XmodemError):
    pass


class TransferCancelled(XmodemError):
    pass


class RetryLimitExceeded(XmodemError):
    """Too many consecutive NAKs for the same block."""
