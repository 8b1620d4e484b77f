"""XMODEM-1K/CRC receiver.

Receives a file over an already-connected byte stream:
- CRC-16/XMODEM block checksums
- ACK/NAK retransmission with bounded retries
- deadline-bounded reads and writes on a pluggable transport

The transmit side is out of scope; see ``receiver.receive`` for the entry point.
"""

from .errors import (
    ErrorKind,
    FramingError,
    HandshakeTimeout,
    RetryLimitExceeded,
    TransferCancelled,
    TransportError,
    TransportTimeout,
    XmodemError,
)
from .receiver import Receiver, receive

__all__ = [
    "ErrorKind",
    "FramingError",
    "HandshakeTimeout",
    "Receiver",
    "RetryLimitExceeded",
    "TransferCancelled",
    "TransportError",
    "TransportTimeout",
    "XmodemError",
    "receive",
]
