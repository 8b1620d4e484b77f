from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass, field

from .block import Block, validate
from .constants import (
    ACK,
    BLOCK_PAYLOAD,
    CAN,
    CRC_MODE,
    DEFAULT_HANDSHAKE_ATTEMPTS,
    DEFAULT_MAX_NAKS,
    DEFAULT_TIMEOUT_S,
    EOT,
    ETB,
    FRAME_LEN,
    HEADER_LEN,
    NAK,
    SOH,
    STX,
    SUB,
)
from .errors import (
    ErrorKind,
    FramingError,
    HandshakeTimeout,
    RetryLimitExceeded,
    TransferCancelled,
    TransportError,
    TransportTimeout,
)
from .net import Transport

log = logging.getLogger(__name__)


class Phase(enum.Enum):
    AWAITING_START = "awaiting_start"
    RECEIVING = "receiving"
    TERMINATING = "terminating"
    COMPLETE = "complete"
    ABORTED = "aborted"


@dataclass(slots=True)
class Metrics:
    blocks_accepted: int = 0
    naks_sent: int = 0
    bytes_received: int = 0
    start_ts: float = field(default_factory=time.monotonic)
    end_ts: float | None = None

    @property
    def duration_s(self) -> float:
        if self.end_ts is None:
            return 0.0
        return max(0.0, self.end_ts - self.start_ts)

    @property
    def throughput_mbps(self) -> float:
        if self.duration_s <= 0:
            return 0.0
        return (self.bytes_received * 8 / 1_000_000) / self.duration_s


@dataclass(slots=True)
class Session:
    expected_seq: int = 1
    block_count: int = 1
    consecutive_naks: int = 0
    phase: Phase = Phase.AWAITING_START
    buffer: bytearray = field(default_factory=bytearray)


def next_seq(seq: int) -> int:
    seq = (seq + 1) % 256
    return seq or 1


@dataclass(slots=True)
class Receiver:
    """Drives one XMODEM-1K/CRC reception over ``transport``.

    ``run`` returns the reassembled payload or raises an XmodemError; a
    partially received buffer is never returned.
    """

    transport: Transport
    timeout_s: float = DEFAULT_TIMEOUT_S
    handshake_attempts: int = DEFAULT_HANDSHAKE_ATTEMPTS
    max_naks: int = DEFAULT_MAX_NAKS
    expect_trailer: bool = True
    strip_padding: bool = False
    metrics: Metrics = field(init=False, default_factory=Metrics)
    phase: Phase = field(init=False, default=Phase.AWAITING_START)

    def run(self) -> bytes:
        self.metrics = Metrics()
        session = Session()
        try:
            data = self._run(session)
        except Exception:
            session.phase = Phase.ABORTED
            raise
        finally:
            self.phase = session.phase
            self.metrics.end_ts = time.monotonic()
        return data

    def _run(self, session: Session) -> bytes:
        log.info("requesting CRC-mode transmission")
        self._request_start()
        frame = self._read_frame()

        session.phase = Phase.RECEIVING
        while self._dispatch(frame) == STX:
            self._handle_block(session, frame)
            frame = self._read_frame()
            if frame[0] == STX:
                session.block_count += 1

        session.phase = Phase.TERMINATING
        log.info("EOT received; blocks=%d bytes=%d", self.metrics.blocks_accepted, len(session.buffer))
        self._send(ACK)
        if self.expect_trailer:
            trailer = self._read_lead()
            if trailer[0] in (ETB, EOT):
                self._send(ACK)

        data = bytes(session.buffer)
        if self.strip_padding:
            data = data.rstrip(bytes((SUB,)))
        session.phase = Phase.COMPLETE
        return data

    def _request_start(self) -> None:
        for attempt in range(1, self.handshake_attempts + 1):
            self.transport.set_write_deadline(time.monotonic() + self.timeout_s)
            try:
                self.transport.write(bytes((CRC_MODE,)))
            except TransportTimeout:
                log.debug("handshake write timeout; attempt=%d", attempt)
                continue
            return
        raise HandshakeTimeout(f"no 'C' written after {self.handshake_attempts} attempts")

    def _dispatch(self, frame: bytes) -> int:
        lead = frame[0]
        if lead in (STX, EOT):
            return lead
        if lead == CAN:
            raise TransferCancelled("sender cancelled the transfer")
        if lead == SOH:
            raise FramingError("128-byte blocks are not supported")
        raise FramingError(f"unexpected control byte {lead:#04x}")

    def _handle_block(self, session: Session, frame: bytes) -> None:
        ok = validate(frame[HEADER_LEN:])
        block = Block.from_bytes(frame)

        if not ok or not block.complement_ok or block.seq != session.expected_seq:
            if session.consecutive_naks >= self.max_naks:
                raise RetryLimitExceeded(
                    f"block {session.expected_seq} rejected {session.consecutive_naks} times"
                )
            log.debug(
                "rejecting block; seq=%d expected=%d crc_ok=%s",
                block.seq,
                session.expected_seq,
                ok,
            )
            self._send(NAK)
            session.consecutive_naks += 1
            self.metrics.naks_sent += 1
            return

        session.buffer.extend(block.payload)
        self._send(ACK)
        log.debug("accepted block; seq=%d count=%d", block.seq, session.block_count)
        session.expected_seq = next_seq(session.expected_seq)
        session.consecutive_naks = 0
        self.metrics.blocks_accepted += 1
        self.metrics.bytes_received += BLOCK_PAYLOAD

    def _send(self, code: int) -> None:
        self.transport.set_write_deadline(time.monotonic() + self.timeout_s)
        self.transport.write(bytes((code,)))

    def _read_exact(self, size: int) -> bytes:
        buf = bytearray()
        while len(buf) < size:
            chunk = self.transport.read(size - len(buf))
            if not chunk:
                break
            buf.extend(chunk)
        return bytes(buf)

    def _read_lead(self) -> bytes:
        self.transport.set_read_deadline(time.monotonic() + self.timeout_s)
        lead = self.transport.read(1)
        if not lead:
            raise TransportError(ErrorKind.CLOSED, "connection closed by peer")
        return lead

    def _read_frame(self) -> bytes:
        lead = self._read_lead()
        if lead[0] != STX:
            return lead
        rest = self._read_exact(FRAME_LEN - 1)
        if len(rest) < FRAME_LEN - 1:
            raise FramingError(f"truncated block: got {len(rest) + 1} of {FRAME_LEN} bytes")
        return lead + rest


def receive(transport: Transport, **options) -> bytes:
    return Receiver(transport, **options).run()
