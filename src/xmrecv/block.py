from __future__ import annotations

from dataclasses import dataclass

from .constants import BLOCK_BODY, BLOCK_PAYLOAD, CRC_LEN, FRAME_LEN, HEADER_LEN, STX, SUB
from .crc import crc16
from .errors import FramingError


def validate(raw: bytes) -> bool:
    """Check the CRC trailer of a block body (header already stripped).

    Raises FramingError when ``raw`` is too short to hold a 1K payload plus
    trailer. A checksum mismatch is not an error and returns False.
    """
    if len(raw) < BLOCK_BODY:
        raise FramingError(f"block too small: {len(raw)} < {BLOCK_BODY} bytes")
    expected = int.from_bytes(raw[-CRC_LEN:], "big")
    return crc16(raw[:-CRC_LEN]) == expected


@dataclass(frozen=True, slots=True)
class Block:
    control: int
    seq: int
    complement: int
    payload: bytes
    crc: int

    @property
    def complement_ok(self) -> bool:
        return self.seq ^ self.complement == 0xFF

    def to_bytes(self) -> bytes:
        header = bytes((self.control, self.seq, self.complement))
        return header + self.payload + self.crc.to_bytes(CRC_LEN, "big")

    @staticmethod
    def from_bytes(raw: bytes) -> "Block":
        if len(raw) < FRAME_LEN:
            raise FramingError(f"frame too small: {len(raw)} < {FRAME_LEN} bytes")
        control, seq, complement = raw[0], raw[1], raw[2]
        payload = bytes(raw[HEADER_LEN : HEADER_LEN + BLOCK_PAYLOAD])
        crc = int.from_bytes(raw[HEADER_LEN + BLOCK_PAYLOAD : FRAME_LEN], "big")
        return Block(control=control, seq=seq, complement=complement, payload=payload, crc=crc)

    @staticmethod
    def data(seq: int, payload: bytes) -> "Block":
        if len(payload) > BLOCK_PAYLOAD:
            raise ValueError(f"payload too large: {len(payload)}")
        padded = payload + bytes((SUB,)) * (BLOCK_PAYLOAD - len(payload))
        seq &= 0xFF
        return Block(control=STX, seq=seq, complement=seq ^ 0xFF, payload=padded, crc=crc16(padded))
