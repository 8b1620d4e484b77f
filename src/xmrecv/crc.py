"""CRC-16/XMODEM: poly 0x1021, init 0, no reflection, no final xor."""

from __future__ import annotations

POLY = 0x1021


def _build_table() -> tuple[int, ...]:
    table = []
    for i in range(256):
        crc = i << 8
        for _ in range(8):
            if crc & 0x8000:
                crc = ((crc << 1) ^ POLY) & 0xFFFF
            else:
                crc = (crc << 1) & 0xFFFF
        table.append(crc)
    return tuple(table)


TABLE = _build_table()


def crc16(data: bytes, crc: int = 0) -> int:
    """Return the CRC of ``data``, continuing from ``crc`` when given."""
    for byte in data:
        crc = ((crc << 8) ^ TABLE[((crc >> 8) ^ byte) & 0xFF]) & 0xFFFF
    return crc
