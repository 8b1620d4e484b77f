from __future__ import annotations

from xmrecv.crc import TABLE, crc16


def test_check_value():
    assert crc16(b"123456789") == 0x31C3


def test_empty_input_is_zero():
    assert crc16(b"") == 0


def test_deterministic():
    data = bytes(range(256)) * 4
    assert crc16(data) == crc16(data) == crc16(bytearray(data))


def test_incremental_matches_one_shot():
    assert crc16(b"6789", crc16(b"12345")) == crc16(b"123456789")


def test_table_matches_canonical_entries():
    assert len(TABLE) == 256
    assert isinstance(TABLE, tuple)
    assert TABLE[0] == 0x0000
    assert TABLE[1] == 0x1021
    assert TABLE[16] == 0x1231
    assert TABLE[128] == 0x9188
    assert TABLE[255] == 0x1EF0


def test_single_byte_values():
    assert crc16(b"A") == 0x58E5
    assert crc16(b"\x00") == 0x0000
