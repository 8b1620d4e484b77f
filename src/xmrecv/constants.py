from __future__ import annotations

SOH = 0x01
STX = 0x02
EOT = 0x04
ACK = 0x06
NAK = 0x15
ETB = 0x17
CAN = 0x18
SUB = 0x1A  # pad byte for short final blocks
CRC_MODE = ord("C")

HEADER_LEN = 3  # control, seq, complement
BLOCK_PAYLOAD = 1024
CRC_LEN = 2
BLOCK_BODY = BLOCK_PAYLOAD + CRC_LEN
FRAME_LEN = HEADER_LEN + BLOCK_BODY

DEFAULT_TIMEOUT_S = 10.0
DEFAULT_HANDSHAKE_ATTEMPTS = 10
DEFAULT_MAX_NAKS = 10
