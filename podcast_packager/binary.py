from __future__ import annotations

import struct

# Fixed-width integer codecs shared by the ZIP and ID3 encoders.

UINT16_MAX = 0xFFFF
UINT32_MAX = 0xFFFFFFFF
SYNCSAFE_LIMIT = 1 << 28

_U16_LE = struct.Struct("<H")
_U32_LE = struct.Struct("<I")
_U32_BE = struct.Struct(">I")


def u16le(value: int) -> bytes:
    return _U16_LE.pack(value)


def u32le(value: int) -> bytes:
    return _U32_LE.pack(value)


def u32be(value: int) -> bytes:
    return _U32_BE.pack(value)


def encode_syncsafe(size: int) -> bytes:
    """Encode ``size`` as four 7-bit bytes, most significant group first."""
    if not 0 <= size < SYNCSAFE_LIMIT:
        raise ValueError(f"syncsafe size out of range: {size}")
    return bytes((size >> (7 * (3 - i))) & 0x7F for i in range(4))


def decode_syncsafe(data: bytes) -> int:
    if len(data) != 4:
        raise ValueError(f"syncsafe integer needs 4 bytes, got {len(data)}")
    size = 0
    for byte in data:
        size = (size << 7) | (byte & 0x7F)
    return size
