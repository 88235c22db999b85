"""MPEG transport stream packet helpers."""

from __future__ import annotations

import io
import re
from typing import BinaryIO, Iterator, Union

PACKET_SIZE = 188
SYNC_BYTE = 0x47
MAX_PID = 0x1FFF
ALL_PIDS = 0x2000

_HEX_PID = re.compile(r"0x([0-9a-fA-F]+)")


def packet_pid(packet: bytes) -> int:
    """Return the 13-bit PID carried in a transport packet header."""
    if len(packet) < 3:
        raise ValueError("a transport packet header needs at least 3 bytes")
    return ((packet[1] & 0x1F) << 8) | packet[2]


def iter_packets(data: Union[bytes, bytearray, memoryview, BinaryIO]) -> Iterator[bytes]:
    """Yield whole 188-byte packets from bytes or a binary stream.

    A trailing partial packet is ignored, as the input is assumed aligned.
    """
    stream = data if hasattr(data, "read") else io.BytesIO(bytes(data))
    while len(chunk := stream.read(PACKET_SIZE)) == PACKET_SIZE:
        yield chunk


def parse_hex_pid(text: str, maximum: int = MAX_PID) -> int:
    """Parse a PID given as ``0xNNNN``; raise ValueError if malformed or above ``maximum``."""
    match = _HEX_PID.match(text)
    if match is None:
        raise ValueError(f"PID must be given as 0xNNNN, got {text!r}")
    value = int(match.group(1), 16)
    if value > maximum:
        raise ValueError(f"PID 0x{value:x} exceeds 0x{maximum:x}")
    return value