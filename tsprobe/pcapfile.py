"""Reading and writing of classic libpcap capture files."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import BinaryIO, Iterator, Optional

MAGIC = 0xA1B2C3D4
MAGIC_NANOSECOND = 0xA1B23C4D
VERSION_MAJOR = 2
VERSION_MINOR = 4
DLT_EN10MB = 1
DEFAULT_SNAPLEN = 0x400000

_GLOBAL_HEADER = "IHHiIII"
_RECORD_HEADER = "IIII"
GLOBAL_HEADER_SIZE = struct.calcsize("<" + _GLOBAL_HEADER)
RECORD_HEADER_SIZE = struct.calcsize("<" + _RECORD_HEADER)


class PcapError(ValueError):
    """Raised when a capture file is malformed or truncated."""


@dataclass
class PcapRecord:
    """One captured frame with its timestamp."""

    ts_sec: int
    ts_usec: int
    data: bytes
    orig_len: Optional[int] = None

    def __post_init__(self) -> None:
        if self.orig_len is None:
            self.orig_len = len(self.data)

    @property
    def caplen(self) -> int:
        return len(self.data)

    @property
    def timestamp(self) -> float:
        return self.ts_sec + self.ts_usec / 1_000_000

    def to_bytes(self) -> bytes:
        """Serialise as a little-endian record header followed by the frame."""
        header = struct.pack(
            "<" + _RECORD_HEADER, self.ts_sec, self.ts_usec, self.caplen, self.orig_len
        )
        return header + bytes(self.data)


def file_header(snaplen: int = DEFAULT_SNAPLEN, linktype: int = DLT_EN10MB) -> bytes:
    """Return a little-endian microsecond pcap global header."""
    return struct.pack(
        "<" + _GLOBAL_HEADER, MAGIC, VERSION_MAJOR, VERSION_MINOR, 0, 0, snaplen, linktype
    )


class PcapReader:
    """Iterate over the records of a pcap stream."""

    def __init__(self, stream: BinaryIO):
        self._stream = stream
        header = stream.read(GLOBAL_HEADER_SIZE)
        if len(header) < GLOBAL_HEADER_SIZE:
            raise PcapError("truncated pcap global header")
        magic_le = struct.unpack("<I", header[:4])[0]
        magic_be = struct.unpack(">I", header[:4])[0]
        if magic_le in (MAGIC, MAGIC_NANOSECOND):
            self._order, magic = "<", magic_le
        elif magic_be in (MAGIC, MAGIC_NANOSECOND):
            self._order, magic = ">", magic_be
        else:
            raise PcapError(f"bad pcap magic 0x{magic_le:08x}")
        self.nanosecond = magic == MAGIC_NANOSECOND
        (_, self.version_major, self.version_minor, self.thiszone,
         self.sigfigs, self.snaplen, self.linktype) = struct.unpack(
            self._order + _GLOBAL_HEADER, header
        )

    def __iter__(self) -> Iterator[PcapRecord]:
        fmt = self._order + _RECORD_HEADER
        while header := self._stream.read(RECORD_HEADER_SIZE):
            if len(header) < RECORD_HEADER_SIZE:
                raise PcapError("truncated pcap record header")
            ts_sec, ts_frac, incl_len, orig_len = struct.unpack(fmt, header)
            data = self._stream.read(incl_len)
            if len(data) < incl_len:
                raise PcapError("truncated pcap record data")
            ts_usec = ts_frac // 1000 if self.nanosecond else ts_frac
            yield PcapRecord(ts_sec, ts_usec, data, orig_len)


def read_pcap(path) -> Iterator[PcapRecord]:
    """Yield every record of the capture file at ``path``."""
    with open(path, "rb") as stream:
        yield from PcapReader(stream)