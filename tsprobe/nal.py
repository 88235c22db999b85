"""Location of H.264 / H.265 NAL units in elementary stream payloads."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator

START_CODE = b"\x00\x00\x01"

H264_NAL_NAMES: Dict[int, str] = {
    0: "UNSPECIFIED",
    1: "slice_layer_without_partitioning_rbsp non-IDR",
    2: "slice_data_partition_a_layer_rbsp",
    3: "slice_data_partition_b_layer_rbsp",
    4: "slice_data_partition_c_layer_rbsp",
    5: "slice_layer_without_partitioning_rbsp IDR",
    6: "SEI",
    7: "SPS",
    8: "PPS",
    9: "AUD",
    10: "EO SEQ",
    11: "EO STREAM",
    12: "FILLER",
    13: "SPS-EXT",
    14: "PREFIX NAL",
    15: "SUBSET SPS",
    16: "DPS",
    19: "AUX SLICE",
    20: "SLICE EXT",
    21: "SLICE EXT DEPTH",
}

H265_NAL_NAMES: Dict[int, str] = {
    0: "TRAIL_N",
    1: "TRAIL_R",
    2: "TSA_N",
    3: "TSA_R",
    4: "STSA_N",
    5: "STSA_R",
    6: "RADL_N",
    7: "RADL_R",
    8: "RASL_N",
    9: "RASL_R",
    16: "BLA_W_LP",
    17: "BLA_W_RADL",
    18: "BLA_N_LP",
    19: "IDR_W_RADL",
    20: "IDR_N_LP",
    21: "CRA_NUT",
    32: "VPS",
    33: "SPS",
    34: "PPS",
    35: "AUD",
    36: "EOS",
    37: "EOB",
    38: "FD",
    39: "SEI_PREFIX",
    40: "SEI_SUFFIX",
}


class Codec(Enum):
    """Video codec whose NAL header layout applies."""

    H264 = "h264"
    H265 = "h265"


def _nal_type(codec: Codec, header: int) -> int:
    if codec is Codec.H264:
        return header & 0x1F
    return (header >> 1) & 0x3F


def _nal_name(codec: Codec, nal_type: int) -> str:
    table = H264_NAL_NAMES if codec is Codec.H264 else H265_NAL_NAMES
    return table.get(nal_type, "RESERVED")


@dataclass(frozen=True)
class NalUnit:
    """One NAL unit, from its start code up to the next start code."""

    offset: int
    nal_type: int
    codec: Codec
    data: bytes

    @property
    def name(self) -> str:
        return _nal_name(self.codec, self.nal_type)

    @property
    def length(self) -> int:
        return len(self.data)


def _start_codes(data: bytes) -> Iterator[int]:
    position = data.find(START_CODE)
    while position != -1 and position + len(START_CODE) < len(data):
        yield position
        position = data.find(START_CODE, position + len(START_CODE))


def iter_nal_units(data: bytes, codec: Codec = Codec.H264) -> Iterator[NalUnit]:
    """Yield every NAL unit whose ``00 00 01`` start code and header byte lie in ``data``.

    Each unit's bytes run from its start code to the next start code or the end.
    """
    payload = bytes(data)
    offsets = list(_start_codes(payload))
    for offset, end in zip(offsets, offsets[1:] + [len(payload)]):
        header = payload[offset + len(START_CODE)]
        yield NalUnit(offset, _nal_type(codec, header), codec, payload[offset:end])


def strip_emulation_prevention(data: bytes) -> bytes:
    """Remove emulation prevention bytes, turning ``00 00 03`` into ``00 00``.

    The first byte is never taken as the start of a pattern, so a leading
    start code is left as it is.
    """
    buffer = bytearray(data)
    index = 1
    while index + 2 < len(buffer):
        if buffer[index] == 0 and buffer[index + 1] == 0 and buffer[index + 2] == 3:
            del buffer[index + 2]
        index += 1
    return bytes(buffer)


def es_filename(seq: int, pid: int, stream_id: int, nal_type: int, name: str) -> str:
    """Return the file name used when writing one NAL unit to disk."""
    return (
        f"{seq:014d}-es-pid-{pid:04x}-streamId-{stream_id:02x}"
        f"-nal-{nal_type:02x}-name-{name}.bin"
    )