"""Decoding of H.264 picture timing SEI messages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from tsprobe.bitreader import BitReader

LTN_ENCODER_PID = 0x31
VIDEO_ENGINE_PID = 0x100

# Start code (3 bytes), NAL header, SEI payload type; timing bits follow.
SEI_PAYLOAD_OFFSET = 5

# Clock timestamps carried for each pic_struct value (Table D-1); others carry none.
_CLOCKS_PER_PIC_STRUCT = (1, 1, 1, 2, 2, 3, 3, 2, 3)

_DEFAULT_CPB_REMOVAL_DELAY_LENGTH = 15
_DEFAULT_DPB_OUTPUT_DELAY_LENGTH = 11
_LTN_CPB_REMOVAL_DELAY_LENGTH = 8
_LTN_DPB_OUTPUT_DELAY_LENGTH = 0
_VIDEO_ENGINE_PIC_STRUCT = 8


@dataclass(frozen=True)
class ClockTimestamp:
    """One clock timestamp from a picture timing message."""

    ct_type: int
    nuit_field_based: bool
    counting_type: int
    full_timestamp: bool
    discontinuity: bool
    cnt_dropped: bool
    n_frames: int
    seconds: int = 0
    minutes: int = 0
    hours: int = 0

    @property
    def timecode(self) -> str:
        return f"{self.hours:02d}:{self.minutes:02d}:{self.seconds:02d}.{self.n_frames:02d}"


@dataclass(frozen=True)
class PicTiming:
    """The pic_struct and the clock timestamps present in one message."""

    pic_struct: int
    clocks: Tuple[ClockTimestamp, ...]


def _read_clock(reader: BitReader) -> Optional[ClockTimestamp]:
    if not reader.read_flag():
        return None
    ct_type = reader.read(2)
    nuit = reader.read_flag()
    counting_type = reader.read(5)
    full = reader.read_flag()
    discontinuity = reader.read_flag()
    dropped = reader.read_flag()
    n_frames = reader.read(8)

    seconds = minutes = hours = 0
    if full:
        seconds = reader.read(6)
        minutes = reader.read(6)
        hours = reader.read(5)
    elif reader.read_flag():
        seconds = reader.read(6)
        if reader.read_flag():
            minutes = reader.read(6)
            if reader.read_flag():
                hours = reader.read(5)

    return ClockTimestamp(
        ct_type=ct_type,
        nuit_field_based=nuit,
        counting_type=counting_type,
        full_timestamp=full,
        discontinuity=discontinuity,
        cnt_dropped=dropped,
        n_frames=n_frames,
        seconds=seconds,
        minutes=minutes,
        hours=hours,
    )


def parse_pic_timing(nal: bytes, pid: int = 0) -> PicTiming:
    """Decode a picture timing SEI NAL unit, start code included.

    Emulation prevention bytes must already be removed. The HRD delay
    field widths are fixed per source: PID 0x31 streams use an 8-bit CPB
    delay and no DPB delay, others 15 and 11 bits; PID 0x100 streams are
    always decoded as pic_struct 8. A clock timestamp cut short by the end
    of the data is left out. Raises ValueError if the data ends before
    pic_struct.
    """
    reader = BitReader(bytes(nal)[SEI_PAYLOAD_OFFSET:])
    if pid == LTN_ENCODER_PID:
        cpb_length, dpb_length = _LTN_CPB_REMOVAL_DELAY_LENGTH, _LTN_DPB_OUTPUT_DELAY_LENGTH
    else:
        cpb_length, dpb_length = _DEFAULT_CPB_REMOVAL_DELAY_LENGTH, _DEFAULT_DPB_OUTPUT_DELAY_LENGTH

    try:
        reader.read(cpb_length)
        reader.read(dpb_length)
        pic_struct = reader.read(4)
    except EOFError as exc:
        raise ValueError("picture timing message is too short") from exc

    if pid == VIDEO_ENGINE_PID:
        pic_struct = _VIDEO_ENGINE_PIC_STRUCT

    count = _CLOCKS_PER_PIC_STRUCT[pic_struct] if pic_struct < len(_CLOCKS_PER_PIC_STRUCT) else 0
    clocks = []
    for _ in range(count):
        try:
            clock = _read_clock(reader)
        except EOFError:
            break
        if clock is not None:
            clocks.append(clock)
    return PicTiming(pic_struct, tuple(clocks))


def format_pic_timing(timing: PicTiming, clock: ClockTimestamp) -> str:
    """Return the one-line description of a clock timestamp."""
    return (
        f"PIC TIMING {clock.timecode} struct:{timing.pic_struct} "
        f"disc:{int(clock.discontinuity)} ct:{clock.ct_type} "
        f"counting_type:{clock.counting_type} nuit:{int(clock.nuit_field_based)} "
        f"full_timestamp:{int(clock.full_timestamp)} cnt_dropped:{int(clock.cnt_dropped)}"
    )