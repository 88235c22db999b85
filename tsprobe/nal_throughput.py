"""Per-NAL-type throughput measurement of elementary stream payloads."""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Mapping, Optional, Tuple

from tsprobe.nal import H264_NAL_NAMES, H265_NAL_NAMES, Codec, iter_nal_units

MAX_NALS = 63

_HEADER = "UnitType                                               Name   Mb/ps  Count @ "
_FOOTER = "--------                                                    "


class _Window:
    """Bit counts over a sliding time window."""

    def __init__(self, span: float):
        self.span = span
        self._samples: Deque[Tuple[float, int]] = deque()

    def add(self, now: float, bits: int) -> None:
        self._samples.append((now, bits))

    def rate(self, now: float) -> int:
        """Drop samples older than the window; return bits per second."""
        horizon = now - self.span
        while self._samples and self._samples[0][0] <= horizon:
            self._samples.popleft()
        return int(sum(bits for _, bits in self._samples) / self.span)


@dataclass
class NalStatistic:
    """Running figures for one NAL unit type."""

    nal_type: int
    total_count: int = 0
    bps: int = 0


class NalThroughput:
    """Measure the bitrate of each NAL unit type in a stream of PES payloads.

    The bytes between one start code and the next are credited to the
    earlier unit; bytes before the first start code go to the first unit.
    Rates are refreshed once per whole second of ``now``.
    """

    def __init__(self, codec: Codec = Codec.H264, window: float = 1.0):
        if window <= 0:
            raise ValueError("window must be positive")
        self.codec = codec
        self.window = window
        self.bps = 0
        self.statistics: Dict[int, NalStatistic] = {}
        self._total = _Window(window)
        self._windows: Dict[int, _Window] = {}
        self._last_report: Optional[int] = None

    def _statistic(self, nal_type: int) -> NalStatistic:
        if nal_type not in self.statistics:
            self.statistics[nal_type] = NalStatistic(nal_type)
            self._windows[nal_type] = _Window(self.window)
        return self.statistics[nal_type]

    def record(self, payload: bytes, now: float) -> bool:
        """Account one PES payload at time ``now``.

        Returns True when a new second began and the rates were refreshed.
        """
        data = bytes(payload)
        self._total.add(now, len(data) * 8)

        previous: Optional[int] = None
        last_offset = 0
        for unit in iter_nal_units(data, self.codec):
            self._statistic(unit.nal_type).total_count += 1
            if previous is not None:
                self._windows[previous].add(now, (unit.offset - last_offset) * 8)
                last_offset = unit.offset
            previous = unit.nal_type
        if previous is not None:
            self._windows[previous].add(now, (len(data) - last_offset) * 8)

        second = int(now)
        if second == self._last_report:
            return False
        self._last_report = second
        for nal_type, statistic in self.statistics.items():
            statistic.bps = self._windows[nal_type].rate(now)
        self.bps = self._total.rate(now)
        return True

    def report(self, now: float, names: Optional[Mapping[int, str]] = None) -> str:
        """Return the per-NAL summary table, stamped with ``now``."""
        if names is None:
            names = H264_NAL_NAMES if self.codec is Codec.H264 else H265_NAL_NAMES
        lines = [_HEADER + time.ctime(now)]
        summed = 0
        for nal_type in sorted(self.statistics):
            if nal_type >= MAX_NALS:
                continue
            statistic = self.statistics[nal_type]
            summed += statistic.bps
            lines.append(
                f"    0x{nal_type:02x} {names.get(nal_type, ''):>50} "
                f"{statistic.bps / 1e6:7.3f}  {statistic.total_count}"
            )
        lines.append(f"{_FOOTER}{summed / 1e6:7.3f}  Mb/ps")
        return "\n".join(lines) + "\n"