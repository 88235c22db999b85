"""Table of the PIDs an inspector follows, with their payload types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Iterator, List

from tsprobe.packets import MAX_PID


class PidType(IntEnum):
    """What a followed PID carries."""

    UNKNOWN = 0
    SCTE35 = 1
    OP47 = 2
    VIDEO = 3


@dataclass
class PidEntry:
    """State kept for one followed PID."""

    pid: int
    pid_type: PidType = PidType.UNKNOWN
    video_pid: int = 0
    last_video_pts: int = 0
    message_count: int = 0

    def describe(self) -> str:
        """Return a one-line summary of the entry."""
        return (
            f"pid[0x{self.pid:04x}].pid = 0x{self.pid:04x}, "
            f"pt = {int(self.pid_type)}, videoPid = 0x{self.video_pid:04x}"
        )


class PidTable:
    """PIDs of interest, kept in the order they were first declared."""

    def __init__(self) -> None:
        self._entries: Dict[int, PidEntry] = {}

    @staticmethod
    def _check(pid: int) -> None:
        if not 0 <= pid <= MAX_PID:
            raise ValueError(f"PID 0x{pid:x} out of range")

    def set_type(self, pid: int, pid_type: PidType) -> PidEntry:
        """Follow ``pid`` as ``pid_type`` and return its entry.

        A PID already followed keeps its place and its state; only its
        type changes.
        """
        self._check(pid)
        entry = self._entries.get(pid)
        if entry is None:
            entry = PidEntry(pid, PidType(pid_type))
            self._entries[pid] = entry
        else:
            entry.pid_type = PidType(pid_type)
        return entry

    def count(self, pid_type: PidType) -> int:
        """Return how many followed PIDs are of ``pid_type``."""
        return sum(1 for entry in self._entries.values() if entry.pid_type == pid_type)

    def ordered(self) -> List[PidEntry]:
        """Return the followed entries in declaration order."""
        return list(self._entries.values())

    def __getitem__(self, pid: int) -> PidEntry:
        return self._entries[pid]

    def __contains__(self, pid: object) -> bool:
        return pid in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PidEntry]:
        return iter(self.ordered())

    def describe(self) -> str:
        """Return one summary line per followed PID, in ascending PID order."""
        return "\n".join(self._entries[pid].describe() for pid in sorted(self._entries))