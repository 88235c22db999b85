"""Remove transport stream packets by PID."""

from __future__ import annotations

import argparse
import re
import sys
from typing import BinaryIO, List, Optional, Sequence, Set, Tuple

from tsprobe.packets import ALL_PIDS, MAX_PID, iter_packets, packet_pid, parse_hex_pid

USAGE = """\
A tool to drop packets from an ISO13818 MPEGTS file, by pid.
Input file is assumed to be properly packet aligned.
Usage:
  -i <input.ts>
  -o <output.ts>
  -R pid 0xNNNN to be removed [def: none], multiple -R instances supported. [0x2000 all pids]
  -A pid 0xNNNN to be added [def: 0x2000], multiple -A instances supported. [0x2000 all pids]
Examples:
    -i input.ts -o output.ts -R 0x2000 -A 0x31       - output only pids 0x31 and 0x32
    -i input.ts -o output.ts -R 0x1fff -R 0x32       - output all pids except 0x1fff and 0x32"""


class PidFilter:
    """Set of PIDs that pass; every PID passes until removed."""

    def __init__(self):
        self._dropped: Set[int] = set()

    @staticmethod
    def _check(pid: int) -> None:
        if not 0 <= pid <= ALL_PIDS:
            raise ValueError(f"PID 0x{pid:x} out of range")

    def remove(self, pid: int) -> None:
        """Stop passing ``pid``; 0x2000 removes every PID."""
        self._check(pid)
        if pid == ALL_PIDS:
            self._dropped = set(range(MAX_PID + 1))
        else:
            self._dropped.add(pid)

    def add(self, pid: int) -> None:
        """Pass ``pid`` again; 0x2000 passes every PID."""
        self._check(pid)
        if pid == ALL_PIDS:
            self._dropped.clear()
        else:
            self._dropped.discard(pid)

    def passes(self, pid: int) -> bool:
        return pid not in self._dropped

    def dropped(self) -> List[int]:
        """Return the dropped PIDs in ascending order."""
        return sorted(self._dropped)


def filter_stream(source: BinaryIO, sink: BinaryIO, pid_filter: PidFilter) -> Tuple[int, int]:
    """Copy the packets of ``source`` that pass the filter to ``sink``.

    Returns the number of packets read and the number written.
    """
    read = written = 0
    for packet in iter_packets(source):
        read += 1
        if pid_filter.passes(packet_pid(packet)):
            sink.write(packet)
            written += 1
    return read, written


class _UsageError(Exception):
    pass


class _Parser(argparse.ArgumentParser):
    def error(self, message):
        raise _UsageError(message)


def _atoi(text: str) -> int:
    match = re.match(r"\s*[+-]?\d+", text)
    return int(match.group(0)) if match else 0


def _pid_op(op: str):
    def convert(text: str) -> Tuple[str, int]:
        return op, parse_hex_pid(text, ALL_PIDS)

    return convert


def _build_parser() -> _Parser:
    parser = _Parser(prog="pid_drop", add_help=False)
    parser.add_argument("-?", "-h", dest="help", action="store_true")
    parser.add_argument("-f", dest="fixups", action="store_true")
    parser.add_argument("-i", dest="input")
    parser.add_argument("-o", dest="output")
    parser.add_argument("-n", dest="count", type=_atoi, default=0)
    parser.add_argument("-p", dest="position", type=_atoi, default=0)
    parser.add_argument("-R", dest="ops", action="append", type=_pid_op("remove"))
    parser.add_argument("-A", dest="ops", action="append", type=_pid_op("add"))
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        args = _build_parser().parse_args(argv)
    except _UsageError:
        print(USAGE)
        return 1
    if args.help:
        print(USAGE)
        return 1
    if not args.input:
        print(USAGE)
        print("\n-i is mandatory", file=sys.stderr)
        return 1
    if not args.output:
        print("\n-o is mandatory", file=sys.stderr)
        return 1

    pid_filter = PidFilter()
    last_pid = 0
    for op, pid in args.ops or []:
        if op == "remove":
            pid_filter.remove(pid)
        else:
            pid_filter.add(pid)
        last_pid = pid

    for pid in pid_filter.dropped():
        print(f"Dropping content on PID 0x{pid:04x}")

    try:
        source = open(args.input, "rb")
    except OSError:
        print(f"Unable to open input file '{args.input}'", file=sys.stderr)
        return 1
    with source:
        try:
            sink = open(args.output, "wb")
        except OSError:
            print(f"Unable to open output file '{args.output}'", file=sys.stderr)
            return 1
        with sink:
            print(
                f"Dropping {args.count} packets on pid 0x{last_pid:04x} starting at packet "
                f"#{args.position}, {'will' if args.fixups else 'WILL NOT'} correct CC in headers"
            )
            filter_stream(source, sink, pid_filter)
    return 0