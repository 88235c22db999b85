"""Extract transport stream payloads from UDP/RTP pcap captures."""

from __future__ import annotations

import argparse
import ipaddress
import re
import sys
from contextlib import ExitStack
from typing import Iterable, Iterator, Optional, Sequence

from tsprobe.netframes import parse_captured_udp
from tsprobe.packets import PACKET_SIZE, SYNC_BYTE
from tsprobe.pcapfile import PcapError, PcapReader, PcapRecord

RTP_HEADER_SIZE = 12
_RTP_VERSION_BYTE = 0x80
_INTERVAL_WARNING_US = 100 * 1000000

USAGE = """\
Usage: {prog}
  -i <input.pcap>
  -o <output.ts>
  -a <ip address Eg. 234.1.1.1>
  -p <ip port Eg. 9200>
  -v increase verbosity level
  -r operate in raw mode, just extract the pcap payload without consdieration for TS packets.
     Useful for extracting RTP or A/324 streams and preserving headers."""


class ExtractionError(ValueError):
    """Raised when a datagram carries neither TS nor RTP-wrapped TS."""

    def __init__(self, packet_number: int, payload: bytes):
        super().__init__(f"Error at packet {packet_number}")
        self.packet_number = packet_number
        self.payload = payload


def extract(
    records: Iterable[PcapRecord],
    address: Optional[str] = None,
    port: int = 0,
    raw: bool = False,
) -> Iterator[bytes]:
    """Yield the payload bytes of datagrams sent to ``address:port``.

    In raw mode each UDP payload is yielded whole; otherwise a leading
    12-byte RTP header is removed so that only TS packets remain.
    """
    target = str(ipaddress.IPv4Address(address if address else 0))
    matched = 0
    for record in records:
        datagram = parse_captured_udp(record.data)
        if datagram is None:
            continue
        if datagram.destination_port != port or datagram.destination_ip != target:
            continue
        matched += 1
        payload = datagram.payload
        if raw:
            yield payload
            continue
        offset = 0
        if not payload or payload[0] != SYNC_BYTE:
            first = payload[0] if payload else None
            after_rtp = payload[RTP_HEADER_SIZE] if len(payload) > RTP_HEADER_SIZE else None
            if first != _RTP_VERSION_BYTE and after_rtp != SYNC_BYTE:
                raise ExtractionError(matched, payload)
            offset = RTP_HEADER_SIZE
        yield payload[offset:]


def _hexdump(data: bytes, per_row: int) -> str:
    body = "".join(
        f"{byte:02x}" + (" " if (i + 1) % per_row else "\n") for i, byte in enumerate(data)
    )
    return body + "\n"


def _trace(records: Iterable[PcapRecord], verbose: int) -> Iterator[PcapRecord]:
    last = None
    for record in records:
        if last is None:
            interval_us = 0
        else:
            interval_us = (record.ts_sec - last[0]) * 1_000_000 + (record.ts_usec - last[1])
        last = (record.ts_sec, record.ts_usec)
        if interval_us > _INTERVAL_WARNING_US:
            print("!Packet interval > 100ms")
        if verbose:
            print(
                f"{record.ts_sec}.{record.ts_usec:06d} [{interval_us:8d}(us)] "
                f"({record.orig_len:4d}) - ",
                end="",
            )
        if verbose > 1:
            print(_hexdump(record.data[:32], 32), end="")
        if verbose:
            datagram = parse_captured_udp(record.data)
            if datagram is not None:
                print(f"{datagram.source} -> {datagram.destination}  = ", end="")
                print(_hexdump(record.data[:31], 32), end="")
        yield record


class _UsageError(Exception):
    pass


class _Parser(argparse.ArgumentParser):
    def error(self, message):
        raise _UsageError(message)


def _atoi(text: str) -> int:
    match = re.match(r"\s*[+-]?\d+", text)
    return int(match.group(0)) if match else 0


def _build_parser() -> _Parser:
    parser = _Parser(prog="pcap2ts", add_help=False)
    parser.add_argument("-?", "-h", dest="help", action="store_true")
    parser.add_argument("-i", dest="input")
    parser.add_argument("-o", dest="output")
    parser.add_argument("-a", dest="address")
    parser.add_argument("-p", dest="port", type=_atoi, default=0)
    parser.add_argument("-v", dest="verbose", action="count", default=0)
    parser.add_argument("-r", dest="raw", action="store_true")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    usage = USAGE.format(prog="pcap2ts")
    try:
        args = _build_parser().parse_args(argv)
    except _UsageError:
        print(usage)
        return 1
    if args.help:
        print(usage)
        return 1
    if args.address is not None:
        try:
            ipaddress.IPv4Address(args.address)
        except ValueError:
            print(usage)
            print("\n *** -a is malformed ***", file=sys.stderr)
            return 1
    if not args.input:
        print(usage)
        print("\n *** -i is mandatory ***", file=sys.stderr)
        return 1
    if args.address and not args.port:
        print(usage)
        print("\n *** -p is mandatory ***", file=sys.stderr)
        return 1
    if not args.address and args.port:
        print(usage)
        print("\n *** -a is mandatory ***", file=sys.stderr)
        return 1

    written = 0
    with ExitStack() as stack:
        sink = None
        if args.output:
            try:
                sink = stack.enter_context(open(args.output, "wb"))
            except OSError:
                print(f"Cannot open output file {args.output}", file=sys.stderr)
                return 1
        try:
            stream = stack.enter_context(open(args.input, "rb"))
            reader = PcapReader(stream)
        except (OSError, PcapError) as exc:
            print(f"Cannot open pcap file: {exc}", file=sys.stderr)
            return 1

        if args.port:
            print(f"Extracting TS from udp/ip destination {args.address}:{args.port} to {args.output}")

        try:
            for chunk in extract(_trace(reader, args.verbose), args.address, args.port, args.raw):
                if sink is None:
                    continue
                sink.write(chunk)
                written += 1 if args.raw else len(chunk) // PACKET_SIZE
        except ExtractionError as exc:
            print(f"Error at packet {exc.packet_number}", file=sys.stderr)
            print(_hexdump(exc.payload, 16), end="")
            return 1
        except PcapError as exc:
            print(f"Cannot read from pcap file: {exc}", file=sys.stderr)

    if args.output:
        print(f"Wrote {written} packets.")
    print()
    return 0