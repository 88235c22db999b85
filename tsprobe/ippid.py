"""Parsing of ``a.b.c.d:port.pid`` and ``udp://host:port`` stream addresses."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

_UDP_URL = re.compile(r"udp://([^:]{1,99}):\s*([+-]?\d+)")
_INT = r"\s*([+-]?\d+)"
_DOTTED = rf"{_INT}\.{_INT}\.{_INT}\.{_INT}:{_INT}\."
_HEX_FORM = re.compile(_DOTTED + r"0x\s*([0-9a-fA-F]+)")
_DEC_FORM = re.compile(_DOTTED + _INT)


@dataclass(frozen=True)
class IpPid:
    """A stream address with an optional PID."""

    address: str
    port: int
    pid: int = 0
    digits: Optional[Tuple[int, int, int, int]] = None
    hex_pid: bool = True

    @property
    def ui_address_ip(self) -> str:
        return f"{self.address}:{self.port}"

    @property
    def ui_address_ip_pid(self) -> str:
        pid = f"0x{self.pid:x}" if self.hex_pid else str(self.pid)
        return f"{self.address}:{self.port}.{pid}"


def _valid(digits: Tuple[int, ...], port: int, pid: int) -> bool:
    return (
        all(0 <= d <= 255 for d in digits)
        and 0 < port <= 65535
        and 0 < pid <= 0x1FFF
    )


def parse_ippid(text: str) -> IpPid:
    """Parse a stream address; raise ValueError when no form matches."""
    match = _UDP_URL.match(text)
    if match:
        return IpPid(address=match.group(1), port=int(match.group(2)))

    for pattern, hex_pid in ((_HEX_FORM, True), (_DEC_FORM, False)):
        match = pattern.match(text)
        if not match:
            continue
        groups = match.groups()
        digits = tuple(int(g) for g in groups[:4])
        port = int(groups[4])
        pid = int(groups[5], 16 if hex_pid else 10)
        if _valid(digits, port, pid):
            return IpPid(
                address=".".join(str(d) for d in digits),
                port=port,
                pid=pid,
                digits=digits,  # type: ignore[arg-type]
                hex_pid=hex_pid,
            )

    raise ValueError(f"unable to parse stream address {text!r}")