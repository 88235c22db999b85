"""Extraction of UDP datagrams from captured Ethernet or loopback frames."""

from __future__ import annotations

import ipaddress
import struct
from dataclasses import dataclass
from typing import Optional

ETHER_HEADER_SIZE = 14
LOOPBACK_HEADER_SIZE = 4
IP_HEADER_SIZE = 20
UDP_HEADER_SIZE = 8
ETHERTYPE_IP = 0x0800
IPPROTO_UDP = 17
_LOOPBACK_FAMILY = 2


@dataclass(frozen=True)
class UdpDatagram:
    """Addressing and payload of one UDP datagram."""

    source_ip: str
    source_port: int
    destination_ip: str
    destination_port: int
    length: int
    payload: bytes

    @property
    def source(self) -> str:
        return f"{self.source_ip}:{self.source_port}"

    @property
    def destination(self) -> str:
        return f"{self.destination_ip}:{self.destination_port}"


def _parse_ip_udp(frame: bytes, ip_offset: int) -> Optional[tuple]:
    udp_offset = ip_offset + IP_HEADER_SIZE
    if len(frame) < udp_offset + UDP_HEADER_SIZE:
        return None
    if frame[ip_offset + 9] != IPPROTO_UDP:
        return None
    src = str(ipaddress.IPv4Address(bytes(frame[ip_offset + 12:ip_offset + 16])))
    dst = str(ipaddress.IPv4Address(bytes(frame[ip_offset + 16:ip_offset + 20])))
    sport, dport, length = struct.unpack("!HHH", frame[udp_offset:udp_offset + 6])
    return src, sport, dst, dport, length, udp_offset + UDP_HEADER_SIZE


def parse_ethernet_udp(frame: bytes) -> Optional[UdpDatagram]:
    """Return the UDP datagram in an Ethernet/IPv4 frame, or None for other traffic.

    The payload is bounded by the UDP length field, so Ethernet padding is dropped.
    """
    if len(frame) < ETHER_HEADER_SIZE + IP_HEADER_SIZE + UDP_HEADER_SIZE:
        return None
    (ethertype,) = struct.unpack("!H", frame[12:14])
    if ethertype != ETHERTYPE_IP:
        return None
    parsed = _parse_ip_udp(frame, ETHER_HEADER_SIZE)
    if parsed is None:
        return None
    src, sport, dst, dport, length, start = parsed
    payload = bytes(frame[start:start + max(length - UDP_HEADER_SIZE, 0)])
    return UdpDatagram(src, sport, dst, dport, length, payload)


def parse_captured_udp(frame: bytes) -> Optional[UdpDatagram]:
    """Return the UDP datagram in a loopback or Ethernet capture, or None if not UDP.

    A frame that starts with the loopback family word 2 is treated as a loopback
    capture; anything else is assumed to be Ethernet. The payload is everything
    after the UDP header.
    """
    if len(frame) >= LOOPBACK_HEADER_SIZE and struct.unpack("<I", frame[:4])[0] == _LOOPBACK_FAMILY:
        ip_offset = LOOPBACK_HEADER_SIZE
    else:
        ip_offset = ETHER_HEADER_SIZE
    parsed = _parse_ip_udp(frame, ip_offset)
    if parsed is None:
        return None
    src, sport, dst, dport, length, start = parsed
    return UdpDatagram(src, sport, dst, dport, length, bytes(frame[start:]))