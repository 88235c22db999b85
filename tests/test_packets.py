import io

import pytest

from tsprobe.packets import (
    ALL_PIDS,
    MAX_PID,
    PACKET_SIZE,
    SYNC_BYTE,
    iter_packets,
    packet_pid,
    parse_hex_pid,
)


def make_packet(pid: int, fill: int = 0xFF) -> bytes:
    header = bytes([SYNC_BYTE, (pid >> 8) & 0x1F, pid & 0xFF, 0x10])
    return header + bytes([fill]) * (PACKET_SIZE - 4)


@pytest.mark.parametrize("pid", [0, 0x31, 0x100, 0x1ABC, MAX_PID])
def test_packet_pid_round_trip(pid):
    assert packet_pid(make_packet(pid)) == pid


def test_packet_pid_null_packet():
    assert packet_pid(b"\x47\x1f\xff\x10") == MAX_PID


def test_packet_pid_ignores_flag_bits():
    packet = bytearray(make_packet(0x123))
    packet[1] |= 0xE0
    assert packet_pid(bytes(packet)) == 0x123


def test_packet_pid_too_short():
    with pytest.raises(ValueError):
        packet_pid(b"\x47\x00")


def test_iter_packets_bytes_drops_partial_tail():
    data = make_packet(1) + make_packet(2) + make_packet(3) + b"\x47" * 10
    packets = list(iter_packets(data))
    assert [packet_pid(p) for p in packets] == [1, 2, 3]
    assert all(len(p) == PACKET_SIZE for p in packets)


def test_iter_packets_stream():
    data = b"".join(make_packet(pid) for pid in (5, 6))
    packets = list(iter_packets(io.BytesIO(data)))
    assert b"".join(packets) == data


def test_iter_packets_empty():
    assert list(iter_packets(b"")) == []


def test_parse_hex_pid_valid():
    assert parse_hex_pid("0x31") == 0x31
    assert parse_hex_pid("0x1fff") == MAX_PID


def test_parse_hex_pid_all_pids_allowed_with_larger_maximum():
    assert parse_hex_pid("0x2000", maximum=ALL_PIDS) == ALL_PIDS


@pytest.mark.parametrize("text", ["31", "0x", "x31", ""])
def test_parse_hex_pid_malformed(text):
    with pytest.raises(ValueError):
        parse_hex_pid(text)


def test_parse_hex_pid_above_maximum():
    with pytest.raises(ValueError):
        parse_hex_pid("0x2000")