import ipaddress
import struct

import pytest

from tsprobe.pcap2ts import ExtractionError, extract, main
from tsprobe.pcapfile import PcapRecord, file_header

ADDRESS = "227.1.20.80"
PORT = 4001


def _ts(count=7, pid=0x100):
    return b"".join(
        bytes([0x47, (pid >> 8) & 0x1F, pid & 0xFF, 0x10]) + bytes(184) for _ in range(count)
    )


def _rtp():
    return bytes([0x80, 33]) + bytes(10)


def _frame(payload, dst=ADDRESS, dport=PORT, proto=17):
    eth = bytes(12) + b"\x08\x00"
    ip = (
        bytes([0x45, 0, 0, 0, 0, 0, 0, 0, 64, proto, 0, 0])
        + ipaddress.IPv4Address("10.0.0.1").packed
        + ipaddress.IPv4Address(dst).packed
    )
    udp = struct.pack("!HHHH", 5000, dport, 8 + len(payload), 0)
    return eth + ip + udp + payload


def _records(*frames):
    return [PcapRecord(1, i, frame) for i, frame in enumerate(frames)]


def test_extract_plain_ts():
    ts = _ts()
    assert list(extract(_records(_frame(ts)), ADDRESS, PORT)) == [ts]


def test_extract_strips_rtp_header():
    ts = _ts()
    assert list(extract(_records(_frame(_rtp() + ts)), ADDRESS, PORT)) == [ts]


def test_extract_raw_keeps_header():
    payload = _rtp() + _ts()
    assert list(extract(_records(_frame(payload)), ADDRESS, PORT, raw=True)) == [payload]


def test_extract_skips_other_destinations():
    records = _records(
        _frame(_ts(), dport=PORT + 1),
        _frame(_ts(), dst="227.1.20.81"),
        _frame(_ts(), proto=6),
    )
    assert list(extract(records, ADDRESS, PORT)) == []


def test_extract_without_target_matches_nothing():
    assert list(extract(_records(_frame(_ts())))) == []


def test_extract_rejects_unknown_payload():
    records = _records(_frame(_ts()), _frame(bytes(range(1, 40))))
    with pytest.raises(ExtractionError) as info:
        list(extract(records, ADDRESS, PORT))
    assert info.value.packet_number == 2
    assert info.value.payload == bytes(range(1, 40))


def _write_capture(path, frames):
    path.write_bytes(file_header() + b"".join(r.to_bytes() for r in _records(*frames)))


def test_main_writes_transport_stream(tmp_path, capsys):
    capture = tmp_path / "in.pcap"
    output = tmp_path / "out.ts"
    first, second = _ts(pid=0x31), _ts(pid=0x32)
    _write_capture(capture, [_frame(first), _frame(_rtp() + second), _frame(_ts(), dport=9)])
    rc = main(["-i", str(capture), "-o", str(output), "-a", ADDRESS, "-p", str(PORT)])
    assert rc == 0
    assert output.read_bytes() == first + second
    assert "Wrote 14 packets." in capsys.readouterr().out


def test_main_raw_mode(tmp_path):
    capture = tmp_path / "in.pcap"
    output = tmp_path / "out.bin"
    payload = _rtp() + _ts()
    _write_capture(capture, [_frame(payload)])
    assert main(["-i", str(capture), "-o", str(output), "-a", ADDRESS, "-p", str(PORT), "-r"]) == 0
    assert output.read_bytes() == payload


def test_main_reports_bad_payload(tmp_path):
    capture = tmp_path / "in.pcap"
    _write_capture(capture, [_frame(bytes(range(1, 40)))])
    assert main(["-i", str(capture), "-a", ADDRESS, "-p", str(PORT)]) == 1


def test_main_requires_input():
    assert main(["-a", ADDRESS, "-p", str(PORT)]) == 1


def test_main_requires_port_with_address(tmp_path):
    assert main(["-i", str(tmp_path / "x.pcap"), "-a", ADDRESS]) == 1


def test_main_requires_address_with_port(tmp_path):
    assert main(["-i", str(tmp_path / "x.pcap"), "-p", str(PORT)]) == 1


def test_main_rejects_malformed_address(tmp_path):
    assert main(["-i", str(tmp_path / "x.pcap"), "-a", "227.1.20", "-p", str(PORT)]) == 1


def test_main_rejects_bad_capture(tmp_path):
    capture = tmp_path / "bad.pcap"
    capture.write_bytes(b"not a capture file at all")
    assert main(["-i", str(capture), "-a", ADDRESS, "-p", str(PORT)]) == 1