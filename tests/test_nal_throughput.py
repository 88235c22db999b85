import time

import pytest

from tsprobe.nal import Codec
from tsprobe.nal_throughput import NalThroughput

AUD = b"\x00\x00\x01\x09\xf0"
SPS = b"\x00\x00\x01\x67" + bytes(range(1, 11))
PAYLOAD = AUD + SPS


def test_counts_each_nal_type():
    meter = NalThroughput(Codec.H264)
    meter.record(PAYLOAD, 100.0)
    meter.record(PAYLOAD, 100.5)
    assert meter.statistics[9].total_count == 2
    assert meter.statistics[7].total_count == 2
    assert set(meter.statistics) == {7, 9}


def test_refreshes_once_per_second():
    meter = NalThroughput()
    assert meter.record(PAYLOAD, 100.0) is True
    assert meter.record(PAYLOAD, 100.5) is False
    assert meter.record(PAYLOAD, 101.0) is True


def test_per_nal_rates_sum_to_total():
    meter = NalThroughput(window=1.0)
    meter.record(PAYLOAD, 100.0)
    assert meter.bps == len(PAYLOAD) * 8
    assert sum(s.bps for s in meter.statistics.values()) == meter.bps
    assert meter.statistics[9].bps == len(AUD) * 8
    assert meter.statistics[7].bps == len(SPS) * 8


def test_leading_bytes_credit_first_unit():
    meter = NalThroughput()
    meter.record(b"\xff\xff" + PAYLOAD, 100.0)
    assert meter.statistics[9].bps == (2 + len(AUD)) * 8


def test_samples_expire():
    meter = NalThroughput(window=1.0)
    meter.record(PAYLOAD, 100.0)
    meter.record(b"", 102.0)
    assert meter.bps == 0
    assert meter.statistics[7].bps == 0
    assert meter.statistics[7].total_count == 1


def test_h265_nal_types():
    meter = NalThroughput(Codec.H265)
    meter.record(b"\x00\x00\x01\x40\x01" + b"\x00\x00\x01\x42\x01", 100.0)
    assert set(meter.statistics) == {32, 33}


def test_report_layout():
    meter = NalThroughput()
    meter.record(PAYLOAD, 100.0)
    text = meter.report(100.0)
    lines = text.splitlines()
    assert lines[0].startswith("UnitType")
    assert lines[0].endswith(time.ctime(100.0))
    assert lines[1].startswith("    0x07 ")
    assert "SPS" in lines[1]
    assert lines[2].startswith("    0x09 ")
    assert lines[2].endswith("  1")
    assert lines[-1].endswith("Mb/ps")
    total = float(lines[-1].split()[1])
    assert total == pytest.approx(meter.bps / 1e6, abs=0.001)


def test_report_uses_given_names():
    meter = NalThroughput()
    meter.record(AUD, 100.0)
    text = meter.report(100.0, {9: "delimiter"})
    assert "delimiter" in text.splitlines()[1]


def test_invalid_window():
    with pytest.raises(ValueError):
        NalThroughput(window=0)