import pytest

from tsprobe.ippid import parse_ippid


def test_hex_pid_form():
    result = parse_ippid("239.1.1.1:4001.0x31")
    assert result.address == "239.1.1.1"
    assert result.port == 4001
    assert result.pid == 0x31
    assert result.digits == (239, 1, 1, 1)
    assert result.ui_address_ip == "239.1.1.1:4001"
    assert result.ui_address_ip_pid == "239.1.1.1:4001.0x31"


def test_decimal_pid_form():
    result = parse_ippid("239.1.1.1:4001.49")
    assert result.pid == 49
    assert result.hex_pid is False
    assert result.ui_address_ip_pid == "239.1.1.1:4001.49"


def test_udp_url_form():
    result = parse_ippid("udp://227.1.20.45:4001")
    assert result.address == "227.1.20.45"
    assert result.port == 4001
    assert result.pid == 0
    assert result.ui_address_ip == "227.1.20.45:4001"
    assert result.ui_address_ip_pid == "227.1.20.45:4001.0x0"


def test_udp_url_with_query():
    result = parse_ippid("udp://227.1.20.45:4001?localaddr=192.168.20.45")
    assert result.port == 4001


def test_round_trip_through_ui_string():
    original = parse_ippid("10.0.0.7:1234.0x1fff")
    assert parse_ippid(original.ui_address_ip_pid) == original


@pytest.mark.parametrize(
    "text",
    [
        "256.1.1.1:4001.0x31",
        "1.2.3.4:0.0x31",
        "1.2.3.4:70000.0x31",
        "1.2.3.4:4001.0x2000",
        "1.2.3.4:4001.0",
        "1.2.3.4:4001",
        "garbage",
        "",
        "udp://:4001",
    ],
)
def test_rejected(text):
    with pytest.raises(ValueError):
        parse_ippid(text)


def test_dataclass_is_frozen():
    result = parse_ippid("1.2.3.4:5.0x10")
    with pytest.raises(AttributeError):
        result.port = 6  # type: ignore[misc]
    assert result.port == 5
    assert result.ui_address_ip == "1.2.3.4:5"