"""Naming of stream recordings."""

from __future__ import annotations

import os
from typing import Optional, Union

from tsprobe.payload import PayloadType

DEFAULT_DIRECTORY = "/tmp"
PCAP_SUFFIX = ".pcap"
TS_SUFFIX = ".ts"

_ALWAYS_PCAP = frozenset(
    {
        PayloadType.BYTE_STREAM,
        PayloadType.A324_CTP,
        PayloadType.SMPTE2110_20_VIDEO,
        PayloadType.SMPTE2110_30_AUDIO,
        PayloadType.SMPTE2110_40_ANC,
    }
)


def recording_prefix(
    directory: Optional[Union[str, os.PathLike]], interface: str, destination: str
) -> str:
    """Return the file name prefix for a recording of ``destination``.

    An existing directory is joined with ``/``; anything else is used as a
    name prefix joined with ``-``. Colons are replaced by dots so the
    names copy cleanly with scp.
    """
    base = DEFAULT_DIRECTORY if directory is None else os.fspath(directory)
    separator = "/" if os.path.isdir(base) else "-"
    prefix = f"{base}{separator}nic_monitor-{interface}-{destination}"
    return prefix.replace(":", ".")


def recording_suffix(payload_type: PayloadType, record_as_ts: bool) -> str:
    """Return ``.ts`` or ``.pcap``; non-TS flows are always recorded as pcap."""
    if payload_type in _ALWAYS_PCAP or not record_as_ts:
        return PCAP_SUFFIX
    return TS_SUFFIX