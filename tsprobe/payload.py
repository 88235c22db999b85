"""Classification of UDP payloads seen on the wire."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Tuple

from tsprobe.packets import PACKET_SIZE, SYNC_BYTE

RTP_HEADER_SIZE = 12
_UNIDENTIFIED_LIMIT = 12


class PayloadType(Enum):
    """What a UDP flow is carrying."""

    UNDEFINED = auto()
    UDP_TS = auto()
    RTP_TS = auto()
    A324_CTP = auto()
    SMPTE2110_20_VIDEO = auto()
    SMPTE2110_30_AUDIO = auto()
    SMPTE2110_40_ANC = auto()
    BYTE_STREAM = auto()


# RTP payload type -> (classification, number of sightings that must be exceeded)
_RTP_KINDS: Dict[int, Tuple[PayloadType, int]] = {
    97: (PayloadType.A324_CTP, 2),
    96: (PayloadType.SMPTE2110_20_VIDEO, 4),
    98: (PayloadType.SMPTE2110_30_AUDIO, 4),
    100: (PayloadType.SMPTE2110_40_ANC, 4),
}


@dataclass
class PayloadDetector:
    """Stateful payload classifier for one flow.

    Transport stream payloads are recognised immediately; RTP-carried
    A/324 and SMPTE 2110 flows need several consistent datagrams, and a
    flow that stays unidentified long enough is treated as a byte stream.
    """

    hits: Counter = field(default_factory=Counter)
    unidentified: int = 0

    def detect(self, payload: bytes) -> PayloadType:
        """Classify one UDP payload, updating the detector's evidence."""
        length = len(payload)

        if length % PACKET_SIZE == 0 and length >= PACKET_SIZE and payload[0] == SYNC_BYTE:
            return PayloadType.UDP_TS

        if (
            length > RTP_HEADER_SIZE
            and (length - RTP_HEADER_SIZE) % PACKET_SIZE == 0
            and payload[RTP_HEADER_SIZE] == SYNC_BYTE
        ):
            return PayloadType.RTP_TS

        kind = None
        # RTP version 2, no padding/extension bits examined beyond the mask.
        if length >= 2 and (payload[0] & 0xCF) == 0x80:
            kind = _RTP_KINDS.get(payload[1] & 0x7F)

        if kind is None:
            self.hits[PayloadType.A324_CTP] = 0
        else:
            payload_type, threshold = kind
            self.hits[payload_type] += 1
            if self.hits[payload_type] > threshold:
                return payload_type

        previous = self.unidentified
        self.unidentified += 1
        if previous > _UNIDENTIFIED_LIMIT:
            return PayloadType.BYTE_STREAM

        return PayloadType.UNDEFINED


def detect_rtp_offset(payload: bytes) -> int:
    """Return 12 when the payload looks like RTP-wrapped TS, else 0."""
    if (
        payload
        and payload[0] != SYNC_BYTE
        and len(payload) > RTP_HEADER_SIZE
        and payload[RTP_HEADER_SIZE] == SYNC_BYTE
    ):
        return RTP_HEADER_SIZE
    return 0