# tsprobe

Tools for looking inside MPEG transport streams, whether they sit in a
packet-aligned `.ts` file, inside a pcap capture of UDP or RTP traffic, or
arrive as PES payloads carrying H.264 / H.265 video. Pure Python, no
dependencies beyond the standard library.

## Installation

```
pip install .
```

For running the test suite:

```
pip install ".[test]"
pytest
```

## Commands

### tsprobe-pid-drop

Copy a packet-aligned transport stream file, dropping packets by PID.
Every PID passes until it is removed. A trailing partial packet is ignored.

```
tsprobe-pid-drop -i input.ts -o output.ts -R 0x1fff -R 0x32
```

- `-i <input.ts>` input file (mandatory)
- `-o <output.ts>` output file (mandatory)
- `-R 0xNNNN` remove a PID; may be repeated. `0x2000` removes every PID.
- `-A 0xNNNN` pass a PID again; may be repeated. `0x2000` passes every PID.
- `-h` / `-?` show usage.

Options are applied in the order given, so this keeps only PID 0x31:

```
tsprobe-pid-drop -i input.ts -o output.ts -R 0x2000 -A 0x31
```

The dropped PIDs are listed before copying starts. The options `-f`, `-n`
and `-p` are accepted and echoed in the start-up message, but do not change
what is written.

### tsprobe-pcap2ts

Extract the payloads sent to one UDP destination from a pcap file
(Ethernet or loopback captures, little- or big-endian, micro- or
nanosecond timestamps). A leading 12-byte RTP header is stripped so only
TS packets remain; raw mode keeps the whole UDP payload, which is handy for
RTP or A/324 streams where the headers matter.

```
tsprobe-pcap2ts -i capture.pcap -o output.ts -a 234.1.1.1 -p 9200
```

- `-i <input.pcap>` capture to read (mandatory)
- `-o <output.ts>` file to write; without it the capture is only scanned
- `-a <address>` destination IPv4 address (needs `-p`)
- `-p <port>` destination UDP port (needs `-a`)
- `-v` print each record's timestamp, interval, size and addresses; give it
  twice for hex dumps as well
- `-r` raw mode: write UDP payloads untouched
- `-h` / `-?` show usage.

Gaps of more than 100 seconds between records are flagged. A matching
datagram that is neither TS nor RTP-wrapped TS stops the run with a hex dump
of its payload.

## Library

```python
from tsprobe.packets import iter_packets, packet_pid
from tsprobe.pcapfile import read_pcap
from tsprobe.netframes import parse_captured_udp
from tsprobe.payload import PayloadDetector
from tsprobe.ippid import parse_ippid

# Count packets per PID in a transport stream file.
counts = {}
with open("input.ts", "rb") as fh:
    for packet in iter_packets(fh):
        pid = packet_pid(packet)
        counts[pid] = counts.get(pid, 0) + 1

# Classify the UDP flows in a capture.
detector = PayloadDetector()
for record in read_pcap("capture.pcap"):
    datagram = parse_captured_udp(record.data)
    if datagram is not None:
        print(datagram.destination, detector.detect(datagram.payload))

# Parse an "address:port.pid" specification.
target = parse_ippid("227.1.20.45:4001.0x31")
print(target.ui_address_ip_pid)   # 227.1.20.45:4001.0x31
```

Modules:

- `tsprobe.packets` – `packet_pid`, `iter_packets` and `parse_hex_pid`
  for 188-byte transport packets.
- `tsprobe.ippid` – `parse_ippid` accepts `udp://host:port`,
  `a.b.c.d:port.0xpid` and `a.b.c.d:port.pid`, returning an `IpPid`;
  anything else raises `ValueError`.
- `tsprobe.pcapfile` – `PcapReader`, `read_pcap`, `PcapRecord.to_bytes`
  and `file_header` for reading and writing classic pcap files;
  malformed files raise `PcapError`.
- `tsprobe.netframes` – `parse_ethernet_udp` and `parse_captured_udp`
  turn frames into `UdpDatagram` objects, or `None` for non-UDP traffic.
- `tsprobe.payload` – `PayloadDetector` classifies a flow as one of the
  `PayloadType` values: plain TS, RTP-wrapped TS, A/324 CTP, SMPTE 2110
  video/audio/ancillary, or a generic byte stream once it stays
  unidentified; `detect_rtp_offset` finds an RTP header in front of TS.
- `tsprobe.recording` – `recording_prefix` and `recording_suffix` name
  recording files (colons become dots; non-TS flows always get `.pcap`).
- `tsprobe.pid_drop` – `PidFilter` and `filter_stream`, behind the
  `tsprobe-pid-drop` command.
- `tsprobe.pcap2ts` – `extract`, behind the `tsprobe-pcap2ts` command;
  raises `ExtractionError` for datagrams that carry no TS.
- `tsprobe.pcap_queue` – `PcapQueue`, a thread-safe hand-off between a
  capture side (`push`) and a processing side (`service`), with
  `rebalance` releasing idle buffer slots after a stall.
- `tsprobe.nal` – `iter_nal_units` finds H.264 / H.265 NAL units
  (`NalUnit`, `Codec`), `strip_emulation_prevention` removes
  `00 00 03` escapes, `es_filename` names per-NAL output files.
- `tsprobe.bitreader` – `BitReader`, an MSB-first bit reader.
- `tsprobe.pic_timing` – `parse_pic_timing` decodes an H.264 picture
  timing SEI NAL unit into a `PicTiming` with its `ClockTimestamp`
  entries; `format_pic_timing` renders one clock as a line of text.
- `tsprobe.nal_throughput` – `NalThroughput` measures per-NAL-type
  bitrate and counts from PES payloads and renders a summary table.
- `tsprobe.pid_table` – `PidTable` keeps SCTE-35 and video PIDs
  (`PidType`, `PidEntry`) in the order they were declared.

## What it does not do

tsprobe works on files and on bytes handed to it. It does not capture from
a network interface or open UDP/RTP streams, extract PES packets or PSI
sections from transport packets, decode SCTE-35 splice messages, PAT/PMT
tables or TR 101 290 alarms, or draw an interactive monitoring screen.
`PidTable` and `PcapQueue` hold state for such a tool, but the tool itself
is not included.