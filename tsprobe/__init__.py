"""Inspection and extraction tools for MPEG transport streams, pcap captures and H.264/H.265 NAL units."""

__version__ = "1.0.0"