"""Various constants used by the sdpkit library."""

from __future__ import annotations

import datetime as _datetime


SUPPORTED_SDP_VERSIONS: list[int] = [0]

NETWORK_INTERNET: str = "IN"
ADDRESS_TYPE_IPV4: str = "IP4"
ADDRESS_TYPE_IPV6: str = "IP6"
UNSPECIFIED_IPV4: str = "0.0.0.0"

DEFAULT_USERNAME: str = "-"
DEFAULT_PTIME: str = "20"
DEFAULT_DTMF_EVENTS: str = "0-16"

# name of the RFC 4733 (DTMF) and RFC 3389 (comfort noise) formats
RFC4733: str = "telephone-event"
COMFORT_NOISE: str = "CN"
RFC4733_PAYLOAD_TYPE: int = 101

DYNAMIC_PAYLOAD_START: int = 96
PAYLOAD_TYPE_MAX: int = 127

FORMAT_WILDCARD: str = "*"

# payload types offered by default, in preference order
SUPPORTED_CODECS: list[int] = [8, 0, 9, 18, 96]
SUPPORTED_CODEC_NAMES: list[str] = ["PCMA", "PCMU", "G722", "G729", "opus"]

# NTP timestamps in SDP count seconds since 1900-01-01
NTP_EPOCH: _datetime.datetime = _datetime.datetime(1900, 1, 1, tzinfo=_datetime.timezone.utc)

# transport protocols, as registered with IANA for the m= line
RTP_AVP: str = "RTP/AVP"
RTP_SAVP: str = "RTP/SAVP"
UDPTL: str = "udptl"

T38_FORMAT: str = "t38"
