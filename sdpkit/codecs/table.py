"""
The codecs table: static payload types from :rfc:`3551#section-6`, plus the
conventional assignments for well-known dynamic codecs.
"""

from __future__ import annotations

from typing import Mapping

from frozendict import frozendict

from ..constants import RFC4733, RFC4733_PAYLOAD_TYPE
from .base import CodecInfo, CodecUse, CodingFamily


__all__ = [
    "CODECS",
    "describe_codec",
    "describe_codec_by_name",
    "get_codec_name",
    "get_codec_names",
    "identify_payload_type_by_name",
]


UNKNOWN_CODEC_NAME: str = "Unknown"

_A, _V = CodecUse.AUDIO, CodecUse.VIDEO
_WAVE, _CELP, _VOC = CodingFamily.WAVEFORM, CodingFamily.CELP, CodingFamily.VOCODER
_XFRM, _HYB, _OTHER = CodingFamily.TRANSFORM, CodingFamily.HYBRID, CodingFamily.OTHER

_CODECS_LIST: list[CodecInfo] = [
    # static audio
    CodecInfo(0, "PCMU", 8000, 1, _A, _WAVE),
    CodecInfo(3, "GSM", 8000, 1, _A, _VOC),
    CodecInfo(4, "G723", 8000, 1, _A, _CELP),
    CodecInfo(5, "DVI4", 8000, 1, _A, _WAVE),
    CodecInfo(6, "DVI4", 16000, 1, _A, _WAVE),
    CodecInfo(7, "LPC", 8000, 1, _A, _VOC),
    CodecInfo(8, "PCMA", 8000, 1, _A, _WAVE),
    CodecInfo(9, "G722", 8000, 1, _A, _WAVE),
    CodecInfo(10, "L16", 44100, 2, _A, _WAVE),
    CodecInfo(11, "L16", 44100, 1, _A, _WAVE),
    CodecInfo(12, "QCELP", 8000, 1, _A, _CELP),
    CodecInfo(13, "CN", 8000, 1, CodecUse.COMFORT_NOISE, _OTHER),
    CodecInfo(14, "MPA", 90000, 2, _A, _XFRM),
    CodecInfo(15, "G728", 8000, 1, _A, _CELP),
    CodecInfo(16, "DVI4", 11025, 1, _A, _WAVE),
    CodecInfo(17, "DVI4", 22050, 1, _A, _WAVE),
    CodecInfo(18, "G729", 8000, 1, _A, _CELP),
    # static video
    CodecInfo(25, "CelB", 90000, 0, _V, _OTHER),
    CodecInfo(26, "JPEG", 90000, 0, _V, _XFRM),
    CodecInfo(28, "nv", 90000, 0, _V, _OTHER),
    CodecInfo(31, "H261", 90000, 0, _V, _HYB),
    CodecInfo(32, "MPV", 90000, 0, _V, _HYB),
    CodecInfo(33, "MP2T", 90000, 0, _V, _OTHER),
    CodecInfo(34, "H263", 90000, 0, _V, _HYB),
    # dynamic, conventional assignments
    CodecInfo(96, "opus", 48000, 2, _A, _HYB),
    CodecInfo(97, "AMR", 8000, 1, _A, _CELP),
    CodecInfo(98, "AMR-WB", 16000, 1, _A, _CELP),
    CodecInfo(99, "iLBC", 8000, 1, _A, _CELP),
    CodecInfo(100, "G726-32", 8000, 1, _A, _WAVE),
    CodecInfo(RFC4733_PAYLOAD_TYPE, RFC4733, 8000, 1, CodecUse.DTMF, _OTHER),
    CodecInfo(102, "AAC", 48000, 2, _A, _XFRM),
    CodecInfo(103, "VP8", 90000, 0, _V, _HYB),
    CodecInfo(104, "VP9", 90000, 0, _V, _HYB),
    CodecInfo(105, "H264", 90000, 0, _V, _HYB),
    CodecInfo(106, "H265", 90000, 0, _V, _HYB),
    CodecInfo(107, "AV1", 90000, 0, _V, _HYB),
]

CODECS: Mapping[int, CodecInfo] = frozendict(
    (codec.payload_type, codec) for codec in _CODECS_LIST
)

# the lowest payload type wins for names registered more than once (DVI4, L16)
_CODECS_BY_NAME: Mapping[str, CodecInfo] = frozendict(
    (codec.lower_name, codec) for codec in sorted(_CODECS_LIST, key=lambda c: -c.payload_type)
)


def describe_codec(payload_type: int) -> CodecInfo | None:
    """
    Get the known codec information for an RTP payload type.

    :param payload_type: the RTP payload type.
    :return: the codec information, or None if the payload type is unknown.
    """
    return CODECS.get(payload_type)


def describe_codec_by_name(name: str) -> CodecInfo | None:
    """
    Get the known codec information by encoding name, case-insensitively.

    :param name: the encoding name, as found in a ``rtpmap`` attribute.
    :return: the codec information, or None if the name is unknown.
    """
    return _CODECS_BY_NAME.get(name.lower())


def get_codec_name(payload_type: int) -> str:
    """Get the codec name for a payload type, or ``"Unknown"``."""
    codec = CODECS.get(payload_type)
    return codec.name if codec is not None else UNKNOWN_CODEC_NAME


def get_codec_names(*payload_types: int) -> list[str]:
    return [get_codec_name(payload_type) for payload_type in payload_types]


def identify_payload_type_by_name(name: str) -> tuple[int, CodecUse] | None:
    """
    Find the payload type to use for an encoding name.
    ``telephone-event`` is always mapped to its conventional dynamic payload type.

    :param name: the encoding name.
    :return: a tuple of (payload type, codec use), or None if unknown.
    """
    if name.lower() == RFC4733:
        return RFC4733_PAYLOAD_TYPE, CodecUse.DTMF
    codec = describe_codec_by_name(name)
    if codec is None:
        return None
    return codec.payload_type, codec.use
