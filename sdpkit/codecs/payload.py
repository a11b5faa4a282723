"""
Payload size formulas for fixed-bitrate codecs.

Every sizer computes the number of RTP payload bytes produced by one packet
carrying ``frame_duration_ms`` milliseconds of media.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from typing import ClassVar, Mapping, Union

from frozendict import frozendict

from ..exceptions import CodecParameterError
from ..helpers import Registry
from .base import CodecInfo, CodecUse
from .table import describe_codec, describe_codec_by_name


__all__ = [
    "PayloadSizer",
    "AMR_MODES",
    "AMR_WB_MODES",
    "compute_payload_size",
]


_logger = logging.getLogger(__name__)


# mode bitrate (kbps) -> speech bits per 20 ms frame, from 3GPP TS 26.101 / 26.201
AMR_MODES: Mapping[float, int] = frozendict(
    {4.75: 95, 5.15: 103, 5.9: 118, 6.7: 134, 7.4: 148, 7.95: 159, 10.2: 204, 12.2: 244}
)
AMR_WB_MODES: Mapping[float, int] = frozendict(
    {
        6.6: 132,
        8.85: 177,
        12.65: 253,
        14.25: 285,
        15.85: 317,
        18.25: 365,
        19.85: 397,
        23.05: 461,
        23.85: 477,
    }
)

CN_CLOCK_RATES: frozenset[int] = frozenset({8000, 16000, 32000, 44100, 48000})

_EPSILON: float = 1e-9

CodecRef = Union[CodecInfo, str, int]


def _as_whole(value: float, what: str, codec_name: str) -> int:
    rounded = round(value)
    if abs(value - rounded) > _EPSILON:
        raise CodecParameterError(f"{codec_name}: {what} must be a whole number, got {value:g}")
    return int(rounded)


def _frames(duration_ms: float, frame_ms: float, codec_name: str) -> int:
    count = duration_ms / frame_ms
    rounded = round(count)
    if rounded < 1 or abs(count - rounded) > _EPSILON:
        raise CodecParameterError(
            f"{codec_name}: frame duration must be a multiple of {frame_ms:g}ms, "
            f"got {duration_ms:g}ms"
        )
    return int(rounded)


class PayloadSizer(Registry[str, "PayloadSizer"], ABC, registry=True, registry_attr="_codec_names"):
    """
    Abstract base class for codec payload sizers.
    Concrete subclasses are registered by the lowercase encoding names
    listed in their ``_codec_names`` class attribute.
    """

    _codec_names: ClassVar[str | tuple[str, ...]]

    @classmethod
    @abstractmethod
    def payload_size(
        cls, codec: CodecInfo, duration_ms: float, mode_kbps: float | None
    ) -> int:
        """
        Compute the payload size for the given codec and frame duration.

        :param codec: the codec information.
        :param duration_ms: the packet duration in milliseconds, always positive.
        :param mode_kbps: the codec mode bitrate, for multi-mode codecs.
        :return: the payload size in bytes.
        :raises CodecParameterError: if the duration or mode is not valid for the codec.
        """

    @staticmethod
    def samples(codec: CodecInfo, duration_ms: float) -> int:
        """Number of samples (per channel) in the given duration."""
        return _as_whole(
            codec.clock_rate * duration_ms / 1000, "number of samples", codec.name
        )


class G711Sizer(PayloadSizer):
    """8 bits per sample, :rfc:`3551#section-4.5.14`."""

    _codec_names = ("pcmu", "pcma")

    @classmethod
    def payload_size(cls, codec, duration_ms, mode_kbps):  # noqa: D102
        return cls.samples(codec, duration_ms) * max(codec.channels, 1)


class L16Sizer(PayloadSizer):
    _codec_names = "l16"

    @classmethod
    def payload_size(cls, codec, duration_ms, mode_kbps):  # noqa: D102
        return cls.samples(codec, duration_ms) * 2 * max(codec.channels, 1)


class G722Sizer(PayloadSizer):
    """64 kbit/s regardless of the (historically wrong) 8000 clock rate."""

    _codec_names = "g722"

    @classmethod
    def payload_size(cls, codec, duration_ms, mode_kbps):  # noqa: D102
        return _as_whole(duration_ms * 8, "payload size", codec.name)


class G726Sizer(PayloadSizer):
    """ADPCM at 16, 24, 32 or 40 kbit/s, the rate being part of the encoding name."""

    _codec_names = ("g726", "g726-16", "g726-24", "g726-32", "g726-40")

    rates: ClassVar[frozenset[int]] = frozenset({16, 24, 32, 40})

    @classmethod
    def payload_size(cls, codec, duration_ms, mode_kbps):  # noqa: D102
        _, _, suffix = codec.name.partition("-")
        rate: float | None = int(suffix) if suffix.isdigit() else mode_kbps
        if rate is None or rate not in cls.rates:
            raise CodecParameterError(f"{codec.name}: unsupported mode {rate}")
        return _as_whole(rate * duration_ms / 8, "payload size", codec.name)


class G729Sizer(PayloadSizer):
    """10 bytes per 10 ms frame."""

    _codec_names = "g729"

    @classmethod
    def payload_size(cls, codec, duration_ms, mode_kbps):  # noqa: D102
        return _frames(duration_ms, 10, codec.name) * 10


class G728Sizer(PayloadSizer):
    """LD-CELP at 16 kbit/s, 2.5 ms frames of 5 bytes."""

    _codec_names = "g728"

    @classmethod
    def payload_size(cls, codec, duration_ms, mode_kbps):  # noqa: D102
        return _frames(duration_ms, 2.5, codec.name) * 5


class ILBCSizer(PayloadSizer):
    """
    iLBC, :rfc:`3952`: 38 bytes per 20 ms frame (15.2 kbit/s)
    or 50 bytes per 30 ms frame (13.33 kbit/s).
    Without an explicit mode, it is inferred from the duration, preferring 30 ms.
    """

    _codec_names = "ilbc"

    @classmethod
    def payload_size(cls, codec, duration_ms, mode_kbps):  # noqa: D102
        frame_ms: int
        if mode_kbps is None:
            frame_ms = 30 if math.isclose(duration_ms % 30, 0, abs_tol=_EPSILON) else 20
        elif math.isclose(mode_kbps, 15.2):
            frame_ms = 20
        elif math.isclose(mode_kbps, 13.33):
            frame_ms = 30
        else:
            raise CodecParameterError(f"{codec.name}: unsupported mode {mode_kbps}")
        frame_bytes = 38 if frame_ms == 20 else 50
        return _frames(duration_ms, frame_ms, codec.name) * frame_bytes


class G723Sizer(PayloadSizer):
    """G.723.1: 30 ms frames, 24 bytes at 6.3 kbit/s or 20 bytes at 5.3 kbit/s."""

    _codec_names = ("g723", "g7231")

    @classmethod
    def payload_size(cls, codec, duration_ms, mode_kbps):  # noqa: D102
        mode = 6.3 if mode_kbps is None else mode_kbps
        if math.isclose(mode, 6.3):
            frame_bytes = 24
        elif math.isclose(mode, 5.3):
            frame_bytes = 20
        else:
            raise CodecParameterError(f"{codec.name}: unsupported mode {mode_kbps}")
        return _frames(duration_ms, 30, codec.name) * frame_bytes


class _AMRFamilySizer(PayloadSizer, ABC):
    modes: ClassVar[Mapping[float, int]]
    default_mode: ClassVar[float]

    @classmethod
    def payload_size(cls, codec, duration_ms, mode_kbps):  # noqa: D102
        mode = cls.default_mode if mode_kbps is None else mode_kbps
        bits = next((b for m, b in cls.modes.items() if math.isclose(m, mode)), None)
        if bits is None:
            raise CodecParameterError(f"{codec.name}: unsupported mode {mode}")
        return _frames(duration_ms, 20, codec.name) * math.ceil(bits / 8)


class AMRSizer(_AMRFamilySizer):
    _codec_names = "amr"
    modes = AMR_MODES
    default_mode = 12.2


class AMRWBSizer(_AMRFamilySizer):
    _codec_names = "amr-wb"
    modes = AMR_WB_MODES
    default_mode = 23.85


class ComfortNoiseSizer(PayloadSizer):
    """:rfc:`3389` comfort noise: a single noise level byte."""

    _codec_names = "cn"

    @classmethod
    def payload_size(cls, codec, duration_ms, mode_kbps):  # noqa: D102
        if codec.clock_rate not in CN_CLOCK_RATES:
            raise CodecParameterError(
                f"{codec.name}: unsupported clock rate {codec.clock_rate}"
            )
        return 1


class TelephoneEventSizer(PayloadSizer):
    """:rfc:`4733` named events are always 4 bytes."""

    _codec_names = "telephone-event"

    @classmethod
    def payload_size(cls, codec, duration_ms, mode_kbps):  # noqa: D102
        return 4


class GSMSizer(PayloadSizer):
    """GSM full rate: 33 bytes per 20 ms frame."""

    _codec_names = "gsm"

    @classmethod
    def payload_size(cls, codec, duration_ms, mode_kbps):  # noqa: D102
        return _frames(duration_ms, 20, codec.name) * 33


class DVI4Sizer(PayloadSizer):
    """IMA ADPCM: 4 bytes header, then 4 bits per sample."""

    _codec_names = "dvi4"

    @classmethod
    def payload_size(cls, codec, duration_ms, mode_kbps):  # noqa: D102
        samples = cls.samples(codec, duration_ms)
        return 4 + _as_whole(samples / 2, "payload size", codec.name)


def _resolve_codec(codec: CodecRef) -> CodecInfo | None:
    if isinstance(codec, CodecInfo):
        return codec
    if isinstance(codec, int):
        return describe_codec(codec)
    info = describe_codec_by_name(codec)
    if info is None and codec.lower().startswith("g726"):
        info = CodecInfo(0, codec, 8000, 1, CodecUse.AUDIO)
    return info


def compute_payload_size(
    codec: CodecRef, frame_duration_ms: float, mode_bitrate_kbps: float | None = None
) -> int:
    """
    Compute the RTP payload size produced by one packet of the given duration.

    Variable bitrate codecs (e.g. opus, AAC) and video codecs return 0,
    since their payload size depends on the encoder and cannot be known from SDP.

    :param codec: the codec, either as :class:`CodecInfo`, payload type, or encoding name.
    :param frame_duration_ms: the packet duration in milliseconds.
    :param mode_bitrate_kbps: the codec mode bitrate, for multi-mode codecs
        (G.726, iLBC, G.723.1, AMR, AMR-WB).
    :return: the payload size in bytes.
    :raises CodecParameterError: if the duration or mode is not valid for the codec.
    """
    if frame_duration_ms <= 0:
        raise CodecParameterError(
            f"Frame duration must be positive, got {frame_duration_ms:g}ms"
        )
    info = _resolve_codec(codec)
    if info is None:
        _logger.debug(f"Unknown codec {codec!r}, payload size is not computable")
        return 0
    sizer = PayloadSizer.get_registered_class(info.lower_name)
    if sizer is None:
        return 0
    return sizer.payload_size(info, frame_duration_ms, mode_bitrate_kbps)
