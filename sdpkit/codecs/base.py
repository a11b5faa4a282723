"""Base classes describing known RTP codecs."""

from __future__ import annotations

import enum

from ..helpers import slots_dataclass


__all__ = [
    "CodecUse",
    "CodingFamily",
    "CodecInfo",
]


class CodecUse(enum.Enum):
    """What a codec payload carries."""

    AUDIO = "audio"
    VIDEO = "video"
    DTMF = "dtmf"
    COMFORT_NOISE = "comfort-noise"


class CodingFamily(enum.Enum):
    """Coarse classification of the coding technique. Informational only."""

    WAVEFORM = "waveform"
    CELP = "celp"
    VOCODER = "vocoder"
    TRANSFORM = "transform"
    HYBRID = "hybrid"
    OTHER = "other"


@slots_dataclass(frozen=True)
class CodecInfo:
    """Static knowledge about a codec, as registered for an RTP payload type."""

    payload_type: int
    name: str
    clock_rate: int
    channels: int
    use: CodecUse
    family: CodingFamily = CodingFamily.OTHER

    @property
    def lower_name(self) -> str:
        """The encoding name, lowercased for case-insensitive comparisons."""
        return self.name.lower()

    @property
    def is_audio(self) -> bool:
        """Whether the codec is an audio codec (DTMF and comfort noise excluded)."""
        return self.use is CodecUse.AUDIO

    @property
    def is_dynamic(self) -> bool:
        return self.payload_type >= 96

    def __str__(self) -> str:
        rtpmap = f"{self.name}/{self.clock_rate}"
        if self.channels > 1:
            rtpmap += f"/{self.channels}"
        return f"{self.payload_type} {rtpmap}"
