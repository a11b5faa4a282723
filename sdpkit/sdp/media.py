"""SDP media descriptions and the codec formats they carry."""

from __future__ import annotations

import copy
import logging
from dataclasses import field as dataclass_field
from typing import Callable, Iterable

from ..constants import (
    COMFORT_NOISE,
    FORMAT_WILDCARD,
    RFC4733,
    RTP_AVP,
    RTP_SAVP,
)
from ..helpers import lower_set, slots_dataclass
from .common import (
    Attribute,
    Bandwidth,
    Connection,
    Key,
    MediaDirection,
    MediaType,
    delete_attributes,
)


__all__ = [
    "Format",
    "Media",
    "is_rtp",
]


_logger = logging.getLogger(__name__)

_RFC4733_LOWER: str = RFC4733.lower()
_COMFORT_NOISE_LOWER: str = COMFORT_NOISE.lower()


def is_rtp(media_type: MediaType | str, protocol: str) -> bool:
    """Whether the formats of an ``m=`` line are RTP payload types described by ``rtpmap``."""
    if media_type not in {MediaType.AUDIO, MediaType.VIDEO}:
        return False
    return RTP_AVP in protocol or RTP_SAVP in protocol


@slots_dataclass
class Format:
    """
    A media format: the payload type of the ``m=`` line, together with
    its ``a=rtpmap``, ``a=fmtp`` and ``a=rtcp-fb`` attributes.
    """

    payload: int
    name: str = ""
    clock_rate: int = 0
    channels: int = 0
    feedback: list[str] = dataclass_field(default_factory=list)
    params: list[str] = dataclass_field(default_factory=list)

    @property
    def lower_name(self) -> str:
        return self.name.lower()

    @property
    def is_dtmf(self) -> bool:
        return self.lower_name == _RFC4733_LOWER

    @property
    def is_comfort_noise(self) -> bool:
        return self.lower_name == _COMFORT_NOISE_LOWER

    @property
    def is_audio(self) -> bool:
        """Whether this is a media format, that is neither DTMF nor comfort noise."""
        return not (self.is_dtmf or self.is_comfort_noise)

    @property
    def rtpmap(self) -> str:
        """The value of the ``a=rtpmap`` attribute for this format, without payload type."""
        value = f"{self.name}/{self.clock_rate}"
        if self.channels > 1:
            value += f"/{self.channels}"
        return value

    def __str__(self) -> str:
        return self.name


@slots_dataclass
class Media:
    """
    A media description, starting with an ``m=`` line, defined in :rfc:`8866#section-5.14`.

    A port of 0 means the flow is disabled. Connections, if any, override the
    session level connection. For non-RTP protocols the formats list is empty,
    and the raw formats are kept in ``format_description``.
    """

    type: MediaType | str
    port: int = 0
    port_count: int = 0
    protocol: str = RTP_AVP
    information: str = ""
    connections: list[Connection] = dataclass_field(default_factory=list)
    bandwidth: list[Bandwidth] = dataclass_field(default_factory=list)
    keys: list[Key] = dataclass_field(default_factory=list)
    attributes: list[Attribute] = dataclass_field(default_factory=list)
    mode: MediaDirection = MediaDirection.UNSPECIFIED
    ptime: str = ""
    formats: list[Format] = dataclass_field(default_factory=list)
    format_description: str = ""

    @property
    def is_rtp(self) -> bool:
        return is_rtp(self.type, self.protocol)

    @property
    def is_disabled(self) -> bool:
        return self.port <= 0

    def disabled_copy(self) -> Media:
        """Return a deep copy of this media flow, disabled (port 0) and with no direction."""
        media = copy.deepcopy(self)
        media.port = 0
        media.mode = MediaDirection.UNSPECIFIED
        return media

    def delete_attribute(self, name: str) -> int:
        """Remove all the attributes with the given name, returning how many were removed."""
        return delete_attributes(self.attributes, name)

    def find_format_by_payload(self, payload: int) -> Format | None:
        """
        Find the format with the given payload type.

        :param payload: the payload type to look for.
        :return: the format, or None if not found.
        """
        for media_format in self.formats:
            if media_format.payload == payload:
                return media_format
        return None

    def find_format_by_name(self, name: str) -> Format | None:
        """
        Find the first format with the given name, case-insensitively.

        :param name: the format name to look for.
        :return: the format, or None if not found.
        """
        lower_name = name.lower()
        for media_format in self.formats:
            if media_format.lower_name == lower_name:
                return media_format
        return None

    def format_names(self) -> list[str]:
        return [media_format.name for media_format in self.formats]

    def format_lower_names(self) -> list[str]:
        return [media_format.lower_name for media_format in self.formats]

    def filter_formats(self, predicate: Callable[[Format], bool]) -> None:
        """Keep in place only the formats matching the predicate, preserving their order."""
        self.formats[:] = [f for f in self.formats if predicate(f)]

    def drop_formats(self, predicate: Callable[[Format], bool]) -> None:
        """Remove in place the formats matching the predicate, preserving the order of the rest."""
        self.formats[:] = [f for f in self.formats if not predicate(f)]

    def _by_names(self, names: Iterable[str]) -> Callable[[Format], bool]:
        lower_names = lower_set(names)
        return lambda media_format: media_format.lower_name in lower_names

    def filter_formats_by_name(self, *names: str) -> bool:
        """
        Keep only the formats with any of the given names.

        :param names: the format names to keep, case-insensitive.
        :return: whether any non-DTMF format is left. False if no names were given,
            in which case the formats are left untouched.
        """
        if not names:
            return False
        self.filter_formats(self._by_names(names))
        return self.has_any_non_dtmf_format()

    def drop_formats_by_name(self, *names: str) -> bool:
        """
        Remove the formats with any of the given names.

        :param names: the format names to remove, case-insensitive.
        :return: whether any non-DTMF format is left. False if no names were given.
        """
        if not names:
            return False
        self.drop_formats(self._by_names(names))
        return self.has_any_non_dtmf_format()

    def filter_formats_by_payload(self, *payloads: int) -> bool:
        """Keep only the formats with the given payload types."""
        if not payloads:
            return False
        wanted = frozenset(payloads)
        self.filter_formats(lambda media_format: media_format.payload in wanted)
        return self.has_any_non_dtmf_format()

    def drop_formats_by_payload(self, *payloads: int) -> bool:
        """Remove the formats with the given payload types, like :meth:`drop_formats_by_name`."""
        if not payloads:
            return False
        unwanted = frozenset(payloads)
        self.drop_formats(lambda media_format: media_format.payload in unwanted)
        return self.has_any_non_dtmf_format()

    def order_formats_by_name(self, *names: str) -> None:
        """
        Reorder the formats following the given names, case-insensitively.

        Formats whose name is not listed are dropped, unless a ``*`` wildcard is given:
        in that case they are inserted at the wildcard position, in their original order.
        Formats sharing the same name are all kept, in their original order.
        No names, or just the wildcard, leave the formats untouched.

        :param names: the ordered format names, optionally including one ``*``.
        :raises ValueError: if more than one wildcard is given.
        """
        if names.count(FORMAT_WILDCARD) > 1:
            raise ValueError(f"At most one {FORMAT_WILDCARD!r} wildcard is allowed, got {names}")
        if not names or names == (FORMAT_WILDCARD,):
            return

        ordered_names: list[str] = list(dict.fromkeys(name.lower() for name in names))
        named: frozenset[str] = frozenset(ordered_names) - {FORMAT_WILDCARD}

        ordered: list[Format] = []
        for name in ordered_names:
            if name == FORMAT_WILDCARD:
                ordered.extend(f for f in self.formats if f.lower_name not in named)
            else:
                ordered.extend(f for f in self.formats if f.lower_name == name)
        self.formats[:] = ordered

    def keep_first_audio_with_dtmf(self, *acceptable: str) -> tuple[bool, bool]:
        """
        Reduce the formats to the first acceptable audio format, plus the first
        ``telephone-event`` format if any. Comfort noise is always removed.

        If the formats are empty, or none of the acceptable audio formats is found,
        the formats are left untouched.

        :param acceptable: the acceptable audio format names, case-insensitive.
        :return: a tuple of (audio format found, DTMF format found).
        """
        acceptable_names = lower_set(acceptable)
        audio: Format | None = None
        dtmf: Format | None = None
        for media_format in self.formats:
            if media_format.is_dtmf:
                if dtmf is None:
                    dtmf = media_format
            elif media_format.is_comfort_noise:
                continue
            elif audio is None and media_format.lower_name in acceptable_names:
                audio = media_format
            if audio is not None and dtmf is not None:
                break

        if audio is None:
            _logger.debug(
                f"No acceptable audio format among {self.format_names()} "
                f"for {sorted(acceptable_names)}"
            )
            return False, False

        self.formats[:] = [audio] if dtmf is None else [audio, dtmf]
        return True, dtmf is not None

    def has_any_non_dtmf_format(self) -> bool:
        """Whether at least one media format is present (DTMF and comfort noise excluded)."""
        return any(media_format.is_audio for media_format in self.formats)

    def first_audio_format(self) -> Format | None:
        return next((f for f in self.formats if f.is_audio), None)

    def first_audio_format_name(self) -> str:
        media_format = self.first_audio_format()
        return media_format.name if media_format is not None else ""

    def first_dtmf_format(self) -> Format | None:
        return next((f for f in self.formats if f.is_dtmf), None)

    def has_dtmf(self) -> bool:
        return self.first_dtmf_format() is not None
