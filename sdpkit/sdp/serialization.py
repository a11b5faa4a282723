"""
Conversion between SDP text and :class:`~sdpkit.sdp.session.Session` objects.

Parsing is lenient by default: unknown line types, repeated payload types and
attributes referring to payload types not listed in the ``m=`` line are reported
as warnings.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

from ..constants import PAYLOAD_TYPE_MAX, SUPPORTED_SDP_VERSIONS
from ..exceptions import SDPParseError, SDPUnknownFieldError, SDPUnsupportedVersion
from ..helpers import Serializable
from .common import Attribute, Bandwidth, Connection, Key, MediaDirection, MediaType
from .media import Format, Media, is_rtp
from .session import Origin, Session
from .time import Repeat, TimeZone, Timing


__all__ = [
    "parse",
    "encode",
]


_logger = logging.getLogger(__name__)

_DIRECTIONS: frozenset[str] = frozenset(
    direction.value for direction in MediaDirection if direction is not MediaDirection.UNSPECIFIED
)
_PTIME: str = "ptime"
_RTPMAP: str = "rtpmap"
_FMTP: str = "fmtp"
_RTCP_FB: str = "rtcp-fb"
_FORMAT_ATTRIBUTES: frozenset[str] = frozenset({_RTPMAP, _FMTP, _RTCP_FB})
_LINE_END: str = "\r\n"


class _SessionParser:
    """Stateful line by line parser, collecting the warnings of a single parse."""

    def __init__(self, *, strict: bool) -> None:
        self.strict: bool = strict
        self.session: Session = Session()
        self.media: Media | None = None
        self.warnings: list[str] = []
        self._has_timing: bool = False

    def warn(self, message: str) -> None:
        _logger.warning(message)
        self.warnings.append(message)

    def parse_line(self, line: str) -> None:
        field_type, sep, value = line.partition("=")
        if not sep or len(field_type) != 1:
            raise SDPParseError(f"Invalid SDP line: {line!r}")

        session, media = self.session, self.media
        if field_type == "m":
            self.media = self.parse_media(value)
            session.media.append(self.media)
        elif field_type == "i":
            if media is not None:
                media.information = value
            else:
                session.information = value
        elif field_type == "c":
            connection = Connection.from_raw_value(value)
            if media is not None:
                media.connections.append(connection)
            else:
                session.connection = connection
        elif field_type == "b":
            (media or session).bandwidth.append(Bandwidth.from_raw_value(value))
        elif field_type == "k":
            (media or session).keys.append(Key.from_raw_value(value))
        elif field_type == "a":
            self.parse_attribute(Attribute.from_raw_value(value))
        elif media is not None:
            self.unknown(line, "in media description")
        elif field_type == "o":
            session.origin = Origin.from_raw_value(value)
        elif field_type == "s":
            session.name = value
        elif field_type == "u":
            session.uri = value
        elif field_type == "e":
            session.email.append(value)
        elif field_type == "p":
            session.phone.append(value)
        elif field_type == "t":
            if self._has_timing:
                self.warn(f"Ignoring additional time description: {line!r}")
            else:
                session.timing = Timing.from_raw_value(value)
                self._has_timing = True
        elif field_type == "r":
            session.repeat.append(Repeat.from_raw_value(value))
        elif field_type == "z":
            session.timezones.extend(TimeZone.parse_adjustments(value))
        else:
            self.unknown(line, "in session description")

    def unknown(self, line: str, where: str) -> None:
        message = f"Unknown SDP line {where}: {line!r}"
        if self.strict:
            raise SDPUnknownFieldError(message)
        self.warn(message)

    def parse_media(self, value: str) -> Media:
        """Parse a ``m=<media> <port>[/<number of ports>] <proto> <fmt> ...`` line value."""
        try:
            media_type, raw_port, protocol, *fmts = value.split()
            port, _, port_count = raw_port.partition("/")
            media = Media(
                type=MediaType.coerce(media_type),
                port=int(port),
                port_count=int(port_count) if port_count else 0,
                protocol=protocol,
            )
            if is_rtp(media.type, protocol):
                media.formats = [Format(payload=int(fmt)) for fmt in fmts]
            else:
                media.format_description = " ".join(fmts)
        except ValueError as e:
            raise SDPParseError(f"Invalid media field: {value}") from e
        formats_by_payload: dict[int, Format] = {}
        for media_format in media.formats:
            if media_format.payload in formats_by_payload:
                self.warn(f"Ignoring repeated payload type {media_format.payload} in m={value}")
            else:
                formats_by_payload[media_format.payload] = media_format
        media.formats = list(formats_by_payload.values())
        if any(
            not 0 <= media_format.payload <= PAYLOAD_TYPE_MAX for media_format in media.formats
        ):
            raise SDPParseError(f"Invalid payload type in media field: {value}")
        return media

    def parse_attribute(self, attribute: Attribute) -> None:
        target: Session | Media = self.media or self.session
        if attribute.name in _DIRECTIONS and attribute.is_flag:
            target.mode = MediaDirection(attribute.name)
        elif attribute.name == _PTIME and attribute.value is not None:
            target.ptime = attribute.value.strip()
        elif (
            self.media is not None
            and self.media.is_rtp
            and attribute.name in _FORMAT_ATTRIBUTES
            and attribute.value is not None
        ):
            if not self.parse_format_attribute(self.media, attribute):
                target.attributes.append(attribute)
        else:
            target.attributes.append(attribute)

    def parse_format_attribute(self, media: Media, attribute: Attribute) -> bool:
        """Fold a rtpmap/fmtp/rtcp-fb attribute into its format. False if it cannot be."""
        assert attribute.value is not None
        raw_payload, _, format_value = attribute.value.partition(" ")
        if attribute.name == _RTCP_FB and raw_payload == "*":
            return False
        try:
            payload = int(raw_payload)
        except ValueError as e:
            raise SDPParseError(f"Invalid payload type in a={attribute.serialize()}") from e

        media_format = media.find_format_by_payload(payload)
        if media_format is None:
            self.warn(
                f"Attribute a={attribute.serialize()} refers to payload type {payload} "
                f"not listed in the m={media.type!s} line"
            )
            return False

        format_value = format_value.strip()
        if attribute.name == _RTPMAP:
            name, *rest = format_value.split("/")
            try:
                media_format.name = name
                media_format.clock_rate = int(rest[0]) if rest else 0
                if len(rest) > 1:
                    media_format.channels = int(rest[1])
                else:
                    media_format.channels = 1 if media.type == MediaType.AUDIO else 0
            except ValueError as e:
                raise SDPParseError(f"Invalid rtpmap attribute: {attribute.value}") from e
        elif attribute.name == _FMTP:
            media_format.params.append(format_value)
        else:
            media_format.feedback.append(format_value)
        return True


def _decode(raw: bytes | str) -> str:
    if isinstance(raw, str):
        return raw
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise SDPParseError(f"SDP is not valid UTF-8 text: {e}") from e


def _iter_lines(text: str) -> Iterator[str]:
    for line in text.splitlines():
        stripped_line = line.strip()
        if stripped_line:
            yield stripped_line


def parse(raw: bytes | str, *, strict: bool = False) -> tuple[Session, list[str]]:
    """
    Parse an SDP session description. Both CRLF and LF line endings are accepted.

    :param raw: the SDP text, as bytes (UTF-8) or string.
    :param strict: if True, unknown line types raise instead of being reported as warnings.
    :return: a tuple of (parsed session, warnings).
    :raises SDPUnsupportedVersion: if the ``v=`` line is not a supported version.
    :raises SDPParseError: if the description is malformed.
    """
    lines = _iter_lines(_decode(raw))
    first_line = next(lines, None)
    if first_line is None or not first_line.startswith("v="):
        raise SDPParseError("SDP must start with a v= line")
    try:
        version = int(first_line[2:])
    except ValueError as e:
        raise SDPParseError(f"Invalid version field: {first_line!r}") from e
    if version not in SUPPORTED_SDP_VERSIONS:
        raise SDPUnsupportedVersion(f"Unsupported SDP version {version}")

    parser = _SessionParser(strict=strict)
    parser.session.version = version
    for line in lines:
        parser.parse_line(line)
    return parser.session, parser.warnings


def _value_lines(field_type: str, values: Iterable[Serializable]) -> Iterator[str]:
    for value in values:
        yield f"{field_type}={value.serialize()}"


def _attribute_lines(
    attributes: list[Attribute], ptime: str, mode: MediaDirection | str
) -> Iterator[str]:
    yield from _value_lines("a", attributes)
    if ptime:
        yield f"a={_PTIME}:{ptime}"
    mode = MediaDirection.coerce(mode)
    if mode is not MediaDirection.UNSPECIFIED:
        yield f"a={mode.value}"


def _media_lines(media: Media) -> Iterator[str]:
    port = f"{media.port}/{media.port_count}" if media.port_count else str(media.port)
    fmts = (
        " ".join(str(media_format.payload) for media_format in media.formats)
        if media.formats
        else media.format_description
    )
    yield " ".join(part for part in (f"m={media.type!s}", port, media.protocol, fmts) if part)
    if media.information:
        yield f"i={media.information}"
    yield from _value_lines("c", media.connections)
    yield from _value_lines("b", media.bandwidth)
    yield from _value_lines("k", media.keys)
    for media_format in media.formats:
        if media_format.name:
            yield f"a={_RTPMAP}:{media_format.payload} {media_format.rtpmap}"
        for param in media_format.params:
            yield f"a={_FMTP}:{media_format.payload} {param}"
        for feedback in media_format.feedback:
            yield f"a={_RTCP_FB}:{media_format.payload} {feedback}"
    yield from _attribute_lines(media.attributes, media.ptime, media.mode)


def _session_lines(session: Session) -> Iterator[str]:
    yield f"v={session.version}"
    yield f"o={session.origin.serialize()}"
    yield f"s={session.name or ' '}"
    if session.information:
        yield f"i={session.information}"
    if session.uri:
        yield f"u={session.uri}"
    for email in session.email:
        yield f"e={email}"
    for phone in session.phone:
        yield f"p={phone}"
    if session.connection is not None:
        yield f"c={session.connection.serialize()}"
    yield from _value_lines("b", session.bandwidth)
    yield f"t={session.timing.serialize()}"
    yield from _value_lines("r", session.repeat)
    if session.timezones:
        yield f"z={TimeZone.serialize_all(session.timezones)}"
    yield from _value_lines("k", session.keys)
    yield from _attribute_lines(session.attributes, session.ptime, session.mode)
    for media in session.media:
        yield from _media_lines(media)


def encode(session: Session) -> bytes:
    """
    Encode a session description to SDP text, with CRLF line endings.

    Formats are written as ``rtpmap``, ``fmtp`` and ``rtcp-fb`` attributes right after
    the media level fields, followed by the other attributes, ``ptime`` and direction.
    """
    return "".join(line + _LINE_END for line in _session_lines(session)).encode("utf-8")
