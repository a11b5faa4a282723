"""SDP session descriptions, and the session level offer/answer operations."""

from __future__ import annotations

import copy
import logging
import socket
from dataclasses import field as dataclass_field
from typing import Callable, Iterable, Sequence

from ..codecs import CodecInfo, CodecUse, describe_codec, describe_codec_by_name
from ..constants import (
    ADDRESS_TYPE_IPV4,
    DEFAULT_DTMF_EVENTS,
    DEFAULT_PTIME,
    DEFAULT_USERNAME,
    DYNAMIC_PAYLOAD_START,
    NETWORK_INTERNET,
    RTP_AVP,
    SUPPORTED_CODECS,
    T38_FORMAT,
    UDPTL,
    UNSPECIFIED_IPV4,
)
from ..exceptions import (
    SDPAlignmentError,
    SDPNegotiationError,
    SDPParseError,
    SDPResolveError,
    UnknownCodecError,
)
from ..helpers import slots_dataclass
from .common import (
    Attribute,
    Bandwidth,
    Connection,
    DirectionLike,
    Key,
    MediaDirection,
    MediaType,
    delete_attributes,
)
from .direction import is_holding_direction, negotiate_answer_direction
from .media import Format, Media
from .time import Repeat, TimeZone, Timing


__all__ = [
    "Origin",
    "Session",
    "new_session",
    "build_format",
    "build_format_by_name",
]


_logger = logging.getLogger(__name__)

Resolver = Callable[[str, int], tuple[str, int]]


@slots_dataclass
class Origin:
    """
    Session originator and identifier, defined in :rfc:`8866#section-5.2`.
    The session version is not part of equality, so that renegotiated
    descriptions of the same media still compare equal.

    Syntax::
        o=<username> <sess-id> <sess-version> <nettype> <addrtype> <unicast-address>
    """

    username: str = DEFAULT_USERNAME
    session_id: int = 0
    session_version: int = dataclass_field(default=0, compare=False)
    network: str = NETWORK_INTERNET
    address_type: str = ADDRESS_TYPE_IPV4
    address: str = UNSPECIFIED_IPV4

    @classmethod
    def from_raw_value(cls, raw_value: str) -> Origin:  # noqa: D102
        try:
            username, session_id, session_version, network, address_type, address = (
                raw_value.split()
            )
            return cls(
                username=username,
                session_id=int(session_id),
                session_version=int(session_version),
                network=network,
                address_type=address_type,
                address=address,
            )
        except ValueError as e:
            raise SDPParseError(f"Invalid origin field: {raw_value}") from e

    def serialize(self) -> str:  # noqa: D102
        return " ".join(
            str(value)
            for value in (
                self.username,
                self.session_id,
                self.session_version,
                self.network,
                self.address_type,
                self.address,
            )
        )


def _resolve_udp_address(host: str, port: int) -> tuple[str, int]:
    try:
        infos = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)
    except OSError as e:
        raise SDPResolveError(f"Cannot resolve {host}:{port}: {e}") from e
    if not infos:
        raise SDPResolveError(f"No address found for {host}:{port}")
    sockaddr = infos[0][4]
    return sockaddr[0], sockaddr[1]


@slots_dataclass
class Session:
    """
    A session description, defined in :rfc:`8866#section-5`.

    Direction (``a=sendrecv`` etc.) and ``a=ptime`` attributes are held in the
    ``mode`` and ``ptime`` fields rather than in ``attributes``, at both session
    and media level.
    Operations looking up media flows by type assume at most one flow per type.
    """

    version: int = 0
    origin: Origin = dataclass_field(default_factory=Origin)
    name: str = ""
    information: str = ""
    uri: str = ""
    email: list[str] = dataclass_field(default_factory=list)
    phone: list[str] = dataclass_field(default_factory=list)
    connection: Connection | None = None
    bandwidth: list[Bandwidth] = dataclass_field(default_factory=list)
    timezones: list[TimeZone] = dataclass_field(default_factory=list)
    keys: list[Key] = dataclass_field(default_factory=list)
    timing: Timing = dataclass_field(default_factory=Timing)
    repeat: list[Repeat] = dataclass_field(default_factory=list)
    attributes: list[Attribute] = dataclass_field(default_factory=list)
    mode: MediaDirection = MediaDirection.UNSPECIFIED
    ptime: str = ""
    media: list[Media] = dataclass_field(default_factory=list)

    def clone(self) -> Session:
        """Return a deep copy of the session, sharing no mutable state with it."""
        return copy.deepcopy(self)

    def equals(self, other: object) -> bool:
        """
        Structural equality over all the fields, except the origin session version.
        Same as ``==``.
        """
        return self == other

    def bump_version(self) -> int:
        """Increment the origin session version, as required for each new offer or answer."""
        self.origin.session_version += 1
        return self.origin.session_version

    def delete_attribute(self, name: str) -> int:
        """Remove all the session level attributes with the given name."""
        return delete_attributes(self.attributes, name)

    def get_media_flow(self, media_type: MediaType | str) -> Media | None:
        """Get the first media flow of the given type, if any."""
        for media in self.media:
            if media.type == media_type:
                return media
        return None

    def get_audio_media_flow(self) -> Media | None:
        return self.get_media_flow(MediaType.AUDIO)

    def align_media_flows(self, reference: Session) -> None:
        """
        Rearrange the media flows to match, position by position, the media types
        of the reference session (usually the remote offer).

        Flows of this session are kept in the position of the reference flow with the same
        type, flows missing here are filled in as disabled copies of the reference ones,
        and flows of types absent from the reference are dropped.

        :param reference: the session whose media lines must be matched.
        :raises SDPAlignmentError: if either session has more than one flow of the same type.
            The session is left untouched.
        """
        reference_types: set[MediaType | str] = set()
        for reference_media in reference.media:
            if reference_media.type in reference_types:
                raise SDPAlignmentError(
                    f"Duplicate media type {reference_media.type!s} in reference session, "
                    "cannot align flows"
                )
            reference_types.add(reference_media.type)

        flows_by_type: dict[MediaType | str, Media] = {}
        for media in self.media:
            if media.type in flows_by_type:
                raise SDPAlignmentError(
                    f"Duplicate media type {media.type!s} in session, cannot align flows"
                )
            flows_by_type[media.type] = media

        aligned: list[Media] = []
        for reference_media in reference.media:
            media = flows_by_type.get(reference_media.type)
            if media is None:
                _logger.debug(f"Adding disabled {reference_media.type!s} flow placeholder")
                media = reference_media.disabled_copy()
            aligned.append(media)
        self.media = aligned

    def _flows_matching(
        self, media_types: Iterable[MediaType | str], *, invert: bool
    ) -> list[Media]:
        wanted = set(media_types)
        return [media for media in self.media if (media.type in wanted) != invert]

    def disable_flows(self, *media_types: MediaType | str) -> Session:
        """Disable (set port 0) the flows of the given types. No types is a no-op."""
        if media_types:
            for media in self._flows_matching(media_types, invert=False):
                media.port = 0
        return self

    def disable_flows_except(self, *media_types: MediaType | str) -> Session:
        """Disable all the flows but those of the given types. No types is a no-op."""
        if media_types:
            for media in self._flows_matching(media_types, invert=True):
                media.port = 0
        return self

    def drop_flows(self, *media_types: MediaType | str) -> Session:
        """Remove the flows of the given types. No types is a no-op."""
        if media_types:
            self.media = self._flows_matching(media_types, invert=True)
        return self

    def drop_flows_except(self, *media_types: MediaType | str) -> Session:
        """Remove all the flows but those of the given types. No types is a no-op."""
        if media_types:
            self.media = self._flows_matching(media_types, invert=False)
        return self

    def set_connection(
        self,
        media_type: MediaType | str,
        ipv4: str,
        port: int,
        set_global: bool = False,
        remove_global: bool = False,
    ) -> Session:
        """
        Set the connection address and port of a media flow.

        :param media_type: the type of the flow to update. Empty is a no-op.
        :param ipv4: the IPv4 connection address.
        :param port: the port for the flow.
        :param set_global: if True, set the address at session level instead,
            removing all the media level connections.
        :param remove_global: if True (and ``set_global`` is False), remove the session
            level connection, provided a flow of the given type exists.
        :return: the session itself.
        """
        if not media_type:
            return self

        connection = Connection(
            network=NETWORK_INTERNET, address_type=ADDRESS_TYPE_IPV4, address=ipv4
        )
        if set_global:
            self.connection = connection
            for media in self.media:
                media.connections = []
                if media.type == media_type:
                    media.port = port
            return self

        media = self.get_media_flow(media_type)
        if media is not None:
            media.connections = [connection]
            media.port = port
            if remove_global:
                self.connection = None
        return self

    def are_all_flows_dropped_or_disabled(self) -> bool:
        return all(media.port <= 0 for media in self.media)

    def is_t38_image(self) -> bool:
        """Whether an active T.38 fax flow (``m=image <port> udptl t38``) is present."""
        return any(
            media.type == MediaType.IMAGE
            and media.port > 0
            and media.protocol == UDPTL
            and media.format_description == T38_FORMAT
            for media in self.media
        )

    def get_effective_media_directive(self) -> MediaDirection:
        """
        The direction in effect for the audio flow: its own, else the session one,
        else ``sendrecv``.
        """
        media = self.get_audio_media_flow()
        if media is not None and media.mode != MediaDirection.UNSPECIFIED:
            return MediaDirection.coerce(media.mode)
        if self.mode != MediaDirection.UNSPECIFIED:
            return MediaDirection.coerce(self.mode)
        return MediaDirection.SENDRECV

    def is_call_held(self) -> bool:
        """
        Whether the audio flow is on hold: either the effective direction is
        ``sendonly`` / ``inactive``, or the effective address is missing or ``0.0.0.0``.
        """
        if is_holding_direction(self.get_effective_media_directive()):
            return True
        address = self.get_effective_media_ipv4(self.get_audio_media_flow())
        return address in {"", UNSPECIFIED_IPV4}

    def get_effective_media_ipv4(self, media: Media | None) -> str:
        """The first connection address of the media flow, else the session one, else empty."""
        if media is not None and media.connections:
            return media.connections[0].address
        return self.connection.address if self.connection is not None else ""

    def get_effective_media_socket(self, media: Media) -> str:
        """
        The ``ip:port`` where the media flow is received. Media level ``0.0.0.0``
        addresses are skipped in favor of the session level connection.

        :return: the socket string, or empty if no address is known or the flow is disabled.
        """
        address = next(
            (
                connection.address
                for connection in media.connections
                if connection.address not in {"", UNSPECIFIED_IPV4}
            ),
            "",
        )
        if not address and self.connection is not None:
            address = self.connection.address
        if not address or media.port <= 0:
            return ""
        return f"{address}:{media.port}"

    def get_effective_connection_for_media(self, media_type: MediaType | str) -> str:
        media = self.get_media_flow(media_type)
        return self.get_effective_media_ipv4(media) if media is not None else ""

    def get_effective_media_udp_addr(
        self, media_type: MediaType | str, resolver: Resolver | None = None
    ) -> tuple[str, int]:
        """
        Resolve the UDP address where the media flow of the given type is received.

        :param media_type: the type of the flow.
        :param resolver: a callable resolving a (host, port) pair to a socket address.
            Defaults to resolving through :func:`socket.getaddrinfo`.
        :return: the resolved (host, port) address.
        :raises SDPResolveError: if the flow is missing, has no address, or resolving fails.
        """
        media = self.get_media_flow(media_type)
        if media is None:
            raise SDPResolveError(f"No {media_type!s} media flow")
        media_socket = self.get_effective_media_socket(media)
        if not media_socket:
            raise SDPResolveError(f"No address for the {media_type!s} media flow")
        host, _, port = media_socket.rpartition(":")
        return (resolver or _resolve_udp_address)(host, int(port))

    def get_effective_ptime(self) -> str:
        """The packet time of the audio flow, else the session one, else the default."""
        media = self.get_audio_media_flow()
        if media is not None and media.ptime:
            return media.ptime
        return self.ptime or DEFAULT_PTIME

    def restore_missing_rtpmaps(self) -> list[str]:
        """
        Fill in the name, clock rate and channels of the audio and video formats
        that rely on static payload types or lack a ``rtpmap`` attribute.

        :return: descriptions of the formats that could not be restored.
        """
        missing: list[str] = []
        for media in self.media:
            if media.type not in {MediaType.AUDIO, MediaType.VIDEO}:
                continue
            for media_format in media.formats:
                if media_format.payload >= DYNAMIC_PAYLOAD_START and media_format.name:
                    continue
                codec = describe_codec(media_format.payload)
                if codec is None:
                    missing.append(
                        f"Media Type: {media.type!s}, Payload Type: {media_format.payload}"
                    )
                    continue
                media_format.name = codec.name
                media_format.clock_rate = codec.clock_rate
                media_format.channels = codec.channels
        return missing

    def build_self_answer(
        self, current_local_directive: DirectionLike, *audio_formats: str
    ) -> tuple[Session, bool]:
        """
        Build an answer to this offer, accepting only the audio flow with a
        single audio format (and DTMF, if offered), e.g. for an echo responder.

        :param current_local_directive: the current local direction preference.
        :param audio_formats: the acceptable audio format names.
        :return: a tuple of (answer session, whether DTMF was accepted).
        :raises SDPNegotiationError: if no audio formats are given, the offer has no
            enabled audio flow, or no offered audio format is acceptable.
        """
        if not audio_formats:
            raise SDPNegotiationError("Cannot build answer: no audio formats provided")
        offered_audio = self.get_audio_media_flow()
        if offered_audio is None:
            raise SDPNegotiationError("Cannot build answer: no audio media flow found")
        if offered_audio.port == 0:
            raise SDPNegotiationError("Cannot build answer: audio media flow is disabled")

        answer = self.clone()
        answer.mode = MediaDirection.UNSPECIFIED
        answer.origin.session_version = 1
        audio = answer.disable_flows_except(MediaType.AUDIO).get_audio_media_flow()
        assert audio is not None

        audio_found, dtmf_found = audio.keep_first_audio_with_dtmf(*audio_formats)
        if not audio_found:
            raise SDPNegotiationError(
                f"Cannot build answer: none of {list(audio_formats)} offered "
                f"in {offered_audio.format_names()}"
            )

        audio.mode = negotiate_answer_direction(
            current_local_directive, self.get_effective_media_directive()
        )
        return answer, dtmf_found


def _format_from_codec(codec: CodecInfo) -> Format:
    media_format = Format(
        payload=codec.payload_type,
        name=codec.name,
        clock_rate=codec.clock_rate,
        channels=codec.channels,
    )
    if codec.use is CodecUse.DTMF:
        media_format.params.append(DEFAULT_DTMF_EVENTS)
    return media_format


def build_format(payload_type: int) -> Format:
    """
    Build a format for a known payload type.

    :raises UnknownCodecError: if the payload type is not a known codec.
    """
    codec = describe_codec(payload_type)
    if codec is None:
        raise UnknownCodecError(f"Unknown codec information with payload {payload_type}")
    return _format_from_codec(codec)


def build_format_by_name(name: str) -> Format:
    """
    Build a format for a known codec name, case-insensitively.

    :raises UnknownCodecError: if the name is not a known codec.
    """
    codec = describe_codec_by_name(name)
    if codec is None:
        raise UnknownCodecError(f"Unknown codec information with name {name}")
    return _format_from_codec(codec)


def new_session(
    session_id: int,
    session_version: int,
    ipv4: str,
    name: str,
    ssrc: str,
    direction: DirectionLike,
    port: int,
    codecs: Sequence[int] = SUPPORTED_CODECS,
) -> Session:
    """
    Build a minimal session with a single audio flow, e.g. for an initial offer.

    :param session_id: the origin session id.
    :param session_version: the origin session version.
    :param ipv4: the local IPv4 address, for both origin and connection.
    :param name: the session name.
    :param ssrc: the SSRC attribute value, or empty to omit it.
    :param direction: the direction of the audio flow.
    :param port: the RTP port of the audio flow.
    :param codecs: the payload types of the formats to offer, in preference order.
    :raises UnknownCodecError: if any of the payload types is not a known codec.
    """
    formats = [build_format(payload_type) for payload_type in codecs]
    return Session(
        origin=Origin(
            username=DEFAULT_USERNAME,
            session_id=session_id,
            session_version=session_version,
            network=NETWORK_INTERNET,
            address_type=ADDRESS_TYPE_IPV4,
            address=ipv4,
        ),
        name=name,
        connection=Connection(
            network=NETWORK_INTERNET, address_type=ADDRESS_TYPE_IPV4, address=ipv4
        ),
        media=[
            Media(
                type=MediaType.AUDIO,
                port=port,
                protocol=RTP_AVP,
                attributes=[Attribute("ssrc", ssrc)] if ssrc else [],
                mode=MediaDirection.coerce(direction),
                ptime=DEFAULT_PTIME,
                formats=formats,
            )
        ],
    )
