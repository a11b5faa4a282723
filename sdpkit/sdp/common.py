"""Common SDP enums and line values shared by session and media descriptions."""

from __future__ import annotations

import enum
from typing import MutableSequence, Optional, Union

from typing_extensions import Self

from ..constants import ADDRESS_TYPE_IPV6
from ..exceptions import SDPParseError
from ..helpers import slots_dataclass


__all__ = [
    "MediaType",
    "MediaDirection",
    "DirectionLike",
    "Connection",
    "Bandwidth",
    "Key",
    "Attribute",
    "delete_attributes",
]


class MediaType(str, enum.Enum):
    """Media types of the ``m=`` line, :rfc:`8866#section-5.14` and :rfc:`6466`."""

    AUDIO = "audio"
    VIDEO = "video"
    TEXT = "text"
    APPLICATION = "application"
    MESSAGE = "message"
    IMAGE = "image"

    @classmethod
    def coerce(cls, value: MediaType | str) -> MediaType | str:
        """Convert a raw media type to the enum, keeping unknown types as strings."""
        try:
            return cls(value)
        except ValueError:
            return value

    def __str__(self) -> str:
        return self.value


class MediaDirection(str, enum.Enum):
    """
    Media flow directions, defined in :rfc:`8866#section-6.7`.

    ``UNSPECIFIED`` means no direction attribute is present, which the negotiation
    rules treat as ``SENDRECV``.
    """

    SENDRECV = "sendrecv"
    SENDONLY = "sendonly"
    RECVONLY = "recvonly"
    INACTIVE = "inactive"
    UNSPECIFIED = ""

    @classmethod
    def coerce(cls, value: DirectionLike) -> MediaDirection:
        """
        Convert a direction, a raw direction string or None to a :class:`MediaDirection`.

        :raises ValueError: if the string is not a known direction.
        """
        if value is None:
            return cls.UNSPECIFIED
        if isinstance(value, cls):
            return value
        return cls(value.strip().lower())

    @property
    def effective(self) -> MediaDirection:
        """The direction in effect, with ``UNSPECIFIED`` resolved to ``SENDRECV``."""
        return MediaDirection.SENDRECV if self is MediaDirection.UNSPECIFIED else self

    @property
    def sends(self) -> bool:
        return self.effective in {MediaDirection.SENDRECV, MediaDirection.SENDONLY}

    @property
    def receives(self) -> bool:
        return self.effective in {MediaDirection.SENDRECV, MediaDirection.RECVONLY}

    def __str__(self) -> str:
        return self.value


DirectionLike = Optional[Union[MediaDirection, str]]


@slots_dataclass
class Connection:
    """
    Connection data, defined in :rfc:`8866#section-5.7`.

    Syntax::
        c=<nettype> <addrtype> <connection-address>
    """

    network: str
    address_type: str
    address: str
    ttl: int | None = None
    address_count: int | None = None

    @classmethod
    def from_raw_value(cls, raw_value: str) -> Self:  # noqa: D102
        try:
            network, address_type, connection_address = raw_value.split()
            # IPv6 has no TTL, so a single suffix is the number of addresses
            address, *rest = connection_address.split("/")
            ttl = address_count = None
            if len(rest) > 2 or (rest and address_type == ADDRESS_TYPE_IPV6 and len(rest) > 1):
                raise SDPParseError(f"Invalid connection address {connection_address}")
            if address_type == ADDRESS_TYPE_IPV6:
                if rest:
                    address_count = int(rest[0])
            elif rest:
                ttl = int(rest[0])
                if len(rest) == 2:
                    address_count = int(rest[1])
        except ValueError as e:
            raise SDPParseError(f"Invalid connection field: {raw_value}") from e
        return cls(
            network=network,
            address_type=address_type,
            address=address,
            ttl=ttl,
            address_count=address_count,
        )

    @property
    def connection_address(self) -> str:
        """The connection address with the optional TTL and number of addresses."""
        parts = [self.address]
        if self.ttl is not None:
            parts.append(str(self.ttl))
        if self.address_count is not None:
            parts.append(str(self.address_count))
        return "/".join(parts)

    def serialize(self) -> str:  # noqa: D102
        return f"{self.network} {self.address_type} {self.connection_address}"


@slots_dataclass
class Bandwidth:
    """
    Bandwidth information, defined in :rfc:`8866#section-5.8`.

    Syntax::
        b=<bwtype>:<bandwidth>
    """

    type: str
    value: int

    @classmethod
    def from_raw_value(cls, raw_value: str) -> Self:  # noqa: D102
        bwtype, sep, bandwidth = raw_value.partition(":")
        if not sep:
            raise SDPParseError(f"Invalid bandwidth field: {raw_value}")
        try:
            return cls(type=bwtype, value=int(bandwidth))
        except ValueError as e:
            raise SDPParseError(f"Invalid bandwidth field: {raw_value}") from e

    def serialize(self) -> str:  # noqa: D102
        return f"{self.type}:{self.value}"


@slots_dataclass
class Key:
    """
    Encryption key, defined in :rfc:`8866#section-5.12`. Stored opaquely.

    Syntax::
        k=<method>
        k=<method>:<encryption key>
    """

    method: str
    value: str = ""

    @classmethod
    def from_raw_value(cls, raw_value: str) -> Self:  # noqa: D102
        # keys can be URIs, only the first colon separates the method
        method, _, value = raw_value.partition(":")
        return cls(method=method, value=value)

    def serialize(self) -> str:  # noqa: D102
        return f"{self.method}:{self.value}" if self.value else self.method


@slots_dataclass
class Attribute:
    """
    A generic ``a=`` attribute, defined in :rfc:`8866#section-5.13`.
    Flag attributes have a ``None`` value.
    """

    name: str
    value: str | None = None

    @property
    def is_flag(self) -> bool:
        """Whether the attribute is a flag or not."""
        return self.value is None

    @classmethod
    def from_raw_value(cls, raw_value: str) -> Self:  # noqa: D102
        name, sep, value = raw_value.partition(":")
        return cls(name=name, value=value if sep else None)

    def serialize(self) -> str:  # noqa: D102
        return self.name if self.value is None else f"{self.name}:{self.value}"


def delete_attributes(attributes: MutableSequence[Attribute], *names: str) -> int:
    """
    Remove in place all the attributes with any of the given names.

    :param attributes: the attributes list to modify.
    :param names: the attribute names to remove (case-sensitive).
    :return: the number of removed attributes.
    """
    if not names:
        return 0
    to_remove = set(names)
    kept = [attribute for attribute in attributes if attribute.name not in to_remove]
    removed = len(attributes) - len(kept)
    attributes[:] = kept
    return removed
