"""Helpers, utilities, and other miscellaneous functions and classes."""

from __future__ import annotations

import datetime
import functools
import re
import sys
from abc import ABC
from dataclasses import dataclass as _dtcls
from inspect import isabstract
from typing import (
    Any,
    Callable,
    Generic,
    Iterable,
    MutableMapping,
    Protocol,
    TypeVar,
    cast,
    runtime_checkable,
)

from typing_extensions import dataclass_transform

from .constants import NTP_EPOCH


_dT = TypeVar("_dT")


@functools.wraps(_dtcls)
@dataclass_transform()
def slots_dataclass(*args: Any, **kwargs: Any) -> Callable[[_dT], _dT]:
    """Wrapper for dataclass decorator that adds slots if supported (py3.10+)."""
    if sys.version_info < (3, 10):
        kwargs.pop("slots", None)
    else:
        kwargs.setdefault("slots", True)
    return cast(Callable[[_dT], _dT], _dtcls(*args, **kwargs))


_ID = TypeVar("_ID")
_RT = TypeVar("_RT", bound="Registry")


class Registry(ABC, Generic[_ID, _RT]):
    """
    Abstract base class for registries of subclasses of a given class.

    Subclasses of this class can be initialized as registries, which can be then used
    to register subclasses of the given class through a specific class attribute.
    In the class declaration, some additional keyword arguments must be specified
    to properly initialize the registry:

    :param registry: whether the class is a registry or not.
    :param registry_attr: the name of the class attribute to use as the registry key.
        The attribute can also be a tuple of keys, to register the class under
        multiple identifiers.

    Subclasses of "registry" classes are automatically registered in the registry
    using the value of the defined registry attribute as registry key, and can be
    retrieved through :meth:`get_registered_class`.

    Abstract subclasses are not registered, only concrete ones are.
    """

    __registry__: MutableMapping[_ID, type[_RT]]
    __registry_attr_name__: str
    __registry_root__: type[Registry]

    @classmethod
    def is_abstract(cls) -> bool:
        """
        Check if the class is actually defined as abstract
        (i.e. has ABC in its bases, or abstract methods).
        """
        return isabstract(cls) or ABC in cls.__bases__

    def __init_subclass__(
        cls,
        *,
        registry: bool = False,
        registry_attr: str | None = None,
        **kwargs: Any,
    ):
        super().__init_subclass__(**kwargs)

        if registry:
            if not registry_attr:
                raise AttributeError(
                    f"No attr_name specified for registry class {cls.__name__}"
                )
            cls.__registry__ = {}
            cls.__registry_attr_name__ = registry_attr
            cls.__registry_root__ = cls
            return

        registry_ids: Any = cls.__dict__.get(cls.__registry_attr_name__)
        if registry_ids is None:
            if cls.is_abstract():
                return
            raise ValueError(
                f"Cannot register {cls.__name__} in {cls.__registry_root__.__name__}, "
                f"no {cls.__registry_attr_name__} defined in the class body"
            )
        if not isinstance(registry_ids, tuple):
            registry_ids = (registry_ids,)

        for registry_id in registry_ids:
            conflict_cls: type[_RT] | None = cls.__registry__.get(registry_id)
            if conflict_cls is not None and conflict_cls.__qualname__ != cls.__qualname__:
                raise NameError(
                    f"More than one {cls.__registry_root__.__name__} subclass with "
                    f'the same {cls.__registry_attr_name__} "{registry_id}" defined: '
                    f"{conflict_cls.__name__} and {cls.__name__}"
                )
            cls.__registry__[registry_id] = cls

    @classmethod
    def get_registered_class(cls, registry_id: _ID) -> type[_RT] | None:
        """Get the class registered for the given id, if any."""
        return cls.__registry__.get(registry_id)


@runtime_checkable
class Serializable(Protocol):
    """Generic protocol for values serializable to the value part of an SDP line."""

    def serialize(self) -> str:
        """Serialize the object to a string."""


def lower_set(values: Iterable[str]) -> frozenset[str]:
    """Return a frozen set of the lowercased strings, for case-insensitive lookups."""
    return frozenset(value.lower() for value in values)


_TYPED_TIME_UNITS: dict[str, int] = {"d": 86400, "h": 3600, "m": 60, "s": 1}
_TYPED_TIME_PAT: re.Pattern[str] = re.compile(r"(-?\d+)([dhms]?)")


def parse_typed_time(value: str) -> datetime.timedelta:
    """
    Parse an SDP "typed time" (e.g. ``7d``, ``-1h``, ``3600``), as defined in
    :rfc:`8866#section-5.10`.

    :raises ValueError: if the value is not a valid typed time.
    """
    match = _TYPED_TIME_PAT.fullmatch(value.strip())
    if not match:
        raise ValueError(f'Invalid typed time "{value}"')
    amount, unit = match.groups()
    return datetime.timedelta(seconds=int(amount) * _TYPED_TIME_UNITS.get(unit, 1))


def format_typed_time(value: datetime.timedelta) -> str:
    """Serialize a timedelta as an SDP typed time, using the largest exact unit."""
    seconds = int(value.total_seconds())
    for unit, multiplier in _TYPED_TIME_UNITS.items():
        if seconds and seconds % multiplier == 0 and multiplier > 1:
            return f"{seconds // multiplier}{unit}"
    return str(seconds)


def ntp_to_datetime(value: int) -> datetime.datetime | None:
    """Convert an NTP seconds value to a datetime. Zero means "unbounded" (None)."""
    if value == 0:
        return None
    return NTP_EPOCH + datetime.timedelta(seconds=value)


def datetime_to_ntp(value: datetime.datetime | None) -> int:
    """Convert a datetime to NTP seconds. None maps to zero."""
    if value is None:
        return 0
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    return int((value - NTP_EPOCH).total_seconds())
