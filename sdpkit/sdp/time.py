"""SDP time description values: timing, repeat times and time zone adjustments."""

from __future__ import annotations

import datetime
from typing import Sequence

from typing_extensions import Self

from ..exceptions import SDPParseError
from ..helpers import (
    datetime_to_ntp,
    format_typed_time,
    ntp_to_datetime,
    parse_typed_time,
    slots_dataclass,
)


__all__ = [
    "Timing",
    "Repeat",
    "TimeZone",
]


@slots_dataclass
class Timing:
    """
    Session active time, defined in :rfc:`8866#section-5.9`.
    ``None`` stands for the NTP zero value (unbounded / permanent session).

    Syntax::
        t=<start-time> <stop-time>
    """

    start: datetime.datetime | None = None
    stop: datetime.datetime | None = None

    @classmethod
    def from_raw_value(cls, raw_value: str) -> Self:  # noqa: D102
        try:
            start, stop = raw_value.split()
            return cls(start=ntp_to_datetime(int(start)), stop=ntp_to_datetime(int(stop)))
        except (ValueError, OverflowError) as e:
            raise SDPParseError(f"Invalid time field: {raw_value}") from e

    def serialize(self) -> str:  # noqa: D102
        return f"{datetime_to_ntp(self.start)} {datetime_to_ntp(self.stop)}"


@slots_dataclass
class Repeat:
    """
    Repeat times, defined in :rfc:`8866#section-5.10`.

    Syntax::
        r=<repeat interval> <active duration> <offsets from start-time>
    """

    interval: datetime.timedelta
    duration: datetime.timedelta
    offsets: list[datetime.timedelta]

    @classmethod
    def from_raw_value(cls, raw_value: str) -> Self:  # noqa: D102
        try:
            interval, duration, *offsets = raw_value.split()
            return cls(
                interval=parse_typed_time(interval),
                duration=parse_typed_time(duration),
                offsets=[parse_typed_time(offset) for offset in offsets],
            )
        except (ValueError, OverflowError) as e:
            raise SDPParseError(f"Invalid repeat field: {raw_value}") from e

    def serialize(self) -> str:  # noqa: D102
        return " ".join(
            format_typed_time(value)
            for value in (self.interval, self.duration, *self.offsets)
        )


@slots_dataclass
class TimeZone:
    """
    A single time zone adjustment, defined in :rfc:`8866#section-5.11`.
    One ``z=`` line carries one or more of these.

    Syntax::
        z=<adjustment time> <offset> <adjustment time> <offset> ...
    """

    time: datetime.datetime | None
    offset: datetime.timedelta

    @classmethod
    def parse_adjustments(cls, raw_value: str) -> list[TimeZone]:
        """Parse all the adjustments of a ``z=`` line."""
        parts = raw_value.split()
        if not parts or len(parts) % 2:
            raise SDPParseError(f"Invalid time zones field: {raw_value}")
        try:
            return [
                cls(time=ntp_to_datetime(int(time)), offset=parse_typed_time(offset))
                for time, offset in zip(parts[::2], parts[1::2])
            ]
        except (ValueError, OverflowError) as e:
            raise SDPParseError(f"Invalid time zones field: {raw_value}") from e

    def serialize(self) -> str:  # noqa: D102
        return f"{datetime_to_ntp(self.time)} {format_typed_time(self.offset)}"

    @staticmethod
    def serialize_all(timezones: Sequence[TimeZone]) -> str:
        """Serialize a list of adjustments as the value of a single ``z=`` line."""
        return " ".join(timezone.serialize() for timezone in timezones)
