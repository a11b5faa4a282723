"""
Media direction negotiation, following the offer/answer model of :rfc:`3264#section-6.1`
and the hold/resume procedures of :rfc:`3264#section-8.4`.
"""

from __future__ import annotations

import logging
from typing import Mapping

from frozendict import frozendict

from .common import DirectionLike, MediaDirection


__all__ = [
    "next_local_directive",
    "negotiate_answer_direction",
    "is_holding_direction",
]


_logger = logging.getLogger(__name__)

_SENDRECV = MediaDirection.SENDRECV
_SENDONLY = MediaDirection.SENDONLY
_RECVONLY = MediaDirection.RECVONLY
_INACTIVE = MediaDirection.INACTIVE

# current local direction -> direction to offer, for hold and for resume.
# Missing entries are invalid transitions (e.g. holding an already held flow).
_HOLD_TRANSITIONS: Mapping[MediaDirection, MediaDirection] = frozendict(
    {
        _SENDRECV: _SENDONLY,
        _RECVONLY: _INACTIVE,
    }
)
_RESUME_TRANSITIONS: Mapping[MediaDirection, MediaDirection] = frozendict(
    {
        _SENDONLY: _SENDRECV,
        _INACTIVE: _RECVONLY,
        _SENDRECV: _SENDRECV,
    }
)

# (remote offered direction, local preference) -> answered direction
_ANSWER_DIRECTIONS: Mapping[tuple[MediaDirection, MediaDirection], MediaDirection] = frozendict(
    {
        (_SENDRECV, _RECVONLY): _SENDRECV,
        (_SENDRECV, _SENDRECV): _SENDRECV,
        (_SENDRECV, _INACTIVE): _SENDONLY,
        (_SENDRECV, _SENDONLY): _SENDONLY,
        (_SENDONLY, _INACTIVE): _RECVONLY,
        (_SENDONLY, _RECVONLY): _RECVONLY,
        (_SENDONLY, _SENDRECV): _RECVONLY,
        (_RECVONLY, _INACTIVE): _SENDONLY,
        (_RECVONLY, _SENDONLY): _SENDONLY,
        (_RECVONLY, _SENDRECV): _SENDRECV,
    }
)


def next_local_directive(current: DirectionLike, put_on_hold: bool) -> MediaDirection | None:
    """
    Compute the direction to offer when putting a call on hold, or resuming it.

    Holding: ``sendrecv`` becomes ``sendonly``, ``recvonly`` becomes ``inactive``.
    Resuming: ``sendonly`` becomes ``sendrecv``, ``inactive`` becomes ``recvonly``,
    ``sendrecv`` stays as is.
    An unspecified direction is treated as ``sendrecv``.

    :param current: the current local direction.
    :param put_on_hold: True to hold the call, False to resume it.
    :return: the new local direction, or None if the transition is not valid
        (holding an already held flow, or resuming a ``recvonly`` one).
    """
    current = MediaDirection.coerce(current).effective
    transitions = _HOLD_TRANSITIONS if put_on_hold else _RESUME_TRANSITIONS
    return transitions.get(current)


def negotiate_answer_direction(local: DirectionLike, remote: DirectionLike) -> MediaDirection:
    """
    Compute the direction to answer with, given the direction offered by the remote
    party and the local preference. Unspecified directions are treated as ``sendrecv``.

    The answer never sends when the remote does not receive, and never receives when
    the remote does not send. When the local party would rather not receive
    (``inactive`` or ``sendonly`` preference), only sending is kept.

    :param local: the local direction preference, e.g. the current local direction.
    :param remote: the direction offered by the remote party.
    :return: the answer direction, ``inactive`` when no media can flow.
    """
    local = MediaDirection.coerce(local).effective
    remote = MediaDirection.coerce(remote).effective
    answer = _ANSWER_DIRECTIONS.get((remote, local), _INACTIVE)
    _logger.debug(f"Answering {answer.value} to {remote.value} with local {local.value}")
    return answer


def is_holding_direction(direction: DirectionLike) -> bool:
    """Whether the direction puts the other party on hold (``sendonly`` or ``inactive``)."""
    return MediaDirection.coerce(direction) in {_SENDONLY, _INACTIVE}
