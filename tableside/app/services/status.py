"""
Reservation status state machine.

TRANSITIONS lists the moves a well-behaved client makes. The guard itself
only refuses to leave ``finished``; any other move out of a non-finished
state is accepted.
"""
from __future__ import annotations

from enum import Enum

from tableside.app.core.errors import BusinessRuleError


class ReservationStatus(str, Enum):
    BOOKED = "booked"
    SEATED = "seated"
    FINISHED = "finished"
    CANCELLED = "cancelled"


INITIAL_STATUS = ReservationStatus.BOOKED

TRANSITIONS: dict[ReservationStatus, frozenset[ReservationStatus]] = {
    ReservationStatus.BOOKED: frozenset({ReservationStatus.SEATED, ReservationStatus.CANCELLED}),
    ReservationStatus.SEATED: frozenset({ReservationStatus.FINISHED, ReservationStatus.CANCELLED}),
    ReservationStatus.FINISHED: frozenset(),
    ReservationStatus.CANCELLED: frozenset(),
}

# Statuses that may not be changed by any update.
IMMUTABLE = frozenset({ReservationStatus.FINISHED})


def parse_status(value: object) -> ReservationStatus:
    """Return the matching status or raise naming the rejected value."""
    try:
        return ReservationStatus(value)
    except ValueError:
        raise BusinessRuleError(f"The reservation status {value} is invalid.") from None


def is_expected_transition(current: str, requested: str) -> bool:
    """True when the move is one a correctly-behaving client would request."""
    return ReservationStatus(requested) in TRANSITIONS[ReservationStatus(current)]


def ensure_mutable(current: str) -> None:
    if ReservationStatus(current) in IMMUTABLE:
        raise BusinessRuleError(f"A {current} reservation cannot be updated.")


def check_status_update(current: str, requested: object) -> ReservationStatus:
    """Guard for status-only updates: immutability first, then the value."""
    ensure_mutable(current)
    return parse_status(requested)
