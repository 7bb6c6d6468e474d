"""
Validation rules for reservation and table payloads.

The ``check_*`` functions are pure: they take plain values and raise an
ApiError subclass on the first failure they report. The step functions
below them adapt those checks to a RequestContext so routes can chain them
(see services/pipeline.py).
"""
from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any
from zoneinfo import ZoneInfo

from tableside.app.core.config import Settings
from tableside.app.core.errors import BusinessRuleError, ValidationError
from tableside.app.services.pipeline import RequestContext
from tableside.app.services.status import INITIAL_STATUS, ReservationStatus, ensure_mutable, parse_status

RESERVATION_FIELDS = (
    "id",
    "first_name",
    "last_name",
    "mobile_number",
    "reservation_date",
    "reservation_time",
    "people",
    "status",
    "created_at",
    "updated_at",
)
REQUIRED_RESERVATION_FIELDS = (
    "first_name",
    "last_name",
    "mobile_number",
    "reservation_date",
    "reservation_time",
    "people",
)
TEXT_FIELDS = ("first_name", "last_name", "mobile_number")

TABLE_FIELDS = ("id", "name", "capacity", "reservation_id", "created_at", "updated_at")
REQUIRED_TABLE_FIELDS = ("name", "capacity")
MIN_TABLE_NAME_LENGTH = 2

TIME_PATTERN = re.compile(r"(0[0-9]|1[0-9]|2[0-3]):[0-5][0-9]")


@dataclass(frozen=True)
class ServiceRules:
    """When the restaurant takes reservations."""

    timezone: ZoneInfo
    closed_weekday: int = 1
    opening: time = time(10, 30)
    last_seating: time = time(21, 30)

    @classmethod
    def from_settings(cls, settings: Settings) -> ServiceRules:
        return cls(
            timezone=ZoneInfo(settings.RESTAURANT_TIMEZONE),
            closed_weekday=settings.CLOSED_WEEKDAY,
            opening=time.fromisoformat(settings.OPENING_TIME),
            last_seating=time.fromisoformat(settings.LAST_SEATING_TIME),
        )

    def now(self) -> datetime:
        return datetime.now(self.timezone)


# --- Pure checks ---


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _join(names: list[str]) -> str:
    return ", ".join(names)


def unexpected_fields(data: dict[str, Any], allowed: tuple[str, ...]) -> list[str]:
    return [field for field in data if field not in allowed]


def missing_fields(data: dict[str, Any], required: tuple[str, ...]) -> list[str]:
    return [field for field in required if _is_blank(data.get(field))]


def parse_count(value: Any) -> int | None:
    """A positive whole JSON number; strings and booleans do not count."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int) and value >= 1:
        return value
    return None


def parse_date(value: Any) -> date | None:
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def parse_time(value: Any) -> time | None:
    if not isinstance(value, str) or not TIME_PATTERN.fullmatch(value):
        return None
    return time.fromisoformat(value)


def check_fields(data: dict[str, Any], allowed: tuple[str, ...]) -> None:
    extra = unexpected_fields(data, allowed)
    if extra:
        raise ValidationError(f"Invalid field(s): {_join(extra)}")


def check_required(data: dict[str, Any], required: tuple[str, ...]) -> None:
    missing = missing_fields(data, required)
    if missing:
        raise ValidationError(f"Missing required field(s): {_join(missing)}")


def check_reservation_inputs(data: dict[str, Any]) -> tuple[int, date, time]:
    """Check the name and phone are text, parse people, date and time, and
    report every malformed one at once."""
    people = parse_count(data.get("people"))
    reservation_date = parse_date(data.get("reservation_date"))
    reservation_time = parse_time(data.get("reservation_time"))

    invalid = [field for field in TEXT_FIELDS if not isinstance(data.get(field), str)]
    if people is None:
        invalid.append("people")
    if reservation_date is None:
        invalid.append("reservation_date")
    if reservation_time is None:
        invalid.append("reservation_time")
    if invalid:
        raise ValidationError("Invalid input(s): " + " ".join(invalid))
    return people, reservation_date, reservation_time


def check_service_rules(
    reservation_date: date,
    reservation_time: time,
    rules: ServiceRules,
    now: datetime,
) -> None:
    """Closed day, then past date-time, then service hours; first failure wins."""
    if reservation_date.weekday() == rules.closed_weekday:
        day = calendar.day_name[rules.closed_weekday]
        raise BusinessRuleError(f"The restaurant is closed on {day}s.")

    starts_at = datetime.combine(reservation_date, reservation_time, tzinfo=rules.timezone)
    if starts_at < now:
        raise BusinessRuleError("Please enter future reservation date.")

    if not rules.opening <= reservation_time <= rules.last_seating:
        raise BusinessRuleError(
            f"Please enter a time between {rules.opening:%H:%M} to {rules.last_seating:%H:%M}."
        )


def check_initial_status(data: dict[str, Any]) -> None:
    requested = data.get("status")
    if _is_blank(requested) or requested == INITIAL_STATUS.value:
        return
    raise BusinessRuleError(f"The reservation status is {requested}.")


def check_table_inputs(data: dict[str, Any]) -> tuple[str, int]:
    name = data.get("name")
    capacity = parse_count(data.get("capacity"))

    invalid = []
    if not isinstance(name, str) or len(name.strip()) < MIN_TABLE_NAME_LENGTH:
        invalid.append("name")
    if capacity is None:
        invalid.append("capacity")
    if invalid:
        raise ValidationError("Invalid input(s): " + " ".join(invalid))
    return name.strip(), capacity


# --- Pipeline steps: reservations ---


def has_only_valid_fields(ctx: RequestContext) -> None:
    check_fields(ctx.data, RESERVATION_FIELDS)


def has_required_fields(ctx: RequestContext) -> None:
    check_required(ctx.data, REQUIRED_RESERVATION_FIELDS)


def has_valid_inputs(ctx: RequestContext) -> None:
    people, reservation_date, reservation_time = check_reservation_inputs(ctx.data)
    check_service_rules(reservation_date, reservation_time, ctx.rules, ctx.now)
    ctx.values.update(
        first_name=ctx.data["first_name"],
        last_name=ctx.data["last_name"],
        mobile_number=ctx.data["mobile_number"],
        reservation_date=reservation_date,
        reservation_time=reservation_time,
        people=people,
    )


def status_is_booked(ctx: RequestContext) -> None:
    check_initial_status(ctx.data)
    ctx.values["status"] = INITIAL_STATUS.value


def status_is_known(ctx: RequestContext) -> None:
    """Full updates may carry a status; when they do it must be a real one."""
    requested = ctx.data.get("status")
    if _is_blank(requested):
        ctx.values["status"] = ctx.reservation["status"]
    else:
        ctx.values["status"] = parse_status(requested).value


def status_is_not_finished(ctx: RequestContext) -> None:
    ensure_mutable(ctx.reservation["status"])


def has_valid_status_request(ctx: RequestContext) -> None:
    ctx.values["status"] = parse_status(ctx.data.get("status")).value


# --- Pipeline steps: tables ---


def has_only_valid_table_fields(ctx: RequestContext) -> None:
    check_fields(ctx.data, TABLE_FIELDS)


def has_valid_table(ctx: RequestContext) -> None:
    check_required(ctx.data, REQUIRED_TABLE_FIELDS)
    name, capacity = check_table_inputs(ctx.data)
    ctx.values.update(name=name, capacity=capacity)


def has_seat_request(ctx: RequestContext) -> None:
    check_required(ctx.data, ("reservation_id",))
    reservation_id = parse_count(ctx.data["reservation_id"])
    if reservation_id is None:
        raise ValidationError("Invalid input(s): reservation_id")
    ctx.reservation_id = reservation_id


def reservation_is_seatable(ctx: RequestContext) -> None:
    current = ctx.reservation["status"]
    if current == ReservationStatus.SEATED.value:
        raise BusinessRuleError(f"Reservation {ctx.reservation_id} is already seated.")
    if current != ReservationStatus.BOOKED.value:
        raise BusinessRuleError(f"A {current} reservation cannot be seated.")


def table_has_capacity(ctx: RequestContext) -> None:
    if ctx.table["capacity"] < ctx.reservation["people"]:
        raise BusinessRuleError("Table capacity is smaller than party size.")


def table_is_free(ctx: RequestContext) -> None:
    if ctx.table["reservation_id"] is not None:
        raise BusinessRuleError(f"Table {ctx.table_id} is occupied.")


def table_is_occupied(ctx: RequestContext) -> None:
    if ctx.table["reservation_id"] is None:
        raise BusinessRuleError(f"Table {ctx.table_id} is not occupied.")
