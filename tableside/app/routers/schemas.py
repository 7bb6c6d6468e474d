from datetime import date, datetime, time
from typing import Any

from pydantic import BaseModel, Field, field_serializer

from tableside.app.services.status import ReservationStatus


class DataIn(BaseModel):
    # Validated field by field in services/validation.py, so kept loose here.
    data: dict[str, Any] = Field(default_factory=dict)


class ReservationOut(BaseModel):
    id: int
    first_name: str
    last_name: str
    mobile_number: str
    reservation_date: date
    # Rendered "HH:MM" so a read record can be sent back unchanged on update
    reservation_time: time
    people: int
    status: ReservationStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_serializer("reservation_time")
    def _serialize_time(self, value: time) -> str:
        return value.strftime("%H:%M")


class ReservationEnvelope(BaseModel):
    data: ReservationOut


class ReservationListEnvelope(BaseModel):
    data: list[ReservationOut]


class TableOut(BaseModel):
    id: int
    name: str
    capacity: int
    reservation_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TableEnvelope(BaseModel):
    data: TableOut


class TableListEnvelope(BaseModel):
    data: list[TableOut]
