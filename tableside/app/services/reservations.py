import logging
import re
from datetime import date
from typing import Any

from fastapi import Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.app.db.session import get_session

logger = logging.getLogger(__name__)

_COLUMNS = """
    id, first_name, last_name, mobile_number,
    reservation_date, reservation_time, people, status,
    created_at, updated_at
"""
_ORDER = "ORDER BY reservation_date, reservation_time, id"


def phone_digits(value: str) -> str:
    """Strip everything but digits so "(555) 010-0100" matches "5550100100"."""
    return re.sub(r"\D", "", value)


class ReservationRepository:
    """SQL access to the reservations table. Records come back as plain dicts."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _fetch_all(self, query: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        result = await self.session.execute(text(query), params or {})
        return [dict(row) for row in result.mappings().all()]

    async def _write_one(self, query: str, params: dict[str, Any]) -> dict[str, Any]:
        result = await self.session.execute(text(query), params)
        row = dict(result.mappings().one())
        await self.session.commit()
        return row

    async def get(self, reservation_id: int) -> dict[str, Any] | None:
        result = await self.session.execute(
            text(f"SELECT {_COLUMNS} FROM reservations WHERE id = :id"),
            {"id": reservation_id},
        )
        row = result.mappings().one_or_none()
        return dict(row) if row is not None else None

    async def list_all(self) -> list[dict[str, Any]]:
        return await self._fetch_all(f"SELECT {_COLUMNS} FROM reservations {_ORDER}")

    async def list_by_date(self, reservation_date: date) -> list[dict[str, Any]]:
        return await self._fetch_all(
            f"""
            SELECT {_COLUMNS}
            FROM reservations
            WHERE reservation_date = :reservation_date
            ORDER BY reservation_time, id
            """,
            {"reservation_date": reservation_date},
        )

    async def list_by_phone_fragment(self, fragment: str) -> list[dict[str, Any]]:
        digits = phone_digits(fragment)
        if not digits:
            return []
        return await self._fetch_all(
            f"""
            SELECT {_COLUMNS}
            FROM reservations
            WHERE regexp_replace(mobile_number, '[^0-9]', '', 'g') LIKE :pattern
            {_ORDER}
            """,
            {"pattern": f"%{digits}%"},
        )

    async def insert(self, values: dict[str, Any]) -> dict[str, Any]:
        row = await self._write_one(
            f"""
            INSERT INTO reservations (
              first_name, last_name, mobile_number,
              reservation_date, reservation_time, people, status
            ) VALUES (
              :first_name, :last_name, :mobile_number,
              :reservation_date, :reservation_time, :people, :status
            )
            RETURNING {_COLUMNS}
            """,
            values,
        )
        logger.info("Created reservation %s for %s %s", row["id"], row["reservation_date"], row["reservation_time"])
        return row

    async def replace(self, reservation_id: int, values: dict[str, Any]) -> dict[str, Any]:
        row = await self._write_one(
            f"""
            UPDATE reservations
            SET first_name = :first_name,
                last_name = :last_name,
                mobile_number = :mobile_number,
                reservation_date = :reservation_date,
                reservation_time = :reservation_time,
                people = :people,
                status = :status,
                updated_at = now()
            WHERE id = :id
            RETURNING {_COLUMNS}
            """,
            {**values, "id": reservation_id},
        )
        logger.info("Updated reservation %s", reservation_id)
        return row

    async def set_status(self, reservation_id: int, status: str) -> dict[str, Any]:
        row = await self._write_one(
            f"""
            UPDATE reservations
            SET status = :status, updated_at = now()
            WHERE id = :id
            RETURNING {_COLUMNS}
            """,
            {"id": reservation_id, "status": status},
        )
        logger.info("Reservation %s is now %s", reservation_id, status)
        return row

    async def delete(self, reservation_id: int) -> None:
        await self.session.execute(
            text("DELETE FROM reservations WHERE id = :id"),
            {"id": reservation_id},
        )
        await self.session.commit()
        logger.info("Deleted reservation %s", reservation_id)


def get_reservation_repository(session: AsyncSession = Depends(get_session)) -> ReservationRepository:
    return ReservationRepository(session)
