import logging
from typing import Any

from fastapi import Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.app.db.session import get_session
from tableside.app.services.status import ReservationStatus

logger = logging.getLogger(__name__)

_COLUMNS = "id, name, capacity, reservation_id, created_at, updated_at"


class TableRepository:
    """SQL access to the tables table, including the seat/finish transactions."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, table_id: int) -> dict[str, Any] | None:
        result = await self.session.execute(
            text(f"SELECT {_COLUMNS} FROM tables WHERE id = :id"),
            {"id": table_id},
        )
        row = result.mappings().one_or_none()
        return dict(row) if row is not None else None

    async def list_all(self) -> list[dict[str, Any]]:
        result = await self.session.execute(text(f"SELECT {_COLUMNS} FROM tables ORDER BY name, id"))
        return [dict(row) for row in result.mappings().all()]

    async def insert(self, values: dict[str, Any]) -> dict[str, Any]:
        result = await self.session.execute(
            text(
                f"""
                INSERT INTO tables (name, capacity)
                VALUES (:name, :capacity)
                RETURNING {_COLUMNS}
                """
            ),
            {"name": values["name"], "capacity": values["capacity"]},
        )
        row = dict(result.mappings().one())
        await self.session.commit()
        logger.info("Created table %s (%s, capacity %s)", row["id"], row["name"], row["capacity"])
        return row

    async def seat(self, table_id: int, reservation_id: int) -> dict[str, Any]:
        """Link the reservation to the table and mark it seated in one transaction."""
        result = await self.session.execute(
            text(
                f"""
                UPDATE tables
                SET reservation_id = :reservation_id, updated_at = now()
                WHERE id = :id
                RETURNING {_COLUMNS}
                """
            ),
            {"id": table_id, "reservation_id": reservation_id},
        )
        row = dict(result.mappings().one())
        await self._set_reservation_status(reservation_id, ReservationStatus.SEATED)
        await self.session.commit()
        logger.info("Seated reservation %s at table %s", reservation_id, table_id)
        return row

    async def finish(self, table_id: int, reservation_id: int) -> dict[str, Any]:
        """Finish the seated reservation and free the table in one transaction."""
        await self._set_reservation_status(reservation_id, ReservationStatus.FINISHED)
        result = await self.session.execute(
            text(
                f"""
                UPDATE tables
                SET reservation_id = NULL, updated_at = now()
                WHERE id = :id
                RETURNING {_COLUMNS}
                """
            ),
            {"id": table_id},
        )
        row = dict(result.mappings().one())
        await self.session.commit()
        logger.info("Finished reservation %s, table %s is free", reservation_id, table_id)
        return row

    async def _set_reservation_status(self, reservation_id: int, status: ReservationStatus) -> None:
        await self.session.execute(
            text("UPDATE reservations SET status = :status, updated_at = now() WHERE id = :id"),
            {"id": reservation_id, "status": status.value},
        )


def get_table_repository(session: AsyncSession = Depends(get_session)) -> TableRepository:
    return TableRepository(session)
