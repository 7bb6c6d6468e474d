from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError

from tableside.app.core import redis_client as redis_module
from tableside.app.core.config import settings
from tableside.app.core.errors import ConflictError
from tableside.app.routers.deps import payload_data, request_context
from tableside.app.routers.schemas import DataIn, TableEnvelope, TableListEnvelope, TableOut
from tableside.app.services.pipeline import RequestContext, reservation_exists, run_pipeline, table_exists
from tableside.app.services.reservations import ReservationRepository, get_reservation_repository
from tableside.app.services.tables import TableRepository, get_table_repository
from tableside.app.services.validation import (
    has_only_valid_table_fields,
    has_seat_request,
    has_valid_table,
    reservation_is_seatable,
    table_has_capacity,
    table_is_free,
    table_is_occupied,
)


router = APIRouter(tags=["tables"])


@router.get("/tables", response_model=TableListEnvelope)
async def list_tables(
    tables: TableRepository = Depends(get_table_repository),
) -> TableListEnvelope:
    return TableListEnvelope(data=[TableOut(**row) for row in await tables.list_all()])


@router.post("/tables", response_model=TableEnvelope, status_code=status.HTTP_201_CREATED)
async def create_table(
    payload: DataIn | None = None,
    ctx: RequestContext = Depends(request_context),
    tables: TableRepository = Depends(get_table_repository),
) -> TableEnvelope:
    ctx.data = payload_data(payload)
    await run_pipeline(ctx, [has_only_valid_table_fields, has_valid_table])
    return TableEnvelope(data=TableOut(**await tables.insert(ctx.values)))


@router.put("/tables/{table_id}/seat", response_model=TableEnvelope)
async def seat_table(
    table_id: int,
    payload: DataIn | None = None,
    ctx: RequestContext = Depends(request_context),
    tables: TableRepository = Depends(get_table_repository),
    reservations: ReservationRepository = Depends(get_reservation_repository),
) -> TableEnvelope:
    ctx.table_id = table_id
    ctx.data = payload_data(payload)
    await run_pipeline(ctx, [has_seat_request])

    # Hold the table while it is checked and written so a concurrent seat
    # request cannot pass the occupancy check too.
    hold_key = redis_module.seat_hold_key(table_id)
    if not await redis_module.acquire_hold(hold_key, settings.SEAT_HOLD_MS):
        raise ConflictError(f"Table {table_id} is being seated by another request.")

    try:
        await run_pipeline(
            ctx,
            [
                table_exists(tables),
                reservation_exists(reservations),
                reservation_is_seatable,
                table_has_capacity,
                table_is_free,
            ],
        )
        row = await tables.seat(table_id, ctx.reservation_id)
    except IntegrityError as exc:
        # ux_tables_reservation_id: seated at another table by a concurrent request
        raise ConflictError(f"Reservation {ctx.reservation_id} is already seated at another table.") from exc
    finally:
        await redis_module.release_hold(hold_key)

    return TableEnvelope(data=TableOut(**row))


@router.delete("/tables/{table_id}/seat", response_model=TableEnvelope)
async def finish_table(
    table_id: int,
    ctx: RequestContext = Depends(request_context),
    tables: TableRepository = Depends(get_table_repository),
) -> TableEnvelope:
    ctx.table_id = table_id
    await run_pipeline(ctx, [table_exists(tables), table_is_occupied])
    row = await tables.finish(table_id, ctx.table["reservation_id"])
    return TableEnvelope(data=TableOut(**row))
