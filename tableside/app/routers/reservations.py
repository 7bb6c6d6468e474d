import datetime as dt
import logging

from fastapi import APIRouter, Depends, Query, Response, status

from tableside.app.routers.deps import payload_data, request_context
from tableside.app.routers.schemas import (
    DataIn,
    ReservationEnvelope,
    ReservationListEnvelope,
    ReservationOut,
)
from tableside.app.services.pipeline import RequestContext, reservation_exists, run_pipeline
from tableside.app.services.reservations import ReservationRepository, get_reservation_repository
from tableside.app.services.status import is_expected_transition
from tableside.app.services.validation import (
    has_only_valid_fields,
    has_required_fields,
    has_valid_inputs,
    has_valid_status_request,
    status_is_booked,
    status_is_known,
    status_is_not_finished,
)


router = APIRouter(tags=["reservations"])
logger = logging.getLogger(__name__)


def _envelope(row: dict) -> ReservationEnvelope:
    return ReservationEnvelope(data=ReservationOut(**row))


@router.get("/reservations", response_model=ReservationListEnvelope)
async def list_reservations(
    date: dt.date | None = Query(None),
    mobile_number: str | None = Query(None),
    repository: ReservationRepository = Depends(get_reservation_repository),
) -> ReservationListEnvelope:
    """List by date, by phone-number fragment, or everything; date wins if both are given."""
    if date is not None:
        rows = await repository.list_by_date(date)
    elif mobile_number:
        rows = await repository.list_by_phone_fragment(mobile_number)
    else:
        rows = await repository.list_all()
    return ReservationListEnvelope(data=[ReservationOut(**row) for row in rows])


@router.post("/reservations", response_model=ReservationEnvelope, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    payload: DataIn | None = None,
    ctx: RequestContext = Depends(request_context),
    repository: ReservationRepository = Depends(get_reservation_repository),
) -> ReservationEnvelope:
    ctx.data = payload_data(payload)
    await run_pipeline(
        ctx,
        [
            has_only_valid_fields,
            has_required_fields,
            has_valid_inputs,
            status_is_booked,
        ],
    )
    return _envelope(await repository.insert(ctx.values))


@router.get("/reservations/{reservation_id}", response_model=ReservationEnvelope)
async def read_reservation(
    reservation_id: int,
    ctx: RequestContext = Depends(request_context),
    repository: ReservationRepository = Depends(get_reservation_repository),
) -> ReservationEnvelope:
    ctx.reservation_id = reservation_id
    await run_pipeline(ctx, [reservation_exists(repository)])
    return _envelope(ctx.reservation)


@router.put("/reservations/{reservation_id}", response_model=ReservationEnvelope)
async def update_reservation(
    reservation_id: int,
    payload: DataIn | None = None,
    ctx: RequestContext = Depends(request_context),
    repository: ReservationRepository = Depends(get_reservation_repository),
) -> ReservationEnvelope:
    ctx.reservation_id = reservation_id
    ctx.data = payload_data(payload)
    await run_pipeline(
        ctx,
        [
            reservation_exists(repository),
            status_is_not_finished,
            has_only_valid_fields,
            has_required_fields,
            has_valid_inputs,
            status_is_known,
        ],
    )
    return _envelope(await repository.replace(reservation_id, ctx.values))


@router.put("/reservations/{reservation_id}/status", response_model=ReservationEnvelope)
async def update_reservation_status(
    reservation_id: int,
    payload: DataIn | None = None,
    ctx: RequestContext = Depends(request_context),
    repository: ReservationRepository = Depends(get_reservation_repository),
) -> ReservationEnvelope:
    ctx.reservation_id = reservation_id
    ctx.data = payload_data(payload)
    await run_pipeline(
        ctx,
        [
            reservation_exists(repository),
            status_is_not_finished,
            has_valid_status_request,
        ],
    )

    current, requested = ctx.reservation["status"], ctx.values["status"]
    if not is_expected_transition(current, requested):
        logger.info("Reservation %s moved %s -> %s outside the usual flow", reservation_id, current, requested)
    return _envelope(await repository.set_status(reservation_id, requested))


@router.delete("/reservations/{reservation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_reservation(
    reservation_id: int,
    ctx: RequestContext = Depends(request_context),
    repository: ReservationRepository = Depends(get_reservation_repository),
) -> Response:
    ctx.reservation_id = reservation_id
    await run_pipeline(ctx, [reservation_exists(repository)])
    await repository.delete(reservation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
