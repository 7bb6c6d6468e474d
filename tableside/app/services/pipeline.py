"""
Ordered request steps.

A route collects its checks into a list and runs them against one
RequestContext. A step either returns (the next one runs) or raises an
ApiError, which ends the request with that error's status and message.
Steps may be plain functions or coroutines.
"""
from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

from tableside.app.core.errors import NotFoundError

if TYPE_CHECKING:
    from tableside.app.services.validation import ServiceRules


@dataclass
class RequestContext:
    data: dict[str, Any]
    rules: ServiceRules
    now: datetime
    reservation_id: int | None = None
    table_id: int | None = None
    # Records resolved by the existence steps, fetched once per request.
    reservation: dict[str, Any] | None = None
    table: dict[str, Any] | None = None
    # Normalised values ready for the repository.
    values: dict[str, Any] = field(default_factory=dict)


Step = Callable[[RequestContext], Awaitable[None] | None]


class _Lookup(Protocol):
    async def get(self, record_id: int) -> dict[str, Any] | None: ...


async def run_pipeline(ctx: RequestContext, steps: Iterable[Step]) -> RequestContext:
    for step in steps:
        result = step(ctx)
        if inspect.isawaitable(result):
            await result
    return ctx


def reservation_exists(repository: _Lookup) -> Step:
    async def step(ctx: RequestContext) -> None:
        reservation = await repository.get(ctx.reservation_id)
        if reservation is None:
            raise NotFoundError(f"Reservation ID {ctx.reservation_id} does not exist.")
        ctx.reservation = reservation

    return step


def table_exists(repository: _Lookup) -> Step:
    async def step(ctx: RequestContext) -> None:
        table = await repository.get(ctx.table_id)
        if table is None:
            raise NotFoundError(f"Table ID {ctx.table_id} does not exist.")
        ctx.table = table

    return step
