from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.app.core import redis_client as redis_module
from tableside.app.core.errors import MSG_REDIS_UNAVAILABLE
from tableside.app.db.session import get_session, ping


router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz() -> dict[str, bool]:
    """Basic liveness probe."""
    return {"ok": True}


@router.get("/readiness")
async def readiness(session: AsyncSession = Depends(get_session)) -> dict[str, bool]:
    """Ensure Postgres and the seat-hold Redis are reachable."""
    if redis_module.redis_client is None:
        raise HTTPException(status_code=503, detail=MSG_REDIS_UNAVAILABLE)

    await ping(session)
    try:
        await redis_module.redis_client.ping()
    except Exception as exc:  # pragma: no cover - defensive guard
        raise HTTPException(status_code=503, detail=MSG_REDIS_UNAVAILABLE) from exc

    return {"ready": True}
