import redis.asyncio as redis

from tableside.app.core.config import settings
from tableside.app.core.errors import MSG_REDIS_UNAVAILABLE, ServiceUnavailableError


redis_client: redis.Redis | None = None


async def init_redis() -> None:
    """Initialise a shared Redis connection."""
    global redis_client
    redis_client = redis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
    )


async def close_redis() -> None:
    """Close the Redis connection if it was initialised."""
    global redis_client
    if redis_client is not None:
        await redis_client.aclose()
        redis_client = None


def seat_hold_key(table_id: int) -> str:
    return f"seat:{table_id}"


async def acquire_hold(key: str, ttl_ms: int) -> bool:
    """SET NX a short-lived hold; False when someone else already holds it."""
    if redis_client is None:
        raise ServiceUnavailableError(MSG_REDIS_UNAVAILABLE)
    return bool(await redis_client.set(key, "1", nx=True, px=ttl_ms))


async def release_hold(key: str) -> None:
    if redis_client is not None:
        await redis_client.delete(key)
