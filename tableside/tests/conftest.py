from datetime import datetime, timezone
from itertools import count

import pytest

from tableside.app.core import redis_client as redis_module
from tableside.app.main import app
from tableside.app.services.reservations import get_reservation_repository, phone_digits
from tableside.app.services.tables import get_table_repository


API = "/api/v1"

# 2099-01-01 is a Thursday, 2099-01-06 a Tuesday.
FUTURE_DATE = "2099-01-01"
NEXT_DAY = "2099-01-02"
FUTURE_TUESDAY = "2099-01-06"


def reservation_payload(**overrides):
    payload = {
        "first_name": "Rick",
        "last_name": "Sanchez",
        "mobile_number": "(202) 555-0164",
        "reservation_date": FUTURE_DATE,
        "reservation_time": "18:30",
        "people": 2,
    }
    payload.update(overrides)
    return payload


class FakeRedis:
    """Just enough of redis.asyncio.Redis for the seat hold and readiness probe."""

    def __init__(self):
        self.store = {}

    async def set(self, key, value, nx=False, px=None):
        if nx and key in self.store:
            return None
        self.store[key] = value
        return True

    async def delete(self, key):
        return 1 if self.store.pop(key, None) is not None else 0

    async def ping(self):
        return True

    async def aclose(self):
        self.store.clear()


class MemoryStore:
    def __init__(self):
        self.reservations = {}
        self.tables = {}
        self._ids = count(1)
        self._table_ids = count(1)

    def now(self):
        return datetime.now(timezone.utc)


class MemoryReservations:
    """Stands in for ReservationRepository with dict storage."""

    def __init__(self, store):
        self.store = store
        self.get_calls = 0

    def _sorted(self, rows):
        return sorted(rows, key=lambda r: (r["reservation_date"], r["reservation_time"], r["id"]))

    async def get(self, reservation_id):
        self.get_calls += 1
        row = self.store.reservations.get(reservation_id)
        return dict(row) if row is not None else None

    async def list_all(self):
        return self._sorted(dict(r) for r in self.store.reservations.values())

    async def list_by_date(self, reservation_date):
        return self._sorted(
            dict(r) for r in self.store.reservations.values() if r["reservation_date"] == reservation_date
        )

    async def list_by_phone_fragment(self, fragment):
        digits = phone_digits(fragment)
        if not digits:
            return []
        return self._sorted(
            dict(r) for r in self.store.reservations.values() if digits in phone_digits(r["mobile_number"])
        )

    async def insert(self, values):
        reservation_id = next(self.store._ids)
        now = self.store.now()
        row = {**values, "id": reservation_id, "created_at": now, "updated_at": now}
        self.store.reservations[reservation_id] = row
        return dict(row)

    async def replace(self, reservation_id, values):
        row = self.store.reservations[reservation_id]
        row.update(values, updated_at=self.store.now())
        return dict(row)

    async def set_status(self, reservation_id, status):
        row = self.store.reservations[reservation_id]
        row.update(status=status, updated_at=self.store.now())
        return dict(row)

    async def delete(self, reservation_id):
        del self.store.reservations[reservation_id]


class MemoryTables:
    def __init__(self, store):
        self.store = store

    async def get(self, table_id):
        row = self.store.tables.get(table_id)
        return dict(row) if row is not None else None

    async def list_all(self):
        return sorted((dict(t) for t in self.store.tables.values()), key=lambda t: (t["name"], t["id"]))

    async def insert(self, values):
        table_id = next(self.store._table_ids)
        now = self.store.now()
        row = {
            "id": table_id,
            "name": values["name"],
            "capacity": values["capacity"],
            "reservation_id": None,
            "created_at": now,
            "updated_at": now,
        }
        self.store.tables[table_id] = row
        return dict(row)

    async def seat(self, table_id, reservation_id):
        self.store.tables[table_id]["reservation_id"] = reservation_id
        self.store.reservations[reservation_id]["status"] = "seated"
        return dict(self.store.tables[table_id])

    async def finish(self, table_id, reservation_id):
        self.store.reservations[reservation_id]["status"] = "finished"
        self.store.tables[table_id]["reservation_id"] = None
        return dict(self.store.tables[table_id])


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def fake_redis():
    previous = redis_module.redis_client
    redis_module.redis_client = FakeRedis()
    yield redis_module.redis_client
    redis_module.redis_client = previous


@pytest.fixture
def api(store, fake_redis):
    """The app wired to in-memory repositories and Redis."""
    reservations = MemoryReservations(store)
    tables = MemoryTables(store)
    app.dependency_overrides[get_reservation_repository] = lambda: reservations
    app.dependency_overrides[get_table_repository] = lambda: tables
    yield app
    app.dependency_overrides.clear()
