import pytest
from httpx import ASGITransport, AsyncClient

from conftest import API, FUTURE_DATE, FUTURE_TUESDAY, NEXT_DAY, reservation_payload


pytestmark = pytest.mark.asyncio(loop_scope="module")


def client_for(app):
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


async def create(client, **overrides):
    response = await client.post(f"{API}/reservations", json={"data": reservation_payload(**overrides)})
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def test_create_reservation_forces_booked(api, store):
    async with client_for(api) as client:
        response = await client.post(f"{API}/reservations", json={"data": reservation_payload()})

    assert response.status_code == 201, response.text
    data = response.json()["data"]
    assert data["status"] == "booked"
    assert data["reservation_date"] == FUTURE_DATE
    assert data["reservation_time"] == "18:30"
    assert data["people"] == 2
    assert store.reservations[data["id"]]["status"] == "booked"


async def test_create_with_booked_status_succeeds(api):
    async with client_for(api) as client:
        data = await create(client, status="booked")
    assert data["status"] == "booked"


async def test_create_with_seated_status_is_rejected(api, store):
    async with client_for(api) as client:
        response = await client.post(
            f"{API}/reservations",
            json={"data": reservation_payload(status="seated")},
        )

    assert response.status_code == 400
    assert response.json() == {"error": "The reservation status is seated."}
    assert store.reservations == {}


async def test_create_without_body_lists_every_field(api):
    async with client_for(api) as client:
        response = await client.post(f"{API}/reservations")

    assert response.status_code == 400
    assert response.json()["error"] == (
        "Missing required field(s): first_name, last_name, mobile_number, "
        "reservation_date, reservation_time, people"
    )


async def test_create_missing_fields(api):
    payload = reservation_payload()
    del payload["last_name"]
    payload["reservation_time"] = ""

    async with client_for(api) as client:
        response = await client.post(f"{API}/reservations", json={"data": payload})

    assert response.status_code == 400
    assert response.json()["error"] == "Missing required field(s): last_name, reservation_time"


async def test_create_with_unknown_fields(api):
    async with client_for(api) as client:
        response = await client.post(
            f"{API}/reservations",
            json={"data": reservation_payload(table_id=1, notes="window")},
        )

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid field(s): table_id, notes"


async def test_create_with_string_people(api):
    async with client_for(api) as client:
        response = await client.post(f"{API}/reservations", json={"data": reservation_payload(people="2")})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid input(s): people"


async def test_create_with_trailing_newline_in_time(api, store):
    async with client_for(api) as client:
        response = await client.post(
            f"{API}/reservations",
            json={"data": reservation_payload(reservation_time="18:30\n")},
        )

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid input(s): reservation_time"
    assert store.reservations == {}


async def test_create_with_non_text_name_and_phone(api, store):
    async with client_for(api) as client:
        response = await client.post(
            f"{API}/reservations",
            json={"data": reservation_payload(first_name=123, last_name={"x": 1}, mobile_number=5550100)},
        )

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid input(s): first_name last_name mobile_number"
    assert store.reservations == {}


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"reservation_date": FUTURE_TUESDAY}, "The restaurant is closed on Tuesdays."),
        ({"reservation_date": "2001-01-03"}, "Please enter future reservation date."),
        ({"reservation_time": "10:29"}, "Please enter a time between 10:30 to 21:30."),
        ({"reservation_time": "21:31"}, "Please enter a time between 10:30 to 21:30."),
    ],
)
async def test_create_business_rules(api, overrides, message):
    async with client_for(api) as client:
        response = await client.post(f"{API}/reservations", json={"data": reservation_payload(**overrides)})

    assert response.status_code == 400
    assert response.json()["error"] == message


async def test_read_reservation(api):
    async with client_for(api) as client:
        created = await create(client)
        await create(client, first_name="Other")
        response = await client.get(f"{API}/reservations/{created['id']}")

    assert response.status_code == 200
    assert response.json()["data"] == created


async def test_read_unknown_reservation(api):
    async with client_for(api) as client:
        response = await client.get(f"{API}/reservations/404")

    assert response.status_code == 404
    assert response.json() == {"error": "Reservation ID 404 does not exist."}


async def test_list_reservations(api):
    async with client_for(api) as client:
        late = await create(client, reservation_time="20:00", mobile_number="202-555-0164")
        early = await create(client, reservation_time="11:00", mobile_number="(303) 555-9999")
        other_day = await create(client, reservation_date=NEXT_DAY, mobile_number="202.555.0100")

        by_date = await client.get(f"{API}/reservations", params={"date": FUTURE_DATE})
        by_phone = await client.get(f"{API}/reservations", params={"mobile_number": "(202) 555"})
        everything = await client.get(f"{API}/reservations")
        no_digits = await client.get(f"{API}/reservations", params={"mobile_number": "abc"})

    assert [r["id"] for r in by_date.json()["data"]] == [early["id"], late["id"]]
    assert [r["id"] for r in by_phone.json()["data"]] == [late["id"], other_day["id"]]
    assert {r["id"] for r in everything.json()["data"]} == {late["id"], early["id"], other_day["id"]}
    assert no_digits.json()["data"] == []


async def test_list_by_date_keeps_finished_reservations(api):
    async with client_for(api) as client:
        created = await create(client)
        await client.put(f"{API}/reservations/{created['id']}/status", json={"data": {"status": "finished"}})
        response = await client.get(f"{API}/reservations", params={"date": FUTURE_DATE})

    assert [r["status"] for r in response.json()["data"]] == ["finished"]


async def test_list_with_malformed_date(api):
    async with client_for(api) as client:
        response = await client.get(f"{API}/reservations", params={"date": "tomorrow"})
    assert response.status_code == 422


async def test_update_reservation(api):
    async with client_for(api) as client:
        created = await create(client)
        changed = {**created, "people": 6, "reservation_time": "19:45"}
        response = await client.put(f"{API}/reservations/{created['id']}", json={"data": changed})

    assert response.status_code == 200, response.text
    data = response.json()["data"]
    assert data["people"] == 6
    assert data["reservation_time"] == "19:45"
    assert data["status"] == "booked"


async def test_update_rejects_unknown_status(api):
    async with client_for(api) as client:
        created = await create(client)
        response = await client.put(
            f"{API}/reservations/{created['id']}",
            json={"data": {**created, "status": "eaten"}},
        )

    assert response.status_code == 400
    assert response.json()["error"] == "The reservation status eaten is invalid."


async def test_update_finished_reservation_is_rejected(api, store):
    async with client_for(api) as client:
        created = await create(client)
        store.reservations[created["id"]]["status"] = "finished"
        response = await client.put(
            f"{API}/reservations/{created['id']}",
            json={"data": {**created, "people": 4}},
        )

    assert response.status_code == 400
    assert response.json()["error"] == "A finished reservation cannot be updated."
    assert store.reservations[created["id"]]["people"] == 2


async def test_update_unknown_reservation(api):
    async with client_for(api) as client:
        response = await client.put(f"{API}/reservations/12", json={"data": reservation_payload()})
    assert response.status_code == 404


async def test_status_flow(api):
    async with client_for(api) as client:
        created = await create(client)
        url = f"{API}/reservations/{created['id']}/status"

        seated = await client.put(url, json={"data": {"status": "seated"}})
        finished = await client.put(url, json={"data": {"status": "finished"}})
        reopened = await client.put(url, json={"data": {"status": "booked"}})

    assert seated.json()["data"]["status"] == "seated"
    assert finished.json()["data"]["status"] == "finished"
    assert reopened.status_code == 400
    assert reopened.json()["error"] == "A finished reservation cannot be updated."


@pytest.mark.parametrize("requested", ["booked", "seated", "finished", "cancelled"])
async def test_finished_status_is_terminal(api, store, requested):
    async with client_for(api) as client:
        created = await create(client)
        store.reservations[created["id"]]["status"] = "finished"
        response = await client.put(
            f"{API}/reservations/{created['id']}/status",
            json={"data": {"status": requested}},
        )

    assert response.status_code == 400
    assert store.reservations[created["id"]]["status"] == "finished"


async def test_cancel_reservation(api):
    async with client_for(api) as client:
        created = await create(client)
        response = await client.put(
            f"{API}/reservations/{created['id']}/status",
            json={"data": {"status": "cancelled"}},
        )

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "cancelled"


async def test_invalid_status_is_named(api):
    async with client_for(api) as client:
        created = await create(client)
        response = await client.put(
            f"{API}/reservations/{created['id']}/status",
            json={"data": {"status": "unknown"}},
        )

    assert response.status_code == 400
    assert response.json()["error"] == "The reservation status unknown is invalid."


async def test_delete_reservation(api, store):
    async with client_for(api) as client:
        created = await create(client)
        deleted = await client.delete(f"{API}/reservations/{created['id']}")
        missing = await client.delete(f"{API}/reservations/{created['id']}")

    assert deleted.status_code == 204
    assert deleted.content == b""
    assert missing.status_code == 404
    assert store.reservations == {}


async def test_healthz(api):
    async with client_for(api) as client:
        response = await client.get(f"{API}/healthz")
    assert response.json() == {"ok": True}
