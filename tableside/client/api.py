"""
Async client for the reservations API.

Bodies go out wrapped as {"data": ...} and the "data" member of each
response is returned. A 204 yields None; an {"error": ...} payload raises
ApiClientError.
"""
from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000/api/v1"


class ApiClientError(Exception):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def unfinished(reservations: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """What the dashboard shows for a day: everything not yet finished."""
    return [r for r in reservations if r.get("status") != "finished"]


class ReservationsClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def __aenter__(self) -> ReservationsClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(
        self,
        method: str,
        url: str,
        *,
        data: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        body = {"data": data} if data is not None else None
        response = await self._client.request(method, url, json=body, params=params)

        if response.status_code == httpx.codes.NO_CONTENT:
            return None

        payload = response.json()
        if response.is_error:
            message = payload.get("error") or str(payload.get("detail") or response.reason_phrase)
            logger.debug("%s %s failed: %s", method, url, message)
            raise ApiClientError(response.status_code, message)
        return payload["data"]

    # --- Reservations ---

    async def list_reservations(self, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """``params`` takes ``date`` or ``mobile_number``."""
        query = {key: str(value) for key, value in (params or {}).items()}
        return await self._request("GET", "/reservations", params=query)

    async def read_reservation(self, reservation_id: int) -> dict[str, Any]:
        return await self._request("GET", f"/reservations/{reservation_id}")

    async def create_reservation(self, reservation: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/reservations", data=reservation)

    async def update_reservation(self, reservation: dict[str, Any]) -> dict[str, Any]:
        return await self._request("PUT", f"/reservations/{reservation['id']}", data=reservation)

    async def update_reservation_status(self, reservation_id: int, status: str) -> dict[str, Any]:
        return await self._request("PUT", f"/reservations/{reservation_id}/status", data={"status": status})

    async def cancel_reservation(self, reservation_id: int) -> dict[str, Any]:
        return await self.update_reservation_status(reservation_id, "cancelled")

    async def delete_reservation(self, reservation_id: int) -> None:
        await self._request("DELETE", f"/reservations/{reservation_id}")

    # --- Tables ---

    async def list_tables(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/tables")

    async def create_table(self, table: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/tables", data=table)

    async def seat_table(self, table_id: int, reservation_id: int) -> dict[str, Any]:
        return await self._request("PUT", f"/tables/{table_id}/seat", data={"reservation_id": reservation_id})

    async def finish_table(self, table_id: int) -> dict[str, Any]:
        return await self._request("DELETE", f"/tables/{table_id}/seat")
