"""Supabase (PostgREST) adapter for the remote ``cycles`` table.

Translates between canonical ``CycleRecord`` fields and the table's
snake_case columns, and performs the HTTP calls.  The adapter reports
success or one of two failure shapes and never touches process state:

    TransportFailure — network error, timeout, or non-2xx status
    ShapeFailure     — a response that cannot be read as cycle rows

There is no retry here.  A single failed attempt is reported immediately.

Endpoints used (relative to ``{SUPABASE_URL}/rest/v1``):
    GET    /cycles?order=start_date.asc   — full collection
    POST   /cycles                        — insert, returns created row
    PATCH  /cycles?id=eq.<id>             — replace fields by identifier
    DELETE /cycles?id=eq.<id>             — remove by identifier
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from cyclekeeper.config import Settings, get_settings
from cyclekeeper.exceptions import ShapeFailure, TransportFailure
from cyclekeeper.models.cycles import CycleRecord, RemoteId, calculate_length

logger = logging.getLogger("cyclekeeper.supabase")

# canonical attribute → remote column
FIELD_MAP: dict[str, str] = {
    "start_date": "start_date",
    "end_date": "end_date",
    "flow": "flow",
    "symptoms": "symptoms",
    "pre_symptoms": "pre_symptoms",
    "notes": "notes",
    "length": "length",
}


# ---------------------------------------------------------------------------
# Row mapping
# ---------------------------------------------------------------------------


def to_remote_row(record: CycleRecord) -> dict[str, Any]:
    """Map a record to the remote column layout (identifier and pending flag excluded)."""
    data = record.model_dump(mode="json", include=set(FIELD_MAP))
    return {FIELD_MAP[key]: value for key, value in data.items()}


def from_remote_row(row: Any) -> CycleRecord:
    """Map one remote row to a synced record.

    Missing optional columns get the same defaults the collaborator form uses.
    A missing ``length`` is recomputed from the dates.

    Raises:
        ShapeFailure: If the row lacks an identifier or valid dates.
    """
    try:
        start_date = row["start_date"]
        end_date = row["end_date"]
        record = CycleRecord(
            id=RemoteId(value=row["id"]),
            start_date=start_date,
            end_date=end_date,
            flow=row.get("flow") or "normal",
            symptoms=row.get("symptoms") or [],
            pre_symptoms=row.get("pre_symptoms") or [],
            notes=row.get("notes") or "",
            length=row.get("length") or 0,
            pending_sync=False,
        )
    except (KeyError, TypeError, AttributeError, PydanticValidationError) as exc:
        raise ShapeFailure(f"Unreadable cycle row from Supabase: {exc}") from exc

    if not record.length:
        record = record.model_copy(
            update={"length": calculate_length(record.start_date, record.end_date)}
        )
    return record


# ---------------------------------------------------------------------------
# Adapter
# ---------------------------------------------------------------------------


class SupabaseCycleStore:
    """Remote store adapter backed by the Supabase REST API.

    Usage::

        store = SupabaseCycleStore.from_settings(get_settings())
        records = await store.fetch_all()
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str = "cycles",
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            base_url:    Supabase project URL (SUPABASE_URL).
            api_key:     Anonymous API key (SUPABASE_ANON_KEY).
            table:       Table name holding the cycles.
            timeout:     Per-request timeout in seconds.
            http_client: Optional pre-configured httpx client (shared or for testing).
        """
        self._endpoint = f"{base_url.rstrip('/')}/rest/v1/{table}"
        self._api_key = api_key
        self._timeout = timeout
        self._http_client = http_client

    @classmethod
    def from_settings(
        cls, settings: Settings | None = None, http_client: httpx.AsyncClient | None = None
    ) -> SupabaseCycleStore:
        s = settings or get_settings()
        return cls(
            base_url=s.supabase_url,
            api_key=s.supabase_anon_key,
            table=s.supabase_table,
            timeout=s.remote_timeout_seconds,
            http_client=http_client,
        )

    @property
    def endpoint(self) -> str:
        return self._endpoint

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def fetch_all(self) -> list[CycleRecord]:
        """Fetch every cycle, ordered by ``start_date`` ascending."""
        response = await self._request(
            "GET", params={"select": "*", "order": "start_date.asc"}
        )
        rows = self._json(response)
        if not isinstance(rows, list):
            raise ShapeFailure(f"Expected a list of rows, got {type(rows).__name__}")
        records = [from_remote_row(row) for row in rows]
        logger.info("Supabase: fetched %d cycles", len(records))
        return records

    async def insert(self, record: CycleRecord) -> CycleRecord:
        """Insert a record and return the created row with its remote identifier."""
        response = await self._request("POST", json=to_remote_row(record))
        created = self._first_row(self._json(response))
        if created is None:
            raise ShapeFailure("Supabase insert returned no row")
        result = from_remote_row(created)
        logger.info("Supabase: created cycle %s", result.id)
        return result

    async def update(self, remote_id: RemoteId, record: CycleRecord) -> CycleRecord:
        """Replace the fields of the row identified by ``remote_id``.

        Returns the row as echoed by the remote store, or the submitted fields
        under ``remote_id`` when the response has no body at all.

        Raises:
            ShapeFailure: If the echo is an empty row list (no row matched).
        """
        response = await self._request(
            "PATCH", params={"id": f"eq.{remote_id.value}"}, json=to_remote_row(record)
        )
        if not response.content:
            logger.info("Supabase: updated cycle %s", remote_id)
            return record.model_copy(update={"id": remote_id, "pending_sync": False})

        echoed = self._first_row(self._json(response))
        if echoed is None:
            raise ShapeFailure(f"Supabase update matched no row for id {remote_id}")
        logger.info("Supabase: updated cycle %s", remote_id)
        return from_remote_row(echoed)

    async def delete(self, remote_id: RemoteId) -> None:
        """Remove the row identified by ``remote_id``."""
        await self._request("DELETE", params={"id": f"eq.{remote_id.value}"})
        logger.info("Supabase: deleted cycle %s", remote_id)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _build_headers(self) -> dict[str, str]:
        return {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }

    async def _request(
        self,
        method: str,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send one request to the table endpoint.

        Raises:
            TransportFailure: On network errors, timeouts and non-2xx responses.
        """
        headers = self._build_headers()
        try:
            if self._http_client:
                response = await self._http_client.request(
                    method, self._endpoint, params=params, json=json,
                    headers=headers, timeout=self._timeout,
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.request(
                        method, self._endpoint, params=params, json=json, headers=headers
                    )
        except httpx.HTTPError as exc:
            raise TransportFailure(f"Supabase {method} failed: {exc}") from exc

        if not response.is_success:
            raise TransportFailure(
                f"Supabase {method} returned {response.status_code}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ShapeFailure(f"Supabase returned invalid JSON: {exc}") from exc

    @staticmethod
    def _first_row(data: Any) -> dict | None:
        if isinstance(data, list):
            return data[0] if data else None
        if isinstance(data, dict):
            return data
        raise ShapeFailure(f"Expected row data, got {type(data).__name__}")
