"""Async wrapper around the spreadsheet-backed row store REST API."""

from __future__ import annotations

import logging
from typing import Any, Mapping
from urllib.parse import quote

import httpx

from ynigo_mart.config.settings import Settings
from ynigo_mart.errors import TransportError
from ynigo_mart.metrics.prometheus_exporter import row_store_errors_total
from ynigo_mart.store.records import SHEET_HEADERS, UserRecord

logger = logging.getLogger(__name__)


class RowStoreClient:
    """Reads all rows, appends rows and patches single rows."""

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        if not settings.row_store_url:
            raise RuntimeError("ROW_STORE_URL is not configured.")

        self._settings = settings
        self._endpoint = settings.row_store_endpoint
        self._client = httpx.AsyncClient(
            timeout=settings.request_timeout,
            transport=transport,
        )

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def addressing(self) -> str:
        return self._settings.row_addressing

    async def close(self) -> None:
        """Close the underlying HTTP client."""

        await self._client.aclose()

    def selector_for(self, record: UserRecord) -> str:
        """Return the path segment addressing ``record`` under the configured scheme."""

        if self.addressing == "index":
            return str(record.row)
        return f"{SHEET_HEADERS['id']}/{quote(record.id, safe='')}"

    async def _request_json(
        self,
        operation: str,
        method: str,
        url: str,
        *,
        json_body: Mapping[str, Any] | None = None,
    ) -> Any:
        try:
            response = await self._client.request(
                method,
                url,
                json=json_body,
                headers={"Cache-Control": "no-store"},
            )
            response.raise_for_status()
            if not response.content:
                return {}
            return response.json()
        except httpx.HTTPStatusError as exc:
            row_store_errors_total.labels(operation=operation).inc()
            raise TransportError(
                f"{method} failed {exc.response.status_code}: {exc.response.text or exc.response.reason_phrase}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.TimeoutException as exc:
            row_store_errors_total.labels(operation=operation).inc()
            raise TransportError(f"{method} {url} timed out.") from exc
        except httpx.HTTPError as exc:
            row_store_errors_total.labels(operation=operation).inc()
            raise TransportError(f"{method} {url} failed: {exc}") from exc
        except ValueError as exc:
            row_store_errors_total.labels(operation=operation).inc()
            raise TransportError(f"{method} {url} returned a non-JSON body.") from exc

    async def fetch_rows(self) -> list[dict[str, Any]]:
        """Return every row currently stored in the sheet."""

        payload = await self._request_json("fetch", "GET", self._endpoint)
        if payload == {}:
            return []
        if not isinstance(payload, list):
            row_store_errors_total.labels(operation="fetch").inc()
            raise TransportError("Row store returned an unexpected payload; expected a list of rows.")
        return [row for row in payload if isinstance(row, Mapping)]

    async def append_row(self, row: Mapping[str, Any]) -> Any:
        """Append a single row."""

        logger.debug("Appending row with id %s", row.get(SHEET_HEADERS["id"]))
        return await self._request_json("append", "POST", self._endpoint, json_body=dict(row))

    async def update_row(self, selector: str, partial: Mapping[str, Any]) -> Any:
        """Patch the fields in ``partial`` on the row addressed by ``selector``."""

        url = f"{self._endpoint}/{selector}"
        return await self._request_json("update", "PATCH", url, json_body=dict(partial))

    async def ping(self) -> bool:
        """Return ``True`` when the row store answers a read-all request."""

        await self.fetch_rows()
        return True
