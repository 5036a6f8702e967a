"""Shared fixtures: an in-memory sheet served through ``httpx.MockTransport``."""

from __future__ import annotations

import json
from io import BytesIO
from typing import Any
from urllib.parse import unquote

import httpx
import pytest
from PIL import Image

from ynigo_mart.config.settings import Settings
from ynigo_mart.store.client import RowStoreClient
from ynigo_mart.store.repository import ProfileStore

SHEET_URL = "https://sheet.test/sheets/kiosk"
SHEET_PATH = "/sheets/kiosk"


class FakeSheet:
    """Minimal stand-in for a SheetBest collection."""

    def __init__(self, rows: list[dict[str, Any]] | None = None) -> None:
        self.rows = [dict(row) for row in rows or []]
        self.requests: list[httpx.Request] = []
        self.fail: dict[str, int] = {}
        self.balance_override: str | None = None

    def requests_for(self, method: str) -> list[httpx.Request]:
        return [request for request in self.requests if request.method == method]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status = self.fail.get(request.method)
        if status:
            return httpx.Response(status, text="sheet unavailable")

        selector = request.url.path[len(SHEET_PATH):].strip("/")
        if request.method == "GET":
            return httpx.Response(200, json=self.rows)
        if request.method == "POST":
            row = json.loads(request.content)
            self.rows.append(row)
            return httpx.Response(200, json=[row])
        if request.method == "PATCH":
            partial = json.loads(request.content)
            matched = self._match(selector)
            for row in matched:
                self._update(row, partial)
            return httpx.Response(200, json=matched)
        return httpx.Response(405)

    def _match(self, selector: str) -> list[dict[str, Any]]:
        parts = selector.split("/")
        if len(parts) == 2:
            column, value = parts[0], unquote(parts[1])
            return [row for row in self.rows if str(row.get(column)) == value]
        return [self.rows[int(parts[0])]]

    def _update(self, row: dict[str, Any], partial: dict[str, Any]) -> None:
        for key, value in partial.items():
            if key.lower() == "balance" and self.balance_override is not None:
                value = self.balance_override
            existing = next((name for name in row if name.strip().lower() == key.lower()), key)
            row[existing] = value


def image_bytes(size: tuple[int, int] = (300, 200), color: tuple[int, int, int] = (40, 160, 90), fmt: str = "PNG") -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def settings() -> Settings:
    return Settings(row_store_url=SHEET_URL)


@pytest.fixture
def sheet() -> FakeSheet:
    return FakeSheet(
        [
            {"Id": "0", "Name": "Ynigo", "Image": "", "Balance": "10"},
            {"Id": "2", "Name": "Marisol", "Image": "data:image/png;base64,AAAA", "Balance": "3.5"},
            {"Id": "5", "Name": "", "Image": "", "Balance": "1"},
        ],
    )


@pytest.fixture
def client(settings: Settings, sheet: FakeSheet) -> RowStoreClient:
    return RowStoreClient(settings, transport=httpx.MockTransport(sheet.handler))


@pytest.fixture
def store(client: RowStoreClient) -> ProfileStore:
    return ProfileStore(client, id_start=1)
