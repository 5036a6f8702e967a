"""Tests for the funding session state machine."""

from __future__ import annotations

import json

import httpx
import pytest

from tests.conftest import SHEET_URL, FakeSheet
from ynigo_mart.config.settings import Settings
from ynigo_mart.errors import SessionStateError, TransportError, ValidationError
from ynigo_mart.services.session import SessionController, SessionState, parse_amount
from ynigo_mart.store.client import RowStoreClient
from ynigo_mart.store.repository import ProfileStore


async def _open(store: ProfileStore, user_id: str = "0") -> SessionController:
    await store.refresh()
    session = SessionController(store)
    session.open(store.get(user_id))
    return session


@pytest.mark.asyncio
async def test_open_snapshots_balance(store: ProfileStore) -> None:
    session = await _open(store)

    assert session.state is SessionState.OPEN
    assert session.user.name == "Ynigo"
    assert session.displayed_balance == "10.00"


@pytest.mark.asyncio
async def test_confirm_patches_new_balance(store: ProfileStore, sheet: FakeSheet) -> None:
    session = await _open(store)

    balance = await session.confirm("5")

    patch = sheet.requests_for("PATCH")[0]
    assert str(patch.url) == f"{SHEET_URL}/Id/0"
    assert json.loads(patch.content) == {"Balance": "15.00"}
    assert balance == "15.00"
    assert session.displayed_balance == "15.00"
    assert session.verified
    assert session.amount_text == ""


@pytest.mark.asyncio
async def test_confirm_displays_store_balance_after_write(store: ProfileStore, sheet: FakeSheet) -> None:
    sheet.balance_override = "15.50"
    session = await _open(store)

    balance = await session.confirm(5)

    assert json.loads(sheet.requests_for("PATCH")[0].content) == {"Balance": "15.00"}
    assert balance == "15.50"
    assert session.user.balance == "15.50"


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", ["0", "-3", "abc", "", None, "NaN", "inf"])
async def test_invalid_amount_never_patches(store: ProfileStore, sheet: FakeSheet, amount: object) -> None:
    session = await _open(store)

    with pytest.raises(ValidationError):
        await session.confirm(amount)

    assert sheet.requests_for("PATCH") == []
    assert session.displayed_balance == "10.00"
    assert session.is_open


@pytest.mark.asyncio
async def test_confirm_requires_open_session(store: ProfileStore, sheet: FakeSheet) -> None:
    session = SessionController(store)

    with pytest.raises(SessionStateError):
        await session.confirm("5")

    assert sheet.requests == []


@pytest.mark.asyncio
async def test_patch_failure_leaves_balance(store: ProfileStore, sheet: FakeSheet) -> None:
    session = await _open(store)
    sheet.fail["PATCH"] = 500

    with pytest.raises(TransportError):
        await session.confirm("5")

    assert session.displayed_balance == "10.00"
    assert sheet.rows[0]["Balance"] == "10"


@pytest.mark.asyncio
async def test_failed_reread_keeps_computed_balance(store: ProfileStore, sheet: FakeSheet) -> None:
    session = await _open(store)
    sheet.fail["GET"] = 502

    balance = await session.confirm("2.25")

    assert balance == "12.25"
    assert not session.verified


@pytest.mark.asyncio
async def test_index_addressing_patches_row_number(sheet: FakeSheet) -> None:
    settings = Settings(row_store_url=SHEET_URL, row_addressing="index")
    store = ProfileStore(RowStoreClient(settings, transport=httpx.MockTransport(sheet.handler)))
    session = await _open(store, "2")

    await session.confirm("1.5")

    assert str(sheet.requests_for("PATCH")[0].url) == f"{SHEET_URL}/1"
    assert session.displayed_balance == "5.00"


@pytest.mark.asyncio
async def test_close_discards_session(store: ProfileStore) -> None:
    session = await _open(store)
    session.amount_text = "3"

    session.close()

    assert session.state is SessionState.CLOSED
    assert session.user is None
    assert session.displayed_balance is None
    assert session.amount_text == ""


def test_parse_amount() -> None:
    assert str(parse_amount(" 5.5 ")) == "5.5"
    with pytest.raises(ValidationError):
        parse_amount("0.00")


@pytest.mark.parametrize("amount", ["1e100", "9" * 70])
def test_parse_amount_rejects_amounts_too_large_to_store(amount: str) -> None:
    with pytest.raises(ValidationError, match="too large"):
        parse_amount(amount)


@pytest.mark.asyncio
async def test_confirm_rejects_sum_too_large_to_store() -> None:
    sheet = FakeSheet([{"Id": "1", "Name": "Rich", "Balance": "9" * 62}])
    store = ProfileStore(RowStoreClient(Settings(row_store_url=SHEET_URL), transport=httpx.MockTransport(sheet.handler)))
    session = await _open(store, "1")

    with pytest.raises(ValidationError, match="too large"):
        await session.confirm("1")

    assert sheet.requests_for("PATCH") == []
    assert session.displayed_balance == "9" * 62 + ".00"


@pytest.mark.asyncio
async def test_index_addressing_reads_back_the_patched_row() -> None:
    sheet = FakeSheet([{"Id": "4", "Name": "A", "Balance": "1"}, {"Id": "4", "Name": "B", "Balance": "2"}])
    settings = Settings(row_store_url=SHEET_URL, row_addressing="index")
    store = ProfileStore(RowStoreClient(settings, transport=httpx.MockTransport(sheet.handler)))
    await store.refresh()
    session = SessionController(store)
    session.open(store.lookup("1"))

    balance = await session.confirm("1")

    assert balance == "3.00"
    assert session.user.name == "B"
    assert session.user.row == 1
