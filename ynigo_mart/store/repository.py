"""Explicitly owned cache of the profiles held in the row store."""

from __future__ import annotations

import logging

from ynigo_mart.store.client import RowStoreClient
from ynigo_mart.store.records import (
    SHEET_HEADERS,
    UserRecord,
    displayable,
    next_identifier,
    normalize_rows,
    to_sheet_row,
)

logger = logging.getLogger(__name__)


class ProfileStore:
    """Holds the last full read of the row store.

    The row store stays the source of truth. ``refresh`` replaces the cached
    rows wholesale and is called after every mutation so callers always read
    what the store actually persisted.
    """

    def __init__(self, client: RowStoreClient, id_start: int = 1) -> None:
        self._client = client
        self._id_start = id_start
        self._rows: list[UserRecord] = []
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def rows(self) -> list[UserRecord]:
        """Every fetched row, including rows without a name."""

        return list(self._rows)

    @property
    def records(self) -> list[UserRecord]:
        """Rows that can be shown on the listing."""

        return displayable(self._rows)

    async def refresh(self) -> list[UserRecord]:
        """Fetch every row and replace the cache; returns the displayable records."""

        raw_rows = await self._client.fetch_rows()
        self._rows = normalize_rows(raw_rows)
        self._loaded = True
        logger.info("Loaded %d rows (%d displayable) from the row store.", len(self._rows), len(self.records))
        return self.records

    async def ensure_loaded(self) -> list[UserRecord]:
        if not self._loaded:
            return await self.refresh()
        return self.records

    def get(self, user_id: str) -> UserRecord | None:
        for record in self._rows:
            if record.id == user_id and record.displayable:
                return record
        return None

    def get_by_row(self, row: int) -> UserRecord | None:
        if 0 <= row < len(self._rows) and self._rows[row].displayable:
            return self._rows[row]
        return None

    def key_for(self, record: UserRecord) -> str:
        """Return the key that addresses ``record`` in URLs and lookups.

        Positional addressing keys on the row number so rows without an id
        stay reachable; otherwise the id is the key.
        """

        if self._client.addressing == "index":
            return str(record.row)
        return record.id

    def lookup(self, key: str) -> UserRecord | None:
        """Resolve a key produced by :meth:`key_for`."""

        if self._client.addressing == "index":
            if not (key.isascii() and key.isdigit()):
                return None
            return self.get_by_row(int(key))
        if not key:
            return None
        return self.get(key)

    def next_id(self) -> str:
        return next_identifier(self._rows, self._id_start)

    async def update_balance(self, record: UserRecord, balance: str) -> None:
        """Persist a new balance for ``record``."""

        selector = self._client.selector_for(record)
        await self._client.update_row(selector, {SHEET_HEADERS["balance"]: balance})

    async def append(self, record: UserRecord) -> None:
        await self._client.append_row(to_sheet_row(record))
