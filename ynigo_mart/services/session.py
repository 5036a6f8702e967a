"""Funding session shown in the profile modal."""

from __future__ import annotations

import logging
from decimal import Decimal
from enum import Enum
from typing import Any

from ynigo_mart.errors import SessionStateError, TransportError, ValidationError
from ynigo_mart.metrics.prometheus_exporter import balance_topups_total
from ynigo_mart.store.records import UserRecord, add_cents, format_balance, parse_decimal, quantize_cents
from ynigo_mart.store.repository import ProfileStore

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """States of the funding modal."""

    CLOSED = "closed"
    OPEN = "open"


def parse_amount(raw: Any) -> Decimal:
    """Return a positive, finite top-up amount or raise :class:`ValidationError`."""

    amount = parse_decimal(raw)
    if amount is None or amount <= 0:
        raise ValidationError("Please enter a valid amount.")
    if quantize_cents(amount) is None:
        raise ValidationError("That amount is too large.")
    return amount


class SessionController:
    """Keeps the modal state and applies balance top-ups through the store."""

    def __init__(self, store: ProfileStore) -> None:
        self._store = store
        self.state = SessionState.CLOSED
        self.user: UserRecord | None = None
        self.displayed_balance: str | None = None
        self.amount_text = ""
        self.verified = True

    @property
    def is_open(self) -> bool:
        return self.state is SessionState.OPEN

    def open(self, user: UserRecord) -> None:
        """Show ``user`` in the modal with a snapshot of the current balance."""

        self.user = user
        self.displayed_balance = format_balance(user.balance)
        self.amount_text = ""
        self.verified = True
        self.state = SessionState.OPEN

    def close(self) -> None:
        self.state = SessionState.CLOSED
        self.user = None
        self.displayed_balance = None
        self.amount_text = ""
        self.verified = True

    async def confirm(self, amount: Any) -> str:
        """Add ``amount`` to the open user's balance and return the verified balance."""

        if not self.is_open or self.user is None:
            raise SessionStateError("No profile is open.")

        self.amount_text = "" if amount is None else str(amount).strip()
        value = parse_amount(amount)

        user = self.user
        current = parse_decimal(self.displayed_balance) or Decimal("0")
        total = add_cents(current, value)
        if total is None:
            raise ValidationError("That amount is too large.")
        new_balance = str(total)

        await self._store.update_balance(user, new_balance)
        balance_topups_total.inc()
        logger.info("Balance of profile %s updated to %s.", user.id, new_balance)
        self.displayed_balance = new_balance
        self.amount_text = ""

        # Read-after-write: show what the store reports, not the local sum.
        try:
            await self._store.refresh()
        except TransportError as exc:
            logger.warning("Balance of profile %s saved but not re-read: %s", user.id, exc)
            self.verified = False
            return self.displayed_balance
        self.verified = True
        refreshed = self._store.lookup(self._store.key_for(user))
        if refreshed is None:
            logger.warning("Profile %s missing from the row store after update.", user.id)
        else:
            self.user = refreshed
            self.displayed_balance = refreshed.balance
        return self.displayed_balance
