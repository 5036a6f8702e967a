"""Decoding of loosely-cased row store rows into canonical user records."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any, Iterable, Mapping, Sequence

CENT = Decimal("0.01")
ZERO_BALANCE = "0.00"
# Largest number of digits a balance may carry once rounded to cents.
MAX_BALANCE_DIGITS = 64

# Exact spellings are tried in order before the case-insensitive fallback.
FIELD_SPELLINGS: dict[str, tuple[str, ...]] = {
    "id": ("id", "Id", "ID"),
    "name": ("name", "Name", "NAME"),
    "image": ("image", "Image", "IMAGE"),
    "balance": ("balance", "Balance", "BALANCE"),
}

# Header casing used when writing rows back to the sheet.
SHEET_HEADERS: dict[str, str] = {
    "id": "Id",
    "name": "Name",
    "image": "Image",
    "balance": "Balance",
}


@dataclass(slots=True)
class UserRecord:
    """Canonical in-memory shape of one profile row."""

    id: str
    name: str
    image: str
    balance: str
    row: int = 0

    @property
    def displayable(self) -> bool:
        return bool(self.name)


def parse_decimal(value: Any) -> Decimal | None:
    """Return ``value`` as a finite :class:`Decimal` or ``None`` when it cannot be parsed."""

    if value is None or isinstance(value, bool):
        return None
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not result.is_finite():
        return None
    return result


def quantize_cents(value: Decimal) -> Decimal | None:
    """Round ``value`` half-up to cents, ``None`` when it needs more than ``MAX_BALANCE_DIGITS`` digits."""

    with localcontext() as ctx:
        ctx.prec = MAX_BALANCE_DIGITS
        try:
            return value.quantize(CENT, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            return None


def add_cents(current: Decimal, amount: Decimal) -> Decimal | None:
    """Return ``current + amount`` rounded to cents, ``None`` when the sum is too large to store."""

    with localcontext() as ctx:
        ctx.prec = MAX_BALANCE_DIGITS + 2
        total = current + amount
    return quantize_cents(total)


def format_balance(value: Any) -> str:
    """Format a balance with exactly two fractional digits, ``"0.00"`` when unparseable."""

    parsed = parse_decimal(value)
    if parsed is None:
        return ZERO_BALANCE
    rounded = quantize_cents(parsed)
    if rounded is None:
        return ZERO_BALANCE
    return str(rounded)


def pick_field(raw: Mapping[str, Any], field: str) -> Any:
    """Return the first non-``None`` value stored under one of the spellings of ``field``."""

    for key in FIELD_SPELLINGS[field]:
        value = raw.get(key)
        if value is not None:
            return value
    for key, value in raw.items():
        if isinstance(key, str) and key.strip().lower() == field and value is not None:
            return value
    return None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def normalize_row(raw: Mapping[str, Any] | None, row: int = 0) -> UserRecord:
    """Coalesce a raw row into a :class:`UserRecord`."""

    raw = raw or {}
    return UserRecord(
        id=_as_text(pick_field(raw, "id")),
        name=_as_text(pick_field(raw, "name")),
        image=_as_text(pick_field(raw, "image")),
        balance=format_balance(pick_field(raw, "balance")),
        row=row,
    )


def normalize_rows(rows: Sequence[Mapping[str, Any]]) -> list[UserRecord]:
    """Normalise every row, keeping its position for positional addressing."""

    return [normalize_row(raw, index) for index, raw in enumerate(rows)]


def displayable(records: Iterable[UserRecord]) -> list[UserRecord]:
    """Drop records without a usable name."""

    return [record for record in records if record.displayable]


def next_identifier(records: Iterable[UserRecord], start: int = 1) -> str:
    """Return ``max(numeric ids) + 1`` but never less than ``start``.

    Only ids made of plain ASCII digits count as numeric.
    """

    numeric_ids = [int(record.id) for record in records if record.id.isascii() and record.id.isdigit()]
    if not numeric_ids:
        return str(start)
    return str(max(max(numeric_ids) + 1, start))


def to_sheet_row(record: UserRecord) -> dict[str, str]:
    """Render a record with the sheet's header casing."""

    return {
        SHEET_HEADERS["id"]: record.id,
        SHEET_HEADERS["name"]: record.name,
        SHEET_HEADERS["image"]: record.image,
        SHEET_HEADERS["balance"]: record.balance,
    }
