"""Connectivity checks for the external row store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable

from ynigo_mart.config.settings import get_settings
from ynigo_mart.errors import TransportError
from ynigo_mart.store.client import RowStoreClient


@dataclass(slots=True)
class IntegrationCheckResult:
    """Structured result describing the integration check outcome."""

    name: str
    success: bool
    message: str


async def _run_check(
    name: str,
    factory: Callable[[], Awaitable[bool]],
    success_message: str,
) -> IntegrationCheckResult:
    try:
        result = await factory()
    except (TransportError, RuntimeError) as exc:
        return IntegrationCheckResult(name=name, success=False, message=str(exc))

    if result:
        return IntegrationCheckResult(name=name, success=True, message=success_message)
    return IntegrationCheckResult(
        name=name,
        success=False,
        message="Service responded with non-success status.",
    )


async def check_row_store() -> IntegrationCheckResult:
    """Read the configured sheet once and return the result."""

    async def _ping() -> bool:
        client = RowStoreClient(get_settings())
        try:
            return await client.ping()
        finally:
            await client.close()

    return await _run_check(
        name="Row store",
        factory=_ping,
        success_message="Row store is reachable.",
    )


async def run_all_checks() -> list[IntegrationCheckResult]:
    """Execute all integration checks."""

    return [await check_row_store()]
