"""Integration check helpers."""

from .checks import (
    IntegrationCheckResult,
    check_row_store,
    run_all_checks,
)

__all__ = [
    "IntegrationCheckResult",
    "check_row_store",
    "run_all_checks",
]
