"""Prometheus exporter helpers."""

from __future__ import annotations

from prometheus_client import Counter


balance_topups_total = Counter(
    "balance_topups_total",
    "Total number of confirmed balance top-ups.",
)

profiles_created_total = Counter(
    "profiles_created_total",
    "Total number of profiles appended to the row store.",
)

row_store_errors_total = Counter(
    "row_store_errors_total",
    "Number of failed row store requests.",
    ["operation"],
)
