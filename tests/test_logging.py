"""Tests for logging configuration."""

from __future__ import annotations

import logging

import pytest
import pytest_mock

from ynigo_mart.config.settings import get_settings
from ynigo_mart.monitoring.logging import configure_logging


def test_configure_logging_uses_settings_level(
    monkeypatch: pytest.MonkeyPatch,
    mocker: pytest_mock.MockerFixture,
) -> None:
    monkeypatch.setenv("LOG_LEVEL", "debug")
    get_settings.cache_clear()
    basic_config = mocker.patch("ynigo_mart.monitoring.logging.logging.basicConfig")

    try:
        configure_logging()
    finally:
        get_settings.cache_clear()

    basic_config.assert_called_once()
    assert basic_config.call_args.kwargs["level"] == logging.DEBUG
