"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

ROW_ADDRESSING_MODES = ("id", "index")


def _load_env_file(path: str = ".env") -> None:
    """Populate os.environ from the provided .env file if it exists."""

    env_path = Path(path)
    if not env_path.exists():
        return

    for line in env_path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())


@dataclass(frozen=True, slots=True)
class Settings:
    """Centralised kiosk settings based on OS environment variables."""

    environment: str = "dev"
    log_level: str = "INFO"

    row_store_url: str = ""
    row_store_tab: str = ""
    row_addressing: str = "id"
    id_start: int = 1

    thumbnail_size: int = 150
    thumbnail_format: str = "JPEG"
    thumbnail_quality: float = 0.9
    max_upload_bytes: int = 10 * 1024 * 1024

    request_timeout: float = 30.0

    def __post_init__(self) -> None:
        if self.row_addressing not in ROW_ADDRESSING_MODES:
            raise ValueError(
                f"ROW_ADDRESSING must be one of {', '.join(ROW_ADDRESSING_MODES)}, got {self.row_addressing!r}.",
            )
        if self.thumbnail_size <= 0:
            raise ValueError("THUMBNAIL_SIZE must be a positive number of pixels.")
        if not 0 < self.thumbnail_quality <= 1:
            raise ValueError("THUMBNAIL_QUALITY must be in the (0, 1] range.")

    @property
    def row_store_endpoint(self) -> str:
        """Return the collection URL, including the sheet tab when one is configured."""

        base = self.row_store_url.rstrip("/")
        if self.row_store_tab:
            return f"{base}/tabs/{self.row_store_tab}"
        return base


def _build_settings() -> Settings:
    _load_env_file()

    return Settings(
        environment=os.getenv("ENVIRONMENT", "dev"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        row_store_url=os.getenv("ROW_STORE_URL", ""),
        row_store_tab=os.getenv("ROW_STORE_TAB", ""),
        row_addressing=os.getenv("ROW_ADDRESSING", "id").strip().lower(),
        id_start=int(os.getenv("ID_START", "1")),
        thumbnail_size=int(os.getenv("THUMBNAIL_SIZE", "150")),
        thumbnail_format=os.getenv("THUMBNAIL_FORMAT", "JPEG").upper(),
        thumbnail_quality=float(os.getenv("THUMBNAIL_QUALITY", "0.9")),
        max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024))),
        request_timeout=float(os.getenv("REQUEST_TIMEOUT", "30")),
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance to avoid re-reading configuration."""

    return _build_settings()
