"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
API starts without any configuration at all; in a deployment you
should at least override ``SECRET_KEY`` and point ``DATA_PATH`` at a
persistent location.
"""

import os
from dataclasses import dataclass
from pathlib import Path

# Project root (the directory that contains the ``slot_booking_api`` package).
BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Slot Booking API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

    # Location of the JSON store document.  A relative path is resolved
    # against the project root by ``resolve_data_path``.  The lock marker
    # lives next to it as ``<data_path>.lock``.
    data_path: str = os.getenv("DATA_PATH", "data/db.json")

    # Lock protocol timings, in milliseconds.  Waiters re-check the
    # marker every ``lock_poll_interval_ms`` and give up after
    # ``lock_timeout_ms``.
    lock_poll_interval_ms: int = int(os.getenv("LOCK_POLL_INTERVAL_MS", "50"))
    lock_timeout_ms: int = int(os.getenv("LOCK_TIMEOUT_MS", "5000"))

    def resolve_data_path(self) -> Path:
        """Return the absolute path of the store document."""
        path = Path(self.data_path)
        if path.is_absolute():
            return path
        return (BASE_DIR / path).resolve()


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Because the dataclass
# computes values at class definition time, environment variables should
# be set before importing this module.
settings = Settings()
