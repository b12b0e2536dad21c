"""Runtime settings for the ingestion scheduler."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

# --- Configuration Constants ---
BATCH_SIZE = 3
RATE_LIMIT_SECONDS = 5
PER_ID_SECONDS = 1
MAX_ID_VALUE = 10**9 + 7


@dataclass(frozen=True)
class IngestionSettings:
    """Policy knobs for batching, rate limiting and simulated work."""

    batch_size: int = BATCH_SIZE
    rate_limit_seconds: float = float(RATE_LIMIT_SECONDS)
    per_id_seconds: float = float(PER_ID_SECONDS)
    max_id_value: int = MAX_ID_VALUE
    log_level: str = "INFO"


def _get_int_env(name: str, default: int) -> int:
    """Read an integer from the environment, falling back on bad input."""
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """Read a float from the environment, falling back on bad input."""
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@lru_cache(maxsize=1)
def get_settings() -> IngestionSettings:
    """Return cached settings built from INGEST_* environment variables."""
    return IngestionSettings(
        batch_size=max(1, _get_int_env("INGEST_BATCH_SIZE", BATCH_SIZE)),
        rate_limit_seconds=max(0.0, _get_float_env("INGEST_RATE_LIMIT_SECONDS", RATE_LIMIT_SECONDS)),
        per_id_seconds=max(0.0, _get_float_env("INGEST_PER_ID_SECONDS", PER_ID_SECONDS)),
        max_id_value=max(1, _get_int_env("INGEST_MAX_ID_VALUE", MAX_ID_VALUE)),
        log_level=_get_str_env("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(settings: IngestionSettings) -> None:
    """Attach a basic handler to the root logger unless one already exists."""
    level = getattr(logging, settings.log_level, logging.INFO)
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )
    logging.getLogger().setLevel(level)
