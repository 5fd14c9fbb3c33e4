"""
Caelex Engine Configuration

Settings are read from the environment once per process:

    CAELEX_LOG_LEVEL    logging level name (default INFO)
    CAELEX_LOG_FORMAT   "json" or "text" (default json)
    CAELEX_CATALOG_DIR  directory holding catalog YAML files
                        (default: the catalogs bundled with the package)
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Optional

BUNDLED_CATALOG_DIR = Path(__file__).parent / "catalogs" / "data"

# Attributes a LogRecord always has; anything else came in through `extra=`.
_STANDARD_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


@dataclass(frozen=True)
class EngineSettings:
    """Process-wide engine settings."""
    log_level: str = "INFO"
    log_format: str = "json"
    catalog_dir: Path = BUNDLED_CATALOG_DIR

    @classmethod
    def from_env(cls) -> EngineSettings:
        catalog_dir = os.getenv("CAELEX_CATALOG_DIR")
        return cls(
            log_level=os.getenv("CAELEX_LOG_LEVEL", "INFO").upper(),
            log_format=os.getenv("CAELEX_LOG_FORMAT", "json").lower(),
            catalog_dir=Path(catalog_dir) if catalog_dir else BUNDLED_CATALOG_DIR,
        )


@lru_cache(maxsize=1)
def get_settings() -> EngineSettings:
    """Settings snapshot, read from the environment on first call."""
    return EngineSettings.from_env()


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # Add extra fields if present
        for key, value in record.__dict__.items():
            if key not in _STANDARD_RECORD_ATTRS and not key.startswith("_"):
                log_entry[key] = value
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def configure_logging(settings: Optional[EngineSettings] = None) -> None:
    """
    Install a root handler for command-line use.

    Library callers own their logging setup; only the CLI calls this.
    """
    settings = settings or get_settings()
    handler = logging.StreamHandler()
    if settings.log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(getattr(logging, settings.log_level, logging.INFO))
