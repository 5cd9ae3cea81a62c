"""
StrategyPilot Configuration

Environment-driven settings and structured logging setup.

Environment variables:
- SP_LOG_LEVEL: logging level for the strategypilot logger (default INFO)
- SP_CATALOGUE_PATH: catalogue pack to load instead of the packaged one
- SP_STRICT_CATALOGUE_VERSION: reject packs with a different major schema
  version (default true)

Policy thresholds (confidence cut-offs, unsafe critical count, output caps)
are catalogue data, not environment settings.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


PACKAGE_LOGGER = "strategypilot"
DEFAULT_CATALOGUE_PATH = Path(__file__).parent / "packs" / "data" / "criminal_uk.yaml"


@dataclass
class EngineSettings:
    """Runtime settings resolved from the environment."""
    log_level: str = "INFO"
    catalogue_path: Path = DEFAULT_CATALOGUE_PATH
    strict_catalogue_version: bool = True

    @classmethod
    def from_env(cls) -> "EngineSettings":
        path = os.getenv("SP_CATALOGUE_PATH")
        return cls(
            log_level=os.getenv("SP_LOG_LEVEL", "INFO").upper(),
            catalogue_path=Path(path) if path else DEFAULT_CATALOGUE_PATH,
            strict_catalogue_version=(
                os.getenv("SP_STRICT_CATALOGUE_VERSION", "true").lower() == "true"
            ),
        )


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # Add extra fields if present
        if hasattr(record, "case_id"):
            log_entry["case_id"] = record.case_id
        if hasattr(record, "input_hash_short"):
            log_entry["input_hash_short"] = record.input_hash_short
        if hasattr(record, "step"):
            log_entry["step"] = record.step
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def configure_logging(
    settings: Optional[EngineSettings] = None,
    handler: Optional[logging.Handler] = None,
) -> logging.Logger:
    """
    Attach a JSON handler to the package logger.

    Safe to call more than once: existing handlers installed by a previous
    call are replaced rather than duplicated.
    """
    settings = settings or EngineSettings.from_env()
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, settings.log_level, logging.INFO))

    for existing in list(logger.handlers):
        if getattr(existing, "_strategypilot", False):
            logger.removeHandler(existing)

    handler = handler or logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    handler._strategypilot = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger
