"""JSON lines for deployed environments, a single readable line for local runs."""

import json
import logging
from datetime import UTC, datetime
from typing import Any

# Record attributes ContextFilter/CorrelationFilter may set, in output order
CONTEXT_FIELDS = ("correlation_id", "ride_id", "user_id", "driver_id")


def _context_of(record: logging.LogRecord) -> dict[str, Any]:
    fields = {}
    for name in CONTEXT_FIELDS:
        value = getattr(record, name, None)
        if value not in (None, "-"):
            fields[name] = value
    return fields


class JSONFormatter(logging.Formatter):
    def __init__(self, environment: str = "development", service: str = "ridehail-api"):
        super().__init__()
        self.environment = environment
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service,
            "env": self.environment,
            **_context_of(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class DevFormatter(logging.Formatter):
    """``12:00:01 [INFO] ridehail.rides.service: Ride booked ... (ride=ride_004 user=1)``"""

    def __init__(self) -> None:
        super().__init__(fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context_of(record)
        if context:
            # Short names keep dev output on one line
            pairs = " ".join(
                f"{name.removesuffix('_id')}={value}" for name, value in context.items()
            )
            line = f"{line} ({pairs})"
        return line
