import logging
import sys

from ridehail.core.correlation import CorrelationFilter
from ridehail.ride_logging.context import ContextFilter
from ridehail.ride_logging.filters import PIIFilter
from ridehail.ride_logging.formatters import DevFormatter, JSONFormatter

# Loggers uvicorn configures with its own handlers; routed through ours instead
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    environment: str = "development",
) -> logging.Handler:
    """Install a single stdout handler on the root logger and return it.

    Safe to call again: existing root handlers are replaced.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter(environment) if json_output else DevFormatter())
    # Context first so PII masking sees the final message
    handler.addFilter(CorrelationFilter())
    handler.addFilter(ContextFilter())
    handler.addFilter(PIIFilter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level.upper())

    for name in UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True

    # Access lines duplicate the request spans; keep them out of INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    return handler
