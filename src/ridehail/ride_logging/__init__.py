from ridehail.ride_logging.context import log_context, log_ride_context
from ridehail.ride_logging.setup import setup_logging

__all__ = ["log_context", "log_ride_context", "setup_logging"]
