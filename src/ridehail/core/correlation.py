"""Request correlation ids for log lines."""

import logging
import re
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

# Caller-supplied ids end up verbatim in log lines
_SAFE_ID = re.compile(r"^[A-Za-z0-9._:-]{1,64}$")


def resolve_request_id(supplied: str | None) -> str:
    """Adopt the caller's request id when it is a short, printable token; otherwise mint one."""
    if supplied and _SAFE_ID.match(supplied):
        return supplied
    return uuid.uuid4().hex


def current_correlation_id() -> str | None:
    return _correlation_id.get()


class CorrelationFilter(logging.Filter):
    """Stamps ``correlation_id`` on every record ("-" outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = _correlation_id.get() or "-"
        return True


@contextmanager
def with_correlation(correlation_id: str) -> Iterator[None]:
    token = _correlation_id.set(correlation_id)
    try:
        yield
    finally:
        _correlation_id.reset(token)
