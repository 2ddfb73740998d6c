"""Per-request logging fields (ride, user, driver) carried in a context variable.

A ContextVar follows the request across ``await`` points, so concurrent
requests served by the same event loop thread never see each other's fields.
"""

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from types import MappingProxyType
from typing import Any

_fields: ContextVar[Mapping[str, Any]] = ContextVar("log_fields", default=MappingProxyType({}))


def current_fields() -> Mapping[str, Any]:
    return _fields.get()


class ContextFilter(logging.Filter):
    """Copies the active context fields onto each record, without overwriting ``extra=``."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _fields.get().items():
            if value is not None and not hasattr(record, key):
                setattr(record, key, value)
        return True


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Add fields to every record logged inside the block.

    Nested blocks see the union of fields; the outer set is restored on exit.
    """
    token = _fields.set(MappingProxyType({**_fields.get(), **fields}))
    try:
        yield
    finally:
        _fields.reset(token)


@contextmanager
def log_ride_context(ride_id: str, **fields: Any) -> Iterator[None]:
    with log_context(ride_id=ride_id, **fields):
        yield
