"""Tests for request correlation ids."""

import logging

import pytest

from ridehail.core.correlation import (
    CorrelationFilter,
    current_correlation_id,
    resolve_request_id,
    with_correlation,
)


@pytest.mark.unit
class TestResolveRequestId:
    @pytest.mark.parametrize("supplied", ["req-123", "a1b2c3", "trace:9f.2_x"])
    def test_safe_ids_adopted(self, supplied):
        assert resolve_request_id(supplied) == supplied

    @pytest.mark.parametrize("supplied", [None, "", "has space", "x" * 65, "line\nbreak"])
    def test_unsafe_ids_replaced(self, supplied):
        minted = resolve_request_id(supplied)

        assert minted != supplied
        assert len(minted) == 32

    def test_minted_ids_are_unique(self):
        assert resolve_request_id(None) != resolve_request_id(None)


@pytest.mark.unit
class TestWithCorrelation:
    def test_scoped_to_block(self):
        assert current_correlation_id() is None
        with with_correlation("req-1"):
            assert current_correlation_id() == "req-1"
            with with_correlation("req-2"):
                assert current_correlation_id() == "req-2"
            assert current_correlation_id() == "req-1"
        assert current_correlation_id() is None

    def test_filter_stamps_records(self):
        record = logging.LogRecord("t", logging.INFO, "t.py", 1, "msg", (), None)

        CorrelationFilter().filter(record)
        assert record.correlation_id == "-"

        with with_correlation("req-9"):
            CorrelationFilter().filter(record)
        assert record.correlation_id == "req-9"
