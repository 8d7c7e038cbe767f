"""Unit tests for request correlation helpers."""

import logging

from app.core.logging import CustomJsonFormatter, request_id_var
from app.core.middleware import resolve_request_id


def test_resolve_request_id_keeps_well_formed_ids():
    assert resolve_request_id("trace-123") == "trace-123"


def test_resolve_request_id_mints_when_missing_or_malformed():
    assert len(resolve_request_id(None)) == 36
    assert resolve_request_id("x" * 65) != "x" * 65
    assert resolve_request_id("line\nbreak") != "line\nbreak"


def test_formatter_stamps_context_request_id():
    formatter = CustomJsonFormatter(fmt="%(message)s")
    record = logging.LogRecord("app.services", logging.INFO, __file__, 1, "Assignment created", None, None)
    token = request_id_var.set("req-42")
    try:
        log_record: dict = {}
        formatter.add_fields(log_record, record, {})
    finally:
        request_id_var.reset(token)
    assert log_record["correlation_id"] == "req-42"
    assert log_record["logger"] == "app.services"
