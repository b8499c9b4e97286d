"""Tests for request id stamping on log records."""

import logging

from menuhub.logging_config import RequestIdFilter, configure_logging, request_id_var


def test_filter_stamps_current_request_id():
    record = logging.LogRecord("menuhub", logging.INFO, __file__, 1, "hello", None, None)
    token = request_id_var.set("req-42")
    try:
        RequestIdFilter().filter(record)
    finally:
        request_id_var.reset(token)

    assert record.request_id == "req-42"


def test_default_request_id_outside_requests():
    record = logging.LogRecord("menuhub", logging.INFO, __file__, 1, "hello", None, None)

    RequestIdFilter().filter(record)

    assert record.request_id == "-"


def test_configure_logging_installs_filter_once():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    root.handlers[:] = []
    try:
        configure_logging("debug")
        configure_logging("debug")

        assert root.level == logging.DEBUG
        for handler in root.handlers:
            assert sum(isinstance(f, RequestIdFilter) for f in handler.filters) == 1
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
