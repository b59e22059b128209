from __future__ import annotations

import logging

import pytest

from infra.config import Settings
from infra.logging_config import setup_logging
from infra.operational_support import (
    TraceIdLogFilter,
    bind_trace_id,
    create_trace_id,
    current_trace_id,
)


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    try:
        yield root
    finally:
        for handler in list(root.handlers):
            if handler not in handlers:
                root.removeHandler(handler)
                handler.close()
        root.setLevel(level)


def test_trace_id_format_is_unique():
    first, second = create_trace_id(), create_trace_id()

    assert first.startswith("op-")
    assert len(first.split("-")[-1]) == 8
    assert first != second


def test_bind_trace_id_scopes_and_nests():
    assert current_trace_id() is None

    with bind_trace_id("req-1") as outer:
        assert outer == "req-1"
        with bind_trace_id() as inner:
            assert inner == "req-1"
        with bind_trace_id("req-2"):
            assert current_trace_id() == "req-2"
        assert current_trace_id() == "req-1"

    assert current_trace_id() is None


def test_bind_trace_id_generates_when_blank():
    with bind_trace_id("   ") as trace_id:
        assert trace_id.startswith("op-")
        assert current_trace_id() == trace_id


def test_trace_filter_stamps_records():
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "hello", None, None)
    log_filter = TraceIdLogFilter()

    assert log_filter.filter(record) is True
    assert record.trace_id == "-"

    with bind_trace_id("req-7"):
        log_filter.filter(record)
    assert record.trace_id == "req-7"


def test_setup_logging_writes_trace_ids_to_rotating_file(tmp_path, restore_root_logging):
    settings = Settings(db_url="sqlite:///:memory:", log_level=logging.DEBUG, log_dir=tmp_path / "logs")

    log_file = setup_logging(settings, console=False)
    with bind_trace_id("req-42"):
        logging.getLogger("core.services.schedule").info("Shifted task t-1")
    for handler in restore_root_logging.handlers:
        handler.flush()

    assert log_file == tmp_path / "logs" / "cronograma.log"
    text = log_file.read_text(encoding="utf-8")
    assert "trace=req-42 core.services.schedule - Shifted task t-1" in text
    assert restore_root_logging.level == logging.DEBUG


def test_setup_logging_does_not_stack_handlers(tmp_path, restore_root_logging):
    settings = Settings(db_url="sqlite:///:memory:", log_dir=tmp_path)

    setup_logging(settings)
    setup_logging(settings)

    assert len(restore_root_logging.handlers) == 2
