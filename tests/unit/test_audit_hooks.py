from __future__ import annotations

import logging

import pytest

from dispatch_core.audit import audit_span, emit_audit, parse_audit_line


class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.messages = []

    def emit(self, record):
        self.messages.append(record.getMessage())


@pytest.fixture
def sink():
    log = logging.getLogger("dispatch.test.audit")
    log.setLevel(logging.INFO)
    log.propagate = False
    handler = _ListHandler()
    log.handlers = [handler]
    return log, handler


def _events(handler):
    return [parse_audit_line(m) for m in handler.messages]


def test_audit_is_silent_without_debug_flag(monkeypatch, sink):
    monkeypatch.delenv("DEBUG_AUDIT", raising=False)
    log, handler = sink
    emit_audit("REPORT_GENERATE_START", logger=log, kind="executive-summary")
    with audit_span("REPORT_RENDER", logger=log) as span:
        span["pages"] = 3
    assert handler.messages == []


def test_report_event_serialises_fields(monkeypatch, sink):
    monkeypatch.setenv("DEBUG_AUDIT", "yes")
    log, handler = sink
    emit_audit("REPORT_IMAGE_PLACEHOLDER", logger=log, kind="single-service-detailed",
               caption="Foto 2", pages=(1, 2), record={"id": object()})
    (event,) = _events(handler)
    assert event["event"] == "REPORT_IMAGE_PLACEHOLDER"
    assert event["caption"] == "Foto 2"
    assert event["pages"] == [1, 2]
    assert isinstance(event["record"]["id"], str)
    assert parse_audit_line("Report saved") is None


def test_render_span_carries_stage_outcome(monkeypatch, sink):
    monkeypatch.setenv("DEBUG_AUDIT", "1")
    log, handler = sink
    with audit_span("REPORT_RENDER", logger=log, kind="team-performance") as span:
        span["pages"] = 4
        span["placeholders"] = 1
    start, end = _events(handler)
    assert start["event"] == "REPORT_RENDER:start"
    assert "pages" not in start
    assert end["event"] == "REPORT_RENDER:end"
    assert (end["status"], end["kind"], end["pages"], end["placeholders"]) == ("ok", "team-performance", 4, 1)
    assert end["elapsed_ms"] >= 0.0


def test_failed_span_records_error_and_reraises(monkeypatch, sink):
    monkeypatch.setenv("DEBUG_AUDIT", "1")
    log, handler = sink
    with pytest.raises(OSError):
        with audit_span("REPORT_RENDER", logger=log) as span:
            span["pages"] = 2
            raise OSError("disk full")
    end = _events(handler)[-1]
    assert end["status"] == "error"
    assert end["pages"] == 2
    assert "disk full" in end["error"]
