import json
import logging

from title_service.core.logging import JsonFormatter, configure_logging, log_event, utc_iso


def _record(**extra):
    record = logging.LogRecord("title_service.test", logging.INFO, __file__, 1, "request_start", (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_emits_structured_fields():
    line = JsonFormatter().format(_record(event="request_start", trace_id="abc", url="https://example.com"))

    payload = json.loads(line)
    assert payload["event"] == "request_start"
    assert payload["trace_id"] == "abc"
    assert payload["url"] == "https://example.com"
    assert payload["level"] == "INFO"
    assert payload["timestamp"].endswith("Z")
    assert "message" not in payload


def test_plain_messages_keep_their_text():
    record = logging.LogRecord("x", logging.WARNING, __file__, 1, "hello %s", ("world",), None)

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "hello world"


def test_configure_logging_replaces_root_handlers():
    saved_handlers, saved_level = logging.root.handlers[:], logging.root.level
    try:
        configure_logging("debug")
        configure_logging("WARNING")

        handlers = logging.root.handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0].formatter, JsonFormatter)
        assert logging.root.level == logging.WARNING
    finally:
        logging.root.handlers[:] = saved_handlers
        logging.root.setLevel(saved_level)


def test_log_event_attaches_fields(caplog):
    caplog.set_level(logging.INFO)
    log_event(logging.getLogger("title_service.test"), "request_success", status=200, timing_ms=5)

    record = caplog.records[-1]
    assert record.event == "request_success"
    assert record.status == 200
    assert record.timing_ms == 5


def test_utc_iso_has_millisecond_precision():
    assert utc_iso(0) == "1970-01-01T00:00:00.000Z"
