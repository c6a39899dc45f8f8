from __future__ import annotations

import json
import logging
from contextlib import contextmanager

from coinvert.logging import LOGGING_CONFIG_FLAG, JSONLogFormatter, fetch_log_extra, setup_logging


@contextmanager
def isolate_logging():
    root = logging.getLogger()
    previous_handlers = root.handlers[:]
    previous_level = root.level
    previous_flag = getattr(root, LOGGING_CONFIG_FLAG, False)
    try:
        for handler in root.handlers[:]:
            root.removeHandler(handler)
        setattr(root, LOGGING_CONFIG_FLAG, False)
        yield root
    finally:
        for handler in root.handlers[:]:
            root.removeHandler(handler)
        for handler in previous_handlers:
            root.addHandler(handler)
        root.setLevel(previous_level)
        setattr(root, LOGGING_CONFIG_FLAG, previous_flag)


def test_json_log_formatter_renders_basic_fields():
    formatter = JSONLogFormatter()
    record = logging.LogRecord(
        name="coinvert.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=42,
        msg="Hello %s",
        args=("world",),
        exc_info=None,
    )
    record.event = "rates.fetch"
    record.stale = False

    payload = json.loads(formatter.format(record))

    assert payload["message"] == "Hello world"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "coinvert.test"
    assert "timestamp" in payload
    assert payload["event"] == "rates.fetch"
    assert payload["stale"] is False


def test_setup_logging_enables_json_formatter_when_configured():
    with isolate_logging():
        setup_logging({"LOG_JSON_ENABLED": True, "LOG_LEVEL": "DEBUG"})
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert root.handlers, "Expected handler to be registered on root logger"
        handler = root.handlers[0]
        assert isinstance(handler.formatter, JSONLogFormatter)


def test_setup_logging_uses_plain_formatter_by_default():
    with isolate_logging():
        setup_logging(
            {"LOG_JSON_ENABLED": "false", "LOG_LEVEL": "WARNING", "LOG_FORMAT": "%(levelname)s:%(message)s"}
        )
        root = logging.getLogger()
        assert root.level == logging.WARNING
        handler = root.handlers[0]
        assert not isinstance(handler.formatter, JSONLogFormatter)
        assert handler.formatter._style._fmt == "%(levelname)s:%(message)s"


def test_setup_logging_is_idempotent_unless_forced():
    with isolate_logging():
        setup_logging({"LOG_LEVEL": "INFO"})
        setup_logging({"LOG_LEVEL": "DEBUG"})
        root = logging.getLogger()
        assert root.level == logging.INFO
        assert len(root.handlers) == 1

        setup_logging({"LOG_LEVEL": "DEBUG"}, force=True)
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1


def test_fetch_log_extra_drops_empty_fields():
    extra = fetch_log_extra(
        provider="jsdelivr",
        base="usd",
        event="rates.fetch",
        status="success",
        duration_ms=12.34567,
        stale=False,
    )

    assert extra == {
        "event": "rates.fetch",
        "provider": "jsdelivr",
        "base": "usd",
        "status": "success",
        "duration_ms": 12.346,
        "source": "jsdelivr",
        "stale": False,
    }


def test_fetch_log_extra_includes_target_and_error():
    extra = fetch_log_extra(
        provider="cache",
        base="usd",
        target="eur",
        event="history.fetch",
        status="error",
        duration_ms=None,
        stale=True,
        error="boom",
    )

    assert extra["target"] == "eur"
    assert extra["error"] == "boom"
    assert "duration_ms" not in extra
