"""Unit tests for log redaction and the JSON logger factory."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator

import pytest
import structlog

from adt_saga.observability.logging import (
    DEFAULT_SENSITIVE_FIELDS,
    JsonLoggerFactory,
    RedactionProcessor,
    SensitiveFieldsFilter,
    get_logger,
    mask_token,
)


# ---------------------------------------------------------------------------
# mask_token / SensitiveFieldsFilter
# ---------------------------------------------------------------------------


class TestMaskToken:
    def test_long_value(self) -> None:
        assert mask_token("0123456789ABCDEF") == "01234567..."

    def test_short_value_unchanged(self) -> None:
        assert mask_token("H1") == "H1"

    def test_none(self) -> None:
        assert mask_token(None) is None


class TestSensitiveFieldsFilter:
    def test_defaults_cover_session_secrets(self) -> None:
        assert {"cookies", "csrf_token", "cookie_store", "password"} <= DEFAULT_SENSITIVE_FIELDS

    def test_redact_is_shallow(self) -> None:
        result = SensitiveFieldsFilter().redact({"Cookie": "a=1", "nested": {"password": "x"}})
        assert result["Cookie"] == SensitiveFieldsFilter.REDACTED
        assert result["nested"] == {"password": "x"}

    def test_redact_deep(self) -> None:
        event = {
            "event": "lock.acquired",
            "session_state": {"cookies": "SAP_SESSIONID=abc", "csrf_token": "tok"},
            "history": [{"password": "pw"}, "plain"],
            "lock_handle": "ABCDEF0123456789",
        }
        result = SensitiveFieldsFilter().redact_deep(event)
        assert result["session_state"] == {"cookies": "[REDACTED]", "csrf_token": "[REDACTED]"}
        assert result["history"] == [{"password": "[REDACTED]"}, "plain"]
        assert result["lock_handle"] == "ABCDEF01..."
        assert event["session_state"]["cookies"] == "SAP_SESSIONID=abc"

    def test_custom_fields(self) -> None:
        result = SensitiveFieldsFilter(frozenset({"secret"})).redact_deep({"secret": 1, "cookies": "c"})
        assert result == {"secret": "[REDACTED]", "cookies": "c"}


class TestRedactionProcessor:
    def test_is_a_structlog_processor(self) -> None:
        processor = RedactionProcessor()
        out = processor(None, "info", {"event": "x", "csrf_token": "tok", "session_id": "0123456789abcdef"})
        assert out == {"event": "x", "csrf_token": "[REDACTED]", "session_id": "01234567..."}


# ---------------------------------------------------------------------------
# JsonLoggerFactory
# ---------------------------------------------------------------------------


@pytest.fixture
def restore_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestJsonLoggerFactory:
    def test_emits_redacted_json(self, restore_logging: None, capsys: pytest.CaptureFixture[str]) -> None:
        JsonLoggerFactory.configure("info")
        structlog.get_logger("adt.test").info(
            "session.restored",
            cookies="SAP_SESSIONID=abc",
            lock_handle="ABCDEF0123456789",
        )
        line = capsys.readouterr().err.strip().splitlines()[-1]
        payload = json.loads(line)
        assert payload["event"] == "session.restored"
        assert payload["cookies"] == "[REDACTED]"
        assert payload["lock_handle"] == "ABCDEF01..."
        assert payload["level"] == "info"
        assert payload["logger"] == "adt.test"
        assert "timestamp" in payload

    def test_level_filters(self, restore_logging: None, capsys: pytest.CaptureFixture[str]) -> None:
        JsonLoggerFactory.configure(logging.WARNING)
        structlog.get_logger("adt.test").info("quiet")
        assert capsys.readouterr().err == ""

    def test_unknown_level(self, restore_logging: None) -> None:
        with pytest.raises(ValueError):
            JsonLoggerFactory.configure("chatty")


class TestGetLogger:
    def test_binds_initial_values(self) -> None:
        with structlog.testing.capture_logs() as logs:
            get_logger("adt.test", component="router").info("hello")
        assert logs == [{"component": "router", "event": "hello", "log_level": "info"}]
