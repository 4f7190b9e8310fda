"""Unit tests for the error hierarchy and the ErrorClassifier."""

from __future__ import annotations

import json

import pytest

from adt_saga.kernel.errors import (
    BaseError,
    CapabilityMismatchError,
    ErrorClassifier,
    ErrorKind,
    SagaStateError,
    TransportError,
    UnsupportedOperationError,
    WorkflowError,
    classify,
    parse_fault,
)
from adt_saga.testing import fault_xml, http_error


# ---------------------------------------------------------------------------
# Hierarchy
# ---------------------------------------------------------------------------


class TestErrorHierarchy:
    def test_str_is_json(self) -> None:
        err = BaseError("boom", detail={"x": 1})
        decoded = json.loads(str(err))
        assert decoded["message"] == "boom"
        assert decoded["code"] == "base_error"

    def test_session_secrets_in_detail_are_masked(self) -> None:
        err = BaseError("lock failed", detail={"status_code": 423, "Cookies": "SAP_SESSIONID=abc", "csrf_token": "tok"})
        assert err.to_dict()["detail"] == {"status_code": 423, "Cookies": "[REDACTED]", "csrf_token": "[REDACTED]"}
        assert "SAP_SESSIONID" not in str(err)
        assert err.detail["Cookies"] == "SAP_SESSIONID=abc"

    def test_workflow_error_code_follows_kind(self) -> None:
        err = WorkflowError(ErrorKind.LOCKED, "held elsewhere", step="lock")
        assert err.code == "locked"
        assert err.to_dict()["kind"] == "locked"
        assert err.to_dict()["step"] == "lock"

    def test_unsupported_operation_message(self) -> None:
        err = UnsupportedOperationError("PACKAGE", "update")
        assert err.kind is ErrorKind.UNSUPPORTED_OPERATION
        assert err.message == "Unsupported update for object_type: PACKAGE"

    def test_capability_mismatch_names_both_sets(self) -> None:
        err = CapabilityMismatchError("CLASS", ["create", "get"], ["create"])
        assert "Declared: [create, get]" in err.message
        assert "registered: [create]" in err.message
        assert err.difference == frozenset({"get"})

    def test_saga_state_error(self) -> None:
        err = SagaStateError("DONE", "LOCKED")
        assert "DONE -> LOCKED" in err.message

    def test_transport_error_keeps_status_and_body(self) -> None:
        err = TransportError("HTTP 404", status_code=404, raw_body="gone")
        assert err.status_code == 404
        assert err.raw_body == "gone"


# ---------------------------------------------------------------------------
# parse_fault
# ---------------------------------------------------------------------------


class TestParseFault:
    def test_xml_prefers_localized_message(self) -> None:
        body = (
            '<exc:exception xmlns:exc="http://www.sap.com/abapxml/types/communicationframework">'
            '<type id="ExceptionResourceNotFound"/>'
            "<message>raw</message>"
            "<localizedMessage>Object ZCL_X does not exist</localizedMessage>"
            "</exc:exception>"
        )
        fault = parse_fault(body)
        assert fault is not None
        assert fault.exception_type == "ExceptionResourceNotFound"
        assert fault.message == "Object ZCL_X does not exist"

    def test_json_string(self) -> None:
        fault = parse_fault('{"type": "ExceptionResourceAlreadyExists", "message": "dup"}')
        assert fault is not None
        assert fault.exception_type == "ExceptionResourceAlreadyExists"

    def test_mapping(self) -> None:
        fault = parse_fault({"localizedMessage": "nope"})
        assert fault is not None
        assert fault.message == "nope"

    def test_non_fault_xml(self) -> None:
        assert parse_fault("<html><body>502</body></html>") is None

    def test_garbage(self) -> None:
        assert parse_fault("<not xml") is None
        assert parse_fault("plain text") is None
        assert parse_fault("") is None
        assert parse_fault(None) is None


# ---------------------------------------------------------------------------
# ErrorClassifier
# ---------------------------------------------------------------------------


class TestErrorClassifier:
    @pytest.mark.parametrize(
        ("status", "kind"),
        [
            (400, ErrorKind.BAD_REQUEST),
            (404, ErrorKind.NOT_FOUND),
            (409, ErrorKind.LOCKED),
            (423, ErrorKind.LOCKED),
        ],
    )
    def test_status_codes(self, status: int, kind: ErrorKind) -> None:
        assert classify(TransportError("x", status_code=status)).kind is kind

    def test_status_wins_over_body(self) -> None:
        err = http_error(400, "ExceptionResourceAlreadyExists", "does already exist")
        assert classify(err).kind is ErrorKind.BAD_REQUEST

    def test_exception_type_without_status(self) -> None:
        err = TransportError("x", raw_body=fault_xml("ExceptionResourceAlreadyExists", "dup"))
        result = classify(err)
        assert result.kind is ErrorKind.ALREADY_EXISTS
        assert result.exception_type == "ExceptionResourceAlreadyExists"

    def test_fault_message_prefixed(self) -> None:
        err = http_error(404, "ExceptionResourceNotFound", "ZCL_X does not exist")
        assert classify(err).message == "SAP error: ZCL_X does not exist"

    def test_raw_text_is_truncated(self) -> None:
        err = TransportError("x", status_code=500, raw_body="y" * 5000)
        assert len(classify(err).message) == 2000

    def test_plain_exception_uses_str(self) -> None:
        result = classify(RuntimeError("connection reset"))
        assert result.kind is ErrorKind.UNKNOWN
        assert result.message == "connection reset"

    @pytest.mark.parametrize(
        ("text", "kind"),
        [
            ("Object already exists", ErrorKind.ALREADY_EXISTS),
            ("Invalid lock handle", ErrorKind.BAD_REQUEST),
            ("Resource not found", ErrorKind.NOT_FOUND),
            ("Object is locked by DEVELOPER", ErrorKind.LOCKED),
            ("enqueue failure", ErrorKind.LOCKED),
            ("something odd", ErrorKind.UNKNOWN),
        ],
    )
    def test_text_keywords(self, text: str, kind: ErrorKind) -> None:
        assert classify(TransportError(text)).kind is kind

    def test_already_exists_beats_not_found_in_text(self) -> None:
        err = TransportError("lookup not found, object already exists")
        assert classify(err).kind is ErrorKind.ALREADY_EXISTS

    def test_workflow_error_keeps_kind(self) -> None:
        err = WorkflowError(ErrorKind.NOT_FOUND, "gone")
        result = classify(err)
        assert result.kind is ErrorKind.NOT_FOUND
        assert result.message == "gone"

    def test_is_already_exists_ignores_status(self) -> None:
        classifier = ErrorClassifier()
        err = http_error(400, "ExceptionResourceAlreadyExists", "ZCL_X does already exist")
        assert classifier.is_already_exists(err)
        assert not classifier.is_already_exists(TransportError("boom", status_code=500))

    def test_is_already_checked(self) -> None:
        classifier = ErrorClassifier()
        assert classifier.is_already_checked(TransportError("Object has been checked"))
        assert not classifier.is_already_checked(TransportError("syntax error"))
