"""Unit tests for kernel value types."""

from __future__ import annotations

import dataclasses
from datetime import datetime, timezone

import pytest

from adt_saga.kernel.errors import ErrorKind
from adt_saga.kernel.time import FrozenClock, SystemClock
from adt_saga.kernel.types import (
    CRUD_OPERATIONS,
    LIFECYCLE_OPERATIONS,
    ActivationResult,
    CheckMessage,
    CheckResult,
    LockAcquisition,
    ObjectRef,
    Operation,
    ResponseEnvelope,
    SessionState,
    ValidationResult,
)


# ---------------------------------------------------------------------------
# ObjectRef
# ---------------------------------------------------------------------------


class TestObjectRef:
    def test_upper_cases(self) -> None:
        ref = ObjectRef("class", " zcl_demo ")
        assert ref.object_type == "CLASS"
        assert ref.name == "ZCL_DEMO"

    def test_str_with_parent(self) -> None:
        ref = ObjectRef("FUNCTION_MODULE", "z_fm", "zfg")
        assert str(ref) == "FUNCTION_MODULE:ZFG/Z_FM"

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValueError):
            ObjectRef("CLASS", "  ")

    def test_hashable(self) -> None:
        assert {ObjectRef("CLASS", "a"), ObjectRef("class", "A")} == {ObjectRef("CLASS", "A")}


# ---------------------------------------------------------------------------
# SessionState / LockAcquisition
# ---------------------------------------------------------------------------


class TestSessionState:
    def test_immutable(self) -> None:
        state = SessionState(cookies="c1", csrf_token="t1", cookie_store={"a": "1"})
        with pytest.raises(dataclasses.FrozenInstanceError):
            state.cookies = "c2"  # type: ignore[misc]
        with pytest.raises(TypeError):
            state.cookie_store["b"] = "2"  # type: ignore[index]

    def test_store_copied_on_construction(self) -> None:
        store = {"a": "1"}
        state = SessionState(cookie_store=store)
        store["a"] = "changed"
        assert state.cookie_store["a"] == "1"

    def test_is_empty(self) -> None:
        assert SessionState().is_empty()
        assert not SessionState(csrf_token="t").is_empty()

    def test_from_dict_accepts_camel_case(self) -> None:
        state = SessionState.from_dict({"cookies": "a=1", "csrfToken": "tok", "cookieStore": {"a": "1"}})
        assert state == SessionState(cookies="a=1", csrf_token="tok", cookie_store={"a": "1"})

    def test_from_dict_empty(self) -> None:
        assert SessionState.from_dict(None) is None
        assert SessionState.from_dict({}) is None

    def test_to_dict_round_trip(self) -> None:
        state = SessionState(cookies="a=1", csrf_token="tok", cookie_store={"a": "1"})
        assert SessionState.from_dict(state.to_dict()) == state
        assert hash(SessionState.from_dict(state.to_dict())) == hash(state)


class TestLockAcquisition:
    def test_with_session_returns_copy(self) -> None:
        acq = LockAcquisition(ObjectRef("CLASS", "ZCL_X"), "H1", "sid", SessionState(cookies="c1"))
        newer = acq.with_session(SessionState(cookies="c2"))
        assert acq.session_state == SessionState(cookies="c1")
        assert newer.session_state == SessionState(cookies="c2")
        assert newer.lock_handle == "H1"

    def test_to_dict(self) -> None:
        acq = LockAcquisition(ObjectRef("CLASS", "ZCL_X"), "H1", "sid")
        data = acq.to_dict()
        assert data["object_name"] == "ZCL_X"
        assert data["lock_handle"] == "H1"
        assert data["session_state"] is None


# ---------------------------------------------------------------------------
# ResponseEnvelope
# ---------------------------------------------------------------------------


class TestResponseEnvelope:
    def test_ok(self) -> None:
        assert ResponseEnvelope.ok({"name": "X"}).to_dict() == {"success": True, "data": {"name": "X"}}

    def test_fail(self) -> None:
        env = ResponseEnvelope.fail("gone", ErrorKind.NOT_FOUND)
        assert env.to_dict() == {
            "success": False,
            "error_message": "gone",
            "error_kind": "not_found",
        }

    def test_fail_defaults_to_unknown(self) -> None:
        assert ResponseEnvelope.fail("x").to_dict()["error_kind"] == "unknown"


# ---------------------------------------------------------------------------
# Operation
# ---------------------------------------------------------------------------


class TestOperation:
    def test_parse_is_case_insensitive(self) -> None:
        assert Operation.parse(" UPDATE ") is Operation.UPDATE

    def test_parse_unknown(self) -> None:
        assert Operation.parse("publish") is None
        assert Operation.parse(None) is None

    def test_groups_partition_all_operations(self) -> None:
        assert CRUD_OPERATIONS | LIFECYCLE_OPERATIONS == frozenset(Operation)
        assert not CRUD_OPERATIONS & LIFECYCLE_OPERATIONS


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class TestResults:
    def test_check_summary_prefers_errors(self) -> None:
        result = CheckResult(
            passed=False,
            messages=(
                CheckMessage("W", "unused variable"),
                CheckMessage("E", "syntax error", 3),
            ),
        )
        assert result.summary() == "syntax error"
        assert [m.line for m in result.errors] == [3]

    def test_activation_warnings(self) -> None:
        result = ActivationResult(activated=True, messages=(CheckMessage("W", "careful"), CheckMessage("I", "info")))
        assert [m.text for m in result.warnings] == ["careful"]

    def test_validation_to_dict(self) -> None:
        data = ValidationResult(valid=False, exists=True, message="dup").to_dict()
        assert data == {"valid": False, "exists": True, "severity": None, "message": "dup"}


# ---------------------------------------------------------------------------
# Clocks
# ---------------------------------------------------------------------------


class TestClocks:
    def test_system_clock_is_utc(self) -> None:
        assert SystemClock().now().tzinfo is not None

    def test_frozen_clock_advance(self) -> None:
        clock = FrozenClock(datetime(2024, 5, 1, tzinfo=timezone.utc))
        clock.advance(90)
        assert clock.now() == datetime(2024, 5, 1, 0, 1, 30, tzinfo=timezone.utc)
