"""Unit tests for the capability matrix, the router and ``invoke``."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from adt_saga.application.routing import (
    CAPABILITY_MATRIX,
    DEFAULT_ROUTER,
    DESCRIPTORS,
    DESCRIPTORS_BY_TAG,
    HANDLERS,
    CapabilityRouter,
    build_router,
    capabilities,
    invoke,
    verified_router,
)
from adt_saga.application.saga import ObjectTypeDescriptor, WorkflowContext
from adt_saga.kernel.errors import CapabilityMismatchError
from adt_saga.kernel.types import ObjectRef, Operation, ResponseEnvelope
from adt_saga.testing import InMemoryAdtRepository, http_error

SOURCE = "CLASS zcl_demo DEFINITION PUBLIC. ENDCLASS."


# ---------------------------------------------------------------------------
# CapabilityMatrix
# ---------------------------------------------------------------------------


class TestCapabilityMatrix:
    def test_package_operations(self) -> None:
        assert capabilities()["PACKAGE"] == ["create", "get", "validate"]

    def test_runtime_types_have_no_operations(self) -> None:
        caps = capabilities()
        assert caps["RUNTIME_PROFILE"] == []
        assert caps["RUNTIME_DUMP"] == []

    def test_source_types_support_everything(self) -> None:
        assert capabilities()["CLASS"] == [op.value for op in Operation]

    def test_lookup_is_case_insensitive(self) -> None:
        assert "class" in CAPABILITY_MATRIX
        assert CAPABILITY_MATRIX.supports("class", Operation.LOCK)
        assert not CAPABILITY_MATRIX.supports("TRANSPORT", Operation.DELETE)

    def test_with_entry_is_a_copy(self) -> None:
        changed = CAPABILITY_MATRIX.with_entry("CLASS", {Operation.GET})
        assert changed.operations("CLASS") == frozenset({Operation.GET})
        assert CAPABILITY_MATRIX.operations("CLASS") != changed.operations("CLASS")
        assert len(changed) == len(CAPABILITY_MATRIX)


# ---------------------------------------------------------------------------
# Router verification
# ---------------------------------------------------------------------------


class TestRouterVerification:
    def test_default_router_matches_matrix(self) -> None:
        DEFAULT_ROUTER.verify(CAPABILITY_MATRIX)
        assert DEFAULT_ROUTER.object_types() == CAPABILITY_MATRIX.object_types()

    def test_every_descriptor_is_declared(self) -> None:
        assert {d.tag for d in DESCRIPTORS} == set(CAPABILITY_MATRIX.object_types())

    def test_missing_registration_is_reported(self) -> None:
        router = build_router()
        router.unregister("CLASS", Operation.ACTIVATE)
        with pytest.raises(CapabilityMismatchError) as exc_info:
            router.verify(CAPABILITY_MATRIX)
        err = exc_info.value
        assert err.object_type == "CLASS"
        assert err.difference == frozenset({"activate"})
        assert "Declared: [" in err.message and "registered: [" in err.message

    def test_undeclared_object_type_is_reported(self) -> None:
        extra = ObjectTypeDescriptor(tag="ZZ_EXTRA", name_field="object_name", crud=frozenset({Operation.GET}))
        with pytest.raises(CapabilityMismatchError) as exc_info:
            verified_router(CAPABILITY_MATRIX, DESCRIPTORS + (extra,))
        assert exc_info.value.object_type == "ZZ_EXTRA"
        assert exc_info.value.declared == frozenset()

    def test_declared_but_unregistered_type_is_reported(self) -> None:
        matrix = CAPABILITY_MATRIX.with_entry("ZZ_GHOST", {Operation.GET})
        with pytest.raises(CapabilityMismatchError) as exc_info:
            build_router().verify(matrix)
        assert exc_info.value.registered == frozenset()


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def _call(ctx: WorkflowContext, object_type: Any, operation: Any, args: dict[str, Any] | None = None) -> dict[str, Any]:
    return asyncio.run(invoke(ctx, object_type, operation, args))


class TestDispatch:
    def test_unsupported_pair(self, workflow_context: WorkflowContext) -> None:
        result = _call(workflow_context, "PACKAGE", "update", {"package_name": "ZPKG"})
        assert result == {
            "success": False,
            "error_message": "Unsupported update for object_type: PACKAGE",
            "error_kind": "unsupported_operation",
        }

    def test_unknown_object_type(self, workflow_context: WorkflowContext) -> None:
        result = _call(workflow_context, "SPACESHIP", "get")
        assert result["error_kind"] == "unsupported_operation"

    def test_unknown_operation(self, workflow_context: WorkflowContext) -> None:
        result = _call(workflow_context, "CLASS", "publish")
        assert result["error_message"] == "Unsupported publish for object_type: CLASS"

    def test_object_type_required(self, workflow_context: WorkflowContext) -> None:
        result = _call(workflow_context, "", "get")
        assert result["error_kind"] == "bad_request"
        assert result["error_message"] == "object_type is required"

    def test_missing_name(self, workflow_context: WorkflowContext) -> None:
        result = _call(workflow_context, "CLASS", "get", {})
        assert result["error_kind"] == "bad_request"
        assert result["error_message"] == "class_name is required"

    def test_case_insensitive_routing(
        self, workflow_context: WorkflowContext, adt_repository: InMemoryAdtRepository
    ) -> None:
        adt_repository.seed(ObjectRef("CLASS", "ZCL_DEMO"), source=SOURCE)
        result = _call(workflow_context, "class", "GET", {"class_name": "zcl_demo"})
        assert result["success"] is True
        assert result["data"]["content"]["source_code"] == SOURCE

    def test_handler_failure_becomes_envelope(
        self, workflow_context: WorkflowContext, adt_repository: InMemoryAdtRepository
    ) -> None:
        adt_repository.seed(ObjectRef("CLASS", "ZCL_DEMO"))
        adt_repository.fail_next("read", http_error(423, "ExceptionResourceNoAccess", "ZCL_DEMO is locked"))
        result = _call(workflow_context, "CLASS", "get", {"class_name": "ZCL_DEMO"})
        assert result == {
            "success": False,
            "error_message": "SAP error: ZCL_DEMO is locked",
            "error_kind": "locked",
        }

    def test_custom_router(self, workflow_context: WorkflowContext) -> None:
        async def ping(ctx: WorkflowContext, descriptor: ObjectTypeDescriptor, args: dict[str, Any]) -> ResponseEnvelope:
            return ResponseEnvelope.ok({"tag": descriptor.tag, "args": args})

        router = CapabilityRouter()
        router.register(DESCRIPTORS_BY_TAG["PROGRAM"], Operation.GET, ping)
        result = asyncio.run(invoke(workflow_context, "program", "get", {"x": 1}, router=router))
        assert result == {"success": True, "data": {"tag": "PROGRAM", "args": {"x": 1}}}

    def test_handlers_cover_every_operation(self) -> None:
        assert set(HANDLERS) == set(Operation)


# ---------------------------------------------------------------------------
# Handlers end to end
# ---------------------------------------------------------------------------


class TestHandlers:
    def test_create_class(
        self, workflow_context: WorkflowContext, adt_repository: InMemoryAdtRepository
    ) -> None:
        result = _call(
            workflow_context,
            "CLASS",
            "create",
            {"class_name": "z_demo", "package_name": "$tmp", "source_code": SOURCE, "description": "Demo"},
        )
        assert result["success"] is True
        data = result["data"]
        assert data["name"] == "Z_DEMO"
        assert data["activated"] is True
        assert data["session_state"]["cookies"] == "c1"
        assert adt_repository.get(ObjectRef("CLASS", "Z_DEMO")) is not None

    def test_step_by_step_edit_keeps_session(
        self, workflow_context: WorkflowContext, adt_repository: InMemoryAdtRepository
    ) -> None:
        adt_repository.seed(ObjectRef("PROGRAM", "ZPROG"), source="REPORT zprog.")

        locked = _call(workflow_context, "PROGRAM", "lock", {"program_name": "ZPROG"})
        assert locked["success"] is True
        lock_data = locked["data"]
        assert lock_data["lock_handle"] == "H1"

        # an unrelated call moves the shared connection to another session
        _call(workflow_context, "PROGRAM", "get", {"program_name": "ZPROG"})

        updated = _call(
            workflow_context,
            "PROGRAM",
            "update",
            {
                "program_name": "ZPROG",
                "source_code": "REPORT zprog. WRITE 'hi'.",
                "lock_handle": lock_data["lock_handle"],
                "session_id": lock_data["session_id"],
                "session_state": lock_data["session_state"],
            },
        )
        assert updated["success"] is True
        assert updated["data"]["updated"] is True

        unlocked = _call(
            workflow_context,
            "PROGRAM",
            "unlock",
            {
                "program_name": "ZPROG",
                "lock_handle": "H1",
                "session_id": lock_data["session_id"],
                "session_state": updated["data"]["session_state"],
            },
        )
        assert unlocked["success"] is True
        assert [c.cookies for c in adt_repository.calls_for("update")] == ["c1"]
        assert [c.cookies for c in adt_repository.calls_for("unlock")] == ["c1"]

        again = _call(
            workflow_context,
            "PROGRAM",
            "unlock",
            {
                "program_name": "ZPROG",
                "lock_handle": "H1",
                "session_id": lock_data["session_id"],
                "session_state": updated["data"]["session_state"],
            },
        )
        assert again["success"] is False
        assert again["error_kind"] == "bad_request"

    def test_pre_lock_session_is_rejected(
        self, workflow_context: WorkflowContext, adt_repository: InMemoryAdtRepository
    ) -> None:
        adt_repository.seed(ObjectRef("PROGRAM", "ZPROG"), source="REPORT zprog.")

        opened = _call(workflow_context, "PROGRAM", "validate", {"program_name": "ZPROG", "for_update": True})
        session_id = opened["data"]["session_id"]
        before_lock = opened["data"]["session_state"]
        assert before_lock["cookies"] == "s1"

        locked = _call(
            workflow_context,
            "PROGRAM",
            "lock",
            {"program_name": "ZPROG", "session_id": session_id, "session_state": before_lock},
        )
        after_lock = locked["data"]["session_state"]
        assert after_lock["cookies"] == "c1"
        held = {"program_name": "ZPROG", "lock_handle": locked["data"]["lock_handle"], "session_id": session_id}

        stale_update = _call(
            workflow_context,
            "PROGRAM",
            "update",
            {**held, "source_code": "REPORT zprog. WRITE 'x'.", "session_state": before_lock},
        )
        assert stale_update["success"] is False
        assert stale_update["error_kind"] == "locked"

        stale_unlock = _call(workflow_context, "PROGRAM", "unlock", {**held, "session_state": before_lock})
        assert stale_unlock["success"] is False
        assert stale_unlock["error_kind"] == "locked"
        assert adt_repository.lock_of(ObjectRef("PROGRAM", "ZPROG")) is not None

        updated = _call(
            workflow_context,
            "PROGRAM",
            "update",
            {**held, "source_code": "REPORT zprog. WRITE 'x'.", "session_state": after_lock},
        )
        assert updated["success"] is True
        unlocked = _call(
            workflow_context, "PROGRAM", "unlock", {**held, "session_state": updated["data"]["session_state"]}
        )
        assert unlocked["success"] is True
        assert adt_repository.lock_of(ObjectRef("PROGRAM", "ZPROG")) is None

    @pytest.mark.parametrize(
        "session_state",
        [
            {"cookies": "s1", "cookie_store": ["SAP_SESSIONID=abc"]},
            {"cookies": 42},
            "s1",
        ],
    )
    def test_malformed_session_state_is_bad_request(
        self, workflow_context: WorkflowContext, session_state: Any
    ) -> None:
        result = _call(
            workflow_context,
            "PROGRAM",
            "get",
            {"program_name": "ZPROG", "session_state": session_state},
        )
        assert result["success"] is False
        assert result["error_kind"] == "bad_request"
        assert "session_state" in result["error_message"]

    def test_step_update_requires_session_id(self, workflow_context: WorkflowContext) -> None:
        result = _call(
            workflow_context,
            "PROGRAM",
            "update",
            {"program_name": "ZPROG", "lock_handle": "H1", "source_code": "x"},
        )
        assert result["error_kind"] == "bad_request"
        assert result["error_message"] == "session_id is required"

    def test_check_and_activate_steps(
        self, workflow_context: WorkflowContext, adt_repository: InMemoryAdtRepository
    ) -> None:
        adt_repository.seed(ObjectRef("INTERFACE", "ZIF_DEMO"), source="INTERFACE zif_demo. ENDINTERFACE.")
        checked = _call(workflow_context, "INTERFACE", "check", {"interface_name": "ZIF_DEMO"})
        assert checked["data"]["passed"] is True
        assert checked["data"]["version"] == "inactive"
        activated = _call(workflow_context, "INTERFACE", "activate", {"interface_name": "ZIF_DEMO"})
        assert activated["data"]["activated"] is True

    def test_check_failure_is_bad_request(
        self, workflow_context: WorkflowContext, adt_repository: InMemoryAdtRepository
    ) -> None:
        adt_repository.seed(ObjectRef("INTERFACE", "ZIF_DEMO"))
        result = _call(
            workflow_context,
            "INTERFACE",
            "check",
            {"interface_name": "ZIF_DEMO", "source_code": "syntax error"},
        )
        assert result["error_kind"] == "bad_request"
        assert result["error_message"].startswith("Check failed:")

    def test_validate_step(self, workflow_context: WorkflowContext, adt_repository: InMemoryAdtRepository) -> None:
        adt_repository.seed(ObjectRef("PACKAGE", "ZPKG"))
        result = _call(workflow_context, "package", "validate", {"package_name": "ZPKG"})
        assert result["success"] is True
        assert result["data"]["exists"] is True
        assert result["data"]["valid"] is False

    def test_delete_missing(self, workflow_context: WorkflowContext) -> None:
        result = _call(workflow_context, "TABLE", "delete", {"table_name": "ZTAB"})
        assert result["success"] is True
        assert result["data"]["already_deleted"] is True

    def test_transport_create_uses_assigned_number(self, workflow_context: WorkflowContext) -> None:
        result = _call(workflow_context, "TRANSPORT", "create", {"description": "Demo changes"})
        assert result["success"] is True
        assert result["data"]["transport_request"] == "DEVK900001"
        assert result["data"]["name"] == "DEVK900001"
        assert result["data"]["activated"] is False

    def test_function_module_needs_group(
        self, workflow_context: WorkflowContext, adt_repository: InMemoryAdtRepository
    ) -> None:
        missing = _call(workflow_context, "FUNCTION_MODULE", "create", {"function_module_name": "Z_FM"})
        assert missing["error_message"] == "function_group_name is required"

        adt_repository.seed(ObjectRef("FUNCTION_GROUP", "ZFG"))
        created = _call(
            workflow_context,
            "FUNCTION_MODULE",
            "create",
            {"function_module_name": "Z_FM", "function_group_name": "zfg", "package_name": "$TMP"},
        )
        assert created["success"] is True
        assert created["data"]["parent"] == "ZFG"

    def test_metadata_update_through_router(
        self, workflow_context: WorkflowContext, adt_repository: InMemoryAdtRepository
    ) -> None:
        adt_repository.seed(ObjectRef("DATA_ELEMENT", "ZDE_FLAG"))
        result = _call(
            workflow_context,
            "DATA_ELEMENT",
            "update",
            {"data_element_name": "ZDE_FLAG", "properties": {"domain": "XFELD"}, "activate": "false"},
        )
        assert result["success"] is True
        assert result["data"]["activated"] is False
        stored = adt_repository.get(ObjectRef("DATA_ELEMENT", "ZDE_FLAG"))
        assert stored is not None
        assert stored.properties["domain"] == "XFELD"

    def test_bad_flag(self, workflow_context: WorkflowContext) -> None:
        result = _call(workflow_context, "CLASS", "create", {"class_name": "ZCL_X", "activate": "maybe"})
        assert result["error_kind"] == "bad_request"
