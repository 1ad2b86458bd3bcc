from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError

from results import ActionResult, ErrorKind, QueryResult, store_call


def test_action_result_success_carries_no_error():
    result = ActionResult.ok("Done", {"id": "1"})
    assert result.to_payload() == {"success": True, "message": "Done", "data": {"id": "1"}}


def test_action_result_failure_requires_error():
    with pytest.raises(ValidationError):
        ActionResult(success=False)
    with pytest.raises(ValidationError):
        ActionResult(success=True, error="boom")


def test_failure_payload_has_kind_and_no_data():
    payload = ActionResult.fail("Nope", ErrorKind.FORBIDDEN).to_payload()
    assert payload == {"success": False, "error": "Nope", "error_kind": "forbidden"}


def test_store_call_maps_integrity_errors_to_conflict():
    db = MagicMock()

    @store_call("Failed to save")
    def boom(session):
        raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

    result = boom(db)
    assert result.success is False
    assert result.error_kind == ErrorKind.CONFLICT
    assert "UNIQUE constraint failed" in result.error
    db.rollback.assert_called_once()


def test_store_call_maps_other_store_errors_to_internal():
    db = MagicMock()

    @store_call("Failed to load")
    def boom(session):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    result = boom(db)
    assert result.error_kind == ErrorKind.INTERNAL
    assert result.error == "database is locked"


def test_query_result_not_found_message():
    result = QueryResult.not_found("Event")
    assert result.error == "Event not found"
    assert result.error_kind == ErrorKind.NOT_FOUND
