import pytest
from pydantic import ValidationError

from todo_api.errors import NotFoundError, StorageError
from todo_api.errors import ValidationError as BadRequest
from todo_api.handlers import parse_todo_id
from todo_api.models import Todo, TodoBody, todo_from_row


def test_body_defaults_and_ignores_extra():
    body = TodoBody.model_validate({"id": 5, "title": "t", "colour": "red"})
    assert body.model_dump() == {"title": "t", "detail": "", "point": 0, "done": False}
    assert body.with_id(3) == Todo(id=3, title="t", detail="", point=0, done=False)


def test_body_null_fields_take_zero_value():
    body = TodoBody.model_validate({"title": None, "detail": "d", "point": None, "done": None})
    assert body.model_dump() == {"title": "", "detail": "d", "point": 0, "done": False}


@pytest.mark.parametrize("payload", [{"point": "3"}, {"point": True}, {"done": 0}])
def test_body_rejects_wrong_types(payload):
    with pytest.raises(ValidationError):
        TodoBody.model_validate(payload)


def test_row_decoding_accepts_tinyint_done():
    row = {"id": 4, "title": "t", "detail": "d", "point": 2, "done": 1}
    assert todo_from_row(row).done is True


def test_row_decoding_failure_is_storage_error():
    with pytest.raises(StorageError):
        todo_from_row({"id": 4, "title": None, "detail": "d", "point": 2, "done": 0})


@pytest.mark.parametrize("raw,expected", [("1", 1), ("007", 7), ("+3", 3), ("-9", -9), (str(2**63 - 1), 2**63 - 1)])
def test_parse_todo_id(raw, expected):
    assert parse_todo_id(raw) == expected


@pytest.mark.parametrize("raw", ["", " 1", "1 ", "1_000", "١٢", str(2**63), str(-(2**63) - 1)])
def test_parse_todo_id_rejects(raw):
    with pytest.raises(BadRequest):
        parse_todo_id(raw)


def test_error_status_codes():
    assert BadRequest("x").status_code == 400
    assert NotFoundError("x").status_code == 404
    assert StorageError("x").status_code == 500
