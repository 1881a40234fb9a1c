import logging
import re

from fastapi import APIRouter, Depends, Request

from todo_api.errors import NotFoundError, StorageError, ValidationError
from todo_api.models import (
    INT64_MAX,
    INT64_MIN,
    DeletedTodo,
    Todo,
    TodoBody,
    todo_from_row,
)
from todo_api.storage import Database

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/todos", tags=["todos"])

INSERT_TODO = "INSERT INTO todos (title, detail, point, done) VALUES (:title, :detail, :point, :done)"
SELECT_TODOS = "SELECT id, title, detail, point, done FROM todos"
SELECT_TODO = SELECT_TODOS + " WHERE id = :id"
UPDATE_TODO = "UPDATE todos SET title = :title, detail = :detail, point = :point, done = :done WHERE id = :id"
DELETE_TODO = "DELETE FROM todos WHERE id = :id"

_ID_PATTERN = re.compile(r"[+-]?[0-9]+")


def get_database(request: Request) -> Database:
    return request.app.state.database


def parse_todo_id(todo_id: str) -> int:
    """Parse the ``{todo_id}`` path segment as a signed base-10 int64."""
    if _ID_PATTERN.fullmatch(todo_id):
        value = int(todo_id)
        if INT64_MIN <= value <= INT64_MAX:
            return value
    raise ValidationError("id must be a 64-bit integer")


@router.post("", status_code=201, response_model=Todo)
def create_todo(body: TodoBody, db: Database = Depends(get_database)):
    try:
        result = db.execute(INSERT_TODO, body.model_dump())
    except StorageError as err:
        raise StorageError("fail to create todo") from err
    if not result.last_insert_id:
        raise StorageError("fail to get last insert id")

    logger.info("created todo %d", result.last_insert_id)
    return body.with_id(result.last_insert_id)


@router.get("", response_model=list[Todo])
def list_todos(db: Database = Depends(get_database)):
    return [todo_from_row(row) for row in db.query(SELECT_TODOS)]


@router.get("/{todo_id}", response_model=Todo)
def get_todo(todo_id: int = Depends(parse_todo_id), db: Database = Depends(get_database)):
    row = db.query_one(SELECT_TODO, {"id": todo_id})
    if row is None:
        raise NotFoundError("todo not found")
    return todo_from_row(row)


# PUT replaces the whole record: fields missing from the body are reset
@router.put("/{todo_id}", response_model=Todo)
def update_todo(
    body: TodoBody,
    todo_id: int = Depends(parse_todo_id),
    db: Database = Depends(get_database),
):
    result = db.execute(UPDATE_TODO, {**body.model_dump(), "id": todo_id})
    if result.rows_affected == 0:
        raise NotFoundError("todo not found")

    logger.info("updated todo %d", todo_id)
    return body.with_id(todo_id)


@router.delete("/{todo_id}", response_model=DeletedTodo)
def delete_todo(todo_id: int = Depends(parse_todo_id), db: Database = Depends(get_database)):
    result = db.execute(DELETE_TODO, {"id": todo_id})
    if result.rows_affected == 0:
        raise NotFoundError("todo not found")

    logger.info("deleted todo %d", todo_id)
    return DeletedTodo(id=todo_id)
