from typing import Any, Mapping

import pydantic
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from todo_api.errors import StorageError

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class TodoBody(BaseModel):
    """Inbound todo payload. Absent fields fall back to their zero value."""

    model_config = ConfigDict(strict=True, extra="ignore")

    title: str = ""
    detail: str = ""
    point: int = Field(default=0, ge=INT64_MIN, le=INT64_MAX)
    done: bool = False

    # JSON null leaves the zero value in place, same as an absent field
    @field_validator("*", mode="before")
    @classmethod
    def null_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].default
        return value

    def with_id(self, todo_id: int) -> "Todo":
        return Todo(id=todo_id, **self.model_dump())


class Todo(BaseModel):
    id: int
    title: str
    detail: str
    point: int
    done: bool


class DeletedTodo(BaseModel):
    id: int


def todo_from_row(row: Mapping[str, Any]) -> Todo:
    # MySQL hands BOOL columns back as TINYINT, lax mode turns 0/1 into bools
    try:
        return Todo.model_validate(dict(row))
    except pydantic.ValidationError as err:
        raise StorageError("fail to decode todo row") from err
