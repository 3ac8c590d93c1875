from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ChangeType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class ChangeEvent(BaseModel):
    """A row change, shaped like a Supabase database-webhook payload."""

    type: ChangeType
    table: str
    schema_name: str = Field("public", alias="schema")
    record: dict[str, Any] | None = None
    old_record: dict[str, Any] | None = None

    model_config = ConfigDict(populate_by_name=True)

    def value(self, column: str) -> Any:
        """Column value from the new row, falling back to the old one (deletes)."""
        for row in (self.record, self.old_record):
            if row and row.get(column) is not None:
                return row[column]
        return None


class InvalidationResponse(BaseModel):
    channels: list[str]
    invalidate: list[list[str]]
