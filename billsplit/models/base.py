from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel, Field, ConfigDict, field_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_bson(value: Any) -> Any:
    """Replace enum members with their values, recursively."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: to_bson(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_bson(v) for v in value]
    return value


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse an id string into an ObjectId, or None if it is malformed."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


class MongoModel(BaseModel):
    """
    Base for persisted documents.

    The id is exposed as a string; Mongo assigns it on insert, so it stays
    None until the document has been written.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True
    )

    id: Optional[str] = Field(default=None, validation_alias="_id", serialization_alias="_id")
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_object_id(cls, value: Any) -> Any:
        if isinstance(value, ObjectId):
            return str(value)
        return value

    def to_document(self) -> dict:
        """Dump for insertion; the id is left for Mongo to assign."""
        return to_bson(self.model_dump(by_alias=True, exclude={"id"}))
