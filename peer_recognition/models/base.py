"""
peer_recognition/models/base.py
Base model for all persisted entities
"""
import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from peer_recognition.utils.clock import ensure_utc


def new_id() -> str:
    return str(uuid.uuid4())


class CamelModel(BaseModel):
    """
    Entities are stored and served with camelCase keys.

    Every datetime field is normalized to timezone-aware UTC so that
    deadlines supplied without an offset compare cleanly with the clock.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("*", mode="after")
    @classmethod
    def _normalize_datetimes(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return ensure_utc(value)
        return value

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
