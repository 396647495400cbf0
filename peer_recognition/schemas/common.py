"""
Shared request/response pieces (Pydantic)
"""
from typing import Optional

from fastapi import Query
from pydantic import AliasChoices, Field

from peer_recognition.errors import ValidationError

# Body field that accepts the legacy "epochId" spelling as well as "chapterId"
CHAPTER_ID_ALIASES = AliasChoices("chapterId", "epochId", "chapter_id")


def chapter_id_field(default=...):
    return Field(default, validation_alias=CHAPTER_ID_ALIASES, serialization_alias="chapterId")


def chapter_id_query(
    chapter_id: Optional[str] = Query(None, alias="chapterId"),
    epoch_id: Optional[str] = Query(None, alias="epochId"),
) -> str:
    """Resolve ?chapterId= or the legacy ?epochId= query parameter."""
    chapter_id = chapter_id or epoch_id
    if not chapter_id:
        raise ValidationError("Missing chapterId parameter", {"field": "chapterId"})
    return chapter_id
