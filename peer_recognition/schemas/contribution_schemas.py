"""
Contribution & Comment API Schemas (Pydantic)
"""
from typing import Optional

from peer_recognition.models import CamelModel
from peer_recognition.schemas.common import chapter_id_field


class ContributionCreate(CamelModel):
    """participantId is the subject of the note, authorId its writer."""
    participant_id: str
    author_id: str
    chapter_id: str = chapter_id_field()
    description: str


class ContributionUpdate(CamelModel):
    description: str


class CommentCreate(CamelModel):
    contribution_id: str
    participant_id: str
    chapter_id: Optional[str] = chapter_id_field(None)
    text: str
