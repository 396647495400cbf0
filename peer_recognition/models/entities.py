"""
peer_recognition/models/entities.py
Participants and the notes, comments and point allocations they produce
"""
from datetime import datetime

from pydantic import Field

from peer_recognition.models.base import CamelModel, new_id
from peer_recognition.utils.clock import utcnow


class Participant(CamelModel):
    id: str = Field(default_factory=new_id)
    name: str
    chapter_id: str


class Contribution(CamelModel):
    """
    Free-text note about a participant.

    participant_id is the subject (who it is ABOUT); author_id is who wrote it.
    Multiple notes per (author, subject) pair are allowed.
    """
    id: str = Field(default_factory=new_id)
    participant_id: str
    author_id: str
    chapter_id: str
    description: str
    created_at: datetime = Field(default_factory=utcnow)


class Comment(CamelModel):
    id: str = Field(default_factory=new_id)
    contribution_id: str
    participant_id: str
    chapter_id: str
    text: str
    created_at: datetime = Field(default_factory=utcnow)


class Distribution(CamelModel):
    """Points from one participant toward one contribution."""
    id: str = Field(default_factory=new_id)
    from_participant_id: str
    to_contribution_id: str
    points: int
    chapter_id: str
    created_at: datetime = Field(default_factory=utcnow)
