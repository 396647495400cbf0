"""
Chapter API Schemas (Pydantic)
"""
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from peer_recognition.models import CamelModel, Chapter, ChapterStatus


class ChapterCreate(CamelModel):
    """POST /chapters"""
    title: str
    participants: List[str]
    contribution_deadline: Optional[datetime] = None
    distribution_deadline: Optional[datetime] = None
    contribution_duration: Optional[float] = None
    distribution_duration: Optional[float] = None


class StatusUpdate(CamelModel):
    # Checked by the service so an unknown phase reports the allowed values
    status: str


class DeadlinesUpdate(CamelModel):
    contribution_deadline: Optional[datetime] = None
    distribution_deadline: Optional[datetime] = None


class ParticipantCreate(CamelModel):
    name: str


class ChapterResponse(Chapter):
    """Chapter plus its participant names, in participant order."""
    participants: List[str] = Field(default_factory=list)

    @classmethod
    def build(cls, chapter: Chapter, participant_names: List[str]) -> "ChapterResponse":
        return cls(**chapter.model_dump(), participants=participant_names)


class TimerResponse(CamelModel):
    chapter_id: str
    status: ChapterStatus
    end_time: Optional[datetime] = None
    total: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0
    is_expired: bool = False
    display: Optional[str] = None


class ChapterMoveResponse(CamelModel):
    chapter_id: str
    from_status: ChapterStatus = Field(serialization_alias="from", validation_alias="from")
    to_status: ChapterStatus = Field(serialization_alias="to", validation_alias="to")


class AutoTransitionResponse(CamelModel):
    updated: bool
    moves: List[ChapterMoveResponse] = Field(default_factory=list)
