"""
peer_recognition/models/chapter.py
Chapter (alias "epoch"): one time-boxed recognition session
"""
import enum
from datetime import datetime
from typing import Optional

from pydantic import Field

from peer_recognition.models.base import CamelModel, new_id
from peer_recognition.utils.clock import utcnow

DEFAULT_CONTRIBUTION_HOURS = 1.0
DEFAULT_DISTRIBUTION_HOURS = 0.5


class ChapterStatus(str, enum.Enum):
    """Chapter phases, in their normal order."""
    SETUP = "setup"
    CONTRIBUTION = "contribution"
    DISTRIBUTION = "distribution"
    FINISHED = "finished"


PHASE_STATUSES = [status.value for status in ChapterStatus]


class Chapter(CamelModel):
    """
    Chapter record.

    Deadlines are absolute and always win over the legacy duration fields.
    The *EndTime fields are stamped by phase transitions.
    """
    id: str = Field(default_factory=new_id)
    title: str
    duration: str = "1h"
    contribution_duration: Optional[float] = DEFAULT_CONTRIBUTION_HOURS
    distribution_duration: Optional[float] = DEFAULT_DISTRIBUTION_HOURS
    contribution_deadline: Optional[datetime] = None
    distribution_deadline: Optional[datetime] = None
    status: ChapterStatus = ChapterStatus.SETUP
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    contribution_end_time: Optional[datetime] = None
    distribution_end_time: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def contribution_hours(self) -> float:
        return self.contribution_duration or DEFAULT_CONTRIBUTION_HOURS

    @property
    def distribution_hours(self) -> float:
        return self.distribution_duration or DEFAULT_DISTRIBUTION_HOURS
