"""
Distribution API Schemas (Pydantic)
"""
from typing import List

from pydantic import Field, StrictInt

from peer_recognition.models import CamelModel, Contribution, Distribution
from peer_recognition.schemas.common import chapter_id_field


class AllocationItem(CamelModel):
    contribution_id: str
    # JSON true and "30" are not points
    points: StrictInt


class DistributionSubmit(CamelModel):
    """Replaces every allocation participantId has in the chapter."""
    participant_id: str
    chapter_id: str = chapter_id_field()
    distributions: List[AllocationItem]


class DistributionSubmitResponse(CamelModel):
    success: bool = True
    distributions: List[Distribution] = Field(default_factory=list)
    allocated: int = 0


class CandidateGroup(CamelModel):
    participant_id: str
    name: str
    contributions: List[Contribution] = Field(default_factory=list)


class AllocationSummary(CamelModel):
    participant_id: str
    chapter_id: str
    candidates: List[CandidateGroup] = Field(default_factory=list)
    allocations: List[Distribution] = Field(default_factory=list)
    allocated: int
    remaining: int
    budget: int
