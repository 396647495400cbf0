"""
Results & Skills API Schemas (Pydantic)
"""
from typing import Any, Dict, List, Union

from pydantic import Field

from peer_recognition.models import CamelModel, Chapter, Comment, Contribution


class ScoredContribution(CamelModel):
    contribution: Contribution
    points: int
    comments: List[Comment] = Field(default_factory=list)


class ParticipantResult(CamelModel):
    participant_id: str
    name: str
    total_points: int
    contributions: List[ScoredContribution] = Field(default_factory=list)


class ChapterStatistics(CamelModel):
    total_points: int
    participant_count: int
    contribution_count: int
    comment_count: int
    average_points: float
    average_points_rounded: int


class ResultsResponse(CamelModel):
    chapter: Chapter
    results: List[ParticipantResult]
    statistics: ChapterStatistics


class SkillsRequest(CamelModel):
    person_name: str
    # Either plain strings or contribution objects with a description
    contributions: List[Union[str, Dict[str, Any]]] = Field(default_factory=list)


class SkillsResponse(CamelModel):
    summary: str
