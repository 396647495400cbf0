"""
peer_recognition/models/document.py
The aggregate document: the single unit of persistence

Every query is a full scan-and-filter over the five arrays. Stores read and
write the whole document; services mutate an in-memory copy in between.
"""
from typing import List, Optional, Union

from pydantic import AliasChoices, Field

from peer_recognition.models.base import CamelModel
from peer_recognition.models.chapter import Chapter
from peer_recognition.models.entities import Participant, Contribution, Comment, Distribution

POINT_BUDGET = 100


class Document(CamelModel):
    version: int = 0
    chapters: List[Chapter] = Field(
        default_factory=list,
        validation_alias=AliasChoices("chapters", "epochs"),
    )
    participants: List[Participant] = Field(default_factory=list)
    contributions: List[Contribution] = Field(default_factory=list)
    comments: List[Comment] = Field(default_factory=list)
    distributions: List[Distribution] = Field(default_factory=list)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_json(self, indent: Optional[int] = None) -> str:
        return self.model_dump_json(by_alias=True, indent=indent)

    @classmethod
    def from_json(cls, raw: Union[str, bytes]) -> "Document":
        return cls.model_validate_json(raw)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def find_chapter(self, chapter_id: str) -> Optional[Chapter]:
        return next((c for c in self.chapters if c.id == chapter_id), None)

    def find_participant(self, participant_id: str) -> Optional[Participant]:
        return next((p for p in self.participants if p.id == participant_id), None)

    def find_contribution(self, contribution_id: str) -> Optional[Contribution]:
        return next((c for c in self.contributions if c.id == contribution_id), None)

    def participants_of(self, chapter_id: str) -> List[Participant]:
        return [p for p in self.participants if p.chapter_id == chapter_id]

    def participant_names(self, chapter_id: str) -> List[str]:
        return [p.name for p in self.participants_of(chapter_id)]

    def contributions_of(self, chapter_id: str) -> List[Contribution]:
        return [c for c in self.contributions if c.chapter_id == chapter_id]

    def comments_on(self, contribution_id: str) -> List[Comment]:
        return [c for c in self.comments if c.contribution_id == contribution_id]

    def comments_of(self, chapter_id: str) -> List[Comment]:
        return [c for c in self.comments if c.chapter_id == chapter_id]

    def distributions_of(self, chapter_id: str, participant_id: Optional[str] = None) -> List[Distribution]:
        return [
            d for d in self.distributions
            if d.chapter_id == chapter_id
            and (participant_id is None or d.from_participant_id == participant_id)
        ]

    def points_for_contribution(self, contribution_id: str) -> int:
        return sum(d.points for d in self.distributions if d.to_contribution_id == contribution_id)

    # ------------------------------------------------------------------
    # Cascading removals
    # ------------------------------------------------------------------

    def remove_contributions(self, contribution_ids: set) -> None:
        """Drop contributions plus every comment and distribution attached to them."""
        if not contribution_ids:
            return
        self.contributions = [c for c in self.contributions if c.id not in contribution_ids]
        self.comments = [c for c in self.comments if c.contribution_id not in contribution_ids]
        self.distributions = [d for d in self.distributions if d.to_contribution_id not in contribution_ids]

    def remove_participant(self, participant_id: str) -> None:
        """Drop a participant and everything that references them."""
        self.participants = [p for p in self.participants if p.id != participant_id]
        self.remove_contributions({
            c.id for c in self.contributions
            if c.participant_id == participant_id or c.author_id == participant_id
        })
        self.comments = [c for c in self.comments if c.participant_id != participant_id]
        self.distributions = [d for d in self.distributions if d.from_participant_id != participant_id]

    def remove_chapter(self, chapter_id: str) -> None:
        self.chapters = [c for c in self.chapters if c.id != chapter_id]
        self.participants = [p for p in self.participants if p.chapter_id != chapter_id]
        self.contributions = [c for c in self.contributions if c.chapter_id != chapter_id]
        self.comments = [c for c in self.comments if c.chapter_id != chapter_id]
        self.distributions = [d for d in self.distributions if d.chapter_id != chapter_id]
