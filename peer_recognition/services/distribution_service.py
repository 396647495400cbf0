"""
peer_recognition/services/distribution_service.py
Distribution ledger

Each participant spends a budget of POINT_BUDGET points across the
contributions of a chapter. An allocation always replaces every row the
participant had in that chapter. validate_allocation() is the write
boundary; DistributionLedger.allocate() trusts what it is given.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from peer_recognition.config.feature_flags import FeatureFlags
from peer_recognition.errors import ValidationError, NotFoundError
from peer_recognition.models import Distribution, Document, POINT_BUDGET
from peer_recognition.storage.base import DocumentStore
from peer_recognition.utils.clock import utcnow

logger = logging.getLogger(__name__)


class AllocationEntry(BaseModel):
    contribution_id: str
    points: int


def validate_allocation(
    document: Document,
    from_participant_id: str,
    chapter_id: str,
    entries: List[AllocationEntry],
) -> None:
    """
    Check a full allocation before anything is written.

    Raises:
        NotFoundError: unknown chapter, allocator not in the chapter, or a
            target contribution that does not belong to the chapter
        ValidationError: negative points, duplicate targets, a total over
            the budget, or (strict mode) points toward a note about oneself
    """
    if document.find_chapter(chapter_id) is None:
        raise NotFoundError("Chapter", chapter_id)

    allocator = document.find_participant(from_participant_id)
    if allocator is None or allocator.chapter_id != chapter_id:
        raise NotFoundError("Participant", from_participant_id)

    seen = set()
    for entry in entries:
        if entry.points < 0:
            raise ValidationError(
                "Points must be a non-negative integer",
                {"contributionId": entry.contribution_id, "points": entry.points},
            )
        if entry.contribution_id in seen:
            raise ValidationError(
                "Each contribution may appear only once per allocation",
                {"contributionId": entry.contribution_id},
            )
        seen.add(entry.contribution_id)

        contribution = document.find_contribution(entry.contribution_id)
        if contribution is None or contribution.chapter_id != chapter_id:
            raise NotFoundError("Contribution", entry.contribution_id)

        if FeatureFlags.FEATURE_STRICT_SELF_ALLOCATION and contribution.participant_id == from_participant_id:
            raise ValidationError(
                "Points cannot be given to contributions about yourself",
                {"contributionId": entry.contribution_id},
            )

    total = sum(entry.points for entry in entries)
    if total > POINT_BUDGET:
        raise ValidationError(
            f"Total points cannot exceed {POINT_BUDGET}",
            {"total": total, "budget": POINT_BUDGET},
        )


class DistributionLedger:
    """Replace-all point allocations per (participant, chapter)."""

    def __init__(self, store: DocumentStore):
        self.store = store

    @staticmethod
    def replace_rows(
        document: Document,
        from_participant_id: str,
        chapter_id: str,
        entries: List[AllocationEntry],
        now: datetime,
    ) -> List[Distribution]:
        document.distributions = [
            d for d in document.distributions
            if not (d.from_participant_id == from_participant_id and d.chapter_id == chapter_id)
        ]
        rows = [
            Distribution(
                from_participant_id=from_participant_id,
                to_contribution_id=entry.contribution_id,
                points=entry.points,
                chapter_id=chapter_id,
                created_at=now,
            )
            for entry in entries
        ]
        document.distributions.extend(rows)
        return rows

    async def allocate(
        self,
        from_participant_id: str,
        chapter_id: str,
        entries: List[AllocationEntry],
        now: Optional[datetime] = None,
    ) -> List[Distribution]:
        """Unconditional replace-all. Callers validate first."""
        async with self.store.transaction() as document:
            rows = self.replace_rows(document, from_participant_id, chapter_id, entries, now or utcnow())
        return rows

    async def submit(
        self,
        from_participant_id: str,
        chapter_id: str,
        entries: List[AllocationEntry],
        now: Optional[datetime] = None,
    ) -> List[Distribution]:
        """Validate then replace, inside a single read-modify-write."""
        async with self.store.transaction() as document:
            validate_allocation(document, from_participant_id, chapter_id, entries)
            rows = self.replace_rows(document, from_participant_id, chapter_id, entries, now or utcnow())

        logger.info(
            f"Allocation recorded: participant {from_participant_id} gave "
            f"{sum(r.points for r in rows)} points in chapter {chapter_id}"
        )
        return rows

    async def list(self, chapter_id: str, participant_id: Optional[str] = None) -> List[Distribution]:
        document = await self.store.read()
        return document.distributions_of(chapter_id, participant_id)

    async def total_for(self, participant_id: str, chapter_id: str) -> int:
        document = await self.store.read()
        return sum(d.points for d in document.distributions_of(chapter_id, participant_id))

    async def candidates(self, participant_id: str, chapter_id: str) -> List[Dict[str, Any]]:
        document = await self.store.read()
        return candidate_groups(document, participant_id, chapter_id)

    async def summary(self, participant_id: str, chapter_id: str) -> Dict[str, Any]:
        """Everything an allocation screen needs for one participant."""
        document = await self.store.read()
        if document.find_chapter(chapter_id) is None:
            raise NotFoundError("Chapter", chapter_id)
        participant = document.find_participant(participant_id)
        if participant is None or participant.chapter_id != chapter_id:
            raise NotFoundError("Participant", participant_id)

        rows = document.distributions_of(chapter_id, participant_id)
        allocated = sum(d.points for d in rows)
        return {
            "participant_id": participant_id,
            "chapter_id": chapter_id,
            "candidates": candidate_groups(document, participant_id, chapter_id),
            "allocations": rows,
            "allocated": allocated,
            "remaining": POINT_BUDGET - allocated,
            "budget": POINT_BUDGET,
        }


def candidate_groups(document: Document, participant_id: str, chapter_id: str) -> List[Dict[str, Any]]:
    """
    Contributions participant_id may fund, grouped by subject in participant order.

    Notes about the participant themself are never offered.
    """
    groups = []
    for subject in document.participants_of(chapter_id):
        if subject.id == participant_id:
            continue
        notes = [
            c for c in document.contributions_of(chapter_id)
            if c.participant_id == subject.id
        ]
        if notes:
            groups.append({
                "participant_id": subject.id,
                "name": subject.name,
                "contributions": notes,
            })
    return groups
