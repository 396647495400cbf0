"""
peer_recognition/services/chapter_service.py
Chapter lifecycle manager

Creation, lookup, forced phase changes, deadline edits, the auto-transition
sweep, cascading deletes and participant management. Every mutation is a
single read-modify-write of the aggregate document.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Dict, Any

from peer_recognition.errors import ValidationError, NotFoundError, ConflictError, require_text
from peer_recognition.models import Chapter, ChapterStatus, Document, Participant, PHASE_STATUSES
from peer_recognition.state_machines.chapter_lifecycle import (
    ChapterStateMachine,
    duration_label,
    remaining_time,
    format_remaining,
)
from peer_recognition.storage.base import DocumentStore
from peer_recognition.utils.clock import utcnow, ensure_utc

logger = logging.getLogger(__name__)


@dataclass
class ChapterMove:
    chapter_id: str
    from_status: ChapterStatus
    to_status: ChapterStatus

    def to_dict(self) -> Dict[str, str]:
        return {
            "chapterId": self.chapter_id,
            "from": self.from_status.value,
            "to": self.to_status.value,
        }


@dataclass
class AutoTransitionReport:
    """Outcome of one auto-transition sweep."""
    moves: List[ChapterMove] = field(default_factory=list)

    @property
    def updated(self) -> bool:
        return bool(self.moves)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "updated": self.updated,
            "moves": [move.to_dict() for move in self.moves],
        }


def parse_status(value: Any) -> ChapterStatus:
    """Coerce a raw status value, rejecting anything outside the four phases."""
    if isinstance(value, ChapterStatus):
        return value
    if value not in PHASE_STATUSES:
        raise ValidationError(
            f"Invalid status '{value}'",
            {"field": "status", "allowed": PHASE_STATUSES},
        )
    return ChapterStatus(value)


def _name_key(name: str) -> str:
    return name.strip().lower()


def _require_chapter(document: Document, chapter_id: str) -> Chapter:
    chapter = document.find_chapter(chapter_id)
    if chapter is None:
        raise NotFoundError("Chapter", chapter_id)
    return chapter


class ChapterService:
    """Lifecycle operations over the chapters held in one document store."""

    def __init__(self, store: DocumentStore):
        self.store = store

    # =========================================================================
    # Creation & lookup
    # =========================================================================

    async def create(
        self,
        title: str,
        participant_names: List[str],
        contribution_deadline: Optional[datetime] = None,
        distribution_deadline: Optional[datetime] = None,
        contribution_duration: Optional[float] = None,
        distribution_duration: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> Chapter:
        """
        Create a chapter in setup plus one participant per name.

        Raises:
            ValidationError: blank title, no usable names, non-positive duration
            ConflictError: the same name appears twice (case-insensitive)
        """
        now = now or utcnow()
        title = require_text(title, "title")

        names = [name.strip() for name in (participant_names or []) if name and name.strip()]
        if not names:
            raise ValidationError(
                "At least one participant is required",
                {"field": "participants"},
            )

        seen = set()
        for name in names:
            if _name_key(name) in seen:
                raise ConflictError(
                    f"Participant '{name}' is listed more than once",
                    {"field": "participants", "name": name},
                )
            seen.add(_name_key(name))

        for field_name, hours in (
            ("contributionDuration", contribution_duration),
            ("distributionDuration", distribution_duration),
        ):
            if hours is not None and hours <= 0:
                raise ValidationError(f"{field_name} must be positive", {"field": field_name})

        chapter = Chapter(
            title=title,
            contribution_deadline=ensure_utc(contribution_deadline),
            distribution_deadline=ensure_utc(distribution_deadline),
            created_at=now,
        )
        if contribution_duration is not None:
            chapter.contribution_duration = contribution_duration
        if distribution_duration is not None:
            chapter.distribution_duration = distribution_duration
        chapter.duration = duration_label(chapter, now)

        async with self.store.transaction() as document:
            document.chapters.append(chapter)
            for name in names:
                document.participants.append(Participant(name=name, chapter_id=chapter.id))

        logger.info(f"✓ Chapter created: {chapter.id} '{chapter.title}' with {len(names)} participants")
        return chapter

    async def get(self, chapter_id: str) -> Chapter:
        document = await self.store.read()
        return _require_chapter(document, chapter_id)

    async def get_active(self) -> Optional[Chapter]:
        """First chapter, in insertion order, that has not finished."""
        document = await self.store.read()
        return next(
            (c for c in document.chapters if c.status != ChapterStatus.FINISHED),
            None,
        )

    async def get_latest(self) -> Optional[Chapter]:
        document = await self.store.read()
        if not document.chapters:
            return None
        return max(document.chapters, key=lambda c: c.created_at)

    async def list_all(self) -> List[Chapter]:
        document = await self.store.read()
        return sorted(document.chapters, key=lambda c: c.created_at, reverse=True)

    async def participant_names(self, chapter_id: str) -> List[str]:
        document = await self.store.read()
        return document.participant_names(chapter_id)

    # =========================================================================
    # Phase changes
    # =========================================================================

    async def set_status(self, chapter_id: str, new_status: Any, now: Optional[datetime] = None) -> Chapter:
        """
        Force a phase transition. Any phase may follow any other.

        Raises:
            ValidationError: status is not one of the four phases
            NotFoundError: unknown chapter
        """
        target = parse_status(new_status)
        now = now or utcnow()

        async with self.store.transaction() as document:
            chapter = _require_chapter(document, chapter_id)
            ChapterStateMachine(chapter).transition_to(target, now)

        return chapter

    async def update_deadlines(
        self,
        chapter_id: str,
        contribution_deadline: Optional[datetime] = None,
        distribution_deadline: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> Chapter:
        """
        Overwrite one or both deadlines.

        A chapter sitting in the matching phase also gets its phase end time
        moved, so the running countdown follows the new deadline.
        """
        if contribution_deadline is None and distribution_deadline is None:
            raise ValidationError(
                "At least one deadline is required",
                {"fields": ["contributionDeadline", "distributionDeadline"]},
            )
        now = now or utcnow()

        async with self.store.transaction() as document:
            chapter = _require_chapter(document, chapter_id)

            if contribution_deadline is not None:
                chapter.contribution_deadline = ensure_utc(contribution_deadline)
                if chapter.status == ChapterStatus.CONTRIBUTION:
                    chapter.contribution_end_time = chapter.contribution_deadline

            if distribution_deadline is not None:
                chapter.distribution_deadline = ensure_utc(distribution_deadline)
                if chapter.status == ChapterStatus.DISTRIBUTION:
                    chapter.distribution_end_time = chapter.distribution_deadline

            if chapter.contribution_deadline and chapter.distribution_deadline:
                chapter.duration = duration_label(chapter, now)

        logger.info(f"Chapter {chapter_id} deadlines updated")
        return chapter

    async def auto_transition(self, now: Optional[datetime] = None) -> AutoTransitionReport:
        """
        Advance every chapter whose current phase has run out.

        The document is written once, and only when at least one chapter moved.
        """
        now = now or utcnow()
        report = AutoTransitionReport()

        async with self.store.transaction() as document:
            for chapter in document.chapters:
                for previous, current in ChapterStateMachine(chapter).advance_if_expired(now):
                    report.moves.append(ChapterMove(chapter.id, previous, current))

        if report.updated:
            logger.info(f"Auto-transition sweep moved {len(report.moves)} phase(s)")

        return report

    async def delete(self, chapter_id: str) -> bool:
        """Remove a chapter and everything recorded under it. False if it never existed."""
        async with self.store.transaction() as document:
            if document.find_chapter(chapter_id) is None:
                return False
            document.remove_chapter(chapter_id)

        logger.info(f"Chapter deleted: {chapter_id}")
        return True

    # =========================================================================
    # Participants
    # =========================================================================

    async def list_participants(self, chapter_id: str) -> List[Participant]:
        document = await self.store.read()
        _require_chapter(document, chapter_id)
        return document.participants_of(chapter_id)

    async def add_participant(self, chapter_id: str, name: str) -> Participant:
        name = require_text(name, "name")

        async with self.store.transaction() as document:
            _require_chapter(document, chapter_id)
            if any(_name_key(existing) == _name_key(name) for existing in document.participant_names(chapter_id)):
                raise ConflictError(
                    f"Participant '{name}' already exists in this chapter",
                    {"field": "name", "name": name},
                )
            participant = Participant(name=name, chapter_id=chapter_id)
            document.participants.append(participant)

        logger.info(f"Participant {participant.id} '{name}' added to chapter {chapter_id}")
        return participant

    async def remove_participant(self, participant_id: str) -> Participant:
        """Remove a participant and every contribution, comment and allocation tied to them."""
        async with self.store.transaction() as document:
            participant = document.find_participant(participant_id)
            if participant is None:
                raise NotFoundError("Participant", participant_id)
            document.remove_participant(participant_id)

        logger.info(f"Participant removed: {participant_id} from chapter {participant.chapter_id}")
        return participant

    # =========================================================================
    # Timer
    # =========================================================================

    async def timer(self, chapter_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Countdown for the current phase; end_time is None outside timed phases."""
        now = now or utcnow()
        chapter = await self.get(chapter_id)
        end_time = ChapterStateMachine(chapter).phase_end_time()

        if end_time is None:
            return {
                "chapter_id": chapter.id,
                "status": chapter.status,
                "end_time": None,
                "total": 0,
                "hours": 0,
                "minutes": 0,
                "seconds": 0,
                "is_expired": False,
                "display": None,
            }

        remaining = remaining_time(end_time, now)
        return {
            "chapter_id": chapter.id,
            "status": chapter.status,
            "end_time": end_time,
            **remaining,
            "display": format_remaining(remaining),
        }
