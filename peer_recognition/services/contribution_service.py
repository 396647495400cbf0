"""
peer_recognition/services/contribution_service.py
Contribution & comment store

Contributions are free-text notes an author writes about a subject. Comments
are append-only replies on a contribution. Deleting a contribution takes its
comments and every allocation that targeted it along.
"""
import logging
from datetime import datetime
from typing import List, Optional

from peer_recognition.config.feature_flags import FeatureFlags
from peer_recognition.errors import ValidationError, NotFoundError, require_text
from peer_recognition.models import Chapter, ChapterStatus, Comment, Contribution, Document
from peer_recognition.storage.base import DocumentStore
from peer_recognition.utils.clock import utcnow

logger = logging.getLogger(__name__)


def _check_member(document: Document, chapter_id: str, participant_id: str, role: str) -> None:
    participant = document.find_participant(participant_id)
    if participant is None or participant.chapter_id != chapter_id:
        raise NotFoundError(role, participant_id)


def _check_phase(chapter: Chapter) -> None:
    """Reject note writes outside the contribution phase when gates are on."""
    if not FeatureFlags.FEATURE_ENFORCE_PHASE_GATES:
        return
    if chapter.status != ChapterStatus.CONTRIBUTION:
        raise ValidationError(
            f"Contributions can only be changed during the contribution phase (chapter is in {chapter.status.value})",
            {"status": chapter.status.value},
        )


class ContributionService:

    def __init__(self, store: DocumentStore):
        self.store = store

    # =========================================================================
    # Contributions
    # =========================================================================

    async def add_contribution(
        self,
        subject_id: str,
        author_id: str,
        chapter_id: str,
        text: str,
        now: Optional[datetime] = None,
    ) -> Contribution:
        """
        Record a note about subject_id written by author_id.

        Always inserts; several notes per (author, subject) pair are allowed.

        Raises:
            ValidationError: blank text
            NotFoundError: unknown chapter, or subject/author not in the chapter
        """
        text = require_text(text, "description")

        async with self.store.transaction() as document:
            chapter = document.find_chapter(chapter_id)
            if chapter is None:
                raise NotFoundError("Chapter", chapter_id)
            _check_phase(chapter)
            _check_member(document, chapter_id, subject_id, "Participant")
            _check_member(document, chapter_id, author_id, "Author")

            contribution = Contribution(
                participant_id=subject_id,
                author_id=author_id,
                chapter_id=chapter_id,
                description=text,
                created_at=now or utcnow(),
            )
            document.contributions.append(contribution)

        logger.info(f"Contribution {contribution.id} recorded in chapter {chapter_id}")
        return contribution

    async def edit_contribution(self, contribution_id: str, text: str, now: Optional[datetime] = None) -> Contribution:
        """Replace the note text and refresh its timestamp."""
        text = require_text(text, "description")

        async with self.store.transaction() as document:
            contribution = document.find_contribution(contribution_id)
            if contribution is None:
                raise NotFoundError("Contribution", contribution_id)
            chapter = document.find_chapter(contribution.chapter_id)
            if chapter is not None:
                _check_phase(chapter)

            contribution.description = text
            contribution.created_at = now or utcnow()

        return contribution

    async def delete_contribution(self, contribution_id: str) -> Contribution:
        async with self.store.transaction() as document:
            contribution = document.find_contribution(contribution_id)
            if contribution is None:
                raise NotFoundError("Contribution", contribution_id)
            chapter = document.find_chapter(contribution.chapter_id)
            if chapter is not None:
                _check_phase(chapter)

            document.remove_contributions({contribution_id})

        logger.info(f"Contribution deleted: {contribution_id}")
        return contribution

    async def list_by_chapter(self, chapter_id: str) -> List[Contribution]:
        document = await self.store.read()
        return document.contributions_of(chapter_id)

    # =========================================================================
    # Comments
    # =========================================================================

    async def add_comment(
        self,
        contribution_id: str,
        participant_id: str,
        text: str,
        chapter_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Comment:
        """
        Append a comment to a contribution.

        chapter_id defaults to the contribution's chapter and must match it
        when supplied. The commenter must belong to that chapter.
        """
        text = require_text(text, "text")
        participant_id = require_text(participant_id, "participantId")

        async with self.store.transaction() as document:
            contribution = document.find_contribution(contribution_id)
            if contribution is None:
                raise NotFoundError("Contribution", contribution_id)
            if chapter_id is not None and chapter_id != contribution.chapter_id:
                raise ValidationError(
                    "chapterId does not match the contribution's chapter",
                    {"field": "chapterId"},
                )
            _check_member(document, contribution.chapter_id, participant_id, "Participant")

            comment = Comment(
                contribution_id=contribution_id,
                participant_id=participant_id,
                chapter_id=contribution.chapter_id,
                text=text,
                created_at=now or utcnow(),
            )
            document.comments.append(comment)

        return comment

    async def list_comments_by_contribution(self, contribution_id: str) -> List[Comment]:
        document = await self.store.read()
        return document.comments_on(contribution_id)
