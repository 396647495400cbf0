"""
peer_recognition/services/export_service.py
Flattened chapter export (JSON)
"""
import logging
from typing import Any, Dict

from peer_recognition.errors import NotFoundError
from peer_recognition.models import Document
from peer_recognition.storage.base import DocumentStore

logger = logging.getLogger(__name__)


def build_export(document: Document, chapter_id: str) -> Dict[str, Any]:
    """
    Everything recorded under one chapter, in camelCase JSON form.

    pointsSummary lists, per participant, the points received by notes
    about them and the points they handed out.
    """
    chapter = document.find_chapter(chapter_id)
    if chapter is None:
        raise NotFoundError("Chapter", chapter_id)

    participants = document.participants_of(chapter_id)
    contributions = document.contributions_of(chapter_id)
    distributions = document.distributions_of(chapter_id)

    points_summary = []
    for participant in participants:
        received = sum(
            document.points_for_contribution(c.id)
            for c in contributions
            if c.participant_id == participant.id
        )
        given = sum(d.points for d in distributions if d.from_participant_id == participant.id)
        points_summary.append({
            "participantId": participant.id,
            "name": participant.name,
            "received": received,
            "given": given,
        })

    return {
        "chapterId": chapter.id,
        "chapterTitle": chapter.title,
        "status": chapter.status.value,
        "createdAt": chapter.to_json_dict()["createdAt"],
        "participants": [p.to_json_dict() for p in participants],
        "contributions": [c.to_json_dict() for c in contributions],
        "distributions": [d.to_json_dict() for d in distributions],
        "comments": [c.to_json_dict() for c in document.comments_of(chapter_id)],
        "pointsSummary": points_summary,
    }


class ExportService:

    def __init__(self, store: DocumentStore):
        self.store = store

    async def export(self, chapter_id: str) -> Dict[str, Any]:
        document = await self.store.read()
        payload = build_export(document, chapter_id)
        logger.info(f"Chapter {chapter_id} exported")
        return payload
