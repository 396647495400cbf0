"""
peer_recognition/services/results_service.py
Results aggregator

Pure projection over the document: no writes, callable in any phase.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List

from peer_recognition.errors import NotFoundError
from peer_recognition.models import Document
from peer_recognition.storage.base import DocumentStore

logger = logging.getLogger(__name__)


def rank_participants(document: Document, chapter_id: str) -> List[Dict[str, Any]]:
    """
    One entry per participant, stable-sorted by received points (descending).

    Ties keep participant order.
    """
    results = []
    for participant in document.participants_of(chapter_id):
        contributions = []
        for contribution in document.contributions_of(chapter_id):
            if contribution.participant_id != participant.id:
                continue
            contributions.append({
                "contribution": contribution,
                "points": document.points_for_contribution(contribution.id),
                "comments": document.comments_on(contribution.id),
            })
        results.append({
            "participant_id": participant.id,
            "name": participant.name,
            "total_points": sum(item["points"] for item in contributions),
            "contributions": contributions,
        })

    return sorted(results, key=lambda r: r["total_points"], reverse=True)


def chapter_statistics(document: Document, chapter_id: str) -> Dict[str, Any]:
    participants = document.participants_of(chapter_id)
    contribution_ids = {c.id for c in document.contributions_of(chapter_id)}
    total_points = sum(
        d.points for d in document.distributions_of(chapter_id)
        if d.to_contribution_id in contribution_ids
    )

    mean = total_points / len(participants) if participants else 0.0
    return {
        "total_points": total_points,
        "participant_count": len(participants),
        "contribution_count": len(contribution_ids),
        "comment_count": len(document.comments_of(chapter_id)),
        "average_points": mean,
        "average_points_rounded": int(Decimal(str(mean)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)),
    }


class ResultsService:

    def __init__(self, store: DocumentStore):
        self.store = store

    async def results(self, chapter_id: str) -> Dict[str, Any]:
        document = await self.store.read()
        chapter = document.find_chapter(chapter_id)
        if chapter is None:
            raise NotFoundError("Chapter", chapter_id)

        return {
            "chapter": chapter,
            "results": rank_participants(document, chapter_id),
            "statistics": chapter_statistics(document, chapter_id),
        }
