"""
peer_recognition/routes/results.py
Results, export and skills-summary routes
"""
import logging

from fastapi import APIRouter, Depends

from peer_recognition.dependencies import get_export_service, get_results_service
from peer_recognition.schemas.results_schemas import ResultsResponse, SkillsRequest, SkillsResponse
from peer_recognition.services.export_service import ExportService
from peer_recognition.services.results_service import ResultsService
from peer_recognition.services.skills_service import SkillsService

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Results"])


@router.get("/chapters/{chapter_id}/results", response_model=ResultsResponse)
async def chapter_results(chapter_id: str, service: ResultsService = Depends(get_results_service)):
    """Participants ranked by points received, plus chapter statistics."""
    return await service.results(chapter_id)


@router.get("/chapters/{chapter_id}/export")
async def export_chapter(chapter_id: str, service: ExportService = Depends(get_export_service)):
    return await service.export(chapter_id)


@router.post("/skills-summary", response_model=SkillsResponse)
async def skills_summary(payload: SkillsRequest):
    descriptions = [
        item if isinstance(item, str) else str(item.get("description") or "")
        for item in payload.contributions
    ]
    return SkillsService.for_descriptions(payload.person_name, descriptions)
