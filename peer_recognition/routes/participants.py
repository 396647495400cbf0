"""
peer_recognition/routes/participants.py
Participant management and per-participant skills
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, Request

from peer_recognition.dependencies import get_chapter_service, get_skills_service
from peer_recognition.models import Participant
from peer_recognition.rate_limit import limiter, WRITE_LIMIT
from peer_recognition.schemas.chapter_schemas import ParticipantCreate
from peer_recognition.schemas.results_schemas import SkillsResponse
from peer_recognition.services.chapter_service import ChapterService
from peer_recognition.services.skills_service import SkillsService

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Participants"])


@router.get("/chapters/{chapter_id}/participants", response_model=List[Participant])
async def list_participants(chapter_id: str, service: ChapterService = Depends(get_chapter_service)):
    return await service.list_participants(chapter_id)


@router.post("/chapters/{chapter_id}/participants/add", response_model=Participant, status_code=201)
@limiter.limit(WRITE_LIMIT)
async def add_participant(
    request: Request,
    chapter_id: str,
    payload: ParticipantCreate,
    service: ChapterService = Depends(get_chapter_service),
):
    return await service.add_participant(chapter_id, payload.name)


@router.delete("/participants/{participant_id}")
@limiter.limit(WRITE_LIMIT)
async def remove_participant(
    request: Request,
    participant_id: str,
    service: ChapterService = Depends(get_chapter_service),
):
    """Remove a participant along with every note, comment and allocation tied to them."""
    await service.remove_participant(participant_id)
    return {"success": True}


@router.get("/chapters/{chapter_id}/participants/{participant_id}/skills", response_model=SkillsResponse)
async def participant_skills(
    chapter_id: str,
    participant_id: str,
    service: SkillsService = Depends(get_skills_service),
):
    result = await service.for_participant(chapter_id, participant_id)
    return {"summary": result["summary"]}
