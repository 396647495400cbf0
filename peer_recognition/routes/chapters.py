"""
peer_recognition/routes/chapters.py
Chapter lifecycle routes: create, read, phase changes, deadlines, sweep, delete
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from peer_recognition.dependencies import get_chapter_service
from peer_recognition.errors import NotFoundError
from peer_recognition.rate_limit import limiter, WRITE_LIMIT
from peer_recognition.schemas.chapter_schemas import (
    AutoTransitionResponse,
    ChapterCreate,
    ChapterResponse,
    DeadlinesUpdate,
    StatusUpdate,
    TimerResponse,
)
from peer_recognition.services.chapter_service import ChapterService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/chapters", tags=["Chapters"])


async def _with_names(service: ChapterService, chapter) -> ChapterResponse:
    return ChapterResponse.build(chapter, await service.participant_names(chapter.id))


@router.post("", response_model=ChapterResponse, status_code=201)
@limiter.limit(WRITE_LIMIT)
async def create_chapter(
    request: Request,
    payload: ChapterCreate,
    service: ChapterService = Depends(get_chapter_service),
):
    chapter = await service.create(
        title=payload.title,
        participant_names=payload.participants,
        contribution_deadline=payload.contribution_deadline,
        distribution_deadline=payload.distribution_deadline,
        contribution_duration=payload.contribution_duration,
        distribution_duration=payload.distribution_duration,
    )
    return await _with_names(service, chapter)


@router.get("", response_model=Optional[ChapterResponse])
async def current_chapter(
    latest: bool = Query(False),
    service: ChapterService = Depends(get_chapter_service),
):
    """Active (non-finished) chapter, or the most recent one with ?latest=true. null when none."""
    chapter = await service.get_latest() if latest else await service.get_active()
    if chapter is None:
        return None
    return await _with_names(service, chapter)


@router.get("/all", response_model=List[ChapterResponse])
async def list_chapters(service: ChapterService = Depends(get_chapter_service)):
    chapters = await service.list_all()
    return [await _with_names(service, chapter) for chapter in chapters]


@router.post("/auto-transition", response_model=AutoTransitionResponse)
@limiter.limit(WRITE_LIMIT)
async def auto_transition(
    request: Request,
    service: ChapterService = Depends(get_chapter_service),
):
    """Advance every chapter whose phase has run out. Safe to poll."""
    report = await service.auto_transition()
    return report.to_dict()


@router.get("/{chapter_id}", response_model=ChapterResponse)
async def get_chapter(chapter_id: str, service: ChapterService = Depends(get_chapter_service)):
    chapter = await service.get(chapter_id)
    return await _with_names(service, chapter)


@router.put("/{chapter_id}/status", response_model=ChapterResponse)
@limiter.limit(WRITE_LIMIT)
async def update_status(
    request: Request,
    chapter_id: str,
    payload: StatusUpdate,
    service: ChapterService = Depends(get_chapter_service),
):
    """Force a phase change. Regressions are allowed."""
    chapter = await service.set_status(chapter_id, payload.status)
    return await _with_names(service, chapter)


@router.put("/{chapter_id}/deadlines", response_model=ChapterResponse)
@limiter.limit(WRITE_LIMIT)
async def update_deadlines(
    request: Request,
    chapter_id: str,
    payload: DeadlinesUpdate,
    service: ChapterService = Depends(get_chapter_service),
):
    chapter = await service.update_deadlines(
        chapter_id,
        contribution_deadline=payload.contribution_deadline,
        distribution_deadline=payload.distribution_deadline,
    )
    return await _with_names(service, chapter)


@router.delete("/{chapter_id}")
@limiter.limit(WRITE_LIMIT)
async def delete_chapter(
    request: Request,
    chapter_id: str,
    service: ChapterService = Depends(get_chapter_service),
):
    """Delete a chapter with all of its participants, notes, comments and allocations."""
    if not await service.delete(chapter_id):
        raise NotFoundError("Chapter", chapter_id)
    return {"success": True}


@router.get("/{chapter_id}/timer", response_model=TimerResponse)
async def chapter_timer(chapter_id: str, service: ChapterService = Depends(get_chapter_service)):
    return await service.timer(chapter_id)
