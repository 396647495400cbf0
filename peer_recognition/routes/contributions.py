"""
peer_recognition/routes/contributions.py
Contribution and comment routes
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, Query, Request

from peer_recognition.dependencies import get_contribution_service
from peer_recognition.models import Comment, Contribution
from peer_recognition.rate_limit import limiter, WRITE_LIMIT
from peer_recognition.schemas.common import chapter_id_query
from peer_recognition.schemas.contribution_schemas import CommentCreate, ContributionCreate, ContributionUpdate
from peer_recognition.services.contribution_service import ContributionService

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Contributions"])


# ================= CONTRIBUTIONS =================

@router.get("/contributions", response_model=List[Contribution])
async def list_contributions(
    chapter_id: str = Depends(chapter_id_query),
    service: ContributionService = Depends(get_contribution_service),
):
    return await service.list_by_chapter(chapter_id)


@router.post("/contributions", response_model=Contribution, status_code=201)
@limiter.limit(WRITE_LIMIT)
async def create_contribution(
    request: Request,
    payload: ContributionCreate,
    service: ContributionService = Depends(get_contribution_service),
):
    return await service.add_contribution(
        subject_id=payload.participant_id,
        author_id=payload.author_id,
        chapter_id=payload.chapter_id,
        text=payload.description,
    )


@router.put("/contributions/{contribution_id}", response_model=Contribution)
@limiter.limit(WRITE_LIMIT)
async def edit_contribution(
    request: Request,
    contribution_id: str,
    payload: ContributionUpdate,
    service: ContributionService = Depends(get_contribution_service),
):
    return await service.edit_contribution(contribution_id, payload.description)


@router.delete("/contributions/{contribution_id}")
@limiter.limit(WRITE_LIMIT)
async def delete_contribution(
    request: Request,
    contribution_id: str,
    service: ContributionService = Depends(get_contribution_service),
):
    await service.delete_contribution(contribution_id)
    return {"success": True}


# ================= COMMENTS =================

@router.get("/comments", response_model=List[Comment])
async def list_comments(
    contribution_id: str = Query(..., alias="contributionId"),
    service: ContributionService = Depends(get_contribution_service),
):
    return await service.list_comments_by_contribution(contribution_id)


@router.post("/comments", response_model=Comment, status_code=201)
@limiter.limit(WRITE_LIMIT)
async def create_comment(
    request: Request,
    payload: CommentCreate,
    service: ContributionService = Depends(get_contribution_service),
):
    return await service.add_comment(
        contribution_id=payload.contribution_id,
        participant_id=payload.participant_id,
        text=payload.text,
        chapter_id=payload.chapter_id,
    )
