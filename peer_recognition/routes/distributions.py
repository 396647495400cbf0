"""
peer_recognition/routes/distributions.py
Point allocation routes
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from peer_recognition.dependencies import get_ledger
from peer_recognition.models import Distribution
from peer_recognition.rate_limit import limiter, WRITE_LIMIT
from peer_recognition.schemas.common import chapter_id_query
from peer_recognition.schemas.distribution_schemas import (
    AllocationSummary,
    DistributionSubmit,
    DistributionSubmitResponse,
)
from peer_recognition.services.distribution_service import AllocationEntry, DistributionLedger

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/distributions", tags=["Distributions"])


@router.get("", response_model=List[Distribution])
async def list_distributions(
    chapter_id: str = Depends(chapter_id_query),
    participant_id: Optional[str] = Query(None, alias="participantId"),
    ledger: DistributionLedger = Depends(get_ledger),
):
    return await ledger.list(chapter_id, participant_id)


@router.post("", response_model=DistributionSubmitResponse)
@limiter.limit(WRITE_LIMIT)
async def submit_distributions(
    request: Request,
    payload: DistributionSubmit,
    ledger: DistributionLedger = Depends(get_ledger),
):
    """Replace every allocation the participant has in the chapter."""
    entries = [
        AllocationEntry(contribution_id=item.contribution_id, points=item.points)
        for item in payload.distributions
    ]
    rows = await ledger.submit(payload.participant_id, payload.chapter_id, entries)
    return {
        "success": True,
        "distributions": rows,
        "allocated": sum(row.points for row in rows),
    }


@router.get("/summary", response_model=AllocationSummary)
async def allocation_summary(
    chapter_id: str = Depends(chapter_id_query),
    participant_id: str = Query(..., alias="participantId"),
    ledger: DistributionLedger = Depends(get_ledger),
):
    """Candidates, current rows and remaining budget for one participant."""
    return await ledger.summary(participant_id, chapter_id)
