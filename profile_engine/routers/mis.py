"""
MIS Router - staff review of candidate profiles
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.approval import (
    ApprovalStatusResponse, CandidateApprovalAction,
    BulkCandidateApprovalAction, BulkApprovalResponse
)
from ..services.approval import set_approval_status, bulk_set_approval_status
from ..services.identity import CurrentUser, get_current_staff

router = APIRouter(prefix="/api/mis/candidate-approval", tags=["MIS"])


def _status_response(candidate) -> ApprovalStatusResponse:
    return ApprovalStatusResponse(
        candidate_id=candidate.user_id,
        approval_status=candidate.approval_status,
        approval_updated_at=candidate.approval_updated_at,
    )


@router.post("", response_model=ApprovalStatusResponse)
async def review_candidate(
    data: CandidateApprovalAction,
    staff: CurrentUser = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    candidate = await set_approval_status(db, data.candidate_id, data.action, staff.user_id)
    return _status_response(candidate)


@router.post("/bulk", response_model=BulkApprovalResponse)
async def review_candidates_bulk(
    data: BulkCandidateApprovalAction,
    staff: CurrentUser = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    updated, not_found = await bulk_set_approval_status(db, data.candidate_ids, data.action, staff.user_id)
    return BulkApprovalResponse(
        updated=[_status_response(c) for c in updated],
        not_found=not_found,
    )
