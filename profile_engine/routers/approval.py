"""
Candidate Approval Router - approval status and job application gate
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.approval import ApprovalStatusResponse, ApplicationEligibility
from ..services.approval import get_approval_status, check_application_eligibility
from ..services.identity import CurrentUser, get_current_candidate

router = APIRouter(prefix="/api/candidate", tags=["Candidate Approval"])


@router.get("/approval-status", response_model=ApprovalStatusResponse)
async def get_my_approval_status(
    current_user: CurrentUser = Depends(get_current_candidate),
    db: AsyncSession = Depends(get_db),
):
    candidate = await get_approval_status(db, current_user.user_id)
    return ApprovalStatusResponse(
        candidate_id=candidate.user_id,
        approval_status=candidate.approval_status,
        approval_updated_at=candidate.approval_updated_at,
    )


@router.get("/application-eligibility", response_model=ApplicationEligibility)
async def get_application_eligibility(
    current_user: CurrentUser = Depends(get_current_candidate),
    db: AsyncSession = Depends(get_db),
):
    """Job applications check this before accepting a candidate."""
    return await check_application_eligibility(db, current_user.user_id)
