"""
Candidate approval gate.

New profiles start pending. Staff move them to approved or rejected (and
between those two); nothing moves a profile back to pending. Only approved
candidates may apply to jobs.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, List, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import NotFound, ValidationFailed
from ..models import ApprovalStatus, Candidate
from ..schemas.approval import ApplicationEligibility
from .guards import candidate_guard

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[ApprovalStatus, set] = {
    ApprovalStatus.PENDING: {ApprovalStatus.APPROVED, ApprovalStatus.REJECTED},
    ApprovalStatus.APPROVED: {ApprovalStatus.REJECTED},
    ApprovalStatus.REJECTED: {ApprovalStatus.APPROVED},
}

ACTION_STATUS = {
    "approve": ApprovalStatus.APPROVED,
    "reject": ApprovalStatus.REJECTED,
}

ELIGIBILITY_MESSAGES = {
    ApprovalStatus.APPROVED: "You are eligible to apply for jobs.",
    ApprovalStatus.PENDING: "Your profile is pending approval. You can apply for jobs once it has been reviewed.",
    ApprovalStatus.REJECTED: "Your profile was not approved. Please update your profile or contact support.",
}


def _status_for_action(action: str) -> ApprovalStatus:
    try:
        return ACTION_STATUS[action]
    except KeyError:
        raise ValidationFailed(f"Unknown approval action '{action}'", details={"field": "action"})


def apply_transition(candidate: Candidate, target: ApprovalStatus, staff_id: str) -> bool:
    """Move candidate to target. Returns False when it was already there."""
    current = candidate.approval_status or ApprovalStatus.PENDING
    if current == target:
        return False
    if target not in ALLOWED_TRANSITIONS.get(current, set()):
        raise ValidationFailed(
            f"Cannot change approval status from {current.value} to {target.value}",
            details={"candidate_id": candidate.user_id},
        )
    candidate.approval_status = target
    candidate.approval_updated_at = datetime.now(timezone.utc)
    candidate.approval_updated_by = staff_id
    return True


async def get_approval_status(db: AsyncSession, candidate_id: str) -> Candidate:
    candidate = await db.get(Candidate, candidate_id)
    if candidate is None:
        raise NotFound("Candidate profile not found", details={"candidate_id": candidate_id})
    return candidate


async def set_approval_status(db: AsyncSession, candidate_id: str, action: str, staff_id: str) -> Candidate:
    target = _status_for_action(action)
    async with candidate_guard(db, candidate_id) as candidate:
        if candidate is None:
            raise NotFound("Candidate profile not found", details={"candidate_id": candidate_id})
        changed = apply_transition(candidate, target, staff_id)
        await db.commit()

    if changed:
        logger.info(f"Candidate {candidate_id} {target.value} by {staff_id}")
    return candidate


async def bulk_set_approval_status(
    db: AsyncSession,
    candidate_ids: List[str],
    action: str,
    staff_id: str,
) -> Tuple[List[Candidate], List[str]]:
    """Apply one action to many candidates in a single transaction."""
    target = _status_for_action(action)
    unique_ids = list(dict.fromkeys(candidate_ids))

    result = await db.execute(
        select(Candidate)
        .where(Candidate.user_id.in_(unique_ids))
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    found = {c.user_id: c for c in result.scalars().all()}

    updated = []
    not_found = []
    for candidate_id in unique_ids:
        candidate = found.get(candidate_id)
        if candidate is None:
            not_found.append(candidate_id)
            continue
        apply_transition(candidate, target, staff_id)
        updated.append(candidate)

    await db.commit()
    logger.info(f"Bulk {action}: {len(updated)} updated, {len(not_found)} not found (by {staff_id})")
    return updated, not_found


async def check_application_eligibility(db: AsyncSession, candidate_id: str) -> ApplicationEligibility:
    candidate = await get_approval_status(db, candidate_id)
    status = candidate.approval_status or ApprovalStatus.PENDING
    return ApplicationEligibility(
        candidate_id=candidate_id,
        approval_status=status,
        eligible=status == ApprovalStatus.APPROVED,
        message=ELIGIBILITY_MESSAGES[status],
    )
