from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from ..models import ApprovalStatus


class ApprovalStatusResponse(BaseModel):
    candidate_id: str
    approval_status: ApprovalStatus
    approval_updated_at: Optional[datetime] = None


class CandidateApprovalAction(BaseModel):
    candidate_id: str
    action: Literal["approve", "reject"]


class BulkCandidateApprovalAction(BaseModel):
    candidate_ids: List[str] = Field(min_length=1)
    action: Literal["approve", "reject"]


class BulkApprovalResponse(BaseModel):
    updated: List[ApprovalStatusResponse]
    not_found: List[str] = Field(default_factory=list)


class ApplicationEligibility(BaseModel):
    candidate_id: str
    approval_status: ApprovalStatus
    eligible: bool
    message: str
