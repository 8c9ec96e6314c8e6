"""
Candidate Resume Router - upload and manage stored resumes
"""
import json
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..errors import NotFound, ValidationFailed
from ..models import Candidate
from ..schemas.resume import (
    ResumeUploadData, ResumeUpdate, ResumeDelete,
    ResumeResponse, ResumeListResponse, ResumeDeleteResponse
)
from ..services.documents import read_upload
from ..services.identity import CurrentUser, get_current_candidate
from ..services.resume_manager import (
    upload_resume, list_resumes, has_resume, update_resume, remove_resume
)
from ..services.storage import BlobStore, get_blob_store

router = APIRouter(prefix="/api/candidate/resume", tags=["Candidate Resume"])


def parse_upload_data(raw: Optional[str]) -> ResumeUploadData:
    if not raw:
        return ResumeUploadData()
    try:
        return ResumeUploadData.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError):
        raise ValidationFailed("resumeData must be a JSON object with boolean is_primary/is_allow_fetch")


@router.post("/upload", response_model=ResumeResponse, status_code=status.HTTP_201_CREATED)
async def upload_candidate_resume(
    resume_file: UploadFile = File(..., alias="resumeFile"),
    resume_data: Optional[str] = Form(None, alias="resumeData"),
    current_user: CurrentUser = Depends(get_current_candidate),
    db: AsyncSession = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
):
    options = parse_upload_data(resume_data)
    document = await read_upload(resume_file)
    resume = await upload_resume(
        db, store, current_user.user_id, document,
        is_primary=options.is_primary,
        is_allow_fetch=options.is_allow_fetch,
    )
    return ResumeResponse.model_validate(resume)


@router.get("/manage", response_model=ResumeListResponse)
async def get_candidate_resumes(
    current_user: CurrentUser = Depends(get_current_candidate),
    db: AsyncSession = Depends(get_db),
):
    candidate = await db.get(Candidate, current_user.user_id)
    if candidate is None:
        raise NotFound("Candidate profile not found")

    resumes = await list_resumes(db, current_user.user_id)
    return ResumeListResponse(
        candidate_id=current_user.user_id,
        resume_url=candidate.resume_url,
        resumes=[ResumeResponse.model_validate(r) for r in resumes],
    )


@router.put("/manage", response_model=ResumeResponse)
async def update_candidate_resume(
    data: ResumeUpdate,
    current_user: CurrentUser = Depends(get_current_candidate),
    db: AsyncSession = Depends(get_db),
):
    """Set primary and/or fetch permission on one of the caller's resumes."""
    resume = await update_resume(
        db, current_user.user_id, data.resume_id,
        is_primary=data.is_primary,
        is_allow_fetch=data.is_allow_fetch,
    )
    return ResumeResponse.model_validate(resume)


@router.delete("/manage", response_model=ResumeDeleteResponse)
async def delete_candidate_resume(
    data: ResumeDelete,
    current_user: CurrentUser = Depends(get_current_candidate),
    db: AsyncSession = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
):
    resume_url = await remove_resume(db, store, current_user.user_id, data.resume_id)
    return ResumeDeleteResponse(
        deleted_resume_id=data.resume_id,
        candidate_id=current_user.user_id,
        resume_url=resume_url,
    )


@router.get("/check-existence")
async def check_resume_existence(
    current_user: CurrentUser = Depends(get_current_candidate),
    db: AsyncSession = Depends(get_db),
):
    return {
        "candidate_id": current_user.user_id,
        "has_resume": await has_resume(db, current_user.user_id),
    }
