"""
Candidate Profile Router - CV extraction preview and profile creation
"""
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.profile import ExtractionResponse, IngestionResult
from ..services.cv_extractor import CVExtractor, extract_profile, get_cv_extractor
from ..services.documents import read_upload
from ..services.identity import CurrentUser, get_current_candidate
from ..services.ingestion import create_profile, parse_profile_payload
from ..services.resume_manager import save_cv_as_resume
from ..services.storage import BlobStore, get_blob_store

router = APIRouter(prefix="/api/candidate/profile", tags=["Candidate Profile"])


@router.post("/extract-cv", response_model=ExtractionResponse)
async def extract_cv(
    file: UploadFile = File(...),
    save_as_resume: bool = Form(False, alias="saveAsResume"),
    set_as_primary: bool = Form(False, alias="setAsPrimary"),
    current_user: CurrentUser = Depends(get_current_candidate),
    extractor: CVExtractor = Depends(get_cv_extractor),
    db: AsyncSession = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
):
    """
    Extract structured profile data from a CV for review.

    Nothing is persisted unless saveAsResume is set, in which case a candidate
    with an existing profile also keeps the CV as a resume. A failed save is
    reported in resume_error and the extraction is still returned.
    """
    document = await read_upload(file)
    response = await extract_profile(document, extractor)

    if save_as_resume:
        resume, error = await save_cv_as_resume(
            db, store, current_user.user_id, document, set_as_primary=set_as_primary
        )
        if resume is not None:
            response.resume_id = resume.id
            response.resume_url = resume.resume_url
        response.resume_error = error

    return response


@router.post("/create-profile", response_model=IngestionResult, status_code=status.HTTP_201_CREATED)
async def create_candidate_profile(
    profile_data: str = Form(..., alias="profileData"),
    extracted_resume: Optional[UploadFile] = File(None, alias="extractedResume"),
    current_user: CurrentUser = Depends(get_current_candidate),
    db: AsyncSession = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
):
    """Create the caller's profile, optionally keeping the CV as their primary resume."""
    profile = parse_profile_payload(profile_data)
    document = await read_upload(extracted_resume) if extracted_resume is not None else None
    return await create_profile(db, current_user.user_id, profile, document, store)
