"""
Resume management schemas
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel


class ResumeUploadData(BaseModel):
    is_primary: bool = False
    is_allow_fetch: bool = False


class ResumeUpdate(BaseModel):
    resume_id: int
    is_primary: Optional[bool] = None
    is_allow_fetch: Optional[bool] = None


class ResumeDelete(BaseModel):
    resume_id: int


class ResumeResponse(BaseModel):
    id: int
    candidate_id: str
    resume_url: str
    storage_path: str
    original_filename: Optional[str] = None
    file_size: Optional[int] = None
    file_type: Optional[str] = None
    upload_source: Optional[str] = None
    is_primary: bool
    is_allow_fetch: bool
    uploaded_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ResumeListResponse(BaseModel):
    candidate_id: str
    resume_url: Optional[str] = None
    resumes: List[ResumeResponse]


class ResumeDeleteResponse(BaseModel):
    deleted_resume_id: int
    candidate_id: str
    resume_url: Optional[str] = None
