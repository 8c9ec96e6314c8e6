"""
Resume Model - uploaded resume files owned by a candidate.
"""
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class ResumeSource:
    CV_EXTRACTION = "cv_extraction"
    RESUME_UPLOAD = "resume_upload"


class Resume(Base):
    """
    A stored resume file. At most one row per candidate has is_primary set,
    and its resume_url is mirrored onto Candidate.resume_url.
    """
    __tablename__ = "resumes"

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(String(64), ForeignKey("candidates.user_id", ondelete="CASCADE"), nullable=False, index=True)

    # File info
    resume_url = Column(String(1000), nullable=False)
    storage_path = Column(String(500), nullable=False)
    original_filename = Column(String(255), nullable=True)
    file_size = Column(Integer, nullable=True)
    file_type = Column(String(150), nullable=True)
    upload_source = Column(String(50), default=ResumeSource.RESUME_UPLOAD)

    is_primary = Column(Boolean, default=False, nullable=False)
    is_allow_fetch = Column(Boolean, default=False, nullable=False)

    uploaded_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    candidate = relationship("Candidate", back_populates="resumes")
