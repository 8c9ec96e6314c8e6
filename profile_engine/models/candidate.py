"""
Candidate root entity, populated by profile ingestion
"""
from sqlalchemy import (
    Column, Integer, String, Text, Date, DateTime, Boolean, Float,
    Enum as SQLEnum
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base
import enum


class ApprovalStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ExperienceLevel(str, enum.Enum):
    ENTRY = "entry"
    JUNIOR = "junior"
    MID = "mid"
    SENIOR = "senior"
    LEAD = "lead"
    PRINCIPAL = "principal"


class Gender(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    PREFER_NOT_TO_SAY = "prefer_not_to_say"


class RemotePreference(str, enum.Enum):
    REMOTE_ONLY = "remote_only"
    HYBRID = "hybrid"
    ONSITE = "onsite"
    FLEXIBLE = "flexible"


class AvailabilityStatus(str, enum.Enum):
    AVAILABLE = "available"
    OPEN_TO_OPPORTUNITIES = "open_to_opportunities"
    NOT_LOOKING = "not_looking"


class EmploymentType(str, enum.Enum):
    FULL_TIME = "full_time"
    PART_TIME = "part_time"
    CONTRACT = "contract"
    INTERNSHIP = "internship"
    FREELANCE = "freelance"
    VOLUNTEER = "volunteer"


class Candidate(Base):
    """Candidate profile keyed by the authenticated user's id"""
    __tablename__ = "candidates"

    user_id = Column(String(64), primary_key=True)

    # Basic info
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    title = Column(String(200), nullable=False)
    current_position = Column(String(200), nullable=True)
    industry = Column(String(200), nullable=True)
    bio = Column(Text, nullable=True)
    about = Column(Text, nullable=True)
    professional_summary = Column(Text, nullable=True)

    # Contact & location
    country = Column(String(100), nullable=True)
    city = Column(String(100), nullable=True)
    location = Column(String(200), nullable=False)
    address = Column(String(500), nullable=True)
    phone1 = Column(String(30), nullable=False)
    phone2 = Column(String(30), nullable=True)
    personal_website = Column(String(500), nullable=True)
    github_url = Column(String(500), nullable=True)
    linkedin_url = Column(String(500), nullable=True)
    portfolio_url = Column(String(500), nullable=True)
    profile_image_url = Column(String(500), nullable=True)

    # Personal
    gender = Column(SQLEnum(Gender), nullable=True)
    date_of_birth = Column(Date, nullable=True)

    # Career metadata
    years_of_experience = Column(Integer, nullable=True)
    total_years_experience = Column(Integer, nullable=True)
    experience_level = Column(SQLEnum(ExperienceLevel), nullable=True)
    remote_preference = Column(SQLEnum(RemotePreference), nullable=True)
    availability_status = Column(SQLEnum(AvailabilityStatus), nullable=True)
    availability_date = Column(Date, nullable=True)
    work_availability = Column(SQLEnum(EmploymentType), nullable=True)
    expected_salary_min = Column(Float, nullable=True)
    expected_salary_max = Column(Float, nullable=True)
    currency = Column(String(10), nullable=True)
    notice_period = Column(Integer, nullable=True)  # days
    open_to_relocation = Column(Boolean, nullable=True)
    willing_to_travel = Column(Boolean, nullable=True)

    # Cache of the primary resume's public URL
    resume_url = Column(String(1000), nullable=True)

    profile_completion_percentage = Column(Integer, default=0)
    completed_profile = Column(Boolean, default=False)

    # Staff-controlled gate, never touched by ingestion
    approval_status = Column(SQLEnum(ApprovalStatus), default=ApprovalStatus.PENDING, nullable=False)
    approval_updated_at = Column(DateTime(timezone=True), nullable=True)
    approval_updated_by = Column(String(64), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    resumes = relationship("Resume", back_populates="candidate", cascade="all, delete-orphan")
    work_experiences = relationship("WorkExperience", back_populates="candidate", cascade="all, delete-orphan")
    educations = relationship("Education", back_populates="candidate", cascade="all, delete-orphan")
    projects = relationship("Project", back_populates="candidate", cascade="all, delete-orphan")
    certificates = relationship("Certificate", back_populates="candidate", cascade="all, delete-orphan")
    awards = relationship("Award", back_populates="candidate", cascade="all, delete-orphan")
    volunteering = relationship("Volunteering", back_populates="candidate", cascade="all, delete-orphan")
    languages = relationship("CandidateLanguage", back_populates="candidate", cascade="all, delete-orphan")
    skills = relationship("CandidateSkill", back_populates="candidate", cascade="all, delete-orphan")
