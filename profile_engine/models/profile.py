"""
Profile section models fanned out from a candidate's CV
"""
from sqlalchemy import (
    Column, Integer, String, Text, Date, DateTime, Boolean, Float,
    ForeignKey, UniqueConstraint, Enum as SQLEnum, JSON
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base
from .candidate import EmploymentType
import enum


class LanguageProficiency(str, enum.Enum):
    NATIVE = "native"
    FLUENT = "fluent"
    PROFESSIONAL = "professional"
    CONVERSATIONAL = "conversational"
    BASIC = "basic"


class SkillSource:
    PROFILE_CREATION = "profile_creation"


SKILL_NAME_MAX_LENGTH = 100


class Skill(Base):
    """Shared skill catalog, deduplicated case-insensitively on name"""
    __tablename__ = "skills"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(SKILL_NAME_MAX_LENGTH), unique=True, nullable=False, index=True)  # lowercase key
    display_name = Column(String(SKILL_NAME_MAX_LENGTH), nullable=False)  # First-seen casing
    category = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    candidates = relationship("CandidateSkill", back_populates="skill")


class CandidateSkill(Base):
    """Candidate <-> Skill link with proficiency and provenance"""
    __tablename__ = "candidate_skills"
    __table_args__ = (
        UniqueConstraint("candidate_id", "skill_id", name="uq_candidate_skill"),
    )

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(String(64), ForeignKey("candidates.user_id", ondelete="CASCADE"), nullable=False, index=True)
    skill_id = Column(Integer, ForeignKey("skills.id", ondelete="CASCADE"), nullable=False)

    proficiency = Column(Integer, default=50)  # 0-100
    years_of_experience = Column(Float, default=0)
    skill_source = Column(String(50), nullable=False)
    source_type = Column(String(50), nullable=False)
    source_title = Column(String(200), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    candidate = relationship("Candidate", back_populates="skills")
    skill = relationship("Skill", back_populates="candidates")


class WorkExperience(Base):
    __tablename__ = "work_experiences"

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(String(64), ForeignKey("candidates.user_id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(200), nullable=False)
    company = Column(String(300), nullable=False)
    employment_type = Column(SQLEnum(EmploymentType), nullable=True)
    is_current = Column(Boolean, default=False)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)  # null while current
    location = Column(String(200), nullable=True)
    description = Column(Text, nullable=True)
    skill_ids = Column(JSON, default=list)
    media_url = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    candidate = relationship("Candidate", back_populates="work_experiences")


class Education(Base):
    __tablename__ = "educations"

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(String(64), ForeignKey("candidates.user_id", ondelete="CASCADE"), nullable=False, index=True)

    degree_diploma = Column(String(200), nullable=False)
    university_school = Column(String(300), nullable=False)
    field_of_study = Column(String(200), nullable=True)
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    grade = Column(String(100), nullable=True)
    activities_societies = Column(Text, nullable=True)
    skill_ids = Column(JSON, default=list)
    media_url = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    candidate = relationship("Candidate", back_populates="educations")


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(String(64), ForeignKey("candidates.user_id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(300), nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    is_current = Column(Boolean, default=False)
    role = Column(String(200), nullable=True)
    responsibilities = Column(JSON, default=list)
    technologies = Column(JSON, default=list)
    tools = Column(JSON, default=list)
    methodologies = Column(JSON, default=list)
    is_confidential = Column(Boolean, default=False)
    can_share_details = Column(Boolean, default=True)
    url = Column(String(500), nullable=True)
    repository_url = Column(String(500), nullable=True)
    media_urls = Column(JSON, default=list)
    skills_gained = Column(JSON, default=list)  # names as written
    skill_ids = Column(JSON, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    candidate = relationship("Candidate", back_populates="projects")


class Certificate(Base):
    __tablename__ = "certificates"

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(String(64), ForeignKey("candidates.user_id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(300), nullable=False)
    issuing_authority = Column(String(200), nullable=False)
    issue_date = Column(Date, nullable=True)
    expiry_date = Column(Date, nullable=True)
    credential_id = Column(String(200), nullable=True)
    credential_url = Column(String(500), nullable=True)
    description = Column(Text, nullable=True)
    skill_ids = Column(JSON, default=list)
    media_url = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    candidate = relationship("Candidate", back_populates="certificates")


class Award(Base):
    __tablename__ = "awards"

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(String(64), ForeignKey("candidates.user_id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(300), nullable=False)
    offered_by = Column(String(200), nullable=False)
    associated_with = Column(String(200), nullable=True)
    date = Column(Date, nullable=True)
    description = Column(Text, nullable=True)
    media_url = Column(String(500), nullable=True)
    skill_ids = Column(JSON, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    candidate = relationship("Candidate", back_populates="awards")


class Volunteering(Base):
    __tablename__ = "volunteering"

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(String(64), ForeignKey("candidates.user_id", ondelete="CASCADE"), nullable=False, index=True)

    role = Column(String(200), nullable=False)
    institution = Column(String(300), nullable=False)
    cause = Column(String(200), nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    is_current = Column(Boolean, default=False)
    description = Column(Text, nullable=True)
    media_url = Column(String(500), nullable=True)
    skill_ids = Column(JSON, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    candidate = relationship("Candidate", back_populates="volunteering")


class CandidateLanguage(Base):
    __tablename__ = "candidate_languages"

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(String(64), ForeignKey("candidates.user_id", ondelete="CASCADE"), nullable=False, index=True)

    language = Column(String(100), nullable=False)
    is_native = Column(Boolean, default=False)
    oral_proficiency = Column(SQLEnum(LanguageProficiency), nullable=True)
    written_proficiency = Column(SQLEnum(LanguageProficiency), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    candidate = relationship("Candidate", back_populates="languages")
