"""
Canonical candidate profile schemas and ingestion responses
"""
import datetime as dt
from typing import Annotated, List, Optional
from pydantic import BaseModel, Field

from ..models import (
    ExperienceLevel, Gender, RemotePreference, AvailabilityStatus,
    EmploymentType, LanguageProficiency, SKILL_NAME_MAX_LENGTH
)

# String limits mirror the column sizes so oversized input is a validation error
SkillName = Annotated[str, Field(max_length=SKILL_NAME_MAX_LENGTH)]


# ============================================================================
# Canonical Profile (validated, normalized shape)
# ============================================================================

class BasicInfo(BaseModel):
    # Required for profile creation, optional while previewing an extraction
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    title: Optional[str] = Field(default=None, max_length=200)
    location: Optional[str] = Field(default=None, max_length=200)
    phone1: Optional[str] = Field(default=None, max_length=30)

    current_position: Optional[str] = Field(default=None, max_length=200)
    industry: Optional[str] = Field(default=None, max_length=200)
    bio: Optional[str] = None
    about: Optional[str] = None
    professional_summary: Optional[str] = None
    country: Optional[str] = Field(default=None, max_length=100)
    city: Optional[str] = Field(default=None, max_length=100)
    address: Optional[str] = Field(default=None, max_length=500)
    phone2: Optional[str] = Field(default=None, max_length=30)
    personal_website: Optional[str] = Field(default=None, max_length=500)
    github_url: Optional[str] = Field(default=None, max_length=500)
    linkedin_url: Optional[str] = Field(default=None, max_length=500)
    portfolio_url: Optional[str] = Field(default=None, max_length=500)
    profile_image_url: Optional[str] = Field(default=None, max_length=500)
    gender: Optional[Gender] = None
    date_of_birth: Optional[dt.date] = None
    years_of_experience: Optional[int] = None
    total_years_experience: Optional[int] = None
    experience_level: Optional[ExperienceLevel] = None
    remote_preference: Optional[RemotePreference] = None
    availability_status: Optional[AvailabilityStatus] = None
    availability_date: Optional[dt.date] = None
    work_availability: Optional[EmploymentType] = None
    expected_salary_min: Optional[float] = None
    expected_salary_max: Optional[float] = None
    currency: Optional[str] = Field(default=None, max_length=10)
    notice_period: Optional[int] = None
    open_to_relocation: Optional[bool] = None
    willing_to_travel: Optional[bool] = None


class WorkExperienceIn(BaseModel):
    title: str = Field(..., max_length=200)
    company: str = Field(..., max_length=300)
    employment_type: Optional[EmploymentType] = None
    is_current: bool = False
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    location: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None
    skills: List[SkillName] = Field(default_factory=list)
    media_url: Optional[str] = Field(default=None, max_length=500)


class EducationIn(BaseModel):
    degree_diploma: str = Field(..., max_length=200)
    university_school: str = Field(..., max_length=300)
    field_of_study: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    grade: Optional[str] = Field(default=None, max_length=100)
    activities_societies: Optional[str] = None
    skills: List[SkillName] = Field(default_factory=list)
    media_url: Optional[str] = Field(default=None, max_length=500)


class SkillIn(BaseModel):
    name: SkillName
    category: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = None
    proficiency: Optional[int] = Field(default=None, ge=0, le=100)
    years_of_experience: Optional[float] = None


class ProjectIn(BaseModel):
    name: str = Field(..., max_length=300)
    description: Optional[str] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    is_current: bool = False
    role: Optional[str] = Field(default=None, max_length=200)
    responsibilities: List[str] = Field(default_factory=list)
    technologies: List[str] = Field(default_factory=list)
    tools: List[str] = Field(default_factory=list)
    methodologies: List[str] = Field(default_factory=list)
    is_confidential: bool = False
    can_share_details: bool = True
    url: Optional[str] = Field(default=None, max_length=500)
    repository_url: Optional[str] = Field(default=None, max_length=500)
    media_urls: List[str] = Field(default_factory=list)
    skills_gained: List[SkillName] = Field(default_factory=list)


class CertificateIn(BaseModel):
    name: str = Field(..., max_length=300)
    issuing_authority: str = Field(..., max_length=200)
    issue_date: Optional[dt.date] = None
    expiry_date: Optional[dt.date] = None
    credential_id: Optional[str] = Field(default=None, max_length=200)
    credential_url: Optional[str] = Field(default=None, max_length=500)
    description: Optional[str] = None
    skills: List[SkillName] = Field(default_factory=list)
    media_url: Optional[str] = Field(default=None, max_length=500)


class AwardIn(BaseModel):
    title: str = Field(..., max_length=300)
    offered_by: str = Field(..., max_length=200)
    associated_with: Optional[str] = Field(default=None, max_length=200)
    date: Optional[dt.date] = None
    description: Optional[str] = None
    media_url: Optional[str] = Field(default=None, max_length=500)
    skills: List[SkillName] = Field(default_factory=list)


class VolunteeringIn(BaseModel):
    role: str = Field(..., max_length=200)
    institution: str = Field(..., max_length=300)
    cause: Optional[str] = Field(default=None, max_length=200)
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    is_current: bool = False
    description: Optional[str] = None
    media_url: Optional[str] = Field(default=None, max_length=500)
    skills: List[SkillName] = Field(default_factory=list)


class LanguageIn(BaseModel):
    language: str = Field(..., max_length=100)
    is_native: bool = False
    oral_proficiency: Optional[LanguageProficiency] = None
    written_proficiency: Optional[LanguageProficiency] = None


class CanonicalProfile(BaseModel):
    """Complete candidate profile as accepted by profile creation"""
    basic_info: BasicInfo = Field(default_factory=BasicInfo)
    work_experiences: List[WorkExperienceIn] = Field(default_factory=list)
    educations: List[EducationIn] = Field(default_factory=list)
    skills: List[SkillIn] = Field(default_factory=list)
    projects: List[ProjectIn] = Field(default_factory=list)
    certificates: List[CertificateIn] = Field(default_factory=list)
    awards: List[AwardIn] = Field(default_factory=list)
    volunteering: List[VolunteeringIn] = Field(default_factory=list)
    languages: List[LanguageIn] = Field(default_factory=list)

    def referenced_skill_names(self) -> List[str]:
        """Every skill name mentioned anywhere in the profile, in first-seen order."""
        names = [s.name for s in self.skills]
        for exp in self.work_experiences:
            names.extend(exp.skills)
        for edu in self.educations:
            names.extend(edu.skills)
        for proj in self.projects:
            names.extend(proj.skills_gained)
        for cert in self.certificates:
            names.extend(cert.skills)
        for award in self.awards:
            names.extend(award.skills)
        for vol in self.volunteering:
            names.extend(vol.skills)
        return [n for n in names if n and n.strip()]


# ============================================================================
# Extraction preview
# ============================================================================

class FileInfo(BaseModel):
    name: str
    size: int
    type: str


class ExtractionSummary(BaseModel):
    work_experiences_count: int = 0
    educations_count: int = 0
    skills_count: int = 0
    projects_count: int = 0
    certificates_count: int = 0
    awards_count: int = 0
    volunteering_count: int = 0
    languages_count: int = 0
    accomplishments_count: int = 0


class ExtractionResponse(BaseModel):
    extracted_data: CanonicalProfile
    file_info: FileInfo
    extraction_summary: ExtractionSummary
    # Only set when the CV was also kept as a resume (saveAsResume)
    resume_id: Optional[int] = None
    resume_url: Optional[str] = None
    resume_error: Optional[str] = None


# ============================================================================
# Ingestion result
# ============================================================================

class CreatedRecords(BaseModel):
    work_experiences: int = 0
    educations: int = 0
    skills: int = 0
    projects: int = 0
    certificates: int = 0
    volunteering: int = 0
    awards: int = 0
    languages: int = 0
    resume: int = 0


class IngestionResult(BaseModel):
    candidate_id: str
    profile_completion_percentage: int
    completed_profile: bool
    created_records: CreatedRecords
    resume_id: Optional[int] = None
    resume_url: Optional[str] = None
    # Set when the attached resume could not be stored; profile data is still created
    resume_error: Optional[str] = None
