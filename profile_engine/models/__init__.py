from .candidate import (
    Candidate, ApprovalStatus, ExperienceLevel, Gender,
    RemotePreference, AvailabilityStatus, EmploymentType
)
from .resume import Resume, ResumeSource
from .profile import (
    Skill, CandidateSkill, SkillSource, SKILL_NAME_MAX_LENGTH,
    WorkExperience, Education, Project, Certificate, Award, Volunteering,
    CandidateLanguage, LanguageProficiency
)

__all__ = [
    # Candidate
    "Candidate", "ApprovalStatus", "ExperienceLevel", "Gender",
    "RemotePreference", "AvailabilityStatus", "EmploymentType",
    # Resume
    "Resume", "ResumeSource",
    # Profile sections
    "Skill", "CandidateSkill", "SkillSource", "SKILL_NAME_MAX_LENGTH",
    "WorkExperience", "Education", "Project", "Certificate", "Award", "Volunteering",
    "CandidateLanguage", "LanguageProficiency",
]
