from .extraction import RawExtraction
from .profile import (
    BasicInfo, WorkExperienceIn, EducationIn, SkillIn, ProjectIn,
    CertificateIn, AwardIn, VolunteeringIn, LanguageIn, CanonicalProfile,
    FileInfo, ExtractionSummary, ExtractionResponse,
    CreatedRecords, IngestionResult
)
from .resume import (
    ResumeUploadData, ResumeUpdate, ResumeDelete,
    ResumeResponse, ResumeListResponse, ResumeDeleteResponse
)
from .approval import (
    ApprovalStatusResponse, CandidateApprovalAction, BulkCandidateApprovalAction,
    BulkApprovalResponse, ApplicationEligibility
)

__all__ = [
    "RawExtraction",
    "BasicInfo", "WorkExperienceIn", "EducationIn", "SkillIn", "ProjectIn",
    "CertificateIn", "AwardIn", "VolunteeringIn", "LanguageIn", "CanonicalProfile",
    "FileInfo", "ExtractionSummary", "ExtractionResponse",
    "CreatedRecords", "IngestionResult",
    "ResumeUploadData", "ResumeUpdate", "ResumeDelete",
    "ResumeResponse", "ResumeListResponse", "ResumeDeleteResponse",
    "ApprovalStatusResponse", "CandidateApprovalAction", "BulkCandidateApprovalAction",
    "BulkApprovalResponse", "ApplicationEligibility",
]
