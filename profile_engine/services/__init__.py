from .documents import (
    UploadedDocument,
    DocumentPolicy,
    cv_extraction_policy,
    resume_upload_policy,
    validate_document,
    read_upload
)
from .normalizer import normalize, parse_date
from .cv_extractor import (
    CVExtractor,
    get_cv_extractor,
    extract_profile,
    calculate_years_of_experience
)
from .storage import (
    BlobStore,
    SupabaseStorage,
    LocalStorage,
    build_resume_key,
    get_blob_store
)
from .skill_resolver import SkillResolver, normalize_skill_name, link_candidate_skill
from .resume_manager import (
    upload_resume,
    list_resumes,
    has_resume,
    update_resume,
    set_primary_resume,
    remove_resume
)
from .ingestion import create_profile, parse_profile_payload
from .approval import (
    get_approval_status,
    set_approval_status,
    bulk_set_approval_status,
    check_application_eligibility
)
from .identity import CurrentUser, get_current_user, get_current_candidate, get_current_staff

__all__ = [
    # Documents
    "UploadedDocument",
    "DocumentPolicy",
    "cv_extraction_policy",
    "resume_upload_policy",
    "validate_document",
    "read_upload",
    # Extraction
    "normalize",
    "parse_date",
    "CVExtractor",
    "get_cv_extractor",
    "extract_profile",
    "calculate_years_of_experience",
    # Storage
    "BlobStore",
    "SupabaseStorage",
    "LocalStorage",
    "build_resume_key",
    "get_blob_store",
    # Skills
    "SkillResolver",
    "normalize_skill_name",
    "link_candidate_skill",
    # Resumes
    "upload_resume",
    "list_resumes",
    "has_resume",
    "update_resume",
    "set_primary_resume",
    "remove_resume",
    # Ingestion
    "create_profile",
    "parse_profile_payload",
    # Approval
    "get_approval_status",
    "set_approval_status",
    "bulk_set_approval_status",
    "check_application_eligibility",
    # Identity
    "CurrentUser",
    "get_current_user",
    "get_current_candidate",
    "get_current_staff"
]
