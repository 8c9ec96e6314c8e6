"""
Profile ingestion: persist a reviewed CanonicalProfile as a new candidate.

The candidate row, every section row, skill links and the attached resume
record are written in a single transaction. Storing the resume file happens
first and outside of it; if the transaction fails the stored file is removed.
"""
import json
import logging
from typing import List, Optional, Tuple

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_settings
from ..errors import AlreadyExists, InternalError, ProfileEngineError, StorageFailed, ValidationFailed
from ..models import (
    Candidate, ResumeSource, SkillSource,
    WorkExperience, Education, Project, Certificate, Award, Volunteering, CandidateLanguage
)
from ..schemas.profile import CanonicalProfile, CreatedRecords, IngestionResult
from .documents import UploadedDocument, cv_extraction_policy, validate_document
from .guards import candidate_guard
from .resume_manager import add_resume_record, discard_blob
from .skill_resolver import SkillResolver, link_candidate_skill
from .storage import BlobStore, build_resume_key

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("first_name", "last_name", "title", "phone1", "location")

OPTIONAL_SECTIONS = (
    "work_experiences", "educations", "skills", "projects",
    "certificates", "awards", "volunteering", "languages",
)

COMPLETION_FULL_FORM = "full_form"
COMPLETION_SECTIONS = "sections"


def parse_profile_payload(raw: str) -> CanonicalProfile:
    """Parse the JSON profile submitted with the create-profile form."""
    try:
        data = json.loads(raw)
    except (TypeError, json.JSONDecodeError):
        raise ValidationFailed("profileData must be a valid JSON object", details=[{"field": "profileData", "message": "Invalid JSON"}])

    try:
        return CanonicalProfile.model_validate(data)
    except ValidationError as e:
        details = [
            {"field": ".".join(str(part) for part in err["loc"]) or "profileData", "message": err["msg"]}
            for err in e.errors()
        ]
        raise ValidationFailed("Invalid profile data", details=details)


def missing_required_fields(profile: CanonicalProfile) -> List[str]:
    info = profile.basic_info
    return [field for field in REQUIRED_FIELDS if not (getattr(info, field) or "").strip()]


def check_required_fields(profile: CanonicalProfile) -> None:
    missing = missing_required_fields(profile)
    if missing:
        raise ValidationFailed(
            "Missing required fields",
            details=[{"field": f"basic_info.{field}", "message": f"{field} is required"} for field in missing],
        )


def compute_completion(profile: CanonicalProfile, policy: str) -> Tuple[int, bool]:
    """Profile completion percentage and whether the profile counts as complete."""
    if policy == COMPLETION_SECTIONS:
        filled = sum(1 for section in OPTIONAL_SECTIONS if getattr(profile, section))
        percentage = round(100 * filled / len(OPTIONAL_SECTIONS))
        return percentage, percentage >= 100
    # Submitting the full form completes the profile
    return 100, True


async def _resolve_skills(resolver: SkillResolver, profile: CanonicalProfile) -> None:
    """Resolve every referenced skill name up front; section writes then hit the resolver cache."""
    for skill in profile.skills:
        await resolver.resolve(skill.name, skill.category, skill.description)
    await resolver.resolve_many(profile.referenced_skill_names())


async def _add_sections(
    db: AsyncSession,
    resolver: SkillResolver,
    candidate_id: str,
    profile: CanonicalProfile,
) -> CreatedRecords:
    counts = CreatedRecords()

    for skill in profile.skills:
        skill_id = await resolver.resolve(skill.name, skill.category, skill.description)
        if skill_id is None:
            continue
        linked = await link_candidate_skill(
            db, candidate_id, skill_id,
            skill_source=SkillSource.PROFILE_CREATION,
            source_type=SkillSource.PROFILE_CREATION,
            proficiency=skill.proficiency,
            years_of_experience=skill.years_of_experience,
        )
        if linked:
            counts.skills += 1

    for exp in profile.work_experiences:
        db.add(WorkExperience(
            candidate_id=candidate_id,
            skill_ids=await resolver.resolve_many(exp.skills),
            **exp.model_dump(exclude={"skills", "end_date"}),
            end_date=None if exp.is_current else exp.end_date,
        ))
        counts.work_experiences += 1

    for edu in profile.educations:
        db.add(Education(
            candidate_id=candidate_id,
            skill_ids=await resolver.resolve_many(edu.skills),
            **edu.model_dump(exclude={"skills"}),
        ))
        counts.educations += 1

    for proj in profile.projects:
        db.add(Project(
            candidate_id=candidate_id,
            skill_ids=await resolver.resolve_many(proj.skills_gained),
            **proj.model_dump(),
        ))
        counts.projects += 1

    for cert in profile.certificates:
        db.add(Certificate(
            candidate_id=candidate_id,
            skill_ids=await resolver.resolve_many(cert.skills),
            **cert.model_dump(exclude={"skills"}),
        ))
        counts.certificates += 1

    for award in profile.awards:
        db.add(Award(
            candidate_id=candidate_id,
            skill_ids=await resolver.resolve_many(award.skills),
            **award.model_dump(exclude={"skills"}),
        ))
        counts.awards += 1

    for vol in profile.volunteering:
        db.add(Volunteering(
            candidate_id=candidate_id,
            skill_ids=await resolver.resolve_many(vol.skills),
            **vol.model_dump(exclude={"skills", "end_date"}),
            end_date=None if vol.is_current else vol.end_date,
        ))
        counts.volunteering += 1

    for lang in profile.languages:
        db.add(CandidateLanguage(candidate_id=candidate_id, **lang.model_dump()))
        counts.languages += 1

    await db.flush()
    return counts


async def create_profile(
    db: AsyncSession,
    candidate_id: str,
    profile: CanonicalProfile,
    resume: Optional[UploadedDocument] = None,
    store: Optional[BlobStore] = None,
) -> IngestionResult:
    """
    Create the candidate's profile from a reviewed extraction.

    A resume that can't be stored doesn't fail the profile: the result carries
    resume_error instead. Any other failure leaves nothing behind.
    """
    check_required_fields(profile)

    if await db.get(Candidate, candidate_id) is not None:
        raise AlreadyExists("Profile already exists", details={"candidate_id": candidate_id})

    storage_key: Optional[str] = None
    resume_url: Optional[str] = None
    resume_error: Optional[str] = None
    if resume is not None and store is not None:
        try:
            validate_document(resume, cv_extraction_policy())
            storage_key = build_resume_key(candidate_id, resume.filename)
            resume_url = await store.put(storage_key, resume.content, resume.content_type)
        except (ValidationFailed, StorageFailed) as e:
            logger.warning(f"Resume for {candidate_id} not stored, continuing without it: {e.message}")
            storage_key = None
            resume_error = e.message

    settings = get_settings()
    percentage, completed = compute_completion(profile, settings.profile_completion_policy)

    try:
        async with candidate_guard(db, candidate_id) as existing:
            if existing is not None:
                raise AlreadyExists("Profile already exists", details={"candidate_id": candidate_id})

            resolver = SkillResolver(db)
            await _resolve_skills(resolver, profile)

            candidate = Candidate(
                user_id=candidate_id,
                profile_completion_percentage=percentage,
                completed_profile=completed,
                **profile.basic_info.model_dump(),
            )
            db.add(candidate)
            await db.flush()

            counts = await _add_sections(db, resolver, candidate_id, profile)

            resume_id = None
            if storage_key is not None:
                resume_row = await add_resume_record(
                    db, candidate, storage_key, resume_url, resume,
                    is_primary=True,
                    upload_source=ResumeSource.CV_EXTRACTION,
                )
                resume_id = resume_row.id
                counts.resume = 1

            await db.commit()
    except Exception as e:
        await db.rollback()
        if storage_key is not None:
            await discard_blob(store, storage_key)
        if isinstance(e, ProfileEngineError):
            raise
        if isinstance(e, IntegrityError) and await db.get(Candidate, candidate_id) is not None:
            raise AlreadyExists("Profile already exists", details={"candidate_id": candidate_id})
        logger.exception(f"Profile creation failed for {candidate_id}")
        raise InternalError("Failed to create profile") from e

    logger.info(
        f"✅ Profile created for {candidate_id}: {counts.work_experiences} exp, "
        f"{counts.educations} edu, {counts.skills} skills, resume={counts.resume}"
    )

    return IngestionResult(
        candidate_id=candidate_id,
        profile_completion_percentage=percentage,
        completed_profile=completed,
        created_records=counts,
        resume_id=resume_id,
        resume_url=candidate.resume_url,
        resume_error=resume_error,
    )
