"""
Resume lifecycle: upload, list, primary election, update and delete.

A candidate has at most one primary resume, and Candidate.resume_url always
mirrors the primary's URL (None exactly when the candidate has no resumes).
Every mutation runs under candidate_guard so concurrent requests for the
same candidate can't leave two primaries behind.
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import InternalError, NotFound, ProfileEngineError, StorageFailed
from ..models import Candidate, Resume, ResumeSource
from .documents import DocumentPolicy, UploadedDocument, cv_extraction_policy, resume_upload_policy, validate_document
from .guards import candidate_guard
from .storage import BlobStore, build_resume_key

logger = logging.getLogger(__name__)


# ============================================================================
# Helpers (run inside an open transaction)
# ============================================================================

async def _get_owned_resume(db: AsyncSession, candidate_id: str, resume_id: int) -> Resume:
    result = await db.execute(
        select(Resume).where(Resume.id == resume_id, Resume.candidate_id == candidate_id)
    )
    resume = result.scalar_one_or_none()
    if resume is None:
        raise NotFound("Resume not found", details={"resume_id": resume_id})
    return resume


async def _current_primary(db: AsyncSession, candidate_id: str) -> Optional[Resume]:
    result = await db.execute(
        select(Resume).where(Resume.candidate_id == candidate_id, Resume.is_primary.is_(True))
    )
    return result.scalars().first()


async def _most_recent(db: AsyncSession, candidate_id: str, exclude_id: Optional[int] = None) -> Optional[Resume]:
    query = select(Resume).where(Resume.candidate_id == candidate_id)
    if exclude_id is not None:
        query = query.where(Resume.id != exclude_id)
    result = await db.execute(query.order_by(Resume.uploaded_at.desc(), Resume.id.desc()).limit(1))
    return result.scalar_one_or_none()


async def make_primary(db: AsyncSession, candidate: Candidate, resume: Resume) -> None:
    """Promote resume, demote every other resume and repoint the candidate."""
    await db.execute(
        update(Resume)
        .where(Resume.candidate_id == candidate.user_id, Resume.id != resume.id)
        .values(is_primary=False)
    )
    resume.is_primary = True
    candidate.resume_url = resume.resume_url


async def add_resume_record(
    db: AsyncSession,
    candidate: Candidate,
    storage_path: str,
    resume_url: str,
    document: UploadedDocument,
    is_primary: bool = False,
    is_allow_fetch: bool = False,
    upload_source: str = ResumeSource.RESUME_UPLOAD,
) -> Resume:
    """
    Insert a resume row for an already stored blob. The first resume of a
    candidate always becomes primary.
    """
    has_primary = await _current_primary(db, candidate.user_id) is not None

    resume = Resume(
        candidate_id=candidate.user_id,
        resume_url=resume_url,
        storage_path=storage_path,
        original_filename=document.filename[:255],
        file_size=document.size,
        file_type=document.content_type,
        upload_source=upload_source,
        is_primary=False,
        is_allow_fetch=is_allow_fetch,
    )
    db.add(resume)
    await db.flush()

    if is_primary or not has_primary:
        await make_primary(db, candidate, resume)
    return resume


async def discard_blob(store: BlobStore, key: str) -> None:
    """Best-effort blob removal; failures leave an orphan and are only logged."""
    try:
        await store.delete(key)
    except StorageFailed as e:
        logger.warning(f"Could not delete stored file {key}: {e.message}")


# ============================================================================
# Operations
# ============================================================================

async def upload_resume(
    db: AsyncSession,
    store: BlobStore,
    candidate_id: str,
    document: UploadedDocument,
    is_primary: bool = False,
    is_allow_fetch: bool = False,
    upload_source: str = ResumeSource.RESUME_UPLOAD,
    policy: Optional[DocumentPolicy] = None,
) -> Resume:
    validate_document(document, policy or resume_upload_policy())

    if await db.get(Candidate, candidate_id) is None:
        raise NotFound("Candidate profile not found", details={"candidate_id": candidate_id})

    key = build_resume_key(candidate_id, document.filename)
    resume_url = await store.put(key, document.content, document.content_type)

    try:
        async with candidate_guard(db, candidate_id) as candidate:
            if candidate is None:
                raise NotFound("Candidate profile not found", details={"candidate_id": candidate_id})
            resume = await add_resume_record(
                db, candidate, key, resume_url, document,
                is_primary=is_primary,
                is_allow_fetch=is_allow_fetch,
                upload_source=upload_source,
            )
            await db.commit()
    except Exception as e:
        await db.rollback()
        await discard_blob(store, key)
        if isinstance(e, ProfileEngineError):
            raise
        logger.exception(f"Resume upload failed for {candidate_id}")
        raise InternalError("Failed to save resume") from e

    logger.info(f"✅ Resume {resume.id} uploaded for candidate {candidate_id} (primary={resume.is_primary})")
    return resume


async def save_cv_as_resume(
    db: AsyncSession,
    store: BlobStore,
    candidate_id: str,
    document: UploadedDocument,
    set_as_primary: bool = False,
) -> Tuple[Optional[Resume], Optional[str]]:
    """
    Keep a CV that was just extracted as a fetchable resume.

    Returns (resume, None) on success and (None, message) when the resume
    could not be saved; the extraction itself is never failed by this.
    """
    try:
        resume = await upload_resume(
            db, store, candidate_id, document,
            is_primary=set_as_primary,
            is_allow_fetch=True,
            upload_source=ResumeSource.CV_EXTRACTION,
            policy=cv_extraction_policy(),
        )
    except (NotFound, StorageFailed, InternalError) as e:
        logger.warning(f"CV for {candidate_id} not saved as resume, returning extraction only: {e.message}")
        return None, e.message
    return resume, None


async def list_resumes(db: AsyncSession, candidate_id: str) -> List[Resume]:
    """Primary first, then newest first."""
    result = await db.execute(
        select(Resume)
        .where(Resume.candidate_id == candidate_id)
        .order_by(Resume.is_primary.desc(), Resume.uploaded_at.desc(), Resume.id.desc())
    )
    return list(result.scalars().all())


async def has_resume(db: AsyncSession, candidate_id: str) -> bool:
    result = await db.execute(
        select(func.count(Resume.id)).where(Resume.candidate_id == candidate_id)
    )
    return (result.scalar() or 0) > 0


async def update_resume(
    db: AsyncSession,
    candidate_id: str,
    resume_id: int,
    is_primary: Optional[bool] = None,
    is_allow_fetch: Optional[bool] = None,
) -> Resume:
    async with candidate_guard(db, candidate_id) as candidate:
        if candidate is None:
            raise NotFound("Candidate profile not found", details={"candidate_id": candidate_id})
        resume = await _get_owned_resume(db, candidate_id, resume_id)

        if is_allow_fetch is not None:
            resume.is_allow_fetch = is_allow_fetch

        if is_primary is True and not resume.is_primary:
            await make_primary(db, candidate, resume)
        elif is_primary is False and resume.is_primary:
            successor = await _most_recent(db, candidate_id, exclude_id=resume.id)
            if successor is not None:
                await make_primary(db, candidate, successor)
            else:
                logger.info(f"Resume {resume_id} is the only resume of {candidate_id}; it stays primary")

        await db.commit()

    return resume


async def set_primary_resume(db: AsyncSession, candidate_id: str, resume_id: int) -> Resume:
    return await update_resume(db, candidate_id, resume_id, is_primary=True)


async def remove_resume(db: AsyncSession, store: BlobStore, candidate_id: str, resume_id: int) -> Optional[str]:
    """
    Delete a resume, re-electing the most recent remaining one as primary if
    needed. Returns the candidate's resume_url afterwards. The stored file is
    removed after the commit and a failure there doesn't undo the delete.
    """
    async with candidate_guard(db, candidate_id) as candidate:
        if candidate is None:
            raise NotFound("Candidate profile not found", details={"candidate_id": candidate_id})
        resume = await _get_owned_resume(db, candidate_id, resume_id)
        storage_path = resume.storage_path
        was_primary = resume.is_primary

        await db.delete(resume)
        await db.flush()

        if was_primary or await _current_primary(db, candidate_id) is None:
            successor = await _most_recent(db, candidate_id)
            if successor is not None:
                await make_primary(db, candidate, successor)
            else:
                candidate.resume_url = None

        await db.commit()
        resume_url = candidate.resume_url

    await discard_blob(store, storage_path)
    logger.info(f"Resume {resume_id} deleted for candidate {candidate_id}")
    return resume_url
