"""
Test the resume lifecycle: upload, primary election and deletion
"""
import asyncio
import os

import pytest
from sqlalchemy import select

from profile_engine.errors import NotFound, ValidationFailed
from profile_engine.models import Candidate, Resume, ResumeSource
from profile_engine.services.documents import DOCX, JPEG
from profile_engine.services.resume_manager import (
    has_resume, list_resumes, remove_resume, save_cv_as_resume, set_primary_resume,
    update_resume, upload_resume
)


async def _state(session_maker, candidate_id):
    """Fresh read of the candidate's resume pointer and resumes."""
    async with session_maker() as session:
        candidate = await session.get(Candidate, candidate_id)
        resumes = await list_resumes(session, candidate_id)
        return candidate.resume_url, resumes


@pytest.mark.asyncio
async def test_first_upload_becomes_primary(db, store, seed_candidate, make_document, session_maker):
    """Test a non-primary first upload is still promoted"""
    candidate_id = await seed_candidate()

    resume = await upload_resume(db, store, candidate_id, make_document("a.pdf"), is_primary=False)

    resume_url, resumes = await _state(session_maker, candidate_id)
    assert resume.is_primary is True
    assert resume_url == resume.resume_url
    assert [r.id for r in resumes] == [resume.id]
    assert os.path.exists(store._path(resume.storage_path))


@pytest.mark.asyncio
async def test_primary_upload_demotes_previous(db, store, seed_candidate, make_document, session_maker):
    """Test uploading with is_primary moves the pointer to the new resume"""
    candidate_id = await seed_candidate()
    first = await upload_resume(db, store, candidate_id, make_document("a.pdf"))
    second = await upload_resume(db, store, candidate_id, make_document("b.docx", DOCX), is_primary=True)

    resume_url, resumes = await _state(session_maker, candidate_id)

    assert resume_url == second.resume_url
    assert [(r.id, r.is_primary) for r in resumes] == [(second.id, True), (first.id, False)]


@pytest.mark.asyncio
async def test_upload_policy(db, store, seed_candidate, make_document):
    """Test resume uploads only accept documents up to 10MB"""
    candidate_id = await seed_candidate()

    with pytest.raises(ValidationFailed):
        await upload_resume(db, store, candidate_id, make_document("photo.jpg", JPEG))
    with pytest.raises(ValidationFailed):
        await upload_resume(db, store, candidate_id, make_document(size=10 * 1024 * 1024 + 1))

    assert not os.path.exists(store.root_dir)


@pytest.mark.asyncio
async def test_upload_for_unknown_candidate(db, store, make_document):
    """Test nothing is stored for a candidate without a profile"""
    with pytest.raises(NotFound):
        await upload_resume(db, store, "ghost", make_document())

    assert not os.path.exists(store.root_dir)


@pytest.mark.asyncio
async def test_delete_primary_reelects_most_recent(db, store, seed_candidate, make_document, session_maker):
    """Test deleting the primary promotes the newest remaining resume"""
    candidate_id = await seed_candidate()
    oldest = await upload_resume(db, store, candidate_id, make_document("a.pdf"))
    newest = await upload_resume(db, store, candidate_id, make_document("b.pdf"))
    primary = await upload_resume(db, store, candidate_id, make_document("c.pdf"), is_primary=True)

    resume_url = await remove_resume(db, store, candidate_id, primary.id)

    stored_url, resumes = await _state(session_maker, candidate_id)
    assert resume_url == stored_url == newest.resume_url
    assert [(r.id, r.is_primary) for r in resumes] == [(newest.id, True), (oldest.id, False)]
    assert not os.path.exists(store._path(primary.storage_path))


@pytest.mark.asyncio
async def test_delete_last_resume_clears_pointer(db, store, seed_candidate, make_document, session_maker):
    """Test removing every resume leaves the candidate without a resume_url"""
    candidate_id = await seed_candidate()
    resume = await upload_resume(db, store, candidate_id, make_document())

    resume_url = await remove_resume(db, store, candidate_id, resume.id)

    stored_url, resumes = await _state(session_maker, candidate_id)
    assert resume_url is None
    assert stored_url is None
    assert resumes == []
    assert await has_resume(db, candidate_id) is False


@pytest.mark.asyncio
async def test_delete_survives_storage_failure(db, store, seed_candidate, make_document, session_maker):
    """Test a failing blob delete doesn't undo the record delete"""
    candidate_id = await seed_candidate()
    resume = await upload_resume(db, store, candidate_id, make_document())
    store.fail_delete = True

    await remove_resume(db, store, candidate_id, resume.id)

    _, resumes = await _state(session_maker, candidate_id)
    assert resumes == []
    assert store.deleted == [resume.storage_path]


@pytest.mark.asyncio
async def test_resumes_are_owner_scoped(db, store, seed_candidate, make_document):
    """Test another candidate's resume can't be touched"""
    owner = await seed_candidate("owner")
    other = await seed_candidate("other")
    resume = await upload_resume(db, store, owner, make_document())

    with pytest.raises(NotFound):
        await set_primary_resume(db, other, resume.id)
    with pytest.raises(NotFound):
        await remove_resume(db, store, other, resume.id)
    with pytest.raises(NotFound):
        await update_resume(db, owner, 9999, is_allow_fetch=True)


@pytest.mark.asyncio
async def test_set_primary_scenario(db, store, seed_candidate, make_document, session_maker):
    """Test switching the primary between two resumes and deleting the primary"""
    candidate_id = await seed_candidate()
    a = await upload_resume(db, store, candidate_id, make_document("a.pdf"), is_primary=True)
    b = await upload_resume(db, store, candidate_id, make_document("b.pdf"))

    await set_primary_resume(db, candidate_id, b.id)
    resume_url, resumes = await _state(session_maker, candidate_id)
    assert resume_url == b.resume_url
    assert {r.id: r.is_primary for r in resumes} == {a.id: False, b.id: True}

    await remove_resume(db, store, candidate_id, b.id)
    resume_url, resumes = await _state(session_maker, candidate_id)
    assert resume_url == a.resume_url
    assert [(r.id, r.is_primary) for r in resumes] == [(a.id, True)]


@pytest.mark.asyncio
async def test_update_flags(db, store, seed_candidate, make_document, session_maker):
    """Test fetch permission updates and demoting the primary"""
    candidate_id = await seed_candidate()
    a = await upload_resume(db, store, candidate_id, make_document("a.pdf"))
    b = await upload_resume(db, store, candidate_id, make_document("b.pdf"), is_primary=True)

    updated = await update_resume(db, candidate_id, b.id, is_primary=False, is_allow_fetch=True)

    resume_url, resumes = await _state(session_maker, candidate_id)
    assert updated.is_allow_fetch is True
    assert updated.is_primary is False
    assert resume_url == a.resume_url
    assert [r.id for r in resumes if r.is_primary] == [a.id]


@pytest.mark.asyncio
async def test_sole_resume_stays_primary(db, store, seed_candidate, make_document, session_maker):
    """Test the only resume can't be demoted"""
    candidate_id = await seed_candidate()
    only = await upload_resume(db, store, candidate_id, make_document())

    updated = await update_resume(db, candidate_id, only.id, is_primary=False)

    resume_url, _ = await _state(session_maker, candidate_id)
    assert updated.is_primary is True
    assert resume_url == only.resume_url


@pytest.mark.asyncio
async def test_concurrent_primary_uploads(store, seed_candidate, make_document, session_maker):
    """Test simultaneous primary uploads leave exactly one primary"""
    candidate_id = await seed_candidate()

    async def upload(name):
        async with session_maker() as session:
            return await upload_resume(session, store, candidate_id, make_document(name), is_primary=True)

    await asyncio.gather(upload("a.pdf"), upload("b.pdf"), upload("c.pdf"))

    resume_url, resumes = await _state(session_maker, candidate_id)
    primaries = [r for r in resumes if r.is_primary]
    assert len(resumes) == 3
    assert len(primaries) == 1
    assert resume_url == primaries[0].resume_url


@pytest.mark.asyncio
async def test_list_orders_primary_first(db, store, seed_candidate, make_document):
    """Test listing puts the primary first and the rest newest first"""
    candidate_id = await seed_candidate()
    first = await upload_resume(db, store, candidate_id, make_document("a.pdf"))
    second = await upload_resume(db, store, candidate_id, make_document("b.pdf"))
    third = await upload_resume(db, store, candidate_id, make_document("c.pdf"))

    resumes = await list_resumes(db, candidate_id)

    assert [r.id for r in resumes] == [first.id, third.id, second.id]
    assert await has_resume(db, candidate_id) is True

    rows = (await db.execute(select(Resume).where(Resume.is_primary.is_(True)))).scalars().all()
    assert [r.id for r in rows] == [first.id]


@pytest.mark.asyncio
async def test_save_cv_as_resume(db, store, seed_candidate, make_document, session_maker):
    """Test an extracted CV is kept as a fetchable primary resume under the CV policy"""
    candidate_id = await seed_candidate()
    await upload_resume(db, store, candidate_id, make_document("old.pdf"))

    resume, error = await save_cv_as_resume(
        db, store, candidate_id, make_document("scan.jpg", JPEG), set_as_primary=True
    )

    assert error is None
    assert resume.is_primary is True
    assert resume.is_allow_fetch is True
    assert resume.upload_source == ResumeSource.CV_EXTRACTION
    resume_url, resumes = await _state(session_maker, candidate_id)
    assert resume_url == resume.resume_url
    assert [r.is_primary for r in resumes] == [True, False]


@pytest.mark.asyncio
async def test_save_cv_as_resume_failure_is_reported(db, store, seed_candidate, make_document):
    """Test storage failures and missing profiles come back as an error message"""
    candidate_id = await seed_candidate()
    store.fail_put = True

    resume, error = await save_cv_as_resume(db, store, candidate_id, make_document())

    assert resume is None
    assert "upload failed" in error
    assert await has_resume(db, candidate_id) is False

    store.fail_put = False
    resume, error = await save_cv_as_resume(db, store, "ghost", make_document())

    assert resume is None
    assert error == "Candidate profile not found"
