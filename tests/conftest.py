"""
Shared fixtures: a throwaway SQLite database per test and local blob storage.
"""
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from profile_engine.database import Base
from profile_engine.errors import StorageFailed
from profile_engine.models import Candidate
from profile_engine.services.documents import PDF, UploadedDocument
from profile_engine.services.storage import LocalStorage


class FlakyStorage(LocalStorage):
    """Local storage whose uploads and/or deletes can be made to fail."""

    def __init__(self, *args, fail_put=False, fail_delete=False, **kwargs):
        super().__init__(*args, **kwargs)
        self.fail_put = fail_put
        self.fail_delete = fail_delete
        self.deleted = []

    async def put(self, key, content, content_type):
        if self.fail_put:
            raise StorageFailed("Supabase upload failed (503): unavailable")
        return await super().put(key, content, content_type)

    async def delete(self, key):
        self.deleted.append(key)
        if self.fail_delete:
            raise StorageFailed("Supabase delete failed (500)")
        await super().delete(key)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def store(tmp_path):
    return FlakyStorage(str(tmp_path / "blobs"), "http://testserver")


@pytest.fixture
def make_document():
    def _make(filename="resume.pdf", content_type=PDF, size=2048):
        content = b"%PDF-1.4\n" + b"0" * max(size - 9, 0)
        return UploadedDocument(filename=filename, content_type=content_type, content=content)
    return _make


@pytest.fixture
def seed_candidate(session_maker):
    async def _seed(candidate_id="cand-1", **overrides):
        values = {
            "user_id": candidate_id,
            "first_name": "Ada",
            "last_name": "Lovelace",
            "title": "Engineer",
            "location": "London",
            "phone1": "+44 20 0000 0000",
        }
        values.update(overrides)
        async with session_maker() as session:
            candidate = Candidate(**values)
            session.add(candidate)
            await session.commit()
        return candidate_id
    return _seed
