"""
Per-candidate serialization of profile and resume mutations.

An in-process lock orders writers inside one worker and SELECT ... FOR UPDATE
on the candidate row orders them across workers (a no-op on SQLite, where
writers are already serialized).
"""
import asyncio
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Candidate

_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()


def _lock_for(candidate_id: str) -> asyncio.Lock:
    lock = _locks.get(candidate_id)
    if lock is None:
        lock = asyncio.Lock()
        _locks[candidate_id] = lock
    return lock


@asynccontextmanager
async def candidate_guard(db: AsyncSession, candidate_id: str) -> AsyncIterator[Optional[Candidate]]:
    """
    Hold the candidate's write lock and yield its freshly loaded row
    (None if it doesn't exist yet). Callers commit before leaving the block.
    """
    lock = _lock_for(candidate_id)
    async with lock:
        result = await db.execute(
            select(Candidate)
            .where(Candidate.user_id == candidate_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        yield result.scalar_one_or_none()
