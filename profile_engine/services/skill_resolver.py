"""
Skill catalog resolution.

Skills are shared across candidates and keyed by their lowercased name, so
"React" and "react" resolve to the same row. Creation is an insert that
tolerates a concurrent insert of the same name, followed by a re-read.
"""
import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import InternalError
from ..models import Skill, CandidateSkill, SKILL_NAME_MAX_LENGTH

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "sqlite": sqlite_insert,
    "postgresql": pg_insert,
}


def normalize_skill_name(name: str) -> str:
    """Catalog key for a skill name, clipped to the catalog column size."""
    return (name or "").strip().lower()[:SKILL_NAME_MAX_LENGTH].rstrip()


class SkillResolver:
    """Resolves skill names to catalog ids, caching results for one ingestion run."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self._cache: Dict[str, int] = {}

    async def resolve(
        self,
        name: str,
        category: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Optional[int]:
        key = normalize_skill_name(name)
        if not key:
            return None
        if key in self._cache:
            return self._cache[key]

        skill_id = await self._find(key)
        if skill_id is None:
            skill_id = await self._create(key, name.strip(), category, description)

        self._cache[key] = skill_id
        return skill_id

    async def resolve_many(self, names: Iterable[str]) -> List[int]:
        """Resolve names to distinct ids, keeping first-seen order."""
        ids: List[int] = []
        for name in names:
            skill_id = await self.resolve(name)
            if skill_id is not None and skill_id not in ids:
                ids.append(skill_id)
        return ids

    async def _find(self, key: str) -> Optional[int]:
        result = await self.db.execute(select(Skill.id).where(Skill.name == key))
        return result.scalar_one_or_none()

    async def _create(
        self,
        key: str,
        display_name: str,
        category: Optional[str],
        description: Optional[str],
    ) -> int:
        values = {
            "name": key,
            "display_name": display_name[:SKILL_NAME_MAX_LENGTH],
            "category": category[:100] if category else None,
            "description": description,
            "is_active": True,
        }
        dialect = self.db.get_bind().dialect.name
        insert = _UPSERT_DIALECTS.get(dialect)

        if insert is not None:
            stmt = insert(Skill).values(**values).on_conflict_do_nothing(index_elements=["name"])
            await self.db.execute(stmt)
        else:
            try:
                async with self.db.begin_nested():
                    self.db.add(Skill(**values))
            except IntegrityError:
                logger.info(f"Skill '{key}' was created concurrently, reusing it")

        skill_id = await self._find(key)
        if skill_id is None:
            raise InternalError(f"Skill '{key}' could not be created")
        return skill_id


async def link_candidate_skill(
    db: AsyncSession,
    candidate_id: str,
    skill_id: int,
    skill_source: str,
    source_type: str,
    proficiency: Optional[int] = None,
    years_of_experience: Optional[float] = None,
    source_title: Optional[str] = None,
) -> bool:
    """Link a skill to a candidate once. Returns False if the link already existed."""
    result = await db.execute(
        select(CandidateSkill.id).where(
            CandidateSkill.candidate_id == candidate_id,
            CandidateSkill.skill_id == skill_id,
        )
    )
    if result.scalar_one_or_none() is not None:
        return False

    db.add(CandidateSkill(
        candidate_id=candidate_id,
        skill_id=skill_id,
        proficiency=proficiency if proficiency is not None else 50,
        years_of_experience=years_of_experience or 0,
        skill_source=skill_source,
        source_type=source_type,
        source_title=source_title,
    ))
    await db.flush()
    return True
