from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from skill_registry.db.session import get_db
from skill_registry.services.skill_store import SkillStore


async def get_skill_store(db: AsyncSession = Depends(get_db)) -> SkillStore:
    return SkillStore(db)
