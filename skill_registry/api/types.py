from typing import Annotated

from fastapi import Depends

from skill_registry.api.deps import get_skill_store
from skill_registry.services.skill_store import SkillStore

Store = Annotated[SkillStore, Depends(get_skill_store)]
