from fastapi import APIRouter, Query

from skill_registry.api.types import Store
from skill_registry.core.config import settings
from skill_registry.schemas.skills import CatalogEntry

router = APIRouter()


@router.get("", response_model=list[CatalogEntry])
async def search_catalog(
    store: Store,
    q: str = Query(default="", max_length=256),
    limit: int = Query(default=settings.SEARCH_RESULT_LIMIT, ge=1, le=1000),
) -> list[CatalogEntry]:
    return await store.search_catalog(q, limit=limit)
