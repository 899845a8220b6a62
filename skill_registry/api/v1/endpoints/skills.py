from fastapi import APIRouter, HTTPException, Query

from skill_registry.api.types import Store
from skill_registry.core.config import settings
from skill_registry.core.errors import InvalidRegistrationError, RegistrationError, SkillNotFoundError
from skill_registry.schemas.skills import CatalogEntry, SkillDetail, SkillIndexResponse, SkillRegistration, SkillSummary

router = APIRouter()


@router.post("", response_model=SkillDetail)
async def register_skill(payload: SkillRegistration, store: Store) -> SkillDetail:
    try:
        return await store.register(payload)
    except InvalidRegistrationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except RegistrationError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


@router.get("", response_model=list[SkillSummary])
async def list_skills(store: Store) -> list[SkillSummary]:
    return await store.list_skills()


@router.get("/index", response_model=SkillIndexResponse)
async def skills_index(store: Store) -> SkillIndexResponse:
    return SkillIndexResponse(index=await store.get_index())


@router.get("/search", response_model=list[SkillSummary])
async def search_skills(
    store: Store,
    q: str = Query(default="", max_length=256),
    limit: int = Query(default=settings.SEARCH_RESULT_LIMIT, ge=1, le=1000),
) -> list[SkillSummary]:
    return await store.search(q, limit=limit)


@router.get("/{name}", response_model=SkillDetail)
async def skill_detail(name: str, store: Store) -> SkillDetail:
    try:
        return await store.get_skill_detail(name)
    except SkillNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.get("/{name}/catalog", response_model=CatalogEntry)
async def skill_catalog_entry(name: str, store: Store) -> CatalogEntry:
    try:
        return await store.get_catalog_entry(name)
    except SkillNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
