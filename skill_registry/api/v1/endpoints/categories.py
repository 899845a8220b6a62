from fastapi import APIRouter, HTTPException

from skill_registry.api.types import Store
from skill_registry.core.errors import RegistrationError
from skill_registry.schemas.skills import CategoryCreate, CategoryOut

router = APIRouter()


@router.get("", response_model=list[CategoryOut])
async def list_categories(store: Store) -> list[CategoryOut]:
    return await store.list_categories()


@router.post("", response_model=CategoryOut)
async def ensure_category(payload: CategoryCreate, store: Store) -> CategoryOut:
    try:
        return await store.ensure_category(payload.name, payload.description)
    except RegistrationError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
