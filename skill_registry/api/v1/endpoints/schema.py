from fastapi import APIRouter

from skill_registry.api.types import Store
from skill_registry.schemas.skills import SchemaDescriptionResponse

router = APIRouter()


@router.get("", response_model=SchemaDescriptionResponse)
async def schema_description(store: Store) -> SchemaDescriptionResponse:
    return SchemaDescriptionResponse(dialect=store.dialect_name, ddl=store.get_schema_description())
