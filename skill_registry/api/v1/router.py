from fastapi import APIRouter

from skill_registry.api.v1.endpoints import catalog, categories, observability, schema, skills

api_router = APIRouter()
api_router.include_router(skills.router, prefix="/skills", tags=["skills"])
api_router.include_router(categories.router, prefix="/categories", tags=["categories"])
api_router.include_router(catalog.router, prefix="/catalog", tags=["catalog"])
api_router.include_router(schema.router, prefix="/schema", tags=["schema"])
api_router.include_router(observability.router, prefix="/observability", tags=["observability"])
