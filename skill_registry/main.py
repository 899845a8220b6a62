from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from skill_registry.api.v1.router import api_router
from skill_registry.core.config import settings
from skill_registry.core.logging import setup_logging
from skill_registry.db.schema import create_schema
from skill_registry.db.session import close_engine, engine
from skill_registry.services.alerting_service import alerting_service

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.DB_AUTO_CREATE_SCHEMA:
        try:
            await create_schema(engine)
            logger.info("schema ready", extra={"context": {"component": "db", "event": "create_schema"}})
        except Exception as exc:
            logger.exception("schema provisioning failed")
            alerting_service.emit(
                component="startup",
                severity="critical",
                message="Schema provisioning failed",
                details={"error": str(exc)},
            )
            raise
    else:
        logger.info("schema auto-create disabled", extra={"context": {"component": "db", "event": "disabled"}})

    logger.info("application started", extra={"context": {"component": "app", "event": "startup"}})
    yield
    try:
        await close_engine()
    except Exception as exc:
        logger.warning("engine dispose failed", extra={"context": {"error": str(exc)}})
    logger.info("application stopped", extra={"context": {"component": "app", "event": "shutdown"}})


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.include_router(api_router, prefix=settings.API_V1_PREFIX)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}
