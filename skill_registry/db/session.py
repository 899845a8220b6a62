from collections.abc import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from skill_registry.core.config import settings


SQLITE_LOWER_FUNCTION = "unicode_lower"


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _configure_sqlite_connection(dbapi_connection, connection_record) -> None:
    del connection_record
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    # built-in lower() only folds ASCII
    dbapi_connection.create_function(SQLITE_LOWER_FUNCTION, 1, _unicode_lower)


def build_engine(database_url: str, *, echo: bool = False, **engine_options) -> AsyncEngine:
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        engine = create_async_engine(url, echo=echo, **engine_options)
        event.listen(engine.sync_engine, "connect", _configure_sqlite_connection)
        return engine

    return create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=max(1, int(settings.DB_POOL_SIZE)),
        max_overflow=max(0, int(settings.DB_MAX_OVERFLOW)),
        pool_timeout=max(1, int(settings.DB_POOL_TIMEOUT_SECONDS)),
        pool_recycle=max(30, int(settings.DB_POOL_RECYCLE_SECONDS)),
        **engine_options,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


engine = build_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)
AsyncSessionLocal = build_session_factory(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session


async def close_engine() -> None:
    await engine.dispose()
