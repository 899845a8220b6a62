import asyncio

import pytest
from sqlalchemy.pool import NullPool

from skill_registry.db.schema import create_schema
from skill_registry.db.session import build_engine, build_session_factory
from skill_registry.services.skill_store import SkillStore


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'registry.db'}"


@pytest.fixture
def run_sessions(database_url):
    """Run ``scenario(session_factory)`` against a freshly provisioned database."""

    def _run(scenario):
        async def _main():
            engine = build_engine(database_url, poolclass=NullPool)
            try:
                await create_schema(engine)
                return await scenario(build_session_factory(engine))
            finally:
                await engine.dispose()

        return asyncio.run(_main())

    return _run


@pytest.fixture
def run_store(run_sessions):
    """Run ``scenario(store)`` with a store bound to one session."""

    def _run(scenario):
        async def _with_store(session_factory):
            async with session_factory() as session:
                return await scenario(SkillStore(session))

        return run_sessions(_with_store)

    return _run
