"""Tests for the schema description and provisioning."""

import asyncio

import pytest
from sqlalchemy.pool import NullPool

from skill_registry.db.schema import create_schema, schema_ddl, schema_statements, supported_dialects
from skill_registry.db.session import build_engine, build_session_factory
from skill_registry.schemas.skills import ParameterSpec, SkillRegistration
from skill_registry.services.skill_store import SkillStore


def test_sqlite_ddl_describes_tables_and_view():
    ddl = schema_ddl("sqlite")
    assert "CREATE TABLE categories" in ddl
    assert "CREATE TABLE skills" in ddl
    assert "CREATE TABLE parameters" in ddl
    assert "CREATE VIEW IF NOT EXISTS catalog" in ddl
    assert "json_group_array" in ddl
    assert ddl.index("CREATE TABLE categories") < ddl.index("CREATE TABLE skills") < ddl.index("CREATE TABLE parameters")


def test_postgresql_ddl_uses_json_agg():
    ddl = schema_ddl("postgresql")
    assert "CREATE OR REPLACE VIEW catalog" in ddl
    assert "json_agg" in ddl
    assert "UNIQUE (name)" in ddl


def test_unsupported_dialect():
    assert supported_dialects() == ["postgresql", "sqlite"]
    with pytest.raises(ValueError):
        schema_ddl("oracle")


def test_store_schema_description_matches_dialect(run_store):
    async def scenario(store):
        return store.dialect_name, store.get_schema_description()

    dialect, ddl = run_store(scenario)
    assert dialect == "sqlite"
    assert ddl == schema_ddl("sqlite")


def test_ddl_bootstraps_a_fresh_database(database_url):
    async def scenario():
        engine = build_engine(database_url, poolclass=NullPool)
        try:
            async with engine.begin() as conn:
                for statement in schema_statements("sqlite"):
                    await conn.exec_driver_sql(statement)
            async with build_session_factory(engine)() as session:
                store = SkillStore(session)
                await store.register(
                    SkillRegistration(
                        category="files",
                        name="read",
                        description="Read file content",
                        parameters=[ParameterSpec(name="path", description="File path", required=True)],
                    )
                )
                return await store.get_index(), await store.get_catalog_entry("read")
        finally:
            await engine.dispose()

    index, entry = asyncio.run(scenario())
    assert index == "files(read)"
    assert entry.parameters[0].r is True


def test_create_schema_is_idempotent(database_url):
    async def scenario():
        engine = build_engine(database_url, poolclass=NullPool)
        try:
            await create_schema(engine)
            await create_schema(engine)
            async with build_session_factory(engine)() as session:
                return await SkillStore(session).get_index()
        finally:
            await engine.dispose()

    assert asyncio.run(scenario()) == ""
