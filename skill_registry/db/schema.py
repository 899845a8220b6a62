"""Schema provisioning and the DDL text handed to callers that bootstrap their own store.

The ``catalog`` view is not a mapped table: it is attached to the metadata
``after_create`` event so ``create_all`` provisions it together with the
tables, and it is queried through the lightweight ``catalog_view`` table below.
"""

from __future__ import annotations

from sqlalchemy import DDL, Column, Integer, MetaData, Table, Text, event
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.schema import CreateIndex, CreateTable

from skill_registry.db.base import Base
import skill_registry.models  # noqa: F401

CATALOG_VIEW_NAME = "catalog"

SQLITE_CATALOG_VIEW = """
CREATE VIEW IF NOT EXISTS catalog AS
SELECT
    s.id AS skill_id,
    c.name AS category_name,
    s.name AS skill_name,
    s.description AS description,
    (
        SELECT json_group_array(
            json_object(
                'n', p.name,
                't', p.type,
                'd', p.description,
                'r', json(CASE WHEN p.required THEN 'true' ELSE 'false' END)
            )
        )
        FROM parameters p
        WHERE p.skill_id = s.id
    ) AS parameters_json
FROM skills s
JOIN categories c ON s.category_id = c.id
"""

POSTGRES_CATALOG_VIEW = """
CREATE OR REPLACE VIEW catalog AS
SELECT
    s.id AS skill_id,
    c.name AS category_name,
    s.name AS skill_name,
    s.description AS description,
    COALESCE(
        (
            SELECT json_agg(
                json_build_object('n', p.name, 't', p.type, 'd', p.description, 'r', p.required)
                ORDER BY p.name
            )
            FROM parameters p
            WHERE p.skill_id = s.id
        ),
        CAST('[]' AS json)
    ) AS parameters_json
FROM skills s
JOIN categories c ON s.category_id = c.id
"""

DROP_CATALOG_VIEW = "DROP VIEW IF EXISTS catalog"

CATALOG_VIEW_DDL = {
    "sqlite": SQLITE_CATALOG_VIEW,
    "postgresql": POSTGRES_CATALOG_VIEW,
}

_DIALECTS = {
    "sqlite": sqlite.dialect,
    "postgresql": postgresql.dialect,
}

event.listen(Base.metadata, "after_create", DDL(SQLITE_CATALOG_VIEW).execute_if(dialect="sqlite"))
event.listen(Base.metadata, "after_create", DDL(POSTGRES_CATALOG_VIEW).execute_if(dialect="postgresql"))
event.listen(Base.metadata, "before_drop", DDL(DROP_CATALOG_VIEW))

# Read-only handle on the view, kept out of Base.metadata so create_all never makes it a table.
catalog_view = Table(
    CATALOG_VIEW_NAME,
    MetaData(),
    Column("skill_id", Integer),
    Column("category_name", Text),
    Column("skill_name", Text),
    Column("description", Text),
    Column("parameters_json", Text),
)


def supported_dialects() -> list[str]:
    return sorted(_DIALECTS)


def schema_statements(dialect_name: str = "sqlite") -> list[str]:
    if dialect_name not in _DIALECTS:
        raise ValueError(f"Unsupported dialect: {dialect_name}. Expected one of: {', '.join(supported_dialects())}")

    dialect = _DIALECTS[dialect_name]()
    statements: list[str] = []
    for table in Base.metadata.sorted_tables:
        statements.append(str(CreateTable(table).compile(dialect=dialect)).strip())
        for index in sorted(table.indexes, key=lambda item: str(item.name)):
            statements.append(str(CreateIndex(index).compile(dialect=dialect)).strip())
    statements.append(CATALOG_VIEW_DDL[dialect_name].strip())
    return statements


def schema_ddl(dialect_name: str = "sqlite") -> str:
    return ";\n\n".join(schema_statements(dialect_name)) + ";\n"


async def create_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
