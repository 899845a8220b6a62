"""Tests for the JSON catalog projection."""

import json

import pytest
from sqlalchemy import select

from skill_registry.core.errors import SkillNotFoundError
from skill_registry.db.schema import catalog_view
from skill_registry.schemas.skills import CatalogParameter, ParameterSpec, SkillRegistration
from skill_registry.services.skill_store import SkillStore

COMPLEX_TOOL = SkillRegistration(
    category="search_test",
    name="complex_tool",
    description="A tool with params",
    parameters=[
        ParameterSpec(name="arg2", type="int", description="Argument 2", required=False),
        ParameterSpec(name="arg1", type="string", description="Argument 1", required=True),
    ],
)


def test_catalog_entry_uses_abbreviated_keys(run_store):
    async def scenario(store):
        await store.register(COMPLEX_TOOL)
        return await store.get_catalog_entry("complex_tool")

    entry = run_store(scenario)
    assert entry.category == "search_test"
    assert entry.name == "complex_tool"
    assert entry.description == "A tool with params"
    assert entry.parameters == (
        CatalogParameter(n="arg1", t="string", d="Argument 1", r=True),
        CatalogParameter(n="arg2", t="int", d="Argument 2", r=False),
    )


def test_catalog_view_emits_json_booleans(run_sessions):
    async def scenario(session_factory):
        async with session_factory() as session:
            await SkillStore(session).register(COMPLEX_TOOL)
        async with session_factory() as session:
            result = await session.execute(
                select(catalog_view.c.parameters_json).where(catalog_view.c.skill_name == "complex_tool")
            )
            return result.scalar_one()

    raw = run_sessions(scenario)
    items = json.loads(raw)
    assert {item["n"]: item["r"] for item in items} == {"arg1": True, "arg2": False}
    assert all(set(item) == {"n", "t", "d", "r"} for item in items)


def test_catalog_entry_without_parameters_is_empty(run_store):
    async def scenario(store):
        await store.register(SkillRegistration(category="noparam", name="simple", description="Simple skill"))
        return await store.get_catalog_entry("simple")

    assert run_store(scenario).parameters == ()


def test_catalog_reflects_latest_registration(run_store):
    async def scenario(store):
        await store.register(COMPLEX_TOOL)
        await store.register(
            SkillRegistration(
                category="search_test",
                name="complex_tool",
                description="Rewritten",
                parameters=[ParameterSpec(name="only", type="bool", description="Single flag", required=True)],
            )
        )
        return await store.get_catalog_entry("complex_tool")

    entry = run_store(scenario)
    assert entry.description == "Rewritten"
    assert entry.parameters == (CatalogParameter(n="only", t="bool", d="Single flag", r=True),)


def test_catalog_entry_for_unknown_skill(run_store):
    async def scenario(store):
        with pytest.raises(SkillNotFoundError) as excinfo:
            await store.get_catalog_entry("ghost")
        return excinfo.value

    assert run_store(scenario).name == "ghost"


def test_search_catalog(run_store):
    async def scenario(store):
        await store.register(COMPLEX_TOOL)
        await store.register(SkillRegistration(category="noparam", name="simple", description="Simple skill"))
        return await store.search_catalog("COMPLEX"), await store.search_catalog(), await store.search_catalog("zzz")

    matched, everything, nothing = run_store(scenario)
    assert [entry.name for entry in matched] == ["complex_tool"]
    assert len(matched[0].parameters) == 2
    assert [entry.name for entry in everything] == ["complex_tool", "simple"]
    assert nothing == []
