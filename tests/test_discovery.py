"""Tests for search, detail, index and listings."""

import itertools

import pytest

from skill_registry.core.errors import SkillNotFoundError
from skill_registry.schemas.skills import ParameterSpec, SkillRegistration

SEED = [
    SkillRegistration(
        category="Data",
        name="convert_format",
        description="Convert file format",
        parameters=[
            ParameterSpec(name="source", type="string", description="Source format", required=True),
            ParameterSpec(name="target", type="string", description="Target format", required=True),
        ],
    ),
    SkillRegistration(category="Data", name="list_files", description="List files in directory"),
]

INDEX_SEED = [
    SkillRegistration(category="files", name="write", description="Write to file"),
    SkillRegistration(category="net", name="ping", description="Ping host"),
    SkillRegistration(category="files", name="read", description="Read file content"),
]


async def _seed(store, registrations=SEED):
    for registration in registrations:
        await store.register(registration)


def test_index_format(run_store):
    async def scenario(store):
        await _seed(store, INDEX_SEED)
        return await store.get_index()

    assert run_store(scenario) == "files(read,write), net(ping)"


@pytest.mark.parametrize("order", list(itertools.permutations(range(len(INDEX_SEED)))))
def test_index_is_independent_of_registration_order(run_store, order):
    async def scenario(store):
        await _seed(store, [INDEX_SEED[i] for i in order])
        first = await store.get_index()
        second = await store.get_index()
        return first, second

    first, second = run_store(scenario)
    assert first == second == "files(read,write), net(ping)"


def test_index_of_empty_registry_is_empty_string(run_store):
    async def scenario(store):
        await store.ensure_category("lonely")
        return await store.get_index()

    assert run_store(scenario) == ""


def test_search_matches_name_substring(run_store):
    async def scenario(store):
        await _seed(store)
        return await store.search_skills("convert")

    hits = run_store(scenario)
    assert [hit.name for hit in hits] == ["convert_format"]
    assert hits[0].category == "Data"


def test_search_matches_description_substring(run_store):
    async def scenario(store):
        await _seed(store)
        return await store.search("files")

    assert [hit.name for hit in run_store(scenario)] == ["list_files"]


def test_search_is_case_insensitive(run_store):
    async def scenario(store):
        await _seed(store)
        return await store.search("DIRECTORY"), await store.search("Convert_FORMAT")

    by_description, by_name = run_store(scenario)
    assert [hit.name for hit in by_description] == ["list_files"]
    assert [hit.name for hit in by_name] == ["convert_format"]


def test_search_treats_wildcards_literally(run_store):
    async def scenario(store):
        await _seed(store)
        await store.register(SkillRegistration(category="misc", name="percent", description="Shows 100% done"))
        return await store.search("%"), await store.search("t_f")

    percent_hits, underscore_hits = run_store(scenario)
    assert [hit.name for hit in percent_hits] == ["percent"]
    assert [hit.name for hit in underscore_hits] == ["convert_format", "list_files"]


def test_search_without_matches_returns_empty_list(run_store):
    async def scenario(store):
        await _seed(store)
        return await store.search("nothing-like-this")

    assert run_store(scenario) == []


def test_search_limit(run_store):
    async def scenario(store):
        await _seed(store)
        return await store.search("", limit=1)

    assert len(run_store(scenario)) == 1


@pytest.mark.parametrize("limit", [0, -3])
def test_search_rejects_non_positive_limit(run_store, limit):
    async def scenario(store):
        await _seed(store)
        with pytest.raises(ValueError):
            await store.search("", limit=limit)
        with pytest.raises(ValueError):
            await store.search_catalog("", limit=limit)

    run_store(scenario)


def test_search_folds_non_ascii_case(run_store):
    async def scenario(store):
        await store.register(SkillRegistration(category="misc", name="Über_tool", description="Größe prüfen"))
        return await store.search("über"), await store.search("PRÜFEN"), await store.search_catalog("ÜBER")

    by_name, by_description, catalog_hits = run_store(scenario)
    assert [hit.name for hit in by_name] == ["Über_tool"]
    assert [hit.name for hit in by_description] == ["Über_tool"]
    assert [entry.name for entry in catalog_hits] == ["Über_tool"]


def test_detail_returns_all_parameters(run_store):
    async def scenario(store):
        await _seed(store)
        return await store.get_skill_detail("convert_format")

    detail = run_store(scenario)
    assert detail.name == "convert_format"
    assert detail.category == "Data"
    assert [(p.name, p.required) for p in detail.parameters] == [("source", True), ("target", True)]


def test_detail_never_mixes_parameters_of_other_skills(run_store):
    async def scenario(store):
        await _seed(store)
        await store.register(
            SkillRegistration(
                category="Data",
                name="other",
                description="Another skill",
                parameters=[ParameterSpec(name="source", type="integer", description="Other source")],
            )
        )
        return await store.get_skill_detail("convert_format"), await store.get_skill_detail("other")

    convert, other = run_store(scenario)
    assert {(p.name, p.type) for p in convert.parameters} == {("source", "string"), ("target", "string")}
    assert {(p.name, p.type) for p in other.parameters} == {("source", "integer")}


def test_detail_of_skill_without_parameters(run_store):
    async def scenario(store):
        await _seed(store)
        return await store.get_skill_detail("list_files")

    detail = run_store(scenario)
    assert detail.name == "list_files"
    assert detail.parameters == ()


def test_detail_of_unknown_skill_raises_not_found(run_store):
    async def scenario(store):
        await _seed(store)
        with pytest.raises(SkillNotFoundError) as excinfo:
            await store.get_skill_detail("nonexistent")
        return excinfo.value

    error = run_store(scenario)
    assert error.name == "nonexistent"
    assert "nonexistent" in str(error)


def test_detail_requires_exact_name(run_store):
    async def scenario(store):
        await _seed(store)
        with pytest.raises(SkillNotFoundError):
            await store.get_skill_detail("convert")

    run_store(scenario)


def test_list_skills_ordered_by_category_then_name(run_store):
    async def scenario(store):
        await _seed(store, INDEX_SEED)
        return await store.list_skills()

    assert [(s.category, s.name) for s in run_store(scenario)] == [
        ("files", "read"),
        ("files", "write"),
        ("net", "ping"),
    ]


def test_list_categories_counts_skills(run_store):
    async def scenario(store):
        await _seed(store, INDEX_SEED)
        await store.ensure_category("empty", "Nothing here yet")
        return await store.list_categories()

    categories = run_store(scenario)
    assert [(c.name, c.skill_count) for c in categories] == [("empty", 0), ("files", 2), ("net", 1)]
    assert categories[0].description == "Nothing here yet"


def test_ensure_category_updates_description_only_when_given(run_store):
    async def scenario(store):
        created = await store.ensure_category("net")
        described = await store.ensure_category("net", "Networking")
        unchanged = await store.ensure_category("net")
        return created, described, unchanged

    created, described, unchanged = run_store(scenario)
    assert created.id == described.id == unchanged.id
    assert created.description == ""
    assert described.description == "Networking"
    assert unchanged.description == "Networking"
