"""Skill store: the only writer of the registry tables.

Registration is an upsert keyed on the skill name. The category is resolved
(or created), the skill row is inserted or updated in place, and the whole
parameter list is replaced. All of it runs in the session's transaction and is
rolled back on any failure, cancellation included, so readers never see a
half-replaced parameter set.

Discovery reads committed state only: keyword search, detail by exact name,
the compact grouped index and the JSON catalog projection.
"""

from __future__ import annotations

from collections import defaultdict
from contextlib import contextmanager
import json
import logging
from time import perf_counter
from typing import Any, Iterator

from sqlalchemy import delete, func, insert, or_, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from skill_registry.core.errors import (
    InvalidRegistrationError,
    RegistrationError,
    SkillNotFoundError,
    SkillRegistryError,
)
from skill_registry.db.schema import catalog_view, schema_ddl
from skill_registry.db.session import SQLITE_LOWER_FUNCTION
from skill_registry.models.category import Category
from skill_registry.models.parameter import Parameter
from skill_registry.models.skill import Skill
from skill_registry.schemas.skills import (
    CatalogEntry,
    CatalogParameter,
    CategoryOut,
    ParameterOut,
    ParameterSpec,
    SkillDetail,
    SkillRegistration,
    SkillSummary,
)
from skill_registry.services.alerting_service import alerting_service
from skill_registry.services.observability_metrics_service import observability_metrics_service

logger = logging.getLogger(__name__)

COMPONENT = "skill_store"
LIKE_ESCAPE = "\\"

_UPSERT_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": postgresql_insert,
}


def _describe(exc: SQLAlchemyError) -> str:
    # driver message only; str(exc) also carries the SQL text and bound values
    orig = getattr(exc, "orig", None)
    message = str(orig if orig is not None else exc).strip()
    first_line = message.splitlines()[0] if message else ""
    return first_line or exc.__class__.__name__


def _apply_limit(stmt: Any, limit: int | None) -> Any:
    if limit is None:
        return stmt
    if int(limit) < 1:
        raise ValueError(f"limit must be a positive integer, got {limit}")
    return stmt.limit(int(limit))


def _like_pattern(query: str) -> str:
    escaped = (
        str(query or "")
        .replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )
    return f"%{escaped}%"


@contextmanager
def _registration_step(name: str, step: str, kind: str = "skill") -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        raise RegistrationError(name=name, step=step, reason=_describe(exc), kind=kind) from exc


@contextmanager
def _observed(operation: str) -> Iterator[None]:
    started_at = perf_counter()
    success = False
    try:
        yield
        success = True
    finally:
        observability_metrics_service.record(
            component=COMPONENT,
            operation=operation,
            success=success,
            latency_ms=(perf_counter() - started_at) * 1000,
        )


class SkillStore:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    @property
    def dialect_name(self) -> str:
        return self.db.get_bind().dialect.name

    def _upsert_insert(self, model: type) -> Any:
        factory = _UPSERT_INSERTS.get(self.dialect_name)
        if factory is None:
            raise SkillRegistryError(f"Unsupported database dialect for upserts: {self.dialect_name}")
        return factory(model)

    def _contains(self, column: Any, pattern: str) -> Any:
        if self.dialect_name == "sqlite":
            return getattr(func, SQLITE_LOWER_FUNCTION)(column).like(pattern.lower(), escape=LIKE_ESCAPE)
        return column.ilike(pattern, escape=LIKE_ESCAPE)

    # registration

    async def register(self, registration: SkillRegistration) -> SkillDetail:
        name = registration.name
        with _observed("register"):
            try:
                skill_id = await self._write_registration(registration)
            except (RegistrationError, InvalidRegistrationError) as exc:
                await self.db.rollback()
                logger.warning(
                    "skill registration failed",
                    extra={"context": {"skill": name, "step": getattr(exc, "step", "validate"), "error": str(exc)}},
                )
                if isinstance(exc, RegistrationError):
                    alerting_service.emit(
                        component=COMPONENT,
                        message="skill registration failed",
                        details={"skill": name, "step": exc.step, "error": exc.reason},
                    )
                raise
            except BaseException:
                # cancellation or an unexpected error: drop the partial write before propagating
                await self.db.rollback()
                raise

            logger.info(
                "skill registered",
                extra={
                    "context": {
                        "skill": name,
                        "skill_id": skill_id,
                        "category": registration.category or registration.category_id,
                        "parameters": len(registration.parameters),
                    }
                },
            )
        return await self.get_skill_detail(name)

    async def _write_registration(self, registration: SkillRegistration) -> int:
        name = registration.name
        category_id = await self._resolve_category(registration)

        with _registration_step(name, "upsert skill"):
            skill_id = await self._upsert_skill(category_id, registration)

        with _registration_step(name, "delete parameters"):
            await self.db.execute(delete(Parameter).where(Parameter.skill_id == skill_id))

        with _registration_step(name, "insert parameters"):
            await self._insert_parameters(skill_id, registration.parameters)

        with _registration_step(name, "commit"):
            await self.db.commit()
        return skill_id

    async def _resolve_category(self, registration: SkillRegistration) -> int:
        name = registration.name
        if registration.category_id is not None:
            with _registration_step(name, "resolve category"):
                found = await self.db.scalar(select(Category.id).where(Category.id == registration.category_id))
            if found is None:
                raise InvalidRegistrationError(name, f"category id {registration.category_id} does not exist")
            return int(found)

        with _registration_step(name, "upsert category"):
            stmt = self._upsert_insert(Category).values(name=registration.category, description="")
            await self.db.execute(stmt.on_conflict_do_nothing(index_elements=["name"]))

        with _registration_step(name, "resolve category"):
            result = await self.db.execute(select(Category.id).where(Category.name == registration.category))
            return int(result.scalar_one())

    async def _upsert_skill(self, category_id: int, registration: SkillRegistration) -> int:
        stmt = self._upsert_insert(Skill).values(
            category_id=category_id,
            name=registration.name,
            description=registration.description,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["name"],
            set_={
                "category_id": stmt.excluded.category_id,
                "description": stmt.excluded.description,
            },
        ).returning(Skill.id)
        result = await self.db.execute(stmt)
        return int(result.scalar_one())

    async def _insert_parameters(self, skill_id: int, parameters: tuple[ParameterSpec, ...]) -> None:
        if not parameters:
            return
        await self.db.execute(
            insert(Parameter),
            [
                {
                    "skill_id": skill_id,
                    "name": item.name,
                    "param_type": item.type,
                    "description": item.description,
                    "required": item.required,
                }
                for item in parameters
            ],
        )

    # categories

    async def ensure_category(self, name: str, description: str = "") -> CategoryOut:
        with _observed("ensure_category"):
            try:
                with _registration_step(name, "upsert category", kind="category"):
                    stmt = self._upsert_insert(Category).values(name=name, description=description)
                    if description:
                        stmt = stmt.on_conflict_do_update(
                            index_elements=["name"],
                            set_={"description": stmt.excluded.description},
                        )
                    else:
                        stmt = stmt.on_conflict_do_nothing(index_elements=["name"])
                    await self.db.execute(stmt)
                with _registration_step(name, "commit", kind="category"):
                    await self.db.commit()
            except BaseException:
                await self.db.rollback()
                raise

        logger.info("category ensured", extra={"context": {"category": name}})
        categories = await self._categories(Category.name == name)
        return categories[0]

    async def list_categories(self) -> list[CategoryOut]:
        with _observed("list_categories"):
            return await self._categories()

    async def _categories(self, *criteria: Any) -> list[CategoryOut]:
        stmt = (
            select(Category.id, Category.name, Category.description, func.count(Skill.id).label("skill_count"))
            .outerjoin(Skill, Skill.category_id == Category.id)
            .where(*criteria)
            .group_by(Category.id, Category.name, Category.description)
            .order_by(Category.name)
        )
        rows = (await self.db.execute(stmt)).all()
        return [
            CategoryOut(id=row.id, name=row.name, description=row.description or "", skill_count=int(row.skill_count))
            for row in rows
        ]

    # discovery

    async def search(self, query: str, *, limit: int | None = None) -> list[SkillSummary]:
        pattern = _like_pattern(query)
        stmt = (
            select(
                Skill.id.label("id"),
                Category.name.label("category"),
                Skill.name.label("name"),
                Skill.description.label("description"),
            )
            .join(Category, Skill.category_id == Category.id)
            .where(
                or_(
                    self._contains(Skill.name, pattern),
                    self._contains(Skill.description, pattern),
                )
            )
            .order_by(Skill.name)
        )
        stmt = _apply_limit(stmt, limit)

        with _observed("search"):
            rows = (await self.db.execute(stmt)).all()
        return [
            SkillSummary(id=row.id, category=row.category, name=row.name, description=row.description or "")
            for row in rows
        ]

    search_skills = search

    async def list_skills(self) -> list[SkillSummary]:
        stmt = (
            select(
                Skill.id.label("id"),
                Category.name.label("category"),
                Skill.name.label("name"),
                Skill.description.label("description"),
            )
            .join(Category, Skill.category_id == Category.id)
            .order_by(Category.name, Skill.name)
        )
        with _observed("list_skills"):
            rows = (await self.db.execute(stmt)).all()
        return [
            SkillSummary(id=row.id, category=row.category, name=row.name, description=row.description or "")
            for row in rows
        ]

    async def get_skill_detail(self, name: str) -> SkillDetail:
        # one statement so the skill row and its parameters come from the same snapshot
        stmt = (
            select(
                Skill.id.label("skill_id"),
                Skill.category_id.label("category_id"),
                Category.name.label("category"),
                Skill.name.label("skill_name"),
                Skill.description.label("skill_description"),
                Parameter.id.label("param_id"),
                Parameter.name.label("param_name"),
                Parameter.param_type.label("param_type"),
                Parameter.description.label("param_description"),
                Parameter.required.label("param_required"),
            )
            .join(Category, Skill.category_id == Category.id)
            .outerjoin(Parameter, Parameter.skill_id == Skill.id)
            .where(Skill.name == name)
            .order_by(Parameter.name)
        )
        with _observed("get_skill_detail"):
            rows = (await self.db.execute(stmt)).all()
            if not rows:
                raise SkillNotFoundError(name)

        head = rows[0]
        parameters = tuple(
            ParameterOut(
                id=row.param_id,
                name=row.param_name,
                type=row.param_type,
                description=row.param_description or "",
                required=bool(row.param_required),
            )
            for row in rows
            if row.param_id is not None
        )
        return SkillDetail(
            id=head.skill_id,
            category_id=head.category_id,
            category=head.category,
            name=head.skill_name,
            description=head.skill_description or "",
            parameters=parameters,
        )

    async def get_index(self) -> str:
        """Compact index: ``cat1(skillA,skillB), cat2(skillC)``.

        Sorted here rather than in SQL so the text does not depend on the
        database collation.
        """
        stmt = select(Category.name, Skill.name).join(Skill, Skill.category_id == Category.id)
        with _observed("get_index"):
            rows = (await self.db.execute(stmt)).all()

        grouped: dict[str, list[str]] = defaultdict(list)
        for category_name, skill_name in rows:
            grouped[category_name].append(skill_name)

        return ", ".join(
            f"{category_name}({','.join(sorted(grouped[category_name]))})" for category_name in sorted(grouped)
        )

    # catalog projection

    async def get_catalog_entry(self, name: str) -> CatalogEntry:
        stmt = select(catalog_view).where(catalog_view.c.skill_name == name)
        with _observed("get_catalog_entry"):
            row = (await self.db.execute(stmt)).one_or_none()
            if row is None:
                raise SkillNotFoundError(name)
        return self._catalog_entry(row)

    async def search_catalog(self, query: str = "", *, limit: int | None = None) -> list[CatalogEntry]:
        pattern = _like_pattern(query)
        stmt = (
            select(catalog_view)
            .where(
                or_(
                    self._contains(catalog_view.c.skill_name, pattern),
                    self._contains(catalog_view.c.description, pattern),
                )
            )
            .order_by(catalog_view.c.skill_name)
        )
        stmt = _apply_limit(stmt, limit)

        with _observed("search_catalog"):
            rows = (await self.db.execute(stmt)).all()
        return [self._catalog_entry(row) for row in rows]

    @staticmethod
    def _catalog_entry(row: Any) -> CatalogEntry:
        raw = row.parameters_json
        items = json.loads(raw) if isinstance(raw, (str, bytes)) else (raw or [])
        parameters = sorted(
            (
                CatalogParameter(
                    n=item.get("n") or "",
                    t=item.get("t") or "",
                    d=item.get("d") or "",
                    r=item.get("r") or False,
                )
                for item in items
                if isinstance(item, dict)
            ),
            key=lambda item: item.n,
        )
        return CatalogEntry(
            category=row.category_name,
            name=row.skill_name,
            description=row.description or "",
            parameters=tuple(parameters),
        )

    def get_schema_description(self) -> str:
        return schema_ddl(self.dialect_name)
