import asyncio
from pathlib import Path

from sqlalchemy.pool import NullPool

from skill_registry.core.errors import SkillNotFoundError
from skill_registry.db.schema import create_schema
from skill_registry.db.session import build_engine, build_session_factory
from skill_registry.schemas.skills import ParameterSpec, SkillRegistration
from skill_registry.services.skill_store import SkillStore

BASE_DIR = Path(__file__).resolve().parent.parent
DB_PATH = BASE_DIR / "smoke_store.db"


def ensure(condition: bool, message: str) -> None:
    if not condition:
        raise RuntimeError(message)


async def run() -> None:
    if DB_PATH.exists():
        DB_PATH.unlink()

    engine = build_engine(f"sqlite+aiosqlite:///{DB_PATH}", poolclass=NullPool)
    await create_schema(engine)
    session_factory = build_session_factory(engine)

    try:
        async with session_factory() as session:
            store = SkillStore(session)

            await store.register(
                SkillRegistration(
                    category="net",
                    name="ping",
                    description="Ping a host",
                    parameters=[ParameterSpec(name="host", type="string", description="Target host", required=True)],
                )
            )
            await store.register(
                SkillRegistration(
                    category="files",
                    name="write",
                    description="Write to file",
                    parameters=[
                        ParameterSpec(name="path", type="string", description="File path", required=True),
                        ParameterSpec(name="content", type="string", description="Text to write"),
                    ],
                )
            )
            await store.register(
                SkillRegistration(
                    category="files",
                    name="read",
                    description="Read file content",
                    parameters=[ParameterSpec(name="path", type="string", description="File path", required=True)],
                )
            )

            index = await store.get_index()
            ensure(index == "files(read,write), net(ping)", f"unexpected index: {index}")

            hits = await store.search("FILE")
            ensure({item.name for item in hits} == {"read", "write"}, f"unexpected search hits: {hits}")

            detail = await store.get_skill_detail("write")
            ensure([item.name for item in detail.parameters] == ["content", "path"], f"unexpected parameters: {detail}")

            updated = await store.register(
                SkillRegistration(
                    category="files",
                    name="write",
                    description="Write or append to a file",
                    parameters=[ParameterSpec(name="mode", type="string", description="w or a")],
                )
            )
            ensure(updated.id == detail.id, f"skill id changed on update: {detail.id} -> {updated.id}")
            ensure([item.name for item in updated.parameters] == ["mode"], f"stale parameters kept: {updated}")

            entry = await store.get_catalog_entry("write")
            ensure(len(entry.parameters) == 1 and entry.parameters[0].n == "mode", f"stale catalog entry: {entry}")

            try:
                await store.get_skill_detail("missing")
            except SkillNotFoundError as exc:
                ensure("missing" in str(exc), f"not found error does not name the skill: {exc}")
            else:
                raise RuntimeError("expected SkillNotFoundError for unknown skill")

            categories = await store.list_categories()
            ensure([item.name for item in categories] == ["files", "net"], f"unexpected categories: {categories}")
    finally:
        await engine.dispose()

    print("SMOKE_STORE_OK")

    if DB_PATH.exists():
        DB_PATH.unlink()


if __name__ == "__main__":
    asyncio.run(run())
