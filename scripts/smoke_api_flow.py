import asyncio
from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy.pool import NullPool

from skill_registry.core.config import settings
from skill_registry.db.schema import create_schema
from skill_registry.db.session import build_engine, build_session_factory, get_db
from skill_registry.main import app

BASE_DIR = Path(__file__).resolve().parent.parent
DB_PATH = BASE_DIR / "smoke_api.db"
API = settings.API_V1_PREFIX


def ensure(condition: bool, message: str) -> None:
    if not condition:
        raise RuntimeError(message)


async def init_db():
    if DB_PATH.exists():
        DB_PATH.unlink()

    engine = build_engine(f"sqlite+aiosqlite:///{DB_PATH}", poolclass=NullPool)
    await create_schema(engine)
    return build_session_factory(engine), engine


async def run() -> None:
    session_factory, engine = await init_db()

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    auto_create = settings.DB_AUTO_CREATE_SCHEMA
    settings.DB_AUTO_CREATE_SCHEMA = False

    try:
        with TestClient(app) as client:
            health = client.get("/health")
            ensure(health.status_code == 200, f"health failed: {health.text}")

            for payload in (
                {"category": "net", "name": "ping", "description": "Ping host"},
                {
                    "category": "files",
                    "name": "write",
                    "description": "Write to file",
                    "parameters": [{"name": "path", "type": "string", "description": "File path", "required": True}],
                },
                {
                    "category": "files",
                    "name": "read",
                    "description": "Read file content",
                    "parameters": [{"name": "path", "type": "string", "description": "File path", "required": True}],
                },
            ):
                registered = client.post(f"{API}/skills", json=payload)
                ensure(registered.status_code == 200, f"register failed: {registered.text}")

            index = client.get(f"{API}/skills/index")
            ensure(index.status_code == 200, f"index failed: {index.text}")
            ensure(index.json() == {"index": "files(read,write), net(ping)"}, f"unexpected index: {index.json()}")

            search = client.get(f"{API}/skills/search", params={"q": "PING"})
            ensure(search.status_code == 200, f"search failed: {search.text}")
            ensure([item["name"] for item in search.json()] == ["ping"], f"unexpected search: {search.json()}")

            empty = client.get(f"{API}/skills/search", params={"q": "no-such-skill"})
            ensure(empty.status_code == 200 and empty.json() == [], f"expected empty search: {empty.text}")

            detail = client.get(f"{API}/skills/read")
            ensure(detail.status_code == 200, f"detail failed: {detail.text}")
            body = detail.json()
            ensure(body["category"] == "files", f"unexpected category: {body}")
            ensure(body["parameters"][0]["name"] == "path" and body["parameters"][0]["required"] is True, f"bad parameters: {body}")

            missing = client.get(f"{API}/skills/nope")
            ensure(missing.status_code == 404, f"expected 404: {missing.text}")
            ensure("nope" in missing.json().get("detail", ""), f"404 detail does not name the skill: {missing.text}")

            entry = client.get(f"{API}/skills/write/catalog")
            ensure(entry.status_code == 200, f"catalog entry failed: {entry.text}")
            ensure(
                entry.json()["parameters"] == [{"n": "path", "t": "string", "d": "File path", "r": True}],
                f"unexpected catalog parameters: {entry.json()}",
            )

            catalog = client.get(f"{API}/catalog", params={"q": "file"})
            ensure([item["name"] for item in catalog.json()] == ["read", "write"], f"unexpected catalog search: {catalog.text}")

            bad_category = client.post(f"{API}/skills", json={"category_id": 9999, "name": "orphan"})
            ensure(bad_category.status_code == 422, f"expected 422 for unknown category id: {bad_category.text}")

            ambiguous = client.post(f"{API}/skills", json={"category": "net", "category_id": 1, "name": "x"})
            ensure(ambiguous.status_code == 422, f"expected 422 for two category references: {ambiguous.text}")

            category = client.post(f"{API}/categories", json={"name": "net", "description": "Networking"})
            ensure(category.status_code == 200, f"ensure category failed: {category.text}")
            ensure(category.json()["skill_count"] == 1, f"unexpected category: {category.json()}")

            categories = client.get(f"{API}/categories")
            ensure([item["name"] for item in categories.json()] == ["files", "net"], f"unexpected categories: {categories.text}")

            schema = client.get(f"{API}/schema")
            ensure(schema.status_code == 200, f"schema failed: {schema.text}")
            ensure(schema.json()["dialect"] == "sqlite" and "CREATE VIEW" in schema.json()["ddl"], f"bad schema: {schema.text}")

            metrics = client.get(f"{API}/observability/metrics")
            ensure(metrics.status_code == 200, f"metrics failed: {metrics.text}")
            ensure(metrics.json()["operations"].get("skill_store.register", {}).get("total", 0) >= 3, f"register not counted: {metrics.text}")

            prometheus = client.get(f"{API}/observability/metrics/prometheus")
            ensure("skill_registry_up 1" in prometheus.text, f"bad prometheus output: {prometheus.text}")
            ensure(
                'operation="register",outcome="success"' in prometheus.text,
                f"register series missing: {prometheus.text}",
            )
    finally:
        app.dependency_overrides.pop(get_db, None)
        settings.DB_AUTO_CREATE_SCHEMA = auto_create
        await engine.dispose()

    print("SMOKE_API_OK")

    if DB_PATH.exists():
        DB_PATH.unlink()


if __name__ == "__main__":
    asyncio.run(run())
