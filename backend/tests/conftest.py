# tests/conftest.py — Shared test fixtures
import os

import pytest_asyncio
from httpx import AsyncClient, ASGITransport

os.environ["ENVIRONMENT"] = "test"

from database import KanbanDatabase, get_db_session
from kanban_service import KanbanService
from main import app
from repository import KanbanRepository


@pytest_asyncio.fixture(scope="function")
async def db(tmp_path):
    """Fresh SQLite file per test, schema created, foreign keys on"""
    database = KanbanDatabase(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    await database.init()
    yield database
    await database.close()


@pytest_asyncio.fixture(scope="function")
async def db_session(db):
    async with db.session() as session:
        yield session


@pytest_asyncio.fixture
async def repo(db_session):
    return KanbanRepository(db_session)


@pytest_asyncio.fixture
async def service(db_session):
    return KanbanService(db_session)


@pytest_asyncio.fixture(scope="function")
async def client(db):
    """HTTP test client with overridden DB dependency"""
    app.state.db = db

    async def override_get_db():
        async with db.session() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def create_project(client: AsyncClient, name: str = "Test Project", description: str = "") -> dict:
    """Create a project through the API and return its body"""
    resp = await client.post("/api/projects", json={"name": name, "description": description})
    assert resp.status_code == 201
    return resp.json()


async def create_task(client: AsyncClient, project: dict, column_index: int = 0, **fields) -> dict:
    """Create a task in the project's n-th column and return its body"""
    column_id = project["columns"][column_index]["id"]
    payload = {"title": "Task", **fields}
    resp = await client.post(f"/api/projects/{project['id']}/columns/{column_id}/tasks", json=payload)
    assert resp.status_code == 201
    return resp.json()
