"""Fixtures for API tests against the ASGI app"""
import pytest
from httpx import ASGITransport, AsyncClient

from rankriot.core.auth import get_current_user
from rankriot.core.database import get_db
from rankriot.db.models import Project
from rankriot.main import app


@pytest.fixture
async def client(test_db_session, current_user):
    """Signed-in client sharing the test database session"""
    async def override_get_db():
        yield test_db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = lambda: current_user
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def anonymous_client(test_db_session):
    """Client without a signed-in user"""
    async def override_get_db():
        yield test_db_session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def owned_project(test_db_session, profile):
    row = Project(
        user_id=profile.id,
        name="Example Store",
        url="https://example.com",
        project_type="seo",
        scan_frequency="weekly",
    )
    test_db_session.add(row)
    await test_db_session.commit()
    return row
