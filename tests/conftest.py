"""Pytest configuration and shared fixtures"""
import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("CRAWLER_API_URL", "http://crawler.test")
os.environ.setdefault("PADDLE_WEBHOOK_SECRET", "pdl_ntfset_test_secret")
os.environ.setdefault("PADDLE_STARTER_MONTHLY_PRICE_ID", "pri_starter_monthly")
os.environ.setdefault("PADDLE_PRO_MONTHLY_PRICE_ID", "pri_pro_monthly")
os.environ.setdefault("PADDLE_BUSINESS_YEARLY_PRICE_ID", "pri_business_yearly")

import pytest
import httpx
from typing import AsyncGenerator, Callable, List
from uuid import uuid4
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Test database URL (use in-memory SQLite for unit tests)
TEST_DATABASE_URL = os.getenv(
    "TEST_DATABASE_URL",
    "sqlite+aiosqlite:///:memory:"
)


@pytest.fixture
async def test_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create test database session"""
    from rankriot.core.database import Base
    import rankriot.db.models  # noqa: F401

    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False} if "sqlite" in TEST_DATABASE_URL else {},
        poolclass=StaticPool if "sqlite" in TEST_DATABASE_URL else None,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(engine, expire_on_commit=False)

    async with async_session() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def mock_user_id():
    """Mock user UUID for testing"""
    return uuid4()


@pytest.fixture
def current_user(mock_user_id):
    """Signed-in user as returned by get_current_user"""
    return {"user_id": str(mock_user_id), "email": "owner@example.com", "auth_type": "jwt"}


@pytest.fixture
async def profile(test_db_session, mock_user_id):
    """Profile row of the signed-in user (free plan)"""
    from rankriot.db.models import Profile

    row = Profile(id=mock_user_id, email="owner@example.com")
    test_db_session.add(row)
    await test_db_session.commit()
    return row


@pytest.fixture
def crawler_requests() -> List[httpx.Request]:
    """Requests received by the mocked crawler"""
    return []


@pytest.fixture
def crawler_handler(crawler_requests) -> Callable[[httpx.Request], httpx.Response]:
    """Default crawler behaviour: accept every scan"""
    def handler(request: httpx.Request) -> httpx.Response:
        crawler_requests.append(request)
        return httpx.Response(200, json={"success": True, "data": {"scan_id": "scan-123"}})
    return handler


@pytest.fixture
def mock_crawler(monkeypatch, crawler_handler):
    """Route every CrawlerClient created by the projects service to a mock transport"""
    from rankriot.services import crawler as crawler_module
    from rankriot.services import projects as projects_module

    def factory():
        return crawler_module.CrawlerClient(
            base_url="http://crawler.test",
            transport=httpx.MockTransport(crawler_handler),
        )

    monkeypatch.setattr(projects_module, "CrawlerClient", factory)
    return factory


PAGE_DEFAULTS = {
    "title": None,
    "meta_description": None,
    "canonical_url": None,
    "h1s": None,
    "h2s": None,
    "keywords": None,
    "images": None,
    "open_graph": None,
    "twitter_card": None,
    "structured_data": None,
    "word_count": None,
    "http_status": 200,
    "redirect_url": None,
    "size_bytes": None,
    "load_time_ms": None,
    "first_byte_time_ms": None,
    "depth": None,
    "is_indexable": True,
    "has_robots_noindex": False,
}


@pytest.fixture
def make_page():
    """Factory for in-memory page rows with every column the analytics read"""
    from types import SimpleNamespace

    def factory(url: str, **fields):
        return SimpleNamespace(id=fields.pop("id", uuid4()), url=url, **{**PAGE_DEFAULTS, **fields})
    return factory


@pytest.fixture
def make_link():
    """Factory for in-memory page_links rows"""
    from types import SimpleNamespace

    def factory(source_page_id, destination_url: str = "https://example.com/", **fields):
        defaults = {
            "destination_page_id": None,
            "http_status": None,
            "anchor_text": None,
            "link_type": "internal",
            "is_broken": False,
        }
        return SimpleNamespace(
            id=fields.pop("id", uuid4()),
            source_page_id=source_page_id,
            destination_url=destination_url,
            **{**defaults, **fields},
        )
    return factory
