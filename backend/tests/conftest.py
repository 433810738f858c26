"""
Shared fixtures.

API tests run the real app through httpx's ASGITransport against a fresh
in-memory SQLite database per test. The app's lifespan is not started, so
fixtures create the tables and seed what each test needs.
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("OPENAI_API_KEY", "")

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import cvbuilder.models  # noqa: F401
from cvbuilder.api.ai import get_extraction_cache
from cvbuilder.database import Base, get_db
from cvbuilder.main import app
from cvbuilder.middleware import performance_cache
from cvbuilder.services.ai import AIService, get_ai_service


def make_completion(text: str) -> SimpleNamespace:
    """Shape of an openai chat completion, as far as AIService reads it."""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


@pytest.fixture(autouse=True)
def reset_performance_cache():
    performance_cache.clear()
    yield
    performance_cache.clear()


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_openai():
    """AsyncOpenAI double; set ``chat.completions.create`` return values per test."""
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=make_completion("{}"))
    return client


@pytest.fixture
def ai_service(mock_openai):
    return AIService(client=mock_openai, max_retries=3, timeout=5, retry_delay=0, rate_limit_delay=0)


@pytest.fixture
def mock_extraction_cache():
    cache = MagicMock()
    cache.get_extraction = AsyncMock(return_value=None)
    cache.set_extraction = AsyncMock(return_value=True)
    return cache


@pytest_asyncio.fixture
async def client(session_factory, ai_service, mock_extraction_cache):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ai_service] = lambda: ai_service
    app.dependency_overrides[get_extraction_cache] = lambda: mock_extraction_cache

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def auth_headers(client):
    response = await client.post(
        "/api/auth/register",
        json={
            "firstName": "Jane",
            "lastName": "Doe",
            "email": "jane.doe@example.com",
            "password": "Secret123",
        },
    )
    assert response.status_code == 201
    token = response.json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def storage_cv():
    return {
        "language": "en",
        "theme": "professional",
        "personalInfo": {
            "name": "Jane Doe",
            "title": "Backend Engineer",
            "contact": {"email": "jane.doe@example.com", "phone": "+15550100", "location": "Paris"},
        },
        "summary": "Backend engineer with eight years of experience building APIs.",
        "skills": {"technical": ["Python", "SQL"], "frameworks": ["FastAPI"]},
        "experience": [
            {
                "title": "Senior Engineer",
                "company": "Acme Corp",
                "period": "2020 - Present",
                "responsibilities": ["Designed the public REST API", "Led a team of four"],
            }
        ],
        "projects": [],
        "education": [
            {"degree": "MSc Computer Science", "institution": "Sorbonne", "period": "2012 - 2014"}
        ],
        "certifications": [],
        "additionalExperience": [],
        "languages": [{"language": "French", "level": "Native"}],
        "interests": ["Chess"],
    }


@pytest.fixture
def form_cv():
    return {
        "personalInfo": {
            "firstName": "John",
            "lastName": "Smith",
            "email": "john.smith@example.com",
            "phone": "+15550101",
            "location": "London",
            "linkedin": "linkedin.com/in/jsmith",
            "website": "jsmith.dev",
        },
        "summary": "Experienced software engineer with a focus on distributed systems.",
        "experience": [
            {
                "company": "Globex",
                "position": "Software Engineer",
                "startDate": "2019",
                "endDate": "",
                "description": "Built event pipelines",
            }
        ],
        "education": [
            {"institution": "Imperial College", "degree": "BEng", "field": "Computing", "startDate": "2015", "endDate": "2019"}
        ],
        "skills": [
            {"name": "Python", "category": "Programming"},
            {"name": "Kafka", "category": "Tools"},
            {"name": "Mentoring"},
        ],
        "languages": [{"name": "English", "level": "Native"}, {"name": "German"}],
        "certifications": [{"name": "CKA", "issuer": "CNCF", "date": "2022", "url": "https://example.com/cka"}],
    }
