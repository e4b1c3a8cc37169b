"""
Pytest configuration and fixtures
Shared test setup for all test modules
"""

import base64
import json
import pytest
from io import BytesIO
from typing import AsyncGenerator, Callable, List, Optional

import jwt
from httpx import AsyncClient, ASGITransport
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from hazardscan.main import app
from hazardscan.core.config import settings
from hazardscan.core.exceptions import StorageUnavailable
from hazardscan.core.identity import JWTIdentityProvider
from hazardscan.db.base import Base
from hazardscan.db import models  # noqa: F401
from hazardscan.services.analysis_service import ModelResponse
from hazardscan.services.image_service import ImageNormalizer
from hazardscan.services.usage_service import UsageRecorder

TEST_JWT_SECRET = "hazardscan-test-secret-0123456789abcdef"


class FakePublisher:
    """In-memory blob store"""

    def __init__(self):
        self.objects = {}
        self.calls: List[tuple] = []
        self.error: Optional[Exception] = None

    async def publish(self, key: str, data: bytes, content_type: str) -> str:
        self.calls.append((key, content_type))
        if self.error is not None:
            raise self.error
        self.objects[key] = data
        return f"https://blob.test/{key}"


class FakeAnalyzer:
    """Returns a canned model answer"""

    def __init__(self):
        self.text = ""
        self.error: Optional[Exception] = None
        self.calls: List[str] = []
        self.prompt_tokens = 1000
        self.completion_tokens = 500

    async def analyze(self, image_url: str) -> ModelResponse:
        self.calls.append(image_url)
        if self.error is not None:
            raise self.error
        return ModelResponse(
            text=self.text,
            prompt_tokens=self.prompt_tokens,
            completion_tokens=self.completion_tokens,
            total_tokens=self.prompt_tokens + self.completion_tokens,
            latency_ms=1234,
        )


@pytest.fixture(scope="function")
async def engine(tmp_path):
    """Fresh SQLite database for each test"""
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()


@pytest.fixture
def analyzer() -> FakeAnalyzer:
    return FakeAnalyzer()


@pytest.fixture
def identity_provider() -> JWTIdentityProvider:
    return JWTIdentityProvider(secret_key=TEST_JWT_SECRET, algorithm="HS256")


@pytest.fixture
async def client(
    session_factory,
    publisher: FakePublisher,
    analyzer: FakeAnalyzer,
    identity_provider: JWTIdentityProvider,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app with fakes installed on app.state"""
    app.state.session_factory = session_factory
    app.state.identity_provider = identity_provider
    app.state.normalizer = ImageNormalizer(max_side=settings.IMAGE_MAX_SIDE, quality=settings.IMAGE_QUALITY)
    app.state.publisher = publisher
    app.state.analyzer = analyzer
    app.state.usage_recorder = UsageRecorder(session_factory)

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture
def make_token() -> Callable[..., str]:
    def _make_token(sub: str = "user_1", role: Optional[str] = None, email: Optional[str] = None,
                    with_email: bool = True, **claims) -> str:
        payload = {"sub": sub, **claims}
        if with_email:
            payload["email"] = email or f"{sub}@example.com"
        if role:
            payload["metadata"] = {"appRole": role}
        return jwt.encode(payload, TEST_JWT_SECRET, algorithm="HS256")
    return _make_token


@pytest.fixture
def auth_headers(make_token) -> dict:
    """Generate auth headers for a regular user"""
    return {"Authorization": f"Bearer {make_token('user_1', given_name='Ada', family_name='Lovelace')}"}


@pytest.fixture
def other_headers(make_token) -> dict:
    return {"Authorization": f"Bearer {make_token('user_2')}"}


@pytest.fixture
def admin_headers(make_token) -> dict:
    return {"Authorization": f"Bearer {make_token('admin_1', role=settings.SUPERADMIN_ROLE)}"}


@pytest.fixture
def analysis_payload() -> Callable[..., dict]:
    """Build a schema-valid model answer"""
    def _analysis_payload(hazards: int = 2, grade: str = "C", risk: int = 55) -> dict:
        return {
            "hazards": [
                {
                    "id": f"hazard_{i + 1}",
                    "description": "Worker on ladder without fall protection",
                    "location": "left side, near scaffolding",
                    "category": "Fall",
                    "severity": "High",
                    "immediateSolutions": ["Stop work at height", "Provide a harness"],
                    "longTermSolutions": ["Install guard rails"],
                    "estimatedCost": "$500-$1,000",
                    "timeToImplement": "1 week",
                    "priority": 8,
                }
                for i in range(hazards)
            ],
            "overallAssessment": {
                "riskScore": risk,
                "safetyGrade": grade,
                "topPriorities": ["Fall protection"],
                "complianceStandards": ["OSHA 1926.501"],
            },
            "metadata": {"analysisTime": 0, "tokensUsed": 0, "confidence": 85},
        }
    return _analysis_payload


@pytest.fixture
def model_answer(analyzer: FakeAnalyzer, analysis_payload) -> Callable[..., dict]:
    """Make the fake analyzer answer with a valid report"""
    def _model_answer(**kwargs) -> dict:
        payload = analysis_payload(**kwargs)
        analyzer.text = json.dumps(payload)
        return payload
    return _model_answer


def encode_image(width: int, height: int, fmt: str = "PNG", mode: str = "RGB") -> bytes:
    out = BytesIO()
    Image.new(mode, (width, height), color="red").save(out, format=fmt)
    return out.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return encode_image(2000, 1000)


@pytest.fixture
def png_base64(png_bytes: bytes) -> str:
    return base64.b64encode(png_bytes).decode()


@pytest.fixture
def storage_down(publisher: FakePublisher) -> FakePublisher:
    publisher.error = StorageUnavailable("Image storage is unavailable")
    return publisher
