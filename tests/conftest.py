import os
import uuid
from datetime import datetime, timedelta, timezone

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import httpx
import pytest
from jose import jwt

from bizense.config import Settings
from bizense.context import AppContext
from bizense.core.store import CampaignStore
from bizense.main import create_app
from bizense.models import Base

JWT_SECRET = "test-secret-with-enough-length-for-hs256"


def make_token(user_id: uuid.UUID, email: str = "owner@example.com", expires_in: int = 3600) -> str:
    payload = {
        "sub": str(user_id),
        "email": email,
        "role": "authenticated",
        "aud": "authenticated",
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm="HS256")


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        SUPABASE_JWT_SECRET=JWT_SECRET,
        STAGING_DIR=str(tmp_path / "staging"),
        MAX_UPLOAD_BYTES=64 * 1024,
        MAX_ROWS=1000,
    )


@pytest.fixture
async def context(settings):
    ctx = AppContext.from_settings(settings)
    async with ctx.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield ctx
    await ctx.close()


@pytest.fixture
async def store(context):
    async with context.session_factory() as session:
        yield CampaignStore(session)


@pytest.fixture
def app(context):
    return create_app(context=context)


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


@pytest.fixture
def user_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def auth_headers(user_id) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest.fixture
def issue_token():
    return make_token


@pytest.fixture
def jwt_secret() -> str:
    return JWT_SECRET
