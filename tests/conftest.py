import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SUPABASE_JWT_SECRET"] = "finverse-test-secret-0123456789abcdef"
os.environ["MONTH_END_DELAY_SECONDS"] = "0"
os.environ["GEMINI_API_KEY"] = ""

from datetime import date

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import finverse.models  # noqa: F401  (registers tables)
from finverse.api import deps
from finverse.database import get_db
from finverse.main import app
from finverse.models.game import Career, UserProfile
from finverse.services.month_advancer import MonthAdvancer


class ScriptedRandom:
    """Returns the scripted values in order, then ``default`` forever."""
    def __init__(self, values=(), default=0.5):
        self.values = list(values)
        self.default = default
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        if self.values:
            return self.values.pop(0)
        return self.default


class ExplodingRandom:
    def random(self) -> float:
        raise AssertionError("no random draw expected")


# Draws consumed by one month end: sip, stocks, gold, realEstate, then the event gate
QUIET_MONTH = [0.5, 0.5, 0.5, 0.5, 0.99]


def job_loss_month():
    return [0.5, 0.5, 0.5, 0.5, 0.0, 0.0]


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def engineer() -> UserProfile:
    return UserProfile(name="Priya", career=Career.ENGINEER, salary=80000, expenses=35000)


@pytest.fixture
def start_day() -> date:
    return date(2025, 1, 1)


@pytest.fixture
def new_state(engineer, start_day):
    return MonthAdvancer.new_game(engineer, today=start_day)


@pytest.fixture
def quiet_advancer():
    # 0.5 for every draw: mid-band returns and the event gate never opens
    return MonthAdvancer(ScriptedRandom(default=0.5))


def make_token(user_id: str) -> str:
    return jwt.encode(
        {"sub": user_id, "role": "authenticated"},
        os.environ["SUPABASE_JWT_SECRET"],
        algorithm="HS256",
    )


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {make_token('user-1')}"}


@pytest.fixture
def client():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    session_maker = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_month_advancer] = lambda: MonthAdvancer(ScriptedRandom(default=0.5))
    with TestClient(app) as test_client:
        yield test_client
        test_client.portal.call(engine.dispose)
    app.dependency_overrides.clear()
