import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from main import app
from database import Base, get_db
from routers import rate_limit


@pytest.fixture(autouse=True)
def reset_local_rate_limit_counters():
    """Keep in-memory rate-limit state isolated between tests."""
    previous = getattr(app.state, "disable_rate_limits", False)
    app.state.disable_rate_limits = True
    rate_limit._local_counters.clear()
    yield
    rate_limit._local_counters.clear()
    app.state.disable_rate_limits = previous


@pytest_asyncio.fixture
async def integration_client(tmp_path):
    db_path = tmp_path / "integration.db"
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client, session_maker

    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


SAMPLE_TRANSCRIPT = (
    "Stop scrolling if you want 3 tips for better sleep. "
    "Most people get this wrong every single night. "
    "Here is what the research says about light and caffeine. "
    "Follow for more and grab the guide from the link in bio."
)


def reference_payload(**overrides):
    payload = {
        "platform": "youtube",
        "url": "https://www.youtube.com/shorts/abc123",
        "title": "3 sleep tips nobody tells you",
        "creator": "Sleep Lab",
        "metrics": {"views": 120000, "likes": 9000, "comments": 400, "duration": 42},
        "transcript": SAMPLE_TRANSCRIPT,
    }
    payload.update(overrides)
    return payload


SAMPLE_OFFER = {
    "problem": "People wake up tired",
    "promise": "Wake up rested in 7 days",
    "proof": "2,000 coached clients",
    "pitch": "Join the free sleep reset challenge",
}


SAMPLE_GENERATION = {
    "script": "Stop scrolling. Here is why you wake up tired...",
    "script_variants": ["Variant A", "Variant B"],
    "captions": "Wake up rested in 7 days",
    "hashtags": ["#sleep", "#health"],
    "beats": [{"t": 0, "beat": "Hook"}, {"t": 5, "beat": "Problem"}],
    "beat_sheet": [{"t": 0, "beat": "Hook", "type": "hook"}],
    "broll": [{"t": 0, "cue": "Alarm clock close-up", "shotType": "close-up", "keywords": ["alarm"]}],
    "thumbnail_brief": "Tired face next to a bright sunrise",
    "subtitles": "1\n00:00:00,000 --> 00:00:02,000\nStop scrolling",
}


@pytest.fixture
def make_reference_payload():
    def _make(**overrides):
        return reference_payload(**overrides)

    return _make


@pytest.fixture
def sample_offer():
    return dict(SAMPLE_OFFER)


@pytest.fixture
def sample_generation():
    return dict(SAMPLE_GENERATION)
