"""Shared pytest fixtures for all test types."""

from datetime import datetime, timezone

import pytest

from eightball.core.history import HistoryStore
from eightball.core.metadata import MetadataProvider
from eightball.core.models import CommunityMetadata, CommunityRule, RequestContext
from eightball.core.store import MemoryStore
from fakes import PYTHON_ABOUT, PYTHON_RULES, FakeClock, FakeDirectory


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock) -> MemoryStore:
    return MemoryStore(clock=clock)


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory(
        communities={"python": PYTHON_ABOUT},
        rules={"python": PYTHON_RULES},
    )


@pytest.fixture
def history(store) -> HistoryStore:
    return HistoryStore(store, ttl_seconds=86400)


@pytest.fixture
def provider(store, directory) -> MetadataProvider:
    return MetadataProvider(store, directory, cache_ttl=3600, timeout=1.0)


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def context() -> RequestContext:
    return RequestContext(post_id="t3_abc", user_id="t2_user", subreddit_name="python")


@pytest.fixture
def sample_metadata() -> CommunityMetadata:
    return CommunityMetadata(
        community_id="python",
        display_name="python",
        subscriber_count=5_000,
        rules=[
            CommunityRule(short_name="Be civil", description="No personal attacks."),
            CommunityRule(short_name="No spam"),
        ],
    )
