"""Shared pytest fixtures for userdash tests."""

from datetime import datetime, timezone

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from userdash.client.users_api import UsersApiClient
from userdash.db.schema import Base
from userdash.models.domain import to_iso
from userdash.stats.dates import month_bounds

# Fixed reference time for date-window assertions
NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)

BASE_URL = "http://users.test"


@pytest.fixture
def engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def session(engine):
    """Create a database session for testing."""
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()


def classify_count_request(request: httpx.Request, now: datetime = NOW) -> str:
    """Name the count query a request corresponds to.

    Returns one of "total", "last_month", "this_month", "verified".
    """
    params = request.url.params
    if "verified" in params:
        return "verified"
    if "startDate" not in params:
        return "total"
    if params["startDate"] == to_iso(month_bounds(now)[0]):
        return "this_month"
    return "last_month"


def count_transport(
    counts: dict[str, int],
    *,
    fail: tuple[str, ...] = (),
    malformed: tuple[str, ...] = (),
    calls: list[str] | None = None,
) -> httpx.MockTransport:
    """Mock users service answering count queries from a table.

    Args:
        counts: Count per query name (see classify_count_request).
        fail: Query names answered with HTTP 500.
        malformed: Query names answered without a "count" field.
        calls: Optional list that receives each query name in arrival order.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        name = classify_count_request(request)
        if calls is not None:
            calls.append(name)
        if name in fail:
            return httpx.Response(500, json={"message": "boom"})
        if name in malformed:
            return httpx.Response(200, json={"total": counts.get(name, 0)})
        return httpx.Response(200, json={"count": counts[name]})

    return httpx.MockTransport(handler)


@pytest.fixture
def make_client():
    """Factory for UsersApiClient instances bound to a mock transport."""

    def factory(transport: httpx.AsyncBaseTransport, token: str | None = None) -> UsersApiClient:
        return UsersApiClient(BASE_URL, token=token, transport=transport)

    return factory
