"""Pytest fixtures: file-backed SQLite database for fast, isolated tests."""
from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from eventboard.clock import FixedClock, get_clock
from eventboard.database import Base, get_db
from eventboard.main import app
from eventboard.services.stats_client import StatsServiceError, ViewStats, get_stats_client

# Import all models so they register with Base.metadata
from eventboard.models.user import User                                    # noqa: F401
from eventboard.models.category import Category                            # noqa: F401
from eventboard.models.event import Event, EventState                      # noqa: F401
from eventboard.models.participation_request import ParticipationRequest, RequestStatus
from eventboard.models.compilation import Compilation                      # noqa: F401
from eventboard.models.comment import Comment                              # noqa: F401

SQLITE_URL = "sqlite:///./test.db"
NOW = datetime(2026, 10, 19, 12, 0, 0)


class FakeStatsClient:
    """In-memory stand-in for the stats service that records every call."""

    def __init__(self):
        self.hits: list[tuple[str, str, str, datetime]] = []
        self.view_calls: list[dict] = []
        self.views: dict[str, int] = {}
        self.fail = False

    def record_hit(self, app_name, uri, ip, timestamp):
        if self.fail:
            raise StatsServiceError("stats service unavailable")
        self.hits.append((app_name, uri, ip, timestamp))

    def query_views(self, start, end, uris, unique_only=True):
        self.view_calls.append({"start": start, "end": end, "uris": list(uris), "unique_only": unique_only})
        if self.fail:
            raise StatsServiceError("stats service unavailable")
        return [ViewStats(app="eventboard-main-service", uri=uri, hits=self.views[uri])
                for uri in uris if uri in self.views]


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    # Enable WAL mode for better concurrency
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db(session_factory):
    """Yield a database session, closed after the test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def stats():
    return FakeStatsClient()


@pytest.fixture(scope="function")
def client(session_factory, clock, stats):
    """FastAPI TestClient with database, clock and stats dependencies overridden."""

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_stats_client] = lambda: stats
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers: build rows directly through the session
# ---------------------------------------------------------------------------
def make_user(db, name: str = "User") -> User:
    user = User(name=name, email=f"{name.lower().replace(' ', '.')}@example.com")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_category(db, name: str = "Concerts") -> Category:
    category = Category(name=name)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def make_event(
    db,
    initiator: User,
    category: Category,
    title: str = "Event",
    state: EventState = EventState.published,
    participant_limit: int = 0,
    request_moderation: bool = True,
    paid: bool = False,
    event_date: datetime = NOW + timedelta(days=3),
    annotation: str = "An annotation long enough",
    description: str = "A description of the event",
) -> Event:
    """Insert an event in any state, bypassing the lifecycle rules."""
    event_row = Event(
        title=title,
        annotation=annotation,
        description=description,
        category_id=category.id,
        initiator_id=initiator.id,
        location_lat=55.75,
        location_lon=37.62,
        paid=paid,
        participant_limit=participant_limit,
        request_moderation=request_moderation,
        created_on=NOW - timedelta(days=1),
        event_date=event_date,
        published_on=NOW if state == EventState.published else None,
        state=state,
        version=1,
    )
    db.add(event_row)
    db.commit()
    db.refresh(event_row)
    return event_row


def make_request(db, requester: User, event_row: Event, status=None) -> ParticipationRequest:
    request = ParticipationRequest(
        requester_id=requester.id,
        event_id=event_row.id,
        created=NOW,
        status=status or RequestStatus.pending,
    )
    db.add(request)
    db.commit()
    db.refresh(request)
    return request
