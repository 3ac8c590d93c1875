import os

os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("STORE_BACKEND", "memory")

from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from clstr.core.deps import CurrentUser, get_current_user, get_store
from clstr.core.notifications import Notifier
from clstr.core.permissions import Actor, normalize_role, permissions_for
from clstr.core.realtime import InvalidationRouter
from clstr.main import app
from clstr.repositories.memory import MemoryStore
from clstr.schemas.mentorship import MentorOfferUpdate, Profile
from clstr.services.mentorship import MentorshipService

COLLEGE = "uni.edu"


class FakeClock:
    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


def add_user(
    store: MemoryStore,
    role: str = "Student",
    name: str = "Test User",
    college_domain: str | None = COLLEGE,
) -> Actor:
    user_id = uuid4()
    store.add_profile(
        Profile(id=user_id, full_name=name, role=role, college_domain=college_domain)
    )
    return Actor(
        id=user_id,
        role=normalize_role(role),
        permissions=permissions_for(role),
        college_domain=college_domain,
    )


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def events() -> InvalidationRouter:
    return InvalidationRouter()


@pytest.fixture
def service(store, clock, events) -> MentorshipService:
    return MentorshipService(store, Notifier(store, clock), events=events, clock=clock)


@pytest.fixture
def mentee(store) -> Actor:
    return add_user(store, "Student", "Sam Student")


@pytest.fixture
def mentor(store, service) -> Actor:
    actor = add_user(store, "Alumni", "Alex Alumni")
    service.save_offer(actor, MentorOfferUpdate(available_slots=2))
    return actor


class Session:
    """Switches the authenticated user seen by the API."""

    def __init__(self) -> None:
        self.user_id: UUID | None = None

    def login(self, actor: Actor) -> None:
        self.user_id = actor.id

    def current_user(self) -> CurrentUser:
        return CurrentUser(id=self.user_id, email="test@example.com")


@pytest.fixture
def session() -> Session:
    return Session()


@pytest.fixture
def client(store, session):
    app.dependency_overrides[get_current_user] = session.current_user
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
