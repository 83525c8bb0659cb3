from datetime import datetime

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from pctcup.config import settings
from pctcup.dependencies import get_db, get_now
from pctcup.extensions import Base
from pctcup.main import app
from pctcup.models import (
    Attendance,
    Category,
    CategoryKey,
    Checkpoint,
    ClassType,
    Event,
    Requirement,
    Role,
    Team,
    User,
)
from pctcup.security import create_access_token

DATABASE_URL = "sqlite://"
engine = create_engine(DATABASE_URL, connect_args={"check_same_thread": False}, poolclass=StaticPool)

# Fixed clock: a few days before checkpoint 1 closes.
NOW = datetime(2026, 2, 5, 12, 0)


@pytest.fixture(name="session")
def session_fixture():
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    Base.metadata.drop_all(engine)


@pytest.fixture(name="clock")
def clock_fixture():
    class Clock:
        now = NOW

    return Clock


@pytest.fixture(name="client")
def client_fixture(session: Session, clock):
    def get_session_override():
        yield session

    app.dependency_overrides[get_db] = get_session_override
    app.dependency_overrides[get_now] = lambda: clock.now
    client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
    yield client
    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token(data={"sub": str(user.id)})
    return {"Cookie": f"{settings.AUTH_COOKIE_NAME}={token}"}


class Factory:
    """Tiny builder for test data; every call commits."""

    def __init__(self, session: Session):
        self.session = session
        self._events = 0

    def _save(self, obj):
        self.session.add(obj)
        self.session.commit()
        return obj

    def team(self, name: str) -> Team:
        return self._save(Team(name=name))

    def category(self, key: CategoryKey, name: str | None = None, color: str = "#000000") -> Category:
        return self._save(Category(key=key, name=name or key.value.title(), color=color))

    def checkpoint(self, number: int, end_date: datetime, start_date: datetime | None = None, label: str | None = None) -> Checkpoint:
        return self._save(
            Checkpoint(number=number, label=label or f"Checkpoint {number}", start_date=start_date, end_date=end_date)
        )

    def requirement(self, class_type: ClassType, category: Category, checkpoint: Checkpoint, required: int) -> Requirement:
        return self._save(
            Requirement(class_type=class_type, category_id=category.id, checkpoint_id=checkpoint.id, required=required)
        )

    def user(
        self,
        username: str,
        first_name: str = "Test",
        last_name: str | None = None,
        *,
        class_type: ClassType = ClassType.NON_GRAD,
        team: Team | None = None,
        role: Role = Role.BRO,
        password: str = "password",
    ) -> User:
        user = User(
            username=username,
            first_name=first_name,
            last_name=last_name or username.title(),
            class_type=class_type,
            team_id=team.id if team else None,
            role=role,
        )
        user.set_password(password)
        return self._save(user)

    def admin(self, username: str = "admin") -> User:
        return self.user(username, "Admin", "User", role=Role.ADMIN)

    def event(self, category: Category, starts_at: datetime, title: str | None = None, service_hours: int | None = None) -> Event:
        self._events += 1
        return self._save(
            Event(
                title=title or f"Event {self._events}",
                starts_at=starts_at,
                category_id=category.id,
                mandatory=category.key == CategoryKey.INTERNAL,
                service_hours=service_hours,
            )
        )

    def attend(self, event: Event, *users: User, present: bool = True) -> None:
        for u in users:
            self.session.add(Attendance(event_id=event.id, user_id=u.id, present=present))
        self.session.commit()


@pytest.fixture(name="make")
def make_fixture(session: Session) -> Factory:
    return Factory(session)


@pytest.fixture(name="cup")
def cup_fixture(make: Factory):
    """Two categories, checkpoint 1 ending 2026-02-11 and the non-grad thresholds for it."""
    chapter = make.category(CategoryKey.CHAPTER, "Chapter Meetings", "#EF4444")
    service = make.category(CategoryKey.SERVICE, "Community Service Hours", "#8B5CF6")
    cp1 = make.checkpoint(1, datetime(2026, 2, 11), start_date=datetime(2026, 1, 18))
    cp2 = make.checkpoint(2, datetime(2026, 3, 4), start_date=datetime(2026, 2, 12))
    make.requirement(ClassType.NON_GRAD, chapter, cp1, 1)
    make.requirement(ClassType.NON_GRAD, service, cp1, 3)
    make.requirement(ClassType.SENIOR, chapter, cp1, 0)
    make.requirement(ClassType.SENIOR, service, cp1, 1)

    class Cup:
        pass

    cup = Cup()
    cup.chapter, cup.service, cup.cp1, cup.cp2 = chapter, service, cp1, cp2
    return cup
