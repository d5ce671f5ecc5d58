"""
StudyBuddy - Test Configuration and Fixtures
"""
import json
import os
from datetime import datetime, timedelta
from typing import List, Optional

import pytest
from faker import Faker
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set testing environment before the app reads its settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["GROQ_API_KEY"] = ""

from studybuddy.main import app
from studybuddy.models.db import Base, get_db
from studybuddy.models.entities import Assignment, Subject, User
from studybuddy.routers.study_plans import get_completion_client

fake = Faker()


class FakeCompletionClient:
    """Stands in for the Groq client; returns a canned reply or raises."""

    def __init__(self, response: str = "", error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.calls: List[dict] = []

    def complete(self, system: str, prompt: str) -> str:
        self.calls.append({"system": system, "prompt": prompt})
        if self.error is not None:
            raise self.error
        return self.response


def plan_response(*sessions: dict, **overrides) -> str:
    body = {
        "title": "Plan",
        "startDate": "2024-01-01",
        "endDate": "2024-01-03",
        "sessions": list(sessions),
        "aiGeneratedInsights": {
            "summary": "...",
            "recommendations": [],
            "estimatedTotalHours": 4,
            "priorityFocus": "Essay",
        },
    }
    body.update(overrides)
    return json.dumps(body)


def session_entry(title: str = "Essay", subject: str = "English", **overrides) -> dict:
    entry = {
        "assignmentTitle": title,
        "subjectName": subject,
        "date": "2024-01-01",
        "startTime": "9:00 AM",
        "endTime": "10:30 AM",
        "duration": 90,
        "topic": "Outline",
        "description": "",
        "tips": ["Use an outline"],
    }
    entry.update(overrides)
    return entry


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture
def fake_llm() -> FakeCompletionClient:
    return FakeCompletionClient(response=plan_response(session_entry()))


@pytest.fixture
def client(session_factory, fake_llm):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_completion_client] = lambda: fake_llm
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _register(client: TestClient) -> dict:
    resp = client.post("/auth/register", json={"name": fake.name(), "email": fake.unique.email()})
    assert resp.status_code == 201
    return {"X-User-Id": str(resp.json()["id"])}


@pytest.fixture
def auth_headers(client) -> dict:
    return _register(client)


@pytest.fixture
def other_headers(client) -> dict:
    return _register(client)


def create_subject(client: TestClient, headers: dict, name: str = "English", **fields) -> dict:
    resp = client.post("/subjects", json={"name": name, **fields}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_assignment(client: TestClient, headers: dict, subject_id: int, title: str = "Essay", **fields) -> dict:
    body = {
        "subject_id": subject_id,
        "title": title,
        "due_date": (datetime.now() + timedelta(days=3)).isoformat(),
        "priority": "high",
        "estimated_hours": 4,
    }
    body.update(fields)
    resp = client.post("/assignments", json=body, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


# ---------------------------------------------------------------------------
# Direct ORM helpers for service-level tests
# ---------------------------------------------------------------------------

@pytest.fixture
def test_user(db_session) -> User:
    user = User(name=fake.name(), email=fake.unique.email())
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def add_assignment(db_session, user: User, subject_name: str = "English", title: str = "Essay",
                   **fields) -> Assignment:
    subject = Subject(user_id=user.id, name=subject_name)
    db_session.add(subject)
    db_session.flush()
    a = Assignment(
        user_id=user.id,
        subject_id=subject.id,
        title=title,
        due_date=fields.pop("due_date", datetime.now() + timedelta(days=3)),
        priority=fields.pop("priority", "high"),
        estimated_hours=fields.pop("estimated_hours", 4),
        **fields,
    )
    db_session.add(a)
    db_session.commit()
    db_session.refresh(a)
    return a

