import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# The app engine and the notification subscriber must share the test database
test_db_url = os.environ.get("TEST_DATABASE_URL") or "sqlite:///./test.db"
os.environ["DATABASE_URL"] = test_db_url
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
import uuid
from datetime import datetime, timedelta, timezone
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from app.core.constants import AssessmentStatusEnum, OrgRoleEnum
from app.core.database import Base, engine
from app.core.security import create_access_token
from app.crud.organization import organization as crud_organization
from app.crud.question import question as crud_question
from app.crud.user import user as crud_user
from app.models.assessment import Assessment
from app.models.deck import Deck
from app.models.question import Question
from app.utils import deps as deps_utils
import main

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FrozenClock:
    """Stands in for the server wall clock so deadlines can be crossed on demand."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture(scope="session")
def database_engine():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()
    if test_db_url.startswith("sqlite:///./") and os.path.exists("./test.db"):
        os.remove("./test.db")

@pytest.fixture(scope="function")
def db_session(database_engine):
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()

@pytest.fixture(scope="function")
def other_db_session(database_engine):
    """A second connection, for simulating a competing request."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()

@pytest.fixture(scope="function")
def client(db_session):
    main.app.dependency_overrides[deps_utils.get_db] = lambda: db_session
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()

@pytest.fixture
def frozen_clock(monkeypatch):
    clock = FrozenClock(datetime.now(timezone.utc).replace(microsecond=0))
    monkeypatch.setattr("app.utils.clock.utcnow", clock)
    return clock

@pytest.fixture
def user_factory(db_session):
    def _user_factory(full_name="Test Candidate", is_active=True):
        user_data = {
            "email": f"user-{uuid.uuid4().hex[:12]}@test.com",
            "full_name": full_name,
            "is_active": is_active,
        }
        return crud_user.create(db_session, obj_in=user_data)
    return _user_factory

@pytest.fixture
def org_factory(db_session):
    def _org_factory(name="Test Organization"):
        return crud_organization.create(
            db_session, obj_in={"name": name, "slug": f"org-{uuid.uuid4().hex[:12]}"}
        )
    return _org_factory

@pytest.fixture
def member_factory(db_session, user_factory):
    def _member_factory(org, role=OrgRoleEnum.CREATOR, full_name="Test Manager"):
        user = user_factory(full_name=full_name)
        crud_organization.add_member(db_session, org_id=org.id, user_id=user.id, role=role)
        return user
    return _member_factory

@pytest.fixture
def assessment_factory(db_session, org_factory):
    """Builds a deck whose questions have the given correct option indexes, plus an assessment over it."""
    def _assessment_factory(
        org=None,
        correct_indexes=(0, 1, 2, 3),
        question_count=None,
        time_limit_minutes=30,
        pass_score=70,
        status=AssessmentStatusEnum.PUBLISHED,
        shuffle_questions=False,
        **extra,
    ):
        org = org or org_factory()
        deck = Deck(org_id=org.id, title=f"Deck {uuid.uuid4().hex[:6]}")
        db_session.add(deck)
        db_session.flush()
        for position, correct_index in enumerate(correct_indexes):
            db_session.add(Question(
                deck_id=deck.id,
                stem=f"Question {position + 1}?",
                options=["A", "B", "C", "D"],
                correct_index=correct_index,
                position=position,
            ))
        assessment = Assessment(
            org_id=org.id,
            deck_id=deck.id,
            title=f"Assessment {uuid.uuid4().hex[:6]}",
            question_count=question_count if question_count is not None else len(correct_indexes),
            time_limit_minutes=time_limit_minutes,
            pass_score=pass_score,
            status=status,
            shuffle_questions=shuffle_questions,
            **extra,
        )
        db_session.add(assessment)
        db_session.commit()
        db_session.refresh(assessment)
        return assessment
    return _assessment_factory

@pytest.fixture
def answer_key(db_session):
    def _answer_key(assessment):
        return {q.id: q.correct_index for q in crud_question.get_by_deck(db_session, deck_id=assessment.deck_id)}
    return _answer_key

@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}
    return _auth_headers
