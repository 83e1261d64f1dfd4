import os

os.environ["DATABASE_URL"] = "sqlite://"

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from edutrack.database.database import SessionLocal, engine
from edutrack.main import app
from edutrack.models.base import Base
from edutrack.models.progress_models import DBAIQuestion, DBStudentProgress
from edutrack.models.users_models import DBUserProfile


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


_BASE_TIME = datetime(2024, 1, 1, 9, 0, 0)


def make_user(db, full_name, role="student", created_offset=0):
    user = DBUserProfile(
        email=f"{full_name.lower().replace(' ', '.')}@school.test",
        full_name=full_name,
        role=role,
        created_at=_BASE_TIME + timedelta(minutes=created_offset),
        updated_at=_BASE_TIME + timedelta(minutes=created_offset),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_ai_questions(db, topic, level, count, correct_option="A"):
    questions = []
    for i in range(count):
        q = DBAIQuestion(
            question_id=f"{topic[:3].lower()}-{level.lower()}-{i}",
            topic=topic,
            level=level,
            question_text=f"{topic} {level} question {i}",
            option_a="first",
            option_b="second",
            option_c="third",
            option_d="fourth",
            correct_option=correct_option,
            created_at=_BASE_TIME + timedelta(seconds=i),
        )
        db.add(q)
        questions.append(q)
    db.commit()
    return [q.question_id for q in questions]


def make_progress(db, student_id, topic, level, score, completed, minutes=0):
    row = DBStudentProgress(
        student_id=student_id,
        topic=topic,
        level=level,
        score=score,
        completed=completed,
        last_attempted=_BASE_TIME + timedelta(minutes=minutes),
    )
    db.add(row)
    db.commit()
    return row
