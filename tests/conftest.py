"""Shared fixtures: a throwaway SQLite database per test plus seed helpers."""
import itertools

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from lms_backend.core.database import create_db_and_tables
from lms_backend.models import CatalogStatus, Course, User, Video

_user_counter = itertools.count(1)


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'lms_test.db'}",
        connect_args={"check_same_thread": False},
    )
    create_db_and_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    def _make_user(display_name="Ada Lovelace", email=None, role="Learner"):
        n = next(_user_counter)
        user = User(
            firebase_uid=f"uid-{n}",
            email=email or f"learner{n}@example.com",
            display_name=display_name,
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_course(db):
    def _make_course(title="Intro to Investing", n_videos=3, durations=None, status=CatalogStatus.ACTIVE):
        course = Course(title=title, status=status)
        db.add(course)
        db.flush()
        durations = durations or [100.0] * n_videos
        for order, duration in enumerate(durations, start=1):
            db.add(Video(course_id=course.id, title=f"Lesson {order}", video_order=order, duration_seconds=duration))
        db.commit()
        db.refresh(course)
        return course

    return _make_course
