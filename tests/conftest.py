import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base
from db_models import ExamDB, StudentDB, VenueDB
from models import Student, Venue


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def add_students(db):
    def _add(*specs):
        rows = []
        for roll, dept in specs:
            row = StudentDB(roll_number=roll, stu_name=f"Student {roll}", dept=dept)
            db.add(row)
            rows.append(row)
        db.commit()
        return rows
    return _add


@pytest.fixture
def add_venue(db):
    def _add(name, capacity, is_available=True):
        venue = VenueDB(name=name, block="Main", capacity=capacity, exam_type="All", is_available=is_available)
        db.add(venue)
        db.commit()
        return venue
    return _add


@pytest.fixture
def add_exam(db):
    def _add(name="Mid Term", department=None):
        exam = ExamDB(exam_name=name, department=department)
        db.add(exam)
        db.commit()
        return exam
    return _add


def make_students(*specs):
    return [Student(i, roll, dept) for i, (roll, dept) in enumerate(specs, start=1)]


def make_venues(*specs):
    return [Venue(i, name, capacity) for i, (name, capacity) in enumerate(specs, start=1)]


@pytest.fixture
def client(session_factory, tmp_path, monkeypatch):
    from fastapi.testclient import TestClient

    import main_api
    from database import get_db

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    monkeypatch.setattr(main_api, "EXPORT_DIR", tmp_path / "exports")
    main_api.app.dependency_overrides[get_db] = override_get_db
    with TestClient(main_api.app) as c:
        yield c
    main_api.app.dependency_overrides.clear()
