import os
import tempfile
from pathlib import Path

# The app's own engine is only used by the startup schema check; point it at a throwaway file.
_BOOTSTRAP_DIR = Path(tempfile.mkdtemp(prefix="exam-planner-tests-"))
os.environ.setdefault("DATABASE_URL", f"sqlite+pysqlite:///{_BOOTSTRAP_DIR / 'bootstrap.db'}")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from exam_planner.api.deps import get_db  # noqa: E402
from exam_planner.db.base import Base  # noqa: E402
from exam_planner.main import app  # noqa: E402
from exam_planner.models.enrollment import PedagogicalEnrollment  # noqa: E402
from exam_planner.models.location import Location, LocationType  # noqa: E402


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def add_locations(db):
    def _add(*entries: tuple[str, int]) -> list[Location]:
        locations = [Location(name=name, capacity=capacity, type=LocationType.amphi) for name, capacity in entries]
        db.add_all(locations)
        db.commit()
        return locations

    return _add


@pytest.fixture()
def enroll(db):
    def _enroll(cod_elp: str, students: list[tuple[str, str, str]], academic_year: str = "2025", lib_elp: str | None = None):
        db.add_all(
            PedagogicalEnrollment(
                cod_etu=cod_etu,
                cod_elp=cod_elp,
                lib_elp=lib_elp or cod_elp,
                nom=nom,
                prenom=prenom,
                academic_year=academic_year,
            )
            for cod_etu, nom, prenom in students
        )
        db.commit()

    return _enroll
