import threading
from collections.abc import Generator

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from exam_planner.db.session import SessionLocal
from exam_planner.services.exam_session_store import ExamSessionStore
from exam_planner.services.location_registry import LocationRegistry
from exam_planner.services.roster import DatabaseRosterProvider

# Conflict scans and participant refreshes read and rewrite the same assignments.
maintenance_lock = threading.Lock()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_actor(x_actor: str | None = Header(default=None)) -> str | None:
    """Opaque caller identity forwarded by the host application, kept for the audit trail."""
    if x_actor is None:
        return None
    return x_actor.strip()[:200] or None


def get_location_registry(db: Session = Depends(get_db)) -> LocationRegistry:
    return LocationRegistry(db)


def get_session_store(db: Session = Depends(get_db)) -> ExamSessionStore:
    return ExamSessionStore(db)


def get_roster(db: Session = Depends(get_db)) -> DatabaseRosterProvider:
    return DatabaseRosterProvider(db)
