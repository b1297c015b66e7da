from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from exam_planner.core.exceptions import DuplicateLocationError, ResourceNotFoundError, ValidationError
from exam_planner.models.exam_session import ExamAssignment, ExamSession
from exam_planner.schemas.exam_session import ExamSessionCreate
from exam_planner.services.location_registry import LocationRegistry

logger = logging.getLogger(__name__)


def _ordered_unique(codes: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for code in codes:
        cleaned = (code or "").strip()
        if cleaned and cleaned not in seen:
            seen.add(cleaned)
            result.append(cleaned)
    return result


class ExamSessionStore:
    """Persistence for committed exam sessions.

    Writes are flushed, not committed: callers decide the transaction boundary
    through commit()/rollback() so a whole plan lands or none of it does.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, data: ExamSessionCreate) -> ExamSession:
        if data.start_time >= data.end_time:
            raise ValidationError(
                "Exam start time must be before its end time",
                details={"start_time": data.start_time.isoformat(), "end_time": data.end_time.isoformat()},
            )
        location = LocationRegistry(self.db).get_by_name(data.location_name)
        if location is None:
            raise ValidationError(
                f"Unknown location {data.location_name}",
                details={"location_name": data.location_name},
            )
        location_name = location.name
        taken = self.db.execute(
            select(ExamSession.id).where(
                ExamSession.location_name == location_name,
                ExamSession.exam_date == data.exam_date,
                ExamSession.start_time == data.start_time,
                ExamSession.end_time == data.end_time,
            )
        ).first()
        if taken is not None:
            raise DuplicateLocationError(
                [location_name],
                message=f"Location {location_name} already hosts an exam in this time slot",
            )

        students = _ordered_unique(data.assigned_students)
        session = ExamSession(
            module_code=data.module_code,
            module_name=data.module_name,
            group_name=data.group_name,
            selection=list(data.selection),
            exam_date=data.exam_date,
            start_time=data.start_time,
            end_time=data.end_time,
            location_name=location_name,
            professor_name=data.professor_name or None,
            planned_count=data.planned_count if data.planned_count is not None else len(students),
            plan_id=data.plan_id,
            slot_index=data.slot_index,
            created_by=data.created_by,
        )
        session.assignments = [
            ExamAssignment(cod_etu=code, position=position) for position, code in enumerate(students)
        ]
        self.db.add(session)
        try:
            self.db.flush()
        except IntegrityError as exc:
            # A concurrent commit grabbed the same location and time slot.
            self.db.rollback()
            raise DuplicateLocationError(
                [location_name],
                message=f"Location {location_name} already hosts an exam in this time slot",
            ) from exc
        return session

    def list(self, from_date: date | None = None) -> list[ExamSession]:
        statement = select(ExamSession).options(selectinload(ExamSession.assignments))
        if from_date is not None:
            statement = statement.where(ExamSession.exam_date >= from_date)
        statement = statement.order_by(
            ExamSession.exam_date,
            ExamSession.start_time,
            ExamSession.location_name,
        )
        return list(self.db.execute(statement).scalars())

    def get(self, session_id: str) -> ExamSession:
        session = self.db.get(ExamSession, session_id)
        if session is None:
            raise ResourceNotFoundError("Exam session", session_id)
        return session

    def delete(self, session_id: str) -> None:
        session = self.get(session_id)
        self.db.delete(session)
        self.db.flush()

    def replace_assigned_students(self, session_id: str, codes: Iterable[str]) -> ExamSession:
        session = self.get(session_id)
        students = _ordered_unique(codes)
        # Old rows must be gone before re-inserting the same (exam_id, cod_etu) pairs.
        session.assignments.clear()
        self.db.flush()
        session.assignments.extend(
            ExamAssignment(cod_etu=code, position=position) for position, code in enumerate(students)
        )
        self.db.flush()
        return session

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
