from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from exam_planner.api.deps import get_actor, get_db, get_roster, get_session_store, maintenance_lock
from exam_planner.models.enrollment import PedagogicalEnrollment
from exam_planner.schemas.exam_session import ExamSessionOut
from exam_planner.schemas.refresh import RefreshReport
from exam_planner.schemas.roster import StudentRef
from exam_planner.services.audit import log_activity
from exam_planner.services.exam_session_store import ExamSessionStore
from exam_planner.services.participant_refresh import ParticipantRefresh
from exam_planner.services.roster import DatabaseRosterProvider

router = APIRouter()


@router.get("/", response_model=list[ExamSessionOut])
def list_exams(
    from_date: date | None = Query(default=None),
    store: ExamSessionStore = Depends(get_session_store),
) -> list[ExamSessionOut]:
    return store.list(from_date=from_date)


@router.post("/refresh-participants", response_model=RefreshReport)
def refresh_participants(
    as_of: date | None = Query(default=None),
    actor: str | None = Depends(get_actor),
    store: ExamSessionStore = Depends(get_session_store),
    roster: DatabaseRosterProvider = Depends(get_roster),
) -> RefreshReport:
    with maintenance_lock:
        return ParticipantRefresh(store, roster).refresh(as_of or date.today(), actor=actor)


@router.get("/{session_id}", response_model=ExamSessionOut)
def get_exam(session_id: str, store: ExamSessionStore = Depends(get_session_store)) -> ExamSessionOut:
    return store.get(session_id)


@router.get("/{session_id}/students", response_model=list[StudentRef])
def exam_students(
    session_id: str,
    db: Session = Depends(get_db),
    store: ExamSessionStore = Depends(get_session_store),
) -> list[StudentRef]:
    codes = store.get(session_id).assigned_students
    names: dict[str, StudentRef] = {}
    if codes:
        rows = db.execute(select(PedagogicalEnrollment).where(PedagogicalEnrollment.cod_etu.in_(codes))).scalars()
        for row in rows:
            names.setdefault(row.cod_etu, StudentRef(cod_etu=row.cod_etu, nom=row.nom, prenom=row.prenom))
    # Seating order, even for students no longer in the enrolment table.
    return [names.get(code, StudentRef(cod_etu=code)) for code in codes]


@router.delete("/{session_id}")
def delete_exam(
    session_id: str,
    actor: str | None = Depends(get_actor),
    store: ExamSessionStore = Depends(get_session_store),
) -> dict:
    session = store.get(session_id)
    log_activity(
        store.db,
        actor=actor,
        action="exam_session.delete",
        entity_type="exam_session",
        entity_id=session.id,
        details={"module_code": session.module_code, "location_name": session.location_name},
    )
    store.delete(session_id)
    store.commit()
    return {"success": True}
