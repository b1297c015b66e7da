from fastapi import APIRouter, Depends

from exam_planner.api.deps import get_session_store, maintenance_lock
from exam_planner.schemas.conflict import ConflictCount, ConflictReport
from exam_planner.services.conflict_detector import ConflictDetector
from exam_planner.services.exam_session_store import ExamSessionStore

router = APIRouter()


@router.get("/", response_model=ConflictReport)
def detect_conflicts(store: ExamSessionStore = Depends(get_session_store)) -> ConflictReport:
    with maintenance_lock:
        return ConflictDetector(store.list()).report()


@router.get("/count", response_model=ConflictCount)
def count_conflicts(store: ExamSessionStore = Depends(get_session_store)) -> ConflictCount:
    with maintenance_lock:
        return ConflictCount(affected_students=ConflictDetector(store.list()).count())
