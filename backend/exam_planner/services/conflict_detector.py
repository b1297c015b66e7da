from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Iterator

from exam_planner.models.exam_session import ExamSession
from exam_planner.schemas.conflict import Conflict, ConflictReport, ConflictSide

logger = logging.getLogger(__name__)


def overlaps(first: ExamSession, second: ExamSession) -> bool:
    # Half-open intervals: a session ending at 10:00 does not clash with one starting at 10:00.
    return first.exam_date == second.exam_date and first.start_time < second.end_time and second.start_time < first.end_time


def _side(session: ExamSession) -> ConflictSide:
    return ConflictSide(
        session_id=str(session.id),
        module=session.module_code,
        start_time=session.start_time,
        end_time=session.end_time,
        location=session.location_name,
    )


class ConflictDetector:
    """Finds students seated in two sessions that overlap in time on the same day."""

    def __init__(self, sessions: Iterable[ExamSession]):
        self.sessions = list(sessions)

    def _shared_students(self) -> Iterator[tuple[ExamSession, ExamSession, set[str]]]:
        by_date: dict = defaultdict(list)
        for session in self.sessions:
            by_date[session.exam_date].append(session)

        for exam_date in sorted(by_date):
            day = sorted(by_date[exam_date], key=lambda item: (item.start_time, item.end_time, str(item.id)))
            students = [set(session.assigned_students) for session in day]
            for index, first in enumerate(day):
                for offset, second in enumerate(day[index + 1 :], start=index + 1):
                    # Sorted by start: nothing further down can overlap once one starts after we end.
                    if second.start_time >= first.end_time:
                        break
                    if not overlaps(first, second):
                        continue
                    shared = students[index] & students[offset]
                    if shared:
                        yield first, second, shared

    def detect(self) -> list[Conflict]:
        conflicts = [
            Conflict(student=student, exam_date=first.exam_date, first=_side(first), second=_side(second))
            for first, second, shared in self._shared_students()
            for student in shared
        ]
        conflicts.sort(
            key=lambda item: (
                item.exam_date,
                item.student,
                item.first.start_time,
                item.second.start_time,
                item.first.session_id,
                item.second.session_id,
            )
        )
        logger.info("Conflict scan over %d sessions found %d conflicts", len(self.sessions), len(conflicts))
        return conflicts

    def count(self) -> int:
        affected: set[str] = set()
        for _, _, shared in self._shared_students():
            affected.update(shared)
        return len(affected)

    def report(self) -> ConflictReport:
        conflicts = self.detect()
        return ConflictReport(
            conflicts=conflicts,
            conflict_count=len(conflicts),
            affected_students=len({conflict.student for conflict in conflicts}),
        )
