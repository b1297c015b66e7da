"""Resynchronise the seated students of upcoming sessions with current enrolment.

Rooms, times and seat counts are left alone. Students who are still enrolled keep
their session, withdrawals free their seat, and new students only take free planned
seats. Sessions left short and students left without a seat are reported for manual
re-planning.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date

from exam_planner.core.exceptions import ResourceNotFoundError
from exam_planner.models.exam_session import ExamSession
from exam_planner.schemas.refresh import RefreshMismatch, RefreshReport, RefreshSkip, RefreshUnseated
from exam_planner.schemas.roster import RosterSelector
from exam_planner.services.audit import log_activity
from exam_planner.services.exam_session_store import ExamSessionStore
from exam_planner.services.labels import split_label
from exam_planner.services.roster import RosterProvider, build_cohort

logger = logging.getLogger(__name__)


def session_selection(session: ExamSession) -> list[RosterSelector]:
    if session.selection:
        return [RosterSelector.model_validate(item) for item in session.selection]
    # Sessions without a stored selection fall back to their merge labels.
    groups = split_label(session.group_name) or [None]
    return [
        RosterSelector(module_code=module_code, group_name=group)
        for module_code in split_label(session.module_code)
        for group in groups
    ]


def sibling_key(session: ExamSession) -> tuple:
    if session.plan_id:
        return ("plan", session.plan_id)
    return ("session", session.id)


def reconcile(
    current: list[list[str]],
    codes: list[str],
    planned_counts: list[int],
) -> tuple[list[list[str]], list[str]]:
    """Match the sessions' current members against the enrolled ``codes``.

    Returns the new member list of every session, in cohort order, and the enrolled
    students no session has a planned seat for.
    """
    rank = {code: position for position, code in enumerate(codes)}
    seated: set[str] = set()
    members: list[list[str]] = []
    for students in current:
        kept = [code for code in dict.fromkeys(students) if code in rank and code not in seated]
        seated.update(kept)
        members.append(kept)

    waiting = [code for code in codes if code not in seated]
    for kept, planned in zip(members, planned_counts):
        spare = max(0, planned - len(kept))
        kept.extend(waiting[:spare])
        waiting = waiting[spare:]
        kept.sort(key=rank.__getitem__)
    return members, waiting


class ParticipantRefresh:
    def __init__(self, store: ExamSessionStore, roster: RosterProvider):
        self.store = store
        self.roster = roster

    def refresh(self, as_of: date, *, actor: str | None = None) -> RefreshReport:
        report = RefreshReport(as_of=as_of)
        groups: dict[tuple, list[ExamSession]] = defaultdict(list)
        for session in self.store.list(from_date=as_of):
            groups[sibling_key(session)].append(session)

        for siblings in groups.values():
            siblings.sort(key=lambda item: (item.slot_index, item.location_name))
            report.scanned_count += len(siblings)
            try:
                cohort = build_cohort(self.roster, session_selection(siblings[0]))
            except ResourceNotFoundError as exc:
                logger.warning("Skipping refresh of %d session(s): %s", len(siblings), exc.message)
                report.skipped.extend(RefreshSkip(session_id=session.id, reason=exc.message) for session in siblings)
                continue

            codes = [student.cod_etu for student in cohort]
            members, waiting = reconcile(
                [session.assigned_students for session in siblings],
                codes,
                [session.planned_count for session in siblings],
            )
            for session, new_codes in zip(siblings, members):
                if new_codes != session.assigned_students:
                    self.store.replace_assigned_students(session.id, new_codes)
                    report.updated_count += 1
                else:
                    report.unchanged_count += 1
                if len(new_codes) != session.planned_count:
                    logger.warning(
                        "Session %s (%s, %s) now has %d students, planned for %d",
                        session.id,
                        session.module_code,
                        session.location_name,
                        len(new_codes),
                        session.planned_count,
                    )
                    report.mismatches.append(
                        RefreshMismatch(
                            session_id=session.id,
                            module_code=session.module_code,
                            group_name=session.group_name,
                            location_name=session.location_name,
                            planned_count=session.planned_count,
                            current_count=len(new_codes),
                        )
                    )
            if waiting:
                logger.warning(
                    "%d student(s) of %s / %s have no planned seat: %s",
                    len(waiting),
                    siblings[0].module_code,
                    siblings[0].group_name,
                    ", ".join(waiting),
                )
                report.unseated.append(
                    RefreshUnseated(
                        module_code=siblings[0].module_code,
                        group_name=siblings[0].group_name,
                        session_ids=[session.id for session in siblings],
                        students=waiting,
                    )
                )

        log_activity(
            self.store.db,
            actor=actor,
            action="exam_sessions.refresh",
            entity_type="exam_session",
            details={
                "as_of": as_of.isoformat(),
                "updated": report.updated_count,
                "mismatches": len(report.mismatches),
                "unseated": sum(len(item.students) for item in report.unseated),
            },
        )
        self.store.commit()
        logger.info(
            "Refreshed participants as of %s: %d scanned, %d updated, %d mismatches",
            as_of,
            report.scanned_count,
            report.updated_count,
            len(report.mismatches),
        )
        return report
