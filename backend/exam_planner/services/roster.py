"""Cohort resolution from pedagogical enrolments and alphabetical grouping rules."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

from sqlalchemy import func, literal, select
from sqlalchemy.orm import Session

from exam_planner.core.config import Settings, get_settings
from exam_planner.core.exceptions import ResourceNotFoundError
from exam_planner.models.enrollment import PedagogicalEnrollment
from exam_planner.models.grouping_rule import GroupingRule
from exam_planner.schemas.roster import RosterSelector, StudentRef

logger = logging.getLogger(__name__)

# Appended to range_end so "MZ" also covers "MZABI", "MZOURI", ...
RANGE_END_PADDING = "ZZZZZZ"


class RosterProvider(Protocol):
    def get_students(self, module_code: str, group_name: str | None = None) -> list[StudentRef]:
        ...


def student_sort_key(student: StudentRef) -> tuple[str, str, str]:
    return (student.nom.strip().upper(), student.prenom.strip().upper(), student.cod_etu)


def rule_covers(rule: GroupingRule, surname: str) -> bool:
    value = (surname or "").strip().upper()
    return rule.range_start.upper() <= value <= rule.range_end.upper() + RANGE_END_PADDING


def _distinct_students(rows: Iterable[PedagogicalEnrollment]) -> list[StudentRef]:
    students: dict[str, StudentRef] = {}
    for row in rows:
        students.setdefault(row.cod_etu, StudentRef(cod_etu=row.cod_etu, nom=row.nom, prenom=row.prenom))
    return sorted(students.values(), key=student_sort_key)


def build_cohort(provider: RosterProvider, selection: Iterable[RosterSelector]) -> list[StudentRef]:
    """Merge several module/group selections into one surname-ordered, de-duplicated cohort."""
    students: dict[str, StudentRef] = {}
    for selector in selection:
        for student in provider.get_students(selector.module_code, selector.group_name):
            students.setdefault(student.cod_etu, student)
    return sorted(students.values(), key=student_sort_key)


class DatabaseRosterProvider:
    def __init__(self, db: Session, settings: Settings | None = None):
        self.db = db
        self.settings = settings or get_settings()

    def is_wildcard(self, group_name: str | None) -> bool:
        if group_name is None or not group_name.strip():
            return True
        return group_name.strip().casefold() == self.settings.roster_wildcard_group.casefold()

    def _enrollments(self, module_pattern: str) -> list[PedagogicalEnrollment]:
        code = func.upper(func.trim(PedagogicalEnrollment.cod_elp))
        statement = (
            select(PedagogicalEnrollment)
            .where(code.like(module_pattern.strip().upper()))
            .where(PedagogicalEnrollment.academic_year == self.settings.academic_year)
        )
        suffix = self.settings.excluded_module_suffix.strip().upper()
        if suffix:
            statement = statement.where(~code.like(f"%{suffix}"))
        return list(self.db.execute(statement).scalars())

    def rules_for(self, module_code: str, group_name: str) -> list[GroupingRule]:
        statement = (
            select(GroupingRule)
            .where(GroupingRule.group_name == group_name.strip())
            .where(literal(module_code.strip().upper()).like(GroupingRule.module_pattern))
        )
        return list(self.db.execute(statement).scalars())

    def get_students(self, module_code: str, group_name: str | None = None) -> list[StudentRef]:
        rows = self._enrollments(module_code)
        if not self.is_wildcard(group_name):
            rules = self.rules_for(module_code, group_name)
            if not rules:
                raise ResourceNotFoundError("Grouping rule", f"{module_code}/{group_name}")
            rows = [row for row in rows if any(rule_covers(rule, row.nom) for rule in rules)]

        ordered = _distinct_students(rows)
        logger.debug("Roster %s/%s resolved to %d students", module_code, group_name, len(ordered))
        return ordered

    def students_for_rule(self, rule: GroupingRule) -> list[StudentRef]:
        return _distinct_students(row for row in self._enrollments(rule.module_pattern) if rule_covers(rule, row.nom))
