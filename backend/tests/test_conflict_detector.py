from datetime import date, time
from itertools import combinations
from types import SimpleNamespace

from exam_planner.services.conflict_detector import ConflictDetector

EXAM_DAY = date(2026, 6, 10)


def session(session_id, start, end, students, *, day=EXAM_DAY, module="INF101", location="Amphi 1"):
    return SimpleNamespace(
        id=session_id,
        module_code=module,
        exam_date=day,
        start_time=time(*start),
        end_time=time(*end),
        location_name=location,
        assigned_students=list(students),
    )


def test_touching_sessions_do_not_conflict():
    sessions = [
        session("s1", (9, 0), (10, 0), ["E1", "E2"]),
        session("s2", (10, 0), (11, 0), ["E1", "E2"], module="MAT102"),
    ]

    detector = ConflictDetector(sessions)

    assert detector.detect() == []
    assert detector.count() == 0


def test_overlapping_sessions_conflict_for_each_shared_student():
    sessions = [
        session("s1", (9, 0), (10, 30), ["E1", "E2", "E3"], location="Amphi 1"),
        session("s2", (10, 0), (11, 0), ["E2", "E3", "E4"], module="MAT102", location="Salle 4"),
    ]

    conflicts = ConflictDetector(sessions).detect()

    assert [conflict.student for conflict in conflicts] == ["E2", "E3"]
    first = conflicts[0]
    assert first.exam_date == EXAM_DAY
    assert (first.first.session_id, first.first.module, first.first.location) == ("s1", "INF101", "Amphi 1")
    assert (first.second.session_id, first.second.module, first.second.location) == ("s2", "MAT102", "Salle 4")
    assert first.second.start_time == time(10, 0)


def test_sessions_on_different_dates_do_not_conflict():
    sessions = [
        session("s1", (9, 0), (11, 0), ["E1"]),
        session("s2", (9, 0), (11, 0), ["E1"], day=date(2026, 6, 11)),
    ]

    assert ConflictDetector(sessions).detect() == []


def test_contained_session_conflicts_even_after_a_short_one():
    # s2 ends early, but the long s1 still overlaps s3.
    sessions = [
        session("s1", (8, 0), (12, 0), ["E1"]),
        session("s2", (8, 30), (9, 0), ["E9"]),
        session("s3", (11, 0), (11, 30), ["E1"]),
    ]

    conflicts = ConflictDetector(sessions).detect()

    assert [(c.first.session_id, c.second.session_id) for c in conflicts] == [("s1", "s3")]


def test_count_deduplicates_students_across_conflicts():
    sessions = [
        session("s1", (9, 0), (11, 0), ["E1", "E2"]),
        session("s2", (10, 0), (12, 0), ["E1"]),
        session("s3", (10, 30), (11, 30), ["E1", "E2"]),
    ]

    detector = ConflictDetector(sessions)
    report = detector.report()

    assert report.conflict_count == 4
    assert detector.count() == 2
    assert report.affected_students == 2


def test_sweep_matches_pairwise_comparison():
    sessions = [
        session("a", (8, 0), (9, 30), ["E1", "E2", "E3"]),
        session("b", (9, 0), (10, 0), ["E2", "E5"]),
        session("c", (9, 30), (12, 0), ["E1", "E3", "E5"]),
        session("d", (10, 0), (10, 45), ["E5", "E6"]),
        session("e", (12, 0), (13, 0), ["E1", "E6"]),
        session("f", (7, 0), (14, 0), ["E6"]),
        session("g", (9, 0), (10, 0), ["E2"], day=date(2026, 6, 12)),
    ]

    expected = set()
    for first, second in combinations(sessions, 2):
        if first.exam_date != second.exam_date:
            continue
        if first.start_time < second.end_time and second.start_time < first.end_time:
            for student in set(first.assigned_students) & set(second.assigned_students):
                expected.add((student, frozenset({first.id, second.id})))

    found = {
        (conflict.student, frozenset({conflict.first.session_id, conflict.second.session_id}))
        for conflict in ConflictDetector(sessions).detect()
    }

    assert found == expected
    assert found  # the fixture does contain clashes
