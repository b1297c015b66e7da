from datetime import date, time

from exam_planner.core.exceptions import ResourceNotFoundError
from exam_planner.schemas.exam_session import ExamSessionCreate
from exam_planner.schemas.location import LocationRef
from exam_planner.schemas.planning import PlannedSlot, PlanningPlan
from exam_planner.schemas.roster import RosterSelector, StudentRef
from exam_planner.services import allocation_planner
from exam_planner.services.exam_session_store import ExamSessionStore
from exam_planner.services.location_registry import LocationRegistry
from exam_planner.services.participant_refresh import ParticipantRefresh, reconcile, session_selection

AS_OF = date(2026, 6, 1)


class FakeRoster:
    def __init__(self, rosters):
        self.rosters = rosters
        self.calls = []

    def get_students(self, module_code, group_name=None):
        self.calls.append((module_code, group_name))
        if (module_code, group_name) not in self.rosters:
            raise ResourceNotFoundError("Grouping rule", f"{module_code}/{group_name}")
        return self.rosters[(module_code, group_name)]


def students(*codes):
    return [StudentRef(cod_etu=code, nom=code) for code in codes]


def commit(db, cohort, counts, exam_date=date(2026, 6, 10), module_code="INF101", group_name="G1"):
    refs = [LocationRef.model_validate(location) for location in LocationRegistry(db).list()]
    plan = PlanningPlan(
        cohort_size=len(cohort),
        slots=[PlannedSlot(location=ref, count=count) for ref, count in zip(refs, counts)],
        selection=[RosterSelector(module_code=module_code, group_name=group_name)],
        exam_date=exam_date,
        start_time=time(9, 0),
        end_time=time(11, 0),
    )
    return allocation_planner.commit_plan(plan, cohort, ExamSessionStore(db))


def test_reconcile_keeps_students_in_their_session():
    members, waiting = reconcile([["a", "b", "c"], ["d", "e"]], ["a", "c", "d", "e", "x", "y"], [3, 2])

    # "b" withdrew, "x" takes the freed seat and "y" has none left.
    assert members == [["a", "c", "x"], ["d", "e"]]
    assert waiting == ["y"]


def test_reconcile_never_exceeds_planned_seats():
    members, waiting = reconcile([[], ["b"]], ["a", "b", "c", "d"], [2, 1])

    assert members == [["a", "c"], ["b"]]
    assert waiting == ["d"]


def test_unchanged_enrolment_leaves_sessions_alone(db, add_locations):
    add_locations(("Amphi 1", 3), ("Amphi 2", 3))
    cohort = students("E1", "E2", "E3", "E4", "E5")
    commit(db, cohort, [3, 2])
    store = ExamSessionStore(db)

    report = ParticipantRefresh(store, FakeRoster({("INF101", "G1"): cohort})).refresh(AS_OF)

    assert (report.scanned_count, report.updated_count, report.unchanged_count) == (2, 0, 2)
    assert report.mismatches == []


def test_late_enrolment_beyond_planned_seats_is_reported_not_seated(db, add_locations):
    add_locations(("Amphi 1", 3), ("Amphi 2", 2))
    commit(db, students("E1", "E2", "E3", "E4", "E5"), [3, 2])
    store = ExamSessionStore(db)
    roster = FakeRoster({("INF101", "G1"): students("E0", "E1", "E2", "E3", "E4", "E5", "E6", "E7")})

    report = ParticipantRefresh(store, roster).refresh(AS_OF, actor="admin")

    first, second = store.list()
    assert first.assigned_students == ["E1", "E2", "E3"]
    assert second.assigned_students == ["E4", "E5"]
    assert (first.planned_count, second.planned_count) == (3, 2)
    assert report.updated_count == 0
    assert report.mismatches == []
    assert [item.students for item in report.unseated] == [["E0", "E6", "E7"]]
    assert report.unseated[0].session_ids == [first.id, second.id]


def test_withdrawal_does_not_move_students_between_rooms(db, add_locations):
    add_locations(("Amphi 1", 3), ("Amphi 2", 3))
    commit(db, students("E1", "E2", "E3", "E4", "E5", "E6"), [3, 3])
    store = ExamSessionStore(db)
    roster = FakeRoster({("INF101", "G1"): students("E1", "E3", "E4", "E5", "E6")})

    report = ParticipantRefresh(store, roster).refresh(AS_OF)

    assert [(s.location_name, s.assigned_students) for s in store.list()] == [
        ("Amphi 1", ["E1", "E3"]),
        ("Amphi 2", ["E4", "E5", "E6"]),
    ]
    assert [(m.location_name, m.planned_count, m.current_count) for m in report.mismatches] == [("Amphi 1", 3, 2)]
    assert report.unseated == []


def test_new_student_takes_seat_freed_by_withdrawal(db, add_locations):
    add_locations(("Amphi 1", 3), ("Amphi 2", 3))
    commit(db, students("E1", "E2", "E3", "E4", "E5", "E6"), [3, 3])
    store = ExamSessionStore(db)
    roster = FakeRoster({("INF101", "G1"): students("E1", "E3", "E4", "E5", "E6", "E7")})

    report = ParticipantRefresh(store, roster).refresh(AS_OF)

    assert [s.assigned_students for s in store.list()] == [["E1", "E3", "E7"], ["E4", "E5", "E6"]]
    assert report.updated_count == 1
    assert report.mismatches == []


def test_deleted_sibling_students_are_reported_not_reseated(db, add_locations):
    add_locations(("Amphi 1", 3), ("Amphi 2", 3))
    cohort = students("E1", "E2", "E3", "E4", "E5", "E6")
    _, second = commit(db, cohort, [3, 3])
    store = ExamSessionStore(db)
    store.delete(second.id)
    store.commit()

    report = ParticipantRefresh(store, FakeRoster({("INF101", "G1"): cohort})).refresh(AS_OF)

    (remaining,) = store.list()
    assert remaining.assigned_students == ["E1", "E2", "E3"]
    assert [item.students for item in report.unseated] == [["E4", "E5", "E6"]]


def test_withdrawal_shrinks_single_session(db, add_locations):
    add_locations(("Amphi 1", 10))
    commit(db, students("E1", "E2", "E3"), [3])
    store = ExamSessionStore(db)

    report = ParticipantRefresh(store, FakeRoster({("INF101", "G1"): students("E1", "E3")})).refresh(AS_OF)

    assert store.list()[0].assigned_students == ["E1", "E3"]
    assert [(m.planned_count, m.current_count) for m in report.mismatches] == [(3, 2)]


def test_past_sessions_are_not_refreshed(db, add_locations):
    add_locations(("Amphi 1", 10))
    commit(db, students("E1", "E2"), [2], exam_date=date(2026, 5, 20))
    store = ExamSessionStore(db)
    roster = FakeRoster({("INF101", "G1"): students("E9")})

    report = ParticipantRefresh(store, roster).refresh(AS_OF)

    assert report.scanned_count == 0
    assert roster.calls == []
    assert store.list()[0].assigned_students == ["E1", "E2"]


def test_unresolvable_selection_is_skipped_not_raised(db, add_locations):
    add_locations(("Amphi 1", 10))
    commit(db, students("E1", "E2"), [2])
    store = ExamSessionStore(db)

    report = ParticipantRefresh(store, FakeRoster({})).refresh(AS_OF)

    assert len(report.skipped) == 1
    assert report.updated_count == 0
    assert store.list()[0].assigned_students == ["E1", "E2"]


def test_sessions_without_selection_fall_back_to_labels(db, add_locations):
    add_locations(("Amphi 1", 10))
    store = ExamSessionStore(db)
    session = store.create(
        ExamSessionCreate(
            module_code="INF101 + MAT102",
            group_name="G1 (A-K)",
            exam_date=date(2026, 6, 10),
            start_time=time(9, 0),
            end_time=time(11, 0),
            location_name="Amphi 1",
            assigned_students=["E1"],
        )
    )
    store.commit()

    assert [(s.module_code, s.group_name) for s in session_selection(session)] == [("INF101", "G1"), ("MAT102", "G1")]
