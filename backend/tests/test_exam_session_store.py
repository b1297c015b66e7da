from datetime import date, time

import pytest

from exam_planner.core.exceptions import DuplicateLocationError, ResourceNotFoundError, ValidationError
from exam_planner.models.exam_session import ExamSession
from exam_planner.schemas.exam_session import ExamSessionCreate
from exam_planner.services.exam_session_store import ExamSessionStore


def payload(**overrides):
    fields = {
        "module_code": "INF101",
        "module_name": "Algorithmique",
        "group_name": "G1",
        "exam_date": date(2026, 6, 10),
        "start_time": time(9, 0),
        "end_time": time(11, 0),
        "location_name": "Amphi 1",
        "assigned_students": ["E1", "E2", "E3"],
    }
    fields.update(overrides)
    return ExamSessionCreate(**fields)


def test_create_and_get(db, add_locations):
    add_locations(("Amphi 1", 100))
    store = ExamSessionStore(db)

    created = store.create(payload(assigned_students=["E2", "E1", "E2"]))
    store.commit()

    loaded = store.get(created.id)
    assert loaded.assigned_students == ["E2", "E1"]
    assert loaded.planned_count == 2


def test_create_rejects_inverted_interval(db, add_locations):
    add_locations(("Amphi 1", 100))

    with pytest.raises(ValidationError):
        ExamSessionStore(db).create(payload(start_time=time(11, 0), end_time=time(9, 0)))


def test_create_rejects_unknown_location(db):
    with pytest.raises(ValidationError) as excinfo:
        ExamSessionStore(db).create(payload(location_name="Nowhere"))

    assert excinfo.value.details == {"location_name": "Nowhere"}


def test_create_rejects_second_exam_in_same_room_and_slot(db, add_locations):
    add_locations(("Amphi 1", 100))
    store = ExamSessionStore(db)
    store.create(payload())
    store.commit()

    with pytest.raises(DuplicateLocationError):
        store.create(payload(module_code="MAT102"))

    # A different slot in the same room is fine.
    store.create(payload(module_code="MAT102", start_time=time(11, 0), end_time=time(12, 0)))
    store.commit()
    assert len(store.list()) == 2


def test_unique_constraint_catches_slot_taken_by_pending_session(db, add_locations):
    add_locations(("Amphi 1", 100))
    store = ExamSessionStore(db)
    # Not yet flushed, so the slot lookup cannot see it; only the constraint can.
    db.add(
        ExamSession(
            module_code="PHY201",
            group_name="G2",
            exam_date=date(2026, 6, 10),
            start_time=time(9, 0),
            end_time=time(11, 0),
            location_name="Amphi 1",
        )
    )

    with db.no_autoflush:
        with pytest.raises(DuplicateLocationError) as excinfo:
            store.create(payload())

    assert excinfo.value.details == {"duplicates": ["Amphi 1"]}
    assert store.list() == []


def test_list_filters_and_orders(db, add_locations):
    add_locations(("Amphi 1", 100), ("Amphi 2", 100))
    store = ExamSessionStore(db)
    store.create(payload(exam_date=date(2026, 6, 12), location_name="Amphi 2"))
    store.create(payload(exam_date=date(2026, 6, 10), location_name="Amphi 2"))
    store.create(payload(exam_date=date(2026, 6, 10), location_name="Amphi 1"))
    store.create(payload(exam_date=date(2026, 5, 1)))
    store.commit()

    everything = store.list()
    upcoming = store.list(from_date=date(2026, 6, 10))

    assert [(s.exam_date.day, s.location_name) for s in everything] == [(1, "Amphi 1"), (10, "Amphi 1"), (10, "Amphi 2"), (12, "Amphi 2")]
    assert len(upcoming) == 3


def test_replace_assigned_students_keeps_order(db, add_locations):
    add_locations(("Amphi 1", 100))
    store = ExamSessionStore(db)
    created = store.create(payload())
    store.commit()

    store.replace_assigned_students(created.id, ["E3", "E9", "E1", "E9"])
    store.commit()

    assert store.get(created.id).assigned_students == ["E3", "E9", "E1"]


def test_delete(db, add_locations):
    add_locations(("Amphi 1", 100))
    store = ExamSessionStore(db)
    created = store.create(payload())
    store.commit()

    store.delete(created.id)
    store.commit()

    with pytest.raises(ResourceNotFoundError):
        store.get(created.id)


def test_create_stores_registered_spelling_of_location(db, add_locations):
    add_locations(("Amphi 1", 100))
    store = ExamSessionStore(db)

    session = store.create(payload(location_name="amphi 1"))
    store.commit()

    assert session.location_name == "Amphi 1"
    with pytest.raises(DuplicateLocationError):
        store.create(payload(location_name="AMPHI 1", module_code="MAT102"))
