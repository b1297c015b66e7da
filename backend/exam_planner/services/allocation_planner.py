"""Distribution of an exam cohort across locations.

Plans are plain value objects (``PlanningPlan``); every editing function returns a
new plan and leaves its argument untouched. Only ``commit_plan`` touches storage.
"""
from __future__ import annotations

import logging
import uuid
from collections import Counter
from collections.abc import Sequence

from exam_planner.core.config import get_settings
from exam_planner.core.exceptions import (
    DuplicateLocationError,
    IncompletePlanError,
    PlanningError,
    ValidationError,
)
from exam_planner.models.exam_session import ExamSession
from exam_planner.schemas.exam_session import ExamSessionCreate
from exam_planner.schemas.location import LocationRef
from exam_planner.schemas.planning import AllocationResult, PlannedSlot, PlanningPlan
from exam_planner.schemas.roster import StudentRef
from exam_planner.services.audit import log_activity
from exam_planner.services.exam_session_store import ExamSessionStore
from exam_planner.services.labels import merge_label

logger = logging.getLogger(__name__)


def _as_ref(location) -> LocationRef:
    if isinstance(location, LocationRef):
        return location
    return LocationRef.model_validate(location, from_attributes=True)


def total_assigned(plan: PlanningPlan) -> int:
    return sum(slot.count for slot in plan.slots)


def remaining(plan: PlanningPlan) -> int:
    return plan.cohort_size - total_assigned(plan)


def auto_distribute(
    cohort_size: int,
    ordered_locations: Sequence,
    start: int = 0,
    end: int | None = None,
) -> AllocationResult:
    """Spread ``cohort_size`` students over ``ordered_locations[start..end]`` (inclusive).

    Every location gets ``floor(capacity * ratio)`` with ``ratio = min(cohort / capacity_total, 1)``;
    the students left over are then handed out one per location, in range order, to
    locations that still have room. Rounding ties therefore always favour the earlier
    location. Students that fit nowhere are reported as ``unplaced``.
    """
    if cohort_size < 0:
        raise ValidationError("Cohort size cannot be negative", details={"cohort_size": cohort_size})

    locations = [_as_ref(location) for location in ordered_locations]
    last = len(locations) - 1 if end is None else end
    if start < 0 or start > last or last >= len(locations):
        raise PlanningError(
            "Selected location range is empty",
            details={"start": start, "end": end, "available": len(locations)},
        )
    selected = locations[start : last + 1]

    total_capacity = sum(location.capacity for location in selected)
    if total_capacity <= 0:
        raise PlanningError("Selected locations have no capacity", details={"start": start, "end": last})

    # floor(capacity * min(cohort / total, 1)) in exact integer arithmetic.
    if cohort_size >= total_capacity:
        counts = [location.capacity for location in selected]
    else:
        counts = [location.capacity * cohort_size // total_capacity for location in selected]

    remainder = cohort_size - sum(counts)
    while remainder > 0:
        placed_in_pass = 0
        for index, location in enumerate(selected):
            if remainder == 0:
                break
            if counts[index] < location.capacity:
                counts[index] += 1
                remainder -= 1
                placed_in_pass += 1
        if placed_in_pass == 0:
            break

    if remainder:
        logger.warning(
            "Auto-distribute left %d of %d students unplaced (capacity %d)",
            remainder,
            cohort_size,
            total_capacity,
        )

    slots = [
        PlannedSlot(location=location, count=count)
        for location, count in zip(selected, counts)
        if count > 0
    ]
    return AllocationResult(
        cohort_size=cohort_size,
        total_capacity=total_capacity,
        assigned=cohort_size - remainder,
        unplaced=remainder,
        slots=slots,
    )


def _check_index(plan: PlanningPlan, index: int) -> None:
    if index < 0 or index >= len(plan.slots):
        raise ValidationError(
            "Slot index out of range",
            details={"index": index, "slots": len(plan.slots)},
        )


def override_location(plan: PlanningPlan, index: int, location) -> PlanningPlan:
    """Move slot ``index`` to ``location``, capping its count at what is still unassigned."""
    _check_index(plan, index)
    ref = _as_ref(location)
    others = sum(slot.count for position, slot in enumerate(plan.slots) if position != index)
    count = min(ref.capacity, max(0, plan.cohort_size - others))

    slots = list(plan.slots)
    slots[index] = slots[index].model_copy(update={"location": ref, "count": count})
    return plan.model_copy(update={"slots": slots})


def override_count(plan: PlanningPlan, index: int, count: int) -> PlanningPlan:
    _check_index(plan, index)
    slot = plan.slots[index]
    if count < 0:
        raise ValidationError("Slot count cannot be negative", details={"index": index, "count": count})
    if slot.location is not None and count > slot.location.capacity:
        raise ValidationError(
            f"Location {slot.location.name} holds at most {slot.location.capacity} students",
            details={"index": index, "count": count, "capacity": slot.location.capacity},
        )

    slots = list(plan.slots)
    slots[index] = slot.model_copy(update={"count": count})
    return plan.model_copy(update={"slots": slots})


def add_slot(plan: PlanningPlan, professor_name: str | None = None) -> PlanningPlan:
    left = remaining(plan)
    if left <= 0:
        raise PlanningError("Every student already has a seat", details={"remaining": left})
    slots = [*plan.slots, PlannedSlot(professor_name=professor_name)]
    return plan.model_copy(update={"slots": slots})


def remove_slot(plan: PlanningPlan, index: int) -> PlanningPlan:
    _check_index(plan, index)
    slots = [slot for position, slot in enumerate(plan.slots) if position != index]
    return plan.model_copy(update={"slots": slots})


def find_duplicate_locations(slots: Sequence[PlannedSlot]) -> list[str]:
    names: dict[str, str] = {}
    occurrences: Counter[str] = Counter()
    for slot in slots:
        if slot.location is None:
            continue
        key = slot.location.name.strip().casefold()
        names.setdefault(key, slot.location.name.strip())
        occurrences[key] += 1
    return [names[key] for key, seen in occurrences.items() if seen > 1]


def validate_plan(plan: PlanningPlan) -> None:
    """Raise unless ``plan`` can be committed exactly as it stands."""
    missing = [
        field
        for field, value in (
            ("exam_date", plan.exam_date),
            ("start_time", plan.start_time),
            ("end_time", plan.end_time),
        )
        if value is None
    ]
    if not plan.selection:
        missing.append("selection")
    if missing:
        raise IncompletePlanError("Plan is missing common fields", details={"missing": missing})
    if plan.start_time >= plan.end_time:
        raise IncompletePlanError(
            "Exam start time must be before its end time",
            details={"start_time": plan.start_time.isoformat(), "end_time": plan.end_time.isoformat()},
        )

    duplicates = find_duplicate_locations(plan.slots)
    if duplicates:
        raise DuplicateLocationError(duplicates)

    for index, slot in enumerate(plan.slots):
        if slot.location is None:
            if slot.count > 0:
                raise IncompletePlanError(
                    "Every slot holding students needs a location",
                    details={"index": index, "count": slot.count},
                )
            continue
        if slot.count > slot.location.capacity:
            raise ValidationError(
                f"Location {slot.location.name} holds at most {slot.location.capacity} students",
                details={"index": index, "count": slot.count, "capacity": slot.location.capacity},
            )

    assigned = total_assigned(plan)
    if assigned != plan.cohort_size:
        raise IncompletePlanError(
            "Assigned seats do not match the cohort size",
            details={
                "assigned": assigned,
                "cohort_size": plan.cohort_size,
                "difference": plan.cohort_size - assigned,
            },
        )


def slice_cohort(plan: PlanningPlan, cohort: Sequence[StudentRef]) -> list[tuple[PlannedSlot, list[StudentRef]]]:
    """Cut the cohort into contiguous runs, one per non-empty slot, in slot order."""
    runs: list[tuple[PlannedSlot, list[StudentRef]]] = []
    offset = 0
    for slot in plan.slots:
        if slot.count == 0:
            continue
        runs.append((slot, list(cohort[offset : offset + slot.count])))
        offset += slot.count
    return runs


def commit_plan(
    plan: PlanningPlan,
    cohort: Sequence[StudentRef],
    store: ExamSessionStore,
    *,
    actor: str | None = None,
) -> list[ExamSession]:
    """Persist one exam session per non-empty slot, all or nothing."""
    validate_plan(plan)
    students = list(cohort)
    if len(students) != plan.cohort_size:
        raise IncompletePlanError(
            "Cohort changed since the plan was made",
            details={"cohort_size": plan.cohort_size, "students": len(students)},
        )
    codes = [student.cod_etu for student in students]
    if len(set(codes)) != len(codes):
        duplicated = sorted(code for code, seen in Counter(codes).items() if seen > 1)
        raise ValidationError("Cohort lists the same student more than once", details={"students": duplicated})

    plan_id = str(uuid.uuid4())
    selection = [selector.model_dump() for selector in plan.selection]
    module_code = merge_label(selector.module_code for selector in plan.selection)
    group_name = merge_label(selector.group_name for selector in plan.selection) or get_settings().roster_wildcard_group
    module_name = merge_label(plan.module_names) or module_code

    created: list[ExamSession] = []
    try:
        for slot_index, (slot, run) in enumerate(slice_cohort(plan, students)):
            session = store.create(
                ExamSessionCreate(
                    module_code=module_code,
                    module_name=module_name,
                    group_name=group_name,
                    selection=selection,
                    exam_date=plan.exam_date,
                    start_time=plan.start_time,
                    end_time=plan.end_time,
                    location_name=slot.location.name,
                    professor_name=slot.professor_name,
                    planned_count=slot.count,
                    plan_id=plan_id,
                    slot_index=slot_index,
                    created_by=actor,
                    assigned_students=[student.cod_etu for student in run],
                )
            )
            created.append(session)

        committed = [code for session in created for code in session.assigned_students]
        if committed != codes:
            raise IncompletePlanError(
                "Committed sessions do not cover the cohort exactly",
                details={"cohort_size": plan.cohort_size, "committed": len(committed)},
            )

        log_activity(
            store.db,
            actor=actor,
            action="exam_plan.commit",
            entity_type="exam_plan",
            entity_id=plan_id,
            details={
                "module_code": module_code,
                "group_name": group_name,
                "sessions": [session.id for session in created],
                "students": len(committed),
            },
        )
        store.commit()
    except Exception:
        store.rollback()
        raise

    logger.info(
        "Committed plan %s: %d students across %d locations for %s",
        plan_id,
        plan.cohort_size,
        len(created),
        module_code,
    )
    return created
