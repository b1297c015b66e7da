from fastapi import APIRouter, Depends, status

from exam_planner.api.deps import get_actor, get_location_registry, get_roster, get_session_store
from exam_planner.core.exceptions import ValidationError
from exam_planner.schemas.exam_session import ExamSessionOut
from exam_planner.schemas.planning import (
    AllocationResult,
    AutoDistributeRequest,
    CommitRequest,
    CommitResult,
    OverrideLocationRequest,
    PlanningPlan,
    PlanValidation,
)
from exam_planner.schemas.location import LocationRef
from exam_planner.schemas.roster import CohortOut, CohortRequest
from exam_planner.services import allocation_planner
from exam_planner.services.exam_session_store import ExamSessionStore
from exam_planner.services.location_registry import LocationRegistry
from exam_planner.services.roster import DatabaseRosterProvider, build_cohort

router = APIRouter()


def _with_registered_locations(plan: PlanningPlan, registry: LocationRegistry) -> PlanningPlan:
    """Replace client-supplied location capacities with the registered ones."""
    slots = []
    for index, slot in enumerate(plan.slots):
        if slot.location is None:
            slots.append(slot)
            continue
        location = registry.get_by_name(slot.location.name)
        if location is None:
            raise ValidationError(
                f"Unknown location {slot.location.name}",
                details={"index": index, "location_name": slot.location.name},
            )
        slots.append(slot.model_copy(update={"location": LocationRef.model_validate(location)}))
    return plan.model_copy(update={"slots": slots})


@router.post("/cohort", response_model=CohortOut)
def resolve_cohort(
    payload: CohortRequest,
    roster: DatabaseRosterProvider = Depends(get_roster),
) -> CohortOut:
    students = build_cohort(roster, payload.selection)
    return CohortOut(size=len(students), students=students)


@router.post("/auto-distribute", response_model=AllocationResult)
def auto_distribute(
    payload: AutoDistributeRequest,
    registry: LocationRegistry = Depends(get_location_registry),
) -> AllocationResult:
    if payload.location_ids is None:
        locations = registry.list()
    else:
        # Explicit picks keep the registry's natural order.
        wanted = set(payload.location_ids)
        for location_id in wanted:
            registry.get(location_id)
        locations = [location for location in registry.list() if location.id in wanted]
    return allocation_planner.auto_distribute(payload.cohort_size, locations, payload.start, payload.end)


@router.post("/override-location", response_model=PlanningPlan)
def override_location(
    payload: OverrideLocationRequest,
    registry: LocationRegistry = Depends(get_location_registry),
) -> PlanningPlan:
    location = registry.get(payload.location_id)
    return allocation_planner.override_location(payload.plan, payload.index, location)


@router.post("/validate", response_model=PlanValidation)
def validate_plan(
    payload: PlanningPlan,
    registry: LocationRegistry = Depends(get_location_registry),
) -> PlanValidation:
    plan = _with_registered_locations(payload, registry)
    allocation_planner.validate_plan(plan)
    return PlanValidation(
        valid=True,
        assigned=allocation_planner.total_assigned(plan),
        remaining=allocation_planner.remaining(plan),
    )


@router.post("/commit", response_model=CommitResult, status_code=status.HTTP_201_CREATED)
def commit_plan(
    payload: CommitRequest,
    actor: str | None = Depends(get_actor),
    registry: LocationRegistry = Depends(get_location_registry),
    roster: DatabaseRosterProvider = Depends(get_roster),
    store: ExamSessionStore = Depends(get_session_store),
) -> CommitResult:
    plan = _with_registered_locations(payload.plan, registry)
    allocation_planner.validate_plan(plan)
    cohort = payload.cohort if payload.cohort is not None else build_cohort(roster, plan.selection)
    sessions = allocation_planner.commit_plan(plan, cohort, store, actor=actor)
    return CommitResult(
        plan_id=sessions[0].plan_id if sessions else "",
        committed_students=sum(len(session.assigned_students) for session in sessions),
        sessions=[ExamSessionOut.model_validate(session) for session in sessions],
    )
