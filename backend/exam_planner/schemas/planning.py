from __future__ import annotations

from datetime import date, time

from pydantic import BaseModel, Field

from exam_planner.schemas.exam_session import ExamSessionOut
from exam_planner.schemas.location import LocationRef
from exam_planner.schemas.roster import RosterSelector, StudentRef


class PlannedSlot(BaseModel):
    location: LocationRef | None = None
    count: int = Field(default=0, ge=0)
    professor_name: str | None = None


class PlanningPlan(BaseModel):
    """An uncommitted plan: the slots being edited plus the fields every session shares."""

    cohort_size: int = Field(ge=0)
    slots: list[PlannedSlot] = Field(default_factory=list)
    selection: list[RosterSelector] = Field(default_factory=list)
    module_names: list[str] = Field(default_factory=list)
    exam_date: date | None = None
    start_time: time | None = None
    end_time: time | None = None


class AllocationResult(BaseModel):
    cohort_size: int
    total_capacity: int
    assigned: int
    unplaced: int
    slots: list[PlannedSlot]


class AutoDistributeRequest(BaseModel):
    cohort_size: int = Field(ge=0)
    location_ids: list[str] | None = None
    start: int = Field(default=0, ge=0)
    end: int | None = Field(default=None, ge=0)


class OverrideLocationRequest(BaseModel):
    plan: PlanningPlan
    index: int = Field(ge=0)
    location_id: str


class CommitRequest(BaseModel):
    plan: PlanningPlan
    # Resolved from plan.selection through the roster when omitted.
    cohort: list[StudentRef] | None = None


class PlanValidation(BaseModel):
    valid: bool
    assigned: int
    remaining: int


class CommitResult(BaseModel):
    plan_id: str
    committed_students: int
    sessions: list[ExamSessionOut]
