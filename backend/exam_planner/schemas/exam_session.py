from datetime import date, time

from pydantic import BaseModel, Field


class ExamSessionCreate(BaseModel):
    module_code: str = Field(min_length=1, max_length=255)
    module_name: str = ""
    group_name: str = Field(min_length=1, max_length=255)
    selection: list[dict] = Field(default_factory=list)
    exam_date: date
    start_time: time
    end_time: time
    location_name: str = Field(min_length=1, max_length=100)
    professor_name: str | None = None
    planned_count: int | None = Field(default=None, ge=0)
    plan_id: str | None = None
    slot_index: int = 0
    created_by: str | None = None
    assigned_students: list[str] = Field(default_factory=list)


class ExamSessionOut(BaseModel):
    id: str
    module_code: str
    module_name: str
    group_name: str
    exam_date: date
    start_time: time
    end_time: time
    location_name: str
    professor_name: str | None = None
    planned_count: int
    plan_id: str | None = None
    assigned_students: list[str]

    model_config = {"from_attributes": True}
