from datetime import date, time

from pydantic import BaseModel


class ConflictSide(BaseModel):
    session_id: str
    module: str
    start_time: time
    end_time: time
    location: str


class Conflict(BaseModel):
    student: str
    exam_date: date
    first: ConflictSide
    second: ConflictSide


class ConflictReport(BaseModel):
    conflicts: list[Conflict]
    conflict_count: int
    affected_students: int


class ConflictCount(BaseModel):
    affected_students: int
