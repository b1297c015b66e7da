from datetime import date

from pydantic import BaseModel, Field


class RefreshMismatch(BaseModel):
    session_id: str
    module_code: str
    group_name: str
    location_name: str
    planned_count: int
    current_count: int


class RefreshUnseated(BaseModel):
    module_code: str
    group_name: str
    session_ids: list[str]
    students: list[str]


class RefreshSkip(BaseModel):
    session_id: str
    reason: str


class RefreshReport(BaseModel):
    as_of: date
    scanned_count: int = 0
    updated_count: int = 0
    unchanged_count: int = 0
    mismatches: list[RefreshMismatch] = Field(default_factory=list)
    unseated: list[RefreshUnseated] = Field(default_factory=list)
    skipped: list[RefreshSkip] = Field(default_factory=list)
