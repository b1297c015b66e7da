from pydantic import BaseModel, Field

from exam_planner.models.location import LocationType


class LocationCreate(BaseModel):
    name: str = Field(max_length=100)
    capacity: int
    type: LocationType = LocationType.room


class LocationOut(BaseModel):
    id: str
    name: str
    capacity: int
    type: LocationType

    model_config = {"from_attributes": True}


class LocationRef(BaseModel):
    """The part of a location the planner needs; accepts ORM rows or plain payloads."""

    id: str | None = None
    name: str = Field(min_length=1, max_length=100)
    capacity: int = Field(ge=1)

    model_config = {"from_attributes": True}
