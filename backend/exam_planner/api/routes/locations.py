from fastapi import APIRouter, Depends, status

from exam_planner.api.deps import get_actor, get_location_registry
from exam_planner.schemas.location import LocationCreate, LocationOut
from exam_planner.services.location_registry import LocationRegistry

router = APIRouter()


@router.get("/", response_model=list[LocationOut])
def list_locations(registry: LocationRegistry = Depends(get_location_registry)) -> list[LocationOut]:
    return registry.list()


@router.post("/", response_model=LocationOut, status_code=status.HTTP_201_CREATED)
def create_location(
    payload: LocationCreate,
    actor: str | None = Depends(get_actor),
    registry: LocationRegistry = Depends(get_location_registry),
) -> LocationOut:
    return registry.add(payload.name, payload.capacity, payload.type, actor=actor)


@router.delete("/{location_id}")
def delete_location(
    location_id: str,
    actor: str | None = Depends(get_actor),
    registry: LocationRegistry = Depends(get_location_registry),
) -> dict:
    registry.remove(location_id, actor=actor)
    return {"success": True}
