from __future__ import annotations

import logging
import re

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from exam_planner.core.exceptions import DuplicateLocationError, ResourceNotFoundError, ValidationError
from exam_planner.models.location import Location, LocationType
from exam_planner.services.audit import log_activity

logger = logging.getLogger(__name__)

_DIGIT_RUN = re.compile(r"(\d+)")


def natural_key(value: str) -> tuple:
    """Sort key that compares digit runs numerically, so "Amphi 2" < "Amphi 10"."""
    key = []
    for part in _DIGIT_RUN.split(value.strip().casefold()):
        if not part:
            continue
        if part.isdigit():
            key.append((0, int(part), part))
        else:
            key.append((1, 0, part))
    return tuple(key)


def sort_locations(locations):
    return sorted(locations, key=lambda item: (natural_key(item.name), item.name))


def _coerce_type(value: LocationType | str) -> LocationType:
    if isinstance(value, LocationType):
        return value
    try:
        return LocationType(str(value).strip().upper())
    except ValueError as exc:
        allowed = ", ".join(item.value for item in LocationType)
        raise ValidationError(f"Unknown location type {value!r}", details={"allowed": allowed}) from exc


class LocationRegistry:
    def __init__(self, db: Session):
        self.db = db

    def add(
        self,
        name: str,
        capacity: int,
        location_type: LocationType | str = LocationType.room,
        *,
        actor: str | None = None,
    ) -> Location:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationError("Location name is required", details={"field": "name"})
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise ValidationError(
                "Location capacity must be a positive integer",
                details={"field": "capacity", "value": capacity},
            )
        if self.get_by_name(cleaned) is not None:
            raise DuplicateLocationError([cleaned], message=f"Location {cleaned} already exists")

        location = Location(name=cleaned, capacity=capacity, type=_coerce_type(location_type))
        self.db.add(location)
        self.db.flush()
        log_activity(
            self.db,
            actor=actor,
            action="location.add",
            entity_type="location",
            entity_id=location.id,
            details={"name": cleaned, "capacity": capacity},
        )
        self.db.commit()
        self.db.refresh(location)
        logger.info("Location %s added (capacity %d)", cleaned, capacity)
        return location

    def list(self) -> list[Location]:
        return sort_locations(self.db.execute(select(Location)).scalars())

    def get(self, location_id: str) -> Location:
        location = self.db.get(Location, location_id)
        if location is None:
            raise ResourceNotFoundError("Location", location_id)
        return location

    def get_by_name(self, name: str) -> Location | None:
        statement = select(Location).where(func.lower(Location.name) == name.strip().lower())
        return self.db.execute(statement).scalars().first()

    def remove(self, location_id: str, *, actor: str | None = None) -> None:
        location = self.get(location_id)
        log_activity(
            self.db,
            actor=actor,
            action="location.remove",
            entity_type="location",
            entity_id=location.id,
            details={"name": location.name},
        )
        self.db.delete(location)
        self.db.commit()
        logger.info("Location %s removed", location.name)
