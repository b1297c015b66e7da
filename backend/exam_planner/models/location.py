import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import CheckConstraint, DateTime, Enum as SAEnum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from exam_planner.db.base import Base


class LocationType(str, Enum):
    amphi = "AMPHI"
    room = "ROOM"
    lab = "LAB"
    other = "OTHER"


class Location(Base):
    __tablename__ = "locations"
    __table_args__ = (CheckConstraint("capacity > 0", name="ck_locations_capacity_positive"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[LocationType] = mapped_column(
        SAEnum(LocationType, name="location_type", values_callable=lambda items: [item.value for item in items]),
        nullable=False,
        default=LocationType.room,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
