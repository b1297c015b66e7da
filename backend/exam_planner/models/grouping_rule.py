import uuid
from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from exam_planner.db.base import Base


class GroupingRule(Base):
    __tablename__ = "grouping_rules"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    module_pattern: Mapped[str] = mapped_column(String(50), index=True, nullable=False)
    group_name: Mapped[str] = mapped_column(String(50), nullable=False)
    range_start: Mapped[str] = mapped_column(String(10), nullable=False)
    range_end: Mapped[str] = mapped_column(String(10), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
