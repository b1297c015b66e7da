import uuid
from datetime import date, datetime, time

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    String,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from exam_planner.db.base import Base


class ExamSession(Base):
    __tablename__ = "exam_sessions"
    __table_args__ = (
        UniqueConstraint("location_name", "exam_date", "start_time", "end_time", name="uq_exam_session_location_slot"),
        CheckConstraint("start_time < end_time", name="ck_exam_sessions_interval"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    module_code: Mapped[str] = mapped_column(String(255), nullable=False)
    module_name: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    group_name: Mapped[str] = mapped_column(String(255), nullable=False)
    # [{"module_code": ..., "group_name": ...}] the cohort was resolved from.
    selection: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    exam_date: Mapped[date] = mapped_column(Date, index=True, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    location_name: Mapped[str] = mapped_column(String(100), nullable=False)
    professor_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    planned_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Sessions split out of one cohort share a plan_id; slot_index keeps their cohort order.
    plan_id: Mapped[str | None] = mapped_column(String(36), index=True, nullable=True)
    slot_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    assignments: Mapped[list["ExamAssignment"]] = relationship(
        back_populates="exam",
        cascade="all, delete-orphan",
        order_by="ExamAssignment.position",
    )

    @property
    def assigned_students(self) -> list[str]:
        return [assignment.cod_etu for assignment in self.assignments]


class ExamAssignment(Base):
    __tablename__ = "exam_assignments"
    __table_args__ = (UniqueConstraint("exam_id", "cod_etu", name="uq_exam_assignment_student"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    exam_id: Mapped[str] = mapped_column(ForeignKey("exam_sessions.id", ondelete="CASCADE"), index=True, nullable=False)
    cod_etu: Mapped[str] = mapped_column(String(50), index=True, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    exam: Mapped[ExamSession] = relationship(back_populates="assignments")
