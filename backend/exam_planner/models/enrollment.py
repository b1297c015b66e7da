import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from exam_planner.db.base import Base


class PedagogicalEnrollment(Base):
    """One student registered to one module for one academic year.

    Rows are written by the external synchronisation job; this service only reads them.
    """

    __tablename__ = "pedagogical_enrollments"
    __table_args__ = (UniqueConstraint("cod_etu", "cod_elp", "academic_year", name="uq_enrollment_student_module_year"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    cod_etu: Mapped[str] = mapped_column(String(50), index=True, nullable=False)
    cod_elp: Mapped[str] = mapped_column(String(50), index=True, nullable=False)
    lib_elp: Mapped[str | None] = mapped_column(String(255), nullable=True)
    nom: Mapped[str] = mapped_column(String(100), nullable=False)
    prenom: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    academic_year: Mapped[str] = mapped_column(String(20), index=True, nullable=False)
    last_sync: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
