"""create exam planning tables

Revision ID: 20261018_0001
Revises: None
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


location_type_enum = sa.Enum("AMPHI", "ROOM", "LAB", "OTHER", name="location_type")


def upgrade() -> None:
    op.create_table(
        "locations",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("type", location_type_enum, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("capacity > 0", name="ck_locations_capacity_positive"),
    )
    op.create_index("ix_locations_name", "locations", ["name"], unique=True)

    op.create_table(
        "pedagogical_enrollments",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("cod_etu", sa.String(length=50), nullable=False),
        sa.Column("cod_elp", sa.String(length=50), nullable=False),
        sa.Column("lib_elp", sa.String(length=255), nullable=True),
        sa.Column("nom", sa.String(length=100), nullable=False),
        sa.Column("prenom", sa.String(length=100), nullable=False),
        sa.Column("academic_year", sa.String(length=20), nullable=False),
        sa.Column("last_sync", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("cod_etu", "cod_elp", "academic_year", name="uq_enrollment_student_module_year"),
    )
    op.create_index("ix_pedagogical_enrollments_cod_etu", "pedagogical_enrollments", ["cod_etu"])
    op.create_index("ix_pedagogical_enrollments_cod_elp", "pedagogical_enrollments", ["cod_elp"])
    op.create_index("ix_pedagogical_enrollments_academic_year", "pedagogical_enrollments", ["academic_year"])

    op.create_table(
        "grouping_rules",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("module_pattern", sa.String(length=50), nullable=False),
        sa.Column("group_name", sa.String(length=50), nullable=False),
        sa.Column("range_start", sa.String(length=10), nullable=False),
        sa.Column("range_end", sa.String(length=10), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_grouping_rules_module_pattern", "grouping_rules", ["module_pattern"])

    op.create_table(
        "exam_sessions",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("module_code", sa.String(length=255), nullable=False),
        sa.Column("module_name", sa.String(length=500), nullable=False),
        sa.Column("group_name", sa.String(length=255), nullable=False),
        sa.Column("selection", sa.JSON(), nullable=False),
        sa.Column("exam_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("location_name", sa.String(length=100), nullable=False),
        sa.Column("professor_name", sa.String(length=200), nullable=True),
        sa.Column("planned_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("plan_id", sa.String(length=36), nullable=True),
        sa.Column("slot_index", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_by", sa.String(length=200), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("start_time < end_time", name="ck_exam_sessions_interval"),
        sa.UniqueConstraint(
            "location_name",
            "exam_date",
            "start_time",
            "end_time",
            name="uq_exam_session_location_slot",
        ),
    )
    op.create_index("ix_exam_sessions_exam_date", "exam_sessions", ["exam_date"])
    op.create_index("ix_exam_sessions_plan_id", "exam_sessions", ["plan_id"])

    op.create_table(
        "exam_assignments",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "exam_id",
            sa.String(length=36),
            sa.ForeignKey("exam_sessions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("cod_etu", sa.String(length=50), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.UniqueConstraint("exam_id", "cod_etu", name="uq_exam_assignment_student"),
    )
    op.create_index("ix_exam_assignments_exam_id", "exam_assignments", ["exam_id"])
    op.create_index("ix_exam_assignments_cod_etu", "exam_assignments", ["cod_etu"])

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("actor", sa.String(length=200), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=True),
        sa.Column("entity_id", sa.String(length=100), nullable=True),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("activity_logs")
    op.drop_index("ix_exam_assignments_cod_etu", table_name="exam_assignments")
    op.drop_index("ix_exam_assignments_exam_id", table_name="exam_assignments")
    op.drop_table("exam_assignments")
    op.drop_index("ix_exam_sessions_plan_id", table_name="exam_sessions")
    op.drop_index("ix_exam_sessions_exam_date", table_name="exam_sessions")
    op.drop_table("exam_sessions")
    op.drop_index("ix_grouping_rules_module_pattern", table_name="grouping_rules")
    op.drop_table("grouping_rules")
    op.drop_index("ix_pedagogical_enrollments_academic_year", table_name="pedagogical_enrollments")
    op.drop_index("ix_pedagogical_enrollments_cod_elp", table_name="pedagogical_enrollments")
    op.drop_index("ix_pedagogical_enrollments_cod_etu", table_name="pedagogical_enrollments")
    op.drop_table("pedagogical_enrollments")
    op.drop_index("ix_locations_name", table_name="locations")
    op.drop_table("locations")
    location_type_enum.drop(op.get_bind(), checkfirst=True)
