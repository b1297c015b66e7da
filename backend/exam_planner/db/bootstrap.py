from __future__ import annotations

import logging

from sqlalchemy import Engine, inspect

from exam_planner.db.base import Base
from exam_planner.db.session import engine as default_engine
import exam_planner.models  # noqa: F401

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "locations": {"id", "name", "capacity", "type"},
    "exam_sessions": {
        "id",
        "module_code",
        "group_name",
        "selection",
        "exam_date",
        "start_time",
        "end_time",
        "location_name",
        "planned_count",
        "plan_id",
        "slot_index",
    },
    "exam_assignments": {"id", "exam_id", "cod_etu", "position"},
    "grouping_rules": {"id", "module_pattern", "group_name", "range_start", "range_end"},
    "pedagogical_enrollments": {"id", "cod_etu", "cod_elp", "nom", "prenom", "academic_year"},
}


def find_missing_columns(engine: Engine) -> tuple[list[str], list[str]]:
    with engine.connect() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = sorted(name for name in REQUIRED_COLUMNS if name not in table_names)

        missing_columns: list[str] = []
        for table_name, required in REQUIRED_COLUMNS.items():
            if table_name not in table_names:
                continue
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            for column_name in sorted(required - existing):
                missing_columns.append(f"{table_name}.{column_name}")
    return missing_tables, missing_columns


def ensure_runtime_schema_compatibility(engine: Engine | None = None) -> None:
    bind = engine or default_engine
    # Create anything Alembic has not provisioned yet, then refuse to start on a stale schema.
    Base.metadata.create_all(bind=bind)
    missing_tables, missing_columns = find_missing_columns(bind)
    if missing_tables:
        raise RuntimeError(f"Missing required tables: {', '.join(missing_tables)}")
    if missing_columns:
        raise RuntimeError(f"Missing required columns: {', '.join(missing_columns)}")
    logger.info("Database schema verified (%d tables)", len(REQUIRED_COLUMNS))
