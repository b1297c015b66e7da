from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from exam_planner.db.bootstrap import find_missing_columns
from exam_planner.db.session import engine

router = APIRouter()


@router.get("/health")
def health() -> dict:
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/health/ready")
def health_ready() -> JSONResponse:
    db_ok = True
    db_error: str | None = None
    missing_tables: list[str] = []
    missing_columns: list[str] = []

    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        missing_tables, missing_columns = find_missing_columns(engine)
    except Exception as exc:  # noqa: BLE001
        db_ok = False
        db_error = str(exc)

    ready = db_ok and not missing_tables and not missing_columns
    payload = {
        "status": "ready" if ready else "degraded",
        "database": {
            "ok": db_ok,
            "error": db_error,
            "missing_tables": missing_tables,
            "missing_columns": missing_columns,
        },
    }
    return JSONResponse(status_code=200 if ready else 503, content=payload)
