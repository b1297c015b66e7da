import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from exam_planner.api.routes import conflicts, exams, health, locations, planning, roster
from exam_planner.core.config import get_settings
from exam_planner.core.exceptions import AppError
from exam_planner.db.bootstrap import ensure_runtime_schema_compatibility

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    ensure_runtime_schema_compatibility()
    yield


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "details": exc.details},
    )


app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(locations.router, prefix=f"{settings.api_prefix}/locations", tags=["locations"])
app.include_router(roster.router, prefix=settings.api_prefix, tags=["roster"])
app.include_router(planning.router, prefix=f"{settings.api_prefix}/planning", tags=["planning"])
app.include_router(exams.router, prefix=f"{settings.api_prefix}/exams", tags=["exams"])
app.include_router(conflicts.router, prefix=f"{settings.api_prefix}/conflicts", tags=["conflicts"])
