import logging
import subprocess
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from workforce.api.approvals import router as approvals_router
from workforce.api.attendance import router as attendance_router
from workforce.api.auth import router as auth_router
from workforce.api.organizations import router as organizations_router
from workforce.api.users import router as users_router
from workforce.core.config import settings
from workforce.core.errors import register_exception_handlers

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

_BACKEND_DIR = Path(__file__).resolve().parent.parent


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run Alembic migrations on startup."""
    if settings.RUN_MIGRATIONS_ON_STARTUP:
        logger.info("Running Alembic migrations...")
        try:
            result = subprocess.run(
                ["alembic", "upgrade", "head"],
                capture_output=True,
                text=True,
                cwd=_BACKEND_DIR,
            )
            if result.returncode != 0:
                logger.error("Alembic migration failed:\n%s", result.stderr)
            else:
                logger.info("Migrations applied successfully:\n%s", result.stdout)
        except OSError as exc:
            logger.exception("Failed to run migrations: %s", exc)

    yield

    logger.info("Shutting down workforce backend.")


app = FastAPI(
    title="Workforce API",
    description="Attendance capture and approval queue for a multi-tenant workforce product.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth_router, prefix="/api/auth", tags=["Auth"])
app.include_router(users_router, prefix="/api/users", tags=["Users"])
app.include_router(organizations_router, prefix="/api/organizations", tags=["Organizations"])
app.include_router(attendance_router, prefix="/api/attendance", tags=["Attendance"])
app.include_router(approvals_router, prefix="/api/approvals", tags=["Approvals"])


@app.get("/health", tags=["System"])
async def health_check() -> dict:
    return {"status": "ok"}
