import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from agent_directory.agents.router import router as agents_router
from agent_directory.audit.router import router as audit_router
from agent_directory.auth.router import router as auth_router
from agent_directory.config import settings
from agent_directory.core.exceptions import AppError, StorageError
from agent_directory.core.logging import setup_logging
from agent_directory.db.session import close_database, open_database
from agent_directory.orgs.router import router as orgs_router
from agent_directory.platforms.router import router as platforms_router
from agent_directory.projects.router import router as projects_router
from agent_directory.tags.router import router as tags_router
from agent_directory.technologies.router import router as technologies_router
from agent_directory.templates.router import router as templates_router
from agent_directory.users.router import router as users_router
from agent_directory.versioning.router import router as versioning_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    setup_logging()
    logger.info("Starting Agent Directory Manager (env=%s)", settings.environment)
    await open_database()
    try:
        yield
    finally:
        await close_database()
        logger.info("Agent Directory Manager shutdown complete")


app = FastAPI(
    title="Agent Directory Manager",
    version="1.0.0",
    description="Multi-tenant directory of projects and agents with configuration versioning and audit trail.",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
    )


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Storage failure on %s %s", request.method, request.url.path)
    error = StorageError()
    return JSONResponse(
        status_code=error.status_code,
        content={"detail": error.message},
    )


# ── Identity & tenancy ────────────────────────────────────────────────────────
app.include_router(auth_router)
app.include_router(orgs_router)
app.include_router(users_router)

# ── Directory ─────────────────────────────────────────────────────────────────
app.include_router(projects_router)
app.include_router(agents_router)
app.include_router(templates_router)
app.include_router(technologies_router)
app.include_router(platforms_router)
app.include_router(tags_router)

# ── History ───────────────────────────────────────────────────────────────────
app.include_router(versioning_router)
app.include_router(audit_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "1.0.0"}
