"""
Cubo Estratégia Backend — FastAPI Application Entry Point

This is the main entry point for the Cubo Estratégia API server.
It configures the FastAPI application, includes all routers, sets up CORS,
installs the error handlers and initializes the database on startup.

Architecture:
    - FastAPI application with auto-generated OpenAPI docs at /docs
    - CORS enabled for the Streamlit frontend (CORS_ORIGINS overrides)
    - All routers mounted under the /api prefix
    - Every recoverable error is rendered as {"detail", "error_code", "context"}
    - Database tables created on startup via lifespan event

Usage:
    python -m uvicorn cubo_backend.main:app --host 127.0.0.1 --port 8050
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .database import init_db
from .errors import CuboError
from .logging_config import configure_logging
from .routers import sessions, roi, strategy, export, ai

logger = logging.getLogger("cubo.api")

DEFAULT_CORS_ORIGINS = [
    "http://localhost:8501",    # Streamlit default
    "http://127.0.0.1:8501",
    "http://localhost:8502",    # Streamlit alternate
    "http://127.0.0.1:8502",
]


def _cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", "")
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or DEFAULT_CORS_ORIGINS


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    - On startup: configure logging, create tables if they don't exist
    - On shutdown: nothing special needed
    """
    configure_logging()
    init_db()
    logger.info("Cubo Estratégia API started")
    yield


# Create FastAPI application
app = FastAPI(
    title="Cubo Estratégia API",
    description=(
        "REST API for access-code sessions, ROI projects, strategy portfolios "
        "on an impact × complexity matrix, printable reports and the "
        "server-side text-generation proxy."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------

@app.exception_handler(CuboError)
async def cubo_error_handler(request: Request, exc: CuboError):
    logger.warning(
        f"{request.method} {request.url.path} -> {exc.status_code} {exc.error_code}: {exc.message}",
        extra={
            "method": request.method, "path": request.url.path,
            "status": exc.status_code, "error_code": exc.error_code,
        },
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ())[1:])
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=422,
        content={
            "detail": f"{field}: {message}" if field else message,
            "error_code": "VALIDATION_ERROR",
            "context": {"field": field, "errors": jsonable_errors(errors)},
        },
    )


def jsonable_errors(errors: list[dict]) -> list[dict]:
    """Keep only the JSON-safe parts of pydantic error entries."""
    return [
        {"loc": [str(p) for p in e.get("loc", ())], "msg": e.get("msg", ""), "type": e.get("type", "")}
        for e in errors
    ]


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"{request.method} {request.url.path} storage failure: {exc}")
    return JSONResponse(
        status_code=503,
        content={
            "detail": "The storage backend is unavailable. Please try again.",
            "error_code": "BACKEND_ERROR",
            "context": {},
        },
    )


# Mount all routers
app.include_router(sessions.router)   # /api/sessions
app.include_router(roi.router)        # /api/roi, /api/sessions/{id}/roi-projects
app.include_router(strategy.router)   # /api/sessions/{id}/strategy
app.include_router(export.router)     # /api/export
app.include_router(ai.router)         # /api/ai


@app.get("/")
def root():
    """Health check and API information endpoint."""
    return {
        "name": "Cubo Estratégia API",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
        "endpoints": {
            "sessions": "/api/sessions",
            "roi": "/api/roi/calculate",
            "roi_projects": "/api/sessions/{session_id}/roi-projects",
            "strategy": "/api/sessions/{session_id}/strategy",
            "reports": "/api/export/roi-report/{session_id}",
            "ai": "/api/ai/benchmarks",
        },
    }


@app.get("/health")
def health_check():
    """Simple health check for monitoring and frontend connectivity."""
    return {"status": "healthy"}
