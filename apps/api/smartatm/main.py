"""FastAPI application for the Smart ATM call-center admin API."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import SQLAlchemyError

from .core.config import settings
from .core.logs import configure_logging
from .routers import callbacks, calls, exports, history, imports, leads, metrics, search

configure_logging(settings.log_level)

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Error al cargar datos. Intenta nuevamente."

app = FastAPI(title="Smart ATM Admin API", version="0.1.0")

if settings.cors_allow_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(calls.router, prefix="/api/calls", tags=["calls"])
app.include_router(leads.router, prefix="/api/leads", tags=["leads"])
app.include_router(callbacks.router, prefix="/api/callbacks", tags=["callbacks"])
app.include_router(history.router, prefix="/api/history", tags=["history"])
app.include_router(imports.router, prefix="/api/import", tags=["import"])
app.include_router(exports.router, prefix="/api/export", tags=["export"])
app.include_router(metrics.router, prefix="/api", tags=["metrics"])
app.include_router(search.router, prefix="/api/search", tags=["search"])


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Answer backend failures with a generic, retryable message."""

    logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=503, content={"detail": LOAD_ERROR_MESSAGE})


@app.get("/api/health", tags=["meta"])
async def health() -> dict[str, str]:
    """Simple liveness probe."""

    return {"status": "ok"}


@app.head("/api/health", tags=["meta"])
async def health_head() -> Response:
    """Allow HEAD for uptime monitors that only need the status code."""

    return Response(status_code=200)
