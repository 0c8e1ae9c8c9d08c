"""
FastAPI API Server.

REST API for the hive inspection logbook: hive CRUD, audio transcription,
transcript extraction, and stored inspection reports.

Start with:
    uvicorn src.api_server:app --reload --port 3001
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from dotenv import load_dotenv
load_dotenv(".env.local")

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.extraction import router as extraction_router
from src.api.hives import router as hives_router
from src.api.inspections import router as inspections_router
from src.api.middleware import RequestIdMiddleware, RateLimitMiddleware
from src.config import get_settings
from src.logging_config import setup_logging, get_logger

setup_logging()
logger = get_logger(__name__)
settings = get_settings()

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle hooks."""
    logger.info("api_server_starting", environment=settings.environment.value)
    yield
    logger.info("api_server_stopping")


app = FastAPI(
    title="Hive Inspection Service API",
    description="Voice-driven beekeeping inspection logbook",
    version=API_VERSION,
    lifespan=lifespan,
)

# Middleware (last added is outermost)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed bodies as 400 invalid_input."""
    logger.info("invalid_input", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(
        status_code=400,
        content={"detail": "invalid_input", "errors": jsonable_encoder(exc.errors())},
    )


# Routers
app.include_router(hives_router)
app.include_router(extraction_router)
app.include_router(inspections_router)


@app.get("/health", tags=["System"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "service": "hive-inspection-service"}


@app.get("/version", tags=["System"])
async def version() -> dict[str, str]:
    return {"version": API_VERSION}


@app.get("/", tags=["System"])
async def root() -> dict[str, str]:
    """API root."""
    return {
        "service": "Hive Inspection Service",
        "version": API_VERSION,
        "docs": "/docs",
    }
