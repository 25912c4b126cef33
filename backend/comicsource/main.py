"""Comick Source -- FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from comicsource import __version__
from comicsource.api.v1.router import api_router
from comicsource.config import settings
from comicsource.core.exceptions import ComickSourceException, UnknownSourceError
from comicsource.schemas import ErrorDetail, ErrorResponse
from comicsource.scrapers.register_adapters import register_all_adapters
from comicsource.scrapers.registry import get_adapter_registry

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.DEBUG else logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    logger.info("Starting Comick Source API server...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Proxy endpoints configured: {len(settings.get_proxy_list())}")

    # Register all source adapters
    register_all_adapters()
    logger.info(f"Registered {len(get_adapter_registry())} source adapters")

    yield

    logger.info("Shutting down Comick Source API server...")


app = FastAPI(
    title="Comick Source API",
    description="Search, chapter and health aggregation over comic content sources",
    version=__version__,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.FRONTEND_URL,
        "http://localhost:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(status_code: int, code: str, message: str, available=None) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message, available=available))
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(ComickSourceException)
async def handle_source_exception(request: Request, exc: ComickSourceException):
    """Render application errors as the standard error envelope."""
    if exc.status_code >= 500:
        logger.warning(f"{request.method} {request.url.path} failed: {exc.message}")
    available = exc.available if isinstance(exc, UnknownSourceError) else None
    return _error_response(exc.status_code, exc.code, exc.message, available)


@app.exception_handler(Exception)
async def handle_unexpected_exception(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return _error_response(500, "internal_error", "An unexpected error occurred")


# Register API router
app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Comick Source API",
        "version": __version__,
        "description": "Comic content source aggregation",
        "docs": "/docs" if settings.DEBUG else None,
        "health": "/api/health",
        "sources": "/api/sources",
    }
