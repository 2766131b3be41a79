"""FastAPI application entry point."""

import time
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

# Load backend/.env into os.environ (pydantic-settings does not do this)
load_dotenv(Path(__file__).resolve().parents[2] / ".env")

from formupload import __version__
from formupload.api.router import api_router
from formupload.api.v1 import pages
from formupload.config import get_settings
from formupload.core.exceptions import FormUploadError
from formupload.core.logging import get_logger, setup_logging
from formupload.core.tracing import TRACE_HEADER, get_trace_id, set_trace_id

logger = get_logger("formupload.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and the upload directory on startup."""
    settings = get_settings()
    setup_logging(
        level=settings.log_level,
        format_type=settings.log_format,
        log_file=str(settings.log_file_path) if settings.log_file_path else None,
    )
    settings.upload_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Starting form upload service, upload_dir=%s", settings.upload_dir)
    yield
    logger.info("Shutting down form upload service")


class TraceIdMiddleware(BaseHTTPMiddleware):
    """Take trace_id from the X-Trace-Id header or generate one; echo it back."""

    async def dispatch(self, request: Request, call_next):
        tid = set_trace_id(request.headers.get(TRACE_HEADER))
        response = await call_next(request)
        response.headers[TRACE_HEADER] = tid
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log incoming requests and responses with status and duration."""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        method = request.method
        path = request.url.path
        client = request.client.host if request.client else "?"
        logger.info(
            "Request %s %s from %s (%s bytes, %s)",
            method,
            path,
            client,
            request.headers.get("content-length", "?"),
            request.headers.get("content-type", "-"),
        )
        try:
            response = await call_next(request)
        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.exception("Request error %s %s after %.0fms: %s", method, path, duration_ms, exc)
            raise
        duration_ms = (time.perf_counter() - start) * 1000
        status = response.status_code
        logger.info("Response %s %s -> %d (%.0fms)", method, path, status, duration_ms)
        if status >= 400:
            logger.warning("Request failed: %s %s -> %d", method, path, status)
        return response


def exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions and return 500 with error details."""
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error": str(exc),
            "trace_id": get_trace_id(),
        },
    )


def form_upload_error_handler(request: Request, exc: FormUploadError):
    """FormUploadError -> 4xx with detail; status comes from the error class."""
    logger.warning(
        "%s: %s",
        type(exc).__name__,
        exc.message,
        extra={"details": exc.details},
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.message,
            "error": type(exc).__name__,
            "trace_id": get_trace_id(),
            **(exc.details or {}),
        },
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="Form Upload Service",
        description="Multipart form parsing with per-event notifications",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(TraceIdMiddleware)  # added last so it runs first and logs carry the trace_id
    app.add_exception_handler(FormUploadError, form_upload_error_handler)
    app.add_exception_handler(Exception, exception_handler)
    app.include_router(pages.router)
    app.include_router(api_router, prefix="/v1")
    return app


app = create_app()
