from __future__ import annotations
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from app.api import router
from logging_config import configure_logging
from services.errors import ErrorCode, MeasureError
from services.measures import MISSING_DATA, build_default_service
from settings import get_settings

logger = logging.getLogger("app.access")

# Fixed status and description per error code. ``None`` keeps the description
# supplied by the service.
ERROR_RESPONSES: dict[ErrorCode, tuple[int, str | None]] = {
    ErrorCode.INVALID_DATA: (status.HTTP_400_BAD_REQUEST, None),
    ErrorCode.INVALID_TYPE: (status.HTTP_400_BAD_REQUEST, "Measurement type not allowed"),
    ErrorCode.DOUBLE_REPORT: (
        status.HTTP_409_CONFLICT,
        "Reading for this month has already been taken",
    ),
    ErrorCode.CONFIRMATION_DUPLICATE: (
        status.HTTP_409_CONFLICT,
        "Reading has already been confirmed",
    ),
    ErrorCode.MEASURE_NOT_FOUND: (status.HTTP_404_NOT_FOUND, "Reading not found"),
    ErrorCode.MEASURES_NOT_FOUND: (status.HTTP_404_NOT_FOUND, "No readings found"),
    ErrorCode.DATASTORE_ERROR: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "The reading could not be stored",
    ),
    ErrorCode.RECOGNITION_ERROR: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "The image could not be read",
    ),
    ErrorCode.INTERNAL_ERROR: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Unexpected server error",
    ),
}


def _error_response(code: ErrorCode, description: str | None) -> JSONResponse:
    status_code, fixed_description = ERROR_RESPONSES[code]
    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": code.value,
            "error_description": fixed_description or description,
        },
    )


async def handle_measure_error(_request: Request, exc: MeasureError) -> JSONResponse:
    return _error_response(exc.error_code, exc.description)


async def handle_validation_error(
    _request: Request, _exc: RequestValidationError
) -> JSONResponse:
    return _error_response(ErrorCode.INVALID_DATA, MISSING_DATA)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error",
        extra={"method": request.method, "path": request.url.path},
        exc_info=exc,
    )
    return _error_response(ErrorCode.INTERNAL_ERROR, None)


async def log_requests(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    start_time = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "Handled request",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": int((time.perf_counter() - start_time) * 1000),
        },
    )
    return response


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    build_default_service()
    try:
        yield
    finally:
        build_default_service.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    settings = get_settings()
    app = FastAPI(
        title="Meter Reading Service",
        description="Records water and gas meter readings extracted from photographs.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(log_requests)
    app.add_exception_handler(MeasureError, handle_measure_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.include_router(router)
    return app

app = create_app()
