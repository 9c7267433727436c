from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class ServiceError(Exception):
    """An expected failure that maps directly onto an HTTP status."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    status_code = 400


class NotFoundError(ServiceError):
    status_code = 404


class InjectedError(ServiceError):
    """Deliberate failure produced by the random-error endpoint."""

    status_code = 500


async def _service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    _ = request
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def _malformed_request_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    structlog.get_logger("errors").info(
        "malformed_request",
        path=request.url.path,
        error_count=len(exc.errors()),
    )
    return JSONResponse(status_code=ValidationError.status_code, content={"error": "Malformed request"})


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    structlog.get_logger("errors").error(
        "unhandled_error",
        error=str(exc),
        path=request.url.path,
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, _service_error_handler)
    app.add_exception_handler(RequestValidationError, _malformed_request_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
