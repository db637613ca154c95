import traceback
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, NoResultFound, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from bizdir.core.exceptions.errors import ServiceError, UpstreamError
from bizdir.core.responses import send_error
from bizdir.utils.logging import get_logger

logger = get_logger()

_LOC_PREFIXES = ("body", "query", "path")


def _error_response(
    message: str,
    status_code: int,
    data: Optional[Any] = None,
    errors: Optional[Any] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=send_error(
            message=message, data=data, status_code=status_code, errors=errors
        ).model_dump(),
    )


def _field_name(loc) -> str:
    parts = [str(p) for p in loc]
    if len(parts) > 1 and parts[0] in _LOC_PREFIXES:
        parts = parts[1:]
    return ".".join(parts)


def register_exception_handlers(app: FastAPI):
    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        log = logger.error if exc.status_code >= 500 else logger.warning
        suffix = f" ({exc.detail})" if exc.detail else ""
        log(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}{suffix}")

        if isinstance(exc, UpstreamError):
            data = {"detail": exc.detail or exc.message, "upstream": True}
        else:
            data = {"detail": exc.detail} if exc.detail else None
        return _error_response(exc.message, exc.status_code, data=data)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = {_field_name(e["loc"]): e["msg"] for e in exc.errors()}
        logger.warning(f"Invalid request {request.method} {request.url.path}: {errors}")
        return _error_response(
            "Validation failed", status.HTTP_400_BAD_REQUEST, errors=errors
        )

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        detail = str(exc.orig) if exc.orig is not None else "Database integrity error"
        logger.error(f"Integrity error on {request.method} {request.url.path}: {detail}")
        return _error_response(detail, status.HTTP_409_CONFLICT)

    @app.exception_handler(NoResultFound)
    async def no_result_handler(request: Request, exc: NoResultFound):
        logger.warning(f"No result for {request.method} {request.url.path}")
        return _error_response("Resource not found", status.HTTP_404_NOT_FOUND)

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
        return _error_response(
            "Database operation failed",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            data={"detail": str(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        logger.warning(f"HTTP {exc.status_code} on {request.method} {request.url.path}: {exc.detail}")
        return _error_response(str(exc.detail), exc.status_code)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception on {request.method} {request.url}: {exc}\n"
            f"{traceback.format_exc()}"
            f"User-Agent: {request.headers.get('user-agent')}"
        )
        return _error_response(
            "An unexpected error occurred.",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            data={"detail": str(exc)},
        )
