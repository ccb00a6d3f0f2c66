"""
Name: FastAPI Exception Handlers

Responsibilities:
  - Convert domain exceptions into RFC 7807 problem responses
  - Render request-body validation failures as 400
  - Log store failures with their error_id

Collaborators:
  - main.py: registers these handlers
  - exceptions.py: LogiTrackError hierarchy
  - platform/error_responses.py: AppHTTPException, problem_response

Notes:
  - 401 bodies never say whether a token was expired or forged
"""

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..exceptions import (
    Conflict,
    DatabaseError,
    Forbidden,
    LogiTrackError,
    NotFound,
    Unauthenticated,
    ValidationError,
)
from ..platform.error_responses import (
    AppHTTPException,
    app_exception_handler,
    bad_request,
    conflict,
    database_error,
    forbidden,
    generic_exception_handler,
    internal_error,
    not_found,
    problem_response,
    unauthorized,
)
from ..platform.logger import logger


def to_http_exception(exc: LogiTrackError) -> AppHTTPException:
    """R: Map a domain exception onto its HTTP problem."""
    if isinstance(exc, ValidationError):
        return bad_request(exc.message, exc.errors or None)
    if isinstance(exc, Unauthenticated):
        return unauthorized("Authentication required.")
    if isinstance(exc, Forbidden):
        return forbidden(exc.message)
    if isinstance(exc, NotFound):
        return not_found(exc.message)
    if isinstance(exc, Conflict):
        return conflict(exc.message)
    if isinstance(exc, DatabaseError):
        return database_error()
    return internal_error()


async def logitrack_error_handler(request: Request, exc: LogiTrackError) -> JSONResponse:
    """Handle domain errors with a structured response."""
    if isinstance(exc, DatabaseError):
        logger.error(
            "Database error",
            extra={"error_id": exc.error_id, "error_message": exc.message},
        )
    app_exc = to_http_exception(exc)
    if app_exc.status_code >= 500:
        app_exc.errors = [{"error_id": exc.error_id}]
    return problem_response(request, app_exc)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle malformed request bodies/params as 400 problems."""
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return problem_response(request, bad_request("Request validation failed.", errors))


def register_exception_handlers(app) -> None:
    """
    Register all exception handlers on the FastAPI app.

    Usage:
        from .api.exception_handlers import register_exception_handlers
        register_exception_handlers(app)
    """
    app.add_exception_handler(LogiTrackError, logitrack_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(AppHTTPException, app_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
