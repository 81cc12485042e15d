"""Global exception handlers for the API."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from pipeline.errors import ErrorCode, WorkflowError

logger = structlog.get_logger()

STATUS_CODES = {
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.ILLEGAL_TRANSITION: 409,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.COLLABORATOR_FAILURE: 502,
    ErrorCode.NOTIFICATION_FAILURE: 502,
}


def _validation_response(errors: list) -> JSONResponse:
    first_error = errors[0] if errors else {}
    field = ".".join(str(loc) for loc in first_error.get("loc", []) if loc != "body")
    message = first_error.get("msg", "Validation error")
    return JSONResponse(
        status_code=422,
        content={
            "error": {
                "code": ErrorCode.VALIDATION_ERROR.value,
                "message": message,
                "details": {"field": field, "errors": [
                    {"loc": list(e.get("loc", [])), "msg": e.get("msg"), "type": e.get("type")}
                    for e in errors
                ]},
            }
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(WorkflowError)
    async def workflow_error_handler(request: Request, exc: WorkflowError) -> JSONResponse:
        """Translate workflow errors to their HTTP status."""
        status_code = STATUS_CODES.get(exc.code, 400)
        log_method = logger.error if status_code >= 500 else logger.warning
        log_method(
            "Workflow error",
            code=exc.code.value,
            message=exc.message,
            retryable=exc.retryable,
            path=request.url.path,
        )
        return JSONResponse(status_code=status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Handle request body/query validation errors."""
        logger.warning("Request validation error", path=request.url.path, errors=len(exc.errors()))
        return _validation_response(exc.errors())

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        """Handle Pydantic validation errors."""
        logger.warning("Validation error", path=request.url.path, errors=len(exc.errors()))
        return _validation_response(exc.errors())

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        """Handle database errors."""
        logger.error(
            "Database error",
            error=str(exc),
            path=request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": "DATABASE_ERROR",
                    "message": "A database error occurred",
                    "details": {},
                }
            },
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected errors."""
        logger.exception(
            "Unexpected error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "details": {},
                }
            },
        )
