"""Global exception handlers for the FastAPI application."""

import traceback

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..messages import MessageCode, get_default_message
from src.utils.logger import get_logger

logger = get_logger(__name__)


class InstitutionAPIException(Exception):
    """Base exception for the institution service with unified message codes."""

    default_code: MessageCode = MessageCode.INTERNAL_ERROR
    default_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message_code: MessageCode | None = None,
        status_code: int | None = None,
        details: dict | None = None,
        headers: dict | None = None,
        message: str | None = None,
    ):
        self.message_code = message_code or self.default_code
        self.status_code = status_code or self.default_status
        self.message: str = message or get_default_message(self.message_code)
        self.details = details or {}
        self.headers = headers or {}
        super().__init__(self.message)

    def to_response_dict(self) -> dict:
        """Convert exception to API response format."""
        return {
            "success": False,
            "message_code": self.message_code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(InstitutionAPIException):
    """Referenced institution or classroom does not exist."""

    default_code = MessageCode.RESOURCE_NOT_FOUND
    default_status = status.HTTP_404_NOT_FOUND


class InvalidTransitionError(InstitutionAPIException):
    """Requested status change is not allowed from the current status."""

    default_code = MessageCode.INVALID_STATUS_TRANSITION
    default_status = status.HTTP_409_CONFLICT


class ConcurrentModificationError(InstitutionAPIException):
    """The row changed between read and write (optimistic lock lost)."""

    default_code = MessageCode.CONCURRENT_MODIFICATION
    default_status = status.HTTP_409_CONFLICT


class PersistenceError(InstitutionAPIException):
    """Storage layer failure. Not retried here."""

    default_code = MessageCode.PERSISTENCE_ERROR
    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR


class ProvisioningError(InstitutionAPIException):
    """Remote user creation failed or timed out; compensation completed."""

    default_code = MessageCode.USER_PROVISIONING_FAILED
    default_status = status.HTTP_502_BAD_GATEWAY


class CompensationError(InstitutionAPIException):
    """Cleanup after a provisioning failure also failed.

    Orphaned remote users or a leftover pending institution need manual
    reconciliation; ``details`` lists what could not be cleaned up.
    """

    default_code = MessageCode.COMPENSATION_FAILED
    default_status = status.HTTP_502_BAD_GATEWAY


def _serializable_errors(exc: RequestValidationError) -> list[dict]:
    try:
        serializable_errors = []
        for error in exc.errors():
            error_dict = dict(error)
            if "input" in error_dict and hasattr(error_dict["input"], "isoformat"):
                error_dict["input"] = error_dict["input"].isoformat()
            # ctx may carry the raw exception instance
            if "ctx" in error_dict:
                error_dict["ctx"] = {k: str(v) for k, v in error_dict["ctx"].items()}
            serializable_errors.append(error_dict)
        return serializable_errors
    except Exception:
        return [{"msg": "Validation error occurred", "type": "validation_error"}]


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""

    @app.exception_handler(InstitutionAPIException)
    async def institution_exception_handler(
        request: Request, exc: InstitutionAPIException
    ) -> JSONResponse:
        """Handle service exceptions."""
        log = logger.critical if isinstance(exc, CompensationError) else logger.error
        if exc.status_code < 500:
            log = logger.warning
        log(
            f"Service exception: {exc.message_code.value}",
            path=request.url.path,
            method=request.method,
            message_code=exc.message_code.value,
            details=exc.details,
        )

        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_response_dict(),
            headers=exc.headers,
        )

    @app.exception_handler(HTTPException)
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Handle FastAPI and Starlette HTTP exceptions."""
        logger.warning(
            f"HTTP exception {exc.status_code}: {exc.detail}",
            path=request.url.path,
            method=request.method,
        )

        message_code = (
            MessageCode.RESOURCE_NOT_FOUND
            if exc.status_code == status.HTTP_404_NOT_FOUND
            else MessageCode.BAD_REQUEST
            if exc.status_code < 500
            else MessageCode.INTERNAL_ERROR
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "message_code": message_code,
                "message": str(exc.detail),
                "details": {"description": "HTTP exception occurred"},
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle request validation errors."""
        logger.warning(
            "Validation error occurred",
            path=request.url.path,
            method=request.method,
        )

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "success": False,
                "message_code": MessageCode.INVALID_INPUT,
                "message": get_default_message(MessageCode.INVALID_INPUT),
                "details": {
                    "description": "Request validation failed",
                    "validation_errors": _serializable_errors(exc),
                },
            },
        )

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_exception_handler(
        request: Request, exc: SQLAlchemyError
    ) -> JSONResponse:
        """Handle database errors that escaped the store."""
        logger.error(
            f"Database error: {str(exc)}",
            path=request.url.path,
            method=request.method,
            exception_type=type(exc).__name__,
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "message_code": MessageCode.PERSISTENCE_ERROR,
                "message": "Database error occurred",
                "details": {"database_error": "Internal database error"},
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle all other unhandled exceptions."""
        if isinstance(exc, InstitutionAPIException):
            return await institution_exception_handler(request, exc)

        logger.error(
            f"Unhandled exception: {str(exc)}",
            path=request.url.path,
            method=request.method,
            exception_type=type(exc).__name__,
            traceback=traceback.format_exc(),
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "message_code": MessageCode.INTERNAL_ERROR,
                "message": "Internal server error",
                "details": {"error_type": type(exc).__name__},
            },
        )
