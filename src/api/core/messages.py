"""Centralized message codes and default messages for API responses."""

from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel


class MessageCode(str, Enum):
    """Centralized message codes for API responses."""

    # Success codes
    SUCCESS = "SUCCESS"
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    DELETED = "DELETED"

    # Institution management
    INSTITUTION_CREATED = "INSTITUTION_CREATED"
    INSTITUTION_UPDATED = "INSTITUTION_UPDATED"
    INSTITUTION_DELETED = "INSTITUTION_DELETED"
    INSTITUTION_RESTORED = "INSTITUTION_RESTORED"
    INSTITUTION_NOT_FOUND = "INSTITUTION_NOT_FOUND"

    # Classroom management
    CLASSROOM_CREATED = "CLASSROOM_CREATED"
    CLASSROOM_UPDATED = "CLASSROOM_UPDATED"
    CLASSROOM_DELETED = "CLASSROOM_DELETED"
    CLASSROOM_RESTORED = "CLASSROOM_RESTORED"
    CLASSROOM_NOT_FOUND = "CLASSROOM_NOT_FOUND"

    # Lifecycle errors
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    CONCURRENT_MODIFICATION = "CONCURRENT_MODIFICATION"

    # Cross-service errors
    USER_PROVISIONING_FAILED = "USER_PROVISIONING_FAILED"
    COMPENSATION_FAILED = "COMPENSATION_FAILED"

    # Storage errors
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"

    # Validation errors
    INVALID_INPUT = "INVALID_INPUT"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    BAD_REQUEST = "BAD_REQUEST"


# Default messages for each message code
DEFAULT_MESSAGES = {
    # Success messages
    MessageCode.SUCCESS: "Operation completed successfully",
    MessageCode.CREATED: "Resource created successfully",
    MessageCode.UPDATED: "Resource updated successfully",
    MessageCode.DELETED: "Resource deleted successfully",
    # Institution management
    MessageCode.INSTITUTION_CREATED: "Institution created successfully",
    MessageCode.INSTITUTION_UPDATED: "Institution updated successfully",
    MessageCode.INSTITUTION_DELETED: "Institution deleted successfully",
    MessageCode.INSTITUTION_RESTORED: "Institution restored successfully",
    MessageCode.INSTITUTION_NOT_FOUND: "Institution not found",
    # Classroom management
    MessageCode.CLASSROOM_CREATED: "Classroom created successfully",
    MessageCode.CLASSROOM_UPDATED: "Classroom updated successfully",
    MessageCode.CLASSROOM_DELETED: "Classroom deleted successfully",
    MessageCode.CLASSROOM_RESTORED: "Classroom restored successfully",
    MessageCode.CLASSROOM_NOT_FOUND: "Classroom not found",
    # Lifecycle errors
    MessageCode.INVALID_STATUS_TRANSITION: "Invalid status transition",
    MessageCode.CONCURRENT_MODIFICATION: "Resource was modified concurrently, retry the request",
    # Cross-service errors
    MessageCode.USER_PROVISIONING_FAILED: "User provisioning failed, institution was not created",
    MessageCode.COMPENSATION_FAILED: "User provisioning failed and cleanup did not complete, manual reconciliation required",
    # Storage errors
    MessageCode.PERSISTENCE_ERROR: "Storage layer unavailable",
    # Validation errors
    MessageCode.INVALID_INPUT: "Invalid input provided",
    # Generic errors
    MessageCode.INTERNAL_ERROR: "Internal server error",
    MessageCode.RESOURCE_NOT_FOUND: "Resource not found",
    MessageCode.BAD_REQUEST: "Bad request",
}

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Uniform response envelope shared by every endpoint."""

    success: bool = True
    message_code: MessageCode
    message: str
    data: T | None = None

    @classmethod
    def success_response(
        cls,
        message_code: MessageCode = MessageCode.SUCCESS,
        message: str | None = None,
        data: T | None = None,
    ) -> "APIResponse[T]":
        """Create a success response."""
        return cls(
            success=True,
            message_code=message_code,
            message=message or DEFAULT_MESSAGES.get(message_code, "Success"),
            data=data,
        )


def get_default_message(message_code: MessageCode) -> str:
    """Get default message for a message code."""
    return DEFAULT_MESSAGES.get(message_code, "Operation completed")
