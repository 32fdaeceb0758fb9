"""
Error taxonomy and the classifier that turns any raised error into a
user-facing ResultMessage.
"""
from __future__ import annotations

import uuid
from enum import Enum
from typing import Any, Dict, Optional

import structlog

from .models import ResultMessage

log = structlog.get_logger()

STORAGE_ERROR_TEXT = "An error occurred while saving your data. Please try again later."
UNKNOWN_ERROR_TEXT = "An unexpected error occurred. Please try again later."


class ErrorType(str, Enum):
    VALIDATION = "VALIDATION"
    BUSINESS_LOGIC = "BUSINESS_LOGIC"
    STORAGE = "STORAGE"
    UNKNOWN = "UNKNOWN"


class AppError(Exception):
    """
    Base class for errors raised inside the todo core.

    Attributes:
        type: ErrorType used to pick the user-facing text
        code: Short machine readable code, defaults to the type name
        context: Extra diagnostic fields, logged but never shown
    """

    def __init__(
        self,
        message: str,
        type: ErrorType = ErrorType.UNKNOWN,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.type = type
        self.code = code or type.value
        self.context = context or {}


class ValidationError(AppError):
    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message, ErrorType.VALIDATION, "VALIDATION_ERROR", {"field": field})


class BusinessLogicError(AppError):
    def __init__(self, message: str, code: Optional[str] = None, **context: Any) -> None:
        super().__init__(message, ErrorType.BUSINESS_LOGIC, code or "BUSINESS_ERROR", context)


class StorageError(AppError):
    def __init__(self, message: str, operation: Optional[str] = None) -> None:
        super().__init__(message, ErrorType.STORAGE, "STORAGE_ERROR", {"operation": operation})


def user_friendly_message(message: str, error_type: ErrorType) -> str:
    if error_type in (ErrorType.VALIDATION, ErrorType.BUSINESS_LOGIC):
        return message
    if error_type is ErrorType.STORAGE:
        return STORAGE_ERROR_TEXT
    return UNKNOWN_ERROR_TEXT


# PUBLIC_INTERFACE
def handle_error(error: BaseException) -> ResultMessage:
    """
    Convert any error into an `error` ResultMessage and log its details.

    Validation and business-rule messages are passed through verbatim; storage
    and unknown failures get a generic text so raw exception detail never
    reaches the user. This function never raises.
    """
    if isinstance(error, AppError):
        error_type = error.type
        message = error.message
        if error_type in (ErrorType.VALIDATION, ErrorType.BUSINESS_LOGIC):
            log.warning(
                "Application error",
                error=message,
                type=error_type.value,
                code=error.code,
                context=error.context,
            )
        else:
            log.error(
                "Application error",
                error=message,
                type=error_type.value,
                code=error.code,
                context=error.context,
                exc_info=error,
            )
    else:
        error_type = ErrorType.UNKNOWN
        message = str(error)
        log.error("Unexpected error", error=message, error_class=type(error).__name__, exc_info=error)

    return {
        "id": uuid.uuid4().hex,
        "type": "error",
        "text": user_friendly_message(message, error_type),
    }
