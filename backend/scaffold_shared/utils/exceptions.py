"""
Centralized HTTP exceptions for consistent error handling.

Usage:
    from scaffold_shared.utils.exceptions import NotFoundError, ValidationFailedError

    raise NotFoundError("Customer", customer_id)
    raise ValidationFailedError({"email": ["The email has already been taken."]})
"""

from typing import Any

from fastapi import HTTPException, status

from scaffold_shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and response format.
    """

    def __init__(
        self,
        status_code: int,
        detail: str | dict[str, Any],
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        message = detail["message"] if isinstance(detail, dict) else detail
        log_fn(message, status_code=status_code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("Customer", 123)
        raise NotFoundError("Order", order_id, resource="orders")
    """

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} with ID {entity_id} not found"
        else:
            detail = f"{entity} not found"

        self.entity = entity
        self.entity_id = entity_id

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400).

    Usage:
        raise ValidationError("Page must be a positive integer")
    """

    def __init__(self, detail: str | dict[str, Any], **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class ValidationFailedError(ValidationError):
    """
    Field-level validation failure.

    The response detail is ``{"message": ..., "errors": {field: [messages]}}``.
    The mutation that triggered the validation is never attempted.
    """

    message = "The given data was invalid."

    def __init__(self, errors: dict[str, list[str]], **log_context: Any):
        self.errors = errors
        super().__init__(
            {"message": self.message, "errors": self._detail_errors()},
            fields=sorted(errors),
            **log_context,
        )

    def _detail_errors(self) -> Any:
        return self.errors


class DependencyBlockedError(ValidationFailedError):
    """
    Delete refused because live rows in other tables still reference the entity.

    ``messages`` lists one message per blocking dependency, in declaration
    order, so the caller sees every blocking reference at once. The response
    detail carries that list as ``errors``.
    """

    message = "The record cannot be deleted while other records depend on it."

    def __init__(self, messages: list[str], **log_context: Any):
        self.messages = messages
        super().__init__({"dependencies": messages}, **log_context)

    def _detail_errors(self) -> Any:
        return self.messages


# =============================================================================
# 500 Internal Server Errors
# =============================================================================


class InternalError(AppException):
    """
    Internal server error (500).

    Usage:
        raise InternalError("Upload storage is not configured", field="avatar")
    """

    def __init__(self, detail: str = "Internal server error", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            log_level="error",
            **log_context,
        )
