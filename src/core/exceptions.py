"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"

    # Authorization errors (403)
    FORBIDDEN = "FORBIDDEN"
    NOT_OWNER = "NOT_OWNER"

    # Not found errors (404)
    NOT_FOUND = "NOT_FOUND"
    PROPERTY_NOT_FOUND = "PROPERTY_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    INVITATION_NOT_FOUND = "INVITATION_NOT_FOUND"
    TRUST_LEVEL_NOT_FOUND = "TRUST_LEVEL_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVITATION_EXPIRED = "INVITATION_EXPIRED"
    INVITATION_ALREADY_USED = "INVITATION_ALREADY_USED"
    LAST_TRUST_LEVEL = "LAST_TRUST_LEVEL"
    TRUST_LEVEL_IN_USE = "TRUST_LEVEL_IN_USE"

    # Conflict errors (409)
    INVALID_STATE = "INVALID_STATE"
    ENLISTMENT_IN_PROGRESS = "ENLISTMENT_IN_PROGRESS"
    DUPLICATE_TRUST_LEVEL = "DUPLICATE_TRUST_LEVEL"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Upstream errors (502/504)
    PROVIDER_ERROR = "PROVIDER_ERROR"
    TRANSIENT_NETWORK_ERROR = "TRANSIENT_NETWORK_ERROR"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ValidationError(AppException):
    """Input failed a business-level shape check."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(
            error_code=ErrorCode.VALIDATION_ERROR,
            message=message,
            status_code=400,
            details={"field": field} if field else None,
        )


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class AuthorizationError(AppException):
    """Authorization failed."""

    def __init__(
        self,
        message: str = "Access denied",
        error_code: ErrorCode = ErrorCode.FORBIDDEN,
        details: Any | None = None,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=403,
            details=details,
        )


class NotOwnerError(AuthorizationError):
    """Caller does not own the property."""

    def __init__(self, property_id: str) -> None:
        super().__init__(
            message="You do not own this property",
            error_code=ErrorCode.NOT_OWNER,
            details={"property_id": property_id},
        )


class NotFoundError(AppException):
    """Entity not found."""

    def __init__(
        self,
        message: str = "Resource not found",
        error_code: ErrorCode = ErrorCode.NOT_FOUND,
        details: Any | None = None,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=404,
            details=details,
        )


class PropertyNotFoundError(NotFoundError):
    """Property not found."""

    def __init__(self, property_id: str) -> None:
        super().__init__(
            message=f"Property not found: {property_id}",
            error_code=ErrorCode.PROPERTY_NOT_FOUND,
            details={"property_id": property_id},
        )


class UserNotFoundError(NotFoundError):
    """User not found."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            message=f"User not found: {user_id}",
            error_code=ErrorCode.USER_NOT_FOUND,
            details={"user_id": user_id},
        )


class InvitationNotFoundError(NotFoundError):
    """Invitation not found."""

    def __init__(self, invitation_id: str = "") -> None:
        super().__init__(
            message="Invitation not found",
            error_code=ErrorCode.INVITATION_NOT_FOUND,
            details={"invitation_id": invitation_id} if invitation_id else None,
        )


class TrustLevelNotFoundError(NotFoundError):
    """Trust level not found."""

    def __init__(self, level_id: str) -> None:
        super().__init__(
            message=f"Trust level not found: {level_id}",
            error_code=ErrorCode.TRUST_LEVEL_NOT_FOUND,
            details={"trust_level_id": level_id},
        )


class InvalidStateError(AppException):
    """Entity is not in the lifecycle state the operation requires."""

    def __init__(
        self,
        current: str,
        required: str | list[str],
        entity_id: str | None = None,
    ) -> None:
        required_list = [required] if isinstance(required, str) else list(required)
        super().__init__(
            error_code=ErrorCode.INVALID_STATE,
            message=(
                f"Invalid state: currently '{current}', "
                f"requires {' or '.join(repr(r) for r in required_list)}"
            ),
            status_code=409,
            details={"current": current, "required": required_list, "entity_id": entity_id},
        )


class EnlistmentInProgressError(AppException):
    """Another caller holds the enlistment claim for this property."""

    def __init__(self, property_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.ENLISTMENT_IN_PROGRESS,
            message="Enlistment for this property is already in progress",
            status_code=409,
            details={"property_id": property_id},
        )


class InvitationExpiredError(AppException):
    """Invitation has expired."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.INVITATION_EXPIRED,
            message="This invitation has expired",
            status_code=400,
        )


class InvitationAlreadyUsedError(AppException):
    """Invitation has already been accepted or declined."""

    def __init__(self, status: str = "") -> None:
        super().__init__(
            error_code=ErrorCode.INVITATION_ALREADY_USED,
            message="This invitation has already been used",
            status_code=400,
            details={"status": status} if status else None,
        )


class DuplicateTrustLevelError(AppException):
    """Owner already defined this trust level number."""

    def __init__(self, level: int) -> None:
        super().__init__(
            error_code=ErrorCode.DUPLICATE_TRUST_LEVEL,
            message=f"Trust level {level} already exists",
            status_code=409,
            details={"level": level},
        )


class LastTrustLevelError(AppException):
    """Owners must keep at least one trust level."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.LAST_TRUST_LEVEL,
            message="You must have at least one trust level",
            status_code=400,
        )


class TrustLevelInUseError(AppException):
    """Trust level still has guests assigned."""

    def __init__(self, level_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.TRUST_LEVEL_IN_USE,
            message="Trust level still has guests assigned",
            status_code=400,
            details={"trust_level_id": level_id},
        )


class ProviderError(AppException):
    """External booking provider call failed."""

    def __init__(
        self,
        message: str,
        operation: str = "",
        upstream_status: int | None = None,
    ) -> None:
        super().__init__(
            error_code=ErrorCode.PROVIDER_ERROR,
            message=message,
            status_code=502,
            details={
                "operation": operation,
                "upstream_status": upstream_status,
                "retryable": True,
            },
        )


class TransientNetworkError(AppException):
    """Timeout or connection failure talking to an external service."""

    def __init__(self, message: str, operation: str = "") -> None:
        super().__init__(
            error_code=ErrorCode.TRANSIENT_NETWORK_ERROR,
            message=message,
            status_code=504,
            details={"operation": operation, "retryable": True},
        )
