"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MALFORMED_PAYLOAD = "MALFORMED_PAYLOAD"
    INVALID_TIMEZONE = "INVALID_TIMEZONE"

    # Authorization errors (403)
    FORBIDDEN = "FORBIDDEN"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    IDENTITY_ERROR = "IDENTITY_ERROR"
    PROFILE_ERROR = "PROFILE_ERROR"
    CHAT_SETUP_ERROR = "CHAT_SETUP_ERROR"
    TIMEZONE_UPDATE_ERROR = "TIMEZONE_UPDATE_ERROR"

    # Unavailable (503)
    WEBHOOK_NOT_CONFIGURED = "WEBHOOK_NOT_CONFIGURED"


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


class ConfigurationError(RuntimeError):
    """Required settings are missing at startup."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing required environment variables: {', '.join(missing)}")


class MalformedPayloadError(AppException):
    """Webhook body matches neither the message nor the callback envelope."""

    def __init__(self, message: str = "Bad Request") -> None:
        super().__init__(
            error_code=ErrorCode.MALFORMED_PAYLOAD,
            message=message,
            status_code=400,
        )


class WebhookForbiddenError(AppException):
    """Secret header missing or mismatched."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.FORBIDDEN,
            message="Forbidden",
            status_code=403,
        )


class WebhookNotConfiguredError(AppException):
    """No webhook secret configured; all traffic is refused."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.WEBHOOK_NOT_CONFIGURED,
            message="Service Unavailable",
            status_code=503,
        )


class ProvisioningError(AppException):
    """Identity, profile or chat setup failed; the platform should retry."""

    def __init__(self, error_code: ErrorCode, message: str) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=500,
        )


class IdentityProvisioningError(ProvisioningError):
    """Anonymous session could not be minted."""

    def __init__(self, message: str = "Auth error") -> None:
        super().__init__(ErrorCode.IDENTITY_ERROR, message)


class ProfileProvisioningError(ProvisioningError):
    """Profile lookup, creation or relink failed."""

    def __init__(self, message: str = "Profile error") -> None:
        super().__init__(ErrorCode.PROFILE_ERROR, message)


class ChatProvisioningError(ProvisioningError):
    """Chat or membership records could not be ensured."""

    def __init__(self, message: str = "Chat setup error") -> None:
        super().__init__(ErrorCode.CHAT_SETUP_ERROR, message)


class InvalidTimezoneError(AppException):
    """Timezone is not a recognisable UTC offset."""

    def __init__(self, value: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_TIMEZONE,
            message=f"Invalid UTC offset: {value}",
            status_code=400,
            details={"timezone": value},
        )


class TimezoneUpdateError(AppException):
    """Timezone could not be written to the profile."""

    def __init__(self, profile_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.TIMEZONE_UPDATE_ERROR,
            message="Failed to update timezone",
            status_code=500,
            details={"profile_id": profile_id},
        )
