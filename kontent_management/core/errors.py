"""
Error taxonomy for the Kontent.ai Management API client.

Local precondition failures (InvalidArgumentError, MissingMetadataError) are
raised before any request is sent. Everything else comes out of the executor.
"""

from typing import Any


class ManagementError(Exception):
    """Base error class for all client errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for structured logging."""
        result: dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result


class InvalidArgumentError(ManagementError, ValueError):
    """Caller input is missing or empty. Raised before any I/O."""


class MissingMetadataError(ManagementError):
    """A model property has no element id declared for it."""

    def __init__(self, model_type: type, property_name: str):
        super().__init__(
            f"Property '{property_name}' of {model_type.__name__} has no element id metadata",
            details={"model": model_type.__name__, "property": property_name},
        )
        self.model_type = model_type
        self.property_name = property_name


class APIError(ManagementError):
    """Non-retryable 4xx/5xx response from the API."""

    def __init__(
        self,
        message: str,
        status: int = 0,
        error_code: int | str | None = None,
        request_id: str | None = None,
        validation_errors: list[dict[str, Any]] | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.status = status
        self.error_code = error_code
        self.request_id = request_id
        self.validation_errors = validation_errors or []

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.status:
            result["status"] = self.status
        if self.error_code is not None:
            result["error_code"] = self.error_code
        if self.request_id:
            result["request_id"] = self.request_id
        if self.validation_errors:
            result["validation_errors"] = self.validation_errors
        return result


class TransientTransportError(ManagementError):
    """Network fault or transient status that outlived the retry policy."""

    def __init__(
        self,
        message: str,
        attempts: int,
        status: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.attempts = attempts
        self.status = status

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["attempts"] = self.attempts
        if self.status:
            result["status"] = self.status
        return result


class MalformedResponseError(ManagementError):
    """Success status but the body could not be deserialized."""

    def __init__(self, message: str, status: int, body: str | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.status = status
        self.body = body


class OperationCancelledError(ManagementError):
    """The caller's cancel event fired while the operation was in flight."""
