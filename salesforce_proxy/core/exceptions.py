"""Application exceptions."""

from typing import Any


class AppException(Exception):
    """Base application exception."""

    status_code = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigurationError(AppException):
    """Neither Salesforce credential set is complete."""

    pass


class AuthError(AppException):
    """Salesforce token endpoint rejected the grant."""

    status_code = 502


class SalesforceAPIError(AppException):
    """Salesforce REST or SOAP call failed."""

    status_code = 502

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        response_status: int | None = None,
    ):
        super().__init__(message, details)
        self.response_status = response_status


class SalesforceRateLimitError(SalesforceAPIError):
    """Salesforce REQUEST_LIMIT_EXCEEDED."""

    status_code = 503


class LeadValidationError(AppException):
    """Salesforce rejected the Lead fields (missing or malformed values)."""

    status_code = 400


class StepFailedError(AppException):
    """A fatal submission step failed; the submission is aborted."""

    def __init__(self, step: str, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, {"step": step, **(details or {})})
        self.step = step
