"""Exception hierarchy raised by :mod:`cloudpdf`."""

from __future__ import annotations

__all__ = [
    "ApiError",
    "CloudPDFError",
    "ConfigurationError",
    "InvalidCredentialError",
    "UploadError",
    "WorkflowError",
]


class CloudPDFError(Exception):
    """Base class for every error surfaced by the client."""


class ConfigurationError(CloudPDFError):
    """Raised when the client is missing the configuration an operation needs."""


class ApiError(CloudPDFError):
    """Raised when the CloudPDF API answers with a non-success response.

    Args:
        message: Human readable description.
        code: Error code reported by the server, when the response body
            carried one.
        status_code: HTTP status of the failed response. ``None`` when no
            response was received at all.
    """

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code


class UploadError(CloudPDFError):
    """Raised when file content cannot be sent to a pre-signed upload URL."""


class WorkflowError(CloudPDFError):
    """Raised when the API returns a response the upload workflow cannot use."""


class InvalidCredentialError(CloudPDFError):
    """Raised when a signed credential fails verification."""
