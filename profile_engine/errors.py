"""
Domain errors raised by the ingestion and resume lifecycle services.

Every error carries a stable ``kind`` that is rendered to API callers as
``{"success": false, "error": kind, "message": ..., "details": ...}``.
"""
from typing import Any, Optional


class ProfileEngineError(Exception):
    kind = "INTERNAL_SERVER_ERROR"
    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"success": False, "error": self.kind, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationFailed(ProfileEngineError):
    """Malformed or missing input the caller can correct."""
    kind = "VALIDATION_ERROR"
    status_code = 400


class ExtractionFailed(ProfileEngineError):
    """The AI extraction service failed, timed out or returned garbage."""
    kind = "EXTRACTION_FAILED"
    status_code = 502

    INVALID_RESPONSE_FORMAT = "InvalidResponseFormat"
    TIMEOUT = "Timeout"
    SERVICE_ERROR = "ServiceError"
    NOT_CONFIGURED = "NotConfigured"

    def __init__(self, message: str, reason: str = SERVICE_ERROR, details: Optional[Any] = None):
        super().__init__(message, details)
        self.reason = reason
        if reason == self.TIMEOUT:
            self.status_code = 504

    @property
    def retryable(self) -> bool:
        return self.reason != self.NOT_CONFIGURED

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["reason"] = self.reason
        body["retryable"] = self.retryable
        return body


class AlreadyExists(ProfileEngineError):
    kind = "ALREADY_EXISTS"
    status_code = 409


class NotFound(ProfileEngineError):
    kind = "NOT_FOUND"
    status_code = 404


class StorageFailed(ProfileEngineError):
    """Blob upload/download/delete failure."""
    kind = "STORAGE_FAILED"
    status_code = 502


class InternalError(ProfileEngineError):
    kind = "INTERNAL_SERVER_ERROR"
    status_code = 500
