"""
Error taxonomy shared by the storage layer, the chat orchestrator and the
HTTP surface.

Each error carries the HTTP status it maps to and the short `error` string
the browser client switches on. main.py turns them into JSON responses.
"""
from typing import Any


class MaintenanceAPIError(Exception):
    """Base exception for the API."""

    status_code = 500
    error = "internal-server-error"

    def __init__(self, message: str | None = None, detail: Any = None):
        super().__init__(message or self.error)
        self.message = message or self.error
        self.detail = detail

    def to_body(self) -> dict:
        body: dict[str, Any] = {"error": self.message}
        if self.detail is not None:
            body["detail"] = self.detail
        return body


class BadRequest(MaintenanceAPIError):
    status_code = 400
    error = "bad-request"


class NotFound(MaintenanceAPIError):
    status_code = 404
    error = "flight not found"


class ConfigurationError(MaintenanceAPIError):
    """Required provider settings are missing. Raised before any network call."""

    status_code = 500
    error = "ai provider not configured"


class StorageError(MaintenanceAPIError):
    status_code = 500
    error = "storage error"


class UpstreamError(MaintenanceAPIError):
    """The AI provider answered with an error status."""

    status_code = 502
    error = "ai-service-error"

    def __init__(self, status: int, detail: Any = None):
        super().__init__(self.error, detail)
        self.upstream_status = status

    def to_body(self) -> dict:
        body = super().to_body()
        body["status"] = self.upstream_status
        return body


class UpstreamUnavailable(MaintenanceAPIError):
    """No response from the AI provider (network failure or timeout)."""

    status_code = 503
    error = "ai-service-unavailable"


class UpstreamMalformed(MaintenanceAPIError):
    """The AI provider's body was not JSON or lacked the reply fields."""

    status_code = 502
    error = "failed-to-parse-ai-response"
