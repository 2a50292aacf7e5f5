"""
Custom exception hierarchy for the Applivery deploy step.

Every failure carries a FailureKind so the entry point can report
which category occurred:
- api: the remote service rejected the request (status + body)
- network: the request never produced a response
- parse: a response arrived but its body has an unexpected shape
- validation: bad local input, raised before any network call
- processing_timeout: the uploaded build never reached "processed"

None of these are retried by the clients or the orchestrator.
"""
from enum import Enum
from typing import Optional


class FailureKind(str, Enum):
    API = "api"
    NETWORK = "network"
    PARSE = "parse"
    VALIDATION = "validation"
    PROCESSING_TIMEOUT = "processing_timeout"


class AppliveryError(Exception):
    """Base exception for the Applivery deploy step."""

    kind: FailureKind

    @property
    def label(self) -> str:
        """Human readable name of the failure kind, used in diagnostics."""
        return _LABELS[self.kind]


class AppliveryAPIError(AppliveryError):
    """
    Remote service answered with a non-success status.

    Carries the HTTP status code and the raw response body text.
    """
    kind = FailureKind.API

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ):
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message)


class AppliveryNetworkError(AppliveryError):
    """Request was sent but no response was received."""
    kind = FailureKind.NETWORK

    def __init__(self, message: str, original_error: BaseException):
        self.original_error = original_error
        super().__init__(message)


class AppliveryParseError(AppliveryError):
    """Response body does not match the expected envelope."""
    kind = FailureKind.PARSE

    def __init__(self, message: str, raw_body: str):
        self.raw_body = raw_body
        super().__init__(message)


class AppliveryValidationError(AppliveryError):
    """Invalid local input (slug, build path, settings)."""
    kind = FailureKind.VALIDATION


class ProcessingTimeoutError(AppliveryError):
    """
    Build did not reach the processed status within the allowed attempts.

    Raised after a successful upload, so the run still fails.
    """
    kind = FailureKind.PROCESSING_TIMEOUT

    def __init__(self, build_id: str, max_attempts: int, last_status: Optional[str] = None):
        self.build_id = build_id
        self.max_attempts = max_attempts
        self.last_status = last_status
        super().__init__(
            f"Build did not complete processing after {max_attempts} attempts, "
            "check the Applivery dashboard for more information"
        )


_LABELS = {
    FailureKind.API: "API",
    FailureKind.NETWORK: "Network",
    FailureKind.PARSE: "Parse",
    FailureKind.VALIDATION: "Validation",
    FailureKind.PROCESSING_TIMEOUT: "Processing Timeout",
}
