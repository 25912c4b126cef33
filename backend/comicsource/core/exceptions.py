"""Custom exception classes for the application."""

from typing import Optional, Sequence, Tuple


class ComickSourceException(Exception):
    """Base exception for all Comick Source errors."""

    code: str = "internal_error"
    status_code: int = 500

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class NotFoundError(ComickSourceException):
    """Raised when a requested resource is not found."""

    code = "not_found"
    status_code = 404

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} with identifier '{identifier}' not found")


class UnknownSourceError(NotFoundError):
    """Raised when a source name does not match any registered adapter."""

    code = "unknown_source"
    status_code = 400

    def __init__(self, name: str, available: Sequence[str]):
        super().__init__("Source", name)
        self.available = list(available)
        self.message = f"Unsupported source. Available sources: {', '.join(self.available)}"
        self.args = (self.message,)


class InvalidRequestError(ComickSourceException):
    """Raised when a caller-supplied request is missing required data."""

    code = "invalid_request"
    status_code = 400


class AdapterRegistrationError(ComickSourceException):
    """Raised when an adapter cannot be added to the registry."""

    code = "adapter_registration_failed"


class SourceError(ComickSourceException):
    """Raised when an adapter fails to talk to (or understand) its source.

    Attributes:
        source: Name of the adapter that failed
        stage: Fetch stage that produced the error ("direct", "proxy"), if any
        transitions: Fetch state machine transitions leading to this error
    """

    code = "source_error"
    status_code = 502

    def __init__(self, source: str, message: str, stage: Optional[str] = None):
        self.source = source
        self.stage = stage
        self.transitions: Tuple = ()
        prefix = f"{source} ({stage})" if stage else source
        super().__init__(f"{prefix}: {message}")
        self.reason = message


class NetworkFailure(SourceError):
    """Connection or transport level failure."""

    code = "network_failure"


class HttpStatusFailure(SourceError):
    """The source answered with a non-2xx status."""

    code = "http_status_failure"

    def __init__(self, source: str, status_code: int, message: str = "", stage: Optional[str] = None):
        self.http_status = status_code
        super().__init__(source, message or f"HTTP {status_code}", stage=stage)


class BotWallDetected(SourceError):
    """The source served an anti-automation challenge page."""

    code = "bot_wall_detected"

    def __init__(self, source: str, message: str = "Cloudflare protection detected", stage: Optional[str] = None):
        super().__init__(source, message, stage=stage)


class TimeoutExceeded(SourceError):
    """The source did not answer within the allotted time."""

    code = "timeout"
    status_code = 504


class ParseFailure(SourceError):
    """The source answered, but the payload could not be understood."""

    code = "parse_failure"


class UnsupportedCapabilityError(SourceError):
    """The adapter does not implement an optional capability."""

    code = "unsupported_capability"
    status_code = 400
