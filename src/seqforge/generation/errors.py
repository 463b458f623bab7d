"""Error taxonomy for the sequence generation pipeline.

Every failure the pipeline can produce has an ``ErrorKind``. Local input
problems (``RequestValidationError``, a parse miss) are surfaced to the user as
guidance; ``GenerationError`` subclasses describe failures of the external
call and are only ever shown to the user as a generic message.
"""

import logging
from enum import StrEnum

logger = logging.getLogger(__name__)


class ErrorKind(StrEnum):
    """Kinds of failure an action invocation can end in."""

    VALIDATION = "validation_error"
    PARSE_MISS = "parse_miss"
    AUTH_CONFIG = "auth_config_error"
    NETWORK = "network_error"
    AUTH = "auth_error"
    RATE_LIMIT = "rate_limit_error"
    UPSTREAM = "upstream_error"
    SCHEMA = "schema_error"
    UNKNOWN = "unknown"


class SeqforgeError(Exception):
    """Base class for all errors raised by seqforge."""

    kind: ErrorKind = ErrorKind.UNKNOWN


class RequestValidationError(SeqforgeError):
    """A generation request is missing required fields or has invalid values."""

    kind = ErrorKind.VALIDATION


class AuthConfigError(SeqforgeError):
    """No credential for the generation service is configured."""

    kind = ErrorKind.AUTH_CONFIG


class GenerationError(SeqforgeError):
    """The call to the generation service failed."""


class NetworkError(GenerationError):
    """No response was received (connection failure or transport timeout)."""

    kind = ErrorKind.NETWORK


class AuthError(GenerationError):
    """The service rejected the credential (HTTP 401)."""

    kind = ErrorKind.AUTH

    def __init__(self, message: str = "invalid credential") -> None:
        super().__init__(message)


class RateLimitError(GenerationError):
    """The service rate limited the call (HTTP 429).

    Attributes:
        retry_after: Seconds the service asked the caller to wait, if it said.
    """

    kind = ErrorKind.RATE_LIMIT

    def __init__(self, message: str = "rate limited", retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class UpstreamError(GenerationError):
    """Any other non-2xx response.

    Attributes:
        status_code: HTTP status returned by the service.
        body: Response body text.
    """

    kind = ErrorKind.UPSTREAM

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"upstream returned HTTP {status_code}: {body[:200]}")
        self.status_code = status_code
        self.body = body


class SchemaError(GenerationError):
    """A 2xx response did not carry a usable ``generated_sequence``."""

    kind = ErrorKind.SCHEMA


def classify_error(error: BaseException) -> ErrorKind:
    """Map an exception to its ErrorKind.

    Args:
        error: Any exception caught while handling a message.

    Returns:
        The error's own kind for seqforge errors, UNKNOWN otherwise.
    """
    if isinstance(error, SeqforgeError):
        return error.kind
    logger.debug("Unclassified error type %s", type(error).__name__)
    return ErrorKind.UNKNOWN
