"""Request parsing, building and the generation service client."""

from seqforge.generation.client import GenerationClient, parse_retry_after
from seqforge.generation.config import (
    CREDENTIAL_SETTING,
    GenerationConfig,
    get_generation_config,
)
from seqforge.generation.errors import (
    AuthConfigError,
    AuthError,
    ErrorKind,
    GenerationError,
    NetworkError,
    RateLimitError,
    RequestValidationError,
    SchemaError,
    SeqforgeError,
    UpstreamError,
    classify_error,
)
from seqforge.generation.input_parser import DEFAULT_PATTERNS, InputParser, PhrasePattern
from seqforge.generation.models import (
    GenerationRequest,
    GenerationResponse,
    RequestDefaults,
    RequestFields,
    is_nucleotide_sequence,
)
from seqforge.generation.request_builder import RequestBuilder

__all__ = [
    "CREDENTIAL_SETTING",
    "DEFAULT_PATTERNS",
    "AuthConfigError",
    "AuthError",
    "ErrorKind",
    "GenerationClient",
    "GenerationConfig",
    "GenerationError",
    "GenerationRequest",
    "GenerationResponse",
    "InputParser",
    "NetworkError",
    "PhrasePattern",
    "RateLimitError",
    "RequestBuilder",
    "RequestDefaults",
    "RequestFields",
    "RequestValidationError",
    "SchemaError",
    "SeqforgeError",
    "UpstreamError",
    "classify_error",
    "get_generation_config",
    "is_nucleotide_sequence",
    "parse_retry_after",
]
