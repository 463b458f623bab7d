"""Request and response models for the sequence generation service.

Field names match the service's wire format, so ``GenerationRequest.to_payload()``
is the request body as sent.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from seqforge.generation.errors import SchemaError

NUCLEOTIDES = frozenset("ACGT")


def is_nucleotide_sequence(value: str) -> bool:
    """Return True if ``value`` is non-empty and only holds A, C, G, T (any case)."""
    return bool(value) and set(value.upper()) <= NUCLEOTIDES


class RequestFields(BaseModel):
    """Partially specified request, as extracted from a message.

    Every field is optional. Which fields were given explicitly is tracked by
    pydantic in ``model_fields_set``, so ``num_tokens=0`` is not the same as
    leaving ``num_tokens`` out.
    """

    model_config = ConfigDict(extra="forbid")

    sequence: str | None = None
    num_tokens: int | None = None
    temperature: float | None = None
    top_k: int | None = None
    top_p: float | None = None
    random_seed: int | None = None
    enable_sampled_probs: bool | None = None
    enable_logits: bool | None = None
    enable_elapsed_ms_per_token: bool | None = None

    def explicit(self) -> dict[str, Any]:
        """Return only the fields that were explicitly provided."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class RequestDefaults(BaseModel):
    """Values applied to request fields that were not given explicitly."""

    model_config = ConfigDict(frozen=True)

    num_tokens: int = 100
    temperature: float = 0.7
    top_k: int = 3
    top_p: float = 1.0
    random_seed: int | None = None
    enable_sampled_probs: bool = False
    enable_logits: bool = False
    enable_elapsed_ms_per_token: bool = False


class GenerationRequest(BaseModel):
    """Canonical request sent to the generation service.

    Attributes:
        sequence: Starting sequence, upper-cased, over {A, C, G, T}.
        num_tokens: Number of nucleotides to generate.
        temperature: Sampling temperature.
        top_k: Top-k sampling cutoff.
        top_p: Nucleus sampling cutoff in (0, 1].
        random_seed: Optional seed for reproducible sampling.
        enable_sampled_probs: Ask for per-token sampled probabilities.
        enable_logits: Ask for raw logits.
        enable_elapsed_ms_per_token: Ask for per-token timing.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    sequence: str = Field(min_length=1, description="Starting nucleotide sequence")
    num_tokens: int = Field(gt=0, description="Nucleotides to generate")
    temperature: float = Field(ge=0.0, description="Sampling temperature")
    top_k: int = Field(ge=1, description="Top-k sampling cutoff")
    top_p: float = Field(gt=0.0, le=1.0, description="Nucleus sampling cutoff")
    random_seed: int | None = Field(default=None, description="Sampling seed")
    enable_sampled_probs: bool = False
    enable_logits: bool = False
    enable_elapsed_ms_per_token: bool = False

    @field_validator("sequence")
    @classmethod
    def normalize_sequence(cls, v: str) -> str:
        """Upper-case the sequence and reject non-nucleotide characters."""
        v = v.strip().upper()
        if not is_nucleotide_sequence(v):
            raise ValueError("sequence must only contain A, C, G and T")
        return v

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON request body. ``random_seed`` is left out when unset."""
        payload = self.model_dump()
        if payload["random_seed"] is None:
            del payload["random_seed"]
        return payload


class GenerationResponse(BaseModel):
    """Result of a successful generation call.

    Attributes:
        generated_sequence: The generated nucleotide string.
        extensions: Every other field of the response body (probabilities,
            logits, timing), passed through untouched.
    """

    generated_sequence: str = Field(description="Generated nucleotide sequence")
    extensions: dict[str, Any] = Field(
        default_factory=dict, description="Optional fields returned by the service"
    )

    @classmethod
    def from_body(cls, body: Any) -> "GenerationResponse":
        """Build a response from a decoded JSON body.

        Raises:
            SchemaError: If the body is not an object or has no string
                ``generated_sequence``.
        """
        if not isinstance(body, dict):
            raise SchemaError(f"expected a JSON object, got {type(body).__name__}")

        extensions = dict(body)
        generated = extensions.pop("generated_sequence", None)
        if generated is None:
            raise SchemaError("response is missing generated_sequence")
        if not isinstance(generated, str):
            raise SchemaError(
                f"generated_sequence must be a string, got {type(generated).__name__}"
            )

        return cls(generated_sequence=generated, extensions=extensions)
