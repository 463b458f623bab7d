"""Configuration loading for the sequence generation pipeline.

Settings come from environment variables and an optional .env file. The API
key is held as a SecretStr and never logged or included in reprs.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from seqforge.generation.models import RequestDefaults

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://health.api.nvidia.com/v1/biology/arc/evo2-40b/generate"

# Name of the runtime setting (and env var) holding the API key.
CREDENTIAL_SETTING = "NVIDIA_API_KEY"


class GenerationConfig(BaseSettings):
    """Settings for calling the generation service and building requests.

    Environment Variables:
        NVIDIA_API_KEY: Bearer credential for the generation service
        GENERATION_ENDPOINT: URL of the generate endpoint
        GENERATION_POLL_SECONDS: Long-poll hint sent to the service (default: 300)
        GENERATION_POLL_HEADER: Header carrying the poll hint (default: NVCF-POLL-SECONDS)
        GENERATION_TIMEOUT: Transport timeout in seconds (default: 330)
        DEFAULT_NUM_TOKENS: Tokens to generate when not given (default: 100)
        DEFAULT_TEMPERATURE: Default sampling temperature (default: 0.7)
        DEFAULT_TOP_K: Default top-k (default: 3)
        DEFAULT_TOP_P: Default top-p (default: 1.0)
        TRIGGER_PHRASES: JSON list of phrases that route a message to the action
        TRAIT_TABLE_PATH: JSON file with the chunk -> trait patch table
        TRAIT_CHUNK_SIZE: Chunk length used when decoding traits (default: 4)

    Example:
        >>> config = GenerationConfig()  # from environment
        >>> config = GenerationConfig(_env_file="deploy.env")
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    nvidia_api_key: SecretStr | None = Field(
        default=None,
        description="Generation service API key",
    )

    # External call
    generation_endpoint: str = Field(
        default=DEFAULT_ENDPOINT,
        description="URL of the generate endpoint",
    )
    generation_poll_seconds: int = Field(
        default=300,
        ge=1,
        le=3600,
        description="Long-poll hint sent with each request",
    )
    generation_poll_header: str = Field(
        default="NVCF-POLL-SECONDS",
        description="Header name for the long-poll hint",
    )
    generation_timeout: float = Field(
        default=330.0,
        gt=0,
        description="Transport timeout in seconds",
    )

    # Request defaults
    default_num_tokens: int = Field(default=100, ge=1, description="Default tokens to generate")
    default_temperature: float = Field(default=0.7, ge=0.0, description="Default temperature")
    default_top_k: int = Field(default=3, ge=1, description="Default top-k")
    default_top_p: float = Field(default=1.0, gt=0.0, le=1.0, description="Default top-p")

    trigger_phrases: list[str] = Field(
        default_factory=lambda: ["generate dna", "dna sequence", "generate sequence", "evo2"],
        description="Phrases that make the generate action apply to a message",
    )

    # Trait decoding
    trait_table_path: Path | None = Field(
        default=None,
        description="JSON file mapping nucleotide chunks to trait patches",
    )
    trait_chunk_size: int = Field(default=4, ge=1, description="Decode chunk length")

    @field_validator("trigger_phrases")
    @classmethod
    def normalize_triggers(cls, v: list[str]) -> list[str]:
        """Lower-case trigger phrases and drop blanks."""
        return [phrase.strip().lower() for phrase in v if phrase.strip()]

    def get_api_key(self) -> str | None:
        """Return the API key, or None if not configured."""
        return self.nvidia_api_key.get_secret_value() if self.nvidia_api_key else None

    def get_request_defaults(self) -> RequestDefaults:
        """Build the defaults table applied to partial requests."""
        return RequestDefaults(
            num_tokens=self.default_num_tokens,
            temperature=self.default_temperature,
            top_k=self.default_top_k,
            top_p=self.default_top_p,
        )

    def __repr__(self) -> str:
        """Safe representation that never exposes the API key."""
        return (
            f"GenerationConfig("
            f"endpoint={self.generation_endpoint}, "
            f"poll_seconds={self.generation_poll_seconds}, "
            f"timeout={self.generation_timeout}s, "
            f"num_tokens={self.default_num_tokens}, "
            f"temperature={self.default_temperature}, "
            f"top_k={self.default_top_k}, "
            f"top_p={self.default_top_p}, "
            f"trait_table={self.trait_table_path or 'not set'}, "
            f"api_key={'*****' if self.nvidia_api_key else 'not set'}"
            f")"
        )


@lru_cache
def get_generation_config() -> GenerationConfig:
    """Return the process-wide configuration, loaded once from the environment.

    Call ``get_generation_config.cache_clear()`` to force a reload.
    """
    config = GenerationConfig()
    logger.info("Loaded generation configuration: %r", config)
    return config
