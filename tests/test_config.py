"""Tests for GenerationConfig loading."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from seqforge.generation import GenerationConfig, RequestDefaults, get_generation_config
from seqforge.generation.config import DEFAULT_ENDPOINT


class TestGenerationConfigDefaults:
    """Tests for default values."""

    def test_defaults(self) -> None:
        """Test values used when nothing is configured."""
        with patch.dict(os.environ, {}, clear=True):
            config = GenerationConfig(_env_file=None)

        assert config.nvidia_api_key is None
        assert config.generation_endpoint == DEFAULT_ENDPOINT
        assert config.generation_poll_seconds == 300
        assert config.generation_poll_header == "NVCF-POLL-SECONDS"
        assert config.generation_timeout == 330.0
        assert config.trait_table_path is None
        assert config.trait_chunk_size == 4
        assert "generate dna" in config.trigger_phrases

    def test_request_defaults(self) -> None:
        """Test the defaults table matches the standard request defaults."""
        with patch.dict(os.environ, {}, clear=True):
            config = GenerationConfig(_env_file=None)

        assert config.get_request_defaults() == RequestDefaults()


class TestGenerationConfigEnvironment:
    """Tests for loading from environment variables."""

    def test_reads_environment(self) -> None:
        """Test settings come from the environment."""
        env = {
            "NVIDIA_API_KEY": "nvapi-secret",
            "GENERATION_ENDPOINT": "https://example.test/generate",
            "GENERATION_POLL_SECONDS": "120",
            "DEFAULT_NUM_TOKENS": "64",
            "DEFAULT_TOP_K": "5",
            "TRIGGER_PHRASES": '["Make DNA", " "]',
            "TRAIT_TABLE_PATH": "/etc/traits.json",
        }
        with patch.dict(os.environ, env, clear=True):
            config = GenerationConfig(_env_file=None)

        assert config.get_api_key() == "nvapi-secret"
        assert config.generation_endpoint == "https://example.test/generate"
        assert config.generation_poll_seconds == 120
        assert config.get_request_defaults().num_tokens == 64
        assert config.get_request_defaults().top_k == 5
        assert config.trigger_phrases == ["make dna"]
        assert config.trait_table_path == Path("/etc/traits.json")

    def test_reads_env_file(self, tmp_path: Path) -> None:
        """Test settings come from a .env file."""
        env_file = tmp_path / ".env"
        env_file.write_text("NVIDIA_API_KEY=from-file\nDEFAULT_TEMPERATURE=0.3\n")

        with patch.dict(os.environ, {}, clear=True):
            config = GenerationConfig(_env_file=env_file)

        assert config.get_api_key() == "from-file"
        assert config.default_temperature == 0.3

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("default_top_p", 0.0),
            ("default_top_p", 1.5),
            ("default_top_k", 0),
            ("generation_timeout", 0),
            ("trait_chunk_size", 0),
        ],
    )
    def test_rejects_invalid_values(self, field: str, value: float) -> None:
        """Test out-of-range settings fail validation."""
        with pytest.raises(ValidationError):
            GenerationConfig(_env_file=None, **{field: value})


class TestGenerationConfigSecrets:
    """Tests that the API key stays hidden."""

    def test_repr_masks_key(self) -> None:
        """Test repr never shows the key."""
        config = GenerationConfig(_env_file=None, nvidia_api_key="nvapi-secret")

        assert "nvapi-secret" not in repr(config)
        assert "*****" in repr(config)

    def test_str_masks_key(self) -> None:
        """Test str never shows the key."""
        config = GenerationConfig(_env_file=None, nvidia_api_key="nvapi-secret")

        assert "nvapi-secret" not in str(config)

    def test_repr_without_key(self) -> None:
        """Test repr reports a missing key."""
        with patch.dict(os.environ, {}, clear=True):
            config = GenerationConfig(_env_file=None)

        assert "api_key=not set" in repr(config)


class TestGetGenerationConfig:
    """Tests for the cached accessor."""

    def test_cached(self) -> None:
        """Test the same instance is returned until the cache is cleared."""
        get_generation_config.cache_clear()
        try:
            with patch.dict(os.environ, {}, clear=True):
                first = get_generation_config()
                second = get_generation_config()
            assert first is second
        finally:
            get_generation_config.cache_clear()
