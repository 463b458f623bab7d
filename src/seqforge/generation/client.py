"""Async HTTP client for the sequence generation service.

Issues exactly one POST per call and maps every outcome onto the error
taxonomy in ``seqforge.generation.errors``. Retrying is left to callers.
"""

import logging

import httpx

from seqforge.generation.config import GenerationConfig, get_generation_config
from seqforge.generation.errors import (
    AuthError,
    NetworkError,
    RateLimitError,
    SchemaError,
    UpstreamError,
)
from seqforge.generation.models import GenerationRequest, GenerationResponse

logger = logging.getLogger(__name__)


def parse_retry_after(value: str | None) -> float | None:
    """Parse a Retry-After header given in seconds. HTTP dates are ignored."""
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


class GenerationClient:
    """Client for the external ``generate`` endpoint.

    The service may hold the connection for a long time on large requests, so
    every call carries a poll hint header and the transport timeout is taken
    from configuration.

    Example:
        >>> client = GenerationClient()
        >>> request = RequestBuilder().build({"sequence": "ATG", "num_tokens": 47})
        >>> response = await client.generate(request, credential="nvapi-...")
        >>> response.generated_sequence
        'ATGCCTA...'
    """

    def __init__(
        self,
        config: GenerationConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Optional GenerationConfig. If not provided, loads from environment.
            transport: Optional httpx transport, used in place of the network.
        """
        self._config = config or get_generation_config()
        self._transport = transport
        self._endpoint = self._config.generation_endpoint

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def _headers(self, credential: str) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Authorization": f"Bearer {credential}",
            self._config.generation_poll_header: str(self._config.generation_poll_seconds),
        }

    async def generate(self, request: GenerationRequest, credential: str) -> GenerationResponse:
        """Send ``request`` to the service and wait for the generated sequence.

        Args:
            request: Canonical request to send as the JSON body.
            credential: Bearer token for the service.

        Returns:
            GenerationResponse with the generated sequence and any extra fields.

        Raises:
            NetworkError: No response was received, including transport timeouts.
            AuthError: The service answered 401.
            RateLimitError: The service answered 429.
            UpstreamError: The service answered with any other non-2xx status.
            SchemaError: A 2xx body had no usable ``generated_sequence``.
        """
        timeout = self._config.generation_timeout

        try:
            logger.debug(
                "Requesting %d tokens from %s (sequence_length=%d)",
                request.num_tokens,
                self._endpoint,
                len(request.sequence),
            )
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                response = await client.post(
                    self._endpoint,
                    json=request.to_payload(),
                    headers=self._headers(credential),
                )
        except httpx.TimeoutException as e:
            logger.error("Generation request timed out after %s seconds", timeout)
            raise NetworkError(f"request timed out after {timeout} seconds") from e
        except httpx.TransportError as e:
            logger.error("Failed to reach generation service at %s: %s", self._endpoint, e)
            raise NetworkError(f"cannot reach {self._endpoint}: {e}") from e

        return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> GenerationResponse:
        status = response.status_code

        if status == 401:
            logger.error("Generation service rejected the credential")
            raise AuthError()
        if status == 429:
            retry_after = parse_retry_after(response.headers.get("Retry-After"))
            logger.error("Generation service rate limited the request, retry_after=%s", retry_after)
            raise RateLimitError(retry_after=retry_after)
        if not response.is_success:
            logger.error("Generation service HTTP error: %s", status)
            raise UpstreamError(status, response.text)

        try:
            body = response.json()
        except ValueError as e:
            logger.error("Generation service returned a non-JSON body")
            raise SchemaError(f"response body is not JSON: {e}") from e

        result = GenerationResponse.from_body(body)
        logger.debug(
            "Received %d nucleotides, extension fields: %s",
            len(result.generated_sequence),
            sorted(result.extensions),
        )
        return result
