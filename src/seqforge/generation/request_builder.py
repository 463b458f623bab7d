"""Merging of partial request fields with defaults into a canonical request."""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from seqforge.generation.errors import RequestValidationError
from seqforge.generation.models import GenerationRequest, RequestDefaults, RequestFields

logger = logging.getLogger(__name__)

# Request fields that may legitimately be sent as null
_NULLABLE_FIELDS = frozenset({"random_seed"})


class RequestBuilder:
    """Builds validated GenerationRequests from partial fields.

    The merge happens in two explicit steps: start from the defaults table,
    then overwrite it with every field the caller provided. A provided field
    always wins, including falsy values such as ``num_tokens=0``; those are
    left for request validation to reject rather than being replaced. An
    explicit None counts as absent, except for ``random_seed`` where it
    clears a default seed.

    Example:
        >>> builder = RequestBuilder()
        >>> request = builder.build({"sequence": "ATG"})
        >>> request.num_tokens, request.top_k
        (100, 3)
    """

    def __init__(self, defaults: RequestDefaults | None = None) -> None:
        """Initialize the builder.

        Args:
            defaults: Defaults table used when ``build`` is not given one.
        """
        self._defaults = defaults or RequestDefaults()

    def build(
        self,
        partial: RequestFields | Mapping[str, Any],
        defaults: RequestDefaults | None = None,
    ) -> GenerationRequest:
        """Merge ``partial`` over ``defaults`` and validate the result.

        Args:
            partial: Explicitly provided fields. Must include a non-empty sequence.
            defaults: Defaults table; the builder's own table if omitted.

        Returns:
            Immutable GenerationRequest ready to send.

        Raises:
            RequestValidationError: If the sequence is absent or empty, or the
                merged values are invalid.
        """
        fields = self._coerce(partial)
        explicit = {
            name: value
            for name, value in fields.explicit().items()
            if value is not None or name in _NULLABLE_FIELDS
        }

        sequence = explicit.get("sequence")
        if not sequence or not sequence.strip():
            raise RequestValidationError("sequence is required and must not be empty")

        merged: dict[str, Any] = (defaults or self._defaults).model_dump()
        merged.update(explicit)

        try:
            request = GenerationRequest(**merged)
        except ValidationError as e:
            raise RequestValidationError(self._describe(e)) from e

        logger.debug(
            "Built request: sequence_length=%d num_tokens=%d explicit=%s",
            len(request.sequence),
            request.num_tokens,
            sorted(explicit),
        )
        return request

    @staticmethod
    def _coerce(partial: RequestFields | Mapping[str, Any]) -> RequestFields:
        if isinstance(partial, RequestFields):
            return partial
        try:
            return RequestFields.model_validate(dict(partial))
        except ValidationError as e:
            raise RequestValidationError(RequestBuilder._describe(e)) from e

    @staticmethod
    def _describe(error: ValidationError) -> str:
        """Flatten a pydantic error into one line naming each bad field."""
        problems = []
        for item in error.errors():
            location = ".".join(str(part) for part in item["loc"]) or "request"
            problems.append(f"{location}: {item['msg']}")
        return "; ".join(problems)
