"""Extraction of generation requests from free-text messages.

The parser walks an ordered list of recognized phrasings. The first phrasing
whose pattern matches decides the result; later phrasings are never consulted,
even when the winning match is then rejected. Each phrasing names its own
capture groups for the starting sequence and the total length, since the two
appear in different orders depending on how the request is worded.
"""

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from seqforge.generation.models import RequestFields, is_nucleotide_sequence

logger = logging.getLogger(__name__)

# Possessive sequence tokens and bounded gaps keep matching linear in the
# message length.
_START = r"(?:starting|beginning|starts|begins)\s+with\s+(?P<sequence>[^\s,.;:]++)"
_NUMBER = r"(?<!\d)(?P<length>\d{1,9})(?!\d)"
_LENGTH = r"(?:total\s+)?length\s*(?:of\s*|[:=]\s*)?" + _NUMBER
_UNITS = _NUMBER + r"\s*(?:bp|bases|nucleotides|nt)\b"
_GAP = r"[^\n]{0,80}?"


@dataclass(frozen=True)
class PhrasePattern:
    """A recognized phrasing and where its fields sit in the match.

    Attributes:
        name: Identifier used in log lines.
        regex: Compiled pattern.
        sequence_group: Group name or index holding the starting sequence.
        length_group: Group name or index holding the total length.
    """

    name: str
    regex: re.Pattern[str]
    sequence_group: str | int = "sequence"
    length_group: str | int = "length"

    def extract(self, match: re.Match[str]) -> tuple[str, int]:
        """Return ``(sequence, total_length)`` from a match of this pattern."""
        return match.group(self.sequence_group), int(match.group(self.length_group))


def _pattern(name: str, body: str) -> PhrasePattern:
    return PhrasePattern(name=name, regex=re.compile(body, re.IGNORECASE))


DEFAULT_PATTERNS: tuple[PhrasePattern, ...] = (
    # "starting with ATG, length 50"
    _pattern(
        "start_then_length",
        _START + r"\s*(?:,\s*)?(?:and\s+)?(?:with\s+)?(?:a\s+)?" + _LENGTH,
    ),
    # "length 50, starting with ATG"
    _pattern("length_then_start", _LENGTH + r"\s*(?:,\s*)?(?:and\s+)?" + _START),
    # "a 50 bp sequence starting with ATG"
    _pattern("units_then_start", _UNITS + _GAP + _START),
    # "starting with ATG, 50 bases long"
    _pattern("start_then_units", _START + _GAP + _UNITS),
)


class InputParser:
    """Turns a message like "starting with ATG, length 50" into request fields.

    Example:
        >>> parser = InputParser()
        >>> fields = parser.parse("generate a DNA sequence starting with atg, length 50")
        >>> fields.sequence, fields.num_tokens
        ('ATG', 47)
    """

    def __init__(self, patterns: Sequence[PhrasePattern] = DEFAULT_PATTERNS) -> None:
        """Initialize the parser.

        Args:
            patterns: Phrasings to try, in priority order.
        """
        self._patterns = tuple(patterns)

    @property
    def patterns(self) -> tuple[PhrasePattern, ...]:
        return self._patterns

    def parse(self, text: str) -> RequestFields | None:
        """Extract the starting sequence and token count from ``text``.

        Args:
            text: Free-text message.

        Returns:
            RequestFields with ``sequence`` (upper-cased) and ``num_tokens``
            set, or None if no phrasing matched, the requested length does not
            exceed the starting sequence, or the sequence is not nucleotides.
        """
        if not text:
            return None

        for pattern in self._patterns:
            match = pattern.regex.search(text)
            if match is None:
                continue

            try:
                sequence, total_length = pattern.extract(match)
            except ValueError:
                logger.debug("Rejected match of %s: length is not a usable integer", pattern.name)
                return None

            logger.debug(
                "Matched phrasing %s: sequence=%r total_length=%d",
                pattern.name,
                sequence,
                total_length,
            )

            if not is_nucleotide_sequence(sequence):
                logger.debug("Rejected sequence %r: not a nucleotide string", sequence)
                return None

            num_tokens = total_length - len(sequence)
            if num_tokens <= 0:
                logger.debug(
                    "Rejected length %d: does not exceed starting sequence of %d",
                    total_length,
                    len(sequence),
                )
                return None

            return RequestFields(sequence=sequence.upper(), num_tokens=num_tokens)

        return None

    @staticmethod
    def has_trigger(text: str, phrases: Iterable[str]) -> bool:
        """Return True if ``text`` contains any of ``phrases`` (case-insensitive)."""
        lowered = (text or "").lower()
        return any(phrase.lower() in lowered for phrase in phrases)
