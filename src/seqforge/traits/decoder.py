"""Decoding of generated sequences into trait records.

A mapping table assigns a partial trait patch to fixed-length nucleotide
chunks. Decoding walks the sequence chunk by chunk and applies the patch of
every chunk found in the table, later chunks overwriting earlier ones.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from seqforge.generation.models import is_nucleotide_sequence

logger = logging.getLogger(__name__)

TraitValue = bool | int | float | str


class MappingTableError(Exception):
    """Exception raised when a mapping table cannot be loaded."""

    pass


class MappingTable(BaseModel):
    """Lookup from nucleotide chunk to the trait fields it sets.

    Attributes:
        entries: Chunk (upper-cased, over A/C/G/T) to partial trait patch.
    """

    entries: dict[str, dict[str, TraitValue]] = Field(default_factory=dict)

    @field_validator("entries")
    @classmethod
    def normalize_keys(
        cls, v: dict[str, dict[str, TraitValue]]
    ) -> dict[str, dict[str, TraitValue]]:
        """Upper-case chunk keys and reject keys that are not nucleotides."""
        normalized: dict[str, dict[str, TraitValue]] = {}
        for chunk, patch in v.items():
            if not is_nucleotide_sequence(chunk):
                raise ValueError(f"mapping key {chunk!r} is not a nucleotide chunk")
            normalized[chunk.upper()] = patch
        return normalized

    def __len__(self) -> int:
        return len(self.entries)

    def lookup(self, chunk: str) -> dict[str, TraitValue] | None:
        return self.entries.get(chunk)

    def chunk_lengths(self) -> set[int]:
        return {len(chunk) for chunk in self.entries}


class TraitRecord(BaseModel):
    """Traits decoded from one sequence.

    Attributes:
        traits: Trait name to value.
        matched_chunks: Chunks that matched the table, in sequence order.
    """

    traits: dict[str, TraitValue] = Field(default_factory=dict)
    matched_chunks: list[str] = Field(default_factory=list)

    def to_json(self) -> str:
        """Serialize the traits for storage."""
        return json.dumps(self.traits, sort_keys=True)


class SequenceDecoder:
    """Decodes nucleotide sequences through a mapping table.

    Example:
        >>> table = MappingTable(entries={
        ...     "ATCG": {"learningRate": 0.1},
        ...     "GCTA": {"behavior": "cooperative"},
        ... })
        >>> SequenceDecoder().decode("ATCGGCTA", table, 4).traits
        {'learningRate': 0.1, 'behavior': 'cooperative'}
    """

    def __init__(self, initial_traits: dict[str, TraitValue] | None = None) -> None:
        """Initialize the decoder.

        Args:
            initial_traits: Values every record starts from; fields no chunk
                touches keep these values.
        """
        self._initial_traits = dict(initial_traits or {})

    def decode(self, sequence: str, table: MappingTable, chunk_size: int) -> TraitRecord:
        """Decode ``sequence`` into a TraitRecord.

        Args:
            sequence: Nucleotide string; case is ignored.
            table: Chunk to trait patch lookup.
            chunk_size: Length of the non-overlapping chunks. A trailing
                partial chunk is ignored.

        Returns:
            TraitRecord with every matching patch applied left to right.

        Raises:
            ValueError: If ``chunk_size`` is less than 1.
        """
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be at least 1, got {chunk_size}")

        if table.entries and chunk_size not in table.chunk_lengths():
            logger.warning(
                "No mapping key has length %d (key lengths: %s); nothing will match",
                chunk_size,
                sorted(table.chunk_lengths()),
            )

        normalized = sequence.upper()
        traits = dict(self._initial_traits)
        matched: list[str] = []

        for start in range(0, len(normalized) - chunk_size + 1, chunk_size):
            chunk = normalized[start : start + chunk_size]
            patch = table.lookup(chunk)
            if patch is None:
                continue
            traits.update(patch)
            matched.append(chunk)

        logger.debug(
            "Decoded %d chunks of %d, %d matched",
            len(normalized) // chunk_size,
            chunk_size,
            len(matched),
        )
        return TraitRecord(traits=traits, matched_chunks=matched)


def load_mapping_table(path: str | Path) -> MappingTable:
    """Load a mapping table from a JSON file of ``{chunk: {trait: value}}``.

    Args:
        path: Path to the JSON file.

    Returns:
        The validated MappingTable.

    Raises:
        MappingTableError: If the file is missing, is not JSON, or holds
            invalid entries.
    """
    path = Path(path)
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise MappingTableError(f"Cannot read mapping table {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise MappingTableError(f"Mapping table {path} is not valid JSON: {e}") from e

    try:
        table = MappingTable(entries=data)
    except ValidationError as e:
        raise MappingTableError(f"Invalid mapping table {path}: {e}") from e

    logger.info("Loaded mapping table %s with %d entries", path, len(table))
    return table
