"""Decoding of generated sequences into trait records."""

from seqforge.traits.decoder import (
    MappingTable,
    MappingTableError,
    SequenceDecoder,
    TraitRecord,
    TraitValue,
    load_mapping_table,
)

__all__ = [
    "MappingTable",
    "MappingTableError",
    "SequenceDecoder",
    "TraitRecord",
    "TraitValue",
    "load_mapping_table",
]
