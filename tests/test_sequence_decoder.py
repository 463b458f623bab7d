"""Tests for SequenceDecoder and mapping tables."""

import json
from pathlib import Path

import pytest

from seqforge.traits import (
    MappingTable,
    MappingTableError,
    SequenceDecoder,
    TraitRecord,
    load_mapping_table,
)


@pytest.fixture
def table() -> MappingTable:
    """Create a table with overlapping patches."""
    return MappingTable(
        entries={
            "ATCG": {"learningRate": 0.1, "behavior": "default"},
            "GCTA": {"behavior": "cooperative"},
            "TTTT": {"curiosity": 3, "social": True},
        }
    )


class TestSequenceDecoder:
    """Tests for the decode algorithm."""

    def test_both_patches_applied_later_wins(self, table: MappingTable) -> None:
        """Test ATCG then GCTA: both applied, GCTA overrides behavior."""
        record = SequenceDecoder().decode("ATCGGCTA", table, 4)

        assert record.traits == {"learningRate": 0.1, "behavior": "cooperative"}
        assert record.matched_chunks == ["ATCG", "GCTA"]

    def test_order_decides_overwrite(self, table: MappingTable) -> None:
        """Test GCTA then ATCG: the later ATCG behavior wins."""
        record = SequenceDecoder().decode("GCTAATCG", table, 4)

        assert record.traits["behavior"] == "default"

    def test_trailing_partial_chunk_ignored(self, table: MappingTable) -> None:
        """Test an incomplete last chunk is dropped even if it prefixes a key."""
        record = SequenceDecoder().decode("ATCGGCT", table, 4)

        assert record.matched_chunks == ["ATCG"]
        assert record.traits["behavior"] == "default"

    def test_chunks_do_not_overlap(self, table: MappingTable) -> None:
        """Test chunk boundaries are fixed; a key spanning two chunks does not match."""
        record = SequenceDecoder().decode("AATCGAAA", table, 4)

        assert record.matched_chunks == []
        assert record.traits == {}

    def test_unmatched_fields_keep_initial_values(self, table: MappingTable) -> None:
        """Test initial traits survive unless a patch touches them."""
        decoder = SequenceDecoder(initial_traits={"learningRate": 0.01, "energy": 5})

        record = decoder.decode("GCTA", table, 4)

        assert record.traits == {"learningRate": 0.01, "energy": 5, "behavior": "cooperative"}

    def test_initial_traits_not_mutated(self, table: MappingTable) -> None:
        """Test decoding does not change the decoder's initial values."""
        initial = {"behavior": "default"}
        decoder = SequenceDecoder(initial_traits=initial)

        decoder.decode("GCTA", table, 4)

        assert initial == {"behavior": "default"}
        assert decoder.decode("AAAA", table, 4).traits == {"behavior": "default"}

    def test_lowercase_sequence(self, table: MappingTable) -> None:
        """Test sequence case is ignored."""
        record = SequenceDecoder().decode("ttttgcta", table, 4)

        assert record.traits == {"curiosity": 3, "social": True, "behavior": "cooperative"}

    def test_deterministic(self, table: MappingTable) -> None:
        """Test identical inputs produce identical records."""
        decoder = SequenceDecoder()
        sequence = "ATCGTTTTGCTAATCGCC"

        assert decoder.decode(sequence, table, 4) == decoder.decode(sequence, table, 4)

    def test_empty_sequence(self, table: MappingTable) -> None:
        """Test an empty sequence yields the initial record."""
        assert SequenceDecoder().decode("", table, 4) == TraitRecord()

    @pytest.mark.parametrize("chunk_size", [0, -2])
    def test_invalid_chunk_size(self, table: MappingTable, chunk_size: int) -> None:
        """Test chunk sizes below 1 are rejected."""
        with pytest.raises(ValueError):
            SequenceDecoder().decode("ATCG", table, chunk_size)

    def test_chunk_size_without_matching_keys(self, table: MappingTable) -> None:
        """Test a chunk size no key has simply matches nothing."""
        record = SequenceDecoder().decode("ATCGGCTA", table, 2)

        assert record.traits == {}

    def test_to_json(self, table: MappingTable) -> None:
        """Test the record serializes its traits."""
        record = SequenceDecoder().decode("ATCGGCTA", table, 4)

        assert json.loads(record.to_json()) == {"learningRate": 0.1, "behavior": "cooperative"}


class TestMappingTable:
    """Tests for table validation."""

    def test_keys_uppercased(self) -> None:
        """Test lowercase keys are normalized."""
        table = MappingTable(entries={"atcg": {"x": 1}})

        assert table.lookup("ATCG") == {"x": 1}

    def test_non_nucleotide_key_rejected(self) -> None:
        """Test keys outside A, C, G, T are rejected."""
        with pytest.raises(ValueError):
            MappingTable(entries={"ATXG": {"x": 1}})

    def test_value_types_preserved(self) -> None:
        """Test bool, int, float and str values keep their types."""
        table = MappingTable(entries={"AAAA": {"a": True, "b": 2, "c": 0.5, "d": "x"}})

        patch = table.lookup("AAAA")
        assert patch is not None
        assert patch["a"] is True
        assert isinstance(patch["b"], int)
        assert isinstance(patch["c"], float)
        assert patch["d"] == "x"


class TestLoadMappingTable:
    """Tests for loading tables from disk."""

    def test_load(self, tmp_path: Path) -> None:
        """Test a valid JSON table loads."""
        path = tmp_path / "traits.json"
        path.write_text(json.dumps({"ATCG": {"learningRate": 0.1}}), encoding="utf-8")

        table = load_mapping_table(path)

        assert len(table) == 1
        assert table.lookup("ATCG") == {"learningRate": 0.1}

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test a missing file raises MappingTableError."""
        with pytest.raises(MappingTableError):
            load_mapping_table(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Test malformed JSON raises MappingTableError."""
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(MappingTableError):
            load_mapping_table(path)

    def test_invalid_entries(self, tmp_path: Path) -> None:
        """Test a structurally wrong table raises MappingTableError."""
        path = tmp_path / "wrong.json"
        path.write_text(json.dumps({"ATCG": "cooperative"}), encoding="utf-8")

        with pytest.raises(MappingTableError):
            load_mapping_table(path)
