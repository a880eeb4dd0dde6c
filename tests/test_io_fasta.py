"""Unit tests for pgmap.io.fasta module.

Tests cover:
- ReferenceReader initialization and indexing
- Iteration order and upper-casing
- Error handling for missing and malformed files
- FASTA record formatting and the ePST writer
"""

import io
from pathlib import Path
from typing import Callable

import pytest

from pgmap.core.models import MappingRecord, ReferenceSequence
from pgmap.errors import MalformedInputError, MissingResourceError
from pgmap.io.fasta import (
    FastaWriter,
    ReferenceReader,
    format_fasta_record,
    read_references,
)

from conftest import FIXTURE_REFERENCE, FIXTURE_REVERSE


# =============================================================================
# ReferenceReader Tests
# =============================================================================


class TestReferenceReader:
    """Tests for ReferenceReader class."""

    def test_init(self, synthetic_genome: Path) -> None:
        """Test opening a reference."""
        with ReferenceReader(synthetic_genome) as reader:
            assert reader.path == synthetic_genome
            assert reader.sequence_ids == ["chr1", "chr2", "chr3"]
            assert len(reader) == 3

    def test_index_created(self, synthetic_genome: Path) -> None:
        """pyfaidx writes a .fai index beside the FASTA."""
        ReferenceReader(synthetic_genome).close()
        assert Path(f"{synthetic_genome}.fai").exists()

    def test_lengths(self, synthetic_genome: Path) -> None:
        with ReferenceReader(synthetic_genome) as reader:
            assert reader.lengths == {
                "chr1": 1000,
                "chr2": 500 + len(FIXTURE_REFERENCE),
                "chr3": 250,
            }
            assert reader.total_length == 1750 + len(FIXTURE_REFERENCE)

    def test_iteration_order(self, reference_fasta: Path) -> None:
        with ReferenceReader(reference_fasta) as reader:
            references = list(reader)

        assert [r.seq_id for r in references] == ["fwd", "rev"]
        assert references[0].sequence == FIXTURE_REFERENCE
        assert references[1].sequence == FIXTURE_REVERSE

    def test_get(self, reference_fasta: Path) -> None:
        with ReferenceReader(reference_fasta) as reader:
            reference = reader.get("rev")
        assert reference == ReferenceSequence("rev", FIXTURE_REVERSE)

    def test_get_unknown(self, reference_fasta: Path) -> None:
        with ReferenceReader(reference_fasta) as reader:
            with pytest.raises(KeyError):
                reader.get("chrZ")

    def test_contains(self, reference_fasta: Path) -> None:
        with ReferenceReader(reference_fasta) as reader:
            assert "fwd" in reader
            assert "chrZ" not in reader

    def test_upper_case(self, write_fasta: Callable[..., Path]) -> None:
        path = write_fasta({"soft": "acgtNNacgt"})
        with ReferenceReader(path) as reader:
            assert reader.get("soft").sequence == "ACGTNNACGT"

    def test_header_description_dropped(self, tmp_path: Path) -> None:
        """The sequence ID is the first word of the header."""
        path = tmp_path / "described.fa"
        path.write_text(">chr1 assembled chromosome\nACGT\n")
        with ReferenceReader(path) as reader:
            assert reader.sequence_ids == ["chr1"]

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(MissingResourceError):
            ReferenceReader(tmp_path / "missing.fa")

    def test_duplicate_ids(self, tmp_path: Path) -> None:
        path = tmp_path / "duplicates.fa"
        path.write_text(">chr1\nACGT\n>chr1\nTTTT\n")
        with pytest.raises(MalformedInputError):
            ReferenceReader(path)

    def test_read_references(self, reference_fasta: Path) -> None:
        references = read_references(reference_fasta)
        assert [r.seq_id for r in references] == ["fwd", "rev"]
        assert len(references[0]) == len(FIXTURE_REFERENCE)


# =============================================================================
# Writer Tests
# =============================================================================


class TestFormatFastaRecord:
    """Tests for format_fasta_record."""

    def test_single_line(self) -> None:
        assert format_fasta_record("pep1", "ACGTAC") == ">pep1\nACGTAC\n"

    def test_wrapped(self) -> None:
        assert format_fasta_record("pep1", "ACGTAC", width=4) == ">pep1\nACGT\nAC\n"


class TestFastaWriter:
    """Tests for FastaWriter."""

    def test_write_record(self, tmp_path: Path, forward_record: MappingRecord) -> None:
        path = tmp_path / "epst.fa"
        with FastaWriter(path) as writer:
            writer.write_record(forward_record)
            assert writer.n_records == 1

        assert path.read_text() == f">pep1\n{forward_record.epst}\n"

    def test_write_to_stream(self) -> None:
        stream = io.StringIO()
        writer = FastaWriter(stream)
        writer.write("a", "AC")
        writer.write("b", "GT")
        writer.close()

        assert stream.getvalue() == ">a\nAC\n>b\nGT\n"
        assert not stream.closed

    def test_write_after_close(self, tmp_path: Path) -> None:
        writer = FastaWriter(tmp_path / "closed.fa")
        writer.close()
        with pytest.raises(RuntimeError, match="closed"):
            writer.write("a", "AC")
