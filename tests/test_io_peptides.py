"""Tests for pgmap.io.peptides module.

Tests cover:
- FASTA peptide parsing (multi-line records, blank lines, IDs)
- Tab-delimited parsing and validation
- Missing file handling
"""

from pathlib import Path

import pytest

from pgmap.core.models import Peptide
from pgmap.errors import MalformedInputError, MissingResourceError
from pgmap.io.peptides import (
    iter_fasta_peptides,
    iter_tabbed_peptides,
    parse_tabbed_line,
    read_peptides,
)


class TestFastaPeptides:
    """Tests for FASTA peptide files."""

    def test_read(self, peptide_fasta: Path) -> None:
        peptides = read_peptides(peptide_fasta)
        assert peptides == [
            Peptide("pep1", "VANG"),
            Peptide("pep2 second peptide", "NSERE"),
            Peptide("pep3", "WWWWWW"),
        ]

    def test_defaults(self, peptide_fasta: Path) -> None:
        peptide = next(iter_fasta_peptides(peptide_fasta))
        assert peptide.probability == 1.0
        assert peptide.count == 1

    def test_duplicate_ids_kept(self, tmp_path: Path) -> None:
        path = tmp_path / "dups.fa"
        path.write_text(">p\nVANG\n>p\nGERE\n")
        assert [p.sequence for p in read_peptides(path)] == ["VANG", "GERE"]

    def test_empty_record_skipped(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        path = tmp_path / "empty.fa"
        path.write_text(">empty\n>full\nMK\n")
        assert [p.peptide_id for p in read_peptides(path)] == ["full"]
        assert "empty sequence" in caplog.text

    def test_sequence_before_header(self, tmp_path: Path) -> None:
        path = tmp_path / "headless.fa"
        path.write_text("VANG\n>p\nGERE\n")
        with pytest.raises(MalformedInputError, match=":1:"):
            read_peptides(path)

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "nothing.fa"
        path.write_text("")
        assert read_peptides(path) == []

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(MissingResourceError):
            read_peptides(tmp_path / "missing.fa")


class TestTabbedPeptides:
    """Tests for tab-delimited peptide files."""

    def test_read(self, tabbed_peptides: Path) -> None:
        peptides = read_peptides(tabbed_peptides, tabbed=True)
        assert peptides == [
            Peptide("VANG", "VANG", 0.95, 3),
            Peptide("MNSA", "MNSA", 0.5, 1),
        ]

    def test_id_is_sequence(self) -> None:
        peptide = parse_tabbed_line("gere\t0.1\t7")
        assert peptide.peptide_id == "GERE"
        assert peptide.sequence == "GERE"

    def test_extra_columns_ignored(self) -> None:
        peptide = parse_tabbed_line("VANG\t0.9\t2\tnote")
        assert peptide.count == 2

    def test_windows_line_endings(self, tmp_path: Path) -> None:
        path = tmp_path / "crlf.tsv"
        path.write_bytes(b"VANG\t0.9\t2\r\n")
        assert list(iter_tabbed_peptides(path)) == [Peptide("VANG", "VANG", 0.9, 2)]

    @pytest.mark.parametrize(
        "line, message",
        [
            ("VANG\t0.9", "3 tab-separated columns"),
            ("VANG 0.9 2", "3 tab-separated columns"),
            ("\t0.9\t2", "Empty peptide"),
            ("VANG\thigh\t2", "Invalid probability"),
            ("VANG\t0.9\tmany", "Invalid probability or count"),
        ],
    )
    def test_malformed(self, line: str, message: str) -> None:
        with pytest.raises(MalformedInputError, match=message):
            parse_tabbed_line(line)

    def test_error_location(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.tsv"
        path.write_text("VANG\t0.9\t2\nbroken\n")
        with pytest.raises(MalformedInputError) as exc_info:
            read_peptides(path, tabbed=True)
        assert exc_info.value.line_number == 2
        assert exc_info.value.path == str(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(MissingResourceError):
            list(iter_tabbed_peptides(tmp_path / "missing.tsv"))
