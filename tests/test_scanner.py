"""Tests for pgmap.core.scanner module.

Tests cover:
- End-to-end mapping of the fixture peptide in all six frames
- Coordinate transformation and clamping
- Record contents (start codon, translation, pass-through fields)
- Duplicate peptides and record ordering
"""

import pytest

from pgmap.core.automaton import PatternAutomaton
from pgmap.core.boundaries import FixedWindowExtender, ProkaryoteExtender
from pgmap.core.codetable import CodonTable
from pgmap.core.models import Peptide, ReferenceSequence
from pgmap.core.scanner import NO_START_CODON, GenomicScanner, transform_span
from pgmap.core.translate import CodonTranslator

from conftest import FIXTURE_EPST, FIXTURE_REFERENCE, FIXTURE_REVERSE, FIXTURE_RTP


def make_scanner(peptides: list[Peptide], extender=None) -> GenomicScanner:
    table = CodonTable.standard()
    return GenomicScanner(
        peptides,
        PatternAutomaton.from_peptides(peptides),
        CodonTranslator(table),
        extender or ProkaryoteExtender.from_table(table),
    )


def scan(scanner: GenomicScanner, sequence: str, seq_id: str = "ref") -> list:
    return list(scanner.scan_reference(ReferenceSequence(seq_id, sequence)))


# =============================================================================
# Coordinate Tests
# =============================================================================


class TestTransformSpan:
    """Tests for transform_span."""

    def test_f1_unchanged(self) -> None:
        assert transform_span(33, 45, "F1", 66, end_exclusive=True) == (33, 45)

    def test_forward_offsets(self) -> None:
        assert transform_span(33, 45, "F2", 65, end_exclusive=True) == (34, 46)
        assert transform_span(33, 45, "F3", 64, end_exclusive=True) == (35, 47)

    def test_reverse_mirror(self) -> None:
        assert transform_span(33, 45, "R1", 66, end_exclusive=True) == (33, 21)
        assert transform_span(21, 56, "R1", 66) == (45, 10)

    def test_reverse_frames_identical(self) -> None:
        """Mirroring uses the frame length, so R2 and R3 match R1."""
        for frame in ("R2", "R3"):
            assert transform_span(33, 45, frame, 66, end_exclusive=True) == (33, 21)

    def test_clamped(self) -> None:
        assert transform_span(-3, 70, "F1", 66) == (0, 65)
        assert transform_span(0, 3, "R1", 66) == (65, 63)

    def test_exclusive_end_reaches_reference_length(self) -> None:
        """An RTP ending on the last codon keeps its full span."""
        assert transform_span(54, 66, "F1", 66, end_exclusive=True) == (54, 66)
        assert transform_span(0, 70, "F1", 66, end_exclusive=True) == (0, 66)

    def test_forward_offset_measured_on_reference(self) -> None:
        """F3 positions are clamped against the reference, not the frame."""
        assert transform_span(52, 64, "F3", 64, end_exclusive=True) == (54, 66)
        assert transform_span(52, 63, "F3", 64) == (54, 65)

# =============================================================================
# Fixture Mapping Tests
# =============================================================================


class TestFixtureMapping:
    """VANG mapped onto the fixture reference in every frame."""

    def test_forward_f1(self, vang_peptide: Peptide) -> None:
        records = scan(make_scanner([vang_peptide]), FIXTURE_REFERENCE)
        assert len(records) == 1

        record = records[0]
        assert record.frame == "F1"
        assert record.strand == "+"
        assert (record.start, record.end) == (34, 45)
        assert record.rtp == FIXTURE_RTP
        assert (record.epst_start, record.epst_end) == (22, 57)
        assert record.epst == FIXTURE_EPST
        assert record.epst_length == 35
        assert record.translated_epst == "MNSAVANGERE*"
        assert record.start_codon == "ATG"

    def test_pass_through_fields(self, vang_peptide: Peptide) -> None:
        record = scan(make_scanner([vang_peptide]), FIXTURE_REFERENCE, "chrX")[0]
        assert record.peptide_id == "pep1"
        assert record.peptide_sequence == "VANG"
        assert record.genome_id == "chrX"
        assert record.probability == 0.95
        assert record.count == 3

    @pytest.mark.parametrize(
        "prefix, frame, expected",
        [
            ("A", "F2", (35, 46, 23, 58)),
            ("TA", "F3", (36, 47, 24, 59)),
        ],
    )
    def test_forward_shifted(
        self, vang_peptide: Peptide, prefix: str, frame: str, expected: tuple
    ) -> None:
        records = scan(make_scanner([vang_peptide]), prefix + FIXTURE_REFERENCE)
        assert len(records) == 1

        record = records[0]
        assert record.frame == frame
        assert (record.start, record.end, record.epst_start, record.epst_end) == expected
        assert record.epst == FIXTURE_EPST

    @pytest.mark.parametrize(
        "suffix, frame",
        [("", "R1"), ("G", "R2"), ("GG", "R3")],
    )
    def test_reverse_frames(self, vang_peptide: Peptide, suffix: str, frame: str) -> None:
        records = scan(make_scanner([vang_peptide]), FIXTURE_REVERSE + suffix)
        assert len(records) == 1

        record = records[0]
        assert record.frame == frame
        assert record.strand == "-"
        assert (record.start, record.end) == (34, 21)
        assert (record.epst_start, record.epst_end) == (46, 11)
        assert record.rtp == FIXTURE_RTP
        assert record.epst == FIXTURE_EPST
        assert record.epst_length == 35

    @pytest.mark.parametrize(
        "prefix, frame, expected",
        [
            ("", "F1", (7, 18, 4, 18)),
            ("CC", "F3", (9, 20, 6, 20)),
        ],
    )
    def test_match_on_final_codon(
        self, vang_peptide: Peptide, prefix: str, frame: str, expected: tuple
    ) -> None:
        """A peptide ending on the last codon keeps its full RTP span."""
        sequence = prefix + "TAAATGGTGGCGAACGGC"
        records = [r for r in scan(make_scanner([vang_peptide]), sequence) if r.frame == frame]
        assert len(records) == 1

        record = records[0]
        assert (record.start, record.end, record.epst_start, record.epst_end) == expected
        assert record.rtp == FIXTURE_RTP
        assert record.end - record.start + 1 == len(record.rtp)
        assert record.epst == "ATGGTGGCGAACGGC"
        assert record.epst_length == 14
        assert record.start_codon == "ATG"

    def test_lower_case_reference(self, vang_peptide: Peptide) -> None:
        records = scan(make_scanner([vang_peptide]), FIXTURE_REFERENCE.lower())
        assert len(records) == 1
        assert records[0].rtp == FIXTURE_RTP


# =============================================================================
# Record Content Tests
# =============================================================================


class TestRecordContents:
    """Start codon rule, duplicates and ordering."""

    def test_no_start_codon_marker(self) -> None:
        """When the ePST starts at the RTP the start codon is '-'."""
        peptide = Peptide("p", "PG")
        sequence = "TAACCCGGGTAA"
        record = scan(make_scanner([peptide]), sequence)[0]
        assert record.start == record.epst_start
        assert record.start_codon == NO_START_CODON

    def test_duplicate_peptides(self) -> None:
        """Each copy of a repeated peptide yields its own record."""
        peptides = [Peptide("a", "VANG"), Peptide("b", "VANG")]
        records = scan(make_scanner(peptides), FIXTURE_REFERENCE)
        assert [r.peptide_id for r in records] == ["a", "b"]

    def test_frame_then_position_order(self) -> None:
        peptides = [Peptide("late", "GERE"), Peptide("early", "MNS"), Peptide("rev", "RIHR")]
        records = scan(make_scanner(peptides), FIXTURE_REFERENCE)
        assert [(r.frame, r.peptide_id) for r in records] == [
            ("F1", "early"),
            ("F1", "late"),
            ("R1", "rev"),
        ]

    def test_nested_peptides(self) -> None:
        peptides = [Peptide("long", "NSAVANG"), Peptide("short", "SAV")]
        records = scan(make_scanner(peptides), FIXTURE_REFERENCE)
        assert {r.peptide_id for r in records} == {"long", "short"}

    def test_fixed_window_mode(self, vang_peptide: Peptide) -> None:
        scanner = make_scanner([vang_peptide], FixedWindowExtender(2))
        record = scan(scanner, FIXTURE_REFERENCE)[0]
        assert (record.epst_start, record.epst_end) == (28, 52)
        assert record.epst_length == 24

    def test_short_reference(self, vang_peptide: Peptide) -> None:
        assert scan(make_scanner([vang_peptide]), "AC") == []

    def test_mismatched_automaton(self) -> None:
        with pytest.raises(ValueError, match="patterns"):
            GenomicScanner(
                [Peptide("a", "VANG")],
                PatternAutomaton(["VANG", "GER"]),
                CodonTranslator(),
                FixedWindowExtender(1),
            )
