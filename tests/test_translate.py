"""Tests for pgmap.core.translate module.

Tests cover:
- Complement and reverse complement
- Frame helpers
- Codon and sequence translation
- Reading frame extraction and six-frame iteration
"""

import pytest

from pgmap.core.codetable import get_code_table
from pgmap.core.translate import (
    FRAMES,
    CodonTranslator,
    complement,
    frame_offset,
    frame_strand,
    is_reverse_frame,
    reverse_complement,
)

SIX_FRAME_SEQUENCE = "CGTTGCCAACCCGGGCCACACCAAACGGTGTGGAA"


# =============================================================================
# Complement Tests
# =============================================================================


class TestComplement:
    """Tests for complement and reverse_complement."""

    def test_complement_pairs(self) -> None:
        assert complement("A") == "T"
        assert complement("T") == "A"
        assert complement("G") == "C"
        assert complement("C") == "G"

    def test_complement_is_upper_case(self) -> None:
        """Lower-case input complements to upper case."""
        assert complement("a") == "T"
        assert complement("g") == "C"

    def test_unknown_base_is_n(self) -> None:
        assert complement("N") == "N"
        assert complement("R") == "N"

    def test_double_complement(self) -> None:
        """Complementing twice returns the upper-cased base."""
        for base in "ACGTacgt":
            assert complement(complement(base)) == base.upper()

    def test_reverse_complement(self) -> None:
        assert reverse_complement("ATGC") == "GCAT"
        assert reverse_complement("AAAC") == "GTTT"

    def test_reverse_complement_empty(self) -> None:
        assert reverse_complement("") == ""


# =============================================================================
# Frame Helper Tests
# =============================================================================


class TestFrameHelpers:
    """Tests for frame_offset, is_reverse_frame and frame_strand."""

    def test_offsets(self) -> None:
        assert [frame_offset(f) for f in FRAMES] == [0, 1, 2, 0, 1, 2]

    def test_reverse_frames(self) -> None:
        assert not is_reverse_frame("F2")
        assert is_reverse_frame("R3")

    def test_strand(self) -> None:
        assert frame_strand("F1") == "+"
        assert frame_strand("R1") == "-"

    @pytest.mark.parametrize("frame", ["F0", "R4", "f1", ""])
    def test_invalid_frame(self, frame: str) -> None:
        with pytest.raises(ValueError, match="Invalid reading frame"):
            frame_offset(frame)


# =============================================================================
# Translation Tests
# =============================================================================


class TestTranslation:
    """Tests for CodonTranslator.translate and translate_sequence."""

    def test_translate_codon(self, translator: CodonTranslator) -> None:
        assert translator.translate("ATG") == "M"
        assert translator.translate("TGG") == "W"
        assert translator.translate("TAA") == "*"

    def test_unknown_codon_is_x(self, translator: CodonTranslator) -> None:
        assert translator.translate("NNN") == "X"
        assert translator.translate("AT") == "X"

    def test_translate_sequence(self, translator: CodonTranslator) -> None:
        assert translator.translate_sequence("ATGAAATAG") == "MK*"

    def test_translate_sequence_length(self, translator: CodonTranslator) -> None:
        """3k bases give k residues; trailing bases are dropped."""
        assert len(translator.translate_sequence("A" * 30)) == 10
        assert len(translator.translate_sequence("A" * 31)) == 10
        assert len(translator.translate_sequence("A" * 32)) == 10

    def test_translate_sequence_with_ambiguity(self, translator: CodonTranslator) -> None:
        assert translator.translate_sequence("ATGNNNTAA") == "MX*"

    def test_short_sequence(self, translator: CodonTranslator) -> None:
        assert translator.translate_sequence("") == ""
        assert translator.translate_sequence("AT") == ""

    def test_default_table_is_standard(self) -> None:
        translator = CodonTranslator()
        assert translator.table.name == "Standard"
        assert translator.table.start_codons == frozenset({"ATG"})

    def test_alternative_code(self) -> None:
        """AGA is a stop in the vertebrate mitochondrial code."""
        translator = CodonTranslator(get_code_table("Vertebrate Mitochondrial"))
        assert translator.translate("AGA") == "*"
        assert translator.translate("TGA") == "W"


# =============================================================================
# Reading Frame Tests
# =============================================================================


class TestReadingFrames:
    """Tests for get_reading_frame and iter_frames."""

    def test_f1_is_identity(self) -> None:
        assert CodonTranslator.get_reading_frame(SIX_FRAME_SEQUENCE, "F1") == SIX_FRAME_SEQUENCE

    def test_forward_offsets(self) -> None:
        assert CodonTranslator.get_reading_frame("ACGTAC", "F2") == "CGTAC"
        assert CodonTranslator.get_reading_frame("ACGTAC", "F3") == "GTAC"

    def test_r1_is_reverse_complement(self) -> None:
        assert CodonTranslator.get_reading_frame(
            SIX_FRAME_SEQUENCE, "R1"
        ) == reverse_complement(SIX_FRAME_SEQUENCE)

    def test_reverse_offsets(self) -> None:
        """Reverse frames drop leading bases after reverse complementing."""
        assert CodonTranslator.get_reading_frame("AACCGT", "R2") == "CGGTT"
        assert CodonTranslator.get_reading_frame("AACCGT", "R3") == "GGTT"

    def test_short_sequence_frames(self) -> None:
        assert CodonTranslator.get_reading_frame("A", "F3") == ""
        assert CodonTranslator.get_reading_frame("", "R2") == ""

    def test_invalid_frame(self) -> None:
        with pytest.raises(ValueError):
            CodonTranslator.get_reading_frame("ACGT", "X1")

    def test_six_frame_translations(self, translator: CodonTranslator) -> None:
        proteins = {
            frame: protein for frame, _, protein in translator.iter_frames(SIX_FRAME_SEQUENCE)
        }
        assert proteins["F1"] == "RCQPGPHQTVW"
        assert proteins["F2"] == "VANPGHTKRCG"
        assert proteins["F3"] == "LPTRATPNGVE"
        assert proteins["R1"] == "FHTVWCGPGWQ"

    def test_iter_frames_order(self, translator: CodonTranslator) -> None:
        frames = [frame for frame, _, _ in translator.iter_frames("ACGTACGTA")]
        assert frames == list(FRAMES)

    def test_iter_frames_matches_get_reading_frame(self, translator: CodonTranslator) -> None:
        for frame, frame_dna, protein in translator.iter_frames(SIX_FRAME_SEQUENCE):
            assert frame_dna == translator.get_reading_frame(SIX_FRAME_SEQUENCE, frame)
            assert protein == translator.translate_sequence(frame_dna)
