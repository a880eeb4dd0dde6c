"""Codon translation and reading frames.

This module provides DNA to protein translation over a CodonTable and the
six reading-frame variants of a nucleotide sequence:

- F1, F2, F3: the sequence itself with 0, 1 or 2 leading bases dropped
- R1, R2, R3: the reverse complement with 0, 1 or 2 leading bases dropped

Example:
    >>> from pgmap.core.translate import CodonTranslator
    >>> translator = CodonTranslator()
    >>> translator.translate_sequence("ATGAAATAG")
    'MK*'
    >>> translator.get_reading_frame("ATGC", "R1")
    'GCAT'
"""

from __future__ import annotations

from typing import Iterator, Literal

from pgmap.core.codetable import CodonTable

# =============================================================================
# Constants
# =============================================================================

Frame = Literal["F1", "F2", "F3", "R1", "R2", "R3"]

FRAMES: tuple[Frame, ...] = ("F1", "F2", "F3", "R1", "R2", "R3")
FORWARD_FRAMES: tuple[Frame, ...] = ("F1", "F2", "F3")
REVERSE_FRAMES: tuple[Frame, ...] = ("R1", "R2", "R3")

COMPLEMENT = {
    "A": "T",
    "T": "A",
    "G": "C",
    "C": "G",
    "N": "N",
}


# =============================================================================
# Frame Helpers
# =============================================================================


def frame_offset(frame: str) -> int:
    """Number of leading bases dropped for a frame (0, 1 or 2).

    Raises:
        ValueError: If frame is not one of F1-F3, R1-R3.
    """
    if frame not in FRAMES:
        raise ValueError(f"Invalid reading frame: {frame!r}. Expected one of {FRAMES}")
    return int(frame[1]) - 1


def is_reverse_frame(frame: str) -> bool:
    """Whether a frame reads the reverse complement strand.

    Raises:
        ValueError: If frame is not a valid frame code.
    """
    frame_offset(frame)
    return frame.startswith("R")


def frame_strand(frame: str) -> str:
    """GFF-style strand symbol for a frame."""
    return "-" if is_reverse_frame(frame) else "+"


def complement(base: str) -> str:
    """Complement a single base, upper-cased. Unknown symbols give ``N``."""
    return COMPLEMENT.get(base.upper(), "N")


def reverse_complement(sequence: str) -> str:
    """Get the reverse complement of a DNA sequence.

    Args:
        sequence: DNA sequence string (any case).

    Returns:
        Upper-case reverse complement.
    """
    return "".join(complement(base) for base in reversed(sequence))


# =============================================================================
# CodonTranslator Class
# =============================================================================


class CodonTranslator:
    """Translate nucleotides to residues under one genetic code.

    Attributes:
        table: The CodonTable in use.

    Example:
        >>> translator = CodonTranslator(get_code_table("Standard"))
        >>> for frame, frame_dna, protein in translator.iter_frames(seq):
        ...     print(frame, protein)
    """

    def __init__(self, table: CodonTable | None = None) -> None:
        """Initialize the translator.

        Args:
            table: Codon table. The standard code is used if None.
        """
        self.table = table if table is not None else CodonTable.standard()
        self._codons = self.table.codons

    def translate(self, codon: str) -> str:
        """Translate one codon; anything not in the table becomes ``X``."""
        return self._codons.get(codon, "X")

    def translate_sequence(self, sequence: str) -> str:
        """Translate consecutive codons left to right.

        Trailing bases that do not complete a codon are ignored.

        Args:
            sequence: DNA sequence.

        Returns:
            Protein string with ``len(sequence) // 3`` residues.
        """
        codons = self._codons
        return "".join(
            codons.get(sequence[i : i + 3], "X")
            for i in range(0, len(sequence) - 2, 3)
        )

    @staticmethod
    def complement(base: str) -> str:
        return complement(base)

    @staticmethod
    def reverse_complement(sequence: str) -> str:
        return reverse_complement(sequence)

    @staticmethod
    def get_reading_frame(sequence: str, frame: str) -> str:
        """Nucleotides read by a frame.

        Args:
            sequence: Forward-strand DNA.
            frame: One of F1, F2, F3, R1, R2, R3.

        Returns:
            The frame-oriented sequence. Reverse frames are reverse
            complemented before the leading bases are dropped.

        Raises:
            ValueError: If frame is not a valid frame code.
        """
        offset = frame_offset(frame)
        if frame.startswith("R"):
            sequence = reverse_complement(sequence)
        return sequence[min(offset, len(sequence)) :]

    def iter_frames(self, sequence: str) -> Iterator[tuple[Frame, str, str]]:
        """Yield ``(frame, frame_dna, protein)`` for F1, F2, F3, R1, R2, R3."""
        reverse = reverse_complement(sequence)
        for frame in FRAMES:
            source = reverse if frame.startswith("R") else sequence
            offset = min(frame_offset(frame), len(source))
            frame_dna = source[offset:]
            yield frame, frame_dna, self.translate_sequence(frame_dna)
