"""Core data models.

Peptides and reference sequences are inputs; MappingRecord is the single
result type produced by the scanner and consumed by every writer.
"""

from __future__ import annotations

from typing import Literal

import attrs

Strand = Literal["+", "-"]


@attrs.define(frozen=True, slots=True)
class Peptide:
    """An observed peptide.

    Attributes:
        peptide_id: Identifier carried into every output.
        sequence: Upper-case residue string.
        probability: Identification probability, passed through unchanged.
        count: Observation count, passed through unchanged.
    """

    peptide_id: str
    sequence: str
    probability: float = 1.0
    count: int = 1

    def __len__(self) -> int:
        return len(self.sequence)


@attrs.define(frozen=True, slots=True)
class ReferenceSequence:
    """A named nucleotide sequence from the reference FASTA."""

    seq_id: str
    sequence: str = attrs.field(repr=False)

    def __len__(self) -> int:
        return len(self.sequence)


@attrs.define(frozen=True, slots=True)
class MappingRecord:
    """One peptide occurrence on a reference.

    Coordinates are 1-based and strand relative: on the reverse strand
    ``start > end``.

    Attributes:
        peptide_id: ID of the matched peptide.
        peptide_sequence: Residues of the matched peptide.
        genome_id: Reference sequence ID.
        start: RTP start.
        end: RTP end.
        strand: "+" for F frames, "-" for R frames.
        frame: Reading frame code (F1-F3, R1-R3).
        rtp: Nucleotides that encode the peptide.
        epst_start: Extended region start.
        epst_end: Extended region end.
        epst: Nucleotides of the extended region.
        epst_length: ``abs(epst_start - epst_end)``.
        translated_epst: Translation of the extended region.
        start_codon: First codon of the ePST when it extends past the
            RTP start, otherwise "-".
        probability: Peptide probability.
        count: Peptide count.
    """

    peptide_id: str
    peptide_sequence: str
    genome_id: str
    start: int
    end: int
    strand: Strand
    frame: str
    rtp: str
    epst_start: int
    epst_end: int
    epst: str
    epst_length: int
    translated_epst: str
    start_codon: str
    probability: float
    count: int
