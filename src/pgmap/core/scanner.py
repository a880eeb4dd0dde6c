"""Six-frame genomic scanning.

GenomicScanner ties the pieces together for one reference sequence:

1. Derive the six reading frames and translate each one.
2. Run every translated frame through the PatternAutomaton once.
3. For every peptide accepted at a position, recover the RTP span in frame
   coordinates, extend it with the active BoundaryExtender and convert
   both spans to 1-based, strand-relative reference coordinates.

Coordinate conversion uses the length of the frame string. Reverse frames
mirror each position as ``frame_length - pos``; F2 and F3 shift by one and
two bases and are clamped against the full reference length. After
clamping, the RTP start and both ePST bounds move to 1-based. The RTP end
is an exclusive 0-based position, which is already the 1-based inclusive
end, so it may reach the reference length and is kept as is.

Example:
    >>> scanner = GenomicScanner(peptides, automaton, translator, extender)
    >>> for record in scanner.scan_reference(reference):
    ...     print(record.peptide_id, record.start, record.end, record.frame)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterator, Sequence

from pgmap.core.models import MappingRecord, Peptide, ReferenceSequence
from pgmap.core.translate import frame_offset, frame_strand, is_reverse_frame

if TYPE_CHECKING:
    from pgmap.core.automaton import PatternAutomaton
    from pgmap.core.boundaries import BoundaryExtender
    from pgmap.core.translate import CodonTranslator

logger = logging.getLogger(__name__)

NO_START_CODON = "-"


class GenomicScanner:
    """Find peptide occurrences on reference sequences.

    The scanner holds only read-only collaborators, so one instance can be
    shared by worker threads.

    Attributes:
        peptides: Peptides in automaton id order.
        automaton: Automaton compiled over ``peptides``.
        translator: Translator for the active genetic code.
        extender: Boundary extension policy.
    """

    def __init__(
        self,
        peptides: Sequence[Peptide],
        automaton: PatternAutomaton,
        translator: CodonTranslator,
        extender: BoundaryExtender,
    ) -> None:
        if len(automaton) != len(peptides):
            raise ValueError(
                f"Automaton has {len(automaton)} patterns but {len(peptides)} peptides were given"
            )
        self.peptides = peptides
        self.automaton = automaton
        self.translator = translator
        self.extender = extender

    def scan_reference(self, reference: ReferenceSequence) -> Iterator[MappingRecord]:
        """Scan all six frames of one reference.

        Args:
            reference: Reference sequence; scanned upper-cased.

        Yields:
            MappingRecords ordered by frame (F1..R3), then by position.
        """
        sequence = reference.sequence.upper()
        for frame, frame_dna, protein in self.translator.iter_frames(sequence):
            yield from self.scan_frame(protein, frame_dna, frame, reference.seq_id)

    def scan_frame(
        self,
        protein: str,
        frame_dna: str,
        frame: str,
        reference_id: str,
    ) -> Iterator[MappingRecord]:
        """Scan one translated frame.

        Args:
            protein: Translation of ``frame_dna``.
            frame_dna: Frame-oriented nucleotides.
            frame: Frame code (F1-F3, R1-R3).
            reference_id: Reference sequence ID for the records.

        Yields:
            One MappingRecord per (position, peptide) match.
        """
        for position, pattern_ids in self.automaton.scan(protein):
            for pattern_id in pattern_ids:
                peptide = self.peptides[pattern_id - 1]
                yield self._build_record(peptide, position, frame_dna, frame, reference_id)

    def _build_record(
        self,
        peptide: Peptide,
        position: int,
        frame_dna: str,
        frame: str,
        reference_id: str,
    ) -> MappingRecord:
        rtp_end = (position + 1) * 3
        rtp_start = rtp_end - 3 * len(peptide)
        rtp = frame_dna[rtp_start:rtp_end]

        bounds = self.extender.find_epst(frame_dna, rtp_start, rtp_end)
        epst = frame_dna[bounds.start : bounds.end + 1]

        frame_length = len(frame_dna)
        start, end = transform_span(rtp_start, rtp_end, frame, frame_length, end_exclusive=True)
        epst_start, epst_end = transform_span(bounds.start, bounds.end, frame, frame_length)

        start += 1
        epst_start += 1
        epst_end += 1

        start_codon = epst[:3] if start != epst_start else NO_START_CODON

        return MappingRecord(
            peptide_id=peptide.peptide_id,
            peptide_sequence=peptide.sequence,
            genome_id=reference_id,
            start=start,
            end=end,
            strand=frame_strand(frame),
            frame=frame,
            rtp=rtp,
            epst_start=epst_start,
            epst_end=epst_end,
            epst=epst,
            epst_length=abs(epst_start - epst_end),
            translated_epst=self.translator.translate_sequence(epst),
            start_codon=start_codon,
            probability=peptide.probability,
            count=peptide.count,
        )


def transform_span(
    start: int,
    end: int,
    frame: str,
    frame_length: int,
    end_exclusive: bool = False,
) -> tuple[int, int]:
    """Convert a frame span to forward-strand-relative positions.

    Reverse frames mirror each position around the frame length; forward
    frames add the frame offset, so they are measured against the full
    reference (``frame_length + offset``). Positions are clamped to
    ``[0, reference_length - 1]``; an exclusive end may also equal
    ``reference_length``. Results stay 0-based.

    Args:
        start: Frame-relative span start.
        end: Frame-relative span end.
        frame: Frame code.
        frame_length: Length of the frame-oriented nucleotide string.
        end_exclusive: ``end`` is one past the last base of the span.

    Returns:
        Transformed ``(start, end)``.
    """
    if is_reverse_frame(frame):
        reference_length = frame_length
        start, end = frame_length - start, frame_length - end
    else:
        offset = frame_offset(frame)
        reference_length = frame_length + offset
        start, end = start + offset, end + offset

    last = max(reference_length - 1, 0)
    end_limit = reference_length if end_exclusive else last
    return min(max(start, 0), last), min(max(end, 0), end_limit)
