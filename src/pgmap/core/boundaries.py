"""Coding-region boundary extension.

A raw peptide match (the RTP, reverse-translated peptide) covers only the
codons that encode the peptide. This module extends it outward to a
plausible coding span, the ePST (extended peptide sequence tag), under one
of four policies:

- Prokaryote: back to the nearest upstream in-frame start after the
  preceding in-frame stop, forward through the next in-frame stop codon.
- Eukaryote: base by base in both directions, halting at an in-frame
  start/stop or at a splice motif in any frame.
- FixedWindow: a fixed number of codons on each side.
- GeneSplicer: like Eukaryote, but halting at predicted acceptor/donor
  positions instead of motifs.

Every policy works on the frame-oriented nucleotide string, takes the RTP
as a half-open ``[start, end)`` span and returns inclusive bounds clamped
into the string.

Example:
    >>> from pgmap.core.boundaries import ProkaryoteExtender
    >>> extender = ProkaryoteExtender.from_table(table)
    >>> bounds = extender.find_epst(frame_dna, 33, 45)
    >>> frame_dna[bounds.start : bounds.end + 1]
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, Collection, Iterable, NamedTuple, Protocol

import attrs

if TYPE_CHECKING:
    from pgmap.core.codetable import CodonTable
    from pgmap.io.splice_sites import SpliceEvidence

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

# Splice motifs used when no motif file is given
DEFAULT_BEGIN_SPLICE_MOTIFS = frozenset({"CAGG"})
DEFAULT_END_SPLICE_MOTIFS = frozenset(
    {"AAGGTAAGT", "AAGGTGAGT", "CAGGTAAGT", "CAGGTGAGT"}
)


class ExtensionMode(str, Enum):
    """Boundary extension policy."""

    PROKARYOTE = "Prokaryote"
    EUKARYOTE = "Eukaryote"
    FIXED_WINDOW = "FixedWindow"
    GENE_SPLICER = "GeneSplicer"


# =============================================================================
# Data Structures
# =============================================================================


class EpstBounds(NamedTuple):
    """Inclusive ePST bounds in frame coordinates (0-based).

    Attributes:
        start: First base of the ePST.
        end: Last base of the ePST.
    """

    start: int
    end: int


class BoundaryExtender(Protocol):
    """Anything that can extend an RTP span to an ePST."""

    mode: ClassVar[ExtensionMode]

    def find_epst(self, frame_dna: str, start: int, end: int) -> EpstBounds: ...


# =============================================================================
# Helpers
# =============================================================================


def contains_motif(motifs: Iterable[str], sequence: str, position: int) -> bool:
    """Check whether any motif starts at a position.

    Motifs may differ in length. A motif that would run past the end of
    the sequence does not match.

    Args:
        motifs: Candidate motifs (codons or splice signals).
        sequence: Sequence to inspect.
        position: 0-based position; negative positions never match.

    Returns:
        True if some motif occurs at exactly this position.
    """
    if position < 0:
        return False
    return any(sequence.startswith(motif, position) for motif in motifs)


def clamp_bounds(start: int, end: int, length: int) -> EpstBounds:
    """Clamp inclusive bounds into ``[0, length - 1]``."""
    last = max(length - 1, 0)
    return EpstBounds(min(max(start, 0), last), min(max(end, 0), last))


def _extend_base_by_base(
    frame_dna: str,
    start: int,
    end: int,
    start_codons: Collection[str],
    stop_codons: Collection[str],
    is_upstream_boundary,
    is_downstream_boundary,
) -> EpstBounds:
    """Shared walk for the splice-aware policies.

    Upstream, every third base (in frame with the RTP) is checked for a stop
    or start codon and every base for an upstream boundary. Downstream,
    every third base is checked for a stop codon and every base for a
    downstream boundary.
    """
    length = len(frame_dna)

    epst_start = start
    steps = 0
    while epst_start > 0:
        if steps % 3 == 0:
            if contains_motif(stop_codons, frame_dna, epst_start):
                break
            if contains_motif(start_codons, frame_dna, epst_start):
                break
        if is_upstream_boundary(epst_start):
            break
        epst_start -= 1
        steps += 1

    epst_end = end
    steps = 0
    while epst_end < length:
        if steps % 3 == 0 and contains_motif(stop_codons, frame_dna, epst_end):
            break
        if is_downstream_boundary(epst_end):
            break
        epst_end += 1
        steps += 1

    return clamp_bounds(epst_start, epst_end, length)


# =============================================================================
# Extension Policies
# =============================================================================


@attrs.define(frozen=True)
class FixedWindowExtender:
    """Extend a fixed number of codons on both sides.

    Attributes:
        codons: Codons added upstream and downstream.
    """

    mode: ClassVar[ExtensionMode] = ExtensionMode.FIXED_WINDOW

    codons: int = attrs.field(validator=attrs.validators.ge(0))

    def find_epst(self, frame_dna: str, start: int, end: int) -> EpstBounds:
        window = 3 * self.codons
        return clamp_bounds(start - window, end + window, len(frame_dna))


@attrs.define(frozen=True)
class ProkaryoteExtender:
    """Operon-style extension with no splicing.

    Attributes:
        start_codons: Codons accepted as translation starts.
        stop_codons: Codons that terminate translation.
    """

    mode: ClassVar[ExtensionMode] = ExtensionMode.PROKARYOTE

    start_codons: frozenset[str] = attrs.field(converter=frozenset)
    stop_codons: frozenset[str] = attrs.field(converter=frozenset)

    @classmethod
    def from_table(cls, table: CodonTable) -> ProkaryoteExtender:
        return cls(table.start_codons, table.stop_codons)

    def find_epst(self, frame_dna: str, start: int, end: int) -> EpstBounds:
        """Extend to the enclosing open reading frame.

        Upstream: step back in frame to the nearest stop codon (or the
        sequence start), then forward to the first start codon before the
        RTP. Without such a start codon the ePST begins at the RTP.
        Downstream: step forward in frame to the first stop codon and
        include it.

        Args:
            frame_dna: Frame-oriented nucleotides.
            start: RTP start (0-based, inclusive).
            end: RTP end (0-based, exclusive).

        Returns:
            Inclusive, clamped ePST bounds.
        """
        length = len(frame_dna)

        upstream_stop = start
        while upstream_stop > 0:
            if contains_motif(self.stop_codons, frame_dna, upstream_stop):
                break
            upstream_stop -= 3

        epst_start = upstream_stop
        while epst_start < start:
            if contains_motif(self.start_codons, frame_dna, epst_start):
                break
            epst_start += 3
        if epst_start >= start:
            epst_start = start

        epst_end = end
        while epst_end < length:
            if contains_motif(self.stop_codons, frame_dna, epst_end):
                break
            epst_end += 3

        # Include the stop codon itself
        epst_end += 2

        return clamp_bounds(epst_start, epst_end, length)


@attrs.define(frozen=True)
class EukaryoteExtender:
    """Extension that respects splice signals.

    Attributes:
        start_codons: Codons accepted as translation starts.
        stop_codons: Codons that terminate translation.
        begin_splice_motifs: Motifs that halt the upstream walk.
        end_splice_motifs: Motifs that halt the downstream walk.
    """

    mode: ClassVar[ExtensionMode] = ExtensionMode.EUKARYOTE

    start_codons: frozenset[str] = attrs.field(converter=frozenset)
    stop_codons: frozenset[str] = attrs.field(converter=frozenset)
    begin_splice_motifs: frozenset[str] = attrs.field(
        default=DEFAULT_BEGIN_SPLICE_MOTIFS, converter=frozenset
    )
    end_splice_motifs: frozenset[str] = attrs.field(
        default=DEFAULT_END_SPLICE_MOTIFS, converter=frozenset
    )

    def find_epst(self, frame_dna: str, start: int, end: int) -> EpstBounds:
        return _extend_base_by_base(
            frame_dna,
            start,
            end,
            self.start_codons,
            self.stop_codons,
            lambda pos: contains_motif(self.begin_splice_motifs, frame_dna, pos),
            lambda pos: contains_motif(self.end_splice_motifs, frame_dna, pos),
        )


@attrs.define(frozen=True)
class SpliceEvidenceExtender:
    """Extension halted by externally predicted splice sites.

    Positions are compared against frame coordinates as given in the
    predictor output.

    Attributes:
        start_codons: Codons accepted as translation starts.
        stop_codons: Codons that terminate translation.
        acceptors: Acceptor positions; halt the upstream walk.
        donors: Donor positions; halt the downstream walk.
    """

    mode: ClassVar[ExtensionMode] = ExtensionMode.GENE_SPLICER

    start_codons: frozenset[str] = attrs.field(converter=frozenset)
    stop_codons: frozenset[str] = attrs.field(converter=frozenset)
    acceptors: frozenset[int] = attrs.field(factory=frozenset, converter=frozenset)
    donors: frozenset[int] = attrs.field(factory=frozenset, converter=frozenset)

    def find_epst(self, frame_dna: str, start: int, end: int) -> EpstBounds:
        return _extend_base_by_base(
            frame_dna,
            start,
            end,
            self.start_codons,
            self.stop_codons,
            self.acceptors.__contains__,
            self.donors.__contains__,
        )


# =============================================================================
# Factory
# =============================================================================


def create_extender(
    mode: ExtensionMode | str,
    table: CodonTable,
    codons: int = 0,
    begin_splice_motifs: Iterable[str] | None = None,
    end_splice_motifs: Iterable[str] | None = None,
    evidence: SpliceEvidence | None = None,
) -> BoundaryExtender:
    """Build the extender for a mode.

    Args:
        mode: Extension policy.
        table: Codon table supplying start/stop codon sets.
        codons: Window size for FixedWindow.
        begin_splice_motifs: Upstream motifs for Eukaryote (defaults if None).
        end_splice_motifs: Downstream motifs for Eukaryote (defaults if None).
        evidence: Predicted splice sites for GeneSplicer.

    Returns:
        A configured extender.

    Raises:
        ValueError: If the mode is unknown or its inputs are missing.
    """
    mode = ExtensionMode(mode)

    if mode is ExtensionMode.FIXED_WINDOW:
        if codons <= 0:
            raise ValueError("FixedWindow extension needs a positive codon count")
        extender: BoundaryExtender = FixedWindowExtender(codons)
    elif mode is ExtensionMode.EUKARYOTE:
        extender = EukaryoteExtender(
            table.start_codons,
            table.stop_codons,
            begin_splice_motifs if begin_splice_motifs is not None else DEFAULT_BEGIN_SPLICE_MOTIFS,
            end_splice_motifs if end_splice_motifs is not None else DEFAULT_END_SPLICE_MOTIFS,
        )
    elif mode is ExtensionMode.GENE_SPLICER:
        if evidence is None:
            raise ValueError("GeneSplicer extension needs splice-site evidence")
        extender = SpliceEvidenceExtender(
            table.start_codons,
            table.stop_codons,
            evidence.acceptors,
            evidence.donors,
        )
    else:
        extender = ProkaryoteExtender.from_table(table)

    logger.debug(f"Using {mode.value} boundary extension")
    return extender
