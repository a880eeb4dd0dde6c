"""Splice-signal and codon-set inputs.

This module provides readers for the optional inputs that tune boundary
extension:

- Line-set files (one motif or codon per line) for begin/end splice
  motifs and start/stop codon overrides. A missing file means "use the
  defaults".
- GeneSplicer prediction output, parsed into acceptor and donor
  positions.

Example:
    >>> from pgmap.io.splice_sites import load_begin_splice_motifs, read_genesplicer
    >>> motifs = load_begin_splice_motifs("begin_sites.txt")
    >>> evidence = read_genesplicer("genesplicer.out")
    >>> len(evidence.donors)
    412
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator, Literal, NamedTuple

import attrs

from pgmap.core.boundaries import DEFAULT_BEGIN_SPLICE_MOTIFS, DEFAULT_END_SPLICE_MOTIFS
from pgmap.core.codetable import DEFAULT_START_CODONS, DEFAULT_STOP_CODONS
from pgmap.errors import MalformedInputError, MissingResourceError

logger = logging.getLogger(__name__)

SiteType = Literal["acceptor", "donor"]


# =============================================================================
# Line Sets
# =============================================================================


def read_line_set(path: Path | str) -> frozenset[str]:
    """Read one upper-cased entry per non-blank line.

    Args:
        path: File to read.

    Returns:
        The distinct entries.

    Raises:
        MissingResourceError: If the file does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise MissingResourceError(f"File not found: {path}")

    with open(path) as f:
        entries = frozenset(line.strip().upper() for line in f if line.strip())

    logger.debug(f"Read {len(entries)} entries from {path}")
    return entries


def load_line_set(path: Path | str | None, default: Iterable[str]) -> frozenset[str]:
    """Read a line set, falling back to defaults when the file is absent.

    Args:
        path: Optional file. None or a non-existent path selects the default.
        default: Entries to use without a file.

    Returns:
        Entries from the file, or the defaults.
    """
    if path is None or not Path(path).exists():
        if path is not None:
            logger.info(f"{path} not found, using defaults")
        return frozenset(default)
    return read_line_set(path)


def load_begin_splice_motifs(path: Path | str | None = None) -> frozenset[str]:
    return load_line_set(path, DEFAULT_BEGIN_SPLICE_MOTIFS)


def load_end_splice_motifs(path: Path | str | None = None) -> frozenset[str]:
    return load_line_set(path, DEFAULT_END_SPLICE_MOTIFS)


def load_start_codons(
    path: Path | str | None = None, default: Iterable[str] = DEFAULT_START_CODONS
) -> frozenset[str]:
    return load_line_set(path, default)


def load_stop_codons(
    path: Path | str | None = None, default: Iterable[str] = DEFAULT_STOP_CODONS
) -> frozenset[str]:
    return load_line_set(path, default)


# =============================================================================
# GeneSplicer
# =============================================================================


class GeneSplicerEntry(NamedTuple):
    """One predicted splice site.

    Attributes:
        start: First coordinate reported for the site.
        end: Second coordinate reported for the site.
        score: Prediction score, if present.
        confidence: Confidence label, if present.
        site_type: "donor" or "acceptor".
    """

    start: int
    end: int
    score: float | None
    confidence: str | None
    site_type: SiteType


@attrs.define(frozen=True)
class SpliceEvidence:
    """Predicted splice-site positions.

    Attributes:
        acceptors: Acceptor site start positions.
        donors: Donor site start positions.
    """

    acceptors: frozenset[int] = attrs.field(factory=frozenset, converter=frozenset)
    donors: frozenset[int] = attrs.field(factory=frozenset, converter=frozenset)

    @classmethod
    def from_entries(cls, entries: Iterable[GeneSplicerEntry]) -> SpliceEvidence:
        acceptors = set()
        donors = set()
        for entry in entries:
            if entry.site_type == "donor":
                donors.add(entry.start)
            else:
                acceptors.add(entry.start)
        return cls(acceptors, donors)


def parse_genesplicer_line(
    line: str,
    path: str | None = None,
    line_number: int | None = None,
) -> GeneSplicerEntry:
    """Parse ``start end score confidence type``.

    Any line mentioning ``donor`` is a donor; everything else is an
    acceptor.

    Raises:
        MalformedInputError: If the positions are missing or not integers.
    """
    fields = line.split()
    if len(fields) < 2:
        raise MalformedInputError(
            "Expected at least start and end positions", path=path, line_number=line_number
        )

    try:
        start = int(fields[0])
        end = int(fields[1])
        score = float(fields[2]) if len(fields) > 2 else None
    except ValueError as e:
        raise MalformedInputError(
            f"Invalid splice-site field: {e}", path=path, line_number=line_number
        ) from e

    confidence = fields[3] if len(fields) > 3 else None

    site_type: SiteType = "donor" if "donor" in line else "acceptor"
    return GeneSplicerEntry(start, end, score, confidence, site_type)


def iter_genesplicer(path: Path | str) -> Iterator[GeneSplicerEntry]:
    """Stream entries from a GeneSplicer output file.

    Raises:
        MissingResourceError: If the file does not exist.
        MalformedInputError: On a malformed line.
    """
    path = Path(path)
    if not path.exists():
        raise MissingResourceError(f"GeneSplicer file not found: {path}")

    with open(path) as f:
        for line_number, line in enumerate(f, start=1):
            if not line.strip():
                continue
            yield parse_genesplicer_line(line, str(path), line_number)


def read_genesplicer(path: Path | str) -> SpliceEvidence:
    """Load GeneSplicer predictions as acceptor/donor position sets."""
    evidence = SpliceEvidence.from_entries(iter_genesplicer(path))
    logger.info(
        f"Loaded {len(evidence.acceptors)} acceptors and "
        f"{len(evidence.donors)} donors from {Path(path).name}"
    )
    return evidence
