"""GFF3 output for peptide mappings.

Each MappingRecord becomes two ``region`` features on the reference: the
RTP (the codons encoding the peptide) and the ePST (the extended coding
region). Both carry the peptide ID as ``ID`` and ``Name``.

Features:
    - ``##gff-version 3`` header
    - Attribute escaping for reserved characters
    - Coordinates written low-to-high on both strands

Example:
    >>> from pgmap.io.gff import GFF3Writer
    >>> with GFF3Writer("mappings.gff3") as writer:
    ...     writer.write_header()
    ...     for record in records:
    ...         writer.write_record(record)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, TextIO

if TYPE_CHECKING:
    from pgmap.core.models import MappingRecord

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

GFF_VERSION_LINE = "##gff-version 3"

DEFAULT_SOURCE = "ProteogenomicMapping"
SOURCE_RTP = f"{DEFAULT_SOURCE},RTP"
SOURCE_EPST = f"{DEFAULT_SOURCE},ePST"

FEATURE_REGION = "region"


# =============================================================================
# Formatting
# =============================================================================


def format_attributes(attributes: dict[str, str]) -> str:
    """Format attribute dictionary as GFF3 string.

    Args:
        attributes: Dictionary of attributes.

    Returns:
        Semicolon-separated key=value string.
    """
    if not attributes:
        return "."

    parts = []
    for key, value in attributes.items():
        value = str(value).replace(";", "%3B").replace("=", "%3D")
        value = value.replace("&", "%26").replace(",", "%2C")
        parts.append(f"{key}={value}")

    return ";".join(parts)


def format_gff_line(
    seqid: str,
    source: str,
    feature_type: str,
    start: int,
    end: int,
    score: float | None = None,
    strand: str = ".",
    phase: int | None = None,
    attributes: dict[str, str] | None = None,
) -> str:
    """Format a single GFF3 line.

    Args:
        seqid: Sequence identifier.
        source: Source of the annotation.
        feature_type: Type of feature.
        start: Start position (1-based, inclusive).
        end: End position (1-based, inclusive).
        score: Feature score.
        strand: Strand.
        phase: CDS phase.
        attributes: Feature attributes.

    Returns:
        Formatted GFF3 line without a trailing newline.
    """
    score_str = "." if score is None else f"{score:.4f}"
    phase_str = "." if phase is None else str(phase)
    attr_str = format_attributes(attributes or {})

    return "\t".join(
        [
            seqid,
            source,
            feature_type,
            str(start),
            str(end),
            score_str,
            strand,
            phase_str,
            attr_str,
        ]
    )


def record_to_gff_lines(record: MappingRecord) -> list[str]:
    """RTP and ePST feature lines for one mapping.

    Reverse-strand records keep their strand column but list the lower
    coordinate first, as GFF3 requires ``start <= end``.
    """
    attributes = {"ID": record.peptide_id, "Name": record.peptide_id}

    lines = []
    for source, start, end in (
        (SOURCE_RTP, record.start, record.end),
        (SOURCE_EPST, record.epst_start, record.epst_end),
    ):
        lines.append(
            format_gff_line(
                record.genome_id,
                source,
                FEATURE_REGION,
                min(start, end),
                max(start, end),
                strand=record.strand,
                attributes=attributes,
            )
        )
    return lines


# =============================================================================
# GFF3 Writer
# =============================================================================


class GFF3Writer:
    """Write mapping features to GFF3 format.

    Example:
        >>> writer = GFF3Writer("output.gff3")
        >>> writer.write_header()
        >>> for record in records:
        ...     writer.write_record(record)
        >>> writer.close()
    """

    def __init__(self, output: Path | str | TextIO) -> None:
        """Initialize the writer.

        Args:
            output: Output file path or an open text stream.
        """
        if isinstance(output, (str, Path)):
            self.path: Path | None = Path(output)
            self._file: TextIO | None = open(self.path, "w")
            self._owns_file = True
        else:
            self.path = None
            self._file = output
            self._owns_file = False
        self._header_written = False
        self.n_features = 0

    def __enter__(self) -> GFF3Writer:
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()

    def close(self) -> None:
        """Close the output file."""
        if self._file is not None and self._owns_file:
            self._file.close()
        self._file = None

    def write_header(self) -> None:
        """Write the GFF3 version pragma."""
        if self._file is None:
            raise RuntimeError("GFF3 writer is closed")
        self._file.write(f"{GFF_VERSION_LINE}\n")
        self._header_written = True

    def write_record(self, record: MappingRecord) -> None:
        """Write the RTP and ePST features of one mapping.

        Args:
            record: Mapping to write.
        """
        if not self._header_written:
            self.write_header()

        for line in record_to_gff_lines(record):
            self._file.write(f"{line}\n")
            self.n_features += 1
