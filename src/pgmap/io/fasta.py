"""FASTA file handling for reference sequences and ePST output.

Reference genomes are read through pyfaidx, which builds (or reuses) a
``.fai`` index beside the FASTA file and gives per-record access without
parsing the whole file up front.

Example:
    >>> from pgmap.io.fasta import ReferenceReader
    >>> with ReferenceReader("genome.fa") as reader:
    ...     for reference in reader:
    ...         print(reference.seq_id, len(reference))
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterator, TextIO

import pyfaidx

from pgmap.core.models import ReferenceSequence
from pgmap.errors import MalformedInputError, MissingResourceError

if TYPE_CHECKING:
    from pgmap.core.models import MappingRecord

logger = logging.getLogger(__name__)


# =============================================================================
# Reference Reader
# =============================================================================


class ReferenceReader:
    """Indexed reference FASTA access using pyfaidx.

    Records are yielded in file order with upper-cased sequences.

    Attributes:
        path: Path to the FASTA file.

    Example:
        >>> reader = ReferenceReader("genome.fa")
        >>> reader.sequence_ids[:3]
        ['chr1', 'chr2', 'chr3']
        >>> reader.get("chr2").sequence[:10]
    """

    def __init__(self, fasta_path: Path | str) -> None:
        """Open the reference.

        Args:
            fasta_path: Path to FASTA file. A .fai index is created if
                needed.

        Raises:
            MissingResourceError: If the FASTA file doesn't exist.
            MalformedInputError: If pyfaidx cannot index the file.
        """
        self.path = Path(fasta_path)
        if not self.path.exists():
            raise MissingResourceError(f"Reference FASTA not found: {self.path}")

        self._fasta: pyfaidx.Fasta | None = None
        self._sequence_ids: list[str] = []
        self._lengths: dict[str, int] = {}

        self._open()

    def _open(self) -> None:
        try:
            self._fasta = pyfaidx.Fasta(
                str(self.path),
                sequence_always_upper=True,
                read_ahead=10000,
                rebuild=False,
            )
        except (pyfaidx.FastaIndexingError, ValueError) as e:
            raise MalformedInputError(f"Cannot index reference FASTA: {e}", path=str(self.path)) from e

        self._sequence_ids = list(self._fasta.keys())
        self._lengths = {seq_id: len(self._fasta[seq_id]) for seq_id in self._sequence_ids}

        logger.info(
            f"Opened reference: {self.path.name}, "
            f"{len(self._sequence_ids)} sequences, "
            f"{self.total_length:,} bp total"
        )

    @property
    def sequence_ids(self) -> list[str]:
        """Sequence names in file order."""
        return self._sequence_ids.copy()

    @property
    def lengths(self) -> dict[str, int]:
        """Return {seq_id: length} mapping."""
        return self._lengths.copy()

    @property
    def total_length(self) -> int:
        return sum(self._lengths.values())

    def get(self, seq_id: str) -> ReferenceSequence:
        """Load one full sequence.

        Raises:
            KeyError: If seq_id is not in the FASTA.
        """
        if self._fasta is None:
            raise RuntimeError("FASTA file not opened")
        if seq_id not in self._lengths:
            raise KeyError(f"Unknown sequence: {seq_id}")

        return ReferenceSequence(seq_id, str(self._fasta[seq_id][:]))

    def __iter__(self) -> Iterator[ReferenceSequence]:
        for seq_id in self._sequence_ids:
            yield self.get(seq_id)

    def __contains__(self, seq_id: str) -> bool:
        return seq_id in self._lengths

    def __len__(self) -> int:
        return len(self._sequence_ids)

    def __enter__(self) -> ReferenceReader:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._fasta is not None:
            self._fasta.close()
            self._fasta = None


def read_references(fasta_path: Path | str) -> list[ReferenceSequence]:
    """Load every reference sequence into memory.

    Args:
        fasta_path: Path to FASTA file.

    Returns:
        ReferenceSequences in file order.
    """
    with ReferenceReader(fasta_path) as reader:
        return list(reader)


# =============================================================================
# FASTA Writer
# =============================================================================


def format_fasta_record(header: str, sequence: str, width: int | None = None) -> str:
    """Format one FASTA record.

    Args:
        header: Header text without the leading ``>``.
        sequence: Sequence to write.
        width: Line width for wrapping; None writes one line.

    Returns:
        Record text ending with a newline.
    """
    if width is None or width <= 0:
        return f">{header}\n{sequence}\n"

    lines = [sequence[i : i + width] for i in range(0, len(sequence), width)]
    return f">{header}\n" + "\n".join(lines) + "\n"


class FastaWriter:
    """Write ePST nucleotide sequences, one record per mapping.

    The header is the peptide ID; the sequence is written on a single line.

    Example:
        >>> with FastaWriter("epst.fa") as writer:
        ...     writer.write_record(record)
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
        self.n_records = 0

    def __enter__(self) -> FastaWriter:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the output file."""
        if self._file is not None and self._owns_file:
            self._file.close()
        self._file = None

    def write(self, header: str, sequence: str) -> None:
        if self._file is None:
            raise RuntimeError("FASTA writer is closed")
        self._file.write(format_fasta_record(header, sequence))
        self.n_records += 1

    def write_record(self, record: MappingRecord) -> None:
        """Write the ePST of a mapping record."""
        self.write(record.peptide_id, record.epst)
