"""Peptide list readers.

Two formats are supported:

- FASTA: ``>id`` header lines followed by one or more sequence lines. The
  whole header text (minus ``>``) is the peptide ID.
- Tabbed: one peptide per line as ``sequence<TAB>probability<TAB>count``.
  The sequence doubles as the peptide ID.

Sequences are upper-cased and blank lines are ignored in both formats.
Peptide FASTA files are parsed in a single streaming pass rather than
indexed: peptide lists routinely repeat IDs and mix line lengths.

Example:
    >>> from pgmap.io.peptides import read_peptides
    >>> peptides = read_peptides("peptides.txt", tabbed=True)
    >>> peptides[0].probability
    0.95
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

from pgmap.core.models import Peptide
from pgmap.errors import MalformedInputError, MissingResourceError

logger = logging.getLogger(__name__)


def _check_exists(path: Path) -> None:
    if not path.exists():
        raise MissingResourceError(f"Peptide file not found: {path}")


def iter_fasta_peptides(path: Path | str) -> Iterator[Peptide]:
    """Stream peptides from a FASTA file.

    Args:
        path: Peptide FASTA file.

    Yields:
        Peptides in file order. Records without sequence are skipped.

    Raises:
        MissingResourceError: If the file does not exist.
        MalformedInputError: If sequence lines precede the first header.
    """
    path = Path(path)
    _check_exists(path)

    current_id: str | None = None
    current_seq: list[str] = []

    def finish() -> Peptide | None:
        sequence = "".join(current_seq).upper()
        if not sequence:
            logger.warning(f"Skipping peptide '{current_id}' with empty sequence")
            return None
        return Peptide(current_id, sequence)

    with open(path) as f:
        for line_number, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue

            if line.startswith(">"):
                if current_id is not None:
                    peptide = finish()
                    if peptide is not None:
                        yield peptide
                current_id = line[1:].strip()
                current_seq = []
            elif current_id is None:
                raise MalformedInputError(
                    "Sequence data before first FASTA header",
                    path=str(path),
                    line_number=line_number,
                )
            else:
                current_seq.append(line)

    if current_id is not None:
        peptide = finish()
        if peptide is not None:
            yield peptide


def parse_tabbed_line(line: str, path: str | None = None, line_number: int | None = None) -> Peptide:
    """Parse ``sequence<TAB>probability<TAB>count``.

    Columns after the third are ignored.

    Raises:
        MalformedInputError: On missing columns or unparsable numbers.
    """
    fields = line.split("\t")
    if len(fields) < 3:
        raise MalformedInputError(
            f"Expected 3 tab-separated columns, found {len(fields)}",
            path=path,
            line_number=line_number,
        )

    sequence = fields[0].strip().upper()
    if not sequence:
        raise MalformedInputError("Empty peptide sequence", path=path, line_number=line_number)

    try:
        probability = float(fields[1])
        count = int(fields[2])
    except ValueError as e:
        raise MalformedInputError(
            f"Invalid probability or count: {e}", path=path, line_number=line_number
        ) from e

    return Peptide(sequence, sequence, probability, count)


def iter_tabbed_peptides(path: Path | str) -> Iterator[Peptide]:
    """Stream peptides from a tab-delimited file.

    Args:
        path: Tabbed peptide file.

    Yields:
        Peptides in file order.

    Raises:
        MissingResourceError: If the file does not exist.
        MalformedInputError: On a malformed line.
    """
    path = Path(path)
    _check_exists(path)

    with open(path) as f:
        for line_number, line in enumerate(f, start=1):
            line = line.rstrip("\r\n")
            if not line.strip():
                continue
            yield parse_tabbed_line(line, str(path), line_number)


def read_peptides(path: Path | str, tabbed: bool = False) -> list[Peptide]:
    """Load a peptide list.

    Args:
        path: Peptide file.
        tabbed: Read the tab-delimited format instead of FASTA.

    Returns:
        Peptides in file order; duplicates are kept.
    """
    reader = iter_tabbed_peptides if tabbed else iter_fasta_peptides
    peptides = list(reader(path))
    logger.info(f"Loaded {len(peptides)} peptides from {Path(path).name}")
    return peptides
