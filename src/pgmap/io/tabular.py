"""Tab-delimited mapping table.

One header row followed by one 16-column row per MappingRecord, written
with ``csv.DictWriter``.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import TYPE_CHECKING, Any, TextIO

if TYPE_CHECKING:
    from pgmap.core.models import MappingRecord

TABLE_COLUMNS = (
    "Peptide ID",
    "Peptide Sequence",
    "Genome ID",
    "Start",
    "End",
    "Strand",
    "Reading Frame",
    "RT Peptide Sequence",
    "ePST Start",
    "ePST End",
    "ePST",
    "ePST Length",
    "Translated ePST",
    "Start Codon",
    "Peptide Probability",
    "Peptide Count",
)


def record_to_row(record: MappingRecord) -> dict[str, Any]:
    """Map one record onto the table columns."""
    values = (
        record.peptide_id,
        record.peptide_sequence,
        record.genome_id,
        record.start,
        record.end,
        record.strand,
        record.frame,
        record.rtp,
        record.epst_start,
        record.epst_end,
        record.epst,
        record.epst_length,
        record.translated_epst,
        record.start_codon,
        record.probability,
        record.count,
    )
    return dict(zip(TABLE_COLUMNS, values))


class MappingTableWriter:
    """Write the mapping table.

    The header row is written on the first record, or explicitly with
    ``write_header`` so that an empty run still produces a valid table.
    """

    def __init__(self, output: Path | str | TextIO) -> None:
        if isinstance(output, (str, Path)):
            self.path: Path | None = Path(output)
            self._file: TextIO | None = open(self.path, "w", newline="")
            self._owns_file = True
        else:
            self.path = None
            self._file = output
            self._owns_file = False
        self._writer = csv.DictWriter(
            self._file, fieldnames=TABLE_COLUMNS, delimiter="\t", lineterminator="\n"
        )
        self._header_written = False
        self.n_rows = 0

    def __enter__(self) -> MappingTableWriter:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._file is not None and self._owns_file:
            self._file.close()
        self._file = None

    def write_header(self) -> None:
        if self._file is None:
            raise RuntimeError("Table writer is closed")
        self._writer.writeheader()
        self._header_written = True

    def write_record(self, record: MappingRecord) -> None:
        if not self._header_written:
            self.write_header()
        self._writer.writerow(record_to_row(record))
        self.n_rows += 1
