"""Combined output sink.

MappingOutput fans each MappingRecord out to the mapping table, the GFF3
file and the ePST FASTA file. Any of the three may be disabled by passing
None.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable

from pgmap.io.fasta import FastaWriter
from pgmap.io.gff import GFF3Writer
from pgmap.io.tabular import MappingTableWriter

if TYPE_CHECKING:
    from pgmap.core.models import MappingRecord

logger = logging.getLogger(__name__)


class MappingOutput:
    """Write mapping records to every configured output.

    Headers are written when the sink is opened, so a run without matches
    still produces a headed table and GFF3 file.

    Example:
        >>> with MappingOutput("out.tsv", "out.fa", "out.gff3") as sink:
        ...     sink.write_all(records)
    """

    def __init__(
        self,
        table_path: Path | str | None = None,
        fasta_path: Path | str | None = None,
        gff3_path: Path | str | None = None,
    ) -> None:
        self._table: MappingTableWriter | None = None
        self._fasta: FastaWriter | None = None
        self._gff: GFF3Writer | None = None
        self.n_records = 0

        try:
            if table_path is not None:
                self._table = MappingTableWriter(table_path)
                self._table.write_header()
            if fasta_path is not None:
                self._fasta = FastaWriter(fasta_path)
            if gff3_path is not None:
                self._gff = GFF3Writer(gff3_path)
                self._gff.write_header()
        except OSError:
            self.close()
            raise

    def __enter__(self) -> MappingOutput:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def write(self, record: MappingRecord) -> None:
        """Write one record to every open output."""
        if self._table is not None:
            self._table.write_record(record)
        if self._gff is not None:
            self._gff.write_record(record)
        if self._fasta is not None:
            self._fasta.write_record(record)
        self.n_records += 1

    def write_all(self, records: Iterable[MappingRecord]) -> int:
        """Write records; returns how many were written."""
        count = 0
        for record in records:
            self.write(record)
            count += 1
        return count

    def close(self) -> None:
        for writer in (self._table, self._fasta, self._gff):
            if writer is not None:
                writer.close()
        logger.debug(f"Closed outputs after {self.n_records} records")
