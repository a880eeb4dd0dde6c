"""Mapping pipeline.

MappingPipeline loads the resources for a run (codon table, peptide list,
splice evidence), compiles the automaton once and scans every reference
sequence, writing records to a MappingOutput sink as they are produced.

References are independent, so with more than one worker they are scanned
in batches through ParallelExecutor. Each batch is written in input order,
which keeps the output identical to a serial run.

Example:
    >>> from pgmap.config import Config
    >>> from pgmap.core.pipeline import MappingPipeline
    >>> from pgmap.io import MappingOutput, ReferenceReader
    >>> config = Config.load("pgmap.yaml")
    >>> pipeline = MappingPipeline.from_config(config.mapper, "peptides.fa")
    >>> with ReferenceReader("genome.fa") as refs, MappingOutput("out.tsv") as sink:
    ...     summary = pipeline.run(refs, sink)
    >>> print(summary.format_summary())
"""

from __future__ import annotations

import functools
import logging
import threading
from collections import Counter
from itertools import islice
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Iterable, Iterator, Sequence

import attrs
import numpy as np

from pgmap.core.automaton import PatternAutomaton
from pgmap.core.boundaries import BoundaryExtender, ExtensionMode, create_extender
from pgmap.core.codetable import DEFAULT_TABLE_NAME, CodonTable, get_code_table
from pgmap.core.scanner import GenomicScanner
from pgmap.core.translate import FRAMES, CodonTranslator
from pgmap.parallel.executor import ExecutorBackend, ParallelExecutor, get_optimal_workers
from pgmap.utils.logging import ProgressLogger, Timer

if TYPE_CHECKING:
    from pgmap.config import MapperConfig
    from pgmap.core.models import MappingRecord, Peptide, ReferenceSequence
    from pgmap.io.output import MappingOutput

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 64


# =============================================================================
# Summary
# =============================================================================


@attrs.define
class MappingSummary:
    """Counts and statistics for one run.

    Attributes:
        peptide_ids: IDs of every input peptide, in input order.
        mode: Extension policy used.
        n_references: References scanned.
        n_records: Mapping records produced.
        records_per_frame: Record count for each frame code.
        mapped_peptides: IDs of peptides with at least one record.
        epst_lengths: ePST length of every record.
        cancelled: Whether the run stopped early.
    """

    peptide_ids: tuple[str, ...] = ()
    mode: ExtensionMode = ExtensionMode.PROKARYOTE
    n_references: int = 0
    n_records: int = 0
    records_per_frame: Counter = attrs.Factory(Counter)
    mapped_peptides: set[str] = attrs.Factory(set)
    epst_lengths: list[int] = attrs.Factory(list)
    cancelled: bool = False

    def add_record(self, record: MappingRecord) -> None:
        self.n_records += 1
        self.records_per_frame[record.frame] += 1
        self.mapped_peptides.add(record.peptide_id)
        self.epst_lengths.append(record.epst_length)

    @property
    def unmapped_peptides(self) -> list[str]:
        """Input peptide IDs without any record, in input order."""
        seen: set[str] = set()
        unmapped = []
        for peptide_id in self.peptide_ids:
            if peptide_id not in self.mapped_peptides and peptide_id not in seen:
                unmapped.append(peptide_id)
            seen.add(peptide_id)
        return unmapped

    def epst_length_stats(self) -> dict[str, float]:
        """Min, max, mean and median ePST length (empty dict without records)."""
        if not self.epst_lengths:
            return {}
        lengths = np.asarray(self.epst_lengths, dtype=np.int64)
        return {
            "min": int(lengths.min()),
            "max": int(lengths.max()),
            "mean": float(lengths.mean()),
            "median": float(np.median(lengths)),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode.value,
            "n_peptides": len(self.peptide_ids),
            "n_references": self.n_references,
            "n_records": self.n_records,
            "records_per_frame": {frame: self.records_per_frame.get(frame, 0) for frame in FRAMES},
            "n_mapped_peptides": len(self.mapped_peptides),
            "n_unmapped_peptides": len(self.unmapped_peptides),
            "epst_length": self.epst_length_stats(),
            "cancelled": self.cancelled,
        }

    def format_summary(self) -> str:
        """Format summary as text."""
        data = self.to_dict()
        lines = [
            "=" * 50,
            "MAPPING SUMMARY",
            "=" * 50,
            f"Extension mode:          {data['mode']}",
            f"Peptides:                {data['n_peptides']:,}",
            f"References scanned:      {data['n_references']:,}",
            f"Records:                 {data['n_records']:,}",
            f"Peptides mapped:         {data['n_mapped_peptides']:,}",
            f"Peptides unmapped:       {data['n_unmapped_peptides']:,}",
        ]

        per_frame = "  ".join(f"{frame}={n}" for frame, n in data["records_per_frame"].items())
        lines.append(f"Per frame:               {per_frame}")

        stats = data["epst_length"]
        if stats:
            lines.append(
                f"ePST length:             min {stats['min']}, max {stats['max']}, "
                f"mean {stats['mean']:.1f}, median {stats['median']:.1f}"
            )
        if self.cancelled:
            lines.append("Run was cancelled before all references were scanned")

        lines.append("=" * 50)
        return "\n".join(lines)


# =============================================================================
# Resource Loading
# =============================================================================


def load_codon_table(config: MapperConfig) -> CodonTable:
    """Resolve the codon table for a run.

    Without a code file or name, the standard code with ATG as the only
    start codon is used; otherwise the named table is read from the file
    (or the bundled tables). Start/stop codon files then override the
    table's sets.
    """
    from pgmap.io.splice_sites import load_start_codons, load_stop_codons

    if config.code_file is None and config.code_name is None:
        table = CodonTable.standard()
    else:
        table = get_code_table(config.code_name or DEFAULT_TABLE_NAME, config.code_file)

    table = table.with_codon_sets(
        load_start_codons(config.start_codons_file, table.start_codons),
        load_stop_codons(config.stop_codons_file, table.stop_codons),
    )
    logger.info(
        f"Using code table '{table.name}' "
        f"(starts: {','.join(sorted(table.start_codons))}; "
        f"stops: {','.join(sorted(table.stop_codons))})"
    )
    return table


def load_extender(config: MapperConfig, table: CodonTable) -> BoundaryExtender:
    """Build the boundary extender selected by the configuration."""
    from pgmap.io.splice_sites import (
        load_begin_splice_motifs,
        load_end_splice_motifs,
        read_genesplicer,
    )

    mode = config.resolve_mode()

    if mode is ExtensionMode.EUKARYOTE:
        return create_extender(
            mode,
            table,
            begin_splice_motifs=load_begin_splice_motifs(config.begin_splice_file),
            end_splice_motifs=load_end_splice_motifs(config.end_splice_file),
        )
    if mode is ExtensionMode.GENE_SPLICER:
        return create_extender(mode, table, evidence=read_genesplicer(config.genesplicer_file))
    return create_extender(mode, table, codons=config.codons)


def _scan_reference(scanner: GenomicScanner, reference: ReferenceSequence) -> list[MappingRecord]:
    """Scan one reference to a list; module level so it pickles for process pools."""
    return list(scanner.scan_reference(reference))


def _batched(items: Iterable[Any], size: int) -> Iterator[list[Any]]:
    iterator = iter(items)
    while batch := list(islice(iterator, size)):
        yield batch


# =============================================================================
# Pipeline
# =============================================================================


class MappingPipeline:
    """Map a peptide list onto reference sequences.

    Orchestrates:
    1. Automaton compilation over the peptide list
    2. Six-frame scanning of each reference
    3. Boundary extension and coordinate conversion
    4. Output and summary

    Attributes:
        peptides: Input peptides; record order follows automaton ids.
        table: Codon table in use.
        extender: Boundary extension policy.
        scanner: The GenomicScanner doing the work.

    Example:
        >>> pipeline = MappingPipeline(peptides, table, ProkaryoteExtender.from_table(table))
        >>> records = list(pipeline.iter_records(references))
    """

    def __init__(
        self,
        peptides: Sequence[Peptide],
        table: CodonTable | None = None,
        extender: BoundaryExtender | None = None,
        workers: int = 1,
        backend: ExecutorBackend | str = ExecutorBackend.THREADS,
        batch_size: int = DEFAULT_BATCH_SIZE,
        progress_callback: Callable[[int, int, str], None] | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            peptides: Peptides to map; must be non-empty.
            table: Codon table (standard code if None).
            extender: Extension policy (Prokaryote over ``table`` if None).
            workers: Parallel workers for scanning references; 0 uses
                one per CPU.
            backend: Executor backend when workers > 1.
            batch_size: References scanned per parallel batch.
            progress_callback: Called with (done, total, reference_id)
                within each parallel batch.

        Raises:
            ValueError: If no peptides are given.
        """
        if not peptides:
            raise ValueError("No peptides to map")

        self.peptides = list(peptides)
        self.table = table or CodonTable.standard()
        self.extender = extender or create_extender(ExtensionMode.PROKARYOTE, self.table)
        self.workers = workers if workers > 0 else get_optimal_workers()
        self.backend = backend
        self.batch_size = max(1, batch_size)
        self.progress_callback = progress_callback

        self._cancel_event = threading.Event()

        with Timer(f"Compiling automaton over {len(self.peptides):,} peptides", logger):
            automaton = PatternAutomaton.from_peptides(self.peptides)

        self.scanner = GenomicScanner(
            self.peptides,
            automaton,
            CodonTranslator(self.table),
            self.extender,
        )

    @classmethod
    def from_config(
        cls,
        config: MapperConfig,
        peptides_path: Path | str,
        **kwargs: Any,
    ) -> MappingPipeline:
        """Load every resource named by a configuration.

        Args:
            config: Mapper settings.
            peptides_path: Peptide FASTA or tabbed file.
            **kwargs: Passed to the constructor.

        Returns:
            A ready pipeline.
        """
        from pgmap.io.peptides import read_peptides

        table = load_codon_table(config)
        extender = load_extender(config, table)
        peptides = read_peptides(peptides_path, tabbed=config.tabbed)

        return cls(
            peptides,
            table,
            extender,
            workers=config.workers,
            backend=config.backend,
            **kwargs,
        )

    @property
    def mode(self) -> ExtensionMode:
        return self.extender.mode

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def cancel(self) -> None:
        """Stop after the references already in progress.

        Safe to call from another thread or a signal handler.
        """
        logger.warning("Cancellation requested")
        self._cancel_event.set()

    def iter_records(self, references: Iterable[ReferenceSequence]) -> Iterator[MappingRecord]:
        """Lazily scan references one after another.

        Yields:
            Records in reference order, then frame, then position.
        """
        for reference in references:
            if self.cancelled:
                return
            yield from self.scanner.scan_reference(reference)

    def _iter_reference_records(
        self,
        references: Iterable[ReferenceSequence],
    ) -> Iterator[tuple[ReferenceSequence, list[MappingRecord]]]:
        if self.workers == 1:
            for reference in references:
                if self.cancelled:
                    return
                yield reference, _scan_reference(self.scanner, reference)
            return

        executor = ParallelExecutor(
            n_workers=self.workers,
            backend=self.backend,
            progress_callback=self.progress_callback,
            cancel_event=self._cancel_event,
        )
        scan = functools.partial(_scan_reference, self.scanner)

        for batch in _batched(references, self.batch_size):
            if self.cancelled:
                return
            results, _ = executor.map_items(
                scan,
                batch,
                task_ids=[reference.seq_id for reference in batch],
            )
            # Cancelled tasks leave gaps; stop at the first so output stays a prefix
            for expected, task_result in enumerate(results):
                if task_result.index != expected:
                    return
                yield batch[task_result.index], task_result.result

    def run(
        self,
        references: Iterable[ReferenceSequence],
        output: MappingOutput | None = None,
        total_references: int | None = None,
    ) -> MappingSummary:
        """Scan every reference and write the records.

        Args:
            references: Reference sequences (a ReferenceReader works).
            output: Sink for the records; records are only counted if None.
            total_references: Expected count for progress messages.

        Returns:
            MappingSummary for the run.
        """
        summary = MappingSummary(
            peptide_ids=tuple(p.peptide_id for p in self.peptides),
            mode=self.mode,
        )

        if total_references is None and hasattr(references, "__len__"):
            total_references = len(references)
        progress = ProgressLogger(
            logger, total=total_references or 0, description="References scanned"
        )

        logger.info(f"Mapping {len(self.peptides):,} peptides ({self.mode.value} mode)")

        with Timer("Mapping", logger):
            for _, records in self._iter_reference_records(references):
                for record in records:
                    if output is not None:
                        output.write(record)
                    summary.add_record(record)
                summary.n_references += 1
                progress.update()

        summary.cancelled = self.cancelled
        progress.finish()
        logger.info(
            f"Found {summary.n_records:,} matches for "
            f"{len(summary.mapped_peptides):,} peptides"
        )
        return summary
