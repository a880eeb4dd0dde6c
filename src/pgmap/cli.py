"""Command-line interface for pgmap.

This module provides the main entry point for the pgmap CLI tool.
It uses Click to define commands for mapping and inspection.

Commands:
    map: Map peptides onto reference sequences
    tables: List the tables in a genetic code file
    translate: Print six-frame translations of a FASTA file

Example:
    $ pgmap --help
    $ pgmap map -p peptides.fa -r genome.fa -o mapping.tsv
    $ pgmap map -p peptides.tsv --tabbed -r genome.fa --eukaryote
    $ pgmap tables
    $ pgmap translate genome.fa --frame F1 --frame R1
"""

import signal
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from pgmap import __version__
from pgmap.utils.logging import setup_logging

# Initialize rich console for pretty output
console = Console()


def _verbosity(verbose: bool, quiet: bool) -> int:
    if quiet:
        return 0
    if verbose:
        return 2
    return 1


@click.group()
@click.version_option(version=__version__, prog_name="pgmap")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output.")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def main(ctx: click.Context, verbose: bool, quiet: bool) -> None:
    """pgmap: map peptides onto genomic sequence.

    Peptides are searched in all six reading frames of each reference and
    every hit is extended to an ePST using start/stop codons, splice motifs
    or GeneSplicer evidence.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    setup_logging(verbosity=_verbosity(verbose, quiet))


# =============================================================================
# map command
# =============================================================================


@main.command("map")
@click.option(
    "--peptides",
    "-p",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Peptide file (FASTA, or tab-delimited with --tabbed).",
)
@click.option(
    "--reference",
    "-r",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Reference FASTA file.",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML configuration file. Command-line options override it.",
)
@click.option(
    "--code-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="NCBI genetic code file (gc.prt). Bundled tables if omitted.",
)
@click.option(
    "--code-name",
    type=str,
    default=None,
    help="Genetic code table name [default: Standard].",
)
@click.option(
    "--start-codons",
    type=click.Path(path_type=Path),
    default=None,
    help="Start codons, one per line. Overrides the table's starts.",
)
@click.option(
    "--stop-codons",
    type=click.Path(path_type=Path),
    default=None,
    help="Stop codons, one per line. Overrides the table's stops.",
)
@click.option(
    "--begin-splice",
    type=click.Path(path_type=Path),
    default=None,
    help="Upstream splice motifs, one per line (Eukaryote mode).",
)
@click.option(
    "--end-splice",
    type=click.Path(path_type=Path),
    default=None,
    help="Downstream splice motifs, one per line (Eukaryote mode).",
)
@click.option(
    "--genesplicer",
    type=click.Path(path_type=Path),
    default=None,
    help="GeneSplicer output; enables GeneSplicer mode when present.",
)
@click.option(
    "--eukaryote/--prokaryote",
    default=None,
    help="Splice-aware extension instead of start/stop codons.",
)
@click.option(
    "--codons",
    type=click.IntRange(min=0),
    default=None,
    help="Fixed extension window in codons; >0 selects FixedWindow mode.",
)
@click.option(
    "--tabbed/--fasta-peptides",
    default=None,
    help="Peptides are tab-delimited (sequence, probability, count).",
)
@click.option(
    "--workers",
    "-j",
    type=click.IntRange(min=0),
    default=None,
    help="Parallel workers for scanning references, 0 for one per CPU [default: 1].",
)
@click.option(
    "--backend",
    type=click.Choice(["serial", "threads", "processes"]),
    default=None,
    help="Parallel backend [default: threads].",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Mapping table output [default: pgmap.out].",
)
@click.option(
    "--fasta-output",
    type=click.Path(path_type=Path),
    default=None,
    help="ePST FASTA output [default: pgmap.out.fa].",
)
@click.option(
    "--gff3-output",
    type=click.Path(path_type=Path),
    default=None,
    help="GFF3 output [default: pgmap.gff3].",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write a debug-level log to this file.",
)
@click.pass_context
def map_peptides(
    ctx: click.Context,
    peptides: Path,
    reference: Path,
    config_path: Optional[Path],
    code_file: Optional[Path],
    code_name: Optional[str],
    start_codons: Optional[Path],
    stop_codons: Optional[Path],
    begin_splice: Optional[Path],
    end_splice: Optional[Path],
    genesplicer: Optional[Path],
    eukaryote: Optional[bool],
    codons: Optional[int],
    tabbed: Optional[bool],
    workers: Optional[int],
    backend: Optional[str],
    output: Optional[Path],
    fasta_output: Optional[Path],
    gff3_output: Optional[Path],
    log_file: Optional[Path],
) -> None:
    """Map peptides onto reference sequences.

    Every peptide is searched in all six frames of each reference. Each hit
    is reported with its reverse-translated span (RTP) and the extended
    peptide sequence tag (ePST) around it.

    \b
    Extension mode is chosen in this order:
    1. --eukaryote: extend to splice motifs or stop codons
    2. --codons N (N > 0): fixed window of N codons each side
    3. --genesplicer FILE (if the file exists): GeneSplicer sites
    4. otherwise: start/stop codons (Prokaryote)

    \b
    Outputs:
    - Tab-delimited mapping table (16 columns, with header)
    - FASTA of ePST sequences (header = peptide ID)
    - GFF3 with RTP and ePST region features

    \b
    Examples:
        # Bacterial genome with the plastid code
        $ pgmap map -p peptides.fa -r genome.fa \\
            --code-name "Bacterial, Archaeal and Plant Plastid"

        # Eukaryote with custom motifs, 4 processes
        $ pgmap map -p peptides.tsv --tabbed -r genome.fa --eukaryote \\
            --begin-splice begin.txt --end-splice end.txt -j 4 --backend processes
    """
    from pgmap.config import Config
    from pgmap.core.pipeline import MappingPipeline
    from pgmap.io import MappingOutput, ReferenceReader

    verbose = ctx.obj.get("verbose", False)
    quiet = ctx.obj.get("quiet", False)

    if log_file is not None:
        setup_logging(verbosity=_verbosity(verbose, quiet), log_file=log_file)

    try:
        config = Config.load(config_path).with_overrides(
            mapper={
                "code_file": code_file,
                "code_name": code_name,
                "start_codons_file": start_codons,
                "stop_codons_file": stop_codons,
                "begin_splice_file": begin_splice,
                "end_splice_file": end_splice,
                "genesplicer_file": genesplicer,
                "eukaryote": eukaryote,
                "codons": codons,
                "tabbed": tabbed,
                "workers": workers,
                "backend": backend,
            },
            output={
                "table": output,
                "fasta": fasta_output,
                "gff3": gff3_output,
            },
        )

        if not quiet:
            console.print(f"[blue]Peptides:[/blue] {peptides}")
            console.print(f"[blue]Reference:[/blue] {reference}")
            if config_path:
                console.print(f"[blue]Config:[/blue] {config_path}")

        pipeline = MappingPipeline.from_config(config.mapper, peptides)

        if not quiet:
            console.print(f"[blue]Peptides loaded:[/blue] {len(pipeline.peptides):,}")
            console.print(f"[blue]Code table:[/blue] {pipeline.table.name}")
            console.print(f"[blue]Extension mode:[/blue] {pipeline.mode.value}")
            console.print("[dim]Scanning references...[/dim]")

        previous_handler = signal.signal(signal.SIGINT, lambda *_: pipeline.cancel())
        try:
            with ReferenceReader(reference) as references, MappingOutput(
                config.output.table,
                config.output.fasta,
                config.output.gff3,
            ) as sink:
                summary = pipeline.run(references, sink)
        finally:
            signal.signal(signal.SIGINT, previous_handler)

        if not quiet:
            console.print("")
            console.print(summary.format_summary(), highlight=False)
            if verbose and summary.unmapped_peptides:
                console.print("[bold]Unmapped peptides:[/bold]")
                for peptide_id in summary.unmapped_peptides:
                    console.print(f"  - {peptide_id}", highlight=False)
            console.print("")
            for label, path in (
                ("mapping table", config.output.table),
                ("ePST FASTA", config.output.fasta),
                ("GFF3", config.output.gff3),
            ):
                if path is not None:
                    console.print(f"[green]Wrote {label}:[/green] {path}")

        if summary.cancelled:
            console.print("[yellow]Warning:[/yellow] Run cancelled; outputs are partial")
            raise SystemExit(130)

    except Exception as e:
        console.print(f"[red]Error:[/red] {e}", highlight=False)
        if verbose:
            import traceback
            traceback.print_exc()
        raise SystemExit(1)


# =============================================================================
# tables command
# =============================================================================


@main.command("tables")
@click.option(
    "--code-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="NCBI genetic code file. Bundled tables if omitted.",
)
@click.pass_context
def list_tables(ctx: click.Context, code_file: Optional[Path]) -> None:
    """List the tables in a genetic code file.

    \b
    Example:
        $ pgmap tables --code-file gc.prt
    """
    from pgmap.core.codetable import load_code_tables

    try:
        tables = load_code_tables(code_file)
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}", highlight=False)
        raise SystemExit(1)

    table = Table(title="Genetic Code Tables")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Aliases")
    table.add_column("Start codons")

    for code in tables.values():
        table.add_row(
            str(code.table_id),
            code.name,
            ", ".join(code.aliases),
            ",".join(sorted(code.start_codons)),
        )

    console.print(table)


# =============================================================================
# translate command
# =============================================================================


@main.command("translate")
@click.argument(
    "fasta",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--code-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="NCBI genetic code file. Bundled tables if omitted.",
)
@click.option(
    "--code-name",
    type=str,
    default=None,
    help="Genetic code table name [default: Standard].",
)
@click.option(
    "--frame",
    "frames",
    type=click.Choice(["F1", "F2", "F3", "R1", "R2", "R3"]),
    multiple=True,
    help="Frame(s) to print. Repeat for several; all six if omitted.",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output FASTA [default: stdout].",
)
@click.pass_context
def translate_frames(
    ctx: click.Context,
    fasta: Path,
    code_file: Optional[Path],
    code_name: Optional[str],
    frames: tuple[str, ...],
    output: Optional[Path],
) -> None:
    """Print six-frame translations of every sequence in FASTA.

    Headers are written as ``<sequence id>|<frame>``.

    \b
    Example:
        $ pgmap translate genome.fa --frame F1 --frame R1 -o frames.fa
    """
    from pgmap.core.codetable import DEFAULT_TABLE_NAME, CodonTable, get_code_table
    from pgmap.core.translate import CodonTranslator
    from pgmap.io.fasta import FastaWriter, ReferenceReader

    verbose = ctx.obj.get("verbose", False)
    wanted = set(frames)

    try:
        if code_file is None and code_name is None:
            table = CodonTable.standard()
        else:
            table = get_code_table(code_name or DEFAULT_TABLE_NAME, code_file)
        translator = CodonTranslator(table)

        stream = click.get_text_stream("stdout") if output is None else output
        with ReferenceReader(fasta) as references, FastaWriter(stream) as writer:
            for reference in references:
                for frame, _, protein in translator.iter_frames(reference.sequence):
                    if wanted and frame not in wanted:
                        continue
                    writer.write(f"{reference.seq_id}|{frame}", protein)

    except Exception as e:
        console.print(f"[red]Error:[/red] {e}", highlight=False)
        if verbose:
            import traceback
            traceback.print_exc()
        raise SystemExit(1)

    if output is not None and not ctx.obj.get("quiet", False):
        console.print(f"[green]Wrote translations:[/green] {output}")


if __name__ == "__main__":
    main()
