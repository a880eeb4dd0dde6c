"""Pytest configuration and shared fixtures for pgmap tests.

This module contains fixtures that are shared across multiple test modules.
Fixtures are organized by category:

- Sequence fixtures: The reference fixture and its strand/frame variants
- Model fixtures: Codon tables, translators and peptides
- File fixtures: Synthetic FASTA, peptide and motif files under tmp_path
"""

from pathlib import Path
from typing import Callable

import attrs
import numpy as np
import pytest

from pgmap.core.codetable import CodonTable
from pgmap.core.models import MappingRecord, Peptide
from pgmap.core.translate import CodonTranslator


# =============================================================================
# Sequence Fixtures
# =============================================================================

# Encodes *IE*RVTMNSAVANGERE*SRY in F1; VANG sits at residues 11-14.
FIXTURE_REFERENCE = "TAGATTGAATGAAGGGTGACGATGAATTCGGCCGTGGCGAACGGCGAACGGGAATGATCTAGGTAT"

# Reverse complement of FIXTURE_REFERENCE; its R1 frame reads the same codons.
FIXTURE_REVERSE = "ATACCTAGATCATTCCCGTTCGCCGTTCGCCACGGCCGAATTCATCGTCACCCTTCATTCAATCTA"

FIXTURE_RTP = "GTGGCGAACGGC"
FIXTURE_EPST = "ATGAATTCGGCCGTGGCGAACGGCGAACGGGAATGA"


@pytest.fixture
def fixture_reference() -> str:
    """Reference with a single VANG occurrence in F1."""
    return FIXTURE_REFERENCE


@pytest.fixture
def fixture_reverse() -> str:
    """Reference with a single VANG occurrence in R1."""
    return FIXTURE_REVERSE


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def standard_table() -> CodonTable:
    """Standard code with ATG as the only start codon."""
    return CodonTable.standard()


@pytest.fixture
def translator(standard_table: CodonTable) -> CodonTranslator:
    return CodonTranslator(standard_table)


@pytest.fixture
def vang_peptide() -> Peptide:
    return Peptide("pep1", "VANG", probability=0.95, count=3)


# =============================================================================
# File Fixtures
# =============================================================================


@pytest.fixture
def write_fasta(tmp_path: Path) -> Callable[..., Path]:
    """Return a helper that writes {header: sequence} to a FASTA file."""

    def _write(records: dict[str, str], name: str = "sequences.fa", width: int = 60) -> Path:
        path = tmp_path / name
        with open(path, "w") as f:
            for header, sequence in records.items():
                f.write(f">{header}\n")
                for i in range(0, len(sequence), width):
                    f.write(sequence[i : i + width] + "\n")
        return path

    return _write


@pytest.fixture
def reference_fasta(write_fasta: Callable[..., Path]) -> Path:
    """Two-record reference: VANG on the forward strand, then the reverse."""
    return write_fasta(
        {"fwd": FIXTURE_REFERENCE, "rev": FIXTURE_REVERSE},
        name="reference.fa",
    )


@pytest.fixture
def synthetic_genome(write_fasta: Callable[..., Path]) -> Path:
    """Create a random genome with three scaffolds.

    Scaffold sizes are 1000, 500 and 250 bp; the fixture reference is
    appended to the end of chr2 so at least one VANG match exists.
    """
    rng = np.random.default_rng(42)

    sequences = {
        "chr1": "".join(rng.choice(list("ACGT"), 1000)),
        "chr2": "".join(rng.choice(list("ACGT"), 500)) + FIXTURE_REFERENCE,
        "chr3": "".join(rng.choice(list("ACGT"), 250)),
    }
    return write_fasta(sequences, name="genome.fa", width=80)


@pytest.fixture
def peptide_fasta(tmp_path: Path) -> Path:
    """Peptide FASTA with a multi-line record and a blank line."""
    path = tmp_path / "peptides.fa"
    path.write_text(
        ">pep1\n"
        "VANG\n"
        "\n"
        ">pep2 second peptide\n"
        "nse\n"
        "re\n"
        ">pep3\n"
        "WWWWWW\n"
    )
    return path


@pytest.fixture
def tabbed_peptides(tmp_path: Path) -> Path:
    """Tab-delimited peptide list (sequence, probability, count)."""
    path = tmp_path / "peptides.tsv"
    path.write_text("VANG\t0.95\t3\n\nmnsa\t0.5\t1\n")
    return path


# =============================================================================
# Record Fixtures
# =============================================================================


@pytest.fixture
def forward_record() -> MappingRecord:
    """The VANG mapping on the forward fixture (F1)."""
    return MappingRecord(
        peptide_id="pep1",
        peptide_sequence="VANG",
        genome_id="fwd",
        start=34,
        end=45,
        strand="+",
        frame="F1",
        rtp=FIXTURE_RTP,
        epst_start=22,
        epst_end=57,
        epst=FIXTURE_EPST,
        epst_length=35,
        translated_epst="MNSAVANGERE*",
        start_codon="ATG",
        probability=0.95,
        count=3,
    )


@pytest.fixture
def reverse_record(forward_record: MappingRecord) -> MappingRecord:
    """The VANG mapping on the reverse fixture (R1)."""
    return attrs.evolve(
        forward_record,
        genome_id="rev",
        start=34,
        end=21,
        strand="-",
        frame="R1",
        epst_start=46,
        epst_end=11,
    )
