"""Core mapping logic for pgmap.

This module contains the algorithms and data structures that place
peptides on a genome:

- Codon tables and the NCBI genetic-code parser
- Six-frame translation
- Multi-pattern (Aho-Corasick) peptide search
- ePST boundary extension policies
- Genomic scanning and coordinate conversion

The pipeline lives in ``pgmap.core.pipeline`` and is imported from there.

Example:
    >>> from pgmap.core import CodonTranslator, PatternAutomaton
    >>> automaton = PatternAutomaton(["VANG"])
"""

from pgmap.core.automaton import PatternAutomaton
from pgmap.core.boundaries import (
    EpstBounds,
    EukaryoteExtender,
    ExtensionMode,
    FixedWindowExtender,
    ProkaryoteExtender,
    SpliceEvidenceExtender,
    create_extender,
)
from pgmap.core.codetable import CodonTable, get_code_table, load_code_tables
from pgmap.core.models import MappingRecord, Peptide, ReferenceSequence
from pgmap.core.scanner import GenomicScanner
from pgmap.core.translate import FRAMES, CodonTranslator

__all__: list[str] = [
    # Translation
    "CodonTable",
    "CodonTranslator",
    "FRAMES",
    "get_code_table",
    "load_code_tables",
    # Search
    "PatternAutomaton",
    "GenomicScanner",
    # Extension
    "EpstBounds",
    "EukaryoteExtender",
    "ExtensionMode",
    "FixedWindowExtender",
    "ProkaryoteExtender",
    "SpliceEvidenceExtender",
    "create_extender",
    # Models
    "MappingRecord",
    "Peptide",
    "ReferenceSequence",
]
