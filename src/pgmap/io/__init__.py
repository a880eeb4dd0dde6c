"""Input/output handlers for pgmap.

This module provides readers and writers for the file formats used in
peptide mapping:

- Peptides: FASTA or tab-delimited peptide lists
- FASTA: Reference genomes (pyfaidx) and ePST output
- Splice sites: motif files and GeneSplicer predictions
- GFF3 and tab-delimited mapping output

Example:
    >>> from pgmap.io import read_peptides, ReferenceReader, MappingOutput
    >>> peptides = read_peptides("peptides.fa")
"""

from pgmap.io.fasta import FastaWriter, ReferenceReader, read_references
from pgmap.io.gff import GFF3Writer
from pgmap.io.output import MappingOutput
from pgmap.io.peptides import read_peptides
from pgmap.io.splice_sites import SpliceEvidence, read_genesplicer
from pgmap.io.tabular import TABLE_COLUMNS, MappingTableWriter

__all__: list[str] = [
    "FastaWriter",
    "GFF3Writer",
    "MappingOutput",
    "MappingTableWriter",
    "ReferenceReader",
    "SpliceEvidence",
    "TABLE_COLUMNS",
    "read_genesplicer",
    "read_peptides",
    "read_references",
]
