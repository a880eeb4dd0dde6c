"""pgmap: proteogenomic mapping of peptides onto genomic sequence.

pgmap places identified peptides on a reference genome by searching all
six reading frames at once, then extends each hit to a plausible coding
region (an ePST) using start/stop codons, splice motifs or GeneSplicer
evidence.

Example:
    >>> import pgmap
    >>> pgmap.__version__
    '0.1.0'

Modules:
    core: Translation, peptide search, boundary extension and the pipeline
    io: Readers for peptides, references and motif files; output writers
    parallel: Reference-level parallel scanning
    utils: Logging utilities
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
