"""Genetic code tables.

This module reads the NCBI genetic code distribution (``gc.prt``), an
ASN.1-style text file holding one block per translation table::

    Genetic-code-table ::= {
     {
      name "Standard" ,
      name "SGC0" ,
      id 1 ,
      ncbieaa  "FFLLSSSSYY**CC*WLLLL...",
      sncbieaa "---M------**--*----M..."
      -- Base1  TTTTTTTTTTTTTTTTCCCC...
      -- Base2  TTTTCCCCAAAAGGGGTTTT...
      -- Base3  TCAGTCAGTCAGTCAGTCAG...
     },
     ...
    }

Each column of the ``Base1``/``Base2``/``Base3`` rows spells a codon;
``ncbieaa`` gives the residue that codon encodes and ``sncbieaa`` marks
the codons usable as initiators with ``M``.

Example:
    >>> from pgmap.core.codetable import get_code_table
    >>> table = get_code_table("Vertebrate Mitochondrial")
    >>> table.translate("AGA")
    '*'
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Iterator, NamedTuple

import attrs

from pgmap.errors import MalformedInputError, MissingResourceError

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

DEFAULT_TABLE_NAME = "Standard"

# Codon order used by every NCBI table
NCBI_BASE1 = "TTTTTTTTTTTTTTTTCCCCCCCCCCCCCCCCAAAAAAAAAAAAAAAAGGGGGGGGGGGGGGGG"
NCBI_BASE2 = "TTTTCCCCAAAAGGGGTTTTCCCCAAAAGGGGTTTTCCCCAAAAGGGGTTTTCCCCAAAAGGGG"
NCBI_BASE3 = "TCAGTCAGTCAGTCAGTCAGTCAGTCAGTCAGTCAGTCAGTCAGTCAGTCAGTCAGTCAGTCAG"

STANDARD_NCBIEAA = "FFLLSSSSYY**CC*WLLLLPPPPHHQQRRRRIIIMTTTTNNKKSSRRVVVVAAAADDEEGGGG"

# Initiator/terminator sets used when no table file is given
DEFAULT_START_CODONS = frozenset({"ATG"})
DEFAULT_STOP_CODONS = frozenset({"TAA", "TAG", "TGA"})

_TOKEN_PATTERN = re.compile(
    r"""
    (?P<string>"[^"]*")
    |(?P<integer>\d+)
    |(?P<control>[:={},\-])
    |(?P<token>[^\s:={},\-"\d][^\s:={},\-"]*)
    |(?P<space>\s+)
    |(?P<error>.)
    """,
    re.VERBOSE,
)


# =============================================================================
# Data Structures
# =============================================================================


class Token(NamedTuple):
    """A lexical token from a genetic code file.

    Attributes:
        kind: One of "string", "integer", "control", "token".
        value: Token text (quotes stripped for strings).
        line: 1-based line the token starts on.
    """

    kind: str
    value: str
    line: int


@attrs.define(frozen=True)
class CodonTable:
    """A translation table mapping codons to residues.

    Attributes:
        name: Primary table name (first ``name`` entry in the file).
        table_id: NCBI numeric identifier.
        codons: Codon to one-letter residue mapping.
        start_codons: Codons accepted as translation starts.
        stop_codons: Codons that terminate translation.
        aliases: Any additional names listed for the table.
    """

    name: str
    table_id: int
    codons: dict[str, str] = attrs.field(repr=False)
    start_codons: frozenset[str] = attrs.field(converter=frozenset)
    stop_codons: frozenset[str] = attrs.field(converter=frozenset)
    aliases: tuple[str, ...] = attrs.field(default=(), converter=tuple)

    @classmethod
    def from_ncbi_strings(
        cls,
        name: str,
        table_id: int,
        ncbieaa: str,
        sncbieaa: str,
        base1: str = NCBI_BASE1,
        base2: str = NCBI_BASE2,
        base3: str = NCBI_BASE3,
        aliases: Iterable[str] = (),
    ) -> CodonTable:
        """Build a table from the column strings of a ``gc.prt`` entry.

        Args:
            name: Primary table name.
            table_id: NCBI table number.
            ncbieaa: Residue for each codon column.
            sncbieaa: Initiator marks (``M``) for each codon column.
            base1: First codon base for each column.
            base2: Second codon base for each column.
            base3: Third codon base for each column.
            aliases: Alternative names.

        Returns:
            The assembled CodonTable.

        Raises:
            ValueError: If the column strings differ in length.
        """
        lengths = {len(ncbieaa), len(sncbieaa), len(base1), len(base2), len(base3)}
        if len(lengths) != 1:
            raise ValueError(
                f"Code table '{name}' has columns of unequal length: {sorted(lengths)}"
            )

        codons: dict[str, str] = {}
        starts: set[str] = set()
        stops: set[str] = set()

        for b1, b2, b3, residue, initiator in zip(base1, base2, base3, ncbieaa, sncbieaa):
            codon = (b1 + b2 + b3).upper()
            codons[codon] = residue
            if initiator == "M":
                starts.add(codon)
            if residue == "*":
                stops.add(codon)

        return cls(
            name=name,
            table_id=table_id,
            codons=codons,
            start_codons=starts,
            stop_codons=stops,
            aliases=aliases,
        )

    @classmethod
    def standard(cls) -> CodonTable:
        """Standard code with ATG as the only start codon."""
        table = cls.from_ncbi_strings(
            name=DEFAULT_TABLE_NAME,
            table_id=1,
            ncbieaa=STANDARD_NCBIEAA,
            sncbieaa="-" * len(STANDARD_NCBIEAA),
            aliases=("SGC0",),
        )
        return table.with_codon_sets(DEFAULT_START_CODONS, DEFAULT_STOP_CODONS)

    def with_codon_sets(
        self,
        start_codons: Iterable[str] | None = None,
        stop_codons: Iterable[str] | None = None,
    ) -> CodonTable:
        """Return a copy with replaced start and/or stop codon sets."""
        changes: dict[str, frozenset[str]] = {}
        if start_codons is not None:
            changes["start_codons"] = frozenset(c.upper() for c in start_codons)
        if stop_codons is not None:
            changes["stop_codons"] = frozenset(c.upper() for c in stop_codons)
        return attrs.evolve(self, **changes)

    def translate(self, codon: str) -> str:
        """Residue for a codon, or ``X`` if the codon is not in the table."""
        return self.codons.get(codon, "X")

    @property
    def all_names(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)


# =============================================================================
# Tokenizer
# =============================================================================


def tokenize(text: str, source: str = "<string>") -> Iterator[Token]:
    """Split genetic code text into tokens.

    Lines starting with ``--`` in the first column are comments. Indented
    ``-- BaseN`` rows are data and are tokenized normally.

    Args:
        text: Full file contents.
        source: Name used in error messages.

    Yields:
        Tokens in file order.

    Raises:
        MalformedInputError: On a character that starts no token, such as
            an unterminated string.
    """
    for line_number, line in enumerate(text.splitlines(), start=1):
        if line.startswith("--"):
            continue

        for match in _TOKEN_PATTERN.finditer(line):
            kind = match.lastgroup
            value = match.group()

            if kind == "space":
                continue
            if kind == "error":
                raise MalformedInputError(
                    f"Unexpected character {value!r} at column {match.start() + 1}",
                    path=source,
                    line_number=line_number,
                )
            if kind == "string":
                value = value[1:-1]

            yield Token(kind, value, line_number)


# =============================================================================
# Parser
# =============================================================================


class _CodeTableParser:
    """Recursive descent parser over a token list."""

    def __init__(self, tokens: list[Token], source: str) -> None:
        self.tokens = tokens
        self.source = source
        self.pos = 0

    def _peek(self) -> Token | None:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def _error(self, message: str) -> MalformedInputError:
        token = self._peek()
        if token is None:
            line = self.tokens[-1].line if self.tokens else None
            return MalformedInputError(
                f"{message}, found end of file", path=self.source, line_number=line
            )
        return MalformedInputError(
            f"{message}, found {token.value!r}",
            path=self.source,
            line_number=token.line,
        )

    def _expect(self, kind: str, value: str | None = None) -> Token:
        token = self._peek()
        if token is None or token.kind != kind or (value is not None and token.value != value):
            wanted = repr(value) if value is not None else kind
            raise self._error(f"Expected {wanted}")
        self.pos += 1
        return token

    def _accept(self, kind: str, value: str | None = None) -> bool:
        token = self._peek()
        if token is not None and token.kind == kind and (value is None or token.value == value):
            self.pos += 1
            return True
        return False

    def parse(self) -> list[CodonTable]:
        # Header name, e.g. Genetic-code-table
        self._expect("token")
        while self._accept("control", "-"):
            self._expect("token")

        for symbol in (":", ":", "=", "{"):
            self._expect("control", symbol)

        tables = [self._parse_table()]
        while self._accept("control", ","):
            tables.append(self._parse_table())
        self._expect("control", "}")

        if self._peek() is not None:
            raise self._error("Expected end of file")

        return tables

    def _parse_table(self) -> CodonTable:
        self._expect("control", "{")

        names: list[str] = []
        while self._accept("token", "name"):
            names.append(self._expect("string").value)
            self._expect("control", ",")

        self._expect("token", "id")
        id_token = self._expect("integer")
        self._expect("control", ",")

        self._expect("token", "ncbieaa")
        ncbieaa = self._expect("string").value
        self._expect("control", ",")

        self._expect("token", "sncbieaa")
        sncbieaa = self._expect("string").value
        self._accept("control", ",")

        bases = []
        for label in ("Base1", "Base2", "Base3"):
            self._expect("control", "-")
            self._expect("control", "-")
            self._expect("token", label)
            bases.append(self._expect("token").value)

        self._expect("control", "}")

        name = names[0] if names else ""
        try:
            return CodonTable.from_ncbi_strings(
                name=name,
                table_id=int(id_token.value),
                ncbieaa=ncbieaa,
                sncbieaa=sncbieaa,
                base1=bases[0],
                base2=bases[1],
                base3=bases[2],
                aliases=names[1:],
            )
        except ValueError as e:
            raise MalformedInputError(
                str(e), path=self.source, line_number=id_token.line
            ) from e


def parse_code_tables(text: str, source: str = "<string>") -> dict[str, CodonTable]:
    """Parse genetic code text.

    Args:
        text: Contents of a ``gc.prt`` style file.
        source: Name used in error messages.

    Returns:
        Tables keyed by primary name, in file order.

    Raises:
        MalformedInputError: If the text violates the grammar.
    """
    tokens = list(tokenize(text, source))
    if not tokens:
        raise MalformedInputError("No genetic code tables found", path=source)

    tables = _CodeTableParser(tokens, source).parse()
    return {table.name: table for table in tables}


def load_code_tables(path: Path | str | None = None) -> dict[str, CodonTable]:
    """Load every table from a genetic code file.

    Args:
        path: File to read. The bundled NCBI tables are used if None.

    Returns:
        Tables keyed by primary name, in file order.

    Raises:
        MissingResourceError: If the file does not exist.
        MalformedInputError: If the file violates the grammar.
    """
    if path is None:
        from pgmap.data import read_genetic_code_text

        return parse_code_tables(read_genetic_code_text(), source="<bundled>")

    path = Path(path)
    if not path.exists():
        raise MissingResourceError(f"Genetic code file not found: {path}")

    tables = parse_code_tables(path.read_text(), source=str(path))
    logger.debug(f"Loaded {len(tables)} code tables from {path}")
    return tables


def get_code_table(
    name: str = DEFAULT_TABLE_NAME,
    path: Path | str | None = None,
) -> CodonTable:
    """Select one table by name.

    Args:
        name: Primary name of the table. Alternative names are also
            accepted.
        path: Genetic code file; the bundled tables are used if None.

    Returns:
        The matching CodonTable.

    Raises:
        MissingResourceError: If the file is missing or has no such table.
    """
    tables = load_code_tables(path)

    if name in tables:
        return tables[name]

    for table in tables.values():
        if name in table.aliases:
            return table

    available = ", ".join(tables)
    raise MissingResourceError(
        f"Code table '{name}' not found. Available: {available}"
    )
