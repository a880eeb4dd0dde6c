"""Configuration management for pgmap.

This module holds the defaults for a mapping run and loads overrides from
a YAML file. Command-line options override file values. A configuration
file looks like::

    mapper:
      code_name: Bacterial, Archaeal and Plant Plastid
      eukaryote: false
      codons: 0
      workers: 4
      backend: processes

    output:
      table: results/mapping.tsv
      fasta: results/epst.fa
      gff3: results/mapping.gff3

Example:
    >>> from pgmap.config import Config
    >>> config = Config.load("pgmap.yaml")
    >>> config.mapper.resolve_mode()
    <ExtensionMode.PROKARYOTE: 'Prokaryote'>
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import attrs
import yaml

from pgmap.core.boundaries import ExtensionMode
from pgmap.errors import MalformedInputError, MissingResourceError

logger = logging.getLogger(__name__)

# =============================================================================
# Default Configuration Values
# =============================================================================

DEFAULT_CODONS = 0
DEFAULT_WORKERS = 1
DEFAULT_BACKEND = "threads"

DEFAULT_TABLE_OUTPUT = "pgmap.out"
DEFAULT_FASTA_OUTPUT = "pgmap.out.fa"
DEFAULT_GFF3_OUTPUT = "pgmap.gff3"

_BACKENDS = ("serial", "threads", "processes")


def _optional_path(value: Any) -> Path | None:
    if value is None or value == "":
        return None
    return Path(value)


# =============================================================================
# Configuration Classes
# =============================================================================


@attrs.define
class MapperConfig:
    """Settings that shape the mapping itself.

    Attributes:
        code_file: NCBI genetic code file (bundled tables if None).
        code_name: Table to select. With neither a file nor a name, the
            standard code with ATG as the only start codon is used.
        start_codons_file: Optional start codon override (one per line).
        stop_codons_file: Optional stop codon override (one per line).
        begin_splice_file: Upstream splice motifs for Eukaryote mode.
        end_splice_file: Downstream splice motifs for Eukaryote mode.
        genesplicer_file: GeneSplicer output; enables GeneSplicer mode
            when the file exists.
        eukaryote: Use splice-aware extension.
        codons: Fixed window size in codons; positive values select
            FixedWindow mode.
        tabbed: Peptides are tab-delimited instead of FASTA.
        workers: Parallel workers for scanning references; 0 uses one
            per CPU.
        backend: Executor backend (serial, threads, processes).
    """

    code_file: Path | None = attrs.field(default=None, converter=_optional_path)
    code_name: str | None = None
    start_codons_file: Path | None = attrs.field(default=None, converter=_optional_path)
    stop_codons_file: Path | None = attrs.field(default=None, converter=_optional_path)
    begin_splice_file: Path | None = attrs.field(default=None, converter=_optional_path)
    end_splice_file: Path | None = attrs.field(default=None, converter=_optional_path)
    genesplicer_file: Path | None = attrs.field(default=None, converter=_optional_path)
    eukaryote: bool = False
    codons: int = attrs.field(default=DEFAULT_CODONS, validator=attrs.validators.ge(0))
    tabbed: bool = False
    workers: int = attrs.field(default=DEFAULT_WORKERS, validator=attrs.validators.ge(0))
    backend: str = attrs.field(
        default=DEFAULT_BACKEND, validator=attrs.validators.in_(_BACKENDS)
    )

    def resolve_mode(self) -> ExtensionMode:
        """Pick the extension policy.

        Precedence: Eukaryote, then FixedWindow (codons > 0), then
        GeneSplicer (evidence file present), then Prokaryote.
        """
        if self.eukaryote:
            return ExtensionMode.EUKARYOTE
        if self.codons > 0:
            return ExtensionMode.FIXED_WINDOW
        if self.genesplicer_file is not None:
            if self.genesplicer_file.exists():
                return ExtensionMode.GENE_SPLICER
            logger.warning(
                f"GeneSplicer file {self.genesplicer_file} not found, ignoring it"
            )
        return ExtensionMode.PROKARYOTE


@attrs.define
class OutputConfig:
    """Output file locations. A None path disables that output.

    Attributes:
        table: Tab-delimited mapping table.
        fasta: ePST FASTA.
        gff3: GFF3 features.
    """

    table: Path | None = attrs.field(
        default=Path(DEFAULT_TABLE_OUTPUT), converter=_optional_path
    )
    fasta: Path | None = attrs.field(
        default=Path(DEFAULT_FASTA_OUTPUT), converter=_optional_path
    )
    gff3: Path | None = attrs.field(
        default=Path(DEFAULT_GFF3_OUTPUT), converter=_optional_path
    )


@attrs.define
class Config:
    """Main configuration container for pgmap.

    Attributes:
        mapper: Mapping settings.
        output: Output locations.
    """

    mapper: MapperConfig = attrs.Factory(MapperConfig)
    output: OutputConfig = attrs.Factory(OutputConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Build a configuration from a nested dictionary.

        Raises:
            ValueError: On unknown sections or keys, or invalid values.
        """
        unknown = set(data) - {"mapper", "output"}
        if unknown:
            raise ValueError(f"Unknown configuration sections: {sorted(unknown)}")

        sections: dict[str, Any] = {}
        for name, section_cls in (("mapper", MapperConfig), ("output", OutputConfig)):
            values = data.get(name, {})
            if not isinstance(values, dict):
                raise ValueError(f"Section '{name}' must be a mapping")
            known = {field.name for field in attrs.fields(section_cls)}
            bad = set(values) - known
            if bad:
                raise ValueError(f"Unknown keys in '{name}': {sorted(bad)}")
            sections[name] = section_cls(**values)

        return cls(**sections)

    @classmethod
    def load(cls, path: Path | str | None = None) -> Config:
        """Load configuration from a YAML file.

        Args:
            path: Path to configuration file. If None, returns default
                configuration.

        Returns:
            Loaded configuration object.

        Raises:
            MissingResourceError: If the configuration file doesn't exist.
            MalformedInputError: If the file is not valid YAML or has
                invalid settings.
        """
        if path is None:
            return cls()

        path = Path(path)
        if not path.exists():
            raise MissingResourceError(f"Configuration file not found: {path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ValueError("top level must be a mapping")
            config = cls.from_dict(data)
        except (yaml.YAMLError, ValueError, TypeError) as e:
            raise MalformedInputError(f"Invalid configuration: {e}", path=str(path)) from e

        logger.debug(f"Loaded configuration from {path}")
        return config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Dictionary representation of configuration, paths as strings.
        """
        return attrs.asdict(
            self,
            value_serializer=lambda _inst, _field, value: (
                str(value) if isinstance(value, Path) else value
            ),
        )

    def with_overrides(
        self,
        mapper: dict[str, Any] | None = None,
        output: dict[str, Any] | None = None,
    ) -> Config:
        """Copy with settings replaced; None values leave a setting alone.

        Args:
            mapper: MapperConfig field overrides.
            output: OutputConfig field overrides.

        Returns:
            A new Config.
        """
        mapper_changes = {k: v for k, v in (mapper or {}).items() if v is not None}
        output_changes = {k: v for k, v in (output or {}).items() if v is not None}
        return attrs.evolve(
            self,
            mapper=attrs.evolve(self.mapper, **mapper_changes),
            output=attrs.evolve(self.output, **output_changes),
        )
