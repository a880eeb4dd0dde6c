"""Package data files for pgmap.

This package contains data files used by pgmap, including:
- genetic_code_table.prt: NCBI genetic code tables in gc.prt format
"""

from importlib import resources
from pathlib import Path

GENETIC_CODE_FILENAME = "genetic_code_table.prt"


def get_data_path(filename: str) -> Path:
    """Get the path to a data file.

    Args:
        filename: Name of the data file.

    Returns:
        Path to the data file.
    """
    return resources.files(__name__).joinpath(filename)


def read_genetic_code_text() -> str:
    """Read the bundled genetic code tables.

    Returns:
        Contents of the bundled gc.prt file.
    """
    data_path = get_data_path(GENETIC_CODE_FILENAME)
    with resources.as_file(data_path) as path:
        with open(path) as f:
            return f.read()


__all__ = ["GENETIC_CODE_FILENAME", "get_data_path", "read_genetic_code_text"]
