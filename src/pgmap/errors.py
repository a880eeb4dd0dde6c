"""Exception types raised by pgmap.

Both classes extend the built-in exception a caller would expect for the
same failure, so ``except ValueError`` / ``except FileNotFoundError`` keep
working for code that does not know about pgmap.
"""

from __future__ import annotations


class MalformedInputError(ValueError):
    """An input file does not follow its expected grammar.

    Attributes:
        path: File being read, if known.
        line_number: 1-based line of the offending content, if known.
    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
        line_number: int | None = None,
    ) -> None:
        self.path = path
        self.line_number = line_number

        location = ""
        if path is not None:
            location = f"{path}"
            if line_number is not None:
                location += f":{line_number}"
            location += ": "

        super().__init__(f"{location}{message}")


class MissingResourceError(FileNotFoundError):
    """A required input (file or named table) could not be found."""
