"""Custom exception classes for emdunifrac.

This module provides the error taxonomy for a UniFrac run: unrecoverable
input and tree errors that abort the batch, and a warning category for
table taxa that have no tip in the tree.
"""

LOCATION_KEYS = ("file_path", "line")


class EMDUniFracError(Exception):
    """Base exception class for all emdunifrac errors.

    All custom exceptions in this module inherit from this class, allowing
    callers to catch every unrecoverable error with a single exception type.

    Errors about an input file put its path under ``file_path`` in the context
    and, when one is known, the 1-based line number under ``line``; those two
    keys are rendered as a ``path:line:`` prefix, as compilers do.

    Attributes:
        message: The error message describing what went wrong.
        context: Optional dictionary containing additional context about the error,
                 such as the offending node, taxon or counts.
    """

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    @property
    def location(self) -> str | None:
        """``file_path[:line]`` of the offending input, or None if not file-related."""
        file_path = self.context.get("file_path")
        if file_path is None:
            return None
        line = self.context.get("line")
        return f"{file_path}:{line}" if line is not None else str(file_path)

    def __str__(self) -> str:
        """Return the message prefixed with its location and followed by any other context."""
        text = self.message
        if self.location is not None:
            text = f"{self.location}: {text}"
        details = {k: v for k, v in self.context.items() if k not in LOCATION_KEYS}
        if details:
            details_str = ", ".join(f"{k}={v}" for k, v in details.items())
            text = f"{text} ({details_str})"
        return text


class InputFormatError(EMDUniFracError):
    """Raised when an input file is missing, unreadable or malformed.

    Used for a missing header, a line without a taxon token, a row whose
    value count does not match the header, or a file that cannot be opened.

    Example:
        raise InputFormatError(
            "Taxon missing in a line",
            context={"file_path": table_path, "line": 7}
        )
    """
    pass


class TreeStructureError(EMDUniFracError):
    """Raised when the phylogenetic tree cannot be flattened.

    The tree has no resolvable root, a non-root node has no parent, or the
    Newick text could not be parsed into a rooted tree at all.

    Example:
        raise TreeStructureError(
            "Node has no parent but is not root",
            context={"node": node.name}
        )
    """
    pass


class UnmatchedTaxonWarning(UserWarning):
    """Emitted when table taxa have no matching tip in the tree.

    Unmatched taxa are excluded from every pairwise computation; this is
    never an error.
    """
    pass
