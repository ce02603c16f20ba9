"""Exception types for the conversion pipeline.

Each also derives from the builtin the rest of the code base would otherwise
raise, so callers catching ValueError/RuntimeError keep working.
"""


class DocweaveError(Exception):
    """Base class for docweave errors."""


class StructuralAbsenceError(DocweaveError, ValueError):
    """An expected part of the source tree is missing (e.g. the document body)."""


class ConversionError(DocweaveError, RuntimeError):
    """Converting a whole document failed."""


class ExportError(DocweaveError, RuntimeError):
    """An export produced no content."""
