"""
Error handling for sparsemat.

Every exception carries a numeric code and a message. Precondition
violations (bad indices, mismatched shapes) and malformed input raise;
a structural write while compressed is not an exception, see
``Matrix.write``.
"""

from __future__ import annotations

from typing import Optional


# =============================================================================
# Error Codes
# =============================================================================

SPARSEMAT_OK = 0

# Argument errors (10-19)
SPARSEMAT_ERROR_INVALID_ARGUMENT = 10
SPARSEMAT_ERROR_DIMENSION_MISMATCH = 11
SPARSEMAT_ERROR_INDEX_OUT_OF_BOUNDS = 14

# Type errors (20-29)
SPARSEMAT_ERROR_TYPE_ERROR = 20

# I/O errors (30-39)
SPARSEMAT_ERROR_FORMAT_ERROR = 33


_ERROR_MESSAGES = {
    SPARSEMAT_OK: "Success",
    SPARSEMAT_ERROR_INVALID_ARGUMENT: "Invalid argument",
    SPARSEMAT_ERROR_DIMENSION_MISMATCH: "Dimension mismatch",
    SPARSEMAT_ERROR_INDEX_OUT_OF_BOUNDS: "Index out of bounds",
    SPARSEMAT_ERROR_TYPE_ERROR: "Type error",
    SPARSEMAT_ERROR_FORMAT_ERROR: "Malformed coordinate file",
}


# =============================================================================
# Exception Classes
# =============================================================================

class SparseMatError(Exception):
    """
    Base exception for all sparsemat errors.
    """

    OK = SPARSEMAT_OK
    ERROR_INVALID_ARGUMENT = SPARSEMAT_ERROR_INVALID_ARGUMENT
    ERROR_DIMENSION_MISMATCH = SPARSEMAT_ERROR_DIMENSION_MISMATCH
    ERROR_INDEX_OUT_OF_BOUNDS = SPARSEMAT_ERROR_INDEX_OUT_OF_BOUNDS
    ERROR_TYPE_ERROR = SPARSEMAT_ERROR_TYPE_ERROR
    ERROR_FORMAT_ERROR = SPARSEMAT_ERROR_FORMAT_ERROR

    default_code = SPARSEMAT_ERROR_INVALID_ARGUMENT

    def __init__(self, message: Optional[str] = None, code: Optional[int] = None):
        """
        Create a sparsemat exception.

        Args:
            message: Detailed message (falls back to the code's description)
            code: Error code (falls back to the class default)
        """
        if code is None:
            code = self.default_code
        self.code = code
        if message is None:
            message = _ERROR_MESSAGES.get(code, f"Unknown error (code={code})")
        self.message = message
        super().__init__(f"sparsemat error {code}: {message}")

    @classmethod
    def from_code(cls, code: int, context: str = "") -> "SparseMatError":
        """Create exception from error code with optional context."""
        base_msg = _ERROR_MESSAGES.get(code, "Unknown error")
        msg = f"{context}: {base_msg}" if context else base_msg
        return cls(msg, code)


class InvalidArgumentError(SparseMatError, ValueError):
    """Argument outside its valid domain (negative extents, worker counts)."""
    default_code = SPARSEMAT_ERROR_INVALID_ARGUMENT


class IndexOutOfBoundsError(SparseMatError, IndexError):
    """Row or column index outside the matrix extents."""
    default_code = SPARSEMAT_ERROR_INDEX_OUT_OF_BOUNDS


class DimensionMismatchError(SparseMatError, ValueError):
    """Operand extents incompatible with the requested operation."""
    default_code = SPARSEMAT_ERROR_DIMENSION_MISMATCH


class UnsupportedDTypeError(SparseMatError, TypeError):
    """Element type without a zero or an absolute value."""
    default_code = SPARSEMAT_ERROR_TYPE_ERROR


class MatrixFormatError(SparseMatError, ValueError):
    """Malformed coordinate-list input."""
    default_code = SPARSEMAT_ERROR_FORMAT_ERROR

    def __init__(self, message: Optional[str] = None, lineno: Optional[int] = None):
        self.lineno = lineno
        if message is not None and lineno is not None:
            message = f"line {lineno}: {message}"
        super().__init__(message)


# =============================================================================
# Precondition helpers
# =============================================================================

def check_index(index: int, extent: int, axis: str) -> int:
    """Return ``index`` as int, raising if it is outside ``[0, extent)``."""
    i = int(index)
    if i < 0 or i >= extent:
        raise IndexOutOfBoundsError(
            f"{axis} index {index} out of range for extent {extent}"
        )
    return i
