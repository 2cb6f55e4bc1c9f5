"""
Coordinate-list I/O.

Reads the coordinate (Matrix Market style) text format:

    %%MatrixMarket matrix coordinate real general
    % comments
    rows cols nnz
    row col value        (1-based, one line per entry)
    ...

and renders matrices as text.

Complex matrices accept either one value token (``1+2j``) or two
(``1 2``, real and imaginary parts, as in Matrix Market ``complex`` files).

Integer matrices require integer value tokens: ``5`` is read, while ``5.0``
is rejected with MatrixFormatError rather than truncated.
"""

import logging
from pathlib import Path
from typing import Any, Iterable, Optional, TextIO, Tuple, Union

import numpy as np

from ._error import MatrixFormatError
from ._matrix import Matrix
from ._types import StorageOrder

__all__ = [
    'load_coordinate',
    'read_coordinate',
    'render',
]

logger = logging.getLogger("sparsemat.io")

Source = Union[str, Path, TextIO]


# =============================================================================
# Parsing
# =============================================================================

def _parse_int(token: str, what: str, lineno: int) -> int:
    try:
        return int(token)
    except ValueError as e:
        raise MatrixFormatError(f"invalid {what} {token!r}", lineno) from e


def _parse_header(line: str, lineno: int) -> Tuple[int, int, int]:
    parts = line.split()
    if len(parts) < 3:
        raise MatrixFormatError(
            f"expected 'rows cols nnz', got {line.strip()!r}", lineno
        )
    rows = _parse_int(parts[0], "row count", lineno)
    cols = _parse_int(parts[1], "column count", lineno)
    nnz = _parse_int(parts[2], "non-zero count", lineno)
    if rows <= 0 or cols <= 0 or nnz < 0:
        raise MatrixFormatError(
            f"dimensions must be positive and nnz non-negative, "
            f"got {rows} {cols} {nnz}", lineno
        )
    return rows, cols, nnz


def _parse_value(tokens: list, dtype: np.dtype, lineno: int) -> Any:
    try:
        if dtype.kind == 'c':
            if len(tokens) >= 2:
                return dtype.type(complex(float(tokens[0]), float(tokens[1])))
            return dtype.type(complex(tokens[0]))
        return dtype.type(tokens[0])
    except (ValueError, OverflowError) as e:
        raise MatrixFormatError(
            f"invalid {dtype} value {' '.join(tokens)!r}", lineno
        ) from e


def _load_lines(matrix: Matrix, lines: Iterable[str]) -> None:
    header = None
    count = 0

    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line:
            continue
        if header is None:
            if line.startswith('%'):
                continue
            header = _parse_header(line, lineno)
            rows, cols, _ = header
            # stored entries are written while uncompressed
            matrix.uncompress()
            matrix.resize(rows, cols)
            continue

        parts = line.split()
        if len(parts) < 3:
            raise MatrixFormatError(
                f"expected 'row col value', got {line!r}", lineno
            )
        i = _parse_int(parts[0], "row index", lineno)
        j = _parse_int(parts[1], "column index", lineno)
        if not (1 <= i <= matrix.rows and 1 <= j <= matrix.cols):
            raise MatrixFormatError(
                f"entry ({i}, {j}) outside a {matrix.rows}x{matrix.cols} matrix", lineno
            )
        matrix.write(i - 1, j - 1, _parse_value(parts[2:], matrix.dtype, lineno))
        count += 1

    if header is None:
        raise MatrixFormatError("missing 'rows cols nnz' header")
    declared = header[2]
    if count != declared:
        raise MatrixFormatError(
            f"header declares {declared} entries but {count} were read"
        )


def load_coordinate(matrix: Matrix, source: Source) -> Matrix:
    """Fill ``matrix`` from a coordinate-list file or stream.

    The matrix is switched to the uncompressed state and resized to the
    header extents; its previous content is discarded. After a failure its
    content is unspecified.

    Args:
        matrix: Target matrix (its order and dtype are kept).
        source: Path or open text stream.

    Returns:
        ``matrix``.

    Raises:
        MatrixFormatError: Bad header, out-of-range entry, bad value or an
            entry count different from the header's.
        OSError: The file cannot be opened.
    """
    if hasattr(source, 'read'):
        _load_lines(matrix, source)
        name = getattr(source, 'name', '<stream>')
    else:
        path = Path(source)
        with path.open('r', encoding='utf-8') as f:
            _load_lines(matrix, f)
        name = str(path)

    logger.info(f"Read {matrix.rows}x{matrix.cols} matrix with nnz={matrix.nnz} from {name}")
    return matrix


def read_coordinate(
    source: Source,
    dtype=None,
    order: Optional[Union[StorageOrder, str]] = None,
) -> Matrix:
    """Read a coordinate-list file into a new uncompressed matrix.

    Args:
        source: Path or open text stream.
        dtype: Element dtype; None uses the configured default.
        order: Storage order; None uses the configured default.
    """
    return load_coordinate(Matrix(order=order, dtype=dtype), source)


# =============================================================================
# Rendering
# =============================================================================

def render(matrix: Matrix) -> str:
    """Text form of ``matrix``.

    Uncompressed: dense grid, one row per line.
    Compressed: the values, offsets and indices arrays, one item per line.
    """
    out = []
    if not matrix.compressed:
        for i in range(matrix.rows):
            out.append(' '.join(str(matrix.read(i, j)) for j in range(matrix.cols)))
        return '\n'.join(out)

    out.append("Values:")
    out.extend(str(v) for v in matrix.values)
    out.append("Offsets:")
    out.extend(str(int(k)) for k in matrix.indptr)
    out.append("Indices:")
    out.extend(str(int(k)) for k in matrix.indices)
    return '\n'.join(out)
