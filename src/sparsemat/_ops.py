"""Arithmetic on sparse matrices.

This module provides operations built only on element reads and
row/column extraction, so they behave the same in every storage state
and order:

- Matrix-vector product (dense vector in, dense vector out)
- Matrix-matrix product (sparse result, uncompressed)
- One, infinity and Frobenius norms

Per-row, per-column and per-cell work is independent and can be spread
over threads with ``execution='parallel'``; results are identical.

Example:
    >>> from sparsemat import Matrix, matvec, norm
    >>> m = Matrix.from_dense([[0, 2], [3, 0]], dtype=float)
    >>> matvec(m, [1, 1])
    array([2., 3.])
    >>> norm(m, 'one')
    3.0
"""

import math
from typing import Any, Callable, Dict, Optional, Sequence, Tuple, Union

import numpy as np

from ._error import DimensionMismatchError
from ._execution import map_units
from ._matrix import Matrix
from ._types import ExecutionPolicy, NormType, StorageOrder

__all__ = [
    'matvec',
    'matmul',
    'norm',
    'norm_one',
    'norm_infinity',
    'norm_frobenius',
    'intersect_sorted',
]

Execution = Optional[Union[ExecutionPolicy, str]]


# =============================================================================
# Lazy Imports (avoid strong scipy dependency)
# =============================================================================

def _import_scipy_sparse():
    """Lazy import of scipy.sparse (only when needed)."""
    try:
        import scipy.sparse
        return scipy.sparse
    except ImportError as e:
        raise ImportError(
            "scipy is required for SciPy integration. "
            "Install with: pip install scipy"
        ) from e


# =============================================================================
# Matrix-Vector Product
# =============================================================================

def matvec(mat: Matrix, vec: Sequence[Any], execution: Execution = None) -> np.ndarray:
    """Product of ``mat`` (m x n) with a dense vector of length n.

    Row-major matrices compute one inner product per row. Column-major
    matrices scatter each column's contribution into the result.

    Args:
        mat: Sparse matrix.
        vec: Dense vector (list or 1D array).
        execution: Execution policy.

    Returns:
        Dense vector of length m.

    Raises:
        DimensionMismatchError: ``len(vec) != mat.cols``.
    """
    v = np.asarray(vec)
    if v.ndim != 1 or v.shape[0] != mat.cols:
        raise DimensionMismatchError(
            f"Cannot multiply {mat.rows}x{mat.cols} matrix by vector of shape {v.shape}"
        )
    out_dtype = np.result_type(mat.dtype, v.dtype)

    if mat.order is StorageOrder.ROW_MAJOR:
        def row_product(i: int):
            idx, vals = mat.get_row(i)
            return np.dot(vals, v[idx]) if idx.size else out_dtype.type(0)

        return np.array(map_units(row_product, range(mat.rows), execution), dtype=out_dtype)

    result = np.zeros(mat.rows, dtype=out_dtype)
    columns = map_units(mat.get_col, range(mat.cols), execution)
    for j, (idx, vals) in enumerate(columns):
        if idx.size:
            result[idx] += vals * v[j]
    return result


# =============================================================================
# Matrix-Matrix Product
# =============================================================================

def intersect_sorted(a: np.ndarray, b: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Positions of the common values of two ascending, duplicate-free arrays.

    Returns:
        (pos_a, pos_b) such that ``a[pos_a] == b[pos_b]``.
    """
    _, pos_a, pos_b = np.intersect1d(a, b, assume_unique=True, return_indices=True)
    return pos_a, pos_b


def matmul(left: Matrix, right: Matrix, execution: Execution = None) -> Matrix:
    """Product of two sparse matrices.

    Cell (i, j) is the sum of ``row_i[k] * col_j[k]`` over the indices k
    shared by row i of ``left`` and column j of ``right``. Cells with no
    shared index are never written, so the result stays sparse. A
    single-column ``right`` goes through ``matvec``, so its result matches
    the matrix-vector product element for element.

    Args:
        left: m x k matrix; its storage order is used for the result.
        right: k x n matrix, any storage order.
        execution: Execution policy.

    Returns:
        Uncompressed m x n matrix.

    Raises:
        DimensionMismatchError: ``left.cols != right.rows``.
    """
    if left.cols != right.rows:
        raise DimensionMismatchError(
            f"Cannot multiply {left.rows}x{left.cols} by {right.rows}x{right.cols}"
        )
    out_dtype = np.result_type(left.dtype, right.dtype)
    result = Matrix(left.rows, right.cols, order=left.order, dtype=out_dtype)

    if right.cols == 1:
        return _matmul_column(left, right, result, execution)

    rows = map_units(left.get_row, range(left.rows), execution)
    cols = map_units(right.get_col, range(right.cols), execution)
    cells = [(i, j) for i in range(left.rows) if rows[i][0].size
             for j in range(right.cols) if cols[j][0].size]

    def cell_product(cell: Tuple[int, int]):
        i, j = cell
        row_idx, row_vals = rows[i]
        col_idx, col_vals = cols[j]
        pos_r, pos_c = intersect_sorted(row_idx, col_idx)
        if pos_r.size == 0:
            return None
        return np.dot(row_vals[pos_r], col_vals[pos_c])

    for (i, j), value in zip(cells, map_units(cell_product, cells, execution)):
        if value is not None:
            result.write(i, j, value)
    return result


def _matmul_column(left: Matrix, right: Matrix, result: Matrix, execution: Execution) -> Matrix:
    """Single-column product, summed exactly as ``matvec`` sums it."""
    col_idx, col_vals = right.get_col(0)
    if col_idx.size == 0:
        return result

    dense = np.zeros(right.rows, dtype=right.dtype)
    dense[col_idx] = col_vals
    product = matvec(left, dense, execution)

    # rows sharing no index with the column sum to zero and stay unwritten
    for i in np.flatnonzero(product).tolist():
        result.write(i, 0, product[i])
    return result


# =============================================================================
# Norms
# =============================================================================

def _max_line_sum(
    extract: Callable[[int], Tuple[np.ndarray, np.ndarray]],
    count: int,
    execution: Execution,
) -> float:
    sums = map_units(lambda k: float(np.sum(np.abs(extract(k)[1]))), range(count), execution)
    return max(sums, default=0.0)


def norm_one(mat: Matrix, execution: Execution = None) -> float:
    """Maximum absolute column sum."""
    if mat.rows == 0 and mat.cols == 0:
        return 0.0
    return _max_line_sum(mat.get_col, mat.cols, execution)


def norm_infinity(mat: Matrix, execution: Execution = None) -> float:
    """Maximum absolute row sum."""
    if mat.rows == 0 and mat.cols == 0:
        return 0.0
    return _max_line_sum(mat.get_row, mat.rows, execution)


def norm_frobenius(mat: Matrix, execution: Execution = None) -> float:
    """Square root of the sum of squared absolute values."""
    if mat.rows == 0 and mat.cols == 0:
        return 0.0
    magnitudes = np.abs(mat._stored_values()).astype(np.float64)
    return math.sqrt(float(np.sum(magnitudes * magnitudes)))


_NORMS: Dict[NormType, Callable[..., float]] = {
    NormType.ONE: norm_one,
    NormType.INFINITY: norm_infinity,
    NormType.FROBENIUS: norm_frobenius,
}


def norm(
    mat: Matrix,
    kind: Union[NormType, str] = NormType.FROBENIUS,
    execution: Execution = None,
) -> float:
    """Matrix norm.

    Args:
        mat: Sparse matrix.
        kind: NormType or its name ('one', 'infinity'/'inf', 'frobenius'/'fro').
        execution: Execution policy for the per-line sums.

    Returns:
        Non-negative float, also for complex matrices. 0.0 for a 0x0 matrix.
    """
    return _NORMS[NormType.parse(kind)](mat, execution=execution)
