"""Dual-representation sparse matrix.

This module provides Matrix, a sparse matrix that lives in one of two
storage states:

- Uncompressed: an ordered ``(row, col) -> value`` map. Elements can be
  inserted, updated and removed.
- Compressed: CSR (row-major) or CSC (column-major) arrays. The sparsity
  pattern is frozen; only values of stored elements can be updated.

The storage order is fixed when the matrix is created and drives both the
map ordering and the meaning of the compressed arrays.

Terminology:
    line     A row of a row-major matrix, a column of a column-major one.
    native   Access along lines (rows of a row-major matrix).
    cross    Access across lines (columns of a row-major matrix).
    minor    The coordinate of an element inside its line.

Cost of line access:
    ==============  =============================  ===========================
    state           native                         cross
    ==============  =============================  ===========================
    uncompressed    O(log nnz + k) range query     O(nnz) scan of the map
    compressed      O(k) slice copy                O(nnz + k log lines) scan
    ==============  =============================  ===========================

Example:
    >>> m = Matrix(2, 2)
    >>> m[0, 1] = 2.0
    >>> m[1, 0] = 3.0
    >>> m.compress()
    >>> m.get_row(0)
    (array([1]), array([2.]))
"""

import logging
from typing import Any, Iterator, Optional, Tuple, Union

import numpy as np

from ._config import get_config
from ._error import DimensionMismatchError, InvalidArgumentError, check_index
from ._storage import INDEX_DTYPE, CompressedStore, UncompressedStore
from ._types import ExecutionPolicy, NormType, StorageOrder, resolve_dtype

__all__ = ['Matrix']

logger = logging.getLogger("sparsemat.matrix")


class Matrix:
    """Sparse matrix with uncompressed and compressed storage states.

    Attributes:
        shape: Matrix dimensions (rows, cols).
        dtype: Element dtype (integer, floating or complex).
        order: StorageOrder, fixed for the lifetime of the matrix.
        nnz: Number of stored non-zero elements.
        compressed: Current storage state.

    Example:
        >>> m = Matrix(3, 3, order='col', dtype=complex)
        >>> m[2, 0] = 1 + 1j
        >>> m.nnz
        1
    """

    __slots__ = ('_rows', '_cols', '_order', '_dtype', '_zero', '_store')

    # =========================================================================
    # Initialization
    # =========================================================================

    def __init__(
        self,
        rows: int = 0,
        cols: int = 0,
        order: Optional[Union[StorageOrder, str]] = None,
        dtype=None,
        compressed: bool = False,
    ):
        """Create an empty matrix.

        Args:
            rows: Number of rows.
            cols: Number of columns.
            order: Storage order; None uses the configured default.
            dtype: Element dtype; None uses the configured default.
            compressed: Start in the compressed state (empty arrays).
        """
        config = get_config()
        rows, cols = self._validate_extents(rows, cols)
        self._rows = rows
        self._cols = cols
        self._order = config.default_order if order is None else StorageOrder.parse(order)
        self._dtype = config.default_dtype if dtype is None else resolve_dtype(dtype)
        self._zero = self._dtype.type(0)
        if compressed:
            self._store = CompressedStore.empty(self._primary, self._dtype)
        else:
            self._store = UncompressedStore.for_order(self._order)

    @staticmethod
    def _validate_extents(rows: int, cols: int) -> Tuple[int, int]:
        rows, cols = int(rows), int(cols)
        if rows < 0 or cols < 0:
            raise InvalidArgumentError(
                f"Matrix extents must be non-negative, got ({rows}, {cols})"
            )
        return rows, cols

    @classmethod
    def from_dense(
        cls,
        dense: Any,
        order: Optional[Union[StorageOrder, str]] = None,
        dtype=None,
    ) -> 'Matrix':
        """Create an uncompressed matrix from a 2D array-like.

        Args:
            dense: 2D list or numpy array.
            order: Storage order.
            dtype: Element dtype; None keeps the array's numeric dtype.

        Returns:
            Matrix holding the non-zero entries of ``dense``.
        """
        arr = np.asarray(dense)
        if arr.ndim != 2:
            raise DimensionMismatchError(f"Expected a 2D array, got {arr.ndim}D")
        if dtype is None:
            dtype = arr.dtype if arr.size > 0 else get_config().default_dtype
        mat = cls(arr.shape[0], arr.shape[1], order=order, dtype=dtype)
        rows, cols = np.nonzero(arr)
        for i, j in zip(rows.tolist(), cols.tolist()):
            mat.write(i, j, arr[i, j])
        return mat

    @classmethod
    def from_scipy(cls, mat: Any, order: Optional[Union[StorageOrder, str]] = None) -> 'Matrix':
        """Create an uncompressed matrix from a scipy sparse matrix.

        Args:
            mat: Any scipy.sparse matrix or array.
            order: Storage order; None picks column-major for CSC input and
                the configured default otherwise.
        """
        coo = mat.tocoo()
        if order is None and getattr(mat, 'format', None) == 'csc':
            order = StorageOrder.COLUMN_MAJOR
        result = cls(coo.shape[0], coo.shape[1], order=order, dtype=coo.dtype)
        # duplicate entries are summed, as scipy does
        coo.sum_duplicates()
        for i, j, v in zip(coo.row.tolist(), coo.col.tolist(), coo.data):
            result.write(i, j, v)
        return result

    # =========================================================================
    # Storage Core
    # =========================================================================

    @property
    def shape(self) -> Tuple[int, int]:
        """Matrix dimensions (rows, cols)."""
        return (self._rows, self._cols)

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def order(self) -> StorageOrder:
        return self._order

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    @property
    def zero(self) -> Any:
        """Additive identity of the element type."""
        return self._zero

    @property
    def nnz(self) -> int:
        """Number of stored non-zero elements."""
        return len(self._store)

    @property
    def compressed(self) -> bool:
        return isinstance(self._store, CompressedStore)

    @compressed.setter
    def compressed(self, value: bool) -> None:
        if value:
            self.compress()
        else:
            self.uncompress()

    @property
    def ndim(self) -> int:
        return 2

    @property
    def size(self) -> int:
        """Total number of elements (rows * cols)."""
        return self._rows * self._cols

    @property
    def density(self) -> float:
        """Fraction of non-zero elements."""
        total = self.size
        return self.nnz / total if total > 0 else 0.0

    @property
    def _primary(self) -> int:
        """Number of lines."""
        return self._rows if self._order is StorageOrder.ROW_MAJOR else self._cols

    @property
    def values(self) -> np.ndarray:
        """Copy of the compressed values array (empty while uncompressed)."""
        if not self.compressed:
            return np.zeros(0, dtype=self._dtype)
        return self._store.values.copy()

    @property
    def indices(self) -> np.ndarray:
        """Copy of the compressed minor-index array (empty while uncompressed)."""
        if not self.compressed:
            return np.zeros(0, dtype=INDEX_DTYPE)
        return self._store.indices.copy()

    @property
    def indptr(self) -> np.ndarray:
        """Copy of the compressed line-offset array (empty while uncompressed)."""
        if not self.compressed:
            return np.zeros(0, dtype=INDEX_DTYPE)
        return self._store.indptr.copy()

    def clear_buffer(self) -> None:
        """Drop every stored element, keeping extents and state."""
        if self.compressed:
            self._store = CompressedStore.empty(self._primary, self._dtype)
        else:
            self._store.clear()

    def resize(self, rows: int, cols: int) -> None:
        """Change the extents, discarding all content.

        The storage state is unchanged. Invalid extents raise before anything
        is modified.
        """
        rows, cols = self._validate_extents(rows, cols)
        self._rows = rows
        self._cols = cols
        self.clear_buffer()
        logger.debug(f"Resized to {rows}x{cols}")

    def copy(self) -> 'Matrix':
        """Deep copy, in the same state."""
        other = Matrix(self._rows, self._cols, order=self._order, dtype=self._dtype)
        other._store = self._store.copy()
        return other

    # =========================================================================
    # Conversion Engine
    # =========================================================================

    def compress(self) -> None:
        """Switch to the compressed (CSR/CSC) state. No-op if compressed."""
        if self.compressed:
            return

        store = self._store
        nnz = len(store)
        values = np.empty(nnz, dtype=self._dtype)
        indices = np.empty(nnz, dtype=INDEX_DTYPE)
        lines = np.empty(nnz, dtype=INDEX_DTYPE)
        sort_key = store.sort_key

        # map order is storage order
        for pos, (key, value) in enumerate(store.items()):
            line, minor = sort_key(key)
            values[pos] = value
            indices[pos] = minor
            lines[pos] = line

        indptr = np.zeros(self._primary + 1, dtype=INDEX_DTYPE)
        np.cumsum(np.bincount(lines, minlength=self._primary), out=indptr[1:])

        self._store = CompressedStore(values=values, indices=indices, indptr=indptr)
        logger.debug(f"Compressed {self._rows}x{self._cols} matrix, nnz={nnz}")

    def uncompress(self) -> None:
        """Switch to the uncompressed (ordered map) state. No-op if uncompressed."""
        if not self.compressed:
            return

        comp = self._store
        store = UncompressedStore.for_order(self._order)
        row_major = self._order is StorageOrder.ROW_MAJOR
        for line in range(comp.primary):
            start, stop = comp.line_bounds(line)
            if start == stop:
                continue
            for pos in range(start, stop):
                minor = int(comp.indices[pos])
                key = (line, minor) if row_major else (minor, line)
                store.append(key, comp.values[pos])

        self._store = store
        logger.debug(f"Uncompressed {self._rows}x{self._cols} matrix, nnz={len(store)}")

    # =========================================================================
    # Access Layer - presence
    # =========================================================================

    def _is_native(self, axis: int) -> bool:
        """Whether lines along ``axis`` (0 rows, 1 cols) are storage lines."""
        if axis == 0:
            return self._order is StorageOrder.ROW_MAJOR
        return self._order is StorageOrder.COLUMN_MAJOR

    def _check_axis_index(self, axis: int, idx: int) -> int:
        if axis == 0:
            return check_index(idx, self._rows, 'row')
        return check_index(idx, self._cols, 'column')

    def _has_line(self, axis: int, idx: int) -> bool:
        idx = self._check_axis_index(axis, idx)
        store = self._store

        if self.compressed:
            if self._is_native(axis):
                return store.line_length(idx) > 0
            return bool(np.any(store.indices == idx))

        if self._is_native(axis):
            start, stop = store.line_range(idx)
            return stop > start
        return any(key[axis] == idx for key in store.keys())

    def has_row(self, i: int) -> bool:
        """Whether row ``i`` holds at least one non-zero."""
        return self._has_line(0, i)

    def has_col(self, j: int) -> bool:
        """Whether column ``j`` holds at least one non-zero."""
        return self._has_line(1, j)

    def _native_coords(self, i: int, j: int) -> Tuple[int, int]:
        """(line, minor) of element (i, j)."""
        if self._order is StorageOrder.ROW_MAJOR:
            return i, j
        return j, i

    def _locate(self, i: int, j: int) -> Optional[int]:
        """Storage position of (i, j) in the compressed arrays, or None."""
        line, minor = self._native_coords(i, j)
        return self._store.locate(line, minor)

    def contains(self, i: int, j: int) -> bool:
        """Whether element (i, j) is a stored non-zero."""
        i = check_index(i, self._rows, 'row')
        j = check_index(j, self._cols, 'column')
        if not self.has_row(i) or not self.has_col(j):
            return False
        if not self.compressed:
            return (i, j) in self._store
        return self._locate(i, j) is not None

    # =========================================================================
    # Access Layer - read / write
    # =========================================================================

    def read(self, i: int, j: int) -> Any:
        """Value at (i, j), or zero if not stored."""
        i = check_index(i, self._rows, 'row')
        j = check_index(j, self._cols, 'column')
        if not self.compressed:
            return self._store.get((i, j), self._zero)
        pos = self._locate(i, j)
        if pos is None:
            return self._zero
        return self._store.values[pos]

    def write(self, i: int, j: int, value: Any) -> Any:
        """Store ``value`` at (i, j).

        Uncompressed: a zero removes the element, a non-zero inserts or
        overwrites it. Compressed: only stored elements can take a new
        non-zero value; inserting or removing is rejected (logged, matrix
        unchanged) because it would change the sparsity pattern.

        Returns:
            The stored value, or zero if the element is now absent or the
            write was rejected.
        """
        i = check_index(i, self._rows, 'row')
        j = check_index(j, self._cols, 'column')
        value = self._dtype.type(value)
        is_zero = value == self._zero

        if not self.compressed:
            store = self._store
            key = (i, j)
            if is_zero:
                if key in store:
                    del store[key]
                return self._zero
            store[key] = value
            return value

        pos = self._locate(i, j)
        if pos is None or is_zero:
            logger.error(
                f"Cannot add or remove element ({i}, {j}) in compressed state; "
                f"uncompress the matrix first"
            )
            return self._zero
        self._store.values[pos] = value
        return value

    def __getitem__(self, key: Tuple[int, int]) -> Any:
        i, j = key
        return self.read(i, j)

    def __setitem__(self, key: Tuple[int, int], value: Any) -> None:
        i, j = key
        self.write(i, j, value)

    # =========================================================================
    # Access Layer - extraction
    # =========================================================================

    def _extract(self, axis: int, idx: int) -> Tuple[np.ndarray, np.ndarray]:
        """Non-zeros of row (axis 0) or column (axis 1) ``idx``.

        Returns:
            (indices, values): ascending minor indices and matching values.
        """
        idx = self._check_axis_index(axis, idx)
        store = self._store

        if self.compressed:
            if self._is_native(axis):
                start, stop = store.line_bounds(idx)
                return store.indices[start:stop].copy(), store.values[start:stop].copy()
            positions = np.flatnonzero(store.indices == idx)
            lines = store.lines_of(positions).astype(INDEX_DTYPE, copy=False)
            return lines, store.values[positions]

        other = 1 - axis
        if self._is_native(axis):
            start, stop = store.line_range(idx)
            pairs = list(store.slice(start, stop))
        else:
            # map order visits the requested line in ascending minor order
            pairs = [(key, value) for key, value in store.items() if key[axis] == idx]

        indices = np.fromiter((key[other] for key, _ in pairs), dtype=INDEX_DTYPE, count=len(pairs))
        values = np.array([value for _, value in pairs], dtype=self._dtype)
        return indices, values

    def get_row(self, i: int) -> Tuple[np.ndarray, np.ndarray]:
        """Column indices and values of the non-zeros of row ``i``."""
        return self._extract(0, i)

    def get_col(self, j: int) -> Tuple[np.ndarray, np.ndarray]:
        """Row indices and values of the non-zeros of column ``j``."""
        return self._extract(1, j)

    def iter_rows(self) -> Iterator[Tuple[np.ndarray, np.ndarray]]:
        for i in range(self._rows):
            yield self.get_row(i)

    def iter_cols(self) -> Iterator[Tuple[np.ndarray, np.ndarray]]:
        for j in range(self._cols):
            yield self.get_col(j)

    def iter_nonzero(self) -> Iterator[Tuple[int, int, Any]]:
        """Yield ``(row, col, value)`` for every stored element, in storage order."""
        if not self.compressed:
            for (i, j), value in self._store.items():
                yield i, j, value
            return

        comp = self._store
        row_major = self._order is StorageOrder.ROW_MAJOR
        for line in range(comp.primary):
            start, stop = comp.line_bounds(line)
            for pos in range(start, stop):
                minor = int(comp.indices[pos])
                if row_major:
                    yield line, minor, comp.values[pos]
                else:
                    yield minor, line, comp.values[pos]

    def _stored_values(self) -> np.ndarray:
        """All stored values, without coordinates."""
        if self.compressed:
            return self._store.values
        return np.fromiter(self._store.values(), dtype=self._dtype, count=self.nnz)

    # =========================================================================
    # Arithmetic
    # =========================================================================

    def norm(
        self,
        kind: Union[NormType, str] = NormType.FROBENIUS,
        execution: Optional[Union[ExecutionPolicy, str]] = None,
    ) -> float:
        """One, infinity or Frobenius norm. See ``sparsemat.norm``."""
        from ._ops import norm
        return norm(self, kind, execution=execution)

    def __matmul__(self, other: Any) -> Any:
        from ._ops import matmul, matvec
        if isinstance(other, Matrix):
            return matmul(self, other)
        return matvec(self, other)

    def __mul__(self, other: Any) -> Any:
        return self.__matmul__(other)

    # =========================================================================
    # Conversion to other representations
    # =========================================================================

    def to_dense(self) -> np.ndarray:
        """Dense numpy array of the matrix."""
        dense = np.zeros(self.shape, dtype=self._dtype)
        for i, j, value in self.iter_nonzero():
            dense[i, j] = value
        return dense

    def to_scipy(self) -> Any:
        """Convert to ``scipy.sparse.csr_matrix`` (row-major) or ``csc_matrix``."""
        from ._ops import _import_scipy_sparse
        sp = _import_scipy_sparse()
        was_compressed = self.compressed
        source = self if was_compressed else self.copy()
        source.compress()
        comp = source._store
        arrays = (comp.values.copy(), comp.indices.copy(), comp.indptr.copy())
        if self._order is StorageOrder.ROW_MAJOR:
            return sp.csr_matrix(arrays, shape=self.shape)
        return sp.csc_matrix(arrays, shape=self.shape)

    def read_mtx(self, source: Any) -> bool:
        """Fill this matrix from a coordinate-list file. See ``sparsemat.io``."""
        from .io import load_coordinate
        load_coordinate(self, source)
        return True

    # =========================================================================
    # Magic Methods
    # =========================================================================

    def __repr__(self) -> str:
        state = 'compressed' if self.compressed else 'uncompressed'
        return (f"Matrix(shape={self.shape}, nnz={self.nnz}, "
                f"dtype={self._dtype}, order={self._order.value}, {state})")

    def __str__(self) -> str:
        from .io import render
        return render(self)

    def __len__(self) -> int:
        """Return number of rows."""
        return self._rows

    def __bool__(self) -> bool:
        """Return True if the matrix has any non-zero elements."""
        return self.nnz > 0
