"""Backing stores of a sparse matrix.

A matrix holds exactly one of the two stores below; which one is the
compression state.

UncompressedStore:
    Ordered map ``(row, col) -> value``. The order is given by a sort-key
    function chosen once per store: identity for row-major, ``(col, row)``
    for column-major. Only non-zero values are stored.

CompressedStore:
    CSR/CSC arrays. ``values[k]`` is the k-th stored value in storage order,
    ``indices[k]`` its minor coordinate (column for row-major, row for
    column-major), ``indptr[l]`` the number of values stored in lines
    ``0..l-1``. Each line's slice of ``indices`` is sorted ascending.
"""

import bisect
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

import numpy as np

from ._types import Key, StorageOrder

__all__ = [
    'UncompressedStore',
    'CompressedStore',
    'row_major_key',
    'column_major_key',
    'sort_key_for',
    'INDEX_DTYPE',
]


INDEX_DTYPE = np.int64


def row_major_key(key: Key) -> Key:
    """Sort key for row-major order: (row, col)."""
    return key


def column_major_key(key: Key) -> Key:
    """Sort key for column-major order: (col, row)."""
    return (key[1], key[0])


def sort_key_for(order: StorageOrder) -> Callable[[Key], Key]:
    if order is StorageOrder.ROW_MAJOR:
        return row_major_key
    return column_major_key


# =============================================================================
# Uncompressed Store
# =============================================================================

class UncompressedStore:
    """Ordered map from ``(row, col)`` keys to values.

    Keys are kept in a list sorted by ``sort_key`` and values in a dict, so
    lookups are O(1) and range queries are two binary searches. Bounds for
    ``lower_bound``/``upper_bound`` are expressed in sort-key space, i.e.
    ``(line, minor)``.
    """

    __slots__ = ('_sort_key', '_keys', '_values')

    def __init__(self, sort_key: Callable[[Key], Key] = row_major_key):
        self._sort_key = sort_key
        self._keys: List[Key] = []
        self._values: Dict[Key, Any] = {}

    @classmethod
    def for_order(cls, order: StorageOrder) -> 'UncompressedStore':
        return cls(sort_key_for(order))

    @property
    def sort_key(self) -> Callable[[Key], Key]:
        return self._sort_key

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: Key) -> bool:
        return key in self._values

    def __getitem__(self, key: Key) -> Any:
        return self._values[key]

    def get(self, key: Key, default: Any = None) -> Any:
        return self._values.get(key, default)

    def __setitem__(self, key: Key, value: Any) -> None:
        if key not in self._values:
            bisect.insort(self._keys, key, key=self._sort_key)
        self._values[key] = value

    def __delitem__(self, key: Key) -> None:
        del self._values[key]
        pos = bisect.bisect_left(self._keys, self._sort_key(key), key=self._sort_key)
        del self._keys[pos]

    def append(self, key: Key, value: Any) -> None:
        """Insert a key that sorts after every stored key.

        Used when rebuilding from compressed arrays, which are already in
        storage order.
        """
        self._keys.append(key)
        self._values[key] = value

    def clear(self) -> None:
        self._keys.clear()
        self._values.clear()

    # -------------------------------------------------------------------------
    # Ordered access
    # -------------------------------------------------------------------------

    def lower_bound(self, bound: Key) -> int:
        """Position of the first key whose sort key is >= ``bound``."""
        return bisect.bisect_left(self._keys, bound, key=self._sort_key)

    def upper_bound(self, bound: Key) -> int:
        """Position of the first key whose sort key is > ``bound``."""
        return bisect.bisect_right(self._keys, bound, key=self._sort_key)

    def line_range(self, line: int) -> Tuple[int, int]:
        """Positions ``[start, stop)`` of the keys stored in native ``line``.

        Minor coordinates are non-negative, so ``(line, 0)`` is a valid lower
        bound for every line including the first one.
        """
        return self.lower_bound((line, 0)), self.lower_bound((line + 1, 0))

    def slice(self, start: int, stop: int) -> Iterator[Tuple[Key, Any]]:
        for key in self._keys[start:stop]:
            yield key, self._values[key]

    def keys(self) -> Iterator[Key]:
        return iter(self._keys)

    def items(self) -> Iterator[Tuple[Key, Any]]:
        for key in self._keys:
            yield key, self._values[key]

    def values(self) -> Iterator[Any]:
        for key in self._keys:
            yield self._values[key]

    def copy(self) -> 'UncompressedStore':
        other = UncompressedStore(self._sort_key)
        other._keys = list(self._keys)
        other._values = dict(self._values)
        return other

    def __repr__(self) -> str:
        return f"UncompressedStore(nnz={len(self)})"


# =============================================================================
# Compressed Store
# =============================================================================

@dataclass
class CompressedStore:
    """CSR/CSC arrays of a compressed matrix.

    Attributes:
        values: Non-zero values in storage order (length nnz).
        indices: Minor coordinate of each value (length nnz).
        indptr: Prefix counts per line (length primary + 1).
    """
    values: np.ndarray
    indices: np.ndarray
    indptr: np.ndarray

    @classmethod
    def empty(cls, primary: int, dtype: np.dtype) -> 'CompressedStore':
        return cls(
            values=np.zeros(0, dtype=dtype),
            indices=np.zeros(0, dtype=INDEX_DTYPE),
            indptr=np.zeros(primary + 1, dtype=INDEX_DTYPE),
        )

    def __len__(self) -> int:
        return int(self.values.shape[0])

    @property
    def primary(self) -> int:
        """Number of lines."""
        return int(self.indptr.shape[0]) - 1

    def line_bounds(self, line: int) -> Tuple[int, int]:
        """Positions ``[start, stop)`` of ``line`` in ``values``/``indices``."""
        return int(self.indptr[line]), int(self.indptr[line + 1])

    def line_length(self, line: int) -> int:
        start, stop = self.line_bounds(line)
        return stop - start

    def locate(self, line: int, minor: int) -> Optional[int]:
        """Binary search for ``minor`` in the slice of ``line``.

        Returns:
            Position in ``values``, or None if not stored.
        """
        start, stop = self.line_bounds(line)
        if start == stop:
            return None
        pos = start + int(np.searchsorted(self.indices[start:stop], minor, side='left'))
        if pos < stop and self.indices[pos] == minor:
            return pos
        return None

    def lines_of(self, positions: np.ndarray) -> np.ndarray:
        """Line containing each storage position (binary search in ``indptr``)."""
        return np.searchsorted(self.indptr, positions, side='right') - 1

    def copy(self) -> 'CompressedStore':
        return CompressedStore(self.values.copy(), self.indices.copy(), self.indptr.copy())

    def __repr__(self) -> str:
        return f"CompressedStore(nnz={len(self)}, lines={self.primary})"
