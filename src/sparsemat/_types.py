"""Enumerations and small type helpers.

Storage order, norm kinds and execution policies are plain enums; every
routine that depends on them dispatches with ordinary comparisons.
"""

from enum import Enum
from typing import Tuple, Union

import numpy as np

from ._error import UnsupportedDTypeError

__all__ = [
    'StorageOrder',
    'NormType',
    'ExecutionPolicy',
    'Key',
    'resolve_dtype',
]


# (row, col) key of the uncompressed store
Key = Tuple[int, int]


class StorageOrder(Enum):
    """Element ordering of a matrix.

    Attributes:
        ROW_MAJOR: Lines are rows. Compressed form is CSR.
        COLUMN_MAJOR: Lines are columns. Compressed form is CSC.
    """
    ROW_MAJOR = 'row'
    COLUMN_MAJOR = 'col'

    @classmethod
    def parse(cls, value: Union['StorageOrder', str]) -> 'StorageOrder':
        """Accept a member, its value or a common alias ('csr', 'csc', ...)."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        if text in ('row', 'rows', 'row_major', 'rowwise', 'csr'):
            return cls.ROW_MAJOR
        if text in ('col', 'cols', 'column', 'column_major', 'columnwise', 'csc'):
            return cls.COLUMN_MAJOR
        raise ValueError(f"Unknown storage order: {value!r}")

    @property
    def format(self) -> str:
        """Equivalent compressed format name ('csr' or 'csc')."""
        return 'csr' if self is StorageOrder.ROW_MAJOR else 'csc'


class NormType(Enum):
    """Matrix norms."""
    ONE = 'one'
    INFINITY = 'infinity'
    FROBENIUS = 'frobenius'

    @classmethod
    def parse(cls, value: Union['NormType', str]) -> 'NormType':
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        aliases = {
            'one': cls.ONE, '1': cls.ONE,
            'infinity': cls.INFINITY, 'inf': cls.INFINITY,
            'frobenius': cls.FROBENIUS, 'fro': cls.FROBENIUS,
        }
        if text not in aliases:
            raise ValueError(f"Unknown norm: {value!r}")
        return aliases[text]


class ExecutionPolicy(Enum):
    """How independent per-line or per-cell work is scheduled.

    Results never depend on the policy.
    """
    SEQUENTIAL = 'sequential'
    PARALLEL = 'parallel'

    @classmethod
    def parse(cls, value: Union['ExecutionPolicy', str]) -> 'ExecutionPolicy':
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        if text in ('sequential', 'seq', 'serial'):
            return cls.SEQUENTIAL
        if text in ('parallel', 'par', 'threads'):
            return cls.PARALLEL
        raise ValueError(f"Unknown execution policy: {value!r}")


# numpy kinds with a zero and an absolute value
_NUMERIC_KINDS = ('i', 'u', 'f', 'c')


def resolve_dtype(dtype) -> np.dtype:
    """Normalize ``dtype`` and reject element types without zero/abs."""
    try:
        resolved = np.dtype(dtype)
    except TypeError as e:
        raise UnsupportedDTypeError(f"Not a numeric dtype: {dtype!r}") from e
    if resolved.kind not in _NUMERIC_KINDS:
        raise UnsupportedDTypeError(
            f"Unsupported element type {resolved}: "
            f"expected an integer, floating or complex dtype"
        )
    return resolved
