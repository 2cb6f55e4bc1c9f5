"""
sparsemat - Dual-representation sparse matrices

Sparse matrices that switch between two storage states:
- Uncompressed: ordered (row, col) -> value map, cheap insertion/removal
- Compressed: CSR / CSC arrays, cheap reads and line slicing

over row-major or column-major ordering, with integer, floating or
complex elements.

Modules:
- io: coordinate-list (Matrix Market style) reader and text rendering

Example:
    >>> import sparsemat
    >>> m = sparsemat.Matrix(2, 2, order='row')
    >>> m[0, 1] = 2.0
    >>> m[1, 0] = 3.0
    >>> m.compress()
    >>> m @ [1.0, 1.0]
    array([2., 3.])
    >>> m.norm('inf')
    3.0
"""

__version__ = '0.1.0'

from . import io
from ._config import get_config, get_defaults, reset_defaults, set_defaults
from ._error import (
    DimensionMismatchError,
    IndexOutOfBoundsError,
    InvalidArgumentError,
    MatrixFormatError,
    SparseMatError,
    UnsupportedDTypeError,
)
from ._matrix import Matrix
from ._ops import (
    intersect_sorted,
    matmul,
    matvec,
    norm,
    norm_frobenius,
    norm_infinity,
    norm_one,
)
from ._types import ExecutionPolicy, NormType, StorageOrder
from .io import load_coordinate, read_coordinate, render

__all__ = [
    # Version
    '__version__',
    # Modules
    'io',
    # Core
    'Matrix',
    'StorageOrder',
    'NormType',
    'ExecutionPolicy',
    # Arithmetic
    'matvec',
    'matmul',
    'norm',
    'norm_one',
    'norm_infinity',
    'norm_frobenius',
    'intersect_sorted',
    # I/O
    'load_coordinate',
    'read_coordinate',
    'render',
    # Configuration
    'get_config',
    'set_defaults',
    'get_defaults',
    'reset_defaults',
    # Errors
    'SparseMatError',
    'IndexOutOfBoundsError',
    'InvalidArgumentError',
    'DimensionMismatchError',
    'MatrixFormatError',
    'UnsupportedDTypeError',
]
