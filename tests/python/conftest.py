"""
Pytest configuration and shared fixtures for sparsemat tests.
"""

import pytest
import numpy as np
from pathlib import Path
import sys

# Add src to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root / "src"))

from sparsemat import Matrix, StorageOrder, reset_defaults


# Try to import scipy
try:
    import scipy.sparse as sp
    HAS_SCIPY = True
except ImportError:
    HAS_SCIPY = False


ORDERS = [StorageOrder.ROW_MAJOR, StorageOrder.COLUMN_MAJOR]

# (order, compressed) for every storage configuration
CONFIGS = [
    (StorageOrder.ROW_MAJOR, False),
    (StorageOrder.ROW_MAJOR, True),
    (StorageOrder.COLUMN_MAJOR, False),
    (StorageOrder.COLUMN_MAJOR, True),
]

CONFIG_IDS = ['row-uncompressed', 'row-compressed', 'col-uncompressed', 'col-compressed']


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def _restore_defaults():
    """Each test starts from the built-in configuration."""
    reset_defaults()
    yield
    reset_defaults()


@pytest.fixture(scope="session")
def requires_scipy():
    """Skip test if scipy is not available."""
    if not HAS_SCIPY:
        pytest.skip("scipy not available")


@pytest.fixture
def dense_small():
    """Dense reference for the small test matrix (3x4).

    Matrix:
    [[1, 0, 2, 0],
     [0, 3, 0, 4],
     [5, 0, 0, 6]]
    """
    return np.array([
        [1, 0, 2, 0],
        [0, 3, 0, 4],
        [5, 0, 0, 6]
    ], dtype=np.float64)


@pytest.fixture(params=CONFIGS, ids=CONFIG_IDS)
def small_matrix(request, dense_small):
    """The small test matrix in every storage configuration."""
    order, compressed = request.param
    mat = Matrix.from_dense(dense_small, order=order)
    if compressed:
        mat.compress()
    return mat


@pytest.fixture
def small_csr(dense_small):
    """Small test matrix, row-major and compressed."""
    mat = Matrix.from_dense(dense_small, order='row')
    mat.compress()
    return mat


@pytest.fixture
def small_csc(dense_small):
    """Small test matrix, column-major and compressed."""
    mat = Matrix.from_dense(dense_small, order='col')
    mat.compress()
    return mat


@pytest.fixture
def random_dense():
    """Random 12x9 integer-valued matrix with ~25% non-zeros, some empty lines."""
    rng = np.random.default_rng(42)
    dense = rng.integers(-5, 6, size=(12, 9)).astype(np.float64)
    dense[rng.random((12, 9)) > 0.25] = 0.0
    dense[3, :] = 0.0
    dense[:, 0] = 0.0
    dense[:, 7] = 0.0
    return dense


# =============================================================================
# Helper Functions
# =============================================================================

def build(dense, order, compressed, dtype=None):
    """Matrix from a dense array in the requested configuration."""
    mat = Matrix.from_dense(dense, order=order, dtype=dtype)
    if compressed:
        mat.compress()
    return mat


def triples(mat):
    """Set of (row, col, value) triples stored in ``mat``."""
    return {(i, j, v.item() if hasattr(v, 'item') else v) for i, j, v in mat.iter_nonzero()}
