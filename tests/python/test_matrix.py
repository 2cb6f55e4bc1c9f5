"""
Tests for Matrix creation, properties, read/write and state handling.
"""

import logging

import pytest
import numpy as np

from sparsemat import (
    DimensionMismatchError,
    IndexOutOfBoundsError,
    InvalidArgumentError,
    Matrix,
    StorageOrder,
    UnsupportedDTypeError,
)
from conftest import ORDERS, triples


class TestMatrixCreation:
    """Test Matrix creation."""

    def test_create_empty(self):
        mat = Matrix(10, 20)
        assert mat.shape == (10, 20)
        assert mat.nnz == 0
        assert not mat.compressed
        assert mat.order is StorageOrder.ROW_MAJOR
        assert mat.dtype == np.float64

    def test_create_default_extents(self):
        mat = Matrix()
        assert mat.shape == (0, 0)

    def test_create_compressed(self):
        mat = Matrix(3, 2, order='col', compressed=True)
        assert mat.compressed
        assert mat.indptr.tolist() == [0, 0, 0]

    def test_order_aliases(self):
        assert Matrix(1, 1, order='csc').order is StorageOrder.COLUMN_MAJOR
        assert Matrix(1, 1, order='row').order is StorageOrder.ROW_MAJOR

    def test_negative_extents(self):
        with pytest.raises(InvalidArgumentError):
            Matrix(-1, 3)

    @pytest.mark.parametrize("dtype", [object, str, bool])
    def test_unsupported_dtype(self, dtype):
        with pytest.raises(UnsupportedDTypeError):
            Matrix(2, 2, dtype=dtype)

    def test_from_dense(self, dense_small):
        mat = Matrix.from_dense(dense_small)
        assert mat.shape == (3, 4)
        assert mat.nnz == 6
        np.testing.assert_array_equal(mat.to_dense(), dense_small)

    def test_from_dense_keeps_int_dtype(self):
        mat = Matrix.from_dense([[0, 1], [2, 0]])
        assert mat.dtype.kind == 'i'

    def test_from_dense_rejects_1d(self):
        with pytest.raises(DimensionMismatchError):
            Matrix.from_dense([1, 2, 3])


class TestMatrixProperties:
    """Test Matrix properties."""

    def test_shape_and_counts(self, small_matrix):
        assert small_matrix.shape == (3, 4)
        assert small_matrix.rows == 3
        assert small_matrix.cols == 4
        assert small_matrix.nnz == 6
        assert small_matrix.size == 12
        assert small_matrix.density == pytest.approx(0.5)
        assert len(small_matrix) == 3
        assert bool(small_matrix)

    def test_empty_matrix_is_falsy(self):
        assert not Matrix(3, 3)

    def test_order_is_read_only(self):
        mat = Matrix(2, 2)
        with pytest.raises(AttributeError):
            mat.order = StorageOrder.COLUMN_MAJOR

    def test_raw_arrays_empty_when_uncompressed(self, dense_small):
        mat = Matrix.from_dense(dense_small)
        assert mat.values.size == 0
        assert mat.indices.size == 0
        assert mat.indptr.size == 0

    def test_raw_arrays_are_copies(self, small_csr):
        values = small_csr.values
        values[0] = 100.0
        assert small_csr[0, 0] == 1.0

    def test_repr(self, small_csr):
        text = repr(small_csr)
        assert "shape=(3, 4)" in text
        assert "nnz=6" in text
        assert "compressed" in text


class TestReadWrite:
    """Test element read and the write semantics table."""

    def test_read(self, small_matrix, dense_small):
        for i in range(3):
            for j in range(4):
                assert small_matrix[i, j] == dense_small[i, j]

    def test_read_never_written_is_zero(self):
        mat = Matrix(4, 4, dtype=complex)
        assert mat.read(2, 3) == 0
        assert mat.read(2, 3) == mat.zero

    @pytest.mark.parametrize("order", ORDERS)
    def test_insert(self, order):
        mat = Matrix(3, 3, order=order)
        assert mat.write(1, 2, 4.5) == 4.5
        assert mat.nnz == 1
        assert mat[1, 2] == 4.5

    @pytest.mark.parametrize("order", ORDERS)
    def test_write_zero_on_absent_is_noop(self, order):
        mat = Matrix(3, 3, order=order)
        mat[0, 0] = 1.0
        assert mat.write(2, 2, 0.0) == 0.0
        assert mat.nnz == 1

    @pytest.mark.parametrize("order", ORDERS)
    def test_write_zero_erases(self, order):
        mat = Matrix(3, 3, order=order)
        mat[0, 1] = 1.0
        mat[2, 1] = 2.0
        assert mat.write(0, 1, 0) == 0
        assert mat.nnz == 1
        assert mat[0, 1] == 0.0
        assert not mat.contains(0, 1)

    @pytest.mark.parametrize("order", ORDERS)
    def test_overwrite(self, order):
        mat = Matrix(3, 3, order=order)
        mat[1, 1] = 1.0
        assert mat.write(1, 1, -7.0) == -7.0
        assert mat.nnz == 1
        assert mat[1, 1] == -7.0

    def test_write_casts_to_dtype(self):
        mat = Matrix(2, 2, dtype=np.int32)
        mat[0, 0] = 3
        assert mat[0, 0].dtype == np.int32

    def test_compressed_update_existing(self, small_matrix):
        small_matrix.compress()
        before = triples(small_matrix)
        assert small_matrix.write(1, 3, 40.0) == 40.0
        assert small_matrix[1, 3] == 40.0
        assert small_matrix.nnz == 6
        changed = triples(small_matrix) - before
        assert changed == {(1, 3, 40.0)}

    def test_compressed_insert_rejected(self, small_matrix, caplog):
        small_matrix.compress()
        before = triples(small_matrix)
        with caplog.at_level(logging.ERROR, logger="sparsemat.matrix"):
            assert small_matrix.write(0, 1, 9.0) == 0.0
        assert "compressed" in caplog.text
        assert triples(small_matrix) == before
        assert small_matrix[0, 1] == 0.0

    def test_compressed_erase_rejected(self, small_matrix, caplog):
        small_matrix.compress()
        with caplog.at_level(logging.ERROR, logger="sparsemat.matrix"):
            assert small_matrix.write(0, 0, 0.0) == 0.0
        assert small_matrix[0, 0] == 1.0
        assert small_matrix.nnz == 6
        assert caplog.records

    def test_scenario_insert_rejected_then_update(self):
        mat = Matrix(2, 2)
        mat[0, 1] = 2.0
        mat[1, 0] = 3.0
        mat.compress()
        assert mat.write(0, 0, 11.0) == 0.0
        assert mat.to_dense().tolist() == [[0.0, 2.0], [3.0, 0.0]]
        assert mat.write(1, 0, 30.0) == 30.0
        assert mat.to_dense().tolist() == [[0.0, 2.0], [30.0, 0.0]]

    @pytest.mark.parametrize("index", [(-1, 0), (3, 0), (0, 4), (0, -1)])
    def test_out_of_range_read(self, small_matrix, index):
        with pytest.raises(IndexOutOfBoundsError):
            small_matrix.read(*index)

    @pytest.mark.parametrize("index", [(3, 0), (0, 4)])
    def test_out_of_range_write(self, small_matrix, index):
        with pytest.raises(IndexOutOfBoundsError):
            small_matrix.write(index[0], index[1], 1.0)

    def test_index_error_is_builtin_index_error(self):
        with pytest.raises(IndexError):
            Matrix(1, 1)[1, 0]


class TestZeroIsAbsence:
    """A zero is never stored."""

    @pytest.mark.parametrize("order", ORDERS)
    def test_zero_write_sequence(self, order, random_dense):
        mat = Matrix.from_dense(random_dense, order=order)
        for i in range(random_dense.shape[0]):
            for j in range(random_dense.shape[1]):
                nnz = mat.nnz
                present = mat.contains(i, j)
                mat.write(i, j, 0.0)
                assert mat.read(i, j) == 0.0
                assert mat.nnz == nnz - (1 if present else 0)
        assert mat.nnz == 0

    def test_no_zero_values_stored(self, random_dense):
        mat = Matrix.from_dense(random_dense)
        assert all(v != 0 for _, _, v in mat.iter_nonzero())


class TestStateHandling:
    """Test resize, clear_buffer, copy and the compressed flag."""

    @pytest.mark.parametrize("compressed", [False, True])
    def test_resize_clears_and_keeps_mode(self, dense_small, compressed):
        mat = Matrix.from_dense(dense_small)
        if compressed:
            mat.compress()
        mat.resize(5, 2)
        assert mat.shape == (5, 2)
        assert mat.nnz == 0
        assert mat.compressed == compressed
        assert mat[4, 1] == 0.0

    def test_resize_compressed_offsets(self, small_csc):
        small_csc.resize(2, 5)
        assert small_csc.indptr.tolist() == [0] * 6

    def test_resize_invalid_leaves_matrix(self, dense_small):
        mat = Matrix.from_dense(dense_small)
        with pytest.raises(InvalidArgumentError):
            mat.resize(-2, 3)
        assert mat.shape == (3, 4)
        assert mat.nnz == 6

    def test_clear_buffer(self, small_matrix):
        compressed = small_matrix.compressed
        small_matrix.clear_buffer()
        assert small_matrix.nnz == 0
        assert small_matrix.shape == (3, 4)
        assert small_matrix.compressed == compressed

    def test_compressed_setter(self, dense_small):
        mat = Matrix.from_dense(dense_small)
        mat.compressed = True
        assert mat.compressed
        mat.compressed = False
        assert not mat.compressed
        np.testing.assert_array_equal(mat.to_dense(), dense_small)

    def test_copy_is_independent(self, small_matrix):
        other = small_matrix.copy()
        assert other.compressed == small_matrix.compressed
        assert other.order is small_matrix.order
        other.write(0, 0, 42.0)
        assert small_matrix[0, 0] == 1.0


class TestScipyInterop:
    """Test conversion to and from scipy.sparse."""

    def test_to_scipy_csr(self, requires_scipy, dense_small):
        mat = Matrix.from_dense(dense_small, order='row')
        sp_mat = mat.to_scipy()
        assert sp_mat.format == 'csr'
        np.testing.assert_array_equal(sp_mat.toarray(), dense_small)
        assert not mat.compressed

    def test_to_scipy_csc(self, requires_scipy, small_csc, dense_small):
        sp_mat = small_csc.to_scipy()
        assert sp_mat.format == 'csc'
        np.testing.assert_array_equal(sp_mat.indptr, small_csc.indptr)
        np.testing.assert_array_equal(sp_mat.toarray(), dense_small)

    def test_from_scipy(self, requires_scipy, dense_small):
        import scipy.sparse as sp
        mat = Matrix.from_scipy(sp.csc_matrix(dense_small))
        assert mat.order is StorageOrder.COLUMN_MAJOR
        assert not mat.compressed
        np.testing.assert_array_equal(mat.to_dense(), dense_small)
