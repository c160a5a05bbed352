# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

import numpy as np
import pytest

import stridetensor as st
from stridetensor.errors import DimensionMismatch, UnsupportedRank
from stridetensor.kernels import _row_blocks


@pytest.fixture
def threads():
    previous = st.get_num_threads()
    yield st.set_num_threads
    st.set_num_threads(previous)


def test_matmul_basic():
    a = st.tensor([[1, 2, 3], [4, 5, 6]])
    b = st.tensor([[7, 8], [9, 10], [11, 12]])
    result = a.matmul(b)
    assert result.shape == (2, 2)
    assert result.is_contiguous()
    assert result.tolist() == [[58, 64], [139, 154]]


def test_matmul_operator_and_functional():
    a = st.tensor([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
    b = st.tensor([[7.0, 8.0], [9.0, 10.0], [11.0, 12.0]])
    expected = np.array([[58.0, 64.0], [139.0, 154.0]])
    np.testing.assert_allclose((a @ b).numpy(), expected)
    np.testing.assert_allclose(st.matmul(a, b).numpy(), expected)


def test_matmul_with_strided_operands():
    base = st.arange(24, dtype="int64").view(4, 6)
    a = base.slice(1, 4, 0).slice(0, 5, 1)
    b = base.transpose(0, 1).slice(0, 5, 0).slice(1, 4, 1)
    expected = a.numpy_copy() @ b.numpy_copy()
    np.testing.assert_array_equal((a @ b).numpy(), expected)


def test_matmul_rank_and_shape_errors():
    with pytest.raises(UnsupportedRank):
        st.tensor([1, 2]).matmul(st.tensor([[1], [2]]))
    with pytest.raises(UnsupportedRank):
        st.zeros(2, 2, 2).matmul(st.zeros(2, 2))
    with pytest.raises(DimensionMismatch):
        st.zeros(2, 3).matmul(st.zeros(2, 3))
    with pytest.raises(TypeError):
        st.zeros(2, 2).matmul([[1, 0], [0, 1]])


def test_matmul_empty_inner_dimension():
    result = st.zeros(3, 0).matmul(st.zeros(0, 2))
    assert result.shape == (3, 2)
    assert result.tolist() == [[0.0, 0.0]] * 3


def test_matmul_result_independent_of_worker_count(threads):
    rng = np.random.default_rng(0)
    a = st.from_numpy(rng.standard_normal((37, 19)).astype(np.float32))
    b = st.from_numpy(rng.standard_normal((19, 23)).astype(np.float32))

    threads(1)
    serial = (a @ b).numpy_copy()
    threads(4)
    parallel = (a @ b).numpy_copy()
    threads(64)
    oversubscribed = (a @ b).numpy_copy()

    np.testing.assert_array_equal(serial, parallel)
    np.testing.assert_array_equal(serial, oversubscribed)
    np.testing.assert_allclose(serial, a.numpy() @ b.numpy(), rtol=1e-5, atol=1e-5)


def test_matmul_quantized_int_accumulation():
    a = st.full([1, 300], 127, dtype="int32")
    b = st.full([300, 1], 127, dtype="int32")
    assert (a @ b).item() == 127 * 127 * 300


@pytest.mark.parametrize(
    "rows,workers",
    [(0, 4), (1, 4), (5, 2), (7, 3), (8, 8), (3, 10)],
)
def test_row_blocks_partition_rows(rows, workers):
    blocks = _row_blocks(rows, workers)
    covered = [i for start, stop in blocks for i in range(start, stop)]
    assert covered == list(range(rows))
    assert len(blocks) <= max(1, workers)
    sizes = [stop - start for start, stop in blocks]
    if sizes:
        assert max(sizes) - min(sizes) <= 1


def test_dot():
    a = st.tensor([1, 2, 3])
    b = st.tensor([4, 5, 6])
    assert st.dot(a, b).item() == 32
    with pytest.raises(UnsupportedRank):
        st.dot(st.zeros(2, 2), st.zeros(2, 2))
