# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

import numpy as np
import pytest

import stridetensor as st
from stridetensor.errors import DimensionMismatch, UnsupportedRank


def test_mul_rank3_and_rank4():
    a = st.arange(24, dtype="int64").view(2, 3, 4)
    b = st.full([2, 3, 4], 2, dtype="int64")
    result = a * b
    assert result.is_contiguous()
    np.testing.assert_array_equal(result.numpy(), np.arange(24).reshape(2, 3, 4) * 2)

    c = st.ones(1, 2, 2, 2)
    assert (c * c).shape == (1, 2, 2, 2)


def test_mul_any_rank_and_aliased_operands():
    base = st.arange(6, dtype="int64").view(2, 3)
    t = base.transpose(0, 1)
    result = t * base.view(3, 2)
    expected = np.arange(6).reshape(2, 3).T * np.arange(6).reshape(3, 2)
    np.testing.assert_array_equal(result.numpy(), expected)
    assert (base.select(0, 1) * base.select(0, 0)).tolist() == [0, 4, 10]


def test_mul_shape_mismatch():
    with pytest.raises(DimensionMismatch):
        st.zeros(2, 3) * st.zeros(3, 2)


def test_mul_with_non_tensor_is_unsupported():
    with pytest.raises(TypeError):
        st.zeros(2) * 2


def test_eq_returns_int_mask():
    a = st.tensor([1, 2, 3])
    b = st.tensor([1, 0, 3])
    result = a == b
    assert result.dtype == "int32"
    assert result.tolist() == [1, 0, 1]
    assert (a != b).tolist() == [0, 1, 0]


def test_eq_respects_offset_and_stride():
    base = st.tensor([9, 1, 2, 3, 9])
    shifted = base.slice(1, 4, 0)
    assert (shifted == st.tensor([1, 2, 3])).tolist() == [1, 1, 1]

    m = st.tensor([[1, 2], [3, 4]])
    column = m.select(1, 0)
    assert (column == st.tensor([1, 3])).tolist() == [1, 1]


def test_eq_higher_rank_and_shape_mismatch():
    a = st.arange(6).view(2, 3)
    assert (a == a.contiguous()).tolist() == [[1, 1, 1], [1, 1, 1]]
    with pytest.raises(DimensionMismatch):
        _ = st.tensor([1, 2]) == st.tensor([1, 2, 3])


def test_eq_with_non_tensor_falls_back_to_identity():
    assert (st.tensor([1]) == 1) is False


def test_equal():
    a = st.tensor([[1, 2], [3, 4]])
    assert a.equal(a.transpose(0, 1).transpose(0, 1))
    assert not a.equal(a.transpose(0, 1))
    assert not st.equal(a, st.tensor([1, 2]))


def test_maximum_with_scalar_tensor():
    a = st.tensor([-1.0, 0.5, 2.0])
    result = st.maximum(a, st.tensor(0.0))
    assert result.tolist() == [0.0, 0.5, 2.0]
    assert a.maximum(1.0).tolist() == [1.0, 1.0, 2.0]


def test_maximum_reads_through_views():
    base = st.tensor([[-3, 4], [5, -6]])
    result = base.transpose(0, 1).maximum(0)
    assert result.tolist() == [[0, 5], [4, 0]]
    assert base.slice(1, 2, 0).maximum(st.tensor(-10)).tolist() == [[5, -6]]


def test_maximum_requires_scalar():
    with pytest.raises(UnsupportedRank):
        st.maximum(st.zeros(3), st.zeros(3))
    with pytest.raises(TypeError):
        st.maximum(st.zeros(3), "1")
