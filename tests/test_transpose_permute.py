# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

import numpy as np
import pytest

import stridetensor as st
from stridetensor.errors import DimensionMismatch, IndexOutOfRange


def test_transpose_swaps_shape_and_strides():
    x = st.arange(6, dtype="int64").view(2, 3)
    y = x.transpose(0, 1)
    assert y.shape == (3, 2)
    assert y.strides == (1, 3)
    assert not y.is_contiguous()
    assert y.shares_storage(x)
    np.testing.assert_array_equal(y.numpy(), np.arange(6).reshape(2, 3).T)


def test_transpose_round_trip():
    x = st.arange(24, dtype="int64").view(2, 3, 4)
    y = x.transpose(0, 2).transpose(0, 2)
    assert y.shape == x.shape
    assert y.strides == x.strides
    assert y.offset == x.offset
    assert y.tolist() == x.tolist()


def test_transpose_negative_and_invalid_dims():
    x = st.arange(24).view(2, 3, 4)
    assert x.transpose(-1, 0).shape == (4, 3, 2)
    with pytest.raises(IndexOutOfRange):
        x.transpose(0, 3)


def test_T_reverses_all_dims():
    x = st.arange(24).view(2, 3, 4)
    assert x.T.shape == (4, 3, 2)
    expected = np.arange(24, dtype=np.float32).reshape(2, 3, 4).T
    np.testing.assert_allclose(x.T.numpy(), expected)


def test_permute_reorders_dimensions():
    x = st.arange(24).view(2, 3, 4)
    y = x.permute(2, 0, 1)
    expected = np.arange(24, dtype=np.float32).reshape(2, 3, 4).transpose(2, 0, 1)
    assert y.strides == (1, 12, 4)
    np.testing.assert_allclose(y.numpy(), expected)


def test_permute_supports_negative_dims_and_sequences():
    x = st.arange(24).view(2, 3, 4)
    expected = np.arange(24, dtype=np.float32).reshape(2, 3, 4).transpose(2, 0, 1)
    np.testing.assert_allclose(x.permute(2, -3, -2).numpy(), expected)
    np.testing.assert_allclose(x.permute([2, 0, 1]).numpy(), expected)


@pytest.mark.parametrize("dims", [(0, 0, 1), (0, 1), (0, 1, 3), (0, 1, 2, 3)])
def test_permute_rejects_non_permutations(dims):
    x = st.arange(6).view(1, 2, 3)
    with pytest.raises(DimensionMismatch):
        x.permute(*dims)


def test_writes_through_transposed_alias():
    x = st.zeros(2, 3, dtype="int32")
    x.transpose(0, 1)[2, 0] = 9
    assert x.get([0, 2]) == 9
