# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

import numpy as np
import pytest

from stridetensor import Descriptor
from stridetensor.errors import DimensionMismatch, IndexOutOfRange


def test_row_major_strides_and_numel():
    d = Descriptor.row_major([2, 3, 4])
    assert d.stride == (12, 4, 1)
    assert d.numel == 24
    assert d.ndim == 3
    assert d.offset == 0
    assert d.is_contiguous()


def test_scalar_descriptor_has_one_element():
    d = Descriptor.row_major([])
    assert d.shape == ()
    assert d.numel == 1
    assert d.is_contiguous()
    assert d.linear_index([]) == 0


def test_zero_sized_dimension():
    d = Descriptor.row_major([3, 0])
    assert d.numel == 0
    assert d.positions().size == 0
    assert list(d.indices()) == []


def test_negative_dimension_rejected():
    with pytest.raises(DimensionMismatch):
        Descriptor.row_major([2, -1])


def test_linear_index_includes_offset_and_strides():
    d = Descriptor((2, 3), (1, 2), offset=5)
    assert d.linear_index([1, 2]) == 5 + 1 * 1 + 2 * 2


def test_linear_index_wrong_count():
    d = Descriptor.row_major([2, 3])
    with pytest.raises(DimensionMismatch):
        d.linear_index([1])
    with pytest.raises(DimensionMismatch):
        d.linear_index([1, 1, 1])


@pytest.mark.parametrize("index", [[2, 0], [0, 3], [-1, 0], [0, -1]])
def test_linear_index_out_of_range(index):
    d = Descriptor.row_major([2, 3])
    with pytest.raises(IndexOutOfRange):
        d.linear_index(index)


def test_contiguity_follows_stride_definition():
    assert not Descriptor((3, 2), (1, 3)).is_contiguous()
    assert Descriptor((3, 2), (2, 1), offset=7).is_contiguous()


def test_positions_match_linear_index():
    d = Descriptor((2, 3, 2), (1, 4, 2), offset=3)
    expected = [d.linear_index(idx) for idx in d.indices()]
    assert d.positions().tolist() == expected


def test_indices_are_row_major():
    d = Descriptor.row_major([2, 2])
    assert list(d.indices()) == [(0, 0), (0, 1), (1, 0), (1, 1)]


def test_span_and_fits():
    d = Descriptor((2, 3), (3, 1), offset=2)
    assert d.span() == (2, 2 + 3 + 2)
    assert d.fits(8)
    assert not d.fits(7)
    assert Descriptor.row_major([0]).span() is None


def test_descriptor_is_immutable():
    d = Descriptor.row_major([2])
    with pytest.raises(AttributeError):
        d.offset = 3


def test_shape_stride_length_must_agree():
    with pytest.raises(DimensionMismatch):
        Descriptor((2, 3), (1,))
