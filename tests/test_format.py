# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

import stridetensor as st


def test_str_nested_brackets():
    t = st.tensor([[1, 2, 3], [4, 5, 6]])
    assert str(t) == "[[1, 2, 3],\n [4, 5, 6]]"


def test_str_follows_strides():
    t = st.tensor([[1, 2, 3], [4, 5, 6]]).transpose(0, 1)
    assert str(t) == "[[1, 4],\n [2, 5],\n [3, 6]]"


def test_str_of_offset_view():
    base = st.arange(6, dtype="int64")
    assert str(base.slice(2, 5)) == "[2, 3, 4]"


def test_str_rank_three_separates_blocks():
    t = st.arange(8, dtype="int64").view(2, 2, 2)
    assert str(t) == "[[[0, 1],\n  [2, 3]],\n\n [[4, 5],\n  [6, 7]]]"


def test_cells_share_a_width():
    assert str(st.tensor([1, 10, 100])) == "[  1,  10, 100]"
    assert str(st.tensor([0.5, 1.0])) == "[0.5,   1]"
    assert str(st.tensor([True, False])) == "[ True, False]"


def test_scalar_and_empty():
    assert str(st.tensor(3)) == "3"
    assert str(st.zeros(0)) == "[]"


def test_repr_indents_continuation_lines():
    t = st.tensor([[1, 2, 3], [4, 5, 6]])
    assert repr(t) == "tensor([[1, 2, 3],\n        [4, 5, 6]], dtype=int64)"
    assert repr(st.tensor(3)) == "tensor(3, dtype=int64)"
