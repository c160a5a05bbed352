# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

"""Exception types raised by stridetensor.

Each error also derives from the builtin exception callers would reach for
(``ValueError``, ``IndexError``, ``RuntimeError``) so existing ``except``
clauses keep working.
"""

from __future__ import annotations


class TensorError(Exception):
    """Base class for every error raised by stridetensor."""


class DimensionMismatch(TensorError, ValueError):
    """Index count, operand shapes, permutation or element count disagree."""


class IndexOutOfRange(TensorError, IndexError):
    """A per-axis index or dimension lies outside ``[0, size)``."""


class InvalidRange(TensorError, IndexError):
    """``slice``/``select`` bounds violate ``0 <= start <= end <= size``."""


class UnsupportedRank(TensorError, ValueError):
    """A kernel was invoked on a rank it does not handle."""


class NonContiguousLayout(TensorError, RuntimeError):
    """The operation needs a row-major contiguous source."""


__all__ = [
    "TensorError",
    "DimensionMismatch",
    "IndexOutOfRange",
    "InvalidRange",
    "UnsupportedRank",
    "NonContiguousLayout",
]
