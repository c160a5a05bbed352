# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Numeric kernels over strided tensors.

Every kernel reads its operands through their descriptors, so sliced,
transposed and offset views give the same answers as their contiguous
copies. Results are always new, contiguous tensors.
"""

from __future__ import annotations

import logging
from math import prod
from numbers import Number
from typing import List, Optional, Tuple, Union

import numpy as np

from ._backend import get_num_threads, numpy_dtype, resolve_dtype, submit_all
from .descriptor import normalize_dim
from .errors import DimensionMismatch, InvalidRange, UnsupportedRank
from .tensor import Tensor

logger = logging.getLogger("stridetensor.kernels")


def _require_tensor(value, op: str) -> Tensor:
    if not isinstance(value, Tensor):
        raise TypeError(f"{op} requires a Tensor, got {type(value).__name__}")
    return value


def _require_same_shape(a: Tensor, b: Tensor, op: str) -> None:
    if a.shape != b.shape:
        raise DimensionMismatch(
            f"{op} requires equal shapes, got {a.shape} and {b.shape}"
        )


# Matrix multiplication ------------------------------------------------------


def _row_blocks(rows: int, workers: int) -> List[Tuple[int, int]]:
    """Split ``range(rows)`` into at most ``workers`` disjoint, ordered blocks."""

    workers = max(1, min(workers, rows))
    base, extra = divmod(rows, workers)
    blocks = []
    start = 0
    for worker in range(workers):
        stop = start + base + (1 if worker < extra else 0)
        if stop > start:
            blocks.append((start, stop))
        start = stop
    return blocks


def _matmul_rows(
    lhs: np.ndarray, rhs: np.ndarray, out: np.ndarray, start: int, stop: int
) -> None:
    # One row per call keeps each cell's accumulation independent of blocking.
    for i in range(start, stop):
        out[i] = lhs[i] @ rhs


def matmul(a: Tensor, b: Tensor) -> Tensor:
    """Multiply two rank-2 tensors.

    Output rows are partitioned into disjoint blocks computed on the shared
    worker pool. Operands are materialised as contiguous copies first and are
    only read while workers run, so no locking is needed.
    """

    _require_tensor(a, "matmul")
    _require_tensor(b, "matmul")
    if a.ndim != 2 or b.ndim != 2:
        raise UnsupportedRank(
            f"matmul requires rank-2 operands, got ranks {a.ndim} and {b.ndim}"
        )
    if a.shape[1] != b.shape[0]:
        raise DimensionMismatch(
            f"Matrix dimensions are not compatible for multiplication: "
            f"{a.shape} @ {b.shape}"
        )

    left = a if a.is_contiguous() else a.contiguous()
    right = b if b.is_contiguous() else b.contiguous()

    result_dtype = np.result_type(left.storage.data.dtype, right.storage.data.dtype)
    lhs = left._values().astype(result_dtype, copy=False)
    rhs = right._values().astype(result_dtype, copy=False)

    rows, cols = left.shape[0], right.shape[1]
    out = np.zeros((rows, cols), dtype=result_dtype)

    blocks = _row_blocks(rows, get_num_threads())
    logger.debug(
        "matmul %s @ %s on %d block(s)", left.shape, right.shape, len(blocks)
    )
    if len(blocks) <= 1:
        for start, stop in blocks:
            _matmul_rows(lhs, rhs, out, start, stop)
    else:
        futures = submit_all(
            _matmul_rows, [(lhs, rhs, out, start, stop) for start, stop in blocks]
        )
        for future in futures:
            future.result()

    return Tensor._from_array(out)


# Reductions -----------------------------------------------------------------


def _reduction_layout(
    t: Tensor, dim: Optional[int]
) -> Tuple[np.ndarray, Tuple[int, ...], Tuple[int, ...]]:
    """Arrange ``t`` as an ``(outer, reduced)`` matrix.

    Returns the matrix together with the result shape without and with the
    reduced axes kept as size 1.
    """

    if dim is None:
        reduced_axes = list(range(t.ndim))
    else:
        if t.ndim == 0:
            raise UnsupportedRank("cannot reduce along a dimension of a 0-d tensor")
        reduced_axes = [normalize_dim(dim, t.ndim)]
    kept_axes = [i for i in range(t.ndim) if i not in reduced_axes]

    moved = t.permute(kept_axes + reduced_axes)
    outer_shape = tuple(t.shape[i] for i in kept_axes)
    keep_shape = tuple(1 if i in reduced_axes else t.shape[i] for i in range(t.ndim))
    reduced = prod(t.shape[i] for i in reduced_axes)

    matrix = moved._values().reshape(prod(outer_shape), reduced)
    return matrix, outer_shape, keep_shape


def _accumulator(matrix: np.ndarray) -> np.dtype:
    # Booleans are counted; every other dtype accumulates in itself.
    return np.dtype(np.int64) if matrix.dtype.kind == "b" else matrix.dtype


def sum(t: Tensor, dim: Optional[int] = None, keepdim: bool = False) -> Tensor:
    """Sum over ``dim`` (or every axis), accumulating in the source dtype."""

    _require_tensor(t, "sum")
    matrix, outer_shape, keep_shape = _reduction_layout(t, dim)
    totals = matrix.sum(axis=1, dtype=_accumulator(matrix))
    return Tensor._from_array(totals.reshape(keep_shape if keepdim else outer_shape))


def mean(
    t: Tensor,
    dim: Optional[int] = None,
    keepdim: bool = False,
    dtype: str = "float32",
) -> Tensor:
    """Average over ``dim`` (or every axis).

    The total is accumulated in the source dtype and then divided by the
    element count in the result ``dtype``; narrow integer sources can
    overflow before the division.
    """

    _require_tensor(t, "mean")
    target = numpy_dtype(resolve_dtype(dtype))
    matrix, outer_shape, keep_shape = _reduction_layout(t, dim)
    count = matrix.shape[1]
    if count == 0 and target.kind != "f":
        raise InvalidRange("mean of an empty dimension has no integer value")

    totals = matrix.sum(axis=1, dtype=_accumulator(matrix)).astype(target)
    with np.errstate(invalid="ignore", divide="ignore"):
        means = np.true_divide(totals, target.type(count))
    if target.kind != "f":
        means = np.trunc(means)
    means = means.astype(target)
    return Tensor._from_array(means.reshape(keep_shape if keepdim else outer_shape))


def argmax(t: Tensor, dim: Optional[int] = None, keepdim: bool = False) -> Tensor:
    """Index of the first maximal value along ``dim``.

    With ``dim=None`` the index refers to the flattened (row-major) tensor.
    A value only wins when it compares strictly greater, so NaN is never
    chosen unless it is the first element scanned.
    """

    _require_tensor(t, "argmax")
    matrix, outer_shape, keep_shape = _reduction_layout(t, dim)
    if matrix.shape[1] == 0:
        raise InvalidRange("argmax of an empty dimension")
    if matrix.dtype.kind == "f":
        missing = np.isnan(matrix)
        indices = np.argmax(np.where(missing, -np.inf, matrix), axis=1)
        indices[missing[:, 0]] = 0
    else:
        indices = np.argmax(matrix, axis=1)
    indices = indices.astype(np.int64)
    return Tensor._from_array(indices.reshape(keep_shape if keepdim else outer_shape))


# Elementwise ----------------------------------------------------------------


def mul(a: Tensor, b: Tensor) -> Tensor:
    """Elementwise product of two tensors with identical shapes."""

    _require_tensor(a, "mul")
    _require_tensor(b, "mul")
    _require_same_shape(a, b, "mul")
    return Tensor._from_array(a._values() * b._values())


def eq(a: Tensor, b: Tensor) -> Tensor:
    """Elementwise equality as an int32 tensor of 0/1."""

    _require_tensor(a, "eq")
    _require_tensor(b, "eq")
    _require_same_shape(a, b, "eq")
    return Tensor._from_array((a._values() == b._values()).astype(np.int32))


def ne(a: Tensor, b: Tensor) -> Tensor:
    """Elementwise inequality as an int32 tensor of 0/1."""

    _require_tensor(a, "ne")
    _require_tensor(b, "ne")
    _require_same_shape(a, b, "ne")
    return Tensor._from_array((a._values() != b._values()).astype(np.int32))


def equal(a: Tensor, b: Tensor) -> bool:
    """``True`` when both tensors have the same shape and elements."""

    _require_tensor(a, "equal")
    _require_tensor(b, "equal")
    if a.shape != b.shape:
        return False
    return bool(np.array_equal(a._values(), b._values()))


def maximum(a: Tensor, b: Union[Tensor, Number]) -> Tensor:
    """Elementwise ``max(a[i], b)`` against a scalar ``b``."""

    _require_tensor(a, "maximum")
    if isinstance(b, Tensor):
        if b.ndim != 0:
            raise UnsupportedRank(
                f"maximum expects a 0-d tensor as its second operand, got rank {b.ndim}"
            )
        scalar = b._values()
    elif isinstance(b, Number):
        scalar = b
    else:
        raise TypeError(f"maximum requires a Tensor or number, got {type(b).__name__}")
    return Tensor._from_array(np.maximum(a._values(), scalar))


__all__ = [
    "matmul",
    "sum",
    "mean",
    "argmax",
    "mul",
    "eq",
    "ne",
    "equal",
    "maximum",
]
