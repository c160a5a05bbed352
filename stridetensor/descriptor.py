# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Shape/stride/offset bookkeeping that maps logical indices onto Storage.

A :class:`Descriptor` is an immutable value. Every view operation derives a
new one; none of them touch element data.
"""

from __future__ import annotations

from dataclasses import dataclass
from math import prod
from numbers import Integral
from typing import Iterator, Optional, Sequence, Tuple

import numpy as np

from .errors import DimensionMismatch, IndexOutOfRange, InvalidRange


def _as_int(value, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"{what} must be an integer, got {type(value).__name__}")
    return int(value)


def normalize_shape(shape: Sequence[int]) -> Tuple[int, ...]:
    """Validate a shape and return it as a tuple of ints."""

    dims = tuple(_as_int(size, "shape entries") for size in shape)
    for size in dims:
        if size < 0:
            raise DimensionMismatch(f"negative dimension {size} in shape {dims}")
    return dims


def row_major_strides(shape: Sequence[int]) -> Tuple[int, ...]:
    """Canonical row-major strides: the last axis has stride 1."""

    strides = [0] * len(shape)
    step = 1
    for i in range(len(shape) - 1, -1, -1):
        strides[i] = step
        step *= shape[i]
    return tuple(strides)


def normalize_dim(dim: int, ndim: int, error=IndexOutOfRange) -> int:
    """Resolve a possibly negative dimension against ``ndim``."""

    dim = _as_int(dim, "dim")
    resolved = dim + ndim if dim < 0 else dim
    if resolved < 0 or resolved >= ndim:
        raise error(f"Dimension {dim} out of range for tensor with {ndim} dims")
    return resolved


@dataclass(frozen=True)
class Descriptor:
    """Ordered shape and stride plus the Storage offset of index ``(0, ..., 0)``."""

    shape: Tuple[int, ...]
    stride: Tuple[int, ...]
    offset: int = 0

    def __post_init__(self):
        if len(self.shape) != len(self.stride):
            raise DimensionMismatch(
                f"shape {self.shape} and stride {self.stride} differ in length"
            )

    @classmethod
    def row_major(cls, shape: Sequence[int], offset: int = 0) -> "Descriptor":
        dims = normalize_shape(shape)
        return cls(dims, row_major_strides(dims), offset)

    @property
    def ndim(self) -> int:
        return len(self.shape)

    @property
    def numel(self) -> int:
        # prod(()) == 1, so a scalar holds exactly one element.
        return prod(self.shape)

    def is_contiguous(self) -> bool:
        expected = 1
        for size, step in zip(reversed(self.shape), reversed(self.stride)):
            if step != expected:
                return False
            expected *= size
        return True

    def linear_index(self, indices: Sequence[int]) -> int:
        """Resolve a full multi-index to its position in Storage."""

        if len(indices) != self.ndim:
            raise DimensionMismatch(
                f"Expected {self.ndim} indices, got {len(indices)}"
            )
        position = self.offset
        for axis, (index, size, step) in enumerate(
            zip(indices, self.shape, self.stride)
        ):
            index = _as_int(index, "indices")
            if index < 0 or index >= size:
                raise IndexOutOfRange(
                    f"Index {index} out of range for axis {axis} with size {size}"
                )
            position += index * step
        return position

    def indices(self) -> Iterator[Tuple[int, ...]]:
        """Yield every logical multi-index in row-major order."""

        if self.numel == 0:
            return
        index = [0] * self.ndim
        while True:
            yield tuple(index)
            axis = self.ndim - 1
            while axis >= 0:
                index[axis] += 1
                if index[axis] < self.shape[axis]:
                    break
                index[axis] = 0
                axis -= 1
            if axis < 0:
                return

    def positions(self) -> np.ndarray:
        """Storage positions of every element, in logical row-major order."""

        positions = np.full((), self.offset, dtype=np.int64)
        for size, step in zip(self.shape, self.stride):
            positions = positions[..., None] + np.arange(size, dtype=np.int64) * step
        return positions.reshape(-1)

    def span(self) -> Optional[Tuple[int, int]]:
        """Lowest and highest reachable Storage positions, or ``None`` if empty."""

        if self.numel == 0:
            return None
        low = high = self.offset
        for size, step in zip(self.shape, self.stride):
            reach = (size - 1) * step
            if reach < 0:
                low += reach
            else:
                high += reach
        return low, high

    def fits(self, storage_size: int) -> bool:
        span = self.span()
        return span is None or (span[0] >= 0 and span[1] < storage_size)

    # View derivations -----------------------------------------------------

    def viewed(self, shape: Sequence[int]) -> "Descriptor":
        dims = list(shape)
        inferred = [i for i, size in enumerate(dims) if size == -1]
        if len(inferred) > 1:
            raise DimensionMismatch("only one dimension can be inferred")
        if inferred:
            known = prod(
                _as_int(size, "shape entries")
                for i, size in enumerate(dims)
                if i != inferred[0]
            )
            if known == 0 or self.numel % known != 0:
                raise DimensionMismatch(
                    f"shape {tuple(shape)} is invalid for input of size {self.numel}"
                )
            dims[inferred[0]] = self.numel // known
        dims = normalize_shape(dims)
        if prod(dims) != self.numel:
            raise DimensionMismatch(
                f"shape {dims} is invalid for input of size {self.numel}"
            )
        return Descriptor(dims, row_major_strides(dims), self.offset)

    def sliced(self, start: int, end: int, dim: int) -> "Descriptor":
        dim = normalize_dim(dim, self.ndim)
        start = _as_int(start, "start")
        end = _as_int(end, "end")
        if start < 0 or start > end or end > self.shape[dim]:
            raise InvalidRange(
                f"Invalid slice range [{start}, {end}) for dimension {dim} "
                f"of size {self.shape[dim]}"
            )
        shape = list(self.shape)
        shape[dim] = end - start
        return Descriptor(
            tuple(shape), self.stride, self.offset + start * self.stride[dim]
        )

    def selected(self, dim: int, index: int) -> "Descriptor":
        dim = normalize_dim(dim, self.ndim, error=InvalidRange)
        index = _as_int(index, "index")
        if index < 0 or index >= self.shape[dim]:
            raise InvalidRange(
                f"Index {index} out of range for dimension {dim} "
                f"of size {self.shape[dim]}"
            )
        return Descriptor(
            self.shape[:dim] + self.shape[dim + 1 :],
            self.stride[:dim] + self.stride[dim + 1 :],
            self.offset + index * self.stride[dim],
        )

    def transposed(self, dim0: int, dim1: int) -> "Descriptor":
        dim0 = normalize_dim(dim0, self.ndim)
        dim1 = normalize_dim(dim1, self.ndim)
        shape = list(self.shape)
        stride = list(self.stride)
        shape[dim0], shape[dim1] = shape[dim1], shape[dim0]
        stride[dim0], stride[dim1] = stride[dim1], stride[dim0]
        return Descriptor(tuple(shape), tuple(stride), self.offset)

    def permuted(self, dims: Sequence[int]) -> "Descriptor":
        if len(dims) != self.ndim:
            raise DimensionMismatch(
                f"permute expects {self.ndim} dims, got {len(dims)}"
            )
        order = []
        for dim in dims:
            try:
                order.append(normalize_dim(dim, self.ndim))
            except IndexOutOfRange as exc:
                raise DimensionMismatch(str(exc)) from None
        if sorted(order) != list(range(self.ndim)):
            raise DimensionMismatch(f"{tuple(dims)} is not a permutation of the dims")
        return Descriptor(
            tuple(self.shape[d] for d in order),
            tuple(self.stride[d] for d in order),
            self.offset,
        )

    def unsqueezed(self, dim: int) -> "Descriptor":
        dim = normalize_dim(dim, self.ndim + 1)
        # Stride of a size-1 axis is never used to move; keep it row-major.
        step = self.stride[dim] * self.shape[dim] if dim < self.ndim else 1
        return Descriptor(
            self.shape[:dim] + (1,) + self.shape[dim:],
            self.stride[:dim] + (step,) + self.stride[dim:],
            self.offset,
        )

    def squeezed(self, dim: Optional[int] = None) -> "Descriptor":
        if dim is None:
            keep = [i for i, size in enumerate(self.shape) if size != 1]
        else:
            dim = normalize_dim(dim, self.ndim)
            keep = [i for i in range(self.ndim) if i != dim or self.shape[i] != 1]
        return Descriptor(
            tuple(self.shape[i] for i in keep),
            tuple(self.stride[i] for i in keep),
            self.offset,
        )


__all__ = [
    "Descriptor",
    "normalize_dim",
    "normalize_shape",
    "row_major_strides",
]
