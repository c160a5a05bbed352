# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

"""Free-function forms of the view and kernel operations."""

from __future__ import annotations

from typing import Optional, Sequence, Union

from .errors import UnsupportedRank
from .kernels import argmax, eq, equal, matmul, maximum, mean, mul, ne, sum
from .quantization import dequantize, quantize
from .tensor import Tensor


def view(t: Tensor, *shape: Union[int, Sequence[int]]) -> Tensor:
    return t.view(*shape)


def reshape(t: Tensor, *shape: Union[int, Sequence[int]]) -> Tensor:
    return t.reshape(*shape)


def flatten(t: Tensor) -> Tensor:
    return t.flatten()


def slice(t: Tensor, start: int, end: int, dim: int = 0) -> Tensor:
    return t.slice(start, end, dim)


def narrow(t: Tensor, dim: int, start: int, length: int) -> Tensor:
    return t.narrow(dim, start, length)


def select(t: Tensor, dim: int, index: int) -> Tensor:
    return t.select(dim, index)


def transpose(t: Tensor, dim0: int = 0, dim1: int = 1) -> Tensor:
    return t.transpose(dim0, dim1)


def permute(t: Tensor, *dims: Union[int, Sequence[int]]) -> Tensor:
    return t.permute(*dims)


def unsqueeze(t: Tensor, dim: int) -> Tensor:
    return t.unsqueeze(dim)


def squeeze(t: Tensor, dim: Optional[int] = None) -> Tensor:
    return t.squeeze(dim)


def contiguous(t: Tensor) -> Tensor:
    return t.contiguous()


def dot(a: Tensor, b: Tensor) -> Tensor:
    """Inner product of two 1-D tensors, returned as a 0-d tensor."""
    if a.ndim != 1 or b.ndim != 1:
        raise UnsupportedRank(
            f"dot requires 1-D tensors, got ranks {a.ndim} and {b.ndim}"
        )
    return sum(mul(a, b))


__all__ = [
    "view",
    "reshape",
    "flatten",
    "slice",
    "narrow",
    "select",
    "transpose",
    "permute",
    "unsqueeze",
    "squeeze",
    "contiguous",
    "matmul",
    "mul",
    "eq",
    "ne",
    "equal",
    "sum",
    "mean",
    "argmax",
    "maximum",
    "dot",
    "quantize",
    "dequantize",
]
