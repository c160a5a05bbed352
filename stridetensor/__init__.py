# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

from __future__ import annotations

from typing import Iterable

from . import errors, functional
from ._backend import (
    SUPPORTED_DTYPES,
    default_dtype,
    get_default_dtype,
    get_num_threads,
    set_default_dtype,
    set_num_threads,
)
from ._version import __version__, __version_tuple__
from .descriptor import Descriptor
from .errors import (
    DimensionMismatch,
    IndexOutOfRange,
    InvalidRange,
    NonContiguousLayout,
    TensorError,
    UnsupportedRank,
)
from .storage import Storage
from .tensor import Tensor, arange, from_numpy, full, ones, tensor, zeros

_FUNCTIONAL_FORWARDERS: Iterable[str] = (
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
)

for _name in _FUNCTIONAL_FORWARDERS:
    globals()[_name] = getattr(functional, _name)


__all__ = [
    "Tensor",
    "Storage",
    "Descriptor",
    "tensor",
    "functional",
    "errors",
    "zeros",
    "ones",
    "full",
    "arange",
    "from_numpy",
    "TensorError",
    "DimensionMismatch",
    "IndexOutOfRange",
    "InvalidRange",
    "UnsupportedRank",
    "NonContiguousLayout",
    "SUPPORTED_DTYPES",
    "set_default_dtype",
    "get_default_dtype",
    "default_dtype",
    "set_num_threads",
    "get_num_threads",
    "__version__",
    "__version_tuple__",
    *_FUNCTIONAL_FORWARDERS,
]
