# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

"""Flat element buffer shared by tensors and their views."""

from __future__ import annotations

from numbers import Integral
from typing import Any, Optional

import numpy as np

from ._backend import dtype_name, numpy_dtype, resolve_dtype
from .errors import IndexOutOfRange


class Storage:
    """A fixed-size, one-dimensional block of elements of a single dtype.

    Storage has no shape. Any number of tensors may hold the same Storage;
    it is released once the last of them is garbage collected.
    """

    __slots__ = ("_data", "__weakref__")

    def __init__(self, size: int, dtype: Optional[str] = None):
        if isinstance(size, bool) or not isinstance(size, Integral):
            raise TypeError("Storage size must be an integer")
        if size < 0:
            raise ValueError(f"Storage size must be non-negative, got {size}")
        self._data = np.zeros(int(size), dtype=numpy_dtype(resolve_dtype(dtype)))

    @classmethod
    def from_array(cls, data: Any, dtype: Optional[str] = None) -> "Storage":
        """Create a Storage holding a flattened copy of ``data``."""

        if dtype is None and isinstance(data, np.ndarray):
            try:
                dtype = dtype_name(data.dtype)
            except ValueError:
                dtype = None
        target = numpy_dtype(resolve_dtype(dtype))
        return cls._wrap(np.array(data, dtype=target, copy=True).reshape(-1))

    @classmethod
    def _wrap(cls, array: np.ndarray) -> "Storage":
        """Adopt a freshly computed one-dimensional array without copying."""

        storage = cls.__new__(cls)
        storage._data = array
        return storage

    @property
    def dtype(self) -> str:
        return dtype_name(self._data.dtype)

    @property
    def data(self) -> np.ndarray:
        """The backing numpy array. Writes through it are seen by every view."""
        return self._data

    @property
    def nbytes(self) -> int:
        return self._data.nbytes

    def __len__(self) -> int:
        return self._data.shape[0]

    def _check(self, position: int) -> int:
        if isinstance(position, bool) or not isinstance(position, Integral):
            raise TypeError("Storage positions must be integers")
        if position < 0 or position >= len(self):
            raise IndexOutOfRange(
                f"Storage position {position} out of range for size {len(self)}"
            )
        return int(position)

    def __getitem__(self, position: int) -> Any:
        return self._data[self._check(position)].item()

    def __setitem__(self, position: int, value: Any) -> None:
        self._data[self._check(position)] = value

    def __repr__(self) -> str:
        return f"Storage(size={len(self)}, dtype='{self.dtype}')"


__all__ = ["Storage"]
