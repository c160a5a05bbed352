# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Tensor class: a shape/stride descriptor over a shared Storage buffer.
"""

from __future__ import annotations

import logging
from numbers import Integral, Number
from typing import Any, Iterator, Optional, Sequence, Tuple, Union

import numpy as np

from ._backend import dtype_name, get_default_dtype, numpy_dtype, resolve_dtype
from .descriptor import Descriptor
from .errors import (
    DimensionMismatch,
    IndexOutOfRange,
    InvalidRange,
    NonContiguousLayout,
)
from .storage import Storage

logger = logging.getLogger("stridetensor.tensor")

Index = Union[int, slice, Tuple[Union[int, slice], ...]]


def _shape_args(shape: Sequence[Any]) -> list:
    """Accept both ``f(2, 3)`` and ``f((2, 3))`` call styles."""

    if len(shape) == 1 and isinstance(shape[0], (list, tuple)):
        return list(shape[0])
    return list(shape)


def _is_index(value: Any) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool)


class Tensor:
    """
    A multi-dimensional array viewing a flat :class:`Storage`.

    Views (``view``, ``slice``, ``select``, ``transpose``, ``permute``) share
    the Storage of their source; writes through one are visible through every
    alias covering the same elements. Kernels always return tensors with
    freshly allocated, contiguous Storage.
    """

    # Ensure NumPy defers to Tensor's own operators in mixed expressions.
    __array_priority__ = 1000
    __hash__ = object.__hash__

    def __init__(
        self,
        shape: Sequence[int],
        storage: Optional[Storage] = None,
        dtype: Optional[str] = None,
    ):
        """
        Initialize a row-major tensor.

        Args:
            shape: Dimension sizes. An empty shape denotes a scalar.
            storage: Existing Storage to view without copying. When omitted a
                zero-filled Storage is allocated.
            dtype: Element type for newly allocated Storage ('float32',
                'float64', 'int32', 'int64', 'uint8', 'bool').

        Examples:
            >>> t1 = Tensor([2, 3])
            >>> t2 = Tensor([3, 2], t1.storage)
        """
        if _is_index(shape):
            shape = (shape,)
        descriptor = Descriptor.row_major(shape)

        if storage is None:
            storage = Storage(descriptor.numel, dtype)
        else:
            if not isinstance(storage, Storage):
                raise TypeError("storage must be a Storage instance")
            if dtype is not None and resolve_dtype(dtype) != storage.dtype:
                raise ValueError(
                    f"dtype '{dtype}' does not match storage dtype '{storage.dtype}'"
                )
            if descriptor.numel > len(storage):
                raise DimensionMismatch(
                    f"shape {descriptor.shape} needs {descriptor.numel} elements "
                    f"but storage holds {len(storage)}"
                )

        self._storage = storage
        self._descriptor = descriptor
        self.scale: Optional[float] = None

    @classmethod
    def _wrap(
        cls,
        storage: Storage,
        descriptor: Descriptor,
        scale: Optional[float] = None,
    ) -> "Tensor":
        """Instantiate a ``Tensor`` over ``storage`` with an explicit layout.

        Views and kernel results are built through here instead of
        ``__init__`` so the descriptor can carry arbitrary strides and a
        non-zero offset. Every reachable position must lie inside
        ``storage``.
        """

        if not descriptor.fits(len(storage)):
            raise IndexOutOfRange(
                f"layout shape={descriptor.shape} stride={descriptor.stride} "
                f"offset={descriptor.offset} addresses past the end of a storage "
                f"of size {len(storage)}"
            )
        instance = cls.__new__(cls)
        instance._storage = storage
        instance._descriptor = descriptor
        instance.scale = scale
        return instance

    @classmethod
    def _from_array(cls, array: np.ndarray, scale: Optional[float] = None) -> "Tensor":
        """Wrap a freshly computed numpy array as a new contiguous tensor."""

        # ascontiguousarray promotes 0-d input to 1-d; restore the shape.
        shape = np.shape(array)
        array = np.ascontiguousarray(array).reshape(shape)
        storage = Storage._wrap(array.reshape(-1))
        return cls._wrap(storage, Descriptor.row_major(shape), scale)

    def _derive(self, descriptor: Descriptor) -> "Tensor":
        return self._wrap(self._storage, descriptor, self.scale)

    def _values(self) -> np.ndarray:
        """Elements in logical order with this tensor's shape.

        Contiguous tensors yield a view of Storage; others are gathered
        through the index resolver into a new array.
        """

        desc = self._descriptor
        data = self._storage.data
        if desc.is_contiguous():
            return data[desc.offset : desc.offset + desc.numel].reshape(desc.shape)
        return data[desc.positions()].reshape(desc.shape)

    # Core properties
    @property
    def shape(self) -> Tuple[int, ...]:
        """Get tensor shape as tuple."""
        return self._descriptor.shape

    @property
    def strides(self) -> Tuple[int, ...]:
        """Strides of the tensor, in elements."""
        return self._descriptor.stride

    @property
    def offset(self) -> int:
        """Storage position of the first logical element."""
        return self._descriptor.offset

    @property
    def descriptor(self) -> Descriptor:
        return self._descriptor

    @property
    def storage(self) -> Storage:
        """The shared Storage this tensor reads from and writes to."""
        return self._storage

    @property
    def dtype(self) -> str:
        """Get tensor data type."""
        return self._storage.dtype

    @property
    def ndim(self) -> int:
        """Number of dimensions."""
        return self._descriptor.ndim

    @property
    def size(self) -> int:
        """Total number of elements."""
        return self._descriptor.numel

    @property
    def itemsize(self) -> int:
        return self._storage.data.itemsize

    @property
    def T(self) -> "Tensor":
        """Reverse all dimensions."""
        return self.permute(list(range(self.ndim - 1, -1, -1)))

    def numel(self) -> int:
        """Get total number of elements."""
        return self._descriptor.numel

    def dim(self) -> int:
        """Get number of dimensions."""
        return self.ndim

    def is_contiguous(self) -> bool:
        """Check if the strides match the row-major layout of the shape."""
        return self._descriptor.is_contiguous()

    def shares_storage(self, other: "Tensor") -> bool:
        """Return ``True`` when both tensors view the same Storage."""
        return self._storage is other._storage

    # Element access
    def get(self, indices: Sequence[int]) -> Any:
        """Read the element at a full multi-index."""
        position = self._descriptor.linear_index(indices)
        return self._storage.data[position].item()

    def set(self, indices: Sequence[int], value: Any) -> None:
        """Write ``value`` at a full multi-index."""
        position = self._descriptor.linear_index(indices)
        self._storage.data[position] = value

    def item(self) -> Union[float, int, bool]:
        """Return the Python scalar value for a single-element tensor."""
        if self.numel() != 1:
            raise ValueError(
                f"only one element tensors can be converted to Python scalars, "
                f"got {self.numel()} elements"
            )
        return self._values().reshape(-1)[0].item()

    @staticmethod
    def _slice_bounds(key: slice, size: int) -> Tuple[int, int]:
        if key.step not in (None, 1):
            raise InvalidRange("only slices with step 1 are supported")
        start = 0 if key.start is None else key.start
        stop = size if key.stop is None else key.stop
        if not (_is_index(start) and _is_index(stop)):
            raise TypeError("slice bounds must be integers")
        if start < 0 or stop < 0:
            raise InvalidRange("negative slice bounds are not supported")
        return start, stop

    def _index_view(self, key: Tuple[Any, ...]) -> "Tensor":
        result = self
        dim = 0
        for item in key:
            if isinstance(item, slice):
                start, stop = self._slice_bounds(item, result.shape[dim])
                result = result.slice(start, stop, dim)
                dim += 1
            elif _is_index(item):
                if item < 0 or item >= result.shape[dim]:
                    raise IndexOutOfRange(
                        f"Index {item} out of range for axis {dim} "
                        f"with size {result.shape[dim]}"
                    )
                result = result.select(dim, item)
            else:
                raise TypeError(
                    f"tensor indices must be integers or slices, not {type(item).__name__}"
                )
        return result

    def __getitem__(self, key: Index) -> Any:
        if not isinstance(key, tuple):
            key = (key,)
        if len(key) > self.ndim:
            raise DimensionMismatch(
                f"too many indices for tensor of dimension {self.ndim}"
            )
        if len(key) == self.ndim and all(_is_index(k) for k in key):
            return self.get(key)
        return self._index_view(key)

    def __setitem__(self, key: Index, value: Any) -> None:
        if not isinstance(key, tuple):
            key = (key,)
        if len(key) > self.ndim:
            raise DimensionMismatch(
                f"too many indices for tensor of dimension {self.ndim}"
            )
        if len(key) == self.ndim and all(_is_index(k) for k in key):
            self.set(key, value)
            return

        target = self._index_view(key)
        if isinstance(value, Tensor):
            if value.shape != target.shape:
                raise DimensionMismatch(
                    f"cannot assign tensor of shape {value.shape} "
                    f"to region of shape {target.shape}"
                )
            # Read first: the source may alias the target region.
            source = np.array(value._values(), copy=True).reshape(-1)
            self._storage.data[target._descriptor.positions()] = source
        else:
            self._storage.data[target._descriptor.positions()] = value

    def __len__(self) -> int:
        if self.ndim == 0:
            raise TypeError("len() of a 0-d tensor")
        return self.shape[0]

    def __iter__(self) -> Iterator[Any]:
        if self.ndim == 0:
            raise TypeError("iteration over a 0-d tensor")
        for i in range(self.shape[0]):
            yield self[i]

    def __bool__(self) -> bool:
        if self.numel() != 1:
            raise ValueError(
                "The truth value of a tensor with more than one element is ambiguous"
            )
        return bool(self.item())

    # Data conversion methods
    def numpy(self) -> np.ndarray:
        """Convert to numpy array, sharing memory when the layout allows it."""
        return self._values()

    def numpy_copy(self) -> np.ndarray:
        """Convert to numpy array with explicit copy."""
        return np.array(self._values(), copy=True)

    def __array__(
        self, dtype: Optional[np.dtype] = None, copy: Optional[bool] = None
    ) -> np.ndarray:
        """Support NumPy's array protocol.

        ``copy=False`` raises ``ValueError`` when the result cannot share
        memory with Storage: a non-contiguous layout or a dtype change.
        """
        if copy is False:
            if not self.is_contiguous():
                raise ValueError(
                    "cannot return a non-contiguous tensor without copying"
                )
            if dtype is not None and np.dtype(dtype) != self._storage.data.dtype:
                raise ValueError(
                    f"cannot convert {self.dtype} to {np.dtype(dtype)} without copying"
                )
        array = self.numpy_copy() if copy else self._values()
        if dtype is not None:
            return array.astype(dtype, copy=False)
        return array

    def tolist(self) -> Any:
        """Convert to (nested) Python list."""
        return self._values().tolist()

    # View algebra
    def view(self, *shape: Union[int, Sequence[int]]) -> "Tensor":
        """Reinterpret a contiguous tensor with a new shape, sharing Storage."""
        if not self.is_contiguous():
            raise NonContiguousLayout(
                "view requires a contiguous tensor; call contiguous() or reshape()"
            )
        return self._derive(self._descriptor.viewed(_shape_args(shape)))

    def reshape(self, *shape: Union[int, Sequence[int]]) -> "Tensor":
        """Reshape tensor, copying only when the layout is not contiguous."""
        source = self if self.is_contiguous() else self.contiguous()
        return source.view(*shape)

    def flatten(self) -> "Tensor":
        """Collapse all dimensions into one."""
        return self.reshape(-1)

    def slice(self, start: int, end: int, dim: int = 0) -> "Tensor":
        """Restrict ``dim`` to ``[start, end)`` without copying."""
        return self._derive(self._descriptor.sliced(start, end, dim))

    def narrow(self, dim: int, start: int, length: int) -> "Tensor":
        """Narrow the tensor along ``dim`` starting at ``start`` for ``length`` elements."""
        return self.slice(start, start + length, dim)

    def select(self, dim: int, index: int) -> "Tensor":
        """Fix ``dim`` at ``index`` and drop that dimension."""
        return self._derive(self._descriptor.selected(dim, index))

    def transpose(self, dim0: int = 0, dim1: int = 1) -> "Tensor":
        """Swap two dimensions without moving data."""
        return self._derive(self._descriptor.transposed(dim0, dim1))

    swapaxes = transpose

    def permute(self, *dims: Union[int, Sequence[int]]) -> "Tensor":
        """Reorder dimensions without moving data."""
        return self._derive(self._descriptor.permuted(_shape_args(dims)))

    def unsqueeze(self, dim: int) -> "Tensor":
        """Add a dimension of size 1."""
        return self._derive(self._descriptor.unsqueezed(dim))

    def squeeze(self, dim: Optional[int] = None) -> "Tensor":
        """Remove dimensions of size 1."""
        return self._derive(self._descriptor.squeezed(dim))

    def contiguous(self) -> "Tensor":
        """Return a row-major copy in freshly allocated Storage."""
        if not self.is_contiguous():
            logger.debug(
                "Copying non-contiguous tensor shape=%s strides=%s offset=%d",
                self.shape,
                self.strides,
                self.offset,
            )
        return self._from_array(np.array(self._values(), copy=True), self.scale)

    def clone(self) -> "Tensor":
        """Create a copy of the tensor."""
        return self.contiguous()

    def astype(self, dtype: str) -> "Tensor":
        """Convert tensor to a different data type."""
        return self._from_array(self._values().astype(numpy_dtype(resolve_dtype(dtype))))

    # Kernels
    def matmul(self, other: "Tensor") -> "Tensor":
        """Matrix multiplication of two rank-2 tensors."""
        return _kernels.matmul(self, other)

    def __matmul__(self, other: "Tensor") -> "Tensor":
        """Matrix multiplication operator (@)."""
        if not isinstance(other, Tensor):
            return NotImplemented
        return self.matmul(other)

    def __mul__(self, other: "Tensor") -> "Tensor":
        if not isinstance(other, Tensor):
            return NotImplemented
        return _kernels.mul(self, other)

    def __eq__(self, other: object) -> "Tensor":
        if not isinstance(other, Tensor):
            return NotImplemented
        return _kernels.eq(self, other)

    def __ne__(self, other: object) -> "Tensor":
        if not isinstance(other, Tensor):
            return NotImplemented
        return _kernels.ne(self, other)

    def equal(self, other: "Tensor") -> bool:
        """``True`` when shapes match and every element compares equal."""
        return _kernels.equal(self, other)

    def sum(self, dim: Optional[int] = None, keepdim: bool = False) -> "Tensor":
        return _kernels.sum(self, dim, keepdim)

    def mean(
        self,
        dim: Optional[int] = None,
        keepdim: bool = False,
        dtype: str = "float32",
    ) -> "Tensor":
        return _kernels.mean(self, dim, keepdim, dtype)

    def argmax(self, dim: Optional[int] = None, keepdim: bool = False) -> "Tensor":
        return _kernels.argmax(self, dim, keepdim)

    def maximum(self, other: Union["Tensor", Number]) -> "Tensor":
        return _kernels.maximum(self, other)

    # Quantization
    def quantize(self) -> "Tensor":
        """Symmetric per-tensor quantization into the int8 range (stored as int32)."""
        return _quantization.quantize(self)

    def dequantize(self) -> "Tensor":
        """Map quantized values back to float32 using the attached scale."""
        return _quantization.dequantize(self)

    # Presentation
    def __repr__(self) -> str:
        return _format.render_repr(self)

    def __str__(self) -> str:
        return _format.render(self)

    # Factories
    @staticmethod
    def zeros(*shape: Union[int, Sequence[int]], dtype: Optional[str] = None) -> "Tensor":
        return Tensor(_shape_args(shape), dtype=dtype)

    @staticmethod
    def ones(*shape: Union[int, Sequence[int]], dtype: Optional[str] = None) -> "Tensor":
        return Tensor.full(_shape_args(shape), 1, dtype=dtype)

    @staticmethod
    def full(
        shape: Sequence[int], fill_value: Any, dtype: Optional[str] = None
    ) -> "Tensor":
        result = Tensor(shape, dtype=dtype)
        result._storage.data[:] = fill_value
        return result

    @staticmethod
    def arange(
        start: Union[int, float],
        end: Optional[Union[int, float]] = None,
        step: Union[int, float] = 1,
        dtype: Optional[str] = None,
    ) -> "Tensor":
        if end is None:
            start, end = 0, start
        if step == 0:
            raise ValueError("arange step must be non-zero")
        values = np.arange(start, end, step, dtype=numpy_dtype(resolve_dtype(dtype)))
        return Tensor._from_array(values)

    @staticmethod
    def from_numpy(array: np.ndarray) -> "Tensor":
        """Copy a numpy array into a new tensor, keeping its dtype."""
        if not isinstance(array, np.ndarray):
            raise TypeError("from_numpy expects a numpy.ndarray")
        dtype_name(array.dtype)
        return Tensor._from_array(np.array(array, copy=True))


def _infer_dtype(array: np.ndarray, source: Any) -> str:
    kind = array.dtype.kind
    if isinstance(source, np.ndarray):
        try:
            return dtype_name(array.dtype)
        except ValueError:
            pass
    if kind == "b":
        return "bool"
    if kind in "iu":
        return "int64"
    if kind == "f":
        default = get_default_dtype()
        return default if default in ("float32", "float64") else "float32"
    raise TypeError(f"cannot build a tensor from data of dtype {array.dtype}")


def tensor(data: Any, dtype: Optional[str] = None) -> Tensor:
    """Create a tensor holding a copy of nested lists, scalars or arrays.

    Without ``dtype``, numpy arrays keep their dtype, Python ints become
    ``int64`` and Python floats use the default float dtype.
    """

    if isinstance(data, Tensor):
        source = data._values()
        return Tensor._from_array(
            source.astype(numpy_dtype(resolve_dtype(dtype or data.dtype)), copy=True)
        )
    array = np.asarray(data)
    target = resolve_dtype(dtype) if dtype is not None else _infer_dtype(array, data)
    return Tensor._from_array(np.array(array, dtype=numpy_dtype(target), copy=True))


def zeros(*shape: Union[int, Sequence[int]], dtype: Optional[str] = None) -> Tensor:
    """Create a tensor filled with zeros."""
    return Tensor.zeros(*shape, dtype=dtype)


def ones(*shape: Union[int, Sequence[int]], dtype: Optional[str] = None) -> Tensor:
    """Create a tensor filled with ones."""
    return Tensor.ones(*shape, dtype=dtype)


def full(shape: Sequence[int], fill_value: Any, dtype: Optional[str] = None) -> Tensor:
    """Create a tensor filled with ``fill_value``."""
    return Tensor.full(shape, fill_value, dtype=dtype)


def arange(
    start: Union[int, float],
    end: Optional[Union[int, float]] = None,
    step: Union[int, float] = 1,
    dtype: Optional[str] = None,
) -> Tensor:
    """Create a 1-D tensor of evenly spaced values."""
    return Tensor.arange(start, end, step, dtype=dtype)


def from_numpy(array: np.ndarray) -> Tensor:
    """Create a tensor from a numpy array (copying the data)."""
    return Tensor.from_numpy(array)


# Kernel modules import Tensor, so they are bound after the class exists.
from . import _format  # noqa: E402
from . import kernels as _kernels  # noqa: E402
from . import quantization as _quantization  # noqa: E402
