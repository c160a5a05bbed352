# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

from __future__ import annotations

import logging
import os
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import contextmanager
from threading import RLock
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

import numpy as np

logger = logging.getLogger("stridetensor.backend")

# dtype names exposed to users and the numpy dtypes backing them.
_DTYPE_TO_NP: Dict[str, np.dtype] = {
    "float32": np.dtype(np.float32),
    "float64": np.dtype(np.float64),
    "int32": np.dtype(np.int32),
    "int64": np.dtype(np.int64),
    "uint8": np.dtype(np.uint8),
    "bool": np.dtype(np.bool_),
}
_NP_TO_DTYPE: Dict[np.dtype, str] = {v: k for k, v in _DTYPE_TO_NP.items()}

SUPPORTED_DTYPES = frozenset(_DTYPE_TO_NP)

_NUM_THREADS_ENV = "STRIDETENSOR_NUM_THREADS"

# Runtime state shared by every tensor. Guarded by ``_STATE_LOCK``.
_STATE_LOCK = RLock()
_default_dtype = "float32"
_num_threads: Optional[int] = None
_pool: Optional[ThreadPoolExecutor] = None


def resolve_dtype(dtype: Optional[str]) -> str:
    """Return ``dtype`` validated, or the global default when ``None``."""

    if dtype is None:
        return get_default_dtype()
    if dtype not in _DTYPE_TO_NP:
        raise ValueError(f"Unsupported dtype '{dtype}'")
    return dtype


def numpy_dtype(dtype: str) -> np.dtype:
    """Map a dtype name onto its numpy dtype."""

    try:
        return _DTYPE_TO_NP[dtype]
    except KeyError:
        raise ValueError(f"Unsupported dtype '{dtype}'") from None


def dtype_name(np_dtype: np.dtype) -> str:
    """Map a numpy dtype back onto a dtype name."""

    try:
        return _NP_TO_DTYPE[np.dtype(np_dtype)]
    except KeyError:
        raise ValueError(f"Unsupported numpy dtype '{np_dtype}'") from None


def set_default_dtype(dtype: str) -> None:
    """Set the global default data type for new tensors."""

    global _default_dtype

    if dtype not in _DTYPE_TO_NP:
        raise ValueError(f"Unsupported dtype '{dtype}'")
    with _STATE_LOCK:
        _default_dtype = dtype


def get_default_dtype() -> str:
    """Get the current global default data type."""

    with _STATE_LOCK:
        return _default_dtype


@contextmanager
def default_dtype(dtype: str) -> Iterator[str]:
    """Temporarily switch the default dtype, restoring it on exit."""

    previous = get_default_dtype()
    set_default_dtype(dtype)
    try:
        yield dtype
    finally:
        set_default_dtype(previous)


def _threads_from_environment() -> int:
    raw = os.environ.get(_NUM_THREADS_ENV)
    if raw:
        try:
            value = int(raw)
        except ValueError:
            logger.warning(
                "Ignoring %s=%r: not an integer", _NUM_THREADS_ENV, raw
            )
        else:
            if value > 0:
                return value
            logger.warning("Ignoring %s=%r: must be positive", _NUM_THREADS_ENV, raw)
    return os.cpu_count() or 1


def get_num_threads() -> int:
    """Return the number of workers used by parallel kernels."""

    global _num_threads

    with _STATE_LOCK:
        if _num_threads is None:
            _num_threads = _threads_from_environment()
        return _num_threads


def set_num_threads(num_threads: int) -> None:
    """Resize the worker pool used by parallel kernels."""

    global _num_threads, _pool

    if isinstance(num_threads, bool) or not isinstance(num_threads, int):
        raise TypeError("num_threads must be an integer")
    if num_threads < 1:
        raise ValueError("num_threads must be at least 1")

    with _STATE_LOCK:
        if num_threads == _num_threads:
            return
        _num_threads = num_threads
        stale, _pool = _pool, None

    if stale is not None:
        logger.debug("Shutting down worker pool before resizing to %d", num_threads)
        stale.shutdown(wait=True)


def worker_pool() -> ThreadPoolExecutor:
    """Return the shared worker pool, creating it on first use."""

    global _pool

    with _STATE_LOCK:
        if _pool is None:
            workers = get_num_threads()
            _pool = ThreadPoolExecutor(
                max_workers=workers, thread_name_prefix="stridetensor"
            )
            logger.debug("Started worker pool with %d threads", workers)
        return _pool


def submit_all(
    fn: Callable[..., Any], calls: Iterable[Tuple[Any, ...]]
) -> List[Future]:
    """Submit ``fn(*args)`` for each entry of ``calls`` to the worker pool.

    Submission happens under ``_STATE_LOCK``, so ``set_num_threads`` cannot
    shut the pool down between lookup and submit. A replaced pool still
    finishes the work it already accepted.
    """

    with _STATE_LOCK:
        pool = worker_pool()
        return [pool.submit(fn, *args) for args in calls]


__all__ = [
    "SUPPORTED_DTYPES",
    "resolve_dtype",
    "numpy_dtype",
    "dtype_name",
    "set_default_dtype",
    "get_default_dtype",
    "default_dtype",
    "get_num_threads",
    "set_num_threads",
    "worker_pool",
    "submit_all",
]
