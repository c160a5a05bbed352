# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Symmetric per-tensor quantization into the int8 range.

Quantized values are stored as int32 so later integer accumulation (for
example in ``matmul``) does not overflow. A single scale covers the whole
tensor and travels with it as ``Tensor.scale``.
"""

from __future__ import annotations

import logging

import numpy as np

from .tensor import Tensor

logger = logging.getLogger("stridetensor.quantization")

Q_MAX = 127.0


def quantize(t: Tensor) -> Tensor:
    """Quantize ``t`` with ``scale = max(|x|) / 127`` and truncation toward zero."""

    if not isinstance(t, Tensor):
        raise TypeError(f"quantize requires a Tensor, got {type(t).__name__}")

    values = t._values().astype(np.float64)
    wmax = float(np.abs(values).max()) if values.size else 0.0
    scale = wmax / Q_MAX

    if scale == 0.0:
        quantized = np.zeros(values.shape, dtype=np.int32)
    else:
        quantized = np.trunc(values / scale).astype(np.int32)

    logger.debug("quantized %s elements with scale=%g", values.size, scale)
    return Tensor._from_array(quantized, scale=scale)


def dequantize(t: Tensor) -> Tensor:
    """Return ``q * scale`` as float32, using the scale currently on ``t``."""

    if not isinstance(t, Tensor):
        raise TypeError(f"dequantize requires a Tensor, got {type(t).__name__}")
    if t.scale is None:
        raise RuntimeError("dequantize requires a tensor produced by quantize()")

    restored = t._values().astype(np.float64) * float(t.scale)
    return Tensor._from_array(restored.astype(np.float32))


__all__ = ["Q_MAX", "quantize", "dequantize"]
