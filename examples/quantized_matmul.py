# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

"""Quantized matrix multiplication example for Stridetensor.

Both operands are quantized to the int8 range, multiplied with integer
accumulation, and the product is mapped back to floating point by attaching
the product of the two scales to the integer result.
"""

from __future__ import annotations

import numpy as np

import stridetensor as st


def quantized_matmul(size: int = 32, seed: int = 0, verbose: bool = True):
    """Compare an int8-range matmul against the float32 reference.

    Returns
    -------
    tuple[float, float]
        Maximum absolute error and the largest reference magnitude.
    """

    rng = np.random.default_rng(seed)
    a = st.from_numpy(rng.standard_normal((size, size)).astype(np.float32))
    b = st.from_numpy(rng.standard_normal((size, size)).astype(np.float32))

    reference = a @ b

    qa = a.quantize()
    qb = b.quantize()
    product = qa @ qb
    product.scale = qa.scale * qb.scale
    approx = product.dequantize()

    error = float(np.abs(approx.numpy() - reference.numpy()).max())
    magnitude = float(np.abs(reference.numpy()).max())
    if verbose:
        print(f"scales: a={qa.scale:.5f} b={qb.scale:.5f}")
        print(f"max abs error {error:.4f} (reference magnitude {magnitude:.2f})")
    return error, magnitude


def main():  # pragma: no cover - example script
    quantized_matmul(verbose=True)


if __name__ == "__main__":  # pragma: no cover - example script
    main()
