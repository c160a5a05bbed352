# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

"""Performance benchmark for Stridetensor.

This script compares the execution time of a matrix multiplication against
NumPy, once with contiguous operands and once with transposed (strided)
operands, and for several worker counts.
"""

from __future__ import annotations

import timeit


def _benchmark(lib_name: str, setup: str, stmt: str, number: int = 10):
    """Utility helper to run a benchmark with ``timeit``.

    Args:
        lib_name: Name of the library being benchmarked (for display only).
        setup: Setup string executed once before timing.
        stmt: Statement string to be timed.
        number: Number of executions.

    Returns:
        float | None: Execution time in seconds or ``None`` if the benchmark
        cannot be executed.
    """

    try:
        return timeit.timeit(stmt, setup=setup, number=number)
    except Exception as exc:  # pragma: no cover - best effort only
        print(f"Skipping {lib_name} benchmark: {exc}")
        return None


def main():  # pragma: no cover - example script
    size = 256

    setup_np = (
        "import numpy as np\n"
        f"a=np.random.standard_normal(({size},{size})).astype(np.float32)\n"
        f"b=np.random.standard_normal(({size},{size})).astype(np.float32)"
    )
    np_time = _benchmark("NumPy", setup_np, "(a @ b).sum()")

    print(f"Matrix multiplication benchmark ({size}x{size})")
    if np_time is not None:
        print(f"NumPy:                     {np_time:.4f}s")

    for threads in (1, 2, 4):
        setup_st = (
            "import numpy as np, stridetensor as st\n"
            f"st.set_num_threads({threads})\n"
            f"a=st.from_numpy(np.random.standard_normal(({size},{size})).astype(np.float32))\n"
            f"b=st.from_numpy(np.random.standard_normal(({size},{size})).astype(np.float32))"
        )
        contiguous = _benchmark("Stridetensor", setup_st, "a.matmul(b).sum().item()")
        strided = _benchmark(
            "Stridetensor (transposed)", setup_st, "a.T.matmul(b.T).sum().item()"
        )
        if contiguous is not None:
            print(f"Stridetensor {threads} thread(s): {contiguous:.4f}s")
        if strided is not None:
            print(f"  with transposed operands: {strided:.4f}s")


if __name__ == "__main__":  # pragma: no cover - example script
    main()
