# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

"""Tour of zero-copy views in Stridetensor.

Every view below shares one Storage. Writing through any of them changes
what the others see.
"""

from __future__ import annotations

import stridetensor as st


def build_views():
    """Return a base tensor and several views over its storage."""

    base = st.arange(24, dtype="int64").view(2, 3, 4)
    views = {
        "slice": base.slice(1, 3, 1),
        "select": base.select(2, 0),
        "transpose": base.transpose(0, 2),
        "permute": base.permute(2, 0, 1),
    }
    return base, views


def main():  # pragma: no cover - example script
    base, views = build_views()
    print("base:")
    print(base)
    for name, v in views.items():
        print(f"\n{name}: shape={v.shape} strides={v.strides} offset={v.offset}")
        print(v)

    views["select"][1, 2] = -1
    print("\nafter writing -1 through the select view:")
    print(base)


if __name__ == "__main__":  # pragma: no cover - example script
    main()
