# Copyright (c) 2025 Soumyadip Sarkar.
# All rights reserved.
#
# This source code is licensed under the Apache-style license found in the
# LICENSE file in the root directory of this source tree.

"""Nested-bracket text rendering of tensor contents."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Tuple

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .tensor import Tensor


def _format_value(value) -> str:
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, float):
        return f"{value:.4g}"
    return str(value)


def _render_axis(
    tensor: "Tensor",
    cells: Dict[Tuple[int, ...], str],
    width: int,
    depth: int,
    index: List[int],
) -> str:
    size = tensor.shape[depth]
    if depth == tensor.ndim - 1:
        row = []
        for i in range(size):
            row.append(cells[tuple(index + [i])].rjust(width))
        return "[" + ", ".join(row) + "]"

    # Blank lines between blocks grow with the number of axes left.
    separator = "," + "\n" * (tensor.ndim - 1 - depth) + " " * (depth + 1)
    parts = [
        _render_axis(tensor, cells, width, depth + 1, index + [i])
        for i in range(size)
    ]
    return "[" + separator.join(parts) + "]"


def render(tensor: "Tensor") -> str:
    """Render ``tensor`` walking its shape, strides and offset."""

    if tensor.ndim == 0:
        return _format_value(tensor.item())

    data = tensor.storage.data
    descriptor = tensor.descriptor
    positions = descriptor.positions().tolist()
    cells: Dict[Tuple[int, ...], str] = {
        index: _format_value(data[position].item())
        for index, position in zip(descriptor.indices(), positions)
    }
    width = max((len(cell) for cell in cells.values()), default=0)
    return _render_axis(tensor, cells, width, 0, [])


def render_repr(tensor: "Tensor") -> str:
    prefix = "tensor("
    body = render(tensor)
    lines = body.split("\n")
    indented = [lines[0]] + [
        (" " * len(prefix) + line) if line else line for line in lines[1:]
    ]
    text = "\n".join(indented)
    return f"{prefix}{text}, dtype={tensor.dtype})"


__all__ = ["render", "render_repr"]
