# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Numeric primitives over blob buffers."""

import torch


def cpu_dot(a: torch.Tensor, b: torch.Tensor) -> float:
    """
    Dot product of two buffers treated as flat sequences.

    Args:
        a: First buffer, any shape.
        b: Second buffer, any shape, same element count as `a`.

    Returns:
        The scalar sum of element-wise products as a Python float.

    Raises:
        ValueError: If the element counts differ.
    """
    if a.numel() != b.numel():
        raise ValueError(f"cpu_dot length mismatch: {a.numel()} vs {b.numel()}")
    if a.numel() == 0:
        return 0.0
    return float(torch.dot(a.reshape(-1), b.reshape(-1).to(a.dtype)))
