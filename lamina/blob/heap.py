# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
HeapBlob: a host-memory tensor pair (data + diff) backed by torch.

A blob owns two buffers of identical shape: `data` holds the values a layer
produces or consumes, `diff` holds the gradient with respect to those values.
Every method that changes the shape swaps both buffers together, so the two
can never disagree.

The read accessors (`cpu_data`, `cpu_diff`) and the mutable ones
(`mutable_cpu_data`, `mutable_cpu_diff`) return the same tensors. Which one a
caller may use is decided by the lock it holds on the surrounding SharedBlob,
not by torch.
"""

import math
from collections.abc import Sequence
from typing import Optional

import torch


class HeapBlob:
    """
    CPU-resident blob with equal-shaped data and diff tensors.

    Args:
        shape: Dimensions of the blob. An empty shape holds no elements.
        dtype: Element type. Defaults to torch's current default dtype.
    """

    __slots__ = ("_shape", "_data", "_diff", "_dtype")

    def __init__(self, shape: Sequence[int] = (), dtype: Optional[torch.dtype] = None) -> None:
        self._dtype = dtype if dtype is not None else torch.get_default_dtype()
        self._shape: list[int] = []
        self._data = torch.zeros(0, dtype=self._dtype)
        self._diff = torch.zeros(0, dtype=self._dtype)
        self.reshape(shape)

    @classmethod
    def from_tensor(cls, values: torch.Tensor) -> "HeapBlob":
        """Build a blob whose data is a copy of `values` and whose diff is zero."""
        blob = cls(list(values.shape), dtype=values.dtype)
        blob.mutable_cpu_data().copy_(values)
        return blob

    @property
    def dtype(self) -> torch.dtype:
        return self._dtype

    def shape(self) -> list[int]:
        """Return a copy of the blob's dimensions."""
        return list(self._shape)

    def capacity(self) -> int:
        """Total number of elements; zero for a blob with an empty shape."""
        if not self._shape:
            return 0
        return math.prod(self._shape)

    def shape_string(self) -> str:
        """Human-readable shape, e.g. ``"2 3 4 (24)"``."""
        dims = " ".join(str(dim) for dim in self._shape)
        return f"{dims} ({self.capacity()})".lstrip()

    def reshape(self, shape: Sequence[int]) -> None:
        """
        Change the blob's dimensions.

        A reshape that keeps the element count keeps both buffers' contents.
        Any other reshape reallocates data and diff, zero-filled.

        Raises:
            ValueError: If any dimension is negative.
        """
        new_shape = [int(dim) for dim in shape]
        if any(dim < 0 for dim in new_shape):
            raise ValueError(f"Blob dimensions must be non-negative, got {new_shape}")

        new_count = math.prod(new_shape) if new_shape else 0
        view_shape = new_shape if new_shape else [0]
        if new_count == self._data.numel():
            self._data = self._data.reshape(view_shape)
            self._diff = self._diff.reshape(view_shape)
        else:
            self._data = torch.zeros(view_shape, dtype=self._dtype)
            self._diff = torch.zeros(view_shape, dtype=self._dtype)
        self._shape = new_shape

    def reshape_like(self, other: "HeapBlob") -> None:
        self.reshape(other.shape())

    def cpu_data(self) -> torch.Tensor:
        return self._data

    def cpu_diff(self) -> torch.Tensor:
        return self._diff

    def mutable_cpu_data(self) -> torch.Tensor:
        return self._data

    def mutable_cpu_diff(self) -> torch.Tensor:
        return self._diff

    def __repr__(self) -> str:
        return f"HeapBlob(shape=[{self.shape_string()}], dtype={self._dtype})"
