# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Sigmoid: element-wise logistic activation.

    top    = 1 / (1 + exp(-bottom))
    dE/dx  = dE/dy * y * (1 - y)

The gradient is computed from the stored output rather than the input, so
backward only needs the top blob.

Registered as LayerType.SIGMOID.
"""

from collections.abc import Sequence

import torch

from lamina.blob.heap import HeapBlob
from lamina.layer.config import LayerType
from lamina.layer.interfaces import Worker
from lamina.layer.registry import register_worker


class Sigmoid(Worker):
    """Element-wise sigmoid over exactly one bottom, producing one top of the same shape."""

    def reshape(self, bottom: Sequence[HeapBlob], top: Sequence[HeapBlob]) -> None:
        top[0].reshape_like(bottom[0])

    def forward_cpu(self, bottom: Sequence[HeapBlob], top: Sequence[HeapBlob]) -> None:
        torch.sigmoid(bottom[0].cpu_data(), out=top[0].mutable_cpu_data())

    def backward_cpu(
        self,
        top: Sequence[HeapBlob],
        propagate_down: Sequence[bool],
        bottom: Sequence[HeapBlob],
    ) -> None:
        if not propagate_down[0]:
            return
        output = top[0].cpu_data()
        top_diff = top[0].cpu_diff()
        bottom_diff = bottom[0].mutable_cpu_diff()
        bottom_diff.copy_(top_diff * output * (1.0 - output))

    def exact_num_bottom_blobs(self) -> int:
        return 1

    def exact_num_top_blobs(self) -> int:
        return 1


register_worker(LayerType.SIGMOID, Sigmoid)
