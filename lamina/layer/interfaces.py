# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Abstract base class for layer workers.

A Worker is the numeric core of one layer type. Layer wraps it with the
invocation contract (locking, loss accumulation), so a Worker only ever sees
plain HeapBlob objects handed to it for the duration of one call:

- forward_cpu(bottom, top): read `bottom`, write `top` data.
- backward_cpu(top, propagate_down, bottom): read `top` data and diff, write
  `bottom[i]` diff for every i where `propagate_down[i]` is true. Bottoms
  whose flag is false must be left untouched.

Obligations every implementation keeps:

- No state outside the blobs it is given. A Worker has no other way to reach
  blob contents and must not cache blob objects between calls.
- Top diffs are not written during reshape or forward_cpu. For tops with a
  non-zero loss weight, Layer.set_loss_weights stores the weight in the diff
  buffer and Layer.forward reads it back as dot(data, diff).

The capability queries below are consumed by network assembly code
(see lamina.layer.validation); Layer.forward and Layer.backward never call
them.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from lamina.blob.heap import HeapBlob


class Worker(ABC):
    """Base class for all layer worker implementations."""

    def reshape(self, bottom: Sequence[HeapBlob], top: Sequence[HeapBlob]) -> None:
        """
        Size the tops from the bottoms. Called under the same locks as
        forward_cpu, immediately before it. The default does nothing.
        """

    @abstractmethod
    def forward_cpu(self, bottom: Sequence[HeapBlob], top: Sequence[HeapBlob]) -> None:
        """
        Compute the layer output.

        Args:
            bottom: Input blobs, read access only.
            top: Output blobs, already sized by reshape.
        """
        ...

    @abstractmethod
    def backward_cpu(
        self,
        top: Sequence[HeapBlob],
        propagate_down: Sequence[bool],
        bottom: Sequence[HeapBlob],
    ) -> None:
        """
        Compute gradients for the bottoms selected by `propagate_down`.

        Args:
            top: Output blobs with their diffs populated, read access only.
            propagate_down: One flag per bottom.
            bottom: Input blobs whose diffs receive the gradients.
        """
        ...

    def auto_top_blobs(self) -> bool:
        """
        Whether anonymous top blobs should be created automatically.

        If true, network assembly creates enough unnamed tops to satisfy
        exact_num_top_blobs() or min_top_blobs().
        """
        return False

    def min_top_blobs(self) -> int:
        """Minimum number of top blobs required, or 0 for no minimum."""
        return 0

    def exact_num_top_blobs(self) -> int:
        """Exact number of top blobs required, or 0 for no requirement."""
        return 0

    def exact_num_bottom_blobs(self) -> int:
        """Exact number of bottom blobs required, or 0 for no requirement."""
        return 0

    def allow_force_backward(self, bottom_id: int) -> bool:
        """
        Whether a network-wide force_backward setting applies to this bottom.

        When false, the bottom only receives gradients if it actually needs
        them, as if force_backward were off.
        """
        return True
