# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Layer: the runtime instance of one LayerConfig.

A Layer binds an immutable LayerConfig to the Worker registered for its
type, and owns the state a network needs around that worker:

  - `loss`: one weight per declared top. A top contributes to the objective
    only when its weight is non-zero.
  - `blobs`: the learnable parameter blobs, as SharedBlob handles that other
    layers may hold too.
  - `param_propagate_down`: per parameter, whether its gradient is computed.

Invocation contract of `forward`:
  1. Read-lock every bottom, in declared order.
  2. Write-lock every top, in declared order.
  3. worker.reshape; a loss-weighted top whose element count changed gets
     its weight written back into the new diff; then worker.forward_cpu.
  4. Release every lock.
  5. For each loss-weighted top, read-lock it again and add dot(data, diff).

Bottoms are fully acquired before any top, and tops are released before
the loss pass reads them, so a worker never observes its own in-progress
output. Lock order across layers is the driver's responsibility.
"""

import logging
from collections.abc import Sequence
from contextlib import ExitStack
from typing import Optional

from lamina.blob.heap import HeapBlob
from lamina.blob.math import cpu_dot
from lamina.blob.shared import SharedBlob
from lamina.layer.config import LayerConfig, LayerType
from lamina.layer.exceptions import LossWeightError, PropagateDownError
from lamina.layer.interfaces import Worker
from lamina.layer.registry import get_worker
from lamina.layer.validation import check_alias, validate_wiring

logger = logging.getLogger(__name__)


class Layer:
    """
    A configured computational unit with forward and backward behavior.

    Use Layer.from_config; the constructor is for callers that already hold
    a worker instance.

    Args:
        config: The layer's frozen configuration.
        worker: The numeric implementation for config.layer_type.
    """

    def __init__(self, config: LayerConfig, worker: Worker) -> None:
        if not config.check_loss_weights_len():
            raise LossWeightError(
                f"Layer '{config.name}': loss_weights has {len(config.loss_weights)} "
                f"entries but the layer declares {config.tops_len()} tops"
            )
        self._config = config
        self._worker = worker
        self._loss: list[float] = list(config.loss_weights) or [0.0] * config.tops_len()
        self._param_propagate_down: list[bool] = []
        self.blobs: list[SharedBlob] = []

    @classmethod
    def from_config(cls, config: LayerConfig) -> "Layer":
        """
        Build a Layer, selecting the worker registered for its type.

        Raises:
            UnknownLayerTypeError: If no worker is registered for config.layer_type.
            LossWeightError: If config.loss_weights does not match the top count.
        """
        worker_cls = get_worker(config.layer_type)
        layer = cls(config, worker_cls())
        logger.debug(
            "layer_created",
            extra={
                "layer": config.name,
                "layer_type": config.layer_type.value,
                "worker": worker_cls.__name__,
                "bottoms": list(config.bottoms),
                "tops": list(config.tops),
            },
        )
        return layer

    @property
    def config(self) -> LayerConfig:
        return self._config

    @property
    def worker(self) -> Worker:
        return self._worker

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def layer_type(self) -> LayerType:
        return self._config.layer_type

    # ── Loss weights ────────────────────────────────────────────────────────

    def loss(self, top_id: int) -> Optional[float]:
        """Loss weight of a top, or None if top_id is out of range."""
        if 0 <= top_id < len(self._loss):
            return self._loss[top_id]
        return None

    def set_loss(self, top_id: int, weight: float) -> None:
        """
        Set the loss weight of a declared top.

        Raises:
            LossWeightError: If top_id is not a declared top.
        """
        if not 0 <= top_id < len(self._loss):
            raise LossWeightError(
                f"Layer '{self.name}' has {len(self._loss)} tops; cannot set loss for top {top_id}"
            )
        self._loss[top_id] = float(weight)

    def set_loss_weights(self, tops: Sequence[SharedBlob]) -> None:
        """
        Store each loss-weighted top's weight in its diff buffer.

        Layer.forward computes a top's contribution as dot(data, diff), so
        this must run after the tops have their final shape and before the
        first forward. Tops with a zero or undefined weight are not touched.
        """
        for top_id, top in enumerate(tops):
            weight = self.loss(top_id)
            if not weight:
                continue
            with top.write() as blob:
                blob.mutable_cpu_diff().fill_(weight)

    def _restore_loss_weights(
        self, counts: Sequence[int], top_blobs: Sequence[HeapBlob]
    ) -> None:
        # A count-changing reshape reallocates the diff zero-filled.
        for top_id, (count, blob) in enumerate(zip(counts, top_blobs)):
            weight = self.loss(top_id)
            if weight and blob.capacity() != count:
                blob.mutable_cpu_diff().fill_(weight)

    # ── Parameter gradients ─────────────────────────────────────────────────

    def set_param_propagate_down(self, param_id: int, value: bool) -> None:
        """
        Enable or disable gradient computation for one parameter blob.

        Grows the flag vector as needed; every slot created by the growth
        other than `param_id` itself starts out enabled.
        """
        if param_id < 0:
            raise IndexError(f"param_id must be non-negative, got {param_id}")
        if len(self._param_propagate_down) <= param_id:
            missing = param_id + 1 - len(self._param_propagate_down)
            self._param_propagate_down.extend([True] * missing)
        self._param_propagate_down[param_id] = value

    def param_propagate_down(self, param_id: int) -> Optional[bool]:
        """Whether a parameter's gradient is computed, or None if never set."""
        if 0 <= param_id < len(self._param_propagate_down):
            return self._param_propagate_down[param_id]
        return None

    # ── Invocation ──────────────────────────────────────────────────────────

    def setup(self, bottoms: Sequence[SharedBlob], tops: Sequence[SharedBlob]) -> None:
        """
        Validate wiring, size the tops, and store the loss weights.

        Called once by the network builder after connecting blobs. Aliasing
        is checked for both directions, so a bottom wired twice is rejected
        here rather than on the first backward, which writes every bottom.

        Raises:
            LayerConfigError: Any wiring or configuration problem.
            LockPoisonedError: If a wired blob is poisoned.
        """
        validate_wiring(self, len(bottoms), len(tops))
        check_alias(self.name, bottoms, tops)
        check_alias(self.name, tops, bottoms)
        with ExitStack() as stack:
            bottom_blobs = [stack.enter_context(blob.read()) for blob in bottoms]
            top_blobs = [stack.enter_context(blob.write()) for blob in tops]
            self._worker.reshape(bottom_blobs, top_blobs)
        self.set_loss_weights(tops)
        logger.debug(
            "layer_setup",
            extra={"layer": self.name, "loss_weights": list(self._loss)},
        )

    def forward(self, bottoms: Sequence[SharedBlob], tops: Sequence[SharedBlob]) -> float:
        """
        Run the worker's forward pass and return this layer's loss.

        Args:
            bottoms: Input handles, in declared order.
            tops: Output handles, in declared order.

        Returns:
            Sum of dot(data, diff) over the tops with a non-zero loss weight.

        Raises:
            BlobAliasError: If a top is also a bottom or appears twice.
            LockPoisonedError: If any blob is poisoned. Fatal.
        """
        check_alias(self.name, bottoms, tops)

        with ExitStack() as stack:
            bottom_blobs = [stack.enter_context(blob.read()) for blob in bottoms]
            top_blobs = [stack.enter_context(blob.write()) for blob in tops]
            counts = [blob.capacity() for blob in top_blobs]
            self._worker.reshape(bottom_blobs, top_blobs)
            self._restore_loss_weights(counts, top_blobs)
            self._worker.forward_cpu(bottom_blobs, top_blobs)

        loss = 0.0
        for top_id, top in enumerate(tops):
            if not self.loss(top_id):
                continue
            with top.read() as blob:
                loss += cpu_dot(blob.cpu_data(), blob.cpu_diff())

        logger.debug("layer_forward", extra={"layer": self.name, "loss": loss})
        return loss

    def backward(
        self,
        tops: Sequence[SharedBlob],
        propagate_down: Sequence[bool],
        bottoms: Sequence[SharedBlob],
    ) -> None:
        """
        Run the worker's backward pass.

        Args:
            tops: Output handles with populated diffs.
            propagate_down: Resolved mask, one flag per bottom.
            bottoms: Input handles whose diffs receive gradients.

        Raises:
            PropagateDownError: If the mask length differs from the bottom count.
            BlobAliasError: If a bottom is also a top or appears twice.
            LockPoisonedError: If any blob is poisoned. Fatal.
        """
        if len(propagate_down) != len(bottoms):
            raise PropagateDownError(
                f"Layer '{self.name}': got {len(propagate_down)} propagate_down flags "
                f"for {len(bottoms)} bottoms"
            )
        check_alias(self.name, tops, bottoms)

        with ExitStack() as stack:
            top_blobs = [stack.enter_context(blob.read()) for blob in tops]
            bottom_blobs = [stack.enter_context(blob.write()) for blob in bottoms]
            self._worker.backward_cpu(top_blobs, list(propagate_down), bottom_blobs)

        logger.debug(
            "layer_backward",
            extra={"layer": self.name, "propagate_down": list(propagate_down)},
        )

    def __repr__(self) -> str:
        return (
            f"Layer(name={self.name!r}, type={self.layer_type.value!r}, "
            f"worker={type(self._worker).__name__})"
        )
