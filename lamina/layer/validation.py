# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Build-time checks used while wiring layers into a network.

Layer.forward and Layer.backward do not re-check arity on every call; a
network builder runs these once per layer after deciding how many blobs it
wires in, and rejects the configuration on the first error.
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING

from lamina.blob.shared import SharedBlob
from lamina.layer.exceptions import (
    ArityError,
    BlobAliasError,
    PropagateDownError,
)

if TYPE_CHECKING:
    from lamina.layer.core import Layer


def validate_wiring(layer: "Layer", num_bottoms: int, num_tops: int) -> None:
    """
    Check a layer's configuration against the blobs wired to it.

    Args:
        layer: The layer being wired.
        num_bottoms: Number of bottom blobs the builder connects.
        num_tops: Number of top blobs the builder connects, including any
                  anonymous tops it created.

    Raises:
        PropagateDownError: propagate_down has neither zero nor one entry per bottom.
        ArityError: The blob counts violate the worker's requirements.
    """
    config = layer.config
    worker = layer.worker

    if not config.check_propagate_down_len():
        raise PropagateDownError(
            f"Layer '{config.name}': propagate_down has {len(config.propagate_down)} "
            f"entries but the layer declares {config.bottoms_len()} bottoms"
        )

    exact_bottoms = worker.exact_num_bottom_blobs()
    if exact_bottoms > 0 and num_bottoms != exact_bottoms:
        raise ArityError(
            f"Layer '{config.name}' of type '{config.layer_type.value}' takes "
            f"{exact_bottoms} bottom blob(s), got {num_bottoms}"
        )

    exact_tops = worker.exact_num_top_blobs()
    if exact_tops > 0 and num_tops != exact_tops:
        raise ArityError(
            f"Layer '{config.name}' of type '{config.layer_type.value}' produces "
            f"{exact_tops} top blob(s), got {num_tops}"
        )

    min_tops = worker.min_top_blobs()
    if min_tops > 0 and num_tops < min_tops:
        raise ArityError(
            f"Layer '{config.name}' of type '{config.layer_type.value}' produces at "
            f"least {min_tops} top blob(s), got {num_tops}"
        )


def required_top_count(layer: "Layer") -> int:
    """
    How many tops a builder must wire for this layer.

    Declared tops count as-is. A worker with auto_top_blobs() raises the count
    to its exact or minimum requirement; the builder fills the gap with
    anonymous blobs.
    """
    declared = layer.config.tops_len()
    worker = layer.worker
    if not worker.auto_top_blobs():
        return declared
    needed = max(worker.exact_num_top_blobs(), worker.min_top_blobs())
    return max(declared, needed)


def resolve_propagate_down(
    layer: "Layer",
    bottom_needs_grad: Sequence[bool],
    force_backward: bool = False,
) -> list[bool]:
    """
    Derive the per-bottom mask passed to Layer.backward.

    An explicit propagate_down in the config wins. Otherwise a bottom
    propagates if it needs a gradient, or if force_backward is set and the
    worker allows forcing that bottom.

    Args:
        layer: The layer whose bottoms are being resolved.
        bottom_needs_grad: Per bottom, whether anything upstream needs its gradient.
        force_backward: Network-wide request to backpropagate everywhere.

    Raises:
        PropagateDownError: If a mask length disagrees with the bottom count.
    """
    config = layer.config
    if len(bottom_needs_grad) != config.bottoms_len():
        raise PropagateDownError(
            f"Layer '{config.name}': got {len(bottom_needs_grad)} need-grad flags "
            f"for {config.bottoms_len()} bottoms"
        )
    if not config.check_propagate_down_len():
        raise PropagateDownError(
            f"Layer '{config.name}': propagate_down has {len(config.propagate_down)} "
            f"entries but the layer declares {config.bottoms_len()} bottoms"
        )
    if config.propagate_down:
        return list(config.propagate_down)

    return [
        need or (force_backward and layer.worker.allow_force_backward(bottom_id))
        for bottom_id, need in enumerate(bottom_needs_grad)
    ]


def check_alias(
    layer_name: str,
    read_blobs: Sequence[SharedBlob],
    write_blobs: Sequence[SharedBlob],
) -> None:
    """
    Reject wiring that would make one invocation wait on its own lock.

    Forward reads bottoms and writes tops; backward reads tops and writes
    bottoms. A handle may appear several times on the read side, but never
    twice on the write side and never on both sides.

    Raises:
        BlobAliasError: On the first offending handle.
    """
    read_ids = {id(blob) for blob in read_blobs}
    seen: set[int] = set()
    for index, blob in enumerate(write_blobs):
        if id(blob) in read_ids:
            raise BlobAliasError(
                f"Layer '{layer_name}': blob {index} ('{blob.name}') is both read and "
                "written in one invocation; in-place computation is not supported"
            )
        if id(blob) in seen:
            raise BlobAliasError(
                f"Layer '{layer_name}': blob {index} ('{blob.name}') is written more than once"
            )
        seen.add(id(blob))
