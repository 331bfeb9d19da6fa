# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Layer and parameter configuration for lamina.

These are frozen pydantic models, the same as the runtime config schemas:
once a LayerConfig exists, nothing can change it, so every Layer built from
it sees the same description for its whole life. Sequences are stored as
tuples for the same reason.

Construction accepts some inconsistent configurations on purpose. A
propagate_down mask or loss weight vector of the wrong length is a
validation error the network builder detects through the explicit
`check_*` methods, not a construction failure.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from lamina.blob.heap import HeapBlob
from lamina.layer.exceptions import ParamShareError


class LayerType(str, Enum):
    """Closed set of layer types. Each value has exactly one registered Worker."""

    SIGMOID = "sigmoid"


class DimCheckMode(str, Enum):
    """How strictly a shared parameter's blobs must agree."""

    STRICT = "strict"
    """Shapes must match dimension by dimension."""

    PERMISSIVE = "permissive"
    """Only the total element count must match."""


class ParamConfig(BaseModel):
    """
    Training settings for one learnable parameter blob of a layer.

    Multipliers scale the global learning rate and weight decay. A non-empty
    `name` makes the parameter shareable: every layer declaring the same name
    uses one underlying blob, checked for compatibility with `share_mode`.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    name: str = Field(default="", description="Sharing name; empty means unshared")
    share_mode: DimCheckMode = Field(
        default=DimCheckMode.STRICT,
        description="Shape compatibility required between sharing layers",
    )
    lr_mult: Optional[float] = Field(
        default=None, description="Multiplier on the global learning rate"
    )
    decay_mult: Optional[float] = Field(
        default=None, description="Multiplier on the global weight decay"
    )

    @property
    def is_shared(self) -> bool:
        return self.name != ""

    @property
    def effective_lr_mult(self) -> float:
        """The learning rate multiplier, or 1.0 when unset."""
        return 1.0 if self.lr_mult is None else self.lr_mult

    @property
    def effective_decay_mult(self) -> float:
        """The weight decay multiplier, or 1.0 when unset."""
        return 1.0 if self.decay_mult is None else self.decay_mult

    def check_dimensions(
        self,
        blob_one: HeapBlob,
        blob_two: HeapBlob,
        param_name: str,
        owner_name: str,
        layer_name: str,
    ) -> None:
        """
        Verify two blobs may back the same shared parameter.

        Args:
            blob_one: The sharing layer's expected parameter blob.
            blob_two: The owner layer's parameter blob.
            param_name: Sharing name of the parameter.
            owner_name: Name of the layer that owns the parameter.
            layer_name: Name of the layer that wants to share it.

        Raises:
            ParamShareError: On a count mismatch (PERMISSIVE) or a shape
                mismatch (STRICT).
        """
        if self.share_mode is DimCheckMode.PERMISSIVE:
            if blob_one.capacity() != blob_two.capacity():
                raise ParamShareError(
                    f"Cannot share param '{param_name}' owned by layer '{owner_name}' "
                    f"with layer '{layer_name}'; count mismatch. "
                    f"Owner layer param shape is {blob_two.shape_string()}; "
                    f"sharing layer param shape is {blob_one.shape_string()}"
                )
        elif blob_one.shape() != blob_two.shape():
            raise ParamShareError(
                f"Cannot share param '{param_name}' owned by layer '{owner_name}' "
                f"with layer '{layer_name}'; shape mismatch. "
                f"Owner layer param shape is {blob_two.shape_string()}; "
                f"sharing layer expects param shape {blob_one.shape_string()}"
            )


class LayerConfig(BaseModel):
    """
    Immutable description of one layer instance.

    `tops` and `bottoms` hold the declared blob names in wiring order.
    `params` is index-aligned with the layer's parameter blobs.
    `propagate_down` is empty (propagate to every bottom) or has one flag per
    bottom. `loss_weights` is empty (no top contributes to the loss) or has
    one weight per top.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    name: str = Field(description="Unique layer name within a network")
    layer_type: LayerType = Field(description="Selects the Worker implementation")
    tops: tuple[str, ...] = Field(default=(), description="Output blob names")
    bottoms: tuple[str, ...] = Field(default=(), description="Input blob names")
    params: tuple[ParamConfig, ...] = Field(default=(), description="Per-parameter settings")
    propagate_down: tuple[bool, ...] = Field(
        default=(), description="Per-bottom backprop switch; empty means all"
    )
    loss_weights: tuple[float, ...] = Field(
        default=(), description="Per-top weight in the objective; empty means none"
    )

    def top(self, top_id: int) -> Optional[str]:
        """Name of the requested top blob, or None if out of range."""
        if 0 <= top_id < len(self.tops):
            return self.tops[top_id]
        return None

    def tops_len(self) -> int:
        return len(self.tops)

    def bottom(self, bottom_id: int) -> Optional[str]:
        """Name of the requested bottom blob, or None if out of range."""
        if 0 <= bottom_id < len(self.bottoms):
            return self.bottoms[bottom_id]
        return None

    def bottoms_len(self) -> int:
        return len(self.bottoms)

    def param(self, param_id: int) -> Optional[ParamConfig]:
        """The requested ParamConfig, or None if out of range."""
        if 0 <= param_id < len(self.params):
            return self.params[param_id]
        return None

    def params_len(self) -> int:
        return len(self.params)

    def check_propagate_down_len(self) -> bool:
        """True if propagate_down is empty or has one entry per bottom."""
        return not self.propagate_down or len(self.propagate_down) == len(self.bottoms)

    def check_loss_weights_len(self) -> bool:
        """True if loss_weights is empty or has one entry per top."""
        return not self.loss_weights or len(self.loss_weights) == len(self.tops)
