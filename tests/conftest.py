# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for lamina tests.

Fixtures here are available to every test file automatically.
"""

import pytest
import torch

from lamina.blob.shared import SharedBlob
from lamina.layer.config import LayerConfig, LayerType


@pytest.fixture()
def sigmoid_config() -> LayerConfig:
    """A one-in, one-out sigmoid layer with no loss weight."""
    return LayerConfig(
        name="sig1",
        layer_type=LayerType.SIGMOID,
        bottoms=("data",),
        tops=("prob",),
    )


@pytest.fixture()
def input_blob() -> SharedBlob:
    """A 2x3 input blob with known values."""
    blob = SharedBlob.new((2, 3), name="data", dtype=torch.float32)
    with blob.write() as b:
        b.mutable_cpu_data().copy_(
            torch.tensor([[-2.0, -1.0, 0.0], [0.5, 1.0, 3.0]], dtype=torch.float32)
        )
    return blob
