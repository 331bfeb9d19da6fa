# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Layer execution core.

Layer wraps a Worker with the invocation contract: batch locking of shared
blobs, loss accumulation over weighted tops, and per-parameter backprop
flags. LayerConfig and ParamConfig describe layers; the registry maps each
LayerType to its Worker.
"""

from lamina.layer.config import DimCheckMode, LayerConfig, LayerType, ParamConfig
from lamina.layer.core import Layer
from lamina.layer.interfaces import Worker

__all__ = ["DimCheckMode", "Layer", "LayerConfig", "LayerType", "ParamConfig", "Worker"]
