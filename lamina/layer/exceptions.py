# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Build-time errors for layer configuration and wiring.

All of these are recoverable: a network builder catches LayerConfigError (or
ConfigError, its base) and either rejects the configuration or reports it
per layer. Lock poisoning is a separate, fatal category; see
lamina.blob.exceptions.LockPoisonedError.
"""

from lamina.config.exceptions import ConfigError


class LayerConfigError(ConfigError):
    """Base for problems with a layer's configuration or its blob wiring."""


class ParamShareError(LayerConfigError):
    """Two layers name the same parameter but their blobs are incompatible."""


class PropagateDownError(LayerConfigError):
    """A propagate-down mask does not have one entry per bottom blob."""


class LossWeightError(LayerConfigError):
    """A loss weight vector or index does not line up with the layer's tops."""


class ArityError(LayerConfigError):
    """The number of wired blobs violates the worker's declared requirements."""


class UnknownLayerTypeError(LayerConfigError):
    """No worker is registered for the requested layer type."""


class BlobAliasError(LayerConfigError):
    """
    The same blob handle is wired into one invocation so that a thread would
    wait on a lock it already holds.
    """
