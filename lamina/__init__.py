# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
lamina: the layer-execution core of a small neural-network framework.

Layers transform shared, lock-guarded blobs in a forward pass and propagate
gradients in a backward pass. Graph assembly and scheduling belong to the
caller; this package supplies the per-layer contract they rely on.
"""

__version__ = "0.1.0"
