# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Built-in worker implementations.

Importing this package registers every built-in Worker with the registry.
"""

from lamina.layers.sigmoid import Sigmoid

__all__ = ["Sigmoid"]
