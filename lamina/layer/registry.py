# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Worker registry for lamina.

Maps each LayerType to the Worker class that implements it. Layer.from_config
resolves its worker here, so adding a layer type means adding an enum value
and registering one Worker subclass; the dispatch itself never changes.

The registry is populated once at import time via ``_register_builtins()``
and stays deterministic afterwards.
"""

import logging

from lamina.layer.config import LayerType
from lamina.layer.exceptions import UnknownLayerTypeError
from lamina.layer.interfaces import Worker

logger = logging.getLogger(__name__)

_WORKER_REGISTRY: dict[LayerType, type[Worker]] = {}


def register_worker(layer_type: LayerType, cls: type[Worker]) -> None:
    """
    Register a Worker class for a layer type.

    Args:
        layer_type: The LayerType the class implements.
        cls: A concrete Worker subclass.

    Raises:
        ValueError: If ``layer_type`` already has a worker.
        TypeError: If ``cls`` is not a Worker subclass.
    """
    if not (isinstance(cls, type) and issubclass(cls, Worker)):
        raise TypeError(f"Worker for '{layer_type.value}' must subclass Worker, got {cls!r}")
    if layer_type in _WORKER_REGISTRY:
        raise ValueError(
            f"Layer type '{layer_type.value}' is already registered to "
            f"{_WORKER_REGISTRY[layer_type].__name__}"
        )
    _WORKER_REGISTRY[layer_type] = cls
    logger.debug("registered_worker", extra={"layer_type": layer_type.value, "cls": cls.__name__})


def get_worker(layer_type: LayerType) -> type[Worker]:
    """
    Retrieve the Worker class for a layer type.

    Raises:
        UnknownLayerTypeError: If no worker is registered for ``layer_type``.
    """
    if layer_type not in _WORKER_REGISTRY:
        available = list_worker_types()
        raise UnknownLayerTypeError(
            f"No worker registered for layer type '{layer_type.value}'. Available: {available}"
        )
    return _WORKER_REGISTRY[layer_type]


def list_worker_types() -> list[str]:
    """Return sorted list of all registered layer type names."""
    return sorted(layer_type.value for layer_type in _WORKER_REGISTRY)


_BUILTINS_REGISTERED: bool = False


def _register_builtins() -> None:
    """
    Register all built-in workers.

    Importing lamina.layers triggers each module's ``register_worker`` call.
    Idempotent.
    """
    global _BUILTINS_REGISTERED
    if _BUILTINS_REGISTERED:
        return

    import lamina.layers  # noqa: F401

    _BUILTINS_REGISTERED = True
    logger.debug("builtins_registered", extra={"layer_types": list_worker_types()})


_register_builtins()
