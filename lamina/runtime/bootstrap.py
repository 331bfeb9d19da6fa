# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Runtime bootstrap for lamina.

One-time setup that a driver runs before constructing any layer:
  1. Validate the environment (Python version)
  2. Set deterministic seeds
  3. Set the default blob element type
  4. Initialize the "lamina" logger

After bootstrap completes, every HeapBlob allocated without an explicit
dtype uses the configured element type, and every `lamina.*` module logger
emits JSON through the configured handlers.
"""

import logging
import os
import random
from pathlib import Path

import torch

from lamina.config.schema import GlobalConfig
from lamina.logging.logger import get_logger
from lamina.runtime.environment import check_minimum_python, get_system_info

_DTYPES: dict[str, torch.dtype] = {
    "float32": torch.float32,
    "float64": torch.float64,
}


def resolve_dtype(name: str) -> torch.dtype:
    """
    Map a config-level dtype name to the torch dtype.

    Raises:
        ValueError: If the name is not a supported blob element type.
    """
    if name not in _DTYPES:
        raise ValueError(f"Unsupported blob dtype '{name}'. Available: {sorted(_DTYPES)}")
    return _DTYPES[name]


def set_deterministic_seed(seed: int) -> None:
    """
    Lock down the sources of randomness used when filling blobs.

    Sets Python's random seed, PYTHONHASHSEED, and the torch CPU generator.

    Args:
        seed: Integer seed value. Must be >= 0.
    """
    random.seed(seed)
    os.environ["PYTHONHASHSEED"] = str(seed)
    torch.manual_seed(seed)


def bootstrap(config: GlobalConfig) -> logging.Logger:
    """
    Run the full bootstrap sequence.

    Args:
        config: The validated global configuration.

    Returns:
        The configured "lamina" root logger.
    """
    check_minimum_python()
    set_deterministic_seed(config.seed)
    torch.set_default_dtype(resolve_dtype(config.blob_dtype))

    log_file = None
    if config.log_file is not None:
        log_file = Path(config.log_file)

    logger = get_logger("lamina", log_level=config.log_level, log_file=log_file)

    system_info = get_system_info()
    logger.info(
        "bootstrap_complete",
        extra={
            "seed": config.seed,
            "blob_dtype": config.blob_dtype,
            "python_version": system_info.python_version,
            "torch_version": system_info.torch_version,
            "platform": system_info.platform,
        },
    )
    return logger
