# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe runtime configuration schemas for lamina.

Every model here is a frozen pydantic model. Once created it cannot be
mutated; changing configuration at runtime is a bug.

The models use pydantic v2's ConfigDict with:
  - frozen=True: immutability after construction
  - extra="forbid": unknown fields cause immediate failure
  - validate_default=True: even defaults get type-checked

Layer and parameter descriptions (LayerConfig, ParamConfig) follow the same
conventions but live in lamina.layer.config, next to the code that consumes
them.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class GlobalConfig(BaseModel):
    """
    Cross-cutting settings that apply to the whole process.

    Controls reproducibility (seed), observability (log_level, log_file) and
    the default numeric type of freshly allocated blobs.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(
        description="Schema version for compatibility tracking, e.g. '1.0.0'"
    )
    project_name: str = Field(
        default="lamina", description="Human-readable project identifier"
    )
    seed: int = Field(
        default=42,
        ge=0,
        description="Global random seed applied before any blob is allocated",
    )
    log_level: str = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for file-based log output",
    )
    blob_dtype: Literal["float32", "float64"] = Field(
        default="float32",
        description="Default element type for blob data and diff buffers",
    )
