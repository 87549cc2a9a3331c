"""Unified configuration schema for codemerge.

Defines Pydantic models for the config file structure with dedicated
sections for the merge tooling and logging.

Usage:
    from codemerge.config_schema import UnifiedConfig, build_config

    raw = load_hierarchical_config()
    unified = build_config(raw)
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class MergeConfig(BaseModel):
    """External tool and merge-run settings.

    All fields have defaults so that a host with RCS ``merge`` and
    ``diff`` on ``PATH`` needs no configuration at all.
    """

    merge_command: list[str] = Field(
        default_factory=lambda: ["merge"],
        min_length=1,
        description="RCS-merge compatible command (executable plus leading args)",
    )
    diff_command: str = Field(
        default="diff", description="Line-oriented diff executable"
    )
    temp_prefix: str = Field(
        default="merged_codebase_",
        min_length=1,
        description="Name prefix of the merged-tree directory",
    )
    temp_dir: str | None = Field(
        default=None,
        description="Base directory for the merged tree (default: system temp)",
    )
    max_parallel: int = Field(
        default=1,
        ge=1,
        le=64,
        description="Files resolved concurrently (1-64)",
    )
    command_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Seconds before a diff/merge subprocess is abandoned",
    )

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
    """

    level: str = Field(default="WARNING", description="Log level")
    file: str | None = Field(default=None, description="Log file path")

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level unified configuration.

    Every section has sensible defaults, so ``UnifiedConfig()``
    (zero-config) is always valid.
    """

    merge: MergeConfig = Field(default_factory=MergeConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the raw dict returned by
    ``load_hierarchical_config()``.

    Handles missing sections gracefully, anything absent gets defaults.

    Args:
        raw_data: Merged configuration dictionary.

    Returns:
        Validated ``UnifiedConfig`` instance.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)
