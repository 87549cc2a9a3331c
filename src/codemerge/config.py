"""Resolved runtime configuration for a merge run.

Combines CLI arguments, environment variables, .env files and the YAML
``merge`` section into one validated ``Config``.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    CODEMERGE_MERGE_COMMAND: Merge tool command line, split shell-style
        (default: ``merge``)
    CODEMERGE_DIFF_COMMAND: Diff executable (default: ``diff``)
    CODEMERGE_TEMP_DIR: Base directory for the merged tree
    CODEMERGE_MAX_PARALLEL: Files resolved concurrently, 1-64 (default: 1)
    CODEMERGE_COMMAND_TIMEOUT: Subprocess timeout in seconds (default: none)
"""

import logging
import os
import shlex
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class Config:
    merge_command: list[str] = field(default_factory=lambda: ["merge"])
    diff_command: str = "diff"
    temp_prefix: str = "merged_codebase_"
    temp_dir: str | None = None
    max_parallel: int = 1
    command_timeout: float | None = None
    debug: bool = False


def validate_config(config: Config) -> None:
    """Validate configuration values and raise ValueError if invalid.

    Args:
        config: Config instance to validate.

    Raises:
        ValueError: If a command is empty or a numeric value is out of range.
    """
    if not config.merge_command or not config.merge_command[0].strip():
        raise ValueError(
            "Merge command cannot be empty. Set CODEMERGE_MERGE_COMMAND "
            "or merge.merge_command in config.yml."
        )

    if not config.diff_command.strip():
        raise ValueError(
            "Diff command cannot be empty. Set CODEMERGE_DIFF_COMMAND "
            "or merge.diff_command in config.yml."
        )

    if not config.temp_prefix.strip():
        raise ValueError("Temporary directory prefix cannot be empty")

    if not (1 <= config.max_parallel <= 64):
        raise ValueError(
            f"Invalid max_parallel '{config.max_parallel}': "
            "must be a number between 1 and 64"
        )

    if config.command_timeout is not None and config.command_timeout <= 0:
        raise ValueError(
            f"Invalid command_timeout '{config.command_timeout}': "
            "must be a positive number of seconds"
        )


def load_config(
    merge_command: str | None = None,
    max_parallel: int | None = None,
    debug: bool = False,
    yaml_fallbacks: dict | None = None,
) -> Config:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        merge_command: Override merge command line (shell-style string).
        max_parallel: Override number of concurrently resolved files.
        debug: Enable debug logging (CLI flag).
        yaml_fallbacks: Dict of values from the YAML ``merge`` section.

    Returns:
        Validated Config instance.

    Raises:
        ValueError: If a value cannot be parsed or fails validation.
    """
    fb = yaml_fallbacks or {}

    # --- Commands: CLI > env > YAML > default ---

    raw_merge = merge_command or os.getenv("CODEMERGE_MERGE_COMMAND")
    if raw_merge:
        final_merge = shlex.split(raw_merge)
    elif fb.get("merge_command"):
        final_merge = list(fb["merge_command"])
    else:
        final_merge = ["merge"]

    final_diff = (
        os.getenv("CODEMERGE_DIFF_COMMAND")
        or fb.get("diff_command")
        or "diff"
    )
    final_prefix = fb.get("temp_prefix") or "merged_codebase_"
    final_temp_dir = os.getenv("CODEMERGE_TEMP_DIR") or fb.get("temp_dir")

    # --- Numeric fields: CLI > env > YAML > default ---

    if max_parallel is not None:
        final_max_parallel = max_parallel
    else:
        raw_parallel = os.getenv("CODEMERGE_MAX_PARALLEL")
        if raw_parallel is not None:
            try:
                final_max_parallel = int(raw_parallel)
            except ValueError:
                raise ValueError(
                    f"Invalid CODEMERGE_MAX_PARALLEL '{raw_parallel}': "
                    "must be a number between 1 and 64"
                ) from None
        else:
            final_max_parallel = int(fb.get("max_parallel", 1))

    raw_timeout = os.getenv("CODEMERGE_COMMAND_TIMEOUT")
    if raw_timeout is not None:
        try:
            final_timeout: float | None = float(raw_timeout)
        except ValueError:
            raise ValueError(
                f"Invalid CODEMERGE_COMMAND_TIMEOUT '{raw_timeout}': "
                "must be a number of seconds"
            ) from None
    elif fb.get("command_timeout") is not None:
        final_timeout = float(fb["command_timeout"])
    else:
        final_timeout = None

    config = Config(
        merge_command=final_merge,
        diff_command=final_diff,
        temp_prefix=final_prefix,
        temp_dir=final_temp_dir,
        max_parallel=final_max_parallel,
        command_timeout=final_timeout,
        debug=debug,
    )

    validate_config(config)

    return config
