"""Tests for codemerge.config_schema -- Pydantic config models."""

import pytest
from pydantic import ValidationError

from codemerge.config_schema import (
    LoggingConfig,
    MergeConfig,
    UnifiedConfig,
    build_config,
)


class TestMergeConfig:
    def test_defaults(self):
        cfg = MergeConfig()
        assert cfg.merge_command == ["merge"]
        assert cfg.diff_command == "diff"
        assert cfg.temp_prefix == "merged_codebase_"
        assert cfg.max_parallel == 1
        assert cfg.command_timeout is None

    def test_empty_merge_command_rejected(self):
        with pytest.raises(ValidationError):
            MergeConfig(merge_command=[])

    @pytest.mark.parametrize("value", [0, 65])
    def test_max_parallel_bounds(self, value):
        with pytest.raises(ValidationError):
            MergeConfig(max_parallel=value)

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            MergeConfig(command_timeout=0)

    def test_frozen(self):
        cfg = MergeConfig()
        with pytest.raises(ValidationError):
            cfg.max_parallel = 4


class TestLoggingConfig:
    def test_default_level_matches_setup_logging(self):
        assert LoggingConfig().level == "WARNING"
        assert LoggingConfig().file is None


class TestBuildConfig:
    def test_empty_gives_defaults(self):
        assert build_config({}) == UnifiedConfig()

    def test_partial_sections(self):
        unified = build_config({"merge": {"max_parallel": 4}})
        assert unified.merge.max_parallel == 4
        assert unified.logging == LoggingConfig()

    def test_logging_section(self):
        unified = build_config(
            {"logging": {"level": "DEBUG", "file": "/tmp/cm.log"}}
        )
        assert unified.logging.level == "DEBUG"
        assert unified.logging.file == "/tmp/cm.log"

    def test_invalid_value_raises(self):
        with pytest.raises(ValidationError):
            build_config({"merge": {"max_parallel": "lots"}})

    def test_model_dump_feeds_load_config(self):
        unified = build_config({"merge": {"diff_command": "gdiff"}})
        dumped = unified.merge.model_dump()
        assert dumped["diff_command"] == "gdiff"
        assert dumped["merge_command"] == ["merge"]
