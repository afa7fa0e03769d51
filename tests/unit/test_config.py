"""Tests for analysis configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest

from depgraph.config import (
    CONFIG_FILENAME,
    DEFAULT_MAX_CYCLES,
    AnalysisConfig,
    ConfigError,
    load_config,
)

if TYPE_CHECKING:
    from pathlib import Path


class TestAnalysisConfig:
    """Tests for AnalysisConfig construction."""

    def test_defaults(self) -> None:
        """Defaults match the documented baseline."""
        config = AnalysisConfig()

        assert config.max_cycles == DEFAULT_MAX_CYCLES == 100
        assert config.default_duration_days == 1.0
        assert config.hours_per_day == 8.0
        assert config.bottleneck_min_degree == 3
        assert config.min_confidence == 0.6

    def test_from_dict(self) -> None:
        """Known keys are read and coerced; unknown keys are ignored."""
        config = AnalysisConfig.from_dict(
            {"max_cycles": "25", "min_confidence": 0.75, "colour": "blue"}
        )

        assert config.max_cycles == 25
        assert config.min_confidence == 0.75

    def test_null_values_keep_defaults(self) -> None:
        """Explicit nulls in YAML fall back to defaults."""
        config = AnalysisConfig.from_dict({"hours_per_day": None})

        assert config.hours_per_day == 8.0

    def test_env_overrides_file_values(self) -> None:
        """DEPGRAPH_* environment variables take precedence."""
        with patch.dict("os.environ", {"DEPGRAPH_MAX_CYCLES": "7"}):
            config = AnalysisConfig.from_dict({"max_cycles": 50})

        assert config.max_cycles == 7

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("max_cycles", 0),
            ("hours_per_day", 0),
            ("default_duration_days", -1),
            ("min_confidence", 1.5),
        ],
    )
    def test_invalid_values(self, field: str, value: float) -> None:
        """Out-of-range values are rejected."""
        with pytest.raises(ValueError, match=field):
            AnalysisConfig(**{field: value})


class TestLoadConfig:
    """Tests for load_config."""

    def test_no_path_returns_defaults(self) -> None:
        """Without a path, defaults plus environment are returned."""
        assert load_config() == AnalysisConfig()

    def test_no_path_applies_env(self) -> None:
        """Environment overrides apply even without a file."""
        with patch.dict("os.environ", {"DEPGRAPH_MIN_CONFIDENCE": "0.8"}):
            config = load_config()

        assert config.min_confidence == 0.8

    def test_loads_analysis_section(self, tmp_path: Path) -> None:
        """The analysis section of depgraph.yaml is read."""
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("analysis:\n  max_cycles: 10\n  hours_per_day: 6\n")

        config = load_config(config_file)

        assert config.max_cycles == 10
        assert config.hours_per_day == 6.0

    def test_directory_is_searched(self, tmp_path: Path) -> None:
        """A directory is searched for depgraph.yaml."""
        (tmp_path / CONFIG_FILENAME).write_text("analysis:\n  bottleneck_min_degree: 5\n")

        assert load_config(tmp_path).bottleneck_min_degree == 5

    def test_directory_without_file_uses_defaults(self, tmp_path: Path) -> None:
        """A directory with no config file falls back to defaults."""
        assert load_config(tmp_path) == AnalysisConfig()

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        """An explicit missing file is an error."""
        with pytest.raises(ConfigError, match="File not found"):
            load_config(tmp_path / "missing.yaml")

    def test_empty_file_raises(self, tmp_path: Path) -> None:
        """An empty config file is an error."""
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("")

        with pytest.raises(ConfigError, match="Empty file"):
            load_config(config_file)

    def test_non_mapping_raises(self, tmp_path: Path) -> None:
        """The top level must be a mapping."""
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("- just\n- a list\n")

        with pytest.raises(ConfigError, match="mapping"):
            load_config(config_file)

    def test_invalid_value_raises_config_error(self, tmp_path: Path) -> None:
        """Validation failures surface as ConfigError with the path."""
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("analysis:\n  max_cycles: 0\n")

        with pytest.raises(ConfigError, match="max_cycles") as exc_info:
            load_config(config_file)

        assert exc_info.value.path == config_file

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        """Unparseable YAML surfaces as ConfigError."""
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("analysis: [unclosed\n")

        with pytest.raises(ConfigError):
            load_config(config_file)
