"""Analysis configuration loading."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any

from ruamel.yaml import YAML

CONFIG_FILENAME = "depgraph.yaml"

DEFAULT_MAX_CYCLES = 100
DEFAULT_DURATION_DAYS = 1.0
DEFAULT_HOURS_PER_DAY = 8.0
DEFAULT_BOTTLENECK_MIN_DEGREE = 3
DEFAULT_MIN_CONFIDENCE = 0.6

# Environment variables take precedence over file values
ENV_OVERRIDES: dict[str, str] = {
    "max_cycles": "DEPGRAPH_MAX_CYCLES",
    "min_confidence": "DEPGRAPH_MIN_CONFIDENCE",
    "hours_per_day": "DEPGRAPH_HOURS_PER_DAY",
    "default_duration_days": "DEPGRAPH_DEFAULT_DURATION_DAYS",
    "bottleneck_min_degree": "DEPGRAPH_BOTTLENECK_MIN_DEGREE",
}


class ConfigError(Exception):
    """Raised when configuration cannot be loaded."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load config at {path}: {reason}")


@dataclass
class AnalysisConfig:
    """Tunable parameters of the analysis engine.

    Attributes:
        max_cycles: Guard on the number of elementary cycles enumerated.
        default_duration_days: Duration for items without an estimate.
        hours_per_day: Conversion from estimated hours to days.
        bottleneck_min_degree: Minimum hard degree for the top-decile
            bottleneck rule.
        min_confidence: Acceptance threshold for suggestions.
    """

    max_cycles: int = DEFAULT_MAX_CYCLES
    default_duration_days: float = DEFAULT_DURATION_DAYS
    hours_per_day: float = DEFAULT_HOURS_PER_DAY
    bottleneck_min_degree: int = DEFAULT_BOTTLENECK_MIN_DEGREE
    min_confidence: float = DEFAULT_MIN_CONFIDENCE

    def __post_init__(self) -> None:
        if self.max_cycles < 1:
            raise ValueError(f"max_cycles must be at least 1, got {self.max_cycles}")
        if self.hours_per_day <= 0:
            raise ValueError(f"hours_per_day must be positive, got {self.hours_per_day}")
        if self.default_duration_days < 0:
            raise ValueError(
                f"default_duration_days must not be negative, got {self.default_duration_days}"
            )
        if not 0.0 <= self.min_confidence <= 1.0:
            raise ValueError(f"min_confidence must be within [0, 1], got {self.min_confidence}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnalysisConfig:
        """Create config from the ``analysis`` section of a config file.

        Unknown keys are ignored. Environment overrides are applied on top.

        Args:
            data: Dictionary with any of the AnalysisConfig fields.

        Returns:
            AnalysisConfig instance.
        """
        values: dict[str, Any] = {}
        for f in fields(cls):
            if f.name in data and data[f.name] is not None:
                values[f.name] = data[f.name]
        values.update(_env_overrides())
        return cls(**_coerce(values))


def _coerce(values: dict[str, Any]) -> dict[str, Any]:
    converters = {
        "max_cycles": int,
        "bottleneck_min_degree": int,
        "default_duration_days": float,
        "hours_per_day": float,
        "min_confidence": float,
    }
    return {name: converters[name](value) for name, value in values.items()}


def _env_overrides() -> dict[str, str]:
    overrides: dict[str, str] = {}
    for name, env_var in ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value:
            overrides[name] = value
    return overrides


def load_config(path: Path | None = None) -> AnalysisConfig:
    """Load analysis configuration.

    With no path, returns defaults plus environment overrides. A directory
    is searched for ``depgraph.yaml``; a missing file in a directory falls
    back to defaults, while an explicit missing file is an error.

    Args:
        path: Config file, directory containing one, or None.

    Returns:
        AnalysisConfig instance.

    Raises:
        ConfigError: If the config cannot be loaded.
    """
    if path is None:
        return _build({}, "<defaults>")

    config_path = path / CONFIG_FILENAME if path.is_dir() else path
    if not config_path.exists():
        if path.is_dir():
            return _build({}, config_path)
        raise ConfigError(config_path, "File not found")

    yaml = YAML(typ="safe")
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.load(f)
    except Exception as e:
        raise ConfigError(config_path, str(e)) from e

    if data is None:
        raise ConfigError(config_path, "Empty file")
    if not isinstance(data, dict):
        raise ConfigError(config_path, "Top level must be a mapping")

    section = data.get("analysis", {}) or {}
    if not isinstance(section, dict):
        raise ConfigError(config_path, "'analysis' must be a mapping")
    return _build(dict(section), config_path)


def _build(data: dict[str, Any], source: Path | str) -> AnalysisConfig:
    try:
        return AnalysisConfig.from_dict(data)
    except (TypeError, ValueError) as e:
        raise ConfigError(source, str(e)) from e
