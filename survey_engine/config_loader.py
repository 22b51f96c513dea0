"""
YAML Run Configuration Loader
=============================

Loads cleaning, weight and analysis settings from a YAML file.

Example file:

    cleaning:
      imputation:
        method: median
        columns: [income, age]
      outliers:
        method: winsorization
        threshold: {lower: 0.05, upper: 0.95}
        action: cap
        columns: [income]
      rules:
        - {column: age, condition: greater-than, value: 0, action: remove}
    weights:
      weightColumn: wt
    analysis:
      targetColumns: [income]
      confidenceLevel: 0.95
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Union

import yaml

from .exceptions import ConfigError
from .models import AnalysisConfig, CleaningConfig, WeightConfig

logger = logging.getLogger(__name__)

SECTIONS = {"cleaning", "weights", "analysis"}


@dataclass(frozen=True)
class RunConfig:
    """All three configuration sections of one run."""

    cleaning: CleaningConfig = field(default_factory=CleaningConfig)
    weights: WeightConfig = field(default_factory=WeightConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)


def parse_run_config(data: Mapping[str, Any]) -> RunConfig:
    """
    Build a RunConfig from an in-memory mapping.

    Args:
        data: Mapping with optional 'cleaning', 'weights', 'analysis' sections

    Returns:
        RunConfig

    Raises:
        ConfigError: If the mapping has unknown sections or invalid values
    """
    if not isinstance(data, Mapping):
        raise ConfigError(f"Run configuration must be a mapping, got {type(data).__name__}")

    unknown = set(data) - SECTIONS
    if unknown:
        raise ConfigError(f"Unknown configuration sections: {sorted(unknown)}. Available: {sorted(SECTIONS)}")

    return RunConfig(
        cleaning=CleaningConfig.from_dict(data.get("cleaning")),
        weights=WeightConfig.from_dict(data.get("weights")),
        analysis=AnalysisConfig.from_dict(data.get("analysis")),
    )


def load_config_file(filepath: Union[str, Path]) -> RunConfig:
    """
    Load a YAML run configuration.

    Args:
        filepath: Path to the YAML file

    Returns:
        RunConfig

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    filepath = Path(filepath)
    try:
        with open(filepath) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {filepath}: {e}") from e
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {filepath}") from e
    except OSError as e:
        raise ConfigError(f"Error loading {filepath}: {e}") from e

    logger.info(f"Loaded run configuration from {filepath}")
    return parse_run_config(data)
