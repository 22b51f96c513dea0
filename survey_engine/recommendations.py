"""
Recommendations - Starting configurations derived from the dataset

Mirrors the defaults the upload screen fills in: knn imputation on every
column, 5%/95% winsorization capping on numeric columns, a weight column
picked by name, and stratification, target and grouping columns picked
from the first 100 rows.
"""

from __future__ import annotations

import logging
import re
from typing import List, Tuple

from .config import CLASSIFICATION_SAMPLE_SIZE
from .dataset import TabularDataset, is_numeric_column
from .models import (
    AnalysisConfig,
    CleaningConfig,
    ImputationMethod,
    ImputationSpec,
    OutlierAction,
    WeightConfig,
    WinsorizationSpec,
)

logger = logging.getLogger(__name__)

WEIGHT_PATTERN = re.compile(r"weight|wt|w_|sampling|survey", re.IGNORECASE)
ID_PATTERN = re.compile(r"id|identifier|key|index", re.IGNORECASE)

MAX_STRATIFICATION = 3
MAX_TARGETS = 5
MAX_GROUP_BY = 2
MAX_STRATA_LEVELS = 20
STRATA_UNIQUE_RATIO = 0.2


def weight_candidates(dataset: TabularDataset) -> List[str]:
    return [h for h in dataset.headers if WEIGHT_PATTERN.search(h)]


def stratification_candidates(dataset: TabularDataset) -> List[str]:
    """
    Columns that look categorical in the first 100 rows.

    A column qualifies with more than one and fewer than 20 distinct
    values, and fewer distinct values than 20% of the sampled rows.
    """
    sample = dataset.rows[:CLASSIFICATION_SAMPLE_SIZE]
    candidates = []
    for header in dataset.headers:
        n_unique = len({row[header] for row in sample})
        if 1 < n_unique < MAX_STRATA_LEVELS and n_unique < len(sample) * STRATA_UNIQUE_RATIO:
            candidates.append(header)
    return candidates[:MAX_STRATIFICATION]


def target_candidates(dataset: TabularDataset) -> List[str]:
    """Numeric columns that are neither weights nor identifiers."""
    weights = set(weight_candidates(dataset))
    targets = [
        h for h in dataset.numeric_columns()
        if h not in weights and not ID_PATTERN.search(h)
    ]
    return targets[:MAX_TARGETS]


def default_cleaning_config(dataset: TabularDataset) -> CleaningConfig:
    return CleaningConfig(
        imputation=ImputationSpec(method=ImputationMethod.KNN, columns=dataset.headers),
        outliers=WinsorizationSpec(
            columns=[h for h in dataset.headers if is_numeric_column(dataset.column(h))],
            action=OutlierAction.CAP,
        ),
    )


def suggest_configs(dataset: TabularDataset) -> Tuple[CleaningConfig, WeightConfig, AnalysisConfig]:
    """
    Suggest a full set of configurations for a freshly loaded dataset.

    Args:
        dataset: Raw dataset

    Returns:
        (cleaning config, weight config, analysis config)
    """
    weights = weight_candidates(dataset)
    strata = stratification_candidates(dataset)

    weight_config = WeightConfig(
        weight_column=weights[0] if weights else None,
        stratification_columns=strata,
    )
    analysis_config = AnalysisConfig(
        target_columns=target_candidates(dataset),
        confidence_level=0.95,
        group_by_columns=strata[:MAX_GROUP_BY],
    )

    logger.info(
        f"Suggested weight={weight_config.weight_column}, "
        f"targets={list(analysis_config.target_columns)}, strata={strata}"
    )
    return default_cleaning_config(dataset), weight_config, analysis_config
