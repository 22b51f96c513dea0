"""
Estimation - Weighted point estimates with confidence intervals
"""

from typing import List, Optional, Sequence, Tuple
import logging
import math

import numpy as np
from scipy import stats

from ..config import T_CRITICAL_FLOOR, T_CRITICAL_TABLE
from ..dataset import Row, parse_number
from ..exceptions import ConfigError, EmptyColumnError
from ..models import EstimateResult

logger = logging.getLogger(__name__)

CRITICAL_VALUE_METHODS = ("table", "student-t")


def t_critical_table(degrees_of_freedom: int) -> float:
    """
    Coarse critical value lookup by degrees of freedom.

    The confidence level is not an input: the table approximates the 95%
    two-sided value in four steps.
    """
    for min_df, value in T_CRITICAL_TABLE:
        if degrees_of_freedom >= min_df:
            return value
    return T_CRITICAL_FLOOR


def t_critical_exact(degrees_of_freedom: int, confidence_level: float) -> float:
    """Two-sided Student-t critical value for the given level."""
    if degrees_of_freedom < 1:
        return float("inf")
    alpha = 1.0 - confidence_level
    return float(stats.t.ppf(1.0 - alpha / 2.0, degrees_of_freedom))


def weighted_mean(values: np.ndarray, weights: np.ndarray) -> float:
    return float(np.sum(values * weights) / np.sum(weights))


def standard_error(values: np.ndarray, weights: np.ndarray, mean: float) -> float:
    """
    sqrt(sum(w * (v - mean)^2) / sum(w) / n)

    The weighted variance is divided by the total weight and again by the
    number of observations.
    """
    variance = np.sum(weights * (values - mean) ** 2) / np.sum(weights)
    return float(math.sqrt(variance / len(values)))


class EstimationEngine:
    """
    Weighted mean, standard error and confidence interval per target column.

    Degrees of freedom come from the total cleaned row count and are shared
    by every target, whatever each target's own sample size.

    Usage:
        engine = EstimationEngine()
        results = engine.estimate(rows, ["income", "age"], weight_column="wt")
    """

    def __init__(self, critical_value: str = "table"):
        """
        Initialize the engine.

        Args:
            critical_value: 'table' for the fixed df step table (confidence
                level ignored) or 'student-t' for scipy's exact quantile
        """
        if critical_value not in CRITICAL_VALUE_METHODS:
            raise ConfigError(
                f"Unknown critical value method: {critical_value}. "
                f"Available: {list(CRITICAL_VALUE_METHODS)}"
            )
        self.critical_value = critical_value

    def critical(self, degrees_of_freedom: int, confidence_level: float) -> float:
        if self.critical_value == "student-t":
            return t_critical_exact(degrees_of_freedom, confidence_level)
        return t_critical_table(degrees_of_freedom)

    @staticmethod
    def observations(
        rows: Sequence[Row],
        column: str,
        weight_column: Optional[str] = None
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Build (value, weight) arrays for one column.

        Rows whose value does not parse are dropped. A weight that is unset,
        unparseable or zero counts as 1; rows are never dropped for their
        weight.
        """
        values, weights = [], []
        for row in rows:
            value = parse_number(row[column])
            if value is None:
                continue
            weight = parse_number(row[weight_column]) if weight_column else None
            values.append(value)
            weights.append(weight or 1.0)
        return np.array(values, dtype=float), np.array(weights, dtype=float)

    def estimate(
        self,
        rows: Sequence[Row],
        target_columns: Sequence[str],
        weight_column: Optional[str] = None,
        confidence_level: float = 0.95,
        group_by_columns: Optional[Sequence[str]] = None
    ) -> List[EstimateResult]:
        """
        Estimate every target column.

        Args:
            rows: Cleaned rows
            target_columns: Columns to estimate
            weight_column: Optional sampling weight column
            confidence_level: 0.90, 0.95 or 0.99
            group_by_columns: Accepted for API compatibility, not applied

        Returns:
            One EstimateResult per column with at least one valid value

        Raises:
            EmptyColumnError: If a column's weights sum to zero
        """
        if group_by_columns:
            logger.debug(f"Group-by columns {list(group_by_columns)} are not applied to estimates")

        degrees_of_freedom = len(rows) - 1
        t_value = self.critical(degrees_of_freedom, confidence_level)
        results = []

        for column in target_columns:
            values, weights = self.observations(rows, column, weight_column)
            if len(values) == 0:
                logger.debug(f"{column}: no valid observations, skipped")
                continue
            if np.sum(weights) == 0:
                raise EmptyColumnError(column, "weights sum to zero")

            mean = weighted_mean(values, weights)
            se = standard_error(values, weights, mean)
            margin = t_value * se

            results.append(EstimateResult(
                variable=column,
                estimate=mean,
                standard_error=se,
                margin_of_error=margin,
                confidence_interval=(mean - margin, mean + margin),
                sample_size=len(values),
            ))

        logger.info(
            f"Estimated {len(results)} of {len(target_columns)} variables "
            f"(df={degrees_of_freedom}, t={t_value:.3f})"
        )
        return results
