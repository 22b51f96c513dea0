"""
Imputation - Fill missing cells with a configurable strategy

Every statistic (mean, median, mode, neighbour distances) is computed once
from the stage's input snapshot, so the order in which rows are filled
never changes the result.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence, Union
import logging

import numpy as np
import pandas as pd

from ..config import KNN_EPSILON
from ..dataset import (
    Row,
    TabularDataset,
    is_missing,
    is_numeric_column,
    numeric_array,
    valid_numbers,
)
from ..exceptions import ConfigError, EmptyColumnError
from ..models import DistanceMetric, ImputationMethod, ImputationSpec
from .stage_base import BaseStage

logger = logging.getLogger(__name__)


def column_mean(values: Sequence[Any], column: str) -> float:
    numbers = valid_numbers(values)
    if not numbers:
        raise EmptyColumnError(column, "no valid numeric values to compute a mean")
    return float(np.mean(numbers))


def column_median(values: Sequence[Any], column: str) -> float:
    numbers = valid_numbers(values)
    if not numbers:
        raise EmptyColumnError(column, "no valid numeric values to compute a median")
    return float(np.median(numbers))


def column_mode(values: Sequence[Any], column: str) -> Any:
    """
    Most frequent non-missing value.

    Ties go to the value encountered first.
    """
    counts: Dict[Any, int] = {}
    for value in values:
        if is_missing(value):
            continue
        counts[value] = counts.get(value, 0) + 1

    if not counts:
        raise EmptyColumnError(column, "no non-missing values to compute a mode")

    # max() keeps the first maximal item; dicts keep insertion order
    return max(counts.items(), key=lambda item: item[1])[0]


class ImputationStrategy(ABC):
    """Abstract base class for column fill strategies."""

    @abstractmethod
    def fill(
        self,
        dataset: TabularDataset,
        column: str,
        spec: ImputationSpec
    ) -> List[Any]:
        """
        Fill missing cells of one column.

        Args:
            dataset: Input snapshot
            column: Column to fill
            spec: Imputation settings

        Returns:
            New column values in row order
        """
        pass


class _ConstantFillStrategy(ImputationStrategy):
    """Replace every missing cell with one value computed from the column."""

    def fill(self, dataset, column, spec):
        values = dataset.column(column)
        if not any(is_missing(v) for v in values):
            return list(values)

        replacement = self.replacement(values, column)
        logger.debug(f"{column}: filling missing cells with {replacement!r}")
        return [replacement if is_missing(v) else v for v in values]

    @abstractmethod
    def replacement(self, values: Sequence[Any], column: str) -> Any:
        pass


class MeanFillStrategy(_ConstantFillStrategy):
    """Fill with column mean."""

    def replacement(self, values, column):
        return column_mean(values, column)


class MedianFillStrategy(_ConstantFillStrategy):
    """Fill with column median."""

    def replacement(self, values, column):
        return column_median(values, column)


class ModeFillStrategy(_ConstantFillStrategy):
    """Fill with the most frequent value (works for text columns too)."""

    def replacement(self, values, column):
        return column_mode(values, column)


class _PropagateFillStrategy(ImputationStrategy):
    """Copy the nearest present value along row order."""

    forward: bool = True

    def fill(self, dataset, column, spec):
        values = dataset.column(column)
        present = np.array([not is_missing(v) for v in values], dtype=bool)
        positions = pd.Series(np.where(present, np.arange(len(values)), np.nan), dtype=float)
        source = positions.ffill() if self.forward else positions.bfill()

        filled = [values[int(p)] if not np.isnan(p) else None for p in source]

        unfilled = sum(1 for v in filled if v is None)
        if unfilled:
            edge = "leading" if self.forward else "trailing"
            logger.warning(
                f"{column}: {unfilled} {edge} missing cells have no "
                f"{'preceding' if self.forward else 'following'} value and stay missing"
            )
        return filled


class ForwardFillStrategy(_PropagateFillStrategy):
    """Forward fill - propagate last valid observation."""

    forward = True


class BackwardFillStrategy(_PropagateFillStrategy):
    """Backward fill - propagate next valid observation."""

    forward = False


class KNNStrategy(ImputationStrategy):
    """
    K-nearest-neighbour imputation.

    Distance is computed over the other numeric columns, using only the
    dimensions where both rows have a parseable value. A candidate sharing
    no dimension with the target row is out of reach (infinite distance).
    Numeric targets get an inverse-distance weighted average of the
    neighbours; text targets get the neighbours' most frequent value.
    """

    def fill(self, dataset, column, spec):
        values = dataset.column(column)
        missing_idx = [i for i, v in enumerate(values) if is_missing(v)]
        if not missing_idx:
            return list(values)

        candidates = np.array([i for i, v in enumerate(values) if not is_missing(v)], dtype=int)
        if len(candidates) == 0:
            raise EmptyColumnError(column, "no rows with a value to impute from")

        target_numeric = is_numeric_column(values)
        features = dataset.numeric_columns(exclude=[column])
        if features:
            matrix = np.column_stack([numeric_array(dataset.column(f)) for f in features])
        else:
            matrix = np.empty((len(values), 0), dtype=float)
        target_numbers = numeric_array(values)

        logger.debug(
            f"{column}: knn over {len(features)} features, {len(candidates)} candidates, "
            f"{len(missing_idx)} cells to fill ({'numeric' if target_numeric else 'text'})"
        )

        filled = list(values)
        n_fallback = 0
        for i in missing_idx:
            distances = self.distances(matrix[i], matrix[candidates], spec.distance_metric)
            order = np.argsort(distances, kind="stable")
            order = [o for o in order if np.isfinite(distances[o])][:spec.knn_neighbors]

            if target_numeric:
                value = self._weighted_average(candidates[order], distances[order], target_numbers)
                if value is None:
                    value = column_mean(values, column)
                    n_fallback += 1
            else:
                if order:
                    value = column_mode([values[j] for j in candidates[order]], column)
                else:
                    value = column_mode(values, column)
                    n_fallback += 1
            filled[i] = value

        if n_fallback:
            logger.info(f"{column}: {n_fallback} cells had no reachable neighbour, used column fallback")
        return filled

    @staticmethod
    def distances(
        target: np.ndarray,
        candidates: np.ndarray,
        metric: Union[DistanceMetric, str] = DistanceMetric.EUCLIDEAN
    ) -> np.ndarray:
        """
        Distance from one row to many, skipping missing dimensions per pair.

        Args:
            target: Feature vector of the row being imputed (NaN = missing)
            candidates: Feature matrix of candidate rows (NaN = missing)
            metric: 'euclidean' or 'manhattan'

        Returns:
            Array of distances, inf where no dimension is comparable
        """
        if candidates.shape[1] == 0:
            return np.full(candidates.shape[0], np.inf)

        diff = candidates - target
        comparable = ~np.isnan(diff)
        diff = np.where(comparable, diff, 0.0)

        if DistanceMetric(metric) == DistanceMetric.EUCLIDEAN:
            result = np.sqrt(np.sum(diff * diff, axis=1))
        else:
            result = np.sum(np.abs(diff), axis=1)

        result[comparable.sum(axis=1) == 0] = np.inf
        return result

    @staticmethod
    def _weighted_average(
        neighbors: np.ndarray,
        distances: np.ndarray,
        target_numbers: np.ndarray
    ):
        weighted_sum = 0.0
        total_weight = 0.0
        for j, d in zip(neighbors, distances):
            value = target_numbers[j]
            if np.isnan(value):
                continue
            weight = 1.0 if d == 0 else 1.0 / (d + KNN_EPSILON)
            weighted_sum += value * weight
            total_weight += weight

        if total_weight <= 0:
            return None
        return float(weighted_sum / total_weight)


# Strategy registry
STRATEGIES: Dict[ImputationMethod, ImputationStrategy] = {
    ImputationMethod.MEAN: MeanFillStrategy(),
    ImputationMethod.MEDIAN: MedianFillStrategy(),
    ImputationMethod.MODE: ModeFillStrategy(),
    ImputationMethod.KNN: KNNStrategy(),
    ImputationMethod.FORWARD_FILL: ForwardFillStrategy(),
    ImputationMethod.BACKWARD_FILL: BackwardFillStrategy(),
}


def get_strategy(name: Union[str, ImputationMethod]) -> ImputationStrategy:
    """
    Get a fill strategy by name.

    Args:
        name: Method name ('mean', 'knn', 'forward-fill', etc.)

    Returns:
        ImputationStrategy instance

    Raises:
        ConfigError: If the name is not a fill strategy ('remove' drops
            rows and has no strategy)
    """
    try:
        method = ImputationMethod(str(getattr(name, "value", name)).lower())
    except ValueError:
        method = None
    if method not in STRATEGIES:
        raise ConfigError(
            f"Unknown strategy: {name}. "
            f"Available: {[m.value for m in STRATEGIES]}"
        )
    return STRATEGIES[method]


class ImputationEngine(BaseStage):
    """
    Fill or drop missing cells in the configured columns.

    Usage:
        engine = ImputationEngine()
        rows = engine.apply(dataset, ImputationSpec("median", ["income"]))
    """

    name = "imputation"

    def apply(self, dataset: TabularDataset, spec: ImputationSpec) -> List[Row]:
        self.check_columns(dataset, spec.columns)
        missing_before = self.get_missing_summary(dataset.rows, spec.columns)

        if spec.method == ImputationMethod.REMOVE:
            rows = [
                dict(row) for row in dataset.rows
                if not any(is_missing(row[c]) for c in spec.columns)
            ]
            self.log_operation(
                len(dataset), len(rows), 0,
                {"method": spec.method.value, "missing_before": missing_before},
            )
            return rows

        strategy = get_strategy(spec.method)
        filled = {col: strategy.fill(dataset, col, spec) for col in spec.columns}

        rows = []
        for i, row in enumerate(dataset.rows):
            new_row = dict(row)
            for col, col_values in filled.items():
                new_row[col] = col_values[i]
            rows.append(new_row)

        missing_after = self.get_missing_summary(rows, spec.columns)
        cells_changed = sum(missing_before.values()) - sum(missing_after.values())
        self.log_operation(
            len(dataset), len(rows), cells_changed,
            {
                "method": spec.method.value,
                "missing_before": missing_before,
                "missing_after": missing_after,
            },
        )
        return rows
