"""
Outlier Detection - Bound, cap, transform or drop extreme values
"""

from dataclasses import dataclass
from typing import Dict, List
import logging
import math

import numpy as np

from ..dataset import Row, TabularDataset, parse_number, valid_numbers
from ..exceptions import EmptyColumnError
from ..models import (
    IQROutlierSpec,
    OutlierAction,
    OutlierSpec,
    WinsorizationSpec,
    ZScoreOutlierSpec,
)
from .stage_base import BaseStage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Bounds:
    """Closed interval of acceptable values for one column."""

    lower: float
    upper: float

    def contains(self, value: float) -> bool:
        return self.lower <= value <= self.upper

    def clamp(self, value: float) -> float:
        if value < self.lower:
            return self.lower
        if value > self.upper:
            return self.upper
        return value


def _quantile_at(sorted_values: List[float], fraction: float) -> float:
    index = min(int(math.floor(len(sorted_values) * fraction)), len(sorted_values) - 1)
    return sorted_values[index]


class OutlierEngine(BaseStage):
    """
    Detect outliers per column and apply the configured action.

    Methods:
    - IQR: values outside Q1 - t*IQR to Q3 + t*IQR
    - Z-score: values more than t population standard deviations from mean
    - Winsorization: values outside the lower/upper quantile positions

    Quartiles and quantiles are read at index floor(n * p) of the sorted
    values, without interpolation.
    """

    name = "outliers"

    def compute_bounds(self, dataset: TabularDataset, spec: OutlierSpec) -> Dict[str, Bounds]:
        """
        Compute bounds for every configured column.

        Args:
            dataset: Input snapshot
            spec: Method-specific outlier settings

        Returns:
            Dictionary mapping column -> Bounds

        Raises:
            EmptyColumnError: If a column has no parseable numeric values
        """
        self.check_columns(dataset, spec.columns)
        bounds = {}

        for col in spec.columns:
            values = sorted(valid_numbers(dataset.column(col)))
            if not values:
                raise EmptyColumnError(col, "no valid numeric values to compute outlier bounds")

            if isinstance(spec, IQROutlierSpec):
                q1 = _quantile_at(values, 0.25)
                q3 = _quantile_at(values, 0.75)
                iqr = q3 - q1
                bounds[col] = Bounds(q1 - spec.threshold * iqr, q3 + spec.threshold * iqr)
            elif isinstance(spec, ZScoreOutlierSpec):
                mean = float(np.mean(values))
                std = float(np.std(values))
                bounds[col] = Bounds(mean - spec.threshold * std, mean + spec.threshold * std)
            elif isinstance(spec, WinsorizationSpec):
                bounds[col] = Bounds(_quantile_at(values, spec.lower), _quantile_at(values, spec.upper))
            else:
                raise TypeError(f"Unsupported outlier spec: {type(spec).__name__}")

            logger.debug(f"{col}: {spec.method.value} bounds [{bounds[col].lower}, {bounds[col].upper}]")

        return bounds

    def detect(self, dataset: TabularDataset, spec: OutlierSpec) -> Dict[str, List[bool]]:
        """
        Flag outliers without treating them.

        Returns:
            Dictionary mapping column -> list of flags (True = outlier),
            unparseable cells are never flagged
        """
        bounds = self.compute_bounds(dataset, spec)
        flags = {}
        for col in spec.columns:
            parsed = [parse_number(v) for v in dataset.column(col)]
            flags[col] = [p is not None and not bounds[col].contains(p) for p in parsed]
        return flags

    def apply(self, dataset: TabularDataset, spec: OutlierSpec) -> List[Row]:
        bounds = self.compute_bounds(dataset, spec)
        outlier_counts = {col: 0 for col in spec.columns}
        cells_changed = 0
        rows = []

        for row in dataset.rows:
            new_row = dict(row)
            drop = False

            for col in spec.columns:
                value = parse_number(row[col])
                if value is None or bounds[col].contains(value):
                    continue

                outlier_counts[col] += 1
                if spec.action == OutlierAction.REMOVE:
                    # later columns on this row are not evaluated
                    drop = True
                    break
                elif spec.action == OutlierAction.CAP:
                    new_row[col] = bounds[col].clamp(value)
                    cells_changed += 1
                elif spec.action == OutlierAction.TRANSFORM and value > 0:
                    new_row[col] = math.log(value)
                    cells_changed += 1

            if not drop:
                rows.append(new_row)

        self.log_operation(
            len(dataset), len(rows), cells_changed,
            {
                "method": spec.method.value,
                "action": spec.action.value,
                "bounds": {c: (b.lower, b.upper) for c, b in bounds.items()},
                "outliers": outlier_counts,
            },
        )
        return rows
