"""
Column Profiler - Data-quality overview shown before cleaning
"""

from typing import Any, Dict, List, Optional
import logging

import numpy as np

from .dataset import TabularDataset, is_missing, is_numeric_column, valid_numbers

logger = logging.getLogger(__name__)


class ColumnProfiler:
    """
    Profile every column of a dataset.

    Key figures per column:
    - Type (numeric / text, using the shared classification rule)
    - Missing count and percentage
    - Number of distinct non-missing values
    - Min / max / mean for numeric columns
    """

    def __init__(self, dataset: TabularDataset):
        self.dataset = dataset

    def profile_column(self, column: str) -> Dict[str, Any]:
        values = self.dataset.column(column)
        n_total = len(values)
        present = [v for v in values if not is_missing(v)]
        n_missing = n_total - len(present)

        profile: Dict[str, Any] = {
            "type": "numeric" if is_numeric_column(values) else "text",
            "missing": n_missing,
            "missing_pct": round(n_missing / n_total * 100, 2) if n_total > 0 else 0,
        }

        if profile["type"] == "numeric":
            numbers = valid_numbers(present)
            profile["unique"] = len(set(numbers))
            if numbers:
                profile["min"] = float(np.min(numbers))
                profile["max"] = float(np.max(numbers))
                profile["mean"] = float(np.mean(numbers))
        else:
            profile["unique"] = len(set(present))

        return profile

    def summary(self) -> Dict[str, Dict[str, Any]]:
        """Profile of every column, keyed by header."""
        return {col: self.profile_column(col) for col in self.dataset.headers}

    def sparse_columns(self, max_missing_pct: float = 20.0) -> List[str]:
        """Columns whose missing share exceeds max_missing_pct."""
        sparse = [
            col for col, p in self.summary().items()
            if p["missing_pct"] > max_missing_pct
        ]
        for col in sparse:
            logger.warning(f"{col}: more than {max_missing_pct}% missing")
        return sparse

    @staticmethod
    def retention(original: TabularDataset, cleaned: Optional[TabularDataset]) -> float:
        """Share of original rows still present after cleaning, in percent."""
        if cleaned is None or len(original) == 0:
            return 100.0
        return round(len(cleaned) / len(original) * 100, 1)
