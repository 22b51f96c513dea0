"""
Descriptive Statistics - Unweighted per-column summaries
"""

from typing import List, Sequence
import logging

import numpy as np

from ..config import DESCRIPTIVE_DECIMALS
from ..dataset import Row, valid_numbers
from ..models import DescriptiveStat

logger = logging.getLogger(__name__)


class DescriptiveStatsEngine:
    """
    Count, mean, median, population std, min and max per column.

    Every statistic is rounded to 4 decimals. A column without any
    parseable value gets an all-zero record.
    """

    def __init__(self, decimals: int = DESCRIPTIVE_DECIMALS):
        self.decimals = decimals

    def describe_column(self, rows: Sequence[Row], column: str) -> DescriptiveStat:
        values = np.array(valid_numbers(row[column] for row in rows), dtype=float)

        if len(values) == 0:
            return DescriptiveStat(column=column, count=0, mean=0, median=0, std=0, min=0, max=0)

        return DescriptiveStat(
            column=column,
            count=int(len(values)),
            mean=round(float(np.mean(values)), self.decimals),
            median=round(float(np.median(values)), self.decimals),
            std=round(float(np.std(values)), self.decimals),
            min=round(float(np.min(values)), self.decimals),
            max=round(float(np.max(values)), self.decimals),
        )

    def describe(self, rows: Sequence[Row], columns: Sequence[str]) -> List[DescriptiveStat]:
        """
        Summarise the requested columns.

        Args:
            rows: Cleaned rows
            columns: Columns to summarise, in output order

        Returns:
            One DescriptiveStat per column
        """
        stats = [self.describe_column(rows, col) for col in columns]
        logger.info(f"Described {len(stats)} columns over {len(rows)} rows")
        return stats
