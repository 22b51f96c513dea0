"""
Base Stage - Abstract interface for cleaning stages
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
import logging

from ..dataset import Row, TabularDataset, is_missing
from ..exceptions import ConfigError

logger = logging.getLogger(__name__)


@dataclass
class StageLog:
    """Audit record for one pipeline stage."""

    stage: str
    rows_in: int
    rows_out: int
    cells_changed: int = 0
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def rows_removed(self) -> int:
        return self.rows_in - self.rows_out

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage,
            "rows_in": self.rows_in,
            "rows_out": self.rows_out,
            "rows_removed": self.rows_removed,
            "cells_changed": self.cells_changed,
            "details": self.details,
        }


class BaseStage(ABC):
    """
    Abstract base class for cleaning stages.

    A stage reads a dataset and returns a new list of rows. It never
    mutates the dataset or the row mappings it was given; every row it
    keeps is copied first.
    """

    name: str = "base"

    def __init__(self):
        self.cleaning_log: List[StageLog] = []

    @abstractmethod
    def apply(self, dataset: TabularDataset, spec: Any) -> List[Row]:
        """
        Run the stage.

        Args:
            dataset: Input snapshot
            spec: Stage-specific configuration

        Returns:
            New list of rows
        """
        pass

    def log_operation(
        self,
        rows_in: int,
        rows_out: int,
        cells_changed: int = 0,
        details: Optional[Dict] = None
    ) -> StageLog:
        """Record a stage run for the audit trail."""
        entry = StageLog(
            stage=self.name,
            rows_in=rows_in,
            rows_out=rows_out,
            cells_changed=cells_changed,
            details=details or {},
        )
        self.cleaning_log.append(entry)
        logger.info(
            f"{self.name}: {rows_in} rows in, {rows_out} rows out, "
            f"{cells_changed} cells changed"
        )
        return entry

    @property
    def last_log(self) -> Optional[StageLog]:
        return self.cleaning_log[-1] if self.cleaning_log else None

    def reset_log(self) -> None:
        """Forget earlier runs."""
        self.cleaning_log.clear()

    @staticmethod
    def check_columns(dataset: TabularDataset, columns: Sequence[str]) -> None:
        """Raise ConfigError for configured columns that are not headers."""
        unknown = [c for c in columns if c not in dataset.headers]
        if unknown:
            raise ConfigError(f"Unknown columns: {unknown}. Available: {list(dataset.headers)}")

    @staticmethod
    def get_missing_summary(rows: Sequence[Row], columns: Sequence[str]) -> Dict[str, int]:
        """Count missing cells per column."""
        return {col: sum(1 for row in rows if is_missing(row[col])) for col in columns}
