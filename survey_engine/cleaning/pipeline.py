"""
Cleaning Pipeline - imputation -> outliers -> rule validation
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List
import logging

from ..dataset import TabularDataset
from ..models import CleaningConfig
from .imputation import ImputationEngine
from .outlier_detection import OutlierEngine
from .rules import RuleViolation, ValidationRuleEngine
from .stage_base import StageLog

logger = logging.getLogger(__name__)


@dataclass
class CleaningResult:
    """Cleaned dataset plus the audit trail of the run."""

    dataset: TabularDataset
    flags: List[RuleViolation] = field(default_factory=list)
    steps: List[StageLog] = field(default_factory=list)

    def summary(self) -> Dict[str, Any]:
        return {
            "rows": len(self.dataset),
            "flags": len(self.flags),
            "steps": [s.to_dict() for s in self.steps],
        }


class CleaningPipeline:
    """
    Run the three cleaning stages in a fixed order.

    Each stage sees only the previous stage's output and computes its own
    statistics from it: outlier bounds are computed on imputed data, rules
    see capped data. A section left unset in the config is skipped.

    Usage:
        pipeline = CleaningPipeline()
        result = pipeline.run(dataset, config)
        cleaned = result.dataset
    """

    def __init__(self):
        self.imputation = ImputationEngine()
        self.outliers = OutlierEngine()
        self.rules = ValidationRuleEngine()

    def run(self, dataset: TabularDataset, config: CleaningConfig) -> CleaningResult:
        """
        Clean a dataset.

        Args:
            dataset: Raw dataset (never modified)
            config: Cleaning configuration

        Returns:
            CleaningResult with a new dataset
        """
        for stage in (self.imputation, self.outliers, self.rules):
            stage.reset_log()

        current = dataset
        steps: List[StageLog] = []
        flags: List[RuleViolation] = []

        logger.info(f"Cleaning {len(dataset)} rows x {len(dataset.headers)} columns")

        if config.imputation is not None:
            current = current.with_rows(self.imputation.apply(current, config.imputation))
            steps.append(self.imputation.last_log)

        if config.outliers is not None:
            current = current.with_rows(self.outliers.apply(current, config.outliers))
            steps.append(self.outliers.last_log)

        if config.rules:
            rows, flags = self.rules.evaluate(current, config.rules)
            current = current.with_rows(rows)
            steps.append(self.rules.last_log)

        logger.info(f"Cleaning retained {len(current)} of {len(dataset)} rows")
        return CleaningResult(dataset=current, flags=flags, steps=steps)
