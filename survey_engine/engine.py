"""
Survey Engine - High-level API for a full cleaning and analysis run
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from .analysis import DescriptiveStatsEngine, EstimationEngine
from .cleaning import CleaningPipeline, RuleViolation, StageLog
from .dataset import TabularDataset
from .exceptions import ConfigError, DatasetError
from .models import AnalysisConfig, CleaningConfig, DescriptiveStat, EstimateResult, WeightConfig
from .profiling import ColumnProfiler

logger = logging.getLogger(__name__)

STEP_PENDING = "pending"
STEP_PROCESSING = "processing"
STEP_COMPLETE = "complete"
STEP_ERROR = "error"


@dataclass
class ProcessingStep:
    id: str
    title: str
    status: str = STEP_PENDING
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title, "status": self.status, "message": self.message}


@dataclass
class SurveyRunResult:
    """Everything a report renderer needs from one run."""

    cleaned: TabularDataset
    estimates: List[EstimateResult]
    descriptive_stats: List[DescriptiveStat]
    flags: List[RuleViolation] = field(default_factory=list)
    cleaning_steps: List[StageLog] = field(default_factory=list)
    processing_steps: List[ProcessingStep] = field(default_factory=list)
    original_rows: int = 0
    retention_pct: float = 100.0
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def cleaned_rows(self) -> int:
        return len(self.cleaned)

    def to_dict(self, include_rows: bool = False) -> Dict[str, Any]:
        result = {
            "timestamp": self.timestamp,
            "original_rows": self.original_rows,
            "cleaned_rows": self.cleaned_rows,
            "retention_pct": self.retention_pct,
            "estimates": [e.to_dict() for e in self.estimates],
            "descriptive_stats": [d.to_dict() for d in self.descriptive_stats],
            "flags": [f.to_dict() for f in self.flags],
            "cleaning_steps": [s.to_dict() for s in self.cleaning_steps],
            "processing_steps": [s.to_dict() for s in self.processing_steps],
        }
        if include_rows:
            result["headers"] = list(self.cleaned.headers)
            result["rows"] = [dict(r) for r in self.cleaned.rows]
        return result


class SurveyEngine:
    """
    High-level interface for survey processing.

    Provides a simple API to:
    1. Validate the dataset against the configurations
    2. Clean it (imputation, outliers, rules)
    3. Estimate and describe the target variables

    Runs are independent. `steps` and `last_result` describe the most recent
    call only, so callers can read step statuses after an exception. Both
    are replaced at the start of every run and never read by the engine.
    """

    STEP_TITLES = ("Data Validation", "Data Cleaning", "Statistical Analysis")

    def __init__(self, critical_value: str = "table"):
        """
        Initialize the survey engine.

        Args:
            critical_value: Passed to EstimationEngine ('table' or 'student-t')
        """
        self.pipeline = CleaningPipeline()
        self.estimator = EstimationEngine(critical_value=critical_value)
        self.describer = DescriptiveStatsEngine()
        self.steps: List[ProcessingStep] = []
        self.last_result: Optional[SurveyRunResult] = None

    def run(
        self,
        dataset: TabularDataset,
        cleaning: Optional[CleaningConfig] = None,
        weights: Optional[WeightConfig] = None,
        analysis: Optional[AnalysisConfig] = None
    ) -> SurveyRunResult:
        """
        Run validation, cleaning and analysis.

        Args:
            dataset: Raw dataset (never modified)
            cleaning: Cleaning configuration (default: no cleaning)
            weights: Weight configuration (default: unweighted)
            analysis: Analysis configuration (default: no targets)

        Returns:
            SurveyRunResult

        Raises:
            SurveyEngineError: Re-raised after the running step is marked 'error'
        """
        cleaning = cleaning or CleaningConfig()
        weights = weights or WeightConfig()
        analysis = analysis or AnalysisConfig()

        self.last_result = None
        self.steps = [ProcessingStep(str(i + 1), title) for i, title in enumerate(self.STEP_TITLES)]
        validation, cleaning_step, analysis_step = self.steps

        try:
            self._start(validation, "Validating data structure and types...")
            self.validate(dataset, weights, analysis)
            self._complete(validation, f"Validated {len(dataset)} records")

            self._start(cleaning_step, "Applying cleaning rules...")
            cleaned = self.pipeline.run(dataset, cleaning)
            retention = ColumnProfiler.retention(dataset, cleaned.dataset)
            self._complete(
                cleaning_step,
                f"Cleaned data: {len(cleaned.dataset)} records retained ({retention:.1f}%)",
            )

            self._start(analysis_step, "Computing estimates and confidence intervals...")
            rows = cleaned.dataset.rows
            estimates = self.estimator.estimate(
                rows,
                analysis.target_columns,
                weight_column=weights.weight_column,
                confidence_level=analysis.confidence_level,
                group_by_columns=analysis.group_by_columns,
            )
            descriptive = self.describer.describe(rows, analysis.target_columns)
            self._complete(analysis_step, f"Analyzed {len(analysis.target_columns)} variables")

        except Exception as e:
            for step in self.steps:
                if step.status == STEP_PROCESSING:
                    step.status = STEP_ERROR
                    step.message = str(e)
            logger.error(f"Survey run failed: {e}")
            raise

        self.last_result = SurveyRunResult(
            cleaned=cleaned.dataset,
            estimates=estimates,
            descriptive_stats=descriptive,
            flags=cleaned.flags,
            cleaning_steps=cleaned.steps,
            processing_steps=list(self.steps),
            original_rows=len(dataset),
            retention_pct=retention,
        )
        return self.last_result

    @staticmethod
    def validate(dataset: TabularDataset, weights: WeightConfig, analysis: AnalysisConfig) -> None:
        """
        Check that the dataset is non-empty and every configured column exists.

        Raises:
            DatasetError: If the dataset has no headers or no rows
            ConfigError: If a configured column is not a header
        """
        if not dataset.headers or len(dataset) == 0:
            raise DatasetError("Dataset is empty")

        referenced = list(analysis.target_columns) + list(analysis.group_by_columns)
        referenced += list(weights.stratification_columns)
        if weights.weight_column:
            referenced.append(weights.weight_column)

        unknown = [c for c in dict.fromkeys(referenced) if c not in dataset.headers]
        if unknown:
            raise ConfigError(f"Unknown columns: {unknown}. Available: {list(dataset.headers)}")

    @staticmethod
    def _start(step: ProcessingStep, message: str) -> None:
        step.status = STEP_PROCESSING
        step.message = message
        logger.info(f"[{step.title}] {message}")

    @staticmethod
    def _complete(step: ProcessingStep, message: str) -> None:
        step.status = STEP_COMPLETE
        step.message = message
        logger.info(f"[{step.title}] {message}")
