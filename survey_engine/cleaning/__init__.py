"""
Survey Engine - Data Cleaning

Imputes missing values, treats outliers and filters invalid rows.

Components:
    - stage_base.py        : Abstract stage and audit log record
    - imputation.py        : Fill strategies (mean, median, mode, knn, ffill, bfill)
    - outlier_detection.py : IQR, z-score and winsorization bounds
    - rules.py             : Row predicates (remove / flag)
    - pipeline.py          : The three stages in order
"""

from .stage_base import BaseStage, StageLog
from .imputation import ImputationEngine, ImputationStrategy, get_strategy
from .outlier_detection import Bounds, OutlierEngine
from .rules import RuleViolation, ValidationRuleEngine
from .pipeline import CleaningPipeline, CleaningResult

__all__ = [
    'BaseStage',
    'StageLog',
    'ImputationEngine',
    'ImputationStrategy',
    'get_strategy',
    'Bounds',
    'OutlierEngine',
    'RuleViolation',
    'ValidationRuleEngine',
    'CleaningPipeline',
    'CleaningResult',
]
