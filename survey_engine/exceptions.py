"""
Exceptions raised by the survey engine.
"""


class SurveyEngineError(Exception):
    """Base class for all survey engine errors."""
    pass


class DatasetError(SurveyEngineError, ValueError):
    """Raised when a dataset violates the headers/rows invariant."""
    pass


class ConfigError(SurveyEngineError, ValueError):
    """Raised when a cleaning, weight or analysis configuration is invalid."""
    pass


class EmptyColumnError(SurveyEngineError):
    """Raised when a statistic is needed for a column with no usable values."""

    def __init__(self, column: str, reason: str = "no valid numeric values"):
        self.column = column
        self.reason = reason
        super().__init__(f"Column '{column}': {reason}")
