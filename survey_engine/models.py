"""
Survey Engine Models
====================

Configuration sections and result records exchanged with the engine.

Configurations accept the camelCase keys used by the upload UI as well as
snake_case keys when built from plain mappings. Outlier configuration is a
tagged union: one class per method, so the threshold shape (a scalar for
IQR and z-score, a lower/upper pair for winsorization) is fixed by the type.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Mapping, Optional, Sequence, Tuple, Type

from .config import (
    CONFIDENCE_LEVELS,
    IQR_THRESHOLD,
    KNN_NEIGHBORS,
    WINSOR_LOWER,
    WINSOR_UPPER,
    ZSCORE_THRESHOLD,
)
from .exceptions import ConfigError


class ImputationMethod(str, Enum):
    MEAN = "mean"
    MEDIAN = "median"
    MODE = "mode"
    KNN = "knn"
    FORWARD_FILL = "forward-fill"
    BACKWARD_FILL = "backward-fill"
    REMOVE = "remove"


class DistanceMetric(str, Enum):
    EUCLIDEAN = "euclidean"
    MANHATTAN = "manhattan"


class OutlierMethod(str, Enum):
    IQR = "iqr"
    ZSCORE = "z-score"
    WINSORIZATION = "winsorization"


class OutlierAction(str, Enum):
    CAP = "cap"
    REMOVE = "remove"
    TRANSFORM = "transform"


class RuleCondition(str, Enum):
    GREATER_THAN = "greater-than"
    LESS_THAN = "less-than"
    EQUALS = "equals"
    NOT_EQUALS = "not-equals"
    RANGE = "range"
    PATTERN = "pattern"


class RuleAction(str, Enum):
    FLAG = "flag"
    REMOVE = "remove"
    TRANSFORM = "transform"


def _coerce_enum(enum_cls: Type[Enum], value: Any, what: str) -> Any:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = [m.value for m in enum_cls]
        raise ConfigError(f"Unknown {what}: {value!r}. Available: {allowed}")


def _column_tuple(columns: Any, what: str) -> Tuple[str, ...]:
    if columns is None:
        return ()
    if isinstance(columns, str):
        raise ConfigError(f"{what} must be a list of column names, got a string")
    # dict.fromkeys keeps first-seen order while dropping duplicates
    return tuple(dict.fromkeys(str(c) for c in columns))


def _get(mapping: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in mapping:
            return mapping[key]
    return default


# ---------------------------------------------------------------------------
# Cleaning configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ImputationSpec:
    """Which columns to impute and how."""

    method: ImputationMethod
    columns: Tuple[str, ...] = ()
    knn_neighbors: int = KNN_NEIGHBORS
    distance_metric: DistanceMetric = DistanceMetric.EUCLIDEAN

    def __post_init__(self):
        object.__setattr__(self, "method", _coerce_enum(ImputationMethod, self.method, "imputation method"))
        object.__setattr__(self, "columns", _column_tuple(self.columns, "imputation columns"))
        object.__setattr__(
            self, "distance_metric", _coerce_enum(DistanceMetric, self.distance_metric, "distance metric")
        )
        if int(self.knn_neighbors) < 1:
            raise ConfigError(f"knn_neighbors must be >= 1, got {self.knn_neighbors}")
        object.__setattr__(self, "knn_neighbors", int(self.knn_neighbors))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ImputationSpec":
        return cls(
            method=_get(data, "method", default=ImputationMethod.MEAN),
            columns=_get(data, "columns", default=()),
            knn_neighbors=_get(data, "knnNeighbors", "knn_neighbors", "k", default=KNN_NEIGHBORS),
            distance_metric=_get(
                data, "distanceMetric", "distance_metric", default=DistanceMetric.EUCLIDEAN
            ),
        )


@dataclass(frozen=True)
class OutlierSpec:
    """Common part of every outlier configuration."""

    method: ClassVar[OutlierMethod]

    columns: Tuple[str, ...] = ()
    action: OutlierAction = OutlierAction.CAP

    def __post_init__(self):
        object.__setattr__(self, "columns", _column_tuple(self.columns, "outlier columns"))
        object.__setattr__(self, "action", _coerce_enum(OutlierAction, self.action, "outlier action"))

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "OutlierSpec":
        """
        Build the method-specific spec from a mapping.

        Args:
            data: Mapping with method, threshold, action and columns

        Returns:
            IQROutlierSpec, ZScoreOutlierSpec or WinsorizationSpec

        Raises:
            ConfigError: If the method is unknown or the threshold shape
                does not match the method
        """
        method = _coerce_enum(OutlierMethod, _get(data, "method", default="iqr"), "outlier method")
        threshold = _get(data, "threshold")
        common = {
            "columns": _get(data, "columns", default=()),
            "action": _get(data, "action", default=OutlierAction.CAP),
        }

        if method == OutlierMethod.WINSORIZATION:
            if threshold is None:
                return WinsorizationSpec(**common)
            if not isinstance(threshold, Mapping):
                raise ConfigError(
                    "Winsorization threshold must be a {lower, upper} mapping, "
                    f"got {threshold!r}"
                )
            return WinsorizationSpec(
                lower=threshold.get("lower", WINSOR_LOWER),
                upper=threshold.get("upper", WINSOR_UPPER),
                **common,
            )

        if isinstance(threshold, Mapping):
            raise ConfigError(f"{method.value} threshold must be a number, got {threshold!r}")

        spec_cls = IQROutlierSpec if method == OutlierMethod.IQR else ZScoreOutlierSpec
        if threshold is None:
            return spec_cls(**common)
        return spec_cls(threshold=threshold, **common)


@dataclass(frozen=True)
class _ScalarThresholdSpec(OutlierSpec):
    threshold: float = 0.0

    def __post_init__(self):
        super().__post_init__()
        try:
            threshold = float(self.threshold)
        except (TypeError, ValueError):
            raise ConfigError(f"Outlier threshold must be a number, got {self.threshold!r}")
        if not math.isfinite(threshold) or threshold <= 0:
            raise ConfigError(f"Outlier threshold must be positive, got {self.threshold!r}")
        object.__setattr__(self, "threshold", threshold)


@dataclass(frozen=True)
class IQROutlierSpec(_ScalarThresholdSpec):
    """Bounds at Q1 - t*IQR and Q3 + t*IQR."""

    method: ClassVar[OutlierMethod] = OutlierMethod.IQR
    threshold: float = IQR_THRESHOLD


@dataclass(frozen=True)
class ZScoreOutlierSpec(_ScalarThresholdSpec):
    """Bounds at mean -/+ t standard deviations."""

    method: ClassVar[OutlierMethod] = OutlierMethod.ZSCORE
    threshold: float = ZSCORE_THRESHOLD


@dataclass(frozen=True)
class WinsorizationSpec(OutlierSpec):
    """Bounds at the lower/upper quantile positions of the sorted values."""

    method: ClassVar[OutlierMethod] = OutlierMethod.WINSORIZATION
    lower: float = WINSOR_LOWER
    upper: float = WINSOR_UPPER

    def __post_init__(self):
        super().__post_init__()
        try:
            lower, upper = float(self.lower), float(self.upper)
        except (TypeError, ValueError):
            raise ConfigError(f"Winsorization bounds must be numbers, got {self.lower!r}, {self.upper!r}")
        if not 0.0 <= lower <= upper <= 1.0:
            raise ConfigError(f"Winsorization needs 0 <= lower <= upper <= 1, got {lower}, {upper}")
        object.__setattr__(self, "lower", lower)
        object.__setattr__(self, "upper", upper)


@dataclass(frozen=True)
class ValidationRule:
    """A row predicate; rows violating a remove rule are dropped."""

    column: str
    condition: RuleCondition
    value: Any = None
    action: RuleAction = RuleAction.REMOVE
    id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "condition", _coerce_enum(RuleCondition, self.condition, "rule condition"))
        object.__setattr__(self, "action", _coerce_enum(RuleAction, self.action, "rule action"))
        if self.condition == RuleCondition.RANGE:
            if isinstance(self.value, (str, bytes)) or not isinstance(self.value, Sequence) or len(self.value) != 2:
                raise ConfigError(
                    f"Range rule on '{self.column}' needs a [min, max] value, got {self.value!r}"
                )
            object.__setattr__(self, "value", tuple(self.value))

    @property
    def label(self) -> str:
        return self.id or f"{self.column} {self.condition.value} {self.value!r}"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ValidationRule":
        if "column" not in data or "condition" not in data:
            raise ConfigError(f"Rule needs 'column' and 'condition': {dict(data)!r}")
        return cls(
            column=str(data["column"]),
            condition=data["condition"],
            value=data.get("value"),
            action=data.get("action", RuleAction.REMOVE),
            id=data.get("id"),
        )


@dataclass(frozen=True)
class CleaningConfig:
    """Three independent cleaning sections; a None section is skipped."""

    imputation: Optional[ImputationSpec] = None
    outliers: Optional[OutlierSpec] = None
    rules: Tuple[ValidationRule, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "rules", tuple(self.rules or ()))

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "CleaningConfig":
        data = data or {}
        imputation = data.get("imputation")
        outliers = data.get("outliers")
        return cls(
            imputation=ImputationSpec.from_dict(imputation) if imputation else None,
            outliers=OutlierSpec.from_dict(outliers) if outliers else None,
            rules=tuple(ValidationRule.from_dict(r) for r in (data.get("rules") or [])),
        )


# ---------------------------------------------------------------------------
# Weighting and analysis configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WeightConfig:
    """Sampling weight column and design stratification (carried only)."""

    weight_column: Optional[str] = None
    stratification_columns: Tuple[str, ...] = ()
    population_totals: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self):
        # the upload UI sends "" for "no weight column"
        if not self.weight_column:
            object.__setattr__(self, "weight_column", None)
        object.__setattr__(
            self,
            "stratification_columns",
            _column_tuple(self.stratification_columns, "stratification columns"),
        )
        object.__setattr__(self, "population_totals", dict(self.population_totals or {}))

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "WeightConfig":
        data = data or {}
        return cls(
            weight_column=_get(data, "weightColumn", "weight_column"),
            stratification_columns=_get(data, "stratificationColumns", "stratification_columns", default=()),
            population_totals=_get(data, "populationTotals", "population_totals", default={}),
        )


@dataclass(frozen=True)
class AnalysisConfig:
    """Target variables, confidence level and (unused) grouping."""

    target_columns: Tuple[str, ...] = ()
    confidence_level: float = 0.95
    group_by_columns: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "target_columns", _column_tuple(self.target_columns, "target columns"))
        object.__setattr__(self, "group_by_columns", _column_tuple(self.group_by_columns, "group-by columns"))
        try:
            level = float(self.confidence_level)
        except (TypeError, ValueError):
            raise ConfigError(f"Confidence level must be a number, got {self.confidence_level!r}")
        matches = [c for c in CONFIDENCE_LEVELS if math.isclose(level, c)]
        if not matches:
            raise ConfigError(f"Unsupported confidence level {level}. Available: {list(CONFIDENCE_LEVELS)}")
        object.__setattr__(self, "confidence_level", matches[0])

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "AnalysisConfig":
        data = data or {}
        return cls(
            target_columns=_get(data, "targetColumns", "target_columns", default=()),
            confidence_level=_get(data, "confidenceLevel", "confidence_level", default=0.95),
            group_by_columns=_get(data, "groupByColumns", "group_by_columns", default=()),
        )


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EstimateResult:
    variable: str
    estimate: float
    standard_error: float
    margin_of_error: float
    confidence_interval: Tuple[float, float]
    sample_size: int

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["confidence_interval"] = list(self.confidence_interval)
        return result


@dataclass(frozen=True)
class DescriptiveStat:
    column: str
    count: int
    mean: float
    median: float
    std: float
    min: float
    max: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
