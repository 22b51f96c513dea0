"""
Tests for configuration models
"""

import pytest

from survey_engine.exceptions import ConfigError
from survey_engine.models import (
    AnalysisConfig,
    CleaningConfig,
    DistanceMetric,
    ImputationMethod,
    ImputationSpec,
    IQROutlierSpec,
    OutlierAction,
    OutlierSpec,
    RuleCondition,
    ValidationRule,
    WeightConfig,
    WinsorizationSpec,
    ZScoreOutlierSpec,
)


class TestImputationSpec:

    def test_coerces_names(self):
        spec = ImputationSpec("KNN", ["a", "b", "a"], distance_metric="manhattan")

        assert spec.method == ImputationMethod.KNN
        assert spec.columns == ("a", "b")
        assert spec.distance_metric == DistanceMetric.MANHATTAN

    def test_unknown_method(self):
        with pytest.raises(ConfigError, match="Unknown imputation method"):
            ImputationSpec("interpolate", ["a"])

    def test_rejects_zero_neighbours(self):
        with pytest.raises(ConfigError):
            ImputationSpec("knn", ["a"], knn_neighbors=0)

    def test_columns_must_be_a_list(self):
        with pytest.raises(ConfigError, match="list of column names"):
            ImputationSpec("mean", "age")

    def test_from_dict(self):
        spec = ImputationSpec.from_dict({"method": "forward-fill", "columns": ["a"]})
        assert spec.method == ImputationMethod.FORWARD_FILL


class TestOutlierSpec:
    """Threshold shape is fixed by the method."""

    def test_iqr_from_dict(self):
        spec = OutlierSpec.from_dict({"method": "iqr", "threshold": 2, "columns": ["x"]})

        assert isinstance(spec, IQROutlierSpec)
        assert spec.threshold == 2.0
        assert spec.action == OutlierAction.CAP

    def test_defaults_per_method(self):
        assert OutlierSpec.from_dict({"method": "iqr"}).threshold == 1.5
        assert OutlierSpec.from_dict({"method": "z-score"}).threshold == 3.0

        winsor = OutlierSpec.from_dict({"method": "winsorization"})
        assert (winsor.lower, winsor.upper) == (0.05, 0.95)

    def test_winsorization_pair(self):
        spec = OutlierSpec.from_dict({
            "method": "winsorization",
            "threshold": {"lower": 0.1, "upper": 0.9},
            "action": "remove",
        })

        assert isinstance(spec, WinsorizationSpec)
        assert (spec.lower, spec.upper) == (0.1, 0.9)
        assert spec.action == OutlierAction.REMOVE

    def test_winsorization_rejects_scalar(self):
        with pytest.raises(ConfigError, match="lower, upper"):
            OutlierSpec.from_dict({"method": "winsorization", "threshold": 0.05})

    def test_scalar_method_rejects_pair(self):
        with pytest.raises(ConfigError, match="must be a number"):
            OutlierSpec.from_dict({"method": "z-score", "threshold": {"lower": 1}})

    @pytest.mark.parametrize("threshold", [0, -1, "high", float("inf")])
    def test_threshold_must_be_positive(self, threshold):
        with pytest.raises(ConfigError):
            ZScoreOutlierSpec(columns=["x"], threshold=threshold)

    def test_winsorization_order(self):
        with pytest.raises(ConfigError):
            WinsorizationSpec(lower=0.9, upper=0.1)

    def test_unknown_method(self):
        with pytest.raises(ConfigError, match="Unknown outlier method"):
            OutlierSpec.from_dict({"method": "mad"})


class TestValidationRule:

    def test_range_value_becomes_tuple(self):
        rule = ValidationRule("age", "range", [18, 65])
        assert rule.value == (18, 65)

    @pytest.mark.parametrize("value", [None, 5, [1], "1-5"])
    def test_range_needs_pair(self, value):
        with pytest.raises(ConfigError, match="Range rule"):
            ValidationRule("age", "range", value)

    def test_label_uses_id_when_given(self):
        assert ValidationRule("age", "greater-than", 0, id="adult").label == "adult"
        assert "age greater-than 0" in ValidationRule("age", "greater-than", 0).label

    def test_from_dict_defaults_to_remove(self):
        rule = ValidationRule.from_dict({"column": "age", "condition": "less-than", "value": 120})
        assert rule.condition == RuleCondition.LESS_THAN
        assert rule.action.value == "remove"

    def test_from_dict_needs_column_and_condition(self):
        with pytest.raises(ConfigError):
            ValidationRule.from_dict({"column": "age"})


class TestSectionConfigs:

    def test_cleaning_from_dict_skips_absent_sections(self):
        config = CleaningConfig.from_dict({"rules": [{"column": "a", "condition": "equals", "value": 1}]})

        assert config.imputation is None
        assert config.outliers is None
        assert len(config.rules) == 1

    def test_weight_config_accepts_camel_case(self):
        config = WeightConfig.from_dict({"weightColumn": "wt", "stratificationColumns": ["region"]})

        assert config.weight_column == "wt"
        assert config.stratification_columns == ("region",)

    def test_blank_weight_column_means_unweighted(self):
        assert WeightConfig(weight_column="").weight_column is None

    @pytest.mark.parametrize("level", [0.90, 0.95, 0.99, "0.9"])
    def test_supported_confidence_levels(self, level):
        assert AnalysisConfig(confidence_level=level).confidence_level in (0.90, 0.95, 0.99)

    def test_unsupported_confidence_level(self):
        with pytest.raises(ConfigError, match="Unsupported confidence level"):
            AnalysisConfig(confidence_level=0.8)

    def test_analysis_from_dict_snake_case(self):
        config = AnalysisConfig.from_dict({"target_columns": ["y"], "confidence_level": 0.99})
        assert config.target_columns == ("y",)
        assert config.confidence_level == 0.99
