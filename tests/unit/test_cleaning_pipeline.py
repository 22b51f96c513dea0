"""
Tests for the three-stage cleaning pipeline
"""

import pytest

from survey_engine.cleaning import CleaningPipeline
from survey_engine.dataset import TabularDataset, is_missing
from survey_engine.models import (
    CleaningConfig,
    ImputationSpec,
    IQROutlierSpec,
    ValidationRule,
    WinsorizationSpec,
)


class TestCleaningPipeline:
    """Stage ordering and audit trail."""

    def test_empty_config_is_identity(self, survey_dataset):
        result = CleaningPipeline().run(survey_dataset, CleaningConfig())

        assert result.dataset == survey_dataset
        assert result.steps == []
        assert result.flags == []

    def test_bounds_are_computed_after_imputation(self):
        ds = TabularDataset.from_records([{"x": v} for v in [1, 2, 3, None, 100]])
        config = CleaningConfig(
            imputation=ImputationSpec("mean", ["x"]),
            outliers=IQROutlierSpec(columns=["x"]),
        )
        result = CleaningPipeline().run(ds, config)

        # imputed 26.5 moves Q3, so the upper fence is 26.5 + 1.5 * 24.5
        assert [r["x"] for r in result.dataset.rows] == [1, 2, 3, 26.5, pytest.approx(63.25)]

    def test_rules_see_capped_values(self):
        ds = TabularDataset.from_records([{"x": v} for v in [1, 2, 3, 4, 100]])
        config = CleaningConfig(
            outliers=IQROutlierSpec(columns=["x"]),
            rules=[ValidationRule("x", "less-than", 50)],
        )
        result = CleaningPipeline().run(ds, config)

        # 100 is capped to 7 before the rule runs, so nothing is removed
        assert len(result.dataset) == 5

    def test_steps_recorded_in_order(self, survey_dataset):
        config = CleaningConfig(
            imputation=ImputationSpec("median", ["age", "income"]),
            outliers=WinsorizationSpec(columns=["income"]),
            rules=[ValidationRule("age", "greater-than", 0)],
        )
        result = CleaningPipeline().run(survey_dataset, config)

        assert [s.stage for s in result.steps] == ["imputation", "outliers", "rules"]
        assert result.steps[0].cells_changed == 2
        assert result.steps[2].rows_removed == 1
        assert len(result.dataset) == 7

    def test_input_is_not_modified(self, survey_dataset):
        before = [dict(r) for r in survey_dataset.rows]
        config = CleaningConfig(
            imputation=ImputationSpec("mean", ["age"]),
            outliers=IQROutlierSpec(columns=["income"], action="remove"),
        )
        CleaningPipeline().run(survey_dataset, config)

        assert [dict(r) for r in survey_dataset.rows] == before

    def test_headers_survive_cleaning(self, survey_dataset):
        config = CleaningConfig(imputation=ImputationSpec("remove", ["age"]))
        result = CleaningPipeline().run(survey_dataset, config)
        assert result.dataset.headers == survey_dataset.headers

    def test_flags_and_summary(self, survey_dataset):
        config = CleaningConfig(
            rules=[ValidationRule("income", "less-than", 500000, action="flag")],
        )
        result = CleaningPipeline().run(survey_dataset, config)
        summary = result.summary()

        assert summary["rows"] == 8
        assert summary["flags"] == 1
        assert summary["steps"][0]["stage"] == "rules"

    def test_full_clean_of_random_survey(self, random_survey):
        config = CleaningConfig(
            imputation=ImputationSpec("knn", ["income", "score"]),
            outliers=IQROutlierSpec(columns=["income"], action="remove"),
        )
        result = CleaningPipeline().run(random_survey, config)

        assert len(result.dataset) < len(random_survey)
        incomes = [r["income"] for r in result.dataset.rows]
        assert not any(is_missing(v) for v in incomes)
        assert max(incomes) < 400000

    def test_stage_logs_do_not_accumulate_across_runs(self, survey_dataset):
        pipeline = CleaningPipeline()
        config = CleaningConfig(
            imputation=ImputationSpec("mean", ["age"]),
            rules=[ValidationRule("age", "greater-than", 0)],
        )

        first = pipeline.run(survey_dataset, config)
        for _ in range(3):
            pipeline.run(survey_dataset, config)

        assert len(pipeline.imputation.cleaning_log) == 1
        assert len(pipeline.rules.cleaning_log) == 1
        assert pipeline.outliers.cleaning_log == []
        # earlier results keep their own audit records
        assert [s.stage for s in first.steps] == ["imputation", "rules"]
