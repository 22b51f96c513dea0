"""
Tests for column profiling
"""

import pytest

from survey_engine.dataset import TabularDataset
from survey_engine.profiling import ColumnProfiler


class TestColumnProfiler:
    """Per-column quality figures."""

    def test_numeric_profile(self, survey_dataset):
        profile = ColumnProfiler(survey_dataset).profile_column("age")

        assert profile["type"] == "numeric"
        assert profile["missing"] == 1
        assert profile["missing_pct"] == 12.5
        assert profile["unique"] == 7
        assert profile["min"] == -3.0
        assert profile["max"] == 52.0

    def test_text_profile(self, survey_dataset):
        profile = ColumnProfiler(survey_dataset).profile_column("region")

        assert profile["type"] == "text"
        assert profile["missing"] == 1
        assert profile["unique"] == 3
        assert "mean" not in profile

    def test_summary_covers_every_header(self, survey_dataset):
        summary = ColumnProfiler(survey_dataset).summary()
        assert list(summary) == list(survey_dataset.headers)

    def test_sparse_columns(self):
        ds = TabularDataset.from_records([
            {"a": 1, "b": None},
            {"a": 2, "b": None},
            {"a": 3, "b": 1},
        ])
        assert ColumnProfiler(ds).sparse_columns(max_missing_pct=50.0) == ["b"]

    @pytest.mark.parametrize("kept,expected", [(8, 100.0), (7, 87.5), (0, 0.0)])
    def test_retention(self, survey_dataset, kept, expected):
        cleaned = survey_dataset.with_rows(survey_dataset.rows[:kept])
        assert ColumnProfiler.retention(survey_dataset, cleaned) == expected

    def test_retention_without_cleaning(self, survey_dataset):
        assert ColumnProfiler.retention(survey_dataset, None) == 100.0
