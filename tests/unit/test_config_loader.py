"""
Tests for YAML run configuration loading
"""

import pytest

from survey_engine.config_loader import RunConfig, load_config_file, parse_run_config
from survey_engine.exceptions import ConfigError
from survey_engine.models import ImputationMethod, WinsorizationSpec


RUN_YAML = """
cleaning:
  imputation:
    method: median
    columns: [income, age]
  outliers:
    method: winsorization
    threshold: {lower: 0.05, upper: 0.95}
    action: cap
    columns: [income]
  rules:
    - {column: age, condition: greater-than, value: 0, action: remove}
weights:
  weightColumn: wt
analysis:
  targetColumns: [income, age]
  confidenceLevel: 0.9
"""


class TestLoadConfigFile:

    def test_loads_all_sections(self, tmp_path):
        path = tmp_path / "run.yaml"
        path.write_text(RUN_YAML)

        config = load_config_file(path)

        assert config.cleaning.imputation.method == ImputationMethod.MEDIAN
        assert isinstance(config.cleaning.outliers, WinsorizationSpec)
        assert len(config.cleaning.rules) == 1
        assert config.weights.weight_column == "wt"
        assert config.analysis.target_columns == ("income", "age")
        assert config.analysis.confidence_level == 0.90

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        config = load_config_file(path)
        assert config == RunConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config_file(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("cleaning: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config_file(path)


class TestParseRunConfig:

    def test_unknown_section(self):
        with pytest.raises(ConfigError, match="Unknown configuration sections"):
            parse_run_config({"reporting": {}})

    def test_not_a_mapping(self):
        with pytest.raises(ConfigError, match="must be a mapping"):
            parse_run_config(["cleaning"])

    def test_invalid_value_propagates(self):
        with pytest.raises(ConfigError, match="Unknown imputation method"):
            parse_run_config({"cleaning": {"imputation": {"method": "magic", "columns": ["a"]}}})
