"""
Survey Engine - Cleaning and weighted estimation for survey datasets

Turns a rectangular survey dataset into a cleaned dataset (imputed, outlier
treated, rule filtered) plus weighted population estimates with confidence
intervals and descriptive statistics.

Usage:
    from survey_engine import SurveyEngine, TabularDataset
    from survey_engine.recommendations import suggest_configs

    dataset = TabularDataset.from_frame(df)
    cleaning, weights, analysis = suggest_configs(dataset)

    result = SurveyEngine().run(dataset, cleaning, weights, analysis)
    print(result.estimates)
"""

from .config import __version__

PACKAGE_STRUCTURE = """
survey_engine/
├── dataset.py        -> from survey_engine import TabularDataset
├── models.py         -> CleaningConfig, WeightConfig, AnalysisConfig, results
├── cleaning/         -> from survey_engine.cleaning import CleaningPipeline
├── analysis/         -> from survey_engine.analysis import EstimationEngine
├── profiling.py      -> from survey_engine.profiling import ColumnProfiler
├── engine.py         -> from survey_engine import SurveyEngine
└── utils/            -> from survey_engine.utils import setup_logging
"""


# Lazy imports to avoid circular dependencies
def __getattr__(name):
    if name == "SurveyEngine":
        from .engine import SurveyEngine
        return SurveyEngine
    elif name == "TabularDataset":
        from .dataset import TabularDataset
        return TabularDataset
    elif name == "CleaningPipeline":
        from .cleaning import CleaningPipeline
        return CleaningPipeline
    elif name == "EstimationEngine":
        from .analysis import EstimationEngine
        return EstimationEngine
    raise AttributeError(f"module 'survey_engine' has no attribute '{name}'")
