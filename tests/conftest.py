"""
Pytest fixtures for Survey Engine tests
"""

import pytest
import pandas as pd
import numpy as np

from survey_engine.dataset import TabularDataset


@pytest.fixture
def simple_dataset():
    """Single column with one missing cell."""
    return TabularDataset.from_records(
        [{"x": 1}, {"x": 2}, {"x": 3}, {"x": None}, {"x": 5}]
    )


@pytest.fixture
def survey_dataset():
    """Small mixed survey: numeric answers, a category, weights, gaps."""
    records = [
        {"id": 1, "age": 34, "income": 52000, "region": "north", "wt": 1.2},
        {"id": 2, "age": 45, "income": 61000, "region": "south", "wt": 0.8},
        {"id": 3, "age": None, "income": 48000, "region": "north", "wt": 1.0},
        {"id": 4, "age": 29, "income": None, "region": "east", "wt": 1.5},
        {"id": 5, "age": 52, "income": 75000, "region": None, "wt": 0.9},
        {"id": 6, "age": 38, "income": 58000, "region": "south", "wt": 1.1},
        {"id": 7, "age": -3, "income": 51000, "region": "north", "wt": 1.0},
        {"id": 8, "age": 41, "income": 990000, "region": "east", "wt": 1.3},
    ]
    return TabularDataset.from_records(records)


@pytest.fixture
def random_survey():
    """Larger random survey with scattered missing values."""
    np.random.seed(42)
    n = 120

    df = pd.DataFrame({
        "respondent_id": np.arange(n),
        "age": np.random.randint(18, 80, n).astype(float),
        "income": np.random.normal(55000, 12000, n),
        "score": np.random.normal(70, 8, n),
        "region": np.random.choice(["north", "south", "east", "west"], n),
        "sampling_weight": np.random.uniform(0.5, 2.0, n),
    })

    # Add missing patterns
    df.loc[[3, 17, 40, 88], "income"] = np.nan
    df.loc[[5, 60], "score"] = np.nan
    df.loc[[10, 11], "region"] = None

    # A few extreme incomes
    df.loc[[7, 99], "income"] = [400000.0, 650000.0]

    return TabularDataset.from_frame(df)
