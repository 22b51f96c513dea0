"""
Survey Engine Configuration
===========================

Project metadata, path resolution and the numeric defaults shared by the
cleaning and estimation stages.
"""

__version__ = "0.1.0"
__author__ = "Survey Engine Contributors"
__project__ = "Survey Engine"

from pathlib import Path
import os


def get_project_root() -> Path:
    """
    Get project root directory.

    Resolution order:
    1. SURVEY_ENGINE_ROOT environment variable (if set and existing)
    2. Parent of the survey_engine package (standard case)

    Returns:
        Path to the project root directory
    """
    env_root = os.environ.get('SURVEY_ENGINE_ROOT')
    if env_root:
        env_path = Path(env_root)
        if env_path.exists():
            return env_path

    return Path(__file__).parent.parent.resolve()


PROJECT_ROOT = get_project_root()
LOGS_DIR = PROJECT_ROOT / 'logs'


def ensure_dir(path: Path) -> Path:
    """Create directory if it doesn't exist and return the path."""
    path.mkdir(parents=True, exist_ok=True)
    return path


# ---------------------------------------------------------------------------
# Column classification
# ---------------------------------------------------------------------------

# A column is numeric when at least this share of its sampled values parse
CLASSIFICATION_SAMPLE_SIZE = 100
CLASSIFICATION_NUMERIC_RATIO = 0.7

# ---------------------------------------------------------------------------
# Imputation
# ---------------------------------------------------------------------------

KNN_NEIGHBORS = 5
KNN_EPSILON = 1e-8

# ---------------------------------------------------------------------------
# Outliers
# ---------------------------------------------------------------------------

IQR_THRESHOLD = 1.5
ZSCORE_THRESHOLD = 3.0
WINSOR_LOWER = 0.05
WINSOR_UPPER = 0.95

# ---------------------------------------------------------------------------
# Estimation
# ---------------------------------------------------------------------------

CONFIDENCE_LEVELS = (0.90, 0.95, 0.99)

# (minimum degrees of freedom, critical value), checked top to bottom
T_CRITICAL_TABLE = (
    (30, 1.96),
    (20, 2.086),
    (10, 2.228),
)
T_CRITICAL_FLOOR = 2.571

DESCRIPTIVE_DECIMALS = 4
