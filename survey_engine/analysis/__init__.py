"""
Survey Engine - Statistical Analysis

Components:
    - estimation.py  : Weighted means, standard errors, confidence intervals
    - descriptive.py : Unweighted count/mean/median/std/min/max
"""

from .estimation import EstimationEngine, t_critical_exact, t_critical_table
from .descriptive import DescriptiveStatsEngine

__all__ = [
    'EstimationEngine',
    't_critical_exact',
    't_critical_table',
    'DescriptiveStatsEngine',
]
