"""
Evaluation Engine
=================

Responsibility:
- Registry of scoring metrics.
- Scoring every successful fit on its own train/test partitions.
- Picking the best grid combination across resamples.
"""

from .metrics import METRICS, Metric, get_metric
from .evaluation_engine import EvaluationEngine, best_configuration, score_table

__all__ = ['METRICS', 'Metric', 'get_metric', 'EvaluationEngine', 'best_configuration', 'score_table']
