"""
Results
=======

Responsibility:
- Immutable result rows, one per fitted combination.
- Concatenation into a single ordered result table.
- Hyperparameter projection and tabular views for downstream analysis.
"""

from .result_table import ResultRow, ResultTable

__all__ = ['ResultRow', 'ResultTable']
