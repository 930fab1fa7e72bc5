"""
Reporting Engine
================

Responsibility:
- Persisting the result summary, scores and best configuration.
- Optional persistence of fitted models.
- Learning-curve plot when several training proportions were fitted.
"""

from .reporting_engine import ReportingEngine

__all__ = ['ReportingEngine']
