"""
Pipeline Builder
================

Responsibility:
- Holding the dataset, resampling, learning-curve and model-entry
  configuration of one grid search.
- Handing the configuration to the learning engine on learn().
"""

from .pipeline import PipeLearner

__all__ = ['PipeLearner']
