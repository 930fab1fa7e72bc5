"""
Learning Engine
===============

Responsibility:
- Pre-flight validation of model entries against the data.
- Expansion of every entry's grid in isolation.
- Fitting every (entry x combination x split x training proportion) task,
  optionally in parallel.
- Explicit failure policy (abort the batch or record failed rows).
"""

from .model_entry import FitTask, ModelEntry
from .learning_engine import LearningEngine

__all__ = ['FitTask', 'LearningEngine', 'ModelEntry']
