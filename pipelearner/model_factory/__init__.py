"""
Model Factory
=============

Responsibility:
- Registry of named scikit-learn estimators.
- Resolving any fitting function reference (name, estimator class,
  estimator instance, plain callable) into a learner capability.
- The FittedModel artifact returned by estimator learners.
"""

from .model_factory import ModelFactory
from .learners import CallableLearner, EstimatorLearner, FittedModel, predict, resolve_learner

__all__ = [
    'ModelFactory',
    'EstimatorLearner',
    'CallableLearner',
    'FittedModel',
    'predict',
    'resolve_learner',
]
