"""
Fitting capability.

A learner is anything with a ``name`` and ``fit(formula, data, params)``
returning an opaque artifact. Estimator learners wrap scikit-learn estimators
and return a ``FittedModel``; callable learners hand the formula, the
training frame and the hyperparameters to a user function untouched.
"""
import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Union

import numpy as np
import pandas as pd
from sklearn.base import clone

from pipelearner.formula import Formula
from pipelearner.model_factory.model_factory import ModelFactory
from pipelearner.utils.exceptions import ConfigurationError, PredictionError


@dataclass
class FittedModel:
    """A fitted estimator together with what is needed to predict new frames."""
    estimator: Any
    formula: Formula
    feature_names: List[str]
    model_name: str
    params: Dict[str, Any] = field(default_factory=dict)

    @property
    def target(self) -> str:
        return self.formula.target

    def predict(self, data: pd.DataFrame) -> np.ndarray:
        X = self.formula.design_matrix(data, feature_names=self.feature_names)
        try:
            return self.estimator.predict(X)
        except Exception as e:
            raise PredictionError(f"{self.model_name} failed to predict: {e}") from e


class EstimatorLearner:
    """Fits a scikit-learn estimator given by registered name, class or instance."""

    def __init__(self, model: Union[str, type, Any], strict: bool = True):
        if isinstance(model, str):
            try:
                ModelFactory.get_class(model)
            except ValueError as e:
                raise ConfigurationError(str(e)) from e
            self.name = model
        elif inspect.isclass(model):
            self.name = model.__name__
        else:
            self.name = type(model).__name__
        self.model = model
        self.strict = strict

    def __repr__(self):
        return f"EstimatorLearner({self.name})"

    def build(self, params: Dict[str, Any]) -> Any:
        if isinstance(self.model, str):
            return ModelFactory.create(self.model, params, strict=self.strict)
        if inspect.isclass(self.model):
            if not self.strict:
                params = ModelFactory._filter_params(self.model, params)
            return self.model(**params)
        return clone(self.model).set_params(**params)

    def fit(self, formula: Formula, data: pd.DataFrame, params: Dict[str, Any]) -> FittedModel:
        X = formula.design_matrix(data)
        y = formula.response(data)
        estimator = self.build(dict(params))
        estimator.fit(X, y)
        return FittedModel(
            estimator=estimator,
            formula=formula,
            feature_names=list(X.columns),
            model_name=self.name,
            params=dict(params),
        )


class CallableLearner:
    """Wraps ``fn(formula, data, **params)``; the returned artifact is kept as is."""

    def __init__(self, fn: Callable[..., Any], name: str = None):
        self.fn = fn
        self.name = name or getattr(fn, '__name__', type(fn).__name__)

    def __repr__(self):
        return f"CallableLearner({self.name})"

    def fit(self, formula: Formula, data: pd.DataFrame, params: Dict[str, Any]) -> Any:
        return self.fn(formula, data, **params)


def resolve_learner(model: Any, strict: bool = True):
    """Map any supported fitting function reference onto a learner."""
    if isinstance(model, (EstimatorLearner, CallableLearner)):
        return model
    if isinstance(model, str):
        return EstimatorLearner(model, strict=strict)
    if inspect.isclass(model):
        if hasattr(model, 'fit'):
            return EstimatorLearner(model, strict=strict)
        raise ConfigurationError(f"Class {model.__name__} has no 'fit' method.")
    if hasattr(model, 'fit') and hasattr(model, 'get_params'):
        return EstimatorLearner(model, strict=strict)
    if callable(model):
        return CallableLearner(model)
    raise ConfigurationError(
        f"Cannot use {model!r} as a model: expected an estimator name, an estimator class or instance, or a callable."
    )


def predict(fit: Any, data: pd.DataFrame) -> np.ndarray:
    """Predict with any fit artifact exposing ``predict(frame)``."""
    if fit is None:
        raise PredictionError("Cannot predict with a failed fit.")
    if not hasattr(fit, 'predict'):
        raise PredictionError(f"Fit artifact of type {type(fit).__name__} has no 'predict' method.")
    return np.asarray(fit.predict(data))
