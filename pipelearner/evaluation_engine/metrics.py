from dataclasses import dataclass
from typing import Callable

import numpy as np
from sklearn.metrics import (
    accuracy_score,
    balanced_accuracy_score,
    f1_score,
    mean_absolute_error,
    mean_squared_error,
    r2_score,
)

from pipelearner.utils.exceptions import ConfigurationError


@dataclass(frozen=True)
class Metric:
    name: str
    func: Callable
    greater_is_better: bool = True

    def __call__(self, y_true, y_pred) -> float:
        return float(self.func(y_true, y_pred))


def _f1_macro(y_true, y_pred):
    return f1_score(y_true, y_pred, average='macro')


def _rmse(y_true, y_pred):
    return np.sqrt(mean_squared_error(y_true, y_pred))


METRICS = {
    'accuracy': Metric('accuracy', accuracy_score),
    'balanced_accuracy': Metric('balanced_accuracy', balanced_accuracy_score),
    'f1_macro': Metric('f1_macro', _f1_macro),
    'r2': Metric('r2', r2_score),
    'mae': Metric('mae', mean_absolute_error, greater_is_better=False),
    'rmse': Metric('rmse', _rmse, greater_is_better=False),
}


def get_metric(metric) -> Metric:
    """Look up a metric by name; Metric instances pass through."""
    if isinstance(metric, Metric):
        return metric
    if metric not in METRICS:
        raise ConfigurationError(f"Unknown metric '{metric}'. Available: {list(METRICS)}")
    return METRICS[metric]
