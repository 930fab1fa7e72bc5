import logging
from collections.abc import Iterator, Sequence
from typing import Any, Dict, List, Mapping

import numpy as np
import pandas as pd
from sklearn.model_selection import ParameterGrid

from pipelearner.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _as_value_set(name: str, values: Any) -> List[Any]:
    """Turn one grid dimension into an ordered, non-empty list."""
    if isinstance(values, (set, frozenset)):
        raise ConfigurationError(
            f"Hyperparameter '{name}' uses an unordered set; pass a list to keep the expansion order stable."
        )
    if isinstance(values, np.ndarray):
        if values.ndim > 1:
            raise ConfigurationError(f"Hyperparameter '{name}' must be one-dimensional, got shape {values.shape}.")
        value_set = [values.item()] if values.ndim == 0 else values.tolist()
    elif isinstance(values, (pd.Series, pd.Index)):
        value_set = values.tolist()
    elif isinstance(values, (Sequence, Iterator)) and not isinstance(values, (str, bytes)):
        value_set = list(values)
    else:
        # Scalars, strings, dicts, estimators, callables
        value_set = [values]

    if not value_set:
        raise ConfigurationError(f"Hyperparameter '{name}' needs at least one candidate value.")
    return value_set


def normalize_grid(grid: Mapping[str, Any]) -> Dict[str, List[Any]]:
    """
    Validate a hyperparameter mapping and wrap every dimension in a list.

    Key order is preserved so expanded combinations read in the caller's order.
    """
    if grid is None:
        return {}
    if not isinstance(grid, Mapping):
        raise ConfigurationError(f"Hyperparameter grid must be a mapping, got {type(grid).__name__}.")

    normalized = {}
    for name, values in grid.items():
        if not isinstance(name, str) or not name:
            raise ConfigurationError(f"Hyperparameter names must be non-empty strings, got {name!r}.")
        normalized[name] = _as_value_set(name, values)
    return normalized


def grid_size(grid: Mapping[str, Any]) -> int:
    """Number of combinations the grid expands to, without materializing them."""
    return len(ParameterGrid(normalize_grid(grid)))


def expand_grid(grid: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """
    Expand a hyperparameter mapping into the full list of assignments.

    Ordering follows ``ParameterGrid``: names are visited alphabetically with
    the last name varying fastest; candidate values keep the given order.
    Every assignment carries every hyperparameter, so a size-1 dimension
    still contributes its value to every row. An empty grid yields a single
    empty assignment.
    """
    normalized = normalize_grid(grid)
    combinations = [
        {name: combo[name] for name in normalized}
        for combo in ParameterGrid(normalized)
    ]
    logger.debug(f"Expanded grid over {list(normalized)} into {len(combinations)} combinations")
    return combinations
