import copy
import logging
from typing import Any, Dict, List, Optional, Sequence, Union

import pandas as pd

from pipelearner.config_manager import ConfigurationManager
from pipelearner.formula import Formula
from pipelearner.learning_engine import LearningEngine, ModelEntry
from pipelearner.model_factory import resolve_learner
from pipelearner.resampling_engine import ResampleSplit, ResamplingEngine
from pipelearner.results import ResultTable
from pipelearner.utils.exceptions import ConfigurationError, DataValidationError


_KEEP_SEED = object()


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


class PipeLearner:
    """
    Builder for a grid search over one dataset.

    Configuration methods return the builder so calls can be chained::

        results = (
            PipeLearner(mtcars)
            .learn_cvpairs('kfold', n_splits=5, seed=1)
            .learn_models(DecisionTreeClassifier, 'am ~ .', max_depth=[2, 5])
            .learn()
        )

    Nothing is fitted until ``learn()``.
    """

    def __init__(self, data: pd.DataFrame, config: Optional[Dict[str, Any]] = None,
                 logger: Optional[logging.Logger] = None):
        if not isinstance(data, pd.DataFrame):
            raise DataValidationError(f"PipeLearner needs a pandas DataFrame, got {type(data).__name__}.")
        if data.empty:
            raise DataValidationError("PipeLearner needs a non-empty DataFrame.")

        self.data = data
        self.logger = logger or logging.getLogger(__name__)
        self.config = ConfigurationManager.from_dict(config)
        self.entries: List[ModelEntry] = []

    def __repr__(self):
        resampling = self.config['resampling']
        return (
            f"<PipeLearner data={self.data.shape[0]}x{self.data.shape[1]} "
            f"cvpairs={resampling['method']} entries={len(self.entries)} "
            f"train_p={self.config['learning_curves']['train_fractions']}>"
        )

    def _reconfigure(self, section: str, **values) -> None:
        updated = copy.deepcopy(self.config)
        updated.pop('_internal_seeds', None)
        updated[section].update(values)
        self.config = ConfigurationManager.from_dict(updated)

    def learn_cvpairs(self, method: str = 'holdout', n_splits: Optional[int] = None,
                      test_size: Optional[float] = None, seed: Any = _KEEP_SEED,
                      stratify: Optional[str] = None, shuffle: Optional[bool] = None) -> "PipeLearner":
        """
        Choose how train/test pairs are drawn.

        Args:
            method: 'holdout', 'kfold' or 'bootstrap'.
            n_splits: Number of pairs (method default when omitted).
            test_size: Test proportion for holdout.
            seed: Seed for reproducible pairs; None draws unseeded pairs.
                The configured seed is kept when omitted.
            stratify: Column to stratify holdout/k-fold splits on.
            shuffle: Shuffle rows before k-fold splitting.
        """
        values = {'method': method, 'n_splits': n_splits, 'stratify': stratify}
        if test_size is not None:
            values['test_size'] = test_size
        if seed is not _KEEP_SEED:
            values['seed'] = seed
        if shuffle is not None:
            values['shuffle'] = shuffle
        self._reconfigure('resampling', **values)
        return self

    def learn_curves(self, *fractions: float) -> "PipeLearner":
        """Fit every model on these proportions of each training partition."""
        if len(fractions) == 1 and isinstance(fractions[0], (list, tuple)):
            fractions = tuple(fractions[0])
        if not fractions:
            raise ConfigurationError("learn_curves() needs at least one training proportion.")
        self._reconfigure('learning_curves', train_fractions=[float(p) for p in fractions])
        return self

    def learn_models(self, models: Any, formulas: Union[str, Formula, Sequence[Union[str, Formula]]],
                     **hyperparameters) -> "PipeLearner":
        """
        Register model entries.

        One entry is created per (model, formula) pair and each gets the
        given hyperparameter grid. Grids from separate calls are never
        combined with each other.
        """
        strict = not self.config.get('execution', {}).get('drop_unknown_params', False)
        for model in _as_list(models):
            learner = resolve_learner(model, strict=strict)
            for formula in _as_list(formulas):
                entry = ModelEntry.create(len(self.entries) + 1, learner, formula, hyperparameters)
                self.entries.append(entry)
                self.logger.debug(f"Registered entry {entry.entry_id}: {entry.name} {entry.formula} {list(entry.grid)}")
        return self

    def cv_pairs(self) -> List[ResampleSplit]:
        """The train/test pairs learn() will use."""
        return ResamplingEngine(self.config, self.logger).execute(self.data)

    def learn(self) -> ResultTable:
        """Fit everything and return the result table."""
        return LearningEngine(self.config, self.logger).execute(self.data, self.entries)
