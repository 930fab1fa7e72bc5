"""
ResamplingEngine for pipelearner.

Splits a dataset into one or more train/test pairs. The partitioning policy
(holdout, k-fold or bootstrap), the number of pairs, the test proportion,
the seed and an optional stratification column all come from the
'resampling' configuration section, never from hard-coded values.
"""
import logging
import math
import warnings
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd
from sklearn.model_selection import KFold, ShuffleSplit, StratifiedKFold, StratifiedShuffleSplit

from pipelearner.base import BaseEngine
from pipelearner.utils import constants
from pipelearner.utils.error_handling import handle_engine_errors
from pipelearner.utils.exceptions import DataValidationError

MAX_BOOTSTRAP_ATTEMPTS = 100


class Resample:
    """
    A lazy view of some rows of a dataset.

    Holds a reference to the data and the positional row indices; nothing is
    copied until ``to_frame()`` is called.
    """

    def __init__(self, data: pd.DataFrame, idx):
        self.data = data
        self.idx = np.asarray(idx, dtype=int)

    def __len__(self) -> int:
        return len(self.idx)

    def __repr__(self):
        return f"<Resample [{len(self.idx)} x {self.data.shape[1]}]>"

    def to_frame(self) -> pd.DataFrame:
        return self.data.iloc[self.idx]

    as_data_frame = to_frame


@dataclass(frozen=True)
class ResampleSplit:
    """One train/test pair."""
    split_id: int
    train: Resample
    test: Resample


class ResamplingEngine(BaseEngine):
    """
    Produces train/test pairs from a dataset.

    Stratified splitting is attempted when 'resampling.stratify' names a
    column; when a class is too small for the requested pairs the engine
    falls back to the plain splitter and logs why.
    """

    def __init__(self, config: dict, logger: Optional[logging.Logger] = None):
        super().__init__(config, logger)
        self.resampling = self.config.get('resampling', {})
        self.method = self.resampling.get('method', 'holdout')
        n_splits = self.resampling.get('n_splits')
        self.n_splits = n_splits if n_splits is not None else constants.DEFAULT_N_SPLITS[self.method]
        self.test_size = self.resampling.get('test_size', 0.2)
        self.shuffle = self.resampling.get('shuffle', True)
        self.stratify = self.resampling.get('stratify')
        seeds = self.config.get('_internal_seeds', {})
        self.seed = seeds.get('resample', self.resampling.get('seed'))
        self.curve_seed = seeds.get('curves')

    def _get_engine_directory_name(self) -> Optional[str]:
        return None

    @handle_engine_errors("Resampling", wrap_as=DataValidationError)
    def execute(self, data: pd.DataFrame) -> List[ResampleSplit]:
        return self.split(data)

    def split(self, data: pd.DataFrame) -> List[ResampleSplit]:
        """
        Build every train/test pair for ``data``.

        Returns:
            List of ResampleSplit with ids starting at 1.
        """
        n_rows = len(data)
        if n_rows < 2:
            raise DataValidationError(f"Need at least 2 rows to resample, got {n_rows}.")

        labels = self._stratification_labels(data)

        if self.method == 'holdout':
            pairs = self._holdout(n_rows, labels)
        elif self.method == 'kfold':
            pairs = self._kfold(n_rows, labels)
        else:
            pairs = self._bootstrap(n_rows)

        splits = [
            ResampleSplit(split_id=i + 1, train=Resample(data, train_idx), test=Resample(data, test_idx))
            for i, (train_idx, test_idx) in enumerate(pairs)
        ]
        self.logger.info(
            f"Resampled {n_rows} rows into {len(splits)} {self.method} pair(s) "
            f"(train={len(splits[0].train)}, test={len(splits[0].test)})"
        )
        return splits

    def learning_curve(self, split: ResampleSplit, fractions: List[float]) -> List[Tuple[float, Resample]]:
        """
        Nested training subsets for each proportion in ``fractions``.

        The training rows are permuted once per split, then the first
        ceil(p * n) rows are kept, so smaller subsets are contained in
        larger ones.
        """
        n_train = len(split.train)
        seed = None if self.curve_seed is None else self.curve_seed + split.split_id
        order = np.random.RandomState(seed).permutation(n_train)

        subsets = []
        for p in fractions:
            if p >= 1.0:
                subsets.append((p, split.train))
                continue
            n_keep = max(1, math.ceil(p * n_train))
            subsets.append((p, Resample(split.train.data, split.train.idx[order[:n_keep]])))
        return subsets

    def _stratification_labels(self, data: pd.DataFrame) -> Optional[pd.Series]:
        if not self.stratify:
            return None
        if self.stratify not in data.columns:
            raise DataValidationError(f"Stratification column '{self.stratify}' is not in the data.")
        if self.method == 'bootstrap':
            self.logger.warning("Stratification is not applied to bootstrap resampling; ignoring 'stratify'.")
            return None
        return data[self.stratify]

    def _holdout(self, n_rows: int, labels: Optional[pd.Series]):
        X = np.zeros((n_rows, 1))
        if labels is not None:
            splitter = StratifiedShuffleSplit(n_splits=self.n_splits, test_size=self.test_size, random_state=self.seed)
            pairs = self._try_stratified(splitter, X, labels)
            if pairs is not None:
                return pairs

        splitter = ShuffleSplit(n_splits=self.n_splits, test_size=self.test_size, random_state=self.seed)
        try:
            return list(splitter.split(X))
        except ValueError as e:
            raise DataValidationError(f"Holdout split failed for {n_rows} rows: {e}") from e

    def _kfold(self, n_rows: int, labels: Optional[pd.Series]):
        if self.n_splits > n_rows:
            raise DataValidationError(f"Cannot build {self.n_splits} folds from {n_rows} rows.")

        X = np.zeros((n_rows, 1))
        random_state = self.seed if self.shuffle else None
        if labels is not None:
            splitter = StratifiedKFold(n_splits=self.n_splits, shuffle=self.shuffle, random_state=random_state)
            pairs = self._try_stratified(splitter, X, labels)
            if pairs is not None:
                return pairs

        splitter = KFold(n_splits=self.n_splits, shuffle=self.shuffle, random_state=random_state)
        return list(splitter.split(X))

    def _try_stratified(self, splitter, X, labels: pd.Series):
        """Return stratified pairs, or None when the labels cannot support them."""
        try:
            with warnings.catch_warnings():
                # sklearn only warns when a class has fewer members than folds
                warnings.simplefilter('error', UserWarning)
                return list(splitter.split(X, labels))
        except (ValueError, UserWarning) as e:
            self.logger.warning(f"Cannot stratify on '{self.stratify}' ({e}). Falling back to random splitting.")
            return None

    def _bootstrap(self, n_rows: int):
        """Draw n rows with replacement for training; out-of-bag rows form the test set."""
        rng = np.random.RandomState(self.seed)
        all_rows = np.arange(n_rows)
        pairs = []
        for i in range(self.n_splits):
            for _ in range(MAX_BOOTSTRAP_ATTEMPTS):
                train_idx = rng.choice(n_rows, size=n_rows, replace=True)
                test_idx = np.setdiff1d(all_rows, train_idx)
                if len(test_idx):
                    break
            else:
                raise DataValidationError(
                    f"Bootstrap draw {i + 1} left no out-of-bag rows after {MAX_BOOTSTRAP_ATTEMPTS} attempts."
                )
            pairs.append((train_idx, test_idx))
        return pairs
