import gc
import logging
import time
from typing import Any, List, Optional, Sequence, Tuple

import pandas as pd
from joblib import Parallel, delayed

from pipelearner.base import BaseEngine
from pipelearner.learning_engine.model_entry import FitTask, ModelEntry
from pipelearner.resampling_engine import ResampleSplit, ResamplingEngine
from pipelearner.results import ResultRow, ResultTable
from pipelearner.results.result_table import FAILED, SUCCESS
from pipelearner.utils import constants
from pipelearner.utils.cache import config_signature
from pipelearner.utils.error_handling import handle_engine_errors
from pipelearner.utils.exceptions import ConfigurationError, FitError, ModelTrainingError


def _run_task(task: FitTask, on_error: str) -> Tuple[Any, str, Optional[str]]:
    """Fit one task. Module level so joblib can ship it to worker processes."""
    entry = task.entry
    try:
        fit = entry.learner.fit(entry.formula, task.train.to_frame(), dict(task.params))
        return fit, SUCCESS, None
    except Exception as e:
        message = (
            f"Fit failed for models_id={task.models_id} ({entry.name}, params={task.params}) "
            f"on cv pair {task.split.split_id}: {e}"
        )
        if on_error == constants.ON_ERROR_RAISE:
            raise FitError(message, models_id=task.models_id, params=task.params,
                           cv_pairs_id=task.split.split_id) from e
        return None, FAILED, message


class LearningEngine(BaseEngine):
    """
    Fits every grid combination of every model entry on every resample.

    Each entry's grid is expanded on its own, so two registrations of sizes
    a and b give a + b combinations. Combinations are numbered 1..N across
    entries in registration order ('models_id').
    """

    def __init__(self, config: dict, logger: Optional[logging.Logger] = None):
        super().__init__(config, logger)
        execution = self.config.get('execution', {})
        self.n_jobs = execution.get('n_jobs', 1)
        self.on_error = execution.get('on_error', constants.ON_ERROR_RAISE)
        self.max_configs = self.config.get('resources', {}).get('max_grid_configs', 1000)
        self.train_fractions = self.config.get('learning_curves', {}).get('train_fractions', [1.0])

    def _get_engine_directory_name(self) -> Optional[str]:
        return None

    @handle_engine_errors("Learning", wrap_as=ModelTrainingError)
    def execute(self, data: pd.DataFrame, entries: Sequence[ModelEntry],
                splits: Optional[List[ResampleSplit]] = None) -> ResultTable:
        """
        Validate, resample and fit.

        Args:
            data: The full dataset.
            entries: Registered model entries, in registration order.
            splits: Pre-built train/test pairs; built from the config when omitted.

        Returns:
            ResultTable with one row per fitted task.
        """
        self.validate(data, entries)

        resampler = ResamplingEngine(self.config, self.logger)
        if splits is None:
            splits = resampler.execute(data)

        tasks = self._build_tasks(entries, splits, resampler)
        self.logger.info(
            f"Fitting {len(tasks)} task(s): {len(entries)} model entr{'y' if len(entries) == 1 else 'ies'}, "
            f"{len(splits)} cv pair(s), {len(self.train_fractions)} training proportion(s)"
        )

        start_time = time.time()
        outcomes = Parallel(n_jobs=self.n_jobs)(
            delayed(_run_task)(task, self.on_error) for task in tasks
        )
        duration = time.time() - start_time

        rows = [self._make_row(task, *outcome) for task, outcome in zip(tasks, outcomes)]
        del outcomes
        gc.collect()

        table = ResultTable(rows)
        n_failed = len(table.failed())
        if n_failed:
            self.logger.warning(f"{n_failed} of {len(table)} fits failed and were recorded with status 'failed'.")
        self.logger.info(f"Learning completed in {duration:.2f} seconds ({len(table)} rows).")
        return table

    def validate(self, data: pd.DataFrame, entries: Sequence[ModelEntry]) -> None:
        """Configuration checks that must pass before any fitting starts."""
        if not isinstance(data, pd.DataFrame):
            raise ConfigurationError(f"Data must be a pandas DataFrame, got {type(data).__name__}.")
        if not entries:
            raise ConfigurationError("No models registered. Call learn_models() before learn().")

        for entry in entries:
            entry.formula.validate(data)

        total_configs = sum(len(entry.combinations()) for entry in entries)
        if total_configs > self.max_configs:
            raise ConfigurationError(
                f"Grid Explosion Detected! Total configurations ({total_configs}) exceeds "
                f"safety limit ({self.max_configs}). Reduce the grids or increase 'resources.max_grid_configs'."
            )

    def _build_tasks(self, entries: Sequence[ModelEntry], splits: List[ResampleSplit],
                     resampler: ResamplingEngine) -> List[FitTask]:
        curves = {split.split_id: resampler.learning_curve(split, self.train_fractions) for split in splits}

        tasks = []
        models_id = 0
        for entry in entries:
            combinations = entry.combinations()
            self.logger.info(f"Entry {entry.entry_id} ({entry.name}, {entry.formula}): {len(combinations)} combination(s)")
            for params in combinations:
                models_id += 1
                for split in splits:
                    for train_p, train in curves[split.split_id]:
                        tasks.append(FitTask(
                            models_id=models_id,
                            entry=entry,
                            params=params,
                            split=split,
                            train_p=train_p,
                            train=train,
                        ))
        return tasks

    def _make_row(self, task: FitTask, fit: Any, status: str, error: Optional[str]) -> ResultRow:
        entry = task.entry
        return ResultRow(
            models_id=task.models_id,
            entry_id=entry.entry_id,
            cv_pairs_id=task.split.split_id,
            train_p=task.train_p,
            model=entry.name,
            formula=str(entry.formula),
            target=entry.formula.target,
            param_items=tuple(task.params.items()),
            config_hash=config_signature(f"{entry.name}|{entry.formula}", task.params),
            fit=fit,
            train=task.train,
            test=task.split.test,
            status=status,
            error=error,
        )
