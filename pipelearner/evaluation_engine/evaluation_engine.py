import logging
from typing import Any, Dict, Optional, Sequence

import numpy as np
import pandas as pd

from pipelearner.base import BaseEngine
from pipelearner.evaluation_engine.metrics import Metric, get_metric
from pipelearner.model_factory import predict
from pipelearner.results import ResultTable
from pipelearner.utils import constants
from pipelearner.utils.error_handling import handle_engine_errors
from pipelearner.utils.exceptions import ConfigurationError, PredictionError

logger = logging.getLogger(__name__)

PARTITIONS = ('train', 'test')


def score_table(table: ResultTable, metric="accuracy",
                partitions: Sequence[str] = PARTITIONS) -> pd.DataFrame:
    """
    Score every successful row on its own partitions.

    Each row's fit predicts its own train/test frames and is compared with
    the row's target column. Rows are only read, never modified.

    Returns:
        DataFrame with ids, model, the recorded params dict, one column per
        hyperparameter and one '<partition>_<metric>' column per partition.
    """
    metric = get_metric(metric)
    unknown = set(partitions) - set(PARTITIONS)
    if unknown:
        raise ConfigurationError(f"Unknown partitions {sorted(unknown)}; use 'train' and/or 'test'.")

    param_names = table.param_names()
    records = []
    for row in table.successful():
        record = {name: getattr(row, name) for name in constants.ID_COLUMNS}
        record['model'] = row.model
        params = row.params
        record['params'] = params
        for name in param_names:
            record[name] = params.get(name, np.nan)
        for partition in partitions:
            frame = getattr(row, partition).to_frame()
            preds = predict(row.fit, frame)
            record[f"{partition}_{metric.name}"] = metric(frame[row.target], preds)
        records.append(record)

    skipped = len(table) - len(records)
    if skipped:
        logger.warning(f"Skipped {skipped} failed row(s) while scoring.")

    columns = constants.ID_COLUMNS + ['model', 'params'] + param_names + [f"{p}_{metric.name}" for p in partitions]
    return pd.DataFrame.from_records(records, columns=columns)


def best_configuration(scores: pd.DataFrame, metric="accuracy", partition: str = "test") -> Dict[str, Any]:
    """
    Average a metric per grid combination across resamples and pick the best.

    Only full training proportions (train_p == 1) are considered when the
    scores contain a learning curve. The reported params are the recorded
    combination from the 'params' column, not the flattened columns, which
    pandas may have widened to float or filled with NaN.
    """
    metric = get_metric(metric)
    column = f"{partition}_{metric.name}"
    if column not in scores.columns:
        raise ConfigurationError(f"Scores have no '{column}' column.")
    if 'params' not in scores.columns:
        raise ConfigurationError("Scores have no 'params' column; build them with score_table().")
    if scores.empty:
        return {}

    full = scores[scores[constants.TRAIN_P] >= 1.0]
    if full.empty:
        full = scores[scores[constants.TRAIN_P] == scores[constants.TRAIN_P].max()]

    means = full.groupby(constants.MODELS_ID)[column].agg(['mean', 'std', 'count'])
    best_id = means['mean'].idxmax() if metric.greater_is_better else means['mean'].idxmin()
    best_row = full[full[constants.MODELS_ID] == best_id].iloc[0]

    params = dict(best_row['params'])

    return {
        'models_id': int(best_id),
        'entry_id': int(best_row[constants.ENTRY_ID]),
        'model': best_row['model'],
        'params': params,
        'metric': metric.name,
        'partition': partition,
        'score_mean': float(means.loc[best_id, 'mean']),
        'score_std': float(means.loc[best_id, 'std']) if means.loc[best_id, 'count'] > 1 else 0.0,
        'n_pairs': int(means.loc[best_id, 'count']),
    }


class EvaluationEngine(BaseEngine):
    """Scores a result table with the configured metric."""

    def __init__(self, config: dict, logger: Optional[logging.Logger] = None):
        super().__init__(config, logger)
        eval_cfg = self.config.get('evaluation', {})
        self.metric: Metric = get_metric(eval_cfg.get('metric', 'accuracy'))
        self.partitions = tuple(eval_cfg.get('partitions', PARTITIONS))

    def _get_engine_directory_name(self) -> Optional[str]:
        return None

    @handle_engine_errors("Evaluation", wrap_as=PredictionError)
    def execute(self, table: ResultTable) -> pd.DataFrame:
        self.logger.info(f"Scoring {len(table)} row(s) with '{self.metric.name}' on {list(self.partitions)}...")
        return score_table(table, self.metric, self.partitions)

    def best(self, scores: pd.DataFrame) -> Dict[str, Any]:
        partition = 'test' if 'test' in self.partitions else self.partitions[0]
        best = best_configuration(scores, self.metric, partition)
        if best:
            self.logger.info(
                f"Best configuration: models_id={best['models_id']} {best['model']} {best['params']} "
                f"({partition} {self.metric.name}={best['score_mean']:.4f})"
            )
        return best
