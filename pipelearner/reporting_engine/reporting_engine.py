import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import joblib
import matplotlib.pyplot as plt
import pandas as pd

from pipelearner.base import BaseEngine
from pipelearner.results import ResultTable
from pipelearner.utils import constants
from pipelearner.utils.error_handling import handle_engine_errors
from pipelearner.utils.exceptions import ConfigurationError
from pipelearner.utils.file_io import save_dataframe
from pipelearner.utils.serialization import NumpyEncoder

MAX_CURVE_LEGEND_ENTRIES = 10


class ReportingEngine(BaseEngine):
    """
    Writes the artifacts of a grid search run to disk.

    Outputs (under '<base_results_dir>/02_GridSearchResults'):
    - result_summary.parquet: one row per fit, flattened hyperparameters.
    - scores.parquet: per-row train/test metric values.
    - best_configuration.json: best grid combination across resamples.
    - learning_curve.png (in '04_LearningCurves') when several training
      proportions were fitted.
    Fitted models go to '03_FittedModels' when 'outputs.save_models' is set.
    """

    def __init__(self, config: dict, logger: Optional[logging.Logger] = None):
        super().__init__(config, logger)
        outputs = self.config.get('outputs', {})
        self.excel_copy = outputs.get('save_excel_copy', False)
        self.save_models = outputs.get('save_models', False)

    def _get_engine_directory_name(self) -> str:
        return constants.RESULTS_DIR

    @handle_engine_errors("Reporting")
    def execute(self, table: ResultTable, scores: Optional[pd.DataFrame] = None,
                best: Optional[Dict[str, Any]] = None) -> Path:
        """
        Save everything that is available.

        Returns:
            The results directory.
        """
        if self.output_dir is None:
            raise ConfigurationError("Reporting needs 'outputs.base_results_dir' to be set.")

        summary_path = self.output_dir / constants.RESULT_SUMMARY_FILE
        save_dataframe(table.summary(), summary_path, excel_copy=self.excel_copy, index=False)
        self.logger.info(f"Result summary saved to {summary_path}")

        if scores is not None and not scores.empty:
            # The flattened hyperparameter columns already hold the params
            flat_scores = scores.drop(columns=['params'], errors='ignore')
            save_dataframe(flat_scores, self.output_dir / constants.SCORES_FILE, excel_copy=self.excel_copy, index=False)
            if scores[constants.TRAIN_P].nunique() > 1:
                self._plot_learning_curve(scores)

        if best:
            with open(self.output_dir / constants.BEST_CONFIGURATION_FILE, 'w') as f:
                json.dump(best, f, indent=2, cls=NumpyEncoder)

        if self.save_models:
            self._save_models(table)

        return self.output_dir

    def _save_models(self, table: ResultTable) -> None:
        models_dir = self.base_dir / constants.MODELS_DIR
        models_dir.mkdir(parents=True, exist_ok=True)
        saved = 0
        for row in table.successful():
            path = models_dir / f"model_{row.models_id:04d}_{row.cv_pairs_id:03d}_{row.train_p:.2f}.pkl"
            try:
                joblib.dump(row.fit, path)
                saved += 1
            except Exception as e:
                self.logger.warning(f"Failed to save fit for models_id={row.models_id}: {e}")
        self.logger.info(f"Saved {saved} fitted model(s) to {models_dir}")

    def _plot_learning_curve(self, scores: pd.DataFrame) -> None:
        """Mean score per training proportion, one line per grid combination and partition."""
        plt.switch_backend('Agg')
        plots_dir = self.base_dir / constants.PLOTS_DIR
        plots_dir.mkdir(parents=True, exist_ok=True)

        metric_columns = [c for c in scores.columns if c.startswith(('train_', 'test_')) and c != constants.TRAIN_P]
        curve = scores.groupby([constants.MODELS_ID, constants.TRAIN_P])[metric_columns].mean().reset_index()

        plt.figure(figsize=(10, 6))
        for models_id, group in curve.groupby(constants.MODELS_ID):
            for column in metric_columns:
                style = '--' if column.startswith('train_') else '-'
                plt.plot(group[constants.TRAIN_P], group[column], style, marker='o',
                         label=f"model {models_id} ({column})")
        if curve[constants.MODELS_ID].nunique() <= MAX_CURVE_LEGEND_ENTRIES:
            plt.legend()
        plt.xlabel('Proportion of training data')
        plt.ylabel('Score')
        plt.title('Learning Curve')
        plt.grid(True, alpha=0.3)
        plt.savefig(plots_dir / constants.LEARNING_CURVE_FILE)
        plt.close()
