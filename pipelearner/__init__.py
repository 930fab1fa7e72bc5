"""
pipelearner: data-frame-centric grid search over model hyperparameters.

Register models, formulas and hyperparameter grids on a PipeLearner, choose
how train/test pairs are drawn, then learn() every combination into a
single result table.
"""

from pipelearner.datasets import load_mtcars
from pipelearner.evaluation_engine import best_configuration, score_table
from pipelearner.formula import Formula
from pipelearner.grid_expander import expand_grid, grid_size
from pipelearner.model_factory import ModelFactory, predict, resolve_learner
from pipelearner.pipeline import PipeLearner
from pipelearner.resampling_engine import Resample, ResampleSplit, ResamplingEngine
from pipelearner.results import ResultRow, ResultTable
from pipelearner.utils.exceptions import (
    ConfigurationError,
    DataValidationError,
    FitError,
    ModelTrainingError,
    PipelearnerException,
    PredictionError,
)

__version__ = "0.2.0"

__all__ = [
    'PipeLearner',
    'ResultTable',
    'ResultRow',
    'Formula',
    'expand_grid',
    'grid_size',
    'ModelFactory',
    'resolve_learner',
    'predict',
    'Resample',
    'ResampleSplit',
    'ResamplingEngine',
    'score_table',
    'best_configuration',
    'load_mtcars',
    'PipelearnerException',
    'ConfigurationError',
    'DataValidationError',
    'ModelTrainingError',
    'FitError',
    'PredictionError',
]
