from dataclasses import dataclass, field
from typing import Any, Dict, List

from pipelearner.formula import Formula
from pipelearner.grid_expander import expand_grid, normalize_grid
from pipelearner.resampling_engine import Resample, ResampleSplit


@dataclass(frozen=True)
class ModelEntry:
    """One registered (fitting function, formula, hyperparameter grid) unit."""
    entry_id: int
    learner: Any
    formula: Formula
    grid: Dict[str, List[Any]] = field(default_factory=dict)

    @classmethod
    def create(cls, entry_id: int, learner: Any, formula, grid=None) -> "ModelEntry":
        return cls(entry_id=entry_id, learner=learner, formula=Formula.parse(formula), grid=normalize_grid(grid))

    @property
    def name(self) -> str:
        return self.learner.name

    def combinations(self) -> List[Dict[str, Any]]:
        return expand_grid(self.grid)


@dataclass(frozen=True)
class FitTask:
    """A single unit of work for the learning engine."""
    models_id: int
    entry: ModelEntry
    params: Dict[str, Any]
    split: ResampleSplit
    train_p: float
    train: Resample
