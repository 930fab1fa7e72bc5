from dataclasses import dataclass, fields
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from pipelearner.resampling_engine import Resample
from pipelearner.utils import constants

SUCCESS = "success"
FAILED = "failed"

_SCALAR_TYPES = (str, int, float, bool, np.integer, np.floating, np.bool_, type(None))


@dataclass(frozen=True)
class ResultRow:
    """
    One fitted (model entry, grid combination, split, training proportion).

    Hyperparameters are stored as a tuple of pairs so the row stays
    immutable; ``params`` hands out a fresh dict on every access.
    """
    models_id: int
    entry_id: int
    cv_pairs_id: int
    train_p: float
    model: str
    formula: str
    target: str
    param_items: Tuple[Tuple[str, Any], ...]
    config_hash: str
    fit: Any
    train: Resample
    test: Resample
    status: str = SUCCESS
    error: Optional[str] = None

    @property
    def params(self) -> Dict[str, Any]:
        return dict(self.param_items)

    @property
    def ok(self) -> bool:
        return self.status == SUCCESS


_FIELD_NAMES = frozenset(f.name for f in fields(ResultRow))
_ROW_FIELDS = [f.name for f in fields(ResultRow) if f.name != 'param_items']
FRAME_COLUMNS = _ROW_FIELDS[:7] + ['params'] + _ROW_FIELDS[7:]


class ResultTable:
    """
    Ordered, read-only collection of ResultRows.

    Every view (``to_frame``, ``params_frame``, ``summary``) is built fresh,
    so downstream analysis never writes back into the rows.
    """

    def __init__(self, rows: Iterable[ResultRow] = ()):
        self._rows: Tuple[ResultRow, ...] = tuple(rows)

    @classmethod
    def concat(cls, tables: Iterable["ResultTable"]) -> "ResultTable":
        return cls(row for table in tables for row in table)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[ResultRow]:
        return iter(self._rows)

    def __getitem__(self, item: Union[int, slice]):
        if isinstance(item, slice):
            return ResultTable(self._rows[item])
        return self._rows[item]

    def __repr__(self):
        return f"<ResultTable: {len(self)} rows, {len(self.param_names())} hyperparameters>"

    @property
    def rows(self) -> Tuple[ResultRow, ...]:
        return self._rows

    def param_names(self) -> List[str]:
        """Every hyperparameter name, in first-seen order."""
        names = {}
        for row in self._rows:
            for name, _ in row.param_items:
                names.setdefault(name, None)
        return list(names)

    def filter(self, predicate: Optional[Callable[[ResultRow], bool]] = None, **criteria) -> "ResultTable":
        """
        Rows matching ``predicate`` and every ``name=value`` criterion.

        Criteria names may be row fields (``models_id``, ``model``...) or
        hyperparameter names; row fields win when both exist. A callable
        value is used as a test.
        """
        def matches(row: ResultRow) -> bool:
            if predicate is not None and not predicate(row):
                return False
            params = row.params
            for name, expected in criteria.items():
                if name in _FIELD_NAMES:
                    actual = getattr(row, name)
                elif name in params:
                    actual = params[name]
                elif hasattr(row, name):
                    actual = getattr(row, name)
                else:
                    return False
                if callable(expected):
                    if not expected(actual):
                        return False
                elif actual != expected:
                    return False
            return True

        return ResultTable(row for row in self._rows if matches(row))

    def successful(self) -> "ResultTable":
        return ResultTable(row for row in self._rows if row.status == SUCCESS)

    def failed(self) -> "ResultTable":
        return ResultTable(row for row in self._rows if row.status == FAILED)

    def to_frame(self) -> pd.DataFrame:
        """One row per result, including the fit and the resample handles."""
        records = []
        for row in self._rows:
            record = {name: getattr(row, name) for name in _ROW_FIELDS}
            record['params'] = row.params
            records.append(record)
        return pd.DataFrame.from_records(records, columns=FRAME_COLUMNS)

    def params_frame(self, *names: str) -> pd.DataFrame:
        """
        Ids plus one column per hyperparameter.

        Rows whose entry does not use a hyperparameter get NaN for it.
        """
        names = list(names) or self.param_names()
        records = []
        for row in self._rows:
            params = row.params
            record = {name: getattr(row, name) for name in constants.ID_COLUMNS}
            for name in names:
                record[name] = params.get(name, np.nan)
            records.append(record)
        return pd.DataFrame.from_records(records, columns=constants.ID_COLUMNS + names)

    def summary(self) -> pd.DataFrame:
        """
        Flat, serializable view: ids, metadata and one column per hyperparameter.

        Non-scalar hyperparameter values are rendered with repr() so the
        frame can be written to Parquet.
        """
        names = self.param_names()
        records = []
        for row in self._rows:
            params = row.params
            record = {name: getattr(row, name) for name in constants.ID_COLUMNS}
            record.update(
                model=row.model,
                formula=row.formula,
                target=row.target,
                status=row.status,
                error=row.error,
                config_hash=row.config_hash,
                n_train=len(row.train),
                n_test=len(row.test),
            )
            for name in names:
                value = params.get(name, None)
                record[name] = value if isinstance(value, _SCALAR_TYPES) else repr(value)
            records.append(record)

        frame = pd.DataFrame.from_records(records)
        for name in names:
            # Mixed-type object columns (e.g. "sqrt" and 0.5) cannot go to Parquet
            if frame[name].dtype == object:
                frame[name] = frame[name].map(lambda v: v if v is None else str(v))
        return frame
