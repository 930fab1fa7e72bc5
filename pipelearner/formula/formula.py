import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import pandas as pd

from pipelearner.utils.exceptions import ConfigurationError, DataValidationError

_TERM_PATTERN = re.compile(r'([+-])')


@dataclass(frozen=True)
class Formula:
    """
    A parsed ``target ~ rhs`` specification.

    ``rhs`` is a ``+``-separated list of column names. ``.`` stands for every
    column other than the target, and ``- name`` removes a column, so
    ``"am ~ . - qsec"`` means all columns except ``am`` and ``qsec``.
    """
    target: str
    include: Tuple[str, ...]
    exclude: Tuple[str, ...] = ()
    use_all: bool = False

    @classmethod
    def parse(cls, formula: Union[str, "Formula"]) -> "Formula":
        if isinstance(formula, Formula):
            return formula
        if not isinstance(formula, str):
            raise ConfigurationError(f"Formula must be a string like 'y ~ x1 + x2', got {type(formula).__name__}.")

        if formula.count('~') != 1:
            raise ConfigurationError(f"Formula '{formula}' must contain exactly one '~'.")
        lhs, rhs = (part.strip() for part in formula.split('~'))
        if not lhs or lhs == '.' or any(ch in lhs for ch in '+- '):
            raise ConfigurationError(f"Formula '{formula}' must name a single target on the left-hand side.")
        if not rhs:
            raise ConfigurationError(f"Formula '{formula}' has no predictors on the right-hand side.")

        include, exclude = [], []
        use_all = False
        sign = '+'
        expect_term = True
        for token in _TERM_PATTERN.split(rhs):
            token = token.strip()
            if not token:
                continue
            if token in '+-':
                if expect_term:
                    raise ConfigurationError(f"Formula '{formula}' has a dangling '{token}'.")
                sign = token
                expect_term = True
                continue
            if not expect_term or re.search(r'\s', token):
                raise ConfigurationError(f"Formula '{formula}' is missing an operator in '{token}'.")
            if token == '.':
                if sign == '-':
                    raise ConfigurationError(f"Formula '{formula}' cannot subtract '.'.")
                use_all = True
            elif sign == '+':
                include.append(token)
            else:
                exclude.append(token)
            expect_term = False

        if expect_term:
            raise ConfigurationError(f"Formula '{formula}' ends with an operator.")
        if lhs in include:
            raise ConfigurationError(f"Formula '{formula}' uses the target '{lhs}' as a predictor.")

        return cls(target=lhs, include=tuple(include), exclude=tuple(exclude), use_all=use_all)

    def __str__(self) -> str:
        terms = (['.'] if self.use_all else []) + list(self.include)
        rhs = ' + '.join(terms)
        if self.exclude:
            rhs += ''.join(f' - {name}' for name in self.exclude)
        return f"{self.target} ~ {rhs}"

    def predictors(self, columns: Sequence[str]) -> List[str]:
        """Resolve the right-hand side against the available columns."""
        columns = list(columns)
        if self.use_all:
            selected = [c for c in columns if c != self.target]
            selected += [c for c in self.include if c not in selected]
        else:
            selected = list(dict.fromkeys(self.include))
        selected = [c for c in selected if c not in self.exclude]
        if not selected:
            raise ConfigurationError(f"Formula '{self}' selects no predictors.")
        return selected

    def validate(self, data: pd.DataFrame) -> None:
        """Check the target and every named column exist before any fitting."""
        if self.target not in data.columns:
            raise DataValidationError(
                f"Target column '{self.target}' from formula '{self}' is not in the data. "
                f"Available: {list(data.columns)}"
            )
        missing = sorted(set(self.include) - set(data.columns))
        if missing:
            raise DataValidationError(f"Formula '{self}' references missing columns: {missing}")
        self.predictors(data.columns)

    def design_matrix(self, data: pd.DataFrame, feature_names: Optional[Sequence[str]] = None) -> pd.DataFrame:
        """
        Build the predictor matrix; categorical columns are one-hot encoded.

        When ``feature_names`` (the columns seen at fit time) are given, the
        result is aligned to them: unseen dummy levels are dropped and
        missing ones filled with zero.
        """
        predictors = self.predictors(data.columns)
        missing = [c for c in predictors if c not in data.columns]
        if missing:
            raise DataValidationError(f"Formula '{self}' references missing columns: {missing}")

        X = data[predictors]
        categorical = X.select_dtypes(include=['object', 'string', 'category', 'bool']).columns.tolist()
        if categorical:
            X = pd.get_dummies(X, columns=categorical, dtype=float)

        if feature_names is not None:
            X = X.reindex(columns=list(feature_names), fill_value=0.0)
        return X

    def response(self, data: pd.DataFrame) -> pd.Series:
        if self.target not in data.columns:
            raise DataValidationError(f"Target column '{self.target}' is not in the data.")
        return data[self.target]
