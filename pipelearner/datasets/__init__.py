"""
Bundled example datasets.
"""
from importlib import resources

import pandas as pd

DATASETS = ('mtcars',)


def load_mtcars() -> pd.DataFrame:
    """
    Motor Trend road tests of 32 cars (1973-74 models), 11 variables.

    The car name is the index. ``am`` is the transmission (0 = automatic,
    1 = manual) and is the usual classification target in examples.
    """
    with resources.files(__name__).joinpath('mtcars.csv').open('r') as f:
        return pd.read_csv(f, index_col='model')


def load_dataset(name: str) -> pd.DataFrame:
    if name == 'mtcars':
        return load_mtcars()
    raise ValueError(f"Unknown dataset '{name}'. Available: {list(DATASETS)}")
