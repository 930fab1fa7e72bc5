import logging
import pytest
import numpy as np
import pandas as pd
from unittest.mock import MagicMock
from pipelearner.config_manager import ConfigurationManager
from pipelearner.resampling_engine import Resample, ResamplingEngine
from pipelearner.utils.exceptions import DataValidationError

@pytest.fixture
def mock_logger():
    return MagicMock(spec=logging.Logger)

@pytest.fixture
def data():
    n = 30
    return pd.DataFrame({
        'x': np.arange(n, dtype=float),
        'label': [0] * 20 + [1] * 10,
    }, index=[f"row_{i}" for i in range(n)])

def make_engine(mock_logger, **resampling):
    config = ConfigurationManager.from_dict({'resampling': resampling})
    return ResamplingEngine(config, mock_logger)

def assert_valid_pairs(splits, n_rows):
    for split in splits:
        train, test = set(split.train.idx), set(split.test.idx)
        assert train.isdisjoint(test)
        assert train <= set(range(n_rows))
        assert test <= set(range(n_rows))
        assert len(test) > 0

def test_default_is_single_holdout(mock_logger, data):
    splits = make_engine(mock_logger).execute(data)

    assert len(splits) == 1
    assert splits[0].split_id == 1
    assert len(splits[0].test) == 6
    assert len(splits[0].train) == 24
    assert_valid_pairs(splits, len(data))

def test_repeated_holdout(mock_logger, data):
    splits = make_engine(mock_logger, method='holdout', n_splits=4, test_size=0.5).execute(data)

    assert [s.split_id for s in splits] == [1, 2, 3, 4]
    assert all(len(s.test) == 15 for s in splits)
    assert_valid_pairs(splits, len(data))

def test_kfold_covers_every_row_once_in_test(mock_logger, data):
    splits = make_engine(mock_logger, method='kfold', n_splits=5).execute(data)

    assert len(splits) == 5
    test_rows = np.concatenate([s.test.idx for s in splits])
    assert sorted(test_rows.tolist()) == list(range(len(data)))
    assert_valid_pairs(splits, len(data))

def test_kfold_without_shuffle(mock_logger, data):
    splits = make_engine(mock_logger, method='kfold', n_splits=3, shuffle=False).execute(data)
    assert splits[0].test.idx.tolist() == list(range(10))

def test_bootstrap_uses_out_of_bag_rows_for_test(mock_logger, data):
    splits = make_engine(mock_logger, method='bootstrap', n_splits=10).execute(data)

    assert len(splits) == 10
    for split in splits:
        assert len(split.train) == len(data)
        assert set(split.test.idx) == set(range(len(data))) - set(split.train.idx)
    assert_valid_pairs(splits, len(data))

def test_same_seed_gives_same_splits(mock_logger, data):
    first = make_engine(mock_logger, method='holdout', n_splits=3, seed=7).execute(data)
    second = make_engine(mock_logger, method='holdout', n_splits=3, seed=7).execute(data)
    other = make_engine(mock_logger, method='holdout', n_splits=3, seed=8).execute(data)

    for a, b in zip(first, second):
        assert a.test.idx.tolist() == b.test.idx.tolist()
    assert any(a.test.idx.tolist() != c.test.idx.tolist() for a, c in zip(first, other))

def test_stratified_holdout_keeps_class_balance(mock_logger, data):
    splits = make_engine(mock_logger, method='holdout', n_splits=3, test_size=0.3, stratify='label').execute(data)
    for split in splits:
        test = split.test.to_frame()
        assert (test['label'] == 1).sum() == 3
        assert (test['label'] == 0).sum() == 6

def test_stratification_falls_back_when_infeasible(mock_logger, data):
    data = data.assign(label=[0] * 29 + [1])
    splits = make_engine(mock_logger, method='kfold', n_splits=5, stratify='label').execute(data)

    assert len(splits) == 5
    mock_logger.warning.assert_called()
    assert "Falling back to random splitting" in mock_logger.warning.call_args[0][0]

def test_missing_stratify_column(mock_logger, data):
    with pytest.raises(DataValidationError, match="Stratification column"):
        make_engine(mock_logger, stratify='nope').execute(data)

def test_too_few_rows(mock_logger, data):
    with pytest.raises(DataValidationError, match="at least 2 rows"):
        make_engine(mock_logger).execute(data.iloc[:1])

def test_more_folds_than_rows(mock_logger, data):
    with pytest.raises(DataValidationError, match="Cannot build"):
        make_engine(mock_logger, method='kfold', n_splits=10).execute(data.iloc[:5])

def test_resample_coerces_to_frame(mock_logger, data):
    split = make_engine(mock_logger).execute(data)[0]
    frame = split.test.as_data_frame()

    assert isinstance(frame, pd.DataFrame)
    assert list(frame.columns) == ['x', 'label']
    assert list(frame.index) == [data.index[i] for i in split.test.idx]

def test_resample_is_a_view_until_coerced(data):
    resample = Resample(data, [0, 2])
    assert resample.data is data
    assert len(resample) == 2
    assert "2 x 2" in repr(resample)

def test_learning_curve_subsets_are_nested(mock_logger, data):
    engine = make_engine(mock_logger, method='holdout', test_size=0.2)
    split = engine.execute(data)[0]
    curve = engine.learning_curve(split, [0.25, 0.5, 1.0])

    assert [p for p, _ in curve] == [0.25, 0.5, 1.0]
    sizes = [len(train) for _, train in curve]
    assert sizes == [6, 12, 24]
    small, medium, full = (set(train.idx) for _, train in curve)
    assert small <= medium <= full
    assert full == set(split.train.idx)
    assert full.isdisjoint(set(split.test.idx))
