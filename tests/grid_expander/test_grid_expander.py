import pytest
import numpy as np
import pandas as pd
from pipelearner.grid_expander import expand_grid, grid_size, normalize_grid
from pipelearner.utils.exceptions import ConfigurationError

def test_product_size_and_complete_assignments():
    grid = {'min_samples_split': [2, 20], 'max_depth': [2, 5, 8], 'criterion': ['gini', 'entropy']}
    combos = expand_grid(grid)

    assert len(combos) == 2 * 3 * 2
    assert grid_size(grid) == 12
    for combo in combos:
        assert set(combo) == set(grid)

    # Every combination appears exactly once
    as_tuples = {tuple(sorted(c.items())) for c in combos}
    assert len(as_tuples) == 12

def test_singleton_is_a_size_one_dimension():
    combos = expand_grid({'max_depth': [2, 5], 'random_state': 1})

    assert len(combos) == 2
    assert all(c['random_state'] == 1 for c in combos)

def test_string_value_is_not_split_into_characters():
    combos = expand_grid({'criterion': 'gini'})
    assert combos == [{'criterion': 'gini'}]

def test_empty_grid_yields_one_empty_assignment():
    assert expand_grid({}) == [{}]
    assert expand_grid(None) == [{}]
    assert grid_size({}) == 1

def test_expansion_is_deterministic():
    grid = {'b': [3, 1, 2], 'a': ['x', 'y']}
    assert expand_grid(grid) == expand_grid(dict(grid))

def test_value_order_is_preserved():
    combos = expand_grid({'min_samples_split': [10, 2, 6]})
    assert [c['min_samples_split'] for c in combos] == [10, 2, 6]

def test_keys_keep_caller_order():
    combos = expand_grid({'zeta': [1], 'alpha': [2]})
    assert list(combos[0]) == ['zeta', 'alpha']

def test_numpy_and_range_values():
    combos = expand_grid({'alpha': np.array([0.1, 1.0]), 'k': range(1, 4)})
    assert len(combos) == 6
    assert isinstance(combos[0]['alpha'], float)

def test_empty_value_set_rejected():
    with pytest.raises(ConfigurationError, match="at least one candidate"):
        expand_grid({'max_depth': []})

def test_unordered_set_rejected():
    with pytest.raises(ConfigurationError, match="unordered set"):
        normalize_grid({'max_depth': {1, 2}})

def test_non_mapping_rejected():
    with pytest.raises(ConfigurationError):
        normalize_grid([('max_depth', [1, 2])])

def test_invalid_name_rejected():
    with pytest.raises(ConfigurationError):
        normalize_grid({1: [1, 2]})

def test_pandas_candidates_are_expanded():
    combos = expand_grid({'max_depth': pd.Series([1, 2, 3]), 'criterion': pd.Index(['gini', 'entropy'])})

    assert len(combos) == 6
    assert grid_size({'max_depth': pd.Series([1, 2, 3])}) == 3
    assert {c['max_depth'] for c in combos} == {1, 2, 3}

def test_zero_dimensional_array_is_a_singleton():
    assert expand_grid({'max_depth': np.array(3)}) == [{'max_depth': 3}]

def test_generator_candidates_are_expanded():
    assert expand_grid({'max_depth': (d for d in [4, 6])}) == [{'max_depth': 4}, {'max_depth': 6}]
