import pytest
from unittest.mock import MagicMock
import numpy as np
import pandas as pd
from sklearn.tree import DecisionTreeClassifier
from sklearn.neighbors import KNeighborsClassifier
from pipelearner.formula import Formula
from pipelearner.model_factory import (
    CallableLearner,
    EstimatorLearner,
    FittedModel,
    ModelFactory,
    predict,
    resolve_learner,
)
from pipelearner.utils.exceptions import ConfigurationError, PredictionError

@pytest.fixture
def sample_data():
    rng = np.random.RandomState(0)
    n = 40
    x1 = rng.rand(n)
    return pd.DataFrame({
        'x1': x1,
        'x2': rng.rand(n),
        'label': (x1 > 0.5).astype(int),
    })

def test_create_registered_model():
    model = ModelFactory.create('DecisionTreeClassifier', {'max_depth': 3})
    assert isinstance(model, DecisionTreeClassifier)
    assert model.max_depth == 3

def test_unknown_model_name():
    with pytest.raises(ValueError, match="Unknown model name"):
        ModelFactory.create('SuperAdvancedAIModel')

def test_strict_create_rejects_unknown_params():
    with pytest.raises(TypeError):
        ModelFactory.create('KNeighborsClassifier', {'n_neighbors': 3, 'random_state': 1})

def test_parameter_filtering_when_not_strict():
    """KNN does not take random_state; non-strict creation drops it."""
    model = ModelFactory.create('KNeighborsClassifier', {'n_neighbors': 3, 'random_state': 123}, strict=False)
    assert isinstance(model, KNeighborsClassifier)
    assert model.n_neighbors == 3
    assert not hasattr(model, 'random_state')

def test_get_available_models_and_task():
    models = ModelFactory.get_available_models()
    assert 'DecisionTreeClassifier' in models
    assert 'Ridge' in models
    assert ModelFactory.task_of('DecisionTreeClassifier') == 'classification'
    assert ModelFactory.task_of('Ridge') == 'regression'

@pytest.mark.parametrize("model", [
    'DecisionTreeClassifier',
    DecisionTreeClassifier,
    DecisionTreeClassifier(random_state=0),
])
def test_resolve_estimator_references(model, sample_data):
    learner = resolve_learner(model)
    assert isinstance(learner, EstimatorLearner)
    assert learner.name == 'DecisionTreeClassifier'

    fit = learner.fit(Formula.parse("label ~ ."), sample_data, {'max_depth': 2})
    assert isinstance(fit, FittedModel)
    assert fit.estimator.max_depth == 2
    assert fit.feature_names == ['x1', 'x2']
    assert fit.target == 'label'
    assert fit.params == {'max_depth': 2}
    assert len(fit.predict(sample_data)) == len(sample_data)

def test_estimator_instance_is_cloned(sample_data):
    template = DecisionTreeClassifier(max_depth=7)
    learner = resolve_learner(template)
    fit = learner.fit(Formula.parse("label ~ x1"), sample_data, {'max_depth': 1})

    assert fit.estimator is not template
    assert template.max_depth == 7
    assert not hasattr(template, 'tree_')

def test_callable_learner_receives_formula_data_and_params(sample_data):
    calls = {}

    def my_fit(formula, data, **params):
        calls['formula'] = formula
        calls['rows'] = len(data)
        calls['params'] = params
        return "artifact"

    learner = resolve_learner(my_fit)
    assert isinstance(learner, CallableLearner)
    assert learner.name == 'my_fit'

    artifact = learner.fit(Formula.parse("label ~ x1"), sample_data, {'alpha': 0.5})
    assert artifact == "artifact"
    assert calls['formula'].target == 'label'
    assert calls['rows'] == len(sample_data)
    assert calls['params'] == {'alpha': 0.5}

def test_resolve_rejects_unknown_name():
    with pytest.raises(ConfigurationError, match="Unknown model name"):
        resolve_learner('NotAModel')

def test_resolve_rejects_non_callable():
    with pytest.raises(ConfigurationError):
        resolve_learner(42)

def test_resolve_rejects_class_without_fit():
    class Nothing:
        pass
    with pytest.raises(ConfigurationError, match="no 'fit' method"):
        resolve_learner(Nothing)

def test_resolve_passes_learners_through():
    learner = EstimatorLearner('Ridge')
    assert resolve_learner(learner) is learner

def test_invalid_hyperparameter_value_propagates(sample_data):
    learner = resolve_learner('DecisionTreeClassifier')
    with pytest.raises(ValueError):
        learner.fit(Formula.parse("label ~ ."), sample_data, {'min_samples_split': 1})

def test_predict_helper(sample_data):
    fit = resolve_learner('DecisionTreeClassifier').fit(Formula.parse("label ~ ."), sample_data, {})
    preds = predict(fit, sample_data)
    assert isinstance(preds, np.ndarray)
    assert preds.shape == (len(sample_data),)

def test_predict_helper_errors():
    with pytest.raises(PredictionError, match="failed fit"):
        predict(None, pd.DataFrame())
    with pytest.raises(PredictionError, match="no 'predict' method"):
        predict("artifact", pd.DataFrame())

def test_fitted_model_wraps_estimator_errors(sample_data):
    estimator = MagicMock()
    estimator.predict.side_effect = RuntimeError("boom")
    fit = FittedModel(estimator, Formula.parse("label ~ ."), ['x1', 'x2'], 'Broken')
    with pytest.raises(PredictionError, match="Broken failed to predict: boom"):
        fit.predict(sample_data)
