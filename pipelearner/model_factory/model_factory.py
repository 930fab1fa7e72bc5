import inspect
import logging
from typing import Dict, Any, List, Optional
from sklearn.ensemble import (
    ExtraTreesClassifier,
    ExtraTreesRegressor,
    GradientBoostingClassifier,
    GradientBoostingRegressor,
    RandomForestClassifier,
    RandomForestRegressor,
)
from sklearn.linear_model import LinearRegression, LogisticRegression, Ridge, Lasso
from sklearn.naive_bayes import GaussianNB
from sklearn.neighbors import KNeighborsClassifier, KNeighborsRegressor
from sklearn.svm import SVC, SVR
from sklearn.tree import DecisionTreeClassifier, DecisionTreeRegressor

logger = logging.getLogger(__name__)

class ModelFactory:
    """
    Factory for creating scikit-learn estimators by name.
    Models are grouped by task so callers can pick a sensible metric.
    """

    CLASSIFIERS = {
        'DecisionTreeClassifier': DecisionTreeClassifier,
        'RandomForestClassifier': RandomForestClassifier,
        'ExtraTreesClassifier': ExtraTreesClassifier,
        'GradientBoostingClassifier': GradientBoostingClassifier,
        'LogisticRegression': LogisticRegression,
        'KNeighborsClassifier': KNeighborsClassifier,
        'SVC': SVC,
        'GaussianNB': GaussianNB,
    }

    REGRESSORS = {
        'DecisionTreeRegressor': DecisionTreeRegressor,
        'RandomForestRegressor': RandomForestRegressor,
        'ExtraTreesRegressor': ExtraTreesRegressor,
        'GradientBoostingRegressor': GradientBoostingRegressor,
        'LinearRegression': LinearRegression,
        'Ridge': Ridge,
        'Lasso': Lasso,
        'KNeighborsRegressor': KNeighborsRegressor,
        'SVR': SVR,
    }

    @classmethod
    def get_class(cls, model_name: str) -> type:
        if model_name in cls.CLASSIFIERS:
            return cls.CLASSIFIERS[model_name]
        if model_name in cls.REGRESSORS:
            return cls.REGRESSORS[model_name]
        raise ValueError(f"Unknown model name: {model_name}. Available: {cls.get_available_models()}")

    @classmethod
    def create(cls, model_name: str, params: Optional[Dict[str, Any]] = None, strict: bool = True) -> Any:
        """
        Create and return an instantiated estimator.

        With ``strict=False`` parameters the estimator does not accept are
        dropped (and logged) instead of raising.
        """
        if params is None:
            params = {}

        model_class = cls.get_class(model_name)
        if not strict:
            params = cls._filter_params(model_class, params)
        return model_class(**params)

    @classmethod
    def get_available_models(cls) -> List[str]:
        """Return list of all supported model names."""
        return list(cls.CLASSIFIERS.keys()) + list(cls.REGRESSORS.keys())

    @classmethod
    def task_of(cls, model_name: str) -> str:
        """'classification' or 'regression' for a registered name."""
        if model_name in cls.CLASSIFIERS:
            return 'classification'
        if model_name in cls.REGRESSORS:
            return 'regression'
        raise ValueError(f"Unknown model name: {model_name}. Available: {cls.get_available_models()}")

    @staticmethod
    def _filter_params(model_class, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Remove parameters from `params` that are not accepted by `model_class` constructor.
        """
        sig = inspect.signature(model_class.__init__)

        valid_keys = [
            p.name for p in sig.parameters.values()
            if p.kind in (p.POSITIONAL_OR_KEYWORD, p.KEYWORD_ONLY)
        ]

        # Always allow **kwargs if the model supports it
        has_kwargs = any(p.kind == p.VAR_KEYWORD for p in sig.parameters.values())

        if has_kwargs:
            return params

        dropped = sorted(set(params) - set(valid_keys))
        if dropped:
            logger.warning(f"{model_class.__name__} does not accept {dropped}; dropping them.")
        return {k: v for k, v in params.items() if k in valid_keys}
