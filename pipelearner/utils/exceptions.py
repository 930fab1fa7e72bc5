"""
Custom exception hierarchy for pipelearner.
"""

class PipelearnerException(Exception):
    """Base exception for all library errors."""
    pass

class ConfigurationError(PipelearnerException):
    """Configuration validation failed."""
    pass

class DataValidationError(PipelearnerException):
    """Data validation failed."""
    pass

class ModelTrainingError(PipelearnerException):
    """Model training failed."""
    pass

class FitError(ModelTrainingError):
    """
    A single fit failed.

    Carries the grid combination that caused the failure so callers can tell
    which hyperparameters were rejected by the fitting function.
    """

    def __init__(self, message: str, models_id=None, params=None, cv_pairs_id=None):
        super().__init__(message)
        self.models_id = models_id
        self.params = dict(params or {})
        self.cv_pairs_id = cv_pairs_id

    def __reduce__(self):
        # joblib workers send exceptions back pickled
        return (self.__class__, (self.args[0], self.models_id, self.params, self.cv_pairs_id))

class PredictionError(PipelearnerException):
    """Prediction generation failed."""
    pass
