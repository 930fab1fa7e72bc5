import json
import logging
import pickle
import pytest
import numpy as np
import pandas as pd
from unittest.mock import MagicMock
from pipelearner.utils.cache import config_signature, fingerprint
from pipelearner.utils.error_handling import handle_engine_errors
from pipelearner.utils.exceptions import (
    ConfigurationError,
    FitError,
    ModelTrainingError,
    PredictionError,
    PipelearnerException,
)
from pipelearner.utils.file_io import read_dataframe, save_dataframe
from pipelearner.utils.serialization import NumpyEncoder

class DummyEngine:
    def __init__(self):
        self.logger = MagicMock(spec=logging.Logger)

    @handle_engine_errors("Dummy")
    def run(self, exc):
        raise exc

    @handle_engine_errors("Scoring", wrap_as=PredictionError)
    def score(self, exc):
        raise exc

class TestExceptions:

    def test_hierarchy(self):
        assert issubclass(FitError, ModelTrainingError)
        assert issubclass(ModelTrainingError, PipelearnerException)
        assert issubclass(ConfigurationError, PipelearnerException)

    def test_fit_error_survives_pickling(self):
        err = FitError("bad fit", models_id=3, params={'max_depth': -1}, cv_pairs_id=2)
        clone = pickle.loads(pickle.dumps(err))

        assert str(clone) == "bad fit"
        assert clone.models_id == 3
        assert clone.params == {'max_depth': -1}
        assert clone.cv_pairs_id == 2

class TestErrorHandling:

    def test_library_errors_pass_through(self):
        engine = DummyEngine()
        with pytest.raises(ConfigurationError):
            engine.run(ConfigurationError("bad"))
        engine.logger.error.assert_not_called()

    def test_unexpected_errors_are_wrapped(self):
        engine = DummyEngine()
        with pytest.raises(PipelearnerException, match="Dummy failed: boom") as excinfo:
            engine.run(ValueError("boom"))
        assert isinstance(excinfo.value.__cause__, ValueError)
        engine.logger.error.assert_called_once()

    def test_wrapping_type_is_configurable(self):
        engine = DummyEngine()
        with pytest.raises(PredictionError, match="Scoring failed: shape mismatch"):
            engine.score(ValueError("shape mismatch"))
        assert "DummyEngine" in engine.logger.error.call_args[0][0]

class TestFileIO:

    def test_parquet_with_excel_copy(self, tmp_path):
        df = pd.DataFrame({'a': [1, 2], 'b': ['x', 'y']})
        path = save_dataframe(df, tmp_path / "nested" / "frame.parquet", excel_copy=True)

        pd.testing.assert_frame_equal(read_dataframe(path), df)
        pd.testing.assert_frame_equal(read_dataframe(tmp_path / "nested" / "frame.xlsx"), df, check_dtype=False)

    def test_csv(self, tmp_path):
        path = save_dataframe(pd.DataFrame({"a": [1, 2]}), tmp_path / "frame.csv")
        assert read_dataframe(path)['a'].tolist() == [1, 2]

    def test_unsupported_suffix(self, tmp_path):
        with pytest.raises(ValueError, match="Unsupported"):
            read_dataframe(tmp_path / "frame.txt")

class TestSerialization:

    def test_numpy_values(self):
        payload = {'i': np.int64(3), 'f': np.float32(0.5), 'b': np.bool_(True), 'a': np.arange(2)}
        assert json.loads(json.dumps(payload, cls=NumpyEncoder)) == {'i': 3, 'f': 0.5, 'b': True, 'a': [0, 1]}

    def test_config_signature_ignores_key_order(self):
        first = config_signature("tree", {'max_depth': 2, 'criterion': 'gini'})
        second = config_signature("tree", {'criterion': 'gini', 'max_depth': np.int64(2)})
        assert first == second
        assert first != config_signature("tree", {'max_depth': 3, 'criterion': 'gini'})
        assert first != config_signature("forest", {'max_depth': 2, 'criterion': 'gini'})

    def test_config_signature_handles_objects(self):
        assert len(config_signature("svc", {'kernel': len})) == 64

    def test_fingerprint_is_stable(self):
        assert fingerprint("abc") == fingerprint("abc")
        assert fingerprint("abc") != fingerprint("abd")
