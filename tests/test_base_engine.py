import pytest
from unittest.mock import Mock
from pipelearner.base import BaseEngine

# Concrete implementation for testing purposes
class ConcreteTestEngine(BaseEngine):
    def __init__(self, config, logger, engine_dir_name):
        self._engine_dir_name_value = engine_dir_name
        super().__init__(config, logger)

    def _get_engine_directory_name(self):
        return self._engine_dir_name_value

    def execute(self, *args, **kwargs):
        pass

@pytest.fixture
def mock_logger():
    return Mock()

@pytest.fixture
def base_config(tmp_path):
    return {'outputs': {'base_results_dir': str(tmp_path)}}

def test_directory_creation(base_config, mock_logger, tmp_path):
    engine = ConcreteTestEngine(base_config, mock_logger, "02_GridSearchResults")

    expected_dir = tmp_path / "02_GridSearchResults"
    assert engine.output_dir == expected_dir
    assert expected_dir.is_dir()
    mock_logger.info.assert_called_with(f"Output directory for ConcreteTestEngine: {expected_dir}")

def test_compute_only_engine_has_no_directory(base_config, mock_logger, tmp_path):
    engine = ConcreteTestEngine(base_config, mock_logger, None)

    assert engine.output_dir is None
    assert list(tmp_path.iterdir()) == []
    mock_logger.info.assert_not_called()

def test_in_memory_config_never_touches_disk(mock_logger):
    engine = ConcreteTestEngine({}, mock_logger, "02_GridSearchResults")
    assert engine.base_dir is None
    assert engine.output_dir is None

def test_skip_dir_creation(tmp_path, mock_logger):
    config = {'outputs': {'base_results_dir': str(tmp_path), 'skip_dir_creation': True}}
    engine = ConcreteTestEngine(config, mock_logger, "02_GridSearchResults")
    assert engine.output_dir == tmp_path / "02_GridSearchResults"
    assert not engine.output_dir.exists()

def test_default_logger_follows_module():
    engine = ConcreteTestEngine({}, None, None)
    assert engine.logger.name == __name__

def test_cannot_instantiate_abstract():
    with pytest.raises(TypeError):
        BaseEngine({})
