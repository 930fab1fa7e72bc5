import json
import logging
import pytest
from pathlib import Path
from main import main, parse_arguments

ROOT = Path(__file__).resolve().parents[1]
SCHEMA_PATH = ROOT / "config" / "schema.json"

@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)

@pytest.fixture
def run_config(tmp_path):
    config = {
        "data": {"dataset": "mtcars"},
        "resampling": {"method": "kfold", "n_splits": 2, "seed": 1},
        "learning_curves": {"train_fractions": [0.5, 1.0]},
        "models": [
            {"model": "DecisionTreeClassifier", "formula": "am ~ .", "params": {"max_depth": [1, 3]}},
            {"model": "LogisticRegression", "formula": "am ~ wt + hp", "params": {"C": [1.0], "max_iter": 1000}},
        ],
        "execution": {"on_error": "record"},
        "logging": {"log_to_console": False, "log_to_file": True, "log_dir": str(tmp_path / "logs")},
        "outputs": {"base_results_dir": str(tmp_path / "results")},
    }
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config))
    return str(path)

def test_parse_arguments_defaults():
    args = parse_arguments([])
    assert args.config == "config/config.json"
    assert args.run_id is None
    assert not args.dry_run

def test_dry_run(run_config, tmp_path):
    exit_code = main(["--config", run_config, "--schema", str(SCHEMA_PATH), "--dry-run"])

    assert exit_code == 0
    assert not (tmp_path / "results").exists()
    assert "Dry run" in (tmp_path / "logs" / "pipelearner.log").read_text(encoding='utf-8')

def test_full_run(run_config, tmp_path):
    exit_code = main(["--config", run_config, "--schema", str(SCHEMA_PATH), "--run-id", "run1"])

    run_dir = tmp_path / "results" / "run1"
    assert exit_code == 0
    assert (run_dir / "01_RunConfiguration" / "config_used.json").exists()
    assert (run_dir / "02_GridSearchResults" / "result_summary.parquet").exists()
    assert (run_dir / "02_GridSearchResults" / "scores.parquet").exists()
    best = json.loads((run_dir / "02_GridSearchResults" / "best_configuration.json").read_text())
    assert best['models_id'] in (1, 2, 3)
    assert (run_dir / "04_LearningCurves" / "learning_curve.png").exists()

def test_bundled_config_validates(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    exit_code = main(["--config", str(ROOT / "config" / "config.json"), "--schema", str(SCHEMA_PATH), "--dry-run"])
    assert exit_code == 0

def test_missing_config_returns_error(tmp_path, capsys):
    exit_code = main(["--config", str(tmp_path / "missing.json"), "--schema", str(SCHEMA_PATH)])
    assert exit_code == 1
    assert "[ERROR]" in capsys.readouterr().out
