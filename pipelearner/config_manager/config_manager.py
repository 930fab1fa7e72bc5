import copy
import hashlib
import json
import logging
import numbers
import os
import platform
import sys
from datetime import datetime
from importlib import metadata
from pathlib import Path
from typing import Any, Dict, Optional

import jsonschema
from jsonschema.exceptions import best_match
import psutil

from pipelearner.evaluation_engine.metrics import get_metric
from pipelearner.grid_expander import grid_size
from pipelearner.utils import constants
from pipelearner.utils.exceptions import ConfigurationError

DEFAULT_CONFIG: Dict[str, Any] = {
    'resampling': {
        'method': 'holdout',
        'n_splits': None,
        'test_size': 0.2,
        'shuffle': True,
        'stratify': None,
        'seed': 42
    },
    'learning_curves': {
        'train_fractions': [1.0]
    },
    'execution': {
        'n_jobs': 1,
        'on_error': constants.ON_ERROR_RAISE,
        'drop_unknown_params': False
    },
    'resources': {
        'max_grid_configs': 1000
    },
    'evaluation': {
        'metric': 'accuracy',
        'partitions': ['train', 'test']
    },
    'logging': {
        'level': 'INFO',
        'log_to_console': True,
        'log_to_file': False,
        'colorful_console': True
    },
    'outputs': {
        'base_results_dir': None,
        'save_models': False,
        'save_excel_copy': False
    }
}


def _merge(defaults: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge overrides on top of a deep copy of defaults."""
    merged = copy.deepcopy(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _package_version() -> str:
    try:
        return metadata.version("pipelearner")
    except metadata.PackageNotFoundError:
        return "unknown"


class ConfigurationManager:
    """
    Loads, validates and hydrates run configuration.

    The same validation backs both entry points: JSON files for the CLI
    (``load_and_validate``) and plain dicts for the PipeLearner API
    (``from_dict``). Every accepted config carries all default sections and
    an '_internal_seeds' block derived from 'resampling.seed'.
    """

    DEFAULT_MAX_GRID_CONFIGS = 1000

    def __init__(self, config_path: Optional[str] = "config/config.json",
                 schema_path: Optional[str] = "config/schema.json"):
        self.config_path = config_path
        self.schema_path = schema_path
        self.config: Dict[str, Any] = {}
        self.schema: Dict[str, Any] = {}
        self.run_id: Optional[str] = None
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_dict(cls, config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Hydrate and validate an in-memory configuration.

        No schema is involved; logical and resource validation and seed
        propagation still apply.
        """
        manager = cls(config_path=None, schema_path=None)
        manager.config = _merge(DEFAULT_CONFIG, config or {})
        manager._hydrate()
        return manager.config

    def load_and_validate(self) -> Dict[str, Any]:
        """
        Load the JSON config, check it against the schema, then fill in
        defaults and run the logical checks.

        Raises:
            ConfigurationError: On unreadable files or any failed check.
        """
        raw = self._load_json(self.config_path)
        self.schema = self._load_json(self.schema_path)
        self._validate_schema(raw)

        self.config = _merge(DEFAULT_CONFIG, raw)
        self._hydrate()
        return self.config

    def _hydrate(self) -> None:
        self._validate_logic()
        self._validate_resources()
        self._propagate_seeds()

    def generate_run_id(self) -> str:
        """Timestamp id for the run directory; stable once generated."""
        if not self.run_id:
            self.run_id = datetime.now().strftime("%Y%m%d_%H%M%S")
        return self.run_id

    def save_artifacts(self, output_dir: str) -> Path:
        """
        Record what this run was configured with under '01_RunConfiguration'.

        Writes config_used.json (the hydrated config), config_hash.txt
        (SHA256 of its sorted JSON) and run_metadata.json (versions,
        platform and grid size).
        """
        config_dir = Path(output_dir) / constants.CONFIG_DIR
        config_dir.mkdir(parents=True, exist_ok=True)

        config_json = json.dumps(self.config, sort_keys=True)
        config_hash = hashlib.sha256(config_json.encode()).hexdigest()

        (config_dir / constants.CONFIG_USED_FILE).write_text(json.dumps(self.config, indent=2))
        (config_dir / constants.CONFIG_HASH_FILE).write_text(config_hash)

        models = self.config.get('models', [])
        run_metadata = {
            'run_id': self.run_id,
            'start_time': datetime.now().isoformat(),
            'pipelearner_version': _package_version(),
            'python_version': sys.version,
            'platform': platform.platform(),
            'config_hash': config_hash,
            'n_model_entries': len(models),
            'n_grid_configs': sum(grid_size(entry.get('params', {})) for entry in models),
            'working_directory': os.getcwd()
        }
        (config_dir / constants.RUN_METADATA_FILE).write_text(json.dumps(run_metadata, indent=2))

        self.logger.info(f"Configuration artifacts saved to {config_dir} (hash {config_hash[:12]})")
        return config_dir

    def _load_json(self, path: Optional[str]) -> Dict[str, Any]:
        if not path or not Path(path).is_file():
            raise ConfigurationError(f"File not found: {path}")
        try:
            return json.loads(Path(path).read_text(encoding='utf-8'))
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e

    def _validate_schema(self, raw: Dict[str, Any]) -> None:
        """Structural check; reports the most relevant violation with its location."""
        validator = jsonschema.Draft7Validator(self.schema)
        error = best_match(validator.iter_errors(raw))
        if error is not None:
            location = '.'.join(str(part) for part in error.absolute_path) or '<root>'
            raise ConfigurationError(f"Schema validation failed at {location}: {error.message}")

    def _validate_logic(self) -> None:
        """Logical validation of every section."""
        # --- Resampling Section ---
        resampling = self.config.get('resampling', {})
        method = resampling.get('method', 'holdout')
        if method not in constants.RESAMPLING_METHODS:
            raise ConfigurationError(
                f"resampling.method must be one of {list(constants.RESAMPLING_METHODS)}, got '{method}'"
            )

        n_splits = resampling.get('n_splits')
        if n_splits is not None:
            if not isinstance(n_splits, int) or isinstance(n_splits, bool) or n_splits < 1:
                raise ConfigurationError(f"resampling.n_splits must be a positive integer, got {n_splits}")
            if method == 'kfold' and n_splits < 2:
                raise ConfigurationError(f"resampling.n_splits must be >= 2 for k-fold, got {n_splits}")

        test_size = resampling.get('test_size', 0.2)
        if not _is_number(test_size) or not (0.0 < test_size < 1.0):
            raise ConfigurationError(f"test_size must be between 0 and 1 (exclusive), got {test_size}")

        seed = resampling.get('seed', 42)
        if seed is not None and (not isinstance(seed, int) or seed < 0):
            raise ConfigurationError(f"Resampling seed must be a non-negative integer, got {seed}")

        # --- Learning Curves Section ---
        fractions = self.config.get('learning_curves', {}).get('train_fractions', [1.0])
        if not isinstance(fractions, (list, tuple)):
            raise ConfigurationError(f"learning_curves.train_fractions must be a list, got {fractions!r}")
        if not fractions:
            raise ConfigurationError("learning_curves.train_fractions cannot be empty.")
        for p in fractions:
            if not _is_number(p) or not (0.0 < p <= 1.0):
                raise ConfigurationError(f"Training fractions must be in (0, 1], got {p}")

        # --- Execution Section ---
        execution = self.config.get('execution', {})
        n_jobs = execution.get('n_jobs', 1)
        if not isinstance(n_jobs, int) or isinstance(n_jobs, bool) or n_jobs == 0 or n_jobs < -1:
            raise ConfigurationError(f"execution.n_jobs must be -1 (all cores) or a positive integer, got {n_jobs}")
        on_error = execution.get('on_error', constants.ON_ERROR_RAISE)
        if on_error not in (constants.ON_ERROR_RAISE, constants.ON_ERROR_RECORD):
            raise ConfigurationError(f"execution.on_error must be 'raise' or 'record', got '{on_error}'")

        # --- Evaluation Section ---
        evaluation = self.config.get('evaluation', {})
        get_metric(evaluation.get('metric', 'accuracy'))
        partitions = evaluation.get('partitions', ['train', 'test'])
        if not partitions or set(partitions) - {'train', 'test'}:
            raise ConfigurationError(f"evaluation.partitions must be a non-empty subset of ['train', 'test'], got {partitions}")

        # --- Models Section (CLI configs only) ---
        for i, entry in enumerate(self.config.get('models', [])):
            if not entry.get('model'):
                raise ConfigurationError(f"models[{i}] must name a 'model'.")
            if not entry.get('formula'):
                raise ConfigurationError(f"models[{i}] must provide a 'formula'.")
            if not isinstance(entry.get('params', {}), dict):
                raise ConfigurationError(f"models[{i}].params must be a mapping of name -> values.")

    def _validate_resources(self) -> None:
        """
        Validate against system resources.
        Calculates total grid size and ensures it fits within safe limits.
        """
        resources = self.config.setdefault('resources', {})

        # 1. Grid Explosion Check
        models = self.config.get('models', [])
        if models:
            total_configs = sum(grid_size(entry.get('params', {})) for entry in models)
            max_configs = resources.get('max_grid_configs', self.DEFAULT_MAX_GRID_CONFIGS)

            if total_configs > max_configs:
                raise ConfigurationError(
                    f"Grid Explosion Detected! Total configurations ({total_configs}) exceeds "
                    f"safety limit ({max_configs}). Reduce the grids or increase 'resources.max_grid_configs'."
                )
            self.logger.info(f"Grid size validated: {total_configs} combinations (Limit: {max_configs})")

        # 2. Memory Limits Check
        system_ram_mb = int(psutil.virtual_memory().total / (1024 * 1024))
        safe_ram_limit = int(system_ram_mb * 0.8)
        config_max_ram = resources.get('max_memory_mb') or safe_ram_limit

        if config_max_ram > system_ram_mb:
            self.logger.warning(
                f"Configured max_memory_mb ({config_max_ram}MB) exceeds physical system RAM ({system_ram_mb}MB). "
                "This may lead to instability."
            )
        resources['max_memory_mb'] = config_max_ram

    def _propagate_seeds(self) -> None:
        """
        Propagate the master seed to internal components.
        Uses non-overlapping offsets to avoid correlation between components.
        """
        master_seed = self.config['resampling'].get('seed')
        if master_seed is None:
            self.config['_internal_seeds'] = {'resample': None, 'curves': None}
            return

        self.config['_internal_seeds'] = {
            'resample': master_seed,
            'curves': master_seed + 1000
        }
        self.logger.debug(f"Seeds propagated from master ({master_seed}): {self.config['_internal_seeds']}")
