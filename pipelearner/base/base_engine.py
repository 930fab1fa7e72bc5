import abc
import logging
from pathlib import Path
from typing import Any, Dict, Optional


class BaseEngine(abc.ABC):
    """
    Common base for resampling, learning, evaluation and reporting engines.

    Holds the hydrated config and a logger. An engine that writes files
    names its directory through ``_get_engine_directory_name``; it is
    created under 'outputs.base_results_dir' only when that key is set, so
    in-memory use from the PipeLearner API never touches the filesystem.
    """

    def __init__(self, config: Dict[str, Any], logger: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger or logging.getLogger(self.__class__.__module__)

        base_dir = self.config.get('outputs', {}).get('base_results_dir')
        self.base_dir: Optional[Path] = Path(base_dir) if base_dir else None
        self.engine_dir_name = self._get_engine_directory_name()
        self.output_dir: Optional[Path] = (
            self.base_dir / self.engine_dir_name
            if self.base_dir is not None and self.engine_dir_name else None
        )
        self._setup_directories()

    @abc.abstractmethod
    def _get_engine_directory_name(self) -> Optional[str]:
        """Results sub-directory (e.g. '02_GridSearchResults'), or None for compute-only engines."""

    def _setup_directories(self) -> None:
        if self.output_dir is None or self.config.get('outputs', {}).get('skip_dir_creation', False):
            return
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.logger.info(f"Output directory for {self.__class__.__name__}: {self.output_dir}")

    @abc.abstractmethod
    def execute(self, *args, **kwargs) -> Any:
        """Run the engine's step."""
