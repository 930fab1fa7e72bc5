import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List

from colorama import Fore, Style, init

init(autoreset=True)

LOG_FORMAT = '[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s'
FILE_LOG_FORMAT = '[%(asctime)s] [%(levelname)s] [%(name)s] [%(funcName)s] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Libraries that flood DEBUG output during plotting and parallel fitting
NOISY_LOGGERS = ('matplotlib', 'PIL', 'joblib')


class ColoredFormatter(logging.Formatter):
    """Colors the level name on console output."""
    LEVEL_COLORS = {
        logging.DEBUG: Fore.WHITE + Style.DIM,
        logging.INFO: Fore.CYAN,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.RED + Style.BRIGHT,
    }

    def format(self, record):
        color = self.LEVEL_COLORS.get(record.levelno)
        if color is None:
            return super().format(record)
        # Format a copy; the file handler shares the record and needs the plain name
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{color}{record.levelname}{Style.RESET_ALL}"
        return super().format(colored)


class LoggingConfigurator:
    """
    Configures process-wide logging for a pipelearner run from the
    'logging' config section.

    Keys: level, log_to_console, colorful_console, log_to_file, log_dir,
    log_file, max_bytes, backup_count.
    """

    def __init__(self, config: dict):
        self.config = config.get('logging', {})
        self.log_level = getattr(logging, str(self.config.get('level', 'INFO')).upper())
        self.log_dir = Path(self.config.get('log_dir', 'logs'))
        self.log_file = self.config.get('log_file', 'pipelearner.log')
        self.handlers: List[logging.Handler] = []

    def setup(self) -> logging.Logger:
        """Replace the root handlers with console and/or rotating file handlers."""
        root_logger = logging.getLogger()
        root_logger.setLevel(self.log_level)
        root_logger.handlers = []

        if self.config.get('log_to_console', True):
            self._add_console_handler(root_logger)
        if self.config.get('log_to_file', False):
            self._add_file_handler(root_logger)

        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(max(self.log_level, logging.WARNING))
        return root_logger

    def shutdown(self) -> None:
        """Flush, close and detach the handlers installed by setup()."""
        root_logger = logging.getLogger()
        for handler in self.handlers:
            handler.flush()
            handler.close()
            root_logger.removeHandler(handler)
        self.handlers = []

    def _add_console_handler(self, logger: logging.Logger) -> None:
        if sys.platform == 'win32':
            sys.stdout.reconfigure(encoding='utf-8')

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(self.log_level)
        if self.config.get('colorful_console', True):
            handler.setFormatter(ColoredFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        else:
            handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
        self.handlers.append(handler)

    def _add_file_handler(self, logger: logging.Logger) -> None:
        self.log_dir.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            self.log_dir / self.log_file,
            maxBytes=self.config.get('max_bytes', 10 * 1024 * 1024),
            backupCount=self.config.get('backup_count', 5),
            encoding='utf-8'
        )
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
        self.handlers.append(handler)

    def get_logger(self, name: str) -> logging.Logger:
        return logging.getLogger(name)
