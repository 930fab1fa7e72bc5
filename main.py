#!/usr/bin/env python
"""
pipelearner - Command Line Entry Point
Runs a complete grid search described by a JSON configuration file.
"""
import sys
import logging
import argparse
import traceback
from pathlib import Path

import pandas as pd

from pipelearner.config_manager import ConfigurationManager
from pipelearner.datasets import load_dataset
from pipelearner.evaluation_engine import EvaluationEngine
from pipelearner.logging_config import LoggingConfigurator
from pipelearner.pipeline import PipeLearner
from pipelearner.reporting_engine import ReportingEngine
from pipelearner.utils.exceptions import ConfigurationError, PipelearnerException
from pipelearner.utils.file_io import read_dataframe


def parse_arguments(argv=None):
    """
    Parse command-line arguments.

    Returns:
        argparse.Namespace: Parsed command-line arguments.
    """
    parser = argparse.ArgumentParser(
        description="pipelearner - grid search over model hyperparameters",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        "--config",
        type=str,
        default="config/config.json",
        help="Path to the configuration JSON file"
    )

    parser.add_argument(
        "--schema",
        type=str,
        default="config/schema.json",
        help="Path to the configuration JSON schema"
    )

    parser.add_argument(
        "--run-id",
        type=str,
        default=None,
        help="Optional run identifier (defaults to timestamp if not provided)"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate configuration and data without fitting anything"
    )

    return parser.parse_args(argv)


def load_data(config: dict) -> pd.DataFrame:
    """Load the dataset named by 'data.dataset' or read 'data.file_path'."""
    data_cfg = config.get('data', {})
    if data_cfg.get('dataset'):
        return load_dataset(data_cfg['dataset'])
    if data_cfg.get('file_path'):
        path = Path(data_cfg['file_path'])
        if not path.exists():
            raise ConfigurationError(f"Data file not found: {path}")
        return read_dataframe(path)
    raise ConfigurationError("Config must set 'data.dataset' or 'data.file_path'.")


def build_pipeline(data: pd.DataFrame, config: dict, logger: logging.Logger) -> PipeLearner:
    """Translate the 'models' section into PipeLearner registrations."""
    models = config.get('models', [])
    if not models:
        raise ConfigurationError("Config must register at least one entry under 'models'.")

    pipeline = PipeLearner(data, config=config, logger=logger)
    for entry in models:
        pipeline.learn_models(entry['model'], entry['formula'], **entry.get('params', {}))
    return pipeline


def setup_run_directory(config: dict, run_id: str, logger: logging.Logger) -> Path:
    """Create '<base_results_dir>/<run_id>' and point the config at it."""
    base_results_dir = config.get('outputs', {}).get('base_results_dir') or 'results'
    run_dir = (Path(base_results_dir) / run_id).absolute()
    run_dir.mkdir(parents=True, exist_ok=True)
    config['outputs']['base_results_dir'] = str(run_dir)
    logger.info(f"Run directory: {run_dir}")
    return run_dir


def main(argv=None):
    """
    Load configuration, learn every model entry, score and report.

    Returns:
        int: Exit code (0 for success, 1 for errors, 130 when interrupted)
    """
    logger = None
    logging_configurator = None

    try:
        args = parse_arguments(argv)

        # 1. Configuration
        config_manager = ConfigurationManager(config_path=args.config, schema_path=args.schema)
        config = config_manager.load_and_validate()
        if args.verbose:
            config['logging']['level'] = 'DEBUG'

        # 2. Logging
        logging_configurator = LoggingConfigurator(config)
        logging_configurator.setup()
        logger = logging_configurator.get_logger('pipelearner')
        logger.info(f"Configuration loaded from: {args.config}")

        # 3. Data & pipeline
        data = load_data(config)
        logger.info(f"Data loaded: {data.shape[0]} rows x {data.shape[1]} columns")
        pipeline = build_pipeline(data, config, logger)

        if args.dry_run:
            pipeline.cv_pairs()
            logger.info(f"Dry run: {len(pipeline.entries)} model entr(ies) validated. Exiting without fitting.")
            print("\n[SUCCESS] Configuration validated successfully.")
            return 0

        # 4. Run directory & artifacts
        run_id = args.run_id or config_manager.generate_run_id()
        config_manager.run_id = run_id
        run_dir = setup_run_directory(pipeline.config, run_id, logger)
        config_manager.config = pipeline.config
        config_manager.save_artifacts(str(run_dir))

        # 5. Learn, score, report
        results = pipeline.learn()

        evaluation = EvaluationEngine(pipeline.config, logger)
        scores = evaluation.execute(results)
        best = evaluation.best(scores)

        ReportingEngine(pipeline.config, logger).execute(results, scores, best)

        print(f"\n[SUCCESS] {len(results)} fits completed. Results saved to: {run_dir}")
        return 0

    except PipelearnerException as e:
        msg = f"Pipeline Error: {str(e)}"
        print(f"\n[ERROR] {msg}")
        if logger:
            logger.critical(msg, exc_info=True)
        else:
            traceback.print_exc()
        return 1

    except KeyboardInterrupt:
        print("\n[INTERRUPTED] Run interrupted by user.")
        if logger:
            logger.warning("Run interrupted by user (Ctrl+C)")
        return 130

    except Exception as e:
        msg = f"Unexpected Error: {str(e)}"
        print(f"\n[CRITICAL] {msg}")
        if logger:
            logger.critical(msg, exc_info=True)
        else:
            traceback.print_exc()
        return 1

    finally:
        if logging_configurator is not None:
            logging_configurator.shutdown()


if __name__ == "__main__":
    sys.exit(main())
