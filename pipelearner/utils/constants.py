# pipelearner/utils/constants.py

# --- Top-Level Result Directories ---
# Sequentially numbered for proper sorting

CONFIG_DIR = "01_RunConfiguration"        # Run config, metadata, seeds
RESULTS_DIR = "02_GridSearchResults"      # Result summary, scores, best configuration
MODELS_DIR = "03_FittedModels"            # Pickled fits (optional)
PLOTS_DIR = "04_LearningCurves"           # Learning curve plots

# --- File Names ---
CONFIG_USED_FILE = "config_used.json"
CONFIG_HASH_FILE = "config_hash.txt"
RUN_METADATA_FILE = "run_metadata.json"
RESULT_SUMMARY_FILE = "result_summary.parquet"
SCORES_FILE = "scores.parquet"
BEST_CONFIGURATION_FILE = "best_configuration.json"
LEARNING_CURVE_FILE = "learning_curve.png"

# --- Result Table Columns ---
MODELS_ID = "models_id"
ENTRY_ID = "entry_id"
CV_PAIRS_ID = "cv_pairs_id"
TRAIN_P = "train_p"
ID_COLUMNS = [MODELS_ID, ENTRY_ID, CV_PAIRS_ID, TRAIN_P]

# --- Resampling ---
RESAMPLING_METHODS = ("holdout", "kfold", "bootstrap")
DEFAULT_N_SPLITS = {"holdout": 1, "kfold": 5, "bootstrap": 25}

# --- Failure Policies ---
ON_ERROR_RAISE = "raise"
ON_ERROR_RECORD = "record"
