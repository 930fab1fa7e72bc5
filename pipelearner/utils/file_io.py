from pathlib import Path

import pandas as pd

_READERS = {
    ".parquet": pd.read_parquet,
    ".xlsx": pd.read_excel,
    ".xls": pd.read_excel,
    ".csv": pd.read_csv,
}


def save_dataframe(df: pd.DataFrame, path: Path, *, excel_copy: bool = False, index: bool = False) -> Path:
    """
    Write a result frame as Parquet (or CSV when ``path`` ends in .csv).

    With ``excel_copy`` an .xlsx file is written next to it for people who
    want to open results in a spreadsheet.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() == ".csv":
        df.to_csv(path, index=index)
    else:
        df.to_parquet(path, index=index)

    if excel_copy:
        df.to_excel(path.with_suffix(".xlsx"), index=index)
    return path


def read_dataframe(path: Path) -> pd.DataFrame:
    """Load a dataset or saved result frame, picking the reader from the extension."""
    path = Path(path)
    reader = _READERS.get(path.suffix.lower())
    if reader is None:
        raise ValueError(f"Unsupported file extension for reading: {path.suffix} (expected one of {sorted(_READERS)})")
    return reader(path)
