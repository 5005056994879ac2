"""
File I/O utilities.

Helper functions for reading and writing tables with consistent
error handling and logging.
"""

from pathlib import Path
from typing import Optional
import logging
import pandas as pd

logger = logging.getLogger(__name__)


def ensure_dir(path: Path) -> Path:
    """
    Ensure directory exists, creating if necessary.

    Parameters
    ----------
    path : Path
        Directory path to ensure exists.

    Returns
    -------
    Path
        The input path (for chaining).
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def read_table(
    path: Path,
    columns: Optional[list] = None,
) -> pd.DataFrame:
    """
    Load a CSV or parquet table, chosen by file suffix.

    Parameters
    ----------
    path : Path
        Path to a ``.csv`` or ``.parquet`` file.
    columns : list, optional
        Columns to load (loads all if None).

    Returns
    -------
    pd.DataFrame
        Loaded DataFrame.

    Raises
    ------
    FileNotFoundError
        If file does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    if path.suffix == ".parquet":
        df = pd.read_parquet(path, columns=columns)
    else:
        df = pd.read_csv(path, usecols=columns)
    logger.debug(f"Loaded {len(df):,} rows from {path.name}")
    return df


def save_parquet(
    df: pd.DataFrame,
    path: Path,
    compression: str = "snappy",
) -> Path:
    """
    Save DataFrame to parquet with logging.

    Parameters
    ----------
    df : pd.DataFrame
        DataFrame to save.
    path : Path
        Output path.
    compression : str
        Compression algorithm.

    Returns
    -------
    Path
        The output path.
    """
    ensure_dir(path.parent)
    df.to_parquet(path, compression=compression, index=False)
    logger.info(f"Saved {len(df):,} rows to {path.name}")
    return path


def save_csv(df: pd.DataFrame, path: Path, index: bool = False) -> Path:
    """Save DataFrame to CSV with logging."""
    ensure_dir(path.parent)
    df.to_csv(path, index=index)
    logger.info(f"Saved {len(df):,} rows to {path.name}")
    return path
