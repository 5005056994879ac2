"""
Loader for the Coffee Quality Institute ratings table.

Reads a local CSV/parquet file, or downloads the published TidyTuesday CSV
once into data/raw/ and records it in the manifest.
"""

import logging
from pathlib import Path
from typing import Optional

import pandas as pd
import requests

from ..config import COFFEE_RATINGS_URL, RAW_COLUMN_COUNT, RAW_RATINGS_FILE
from ..utils.io import ensure_dir, read_table
from .manifest import ManifestManager

logger = logging.getLogger(__name__)

SOURCE_NAME = "coffee_ratings"


def download_file(url: str, target_path: Path, timeout: int = 60) -> Path:
    """
    Download a single file to ``target_path``.

    Args:
        url: URL to download from
        target_path: Where to write the response body
        timeout: Request timeout in seconds

    Returns:
        The target path
    """
    logger.info(f"Downloading from {url}")

    response = requests.get(url, timeout=timeout)
    response.raise_for_status()

    ensure_dir(target_path.parent)
    target_path.write_bytes(response.content)
    logger.info(f"  Saved {len(response.content):,} bytes to {target_path.name}")
    return target_path


def download_coffee_ratings(
    manifest: Optional[ManifestManager] = None,
    url: str = COFFEE_RATINGS_URL,
    target_path: Path = RAW_RATINGS_FILE,
    force: bool = False,
) -> Path:
    """
    Download the ratings CSV unless a verified copy is already present.

    Args:
        manifest: ManifestManager to record download (creates new if None)
        url: Source URL
        target_path: Local cache location
        force: If True, download even if the file exists

    Returns:
        Path to the local CSV
    """
    if manifest is None:
        manifest = ManifestManager()

    if target_path.exists() and not force:
        record = manifest.verify_hash(target_path)
        if record is not None:
            logger.info(
                f"Coffee ratings already downloaded: {target_path.name} "
                f"({record.n_rows:,} rows, retrieved {record.retrieved_utc})"
            )
            return target_path
        logger.warning(f"{target_path.name} not in manifest or hash changed; re-downloading")

    download_file(url, target_path)
    manifest.add_entry(SOURCE_NAME, url, target_path)
    return target_path


def load_raw_ratings(
    path: Optional[Path] = None,
    url: str = COFFEE_RATINGS_URL,
    force: bool = False,
    manifest: Optional[ManifestManager] = None,
) -> pd.DataFrame:
    """
    Load the raw ratings table.

    Args:
        path: Local CSV or parquet file; downloads from ``url`` if None
        url: Source URL used when no path is given
        force: Re-download even if a cached copy exists
        manifest: ManifestManager used for the download

    Returns:
        Raw DataFrame, one row per cupping evaluation
    """
    if path is None:
        path = download_coffee_ratings(manifest=manifest, url=url, force=force)

    df = read_table(Path(path))
    logger.info(f"Loaded raw ratings: {len(df):,} rows x {df.shape[1]} columns")
    if df.shape[1] != RAW_COLUMN_COUNT:
        logger.warning(
            f"Expected {RAW_COLUMN_COUNT} raw columns, found {df.shape[1]}"
        )
    return df
