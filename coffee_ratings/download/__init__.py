"""Data download and manifest management."""

from .manifest import ManifestManager
from .ratings_downloader import download_coffee_ratings, load_raw_ratings

__all__ = [
    "ManifestManager",
    "download_coffee_ratings",
    "load_raw_ratings",
]
