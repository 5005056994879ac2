"""
Download manifest for the raw ratings table.

One JSON line per downloaded file, keyed by local path:
- source, retrieved_utc, url, path
- sha256 of the file as written
- n_rows / n_columns of the table it parsed to
- license note
"""

import json
import hashlib
import logging
from pathlib import Path
from datetime import datetime, timezone
from typing import Dict, Optional
from dataclasses import dataclass, asdict

from ..config import MANIFEST_FILE, MANIFEST_FIELDS, LICENSE_NOTES
from ..utils.io import read_table

logger = logging.getLogger(__name__)


@dataclass
class DownloadRecord:
    """Provenance of one downloaded ratings table."""
    source: str
    retrieved_utc: str
    url: str
    path: str
    sha256: str
    n_rows: int
    n_columns: int
    license: str


def compute_file_hash(filepath: Path) -> str:
    """Compute SHA256 hash of a file."""
    sha256_hash = hashlib.sha256()
    with open(filepath, "rb") as f:
        for byte_block in iter(lambda: f.read(4096), b""):
            sha256_hash.update(byte_block)
    return sha256_hash.hexdigest()


class ManifestManager:
    """
    Keeps manifest.jsonl in step with the files under data/raw/.

    A later download of the same path replaces the earlier record.
    """

    def __init__(self, manifest_path: Optional[Path] = None):
        self.manifest_path = Path(manifest_path or MANIFEST_FILE)
        self._records: Dict[str, DownloadRecord] = {}
        if self.manifest_path.exists():
            with open(self.manifest_path) as f:
                for line in f:
                    if line.strip():
                        row = json.loads(line)
                        self._records[row["path"]] = DownloadRecord(
                            **{k: row[k] for k in MANIFEST_FIELDS}
                        )

    def add_entry(self, source: str, url: str, local_path: Path) -> DownloadRecord:
        """
        Hash ``local_path``, parse it for its table shape and record both.

        Args:
            source: Identifier for the data source, also the LICENSE_NOTES key
            url: URL the file was downloaded from
            local_path: Where the file was written

        Returns:
            The stored DownloadRecord
        """
        local_path = Path(local_path)
        table = read_table(local_path)
        record = DownloadRecord(
            source=source,
            retrieved_utc=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            url=url,
            path=str(local_path.absolute()),
            sha256=compute_file_hash(local_path),
            n_rows=int(table.shape[0]),
            n_columns=int(table.shape[1]),
            license=LICENSE_NOTES.get(source, "Unknown license"),
        )
        self._records[record.path] = record

        self.manifest_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.manifest_path, "w") as f:
            for rec in self._records.values():
                f.write(json.dumps(asdict(rec)) + "\n")
        logger.info(
            f"  Manifest: {local_path.name} {record.n_rows:,} rows x {record.n_columns} columns"
        )
        return record

    def verify_hash(self, local_path: Path) -> Optional[DownloadRecord]:
        """
        Look up ``local_path`` and check its current hash.

        Returns:
            The stored record when the file is unchanged, else None
        """
        record = self._records.get(str(Path(local_path).absolute()))
        if record is None or compute_file_hash(Path(local_path)) != record.sha256:
            return None
        return record
