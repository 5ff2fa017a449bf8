"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/manifest_service.py
Manifest persistence: snapshots of file digests and metadata stored as JSON.
Used to save results and to narrow later runs down to changed files.
"""
import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Iterable

from hashpool.core.errors import ManifestError
from hashpool.core.models import Entry

logger = logging.getLogger(__name__)

MANIFEST_VERSION = 1


@dataclass
class FileRecord:
    path: str
    size: int
    mtime: float
    digest: str

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "size": self.size, "mtime": self.mtime, "hash": self.digest}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FileRecord':
        return cls(
            path=data["path"],
            size=int(data["size"]),
            mtime=float(data.get("mtime", 0.0)),
            digest=data["hash"],
        )


@dataclass
class Manifest:
    """
    Snapshot of successfully hashed files for one algorithm.
    """
    algorithm: str
    files: List[FileRecord] = field(default_factory=list)
    created: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    version: int = MANIFEST_VERSION

    @classmethod
    def from_entries(cls, algorithm: str, entries: Iterable[Entry]) -> 'Manifest':
        """Builds a manifest from hashed entries, keeping successful file entries only."""
        records = [
            FileRecord(path=e.original, size=e.size, mtime=e.mod_time, digest=e.digest)
            for e in entries
            if e.error is None and e.is_file
        ]
        return cls(algorithm=algorithm, files=records)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "algorithm": self.algorithm,
            "created": self.created,
            "files": [r.to_dict() for r in self.files],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Manifest':
        return cls(
            algorithm=data["algorithm"],
            files=[FileRecord.from_dict(r) for r in data.get("files", [])],
            created=data.get("created", ""),
            version=int(data.get("version", MANIFEST_VERSION)),
        )

    def changed_files(self, paths: List[str]) -> List[str]:
        """
        Returns the paths that differ from this manifest:
        missing now, not recorded, or with a different size or modification time.
        Directories are skipped.
        """
        records = {r.path: r for r in self.files}
        changed = []
        for path in paths:
            try:
                st = os.stat(path)
            except OSError:
                changed.append(path)
                continue

            if os.path.isdir(path):
                continue

            record = records.get(path)
            if record is None or st.st_size != record.size or st.st_mtime != record.mtime:
                changed.append(path)
        return changed


class ManifestService:
    """
    Loads and saves manifests.
    """

    @staticmethod
    def save(manifest: Manifest, path: str) -> None:
        """
        Writes the manifest as indented JSON.
        The file is written next to the target first and then moved into place,
        so readers never see a partial manifest.
        """
        directory = os.path.dirname(os.path.abspath(path))
        os.makedirs(directory, exist_ok=True)

        temp_path = path + ".tmp"
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(manifest.to_dict(), f, indent=2)
                f.write("\n")
            os.replace(temp_path, path)
        except OSError:
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise
        logger.debug(f"Manifest with {len(manifest.files)} records saved to {path}")

    @staticmethod
    def load(path: str) -> Manifest:
        """
        Reads a manifest.

        Raises:
            ManifestError: If the file cannot be read or is not a valid manifest
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise ManifestError(f"Failed to read manifest {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ManifestError(f"Failed to decode manifest {path}: {e}") from e

        try:
            return Manifest.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise ManifestError(f"Invalid manifest {path}: {e}") from e
