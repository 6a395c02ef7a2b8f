"""Index snapshot so query commands can skip re-walking the source trees.

Snapshot Format: one SQLite database file holding one row per FileRecord
(ordinal, path, JSON-encoded declared ids, JSON-encoded referenced ids).
Location: <cache_dir>/res_cache.db

There is no version tag and no fingerprint of the roots that produced the
snapshot. A snapshot taken before the sources changed is silently stale until
`aster index` runs again.
"""

import json
import sqlite3
from pathlib import Path
from typing import Dict

from aster.analyzer.extractor import FileRecord
from aster.analyzer.resource_index import ResourceIndex
from aster.errors import CacheError, CacheFormatError, CacheNotFoundError

SNAPSHOT_NAME = 'res_cache.db'


class IndexCache:
    """Save and load the ResourceIndex backing records."""

    def __init__(self, cache_dir: str | Path):
        """Initialize cache.

        Args:
            cache_dir: Directory holding the snapshot (created on first save)
        """
        self.cache_dir = Path(cache_dir)
        self.cache_file = self.cache_dir / SNAPSHOT_NAME

    def save(self, index: ResourceIndex):
        """Write the snapshot, replacing any previous one.

        The database is built in a temp file and renamed over the old snapshot,
        so a crash mid-write leaves the previous snapshot intact.

        Raises:
            CacheError: If the cache directory or snapshot cannot be written
        """
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheError(f"Cannot create cache directory {self.cache_dir}: {e}") from e

        temp_path = self.cache_file.with_suffix('.tmp')
        try:
            temp_path.unlink(missing_ok=True)
            conn = sqlite3.connect(str(temp_path))
            try:
                with conn:
                    conn.execute('''
                        CREATE TABLE files (
                            ordinal INTEGER PRIMARY KEY,
                            path TEXT NOT NULL,
                            declared_ids TEXT NOT NULL,
                            referenced_ids TEXT NOT NULL
                        )
                    ''')
                    conn.executemany(
                        'INSERT INTO files (ordinal, path, declared_ids, referenced_ids) VALUES (?, ?, ?, ?)',
                        (
                            (ordinal, record.path, json.dumps(list(record.declared_ids)),
                             json.dumps(list(record.referenced_ids)))
                            for ordinal, record in enumerate(index.files())
                        )
                    )
            finally:
                conn.close()

            temp_path.replace(self.cache_file)
        except (OSError, sqlite3.Error) as e:
            raise CacheError(f"Cannot write index snapshot {self.cache_file}: {e}") from e

    def load(self) -> ResourceIndex:
        """Read the snapshot back into a ResourceIndex.

        Raises:
            CacheNotFoundError: If no snapshot exists
            CacheFormatError: If the file is not a readable snapshot
        """
        if not self.cache_file.is_file():
            raise CacheNotFoundError(f"No index snapshot at {self.cache_file}")

        # Read-only URI so a missing table never creates an empty database
        conn = sqlite3.connect(self.cache_file.resolve().as_uri() + '?mode=ro', uri=True)
        try:
            rows = conn.execute(
                'SELECT path, declared_ids, referenced_ids FROM files ORDER BY ordinal'
            ).fetchall()
        except sqlite3.DatabaseError as e:
            raise CacheFormatError(f"Unreadable index snapshot {self.cache_file}: {e}") from e
        finally:
            conn.close()

        try:
            records = [
                FileRecord(
                    path=path,
                    declared_ids=tuple(json.loads(declared)),
                    referenced_ids=tuple(json.loads(referenced)),
                )
                for path, declared, referenced in rows
            ]
        except (TypeError, ValueError) as e:
            raise CacheFormatError(f"Corrupt record in index snapshot {self.cache_file}: {e}") from e

        return ResourceIndex(records)

    def clear(self) -> bool:
        """Delete the snapshot.

        Returns:
            True if a snapshot existed
        """
        if not self.cache_file.exists():
            return False
        self.cache_file.unlink()
        return True

    def stats(self) -> Dict[str, object]:
        """Describe the current snapshot.

        Raises:
            CacheNotFoundError: If no snapshot exists
            CacheFormatError: If the snapshot cannot be decoded
        """
        index = self.load()
        return {
            'path': str(self.cache_file),
            'size_bytes': self.cache_file.stat().st_size,
            'files': len(index),
            'defined': len(index.defined_ids()),
            'used': len(index.used_ids()),
        }
