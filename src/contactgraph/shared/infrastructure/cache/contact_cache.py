"""
Persistent contact cache for ContactGraph.

Stores generated summaries and hashtags per contact so they survive
restarts and do not have to be regenerated. Entries are keyed by
(name, phone number) because contact-store ids are not stable across
devices.
"""

import json
import sqlite3
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Any, Iterator, List, Optional, Union

from pydantic import Field

from ...config.settings import get_settings
from ...exceptions import CacheError
from ...models.base import BaseModel
from ..monitoring.logger import get_logger

SECONDS_PER_DAY = 24 * 60 * 60


class CachedContactData(BaseModel):
    """Cached enrichment for one contact."""

    summary: Optional[str] = Field(default=None, description="Cached summary")
    hashtags: Optional[List[str]] = Field(default=None, description="Cached hashtags")
    created_at: Optional[float] = Field(default=None, description="First write (epoch seconds)")
    updated_at: Optional[float] = Field(default=None, description="Last write (epoch seconds)")


class ContactCache:
    """
    SQLite-backed cache of contact summaries and hashtags.

    A process normally shares one instance through ``get_instance()``;
    the schema is created lazily on first use and ``init()`` is idempotent.
    Read failures are logged and reported as a cache miss, write failures
    raise ``CacheError``.
    """

    _instance: Optional["ContactCache"] = None
    _lock = threading.RLock()

    def __init__(self, db_path: Union[str, Path]):
        self.db_path = Path(db_path)
        self.logger = get_logger(__name__)
        self._initialized = False

    @classmethod
    def get_instance(cls) -> "ContactCache":
        """Get the process-wide cache, creating it from settings on first use."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    settings = get_settings()
                    cls._instance = cls(settings.cache_config['path'])
        cls._instance.init()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Forget the process-wide cache (the database file is kept)."""
        with cls._lock:
            cls._instance = None

    def init(self) -> None:
        """Create the cache table and index if they do not exist yet."""
        if self._initialized:
            return
        with self._lock:
            if self._initialized:
                return
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                with self._get_conn() as conn:
                    conn.executescript('''
                        CREATE TABLE IF NOT EXISTS contact_cache (
                            id INTEGER PRIMARY KEY AUTOINCREMENT,
                            name TEXT NOT NULL,
                            phone_number TEXT NOT NULL,
                            summary TEXT,
                            hashtags TEXT,
                            created_at REAL NOT NULL,
                            updated_at REAL NOT NULL,
                            UNIQUE(name, phone_number)
                        );

                        CREATE INDEX IF NOT EXISTS idx_name_phone
                        ON contact_cache(name, phone_number);
                    ''')
            except (sqlite3.Error, OSError) as e:
                raise CacheError(f"Failed to initialize contact cache at {self.db_path}: {e}")
            self._initialized = True
            self.logger.info(f"Contact cache ready at {self.db_path}")

    @contextmanager
    def _get_conn(self) -> Iterator[sqlite3.Connection]:
        """Get database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def get(self, name: str, phone_number: str) -> Optional[CachedContactData]:
        """
        Get cached data for a contact.

        Args:
            name: Contact name
            phone_number: Contact phone number

        Returns:
            Cached data or None if not found
        """
        self.init()
        try:
            with self._get_conn() as conn:
                row = conn.execute(
                    'SELECT summary, hashtags, created_at, updated_at FROM contact_cache '
                    'WHERE name = ? AND phone_number = ?',
                    (name, phone_number or "")
                ).fetchone()
        except sqlite3.Error as e:
            self.logger.error(f"Error getting cached contact {name}: {e}")
            return None

        if row is None:
            self.logger.debug(f"No cached data found for {name} ({phone_number})")
            return None

        return CachedContactData(
            summary=row['summary'],
            hashtags=self._decode_hashtags(row['hashtags']),
            created_at=row['created_at'],
            updated_at=row['updated_at'],
        )

    def set(self, name: str, phone_number: str, data: CachedContactData) -> None:
        """
        Store or update contact data, keeping the original creation time.

        Args:
            name: Contact name
            phone_number: Contact phone number
            data: Contact data to cache (summary and/or hashtags)
        """
        self.init()
        now = time.time()
        hashtags_json = json.dumps(data.hashtags) if data.hashtags is not None else None
        phone_number = phone_number or ""

        try:
            with self._get_conn() as conn:
                conn.execute('''
                    INSERT OR REPLACE INTO contact_cache
                    (name, phone_number, summary, hashtags, created_at, updated_at)
                    VALUES (?, ?, ?, ?,
                        COALESCE((SELECT created_at FROM contact_cache WHERE name = ? AND phone_number = ?), ?),
                        ?)
                ''', (name, phone_number, data.summary, hashtags_json, name, phone_number, now, now))
        except sqlite3.Error as e:
            raise CacheError(f"Failed to cache data for {name}: {e}")

        self.logger.debug(f"Cached data for {name} ({phone_number or 'no phone number'})")

    def has(self, name: str, phone_number: str) -> bool:
        """Check if a contact has cached data."""
        self.init()
        try:
            with self._get_conn() as conn:
                row = conn.execute(
                    'SELECT COUNT(*) AS count FROM contact_cache WHERE name = ? AND phone_number = ?',
                    (name, phone_number or "")
                ).fetchone()
        except sqlite3.Error as e:
            self.logger.error(f"Error checking cached contact {name}: {e}")
            return False
        return row['count'] > 0

    def delete(self, name: str, phone_number: str) -> bool:
        """Delete a specific contact from the cache."""
        self.init()
        try:
            with self._get_conn() as conn:
                cursor = conn.execute(
                    'DELETE FROM contact_cache WHERE name = ? AND phone_number = ?',
                    (name, phone_number or "")
                )
                deleted = cursor.rowcount
        except sqlite3.Error as e:
            raise CacheError(f"Failed to delete cached data for {name}: {e}")
        return deleted > 0

    def clear(self) -> None:
        """Clear all cached contacts."""
        self.init()
        try:
            with self._get_conn() as conn:
                conn.execute('DELETE FROM contact_cache')
        except sqlite3.Error as e:
            raise CacheError(f"Failed to clear contact cache: {e}")
        self.logger.info("Contact cache cleared")

    def size(self) -> int:
        """Get the number of cached contacts."""
        self.init()
        try:
            with self._get_conn() as conn:
                row = conn.execute('SELECT COUNT(*) AS count FROM contact_cache').fetchone()
        except sqlite3.Error as e:
            self.logger.error(f"Error getting cache size: {e}")
            return 0
        return row['count']

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        self.init()
        try:
            with self._get_conn() as conn:
                row = conn.execute('''
                    SELECT COUNT(*) AS total,
                           COUNT(summary) AS with_summary,
                           COUNT(hashtags) AS with_hashtags
                    FROM contact_cache
                ''').fetchone()
        except sqlite3.Error as e:
            self.logger.error(f"Error getting cache stats: {e}")
            return {'total_contacts': 0, 'with_summary': 0, 'with_hashtags': 0, 'database_size_bytes': None}

        size_bytes = self.db_path.stat().st_size if self.db_path.exists() else None
        return {
            'total_contacts': row['total'],
            'with_summary': row['with_summary'],
            'with_hashtags': row['with_hashtags'],
            'database_size_bytes': size_bytes,
        }

    def delete_older_than(self, days: Optional[int] = None) -> int:
        """
        Delete entries not updated within the given number of days.

        Args:
            days: Age limit, defaults to the configured maximum age

        Returns:
            Number of deleted entries
        """
        self.init()
        if days is None:
            days = get_settings().cache_config['max_age_days']
        cutoff = time.time() - days * SECONDS_PER_DAY

        try:
            with self._get_conn() as conn:
                cursor = conn.execute('DELETE FROM contact_cache WHERE updated_at < ?', (cutoff,))
                deleted = cursor.rowcount
        except sqlite3.Error as e:
            self.logger.error(f"Error deleting old cache entries: {e}")
            return 0

        self.logger.info(f"Deleted {deleted} old cache entries")
        return deleted

    def _decode_hashtags(self, raw: Optional[str]) -> Optional[List[str]]:
        """Decode stored hashtags, accepting the older comma-separated format."""
        if raw is None:
            return None
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError:
            return [tag for tag in raw.split(",") if tag]
        if not isinstance(decoded, list):
            return None
        return [str(tag) for tag in decoded]


def get_contact_cache() -> ContactCache:
    """Get the process-wide contact cache."""
    return ContactCache.get_instance()
