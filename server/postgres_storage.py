"""PostgreSQL storage implementation."""

import logging
import os

import psycopg2

from core.interfaces import KeyValueStore

logger = logging.getLogger(__name__)


class PostgresDatabase:
    """Shared lazy connection to the key-value table."""

    def __init__(self, db_url: str = None):
        self.db_url = db_url or os.environ.get(
            'DATABASE_URL',
            'postgresql://localhost:5432/nunchi'
        )
        self._conn = None
        self._initialized = False

    @property
    def conn(self):
        """Lazy connection initialization."""
        if self._conn is None or self._conn.closed:
            self._conn = psycopg2.connect(self.db_url)
            if not self._initialized:
                self._init_db()
                self._initialized = True
        return self._conn

    def _init_db(self):
        """Create tables if they don't exist."""
        with self._conn.cursor() as cur:
            cur.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    user_id VARCHAR(255) NOT NULL,
                    key VARCHAR(255) NOT NULL,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (user_id, key)
                )
            """)
            cur.execute("""
                CREATE INDEX IF NOT EXISTS idx_kv_store_updated
                ON kv_store(updated_at)
            """)
        self._conn.commit()

    def for_user(self, user_id: str) -> 'PostgresStorage':
        return PostgresStorage(self, user_id)


class PostgresStorage(KeyValueStore):
    """One user's view of the kv_store table."""

    def __init__(self, database: PostgresDatabase, user_id: str = "default"):
        self.database = database
        self.user_id = user_id

    def get_item(self, key: str) -> str | None:
        with self.database.conn.cursor() as cur:
            cur.execute(
                "SELECT value FROM kv_store WHERE user_id = %s AND key = %s",
                (self.user_id, key)
            )
            row = cur.fetchone()
            return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        conn = self.database.conn
        try:
            with conn.cursor() as cur:
                cur.execute("""
                    INSERT INTO kv_store (user_id, key, value, updated_at)
                    VALUES (%s, %s, %s, CURRENT_TIMESTAMP)
                    ON CONFLICT (user_id, key)
                    DO UPDATE SET value = EXCLUDED.value, updated_at = CURRENT_TIMESTAMP
                """, (self.user_id, key, value))
            conn.commit()
        except Exception as e:
            logger.error(f"Error saving {key} for {self.user_id}: {e}")
            conn.rollback()
            raise

    def remove_item(self, key: str) -> None:
        conn = self.database.conn
        try:
            with conn.cursor() as cur:
                cur.execute(
                    "DELETE FROM kv_store WHERE user_id = %s AND key = %s",
                    (self.user_id, key)
                )
            conn.commit()
        except Exception as e:
            logger.error(f"Error removing {key} for {self.user_id}: {e}")
            conn.rollback()
            raise
