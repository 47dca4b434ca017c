import json
import os
import sqlite3
import threading
from typing import ContextManager, Dict, Optional, Protocol

URLS_KEY = "document_urls"

def content_key(doc_id: int) -> str:
    return f"document_content_{doc_id}"

def fetched_at_key(doc_id: int) -> str:
    return f"document_fetched_at_{doc_id}"


class CacheStore(Protocol):
    """
    Key-value persistence for tracked documents.

    Holds the id -> source URL registry plus, per id, the last good
    sanitized content and the time it was fetched. Content and timestamp
    are always written together.

    `lock` guards read-then-write sequences that span several calls, such as
    a registry change or a refresh write that must still match the registry.
    """

    lock: ContextManager

    def get_urls(self) -> Dict[int, str]:
        ...

    def set_urls(self, urls: Dict[int, str]) -> None:
        ...

    def get_content(self, doc_id: int) -> Optional[str]:
        ...

    def get_fetched_at(self, doc_id: int) -> Optional[str]:
        ...

    def save_fetch_result(self, doc_id: int, content: str, fetched_at: str) -> None:
        ...

    def delete_entry(self, doc_id: int) -> None:
        ...


class SqliteCacheStore:
    """CacheStore backed by a single SQLite key-value table"""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self.lock = threading.RLock()
        self.init_db()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def init_db(self):
        """Create the options table if it does not exist"""
        directory = os.path.dirname(self.db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS options (
                    name TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.commit()

    def _get(self, name: str) -> Optional[str]:
        with self._connect() as conn:
            cursor = conn.execute("SELECT value FROM options WHERE name = ?", (name,))
            result = cursor.fetchone()
            return result[0] if result else None

    def _set_many(self, conn: sqlite3.Connection, values: Dict[str, str]):
        conn.executemany(
            "INSERT OR REPLACE INTO options (name, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)",
            list(values.items()),
        )

    def get_urls(self) -> Dict[int, str]:
        raw = self._get(URLS_KEY)
        if not raw:
            return {}
        return {int(doc_id): url for doc_id, url in json.loads(raw).items()}

    def set_urls(self, urls: Dict[int, str]) -> None:
        payload = json.dumps({str(doc_id): url for doc_id, url in sorted(urls.items())})
        with self._connect() as conn:
            self._set_many(conn, {URLS_KEY: payload})
            conn.commit()

    def get_content(self, doc_id: int) -> Optional[str]:
        return self._get(content_key(doc_id))

    def get_fetched_at(self, doc_id: int) -> Optional[str]:
        return self._get(fetched_at_key(doc_id))

    def save_fetch_result(self, doc_id: int, content: str, fetched_at: str) -> None:
        """Store content and timestamp for one document in a single transaction"""
        with self._connect() as conn:
            self._set_many(conn, {
                content_key(doc_id): content,
                fetched_at_key(doc_id): fetched_at,
            })
            conn.commit()

    def delete_entry(self, doc_id: int) -> None:
        """Remove the URL mapping, content and timestamp of one document"""
        with self.lock:
            urls = self.get_urls()
            urls.pop(doc_id, None)
            payload = json.dumps({str(k): v for k, v in sorted(urls.items())})
            with self._connect() as conn:
                self._set_many(conn, {URLS_KEY: payload})
                conn.execute(
                    "DELETE FROM options WHERE name IN (?, ?)",
                    (content_key(doc_id), fetched_at_key(doc_id)),
                )
                conn.commit()

    def clear_all(self):
        """Remove every stored option (for testing)"""
        with self._connect() as conn:
            conn.execute("DELETE FROM options")
            conn.commit()

    def get_stats(self) -> dict:
        urls = self.get_urls()
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT COUNT(*) FROM options WHERE name LIKE 'document_content_%'"
            )
            cached_entries = cursor.fetchone()[0]

        return {
            "registered_documents": len(urls),
            "cached_documents": cached_entries,
            "database_path": self.db_path,
        }
