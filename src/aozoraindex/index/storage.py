"""SQLite + FTS5 store for collected works."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List

from aozoraindex.errors import StoreError
from aozoraindex.models import ContentRecord, WorkDescriptor

LOGGER = logging.getLogger(__name__)

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS authors (
        author_id TEXT NOT NULL,
        author TEXT,
        PRIMARY KEY(author_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS contents (
        author_id TEXT NOT NULL,
        title_id TEXT NOT NULL,
        title TEXT,
        content TEXT,
        PRIMARY KEY(author_id, title_id)
    )
    """,
    # rowid of contents_fts is the docid, i.e. the rowid of the contents row
    "CREATE VIRTUAL TABLE IF NOT EXISTS contents_fts USING fts5(words)",
)


class SQLiteFullTextStore:
    """Persistence layer for authors, work contents and their token index.

    The ``contents`` rowid doubles as the document id of the full-text row.
    Upserts update in place so that id never changes for a given
    ``(author_id, title_id)``.
    """

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)
        try:
            self._conn = sqlite3.connect(self.db_path)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode=WAL;")
            self._conn.execute("PRAGMA synchronous=NORMAL;")
            self._ensure_schema()
        except sqlite3.Error as exc:
            raise StoreError(f"Unable to open store {self.db_path}: {exc}") from exc

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "SQLiteFullTextStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        try:
            yield self._conn
            self._conn.commit()
        except sqlite3.Error as exc:
            self._conn.rollback()
            raise StoreError(str(exc)) from exc
        except Exception:
            self._conn.rollback()
            raise

    def _ensure_schema(self) -> None:
        with self.transaction() as conn:
            for statement in SCHEMA:
                conn.execute(statement)

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        try:
            return self._conn.execute(sql, params)
        except sqlite3.Error as exc:
            raise StoreError(f"{exc} (while running {sql.split()[0]})") from exc

    def upsert_author(self, author_id: str, name: str) -> None:
        self._execute(
            """
            INSERT INTO authors(author_id, author) VALUES (?, ?)
            ON CONFLICT(author_id) DO UPDATE SET author = excluded.author
            """,
            (author_id, name),
        )

    def upsert_content(self, author_id: str, title_id: str, title: str, content: str) -> int:
        """Insert or update a work and return its document id."""
        self._execute(
            """
            INSERT INTO contents(author_id, title_id, title, content) VALUES (?, ?, ?, ?)
            ON CONFLICT(author_id, title_id)
            DO UPDATE SET title = excluded.title, content = excluded.content
            """,
            (author_id, title_id, title, content),
        )
        return self.doc_id(author_id, title_id)

    def doc_id(self, author_id: str, title_id: str) -> int:
        row = self._execute(
            "SELECT rowid FROM contents WHERE author_id = ? AND title_id = ?",
            (author_id, title_id),
        ).fetchone()
        if row is None:
            raise StoreError(f"No content row for ({author_id}, {title_id})")
        return row[0]

    def upsert_index_entry(self, doc_id: int, words: str) -> None:
        self._execute("DELETE FROM contents_fts WHERE rowid = ?", (doc_id,))
        self._execute(
            "INSERT INTO contents_fts(rowid, words) VALUES (?, ?)",
            (doc_id, words),
        )

    def add_work(self, entry: WorkDescriptor, content: str, words: str) -> str:
        """Store author, content and index row in one transaction.

        Returns ``"inserted"`` or ``"updated"``.
        """
        with self.transaction():
            existing = self._execute(
                "SELECT 1 FROM contents WHERE author_id = ? AND title_id = ?",
                (entry.author_id, entry.title_id),
            ).fetchone()
            self.upsert_author(entry.author_id, entry.author_name)
            doc_id = self.upsert_content(entry.author_id, entry.title_id, entry.title, content)
            self.upsert_index_entry(doc_id, words)
        return "updated" if existing else "inserted"

    def search(self, query: str, *, limit: int | None = None) -> List[dict]:
        """Run a boolean FTS5 query and return matching ``(author, title)`` rows."""
        sql = """
            SELECT a.author AS author, c.title AS title,
                   c.author_id AS author_id, c.title_id AS title_id
            FROM contents_fts
            JOIN contents c ON c.rowid = contents_fts.rowid
            JOIN authors a ON a.author_id = c.author_id
            WHERE contents_fts MATCH ?
        """
        params: tuple = (query,)
        if limit is not None:
            sql += " LIMIT ?"
            params = (query, limit)
        try:
            rows = self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Search failed for {query!r}: {exc}") from exc
        return [dict(row) for row in rows]

    def get_content(self, author_id: str, title_id: str) -> ContentRecord | None:
        row = self._execute(
            "SELECT author_id, title_id, title, content FROM contents "
            "WHERE author_id = ? AND title_id = ?",
            (author_id, title_id),
        ).fetchone()
        if row is None:
            return None
        return ContentRecord(
            author_id=row["author_id"],
            title_id=row["title_id"],
            title=row["title"],
            content=row["content"],
        )

    def count_documents(self) -> int:
        return self._execute("SELECT COUNT(*) FROM contents").fetchone()[0]
