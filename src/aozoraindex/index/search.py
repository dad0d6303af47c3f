"""Boolean full-text search interface."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from aozoraindex.index.storage import SQLiteFullTextStore


@dataclass(slots=True)
class SearchResult:
    author: str
    title: str
    author_id: str
    title_id: str


class Searcher:
    """High-level API to query the full-text store.

    Queries use FTS5 syntax over segmented tokens, e.g. ``虫 AND ココア``.
    """

    def __init__(self, store: SQLiteFullTextStore) -> None:
        self.store = store

    def search(self, query: str, *, limit: int | None = None) -> List[SearchResult]:
        rows = self.store.search(query, limit=limit)
        return [
            SearchResult(
                author=row["author"] or "",
                title=row["title"] or "",
                author_id=row["author_id"],
                title_id=row["title_id"],
            )
            for row in rows
        ]
