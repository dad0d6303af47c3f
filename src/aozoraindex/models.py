"""Core data models."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class WorkDescriptor:
    """One catalog item found on a listing page.

    ``author_name`` and ``archive_url`` stay empty until the detail page has
    been resolved.
    """

    author_id: str
    title_id: str
    title: str
    detail_url: str
    author_name: str = ""
    archive_url: str = ""

    @property
    def key(self) -> tuple[str, str]:
        return (self.author_id, self.title_id)


@dataclass(slots=True)
class ContentRecord:
    """Stored form of one work."""

    author_id: str
    title_id: str
    title: str
    content: str


@dataclass(slots=True)
class AuthorRecord:
    author_id: str
    author_name: str
