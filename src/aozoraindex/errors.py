"""Exception hierarchy for the collection pipeline.

Per-entry failures (fetching, parsing, archive handling, persistence) are
caught by the collector and mark only that entry as failed. Discovery and
store-opening failures propagate to the caller.
"""

from __future__ import annotations

from typing import Any, Optional

__all__ = [
    "CollectorError",
    "FetchError",
    "ParseError",
    "FormatError",
    "NotFoundError",
    "StoreError",
    "CollectionAbortedError",
]


class CollectorError(RuntimeError):
    """Base exception for collection and indexing failures."""


class FetchError(CollectorError):
    """Raised when an HTTP GET fails or returns a non-success status."""

    def __init__(
        self,
        url: str,
        *,
        status: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        if status is not None:
            message = f"GET {url} returned status {status}"
        else:
            message = f"GET {url} failed: {cause}"
        super().__init__(message)
        self.url = url
        self.status = status
        self.cause = cause


class ParseError(CollectorError):
    """Raised when page markup cannot be parsed."""


class FormatError(CollectorError):
    """Raised for malformed archives or undecodable text payloads."""


class NotFoundError(CollectorError):
    """Raised when an archive holds no plain-text payload."""


class StoreError(CollectorError):
    """Raised when a relational operation on the index store fails."""


class CollectionAbortedError(StoreError):
    """Raised when repeated store failures end a collection run early.

    ``stats`` holds the counts gathered before the abort.
    """

    def __init__(self, message: str, *, stats: Any = None) -> None:
        super().__init__(message)
        self.stats = stats
