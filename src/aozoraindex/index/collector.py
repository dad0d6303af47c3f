"""Collection pipeline: discover, resolve, extract, segment, store."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
from typing import Generator, Sequence

from aozoraindex.collect.detail import DetailResolver
from aozoraindex.collect.discovery import EntryDiscoverer
from aozoraindex.errors import CollectionAbortedError, CollectorError, StoreError
from aozoraindex.index.storage import SQLiteFullTextStore
from aozoraindex.ingestion.archive import ArchiveExtractor
from aozoraindex.ingestion.segmenter import Segmenter
from aozoraindex.models import WorkDescriptor

LOGGER = logging.getLogger(__name__)


class EntryState(str, Enum):
    DISCOVERED = "discovered"
    RESOLVED = "resolved"
    EXTRACTED = "extracted"
    TOKENIZED = "tokenized"
    STORED = "stored"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(slots=True)
class EntryOutcome:
    entry: WorkDescriptor
    state: EntryState
    reached: EntryState = EntryState.DISCOVERED
    status: str = ""
    error: Exception | None = None


@dataclass(slots=True)
class CollectStats:
    discovered: int = 0
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    outcomes: list[EntryOutcome] = field(default_factory=list)

    @property
    def stored(self) -> int:
        return self.inserted + self.updated

    def record(self, outcome: EntryOutcome) -> None:
        if outcome.state is EntryState.STORED:
            if outcome.status == "updated":
                self.updated += 1
            else:
                self.inserted += 1
        elif outcome.state is EntryState.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1
        self.outcomes.append(outcome)


@dataclass(slots=True)
class _Extracted:
    entry: WorkDescriptor
    state: EntryState
    reached: EntryState = EntryState.DISCOVERED
    content: str = ""
    error: Exception | None = None


class Collector:
    """Drives every discovered entry through the pipeline.

    Per-entry errors are logged and counted; only listing discovery errors and
    a run of ``max_store_errors`` consecutive store failures escape, the latter
    as :class:`CollectionAbortedError` carrying the partial stats.
    """

    def __init__(
        self,
        discoverer: EntryDiscoverer,
        resolver: DetailResolver,
        extractor: ArchiveExtractor,
        segmenter: Segmenter,
        store: SQLiteFullTextStore,
        *,
        workers: int = 1,
        max_store_errors: int = 3,
    ) -> None:
        self.discoverer = discoverer
        self.resolver = resolver
        self.extractor = extractor
        self.segmenter = segmenter
        self.store = store
        self.workers = max(1, workers)
        self.max_store_errors = max_store_errors

    def collect(self, listing_url: str) -> CollectStats:
        entries = self.discoverer.discover(listing_url)
        stats = CollectStats(discovered=len(entries))
        if not entries:
            LOGGER.warning("No works found on %s", listing_url)
            return stats
        return self.process(entries, stats)

    def process(
        self, entries: Sequence[WorkDescriptor], stats: CollectStats | None = None
    ) -> CollectStats:
        stats = stats if stats is not None else CollectStats(discovered=len(entries))
        store_errors = 0
        results = self._fetch_all(entries)
        try:
            for extracted in results:
                outcome = self._finish(extracted)
                stats.record(outcome)
                if isinstance(outcome.error, StoreError):
                    store_errors += 1
                    if store_errors >= self.max_store_errors:
                        raise CollectionAbortedError(
                            f"Aborting after {store_errors} consecutive store failures",
                            stats=stats,
                        ) from outcome.error
                elif outcome.state is EntryState.STORED:
                    store_errors = 0
        finally:
            # stops queued fetches when the run is aborted
            results.close()
        return stats

    def _fetch_all(
        self, entries: Sequence[WorkDescriptor]
    ) -> Generator[_Extracted, None, None]:
        if self.workers == 1:
            for entry in entries:
                yield self._fetch_entry(entry)
            return

        executor = ThreadPoolExecutor(max_workers=self.workers)
        try:
            futures = [executor.submit(self._fetch_entry, entry) for entry in entries]
            for future in as_completed(futures):
                yield future.result()
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

    def _fetch_entry(self, entry: WorkDescriptor) -> _Extracted:
        """Resolve and extract one entry. Safe to run on a worker thread."""
        state = EntryState.DISCOVERED
        try:
            LOGGER.info("Processing %s/%s %s", entry.author_id, entry.title_id, entry.title)
            self.resolver.fill(entry)
            state = EntryState.RESOLVED
            if not entry.archive_url:
                LOGGER.warning(
                    "Skipping (%s, %s): no archive link on %s",
                    entry.author_id,
                    entry.title_id,
                    entry.detail_url,
                )
                return _Extracted(entry, EntryState.SKIPPED, reached=state)
            content = self.extractor.extract(entry.archive_url)
            return _Extracted(
                entry, EntryState.EXTRACTED, reached=EntryState.EXTRACTED, content=content
            )
        except Exception as exc:
            return _Extracted(entry, EntryState.FAILED, reached=state, error=exc)

    def _finish(self, extracted: _Extracted) -> EntryOutcome:
        entry = extracted.entry
        if extracted.state is not EntryState.EXTRACTED:
            if extracted.error is not None:
                self._log_failure(entry, extracted.reached, extracted.error)
            return EntryOutcome(
                entry, extracted.state, reached=extracted.reached, error=extracted.error
            )

        state = EntryState.EXTRACTED
        try:
            words = self.segmenter.join(extracted.content)
            state = EntryState.TOKENIZED
            status = self.store.add_work(entry, extracted.content, words)
        except Exception as exc:
            self._log_failure(entry, state, exc)
            return EntryOutcome(entry, EntryState.FAILED, reached=state, error=exc)

        LOGGER.info("Stored (%s, %s) [%s]", entry.author_id, entry.title_id, status)
        return EntryOutcome(entry, EntryState.STORED, reached=EntryState.STORED, status=status)

    @staticmethod
    def _log_failure(entry: WorkDescriptor, reached: EntryState, error: Exception) -> None:
        if isinstance(error, CollectorError):
            LOGGER.error(
                "Failed (%s, %s) after %s: %s", entry.author_id, entry.title_id, reached.value, error
            )
        else:
            LOGGER.exception(
                "Unexpected error for (%s, %s) after %s",
                entry.author_id,
                entry.title_id,
                reached.value,
                exc_info=error,
            )
