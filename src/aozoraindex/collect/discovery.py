"""Work discovery on catalog listing pages."""

from __future__ import annotations

import logging
import re
from typing import List

from aozoraindex.collect import markup
from aozoraindex.collect.fetch import Fetcher
from aozoraindex.config import DEFAULT_SITE_ROOT
from aozoraindex.models import WorkDescriptor

LOGGER = logging.getLogger(__name__)

WORK_LINK_SELECTOR = "ol li a"
WORK_LINK_PATTERN = re.compile(r".*/cards/([0-9]+)/card([0-9]+)\.html$")


def match_work_link(href: str) -> tuple[str, str] | None:
    """Return ``(author_id, title_id)`` for a work link, ``None`` otherwise."""
    match = WORK_LINK_PATTERN.match(href)
    if match is None:
        return None
    return match.group(1), match.group(2)


def detail_url_for(author_id: str, title_id: str, site_root: str = DEFAULT_SITE_ROOT) -> str:
    return f"{site_root.rstrip('/')}/cards/{author_id}/card{title_id}.html"


class EntryDiscoverer:
    """Turns a listing page into work descriptors, in document order.

    Duplicate works are kept; re-collection is made idempotent by the store.
    """

    def __init__(self, fetcher: Fetcher, *, site_root: str = DEFAULT_SITE_ROOT) -> None:
        self.fetcher = fetcher
        self.site_root = site_root

    def discover(self, listing_url: str) -> List[WorkDescriptor]:
        document = markup.parse(self.fetcher.get(listing_url))
        return self.parse_listing(document)

    def parse_listing(self, document) -> List[WorkDescriptor]:
        entries: List[WorkDescriptor] = []
        for element in markup.select_all(document, WORK_LINK_SELECTOR):
            href = markup.attr(element, "href", "")
            ids = match_work_link(href)
            if ids is None:
                LOGGER.debug("Skipping non-work link %r", href)
                continue
            author_id, title_id = ids
            entries.append(
                WorkDescriptor(
                    author_id=author_id,
                    title_id=title_id,
                    title=markup.text_of(element).strip(),
                    detail_url=detail_url_for(author_id, title_id, self.site_root),
                )
            )
        LOGGER.info("Found %d work links", len(entries))
        return entries
