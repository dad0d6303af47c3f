"""Detail page resolution: author name and archive location."""

from __future__ import annotations

import logging
import posixpath
from urllib.parse import urlsplit, urlunsplit

from aozoraindex.collect import markup
from aozoraindex.collect.fetch import Fetcher
from aozoraindex.models import WorkDescriptor

LOGGER = logging.getLogger(__name__)

AUTHOR_CELL_SELECTOR = 'table[summary="作家データ"] tr:nth-child(1) td:nth-child(2)'
DOWNLOAD_LINK_SELECTOR = "table.download a"
ARCHIVE_SUFFIX = ".zip"
ABSOLUTE_SCHEMES = ("http://", "https://")


def resolve_archive_link(detail_url: str, href: str) -> str:
    """Resolve ``href`` against the directory of ``detail_url``.

    Absolute http(s) links are returned unchanged and scheme-relative links
    (``//host/path``) take the scheme of ``detail_url``. ``.`` and ``..`` segments
    are normalized and never climb above the site root.
    """
    if href.startswith(ABSOLUTE_SCHEMES):
        return href

    parts = urlsplit(detail_url)
    if href.startswith("//"):
        return f"{parts.scheme or 'https'}:{href}"
    link = urlsplit(href)
    if link.path.startswith("/"):
        joined = link.path
    else:
        joined = posixpath.join(posixpath.dirname(parts.path) or "/", link.path)
    # normpath drops ".." above the root but keeps a leading "//"
    path = "/" + posixpath.normpath(joined).lstrip("/")
    return urlunsplit((parts.scheme, parts.netloc, path, link.query, ""))


class DetailResolver:
    """Reads the author data table and the download table of a detail page."""

    def __init__(self, fetcher: Fetcher, *, link_policy: str = "last") -> None:
        if link_policy not in ("first", "last"):
            raise ValueError(f"Unknown link policy: {link_policy!r}")
        self.fetcher = fetcher
        self.link_policy = link_policy

    def resolve(self, detail_url: str) -> tuple[str, str]:
        """Return ``(author_name, archive_url)``; the URL is empty when absent."""
        document = markup.parse(self.fetcher.get(detail_url))
        return self.parse_detail(document, detail_url)

    def parse_detail(self, document, detail_url: str) -> tuple[str, str]:
        author = "".join(
            markup.text_of(cell) for cell in markup.select_all(document, AUTHOR_CELL_SELECTOR)
        ).strip()

        archive_href = ""
        for anchor in markup.select_all(document, DOWNLOAD_LINK_SELECTOR):
            href = markup.attr(anchor, "href", "")
            if not href.endswith(ARCHIVE_SUFFIX):
                continue
            archive_href = href
            if self.link_policy == "first":
                break

        if not archive_href:
            LOGGER.debug("No archive link on %s", detail_url)
            return author, ""
        return author, resolve_archive_link(detail_url, archive_href)

    def fill(self, entry: WorkDescriptor) -> WorkDescriptor:
        entry.author_name, entry.archive_url = self.resolve(entry.detail_url)
        return entry
