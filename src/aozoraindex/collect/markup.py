"""Thin read-only wrapper around BeautifulSoup.

Discovery and detail resolution only ever select elements by CSS selector and
read their text or attributes; keeping that behind these helpers lets tests
feed plain HTML strings.
"""

from __future__ import annotations

from typing import List

from bs4 import BeautifulSoup
from bs4.element import Tag

from aozoraindex.errors import ParseError

HTML_PARSER = "html.parser"


def parse(markup: bytes | str) -> BeautifulSoup:
    try:
        return BeautifulSoup(markup, HTML_PARSER)
    except Exception as exc:
        raise ParseError(f"Unable to parse markup: {exc}") from exc


def select_all(document: BeautifulSoup | Tag, selector: str) -> List[Tag]:
    return list(document.select(selector))


def text_of(element: Tag) -> str:
    return element.get_text()


def attr(element: Tag, name: str, default: str = "") -> str:
    value = element.get(name, default)
    if isinstance(value, list):
        # multi-valued attributes such as class come back as lists
        return " ".join(value)
    return value if value is not None else default
