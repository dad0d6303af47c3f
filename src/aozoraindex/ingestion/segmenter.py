"""Japanese word segmentation for the full-text index.

Japanese text has no spaces between words, so it is split with Janome's
bundled IPA dictionary before being indexed.
"""

from __future__ import annotations

import logging
from typing import List

from janome.tokenizer import Tokenizer

LOGGER = logging.getLogger(__name__)


class Segmenter:
    """Splits text into surface-form tokens.

    The dictionary and wakati mode are fixed at construction. Janome emits no
    sentence boundary tokens; whitespace tokens are dropped so only content
    tokens reach the index.
    """

    def __init__(self, tokenizer: Tokenizer | None = None) -> None:
        self._tokenizer = tokenizer

    @property
    def tokenizer(self) -> Tokenizer:
        if self._tokenizer is None:
            LOGGER.debug("Loading Janome tokenizer")
            self._tokenizer = Tokenizer(wakati=True)
        return self._tokenizer

    def segment(self, text: str) -> List[str]:
        if not text:
            return []
        tokens = []
        for token in self.tokenizer.tokenize(text, wakati=True):
            surface = token if isinstance(token, str) else token.surface
            if surface.strip():
                tokens.append(surface.strip())
        return tokens

    def join(self, text: str) -> str:
        """Return the tokens of ``text`` joined by single spaces."""
        return " ".join(self.segment(text))
