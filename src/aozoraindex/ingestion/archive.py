"""Text extraction from downloaded work archives.

Each archive is a small zip holding one plain-text payload (plus optional
images or notes). The payload is encoded in a fixed legacy encoding; it is
never guessed.
"""

from __future__ import annotations

import io
import logging
import zipfile
from pathlib import PurePosixPath

from aozoraindex.collect.fetch import Fetcher
from aozoraindex.errors import FormatError, NotFoundError

LOGGER = logging.getLogger(__name__)

TEXT_SUFFIX = ".txt"
SOURCE_ENCODING = "cp932"


def decode_text(payload: bytes, encoding: str = SOURCE_ENCODING) -> str:
    try:
        return payload.decode(encoding)
    except UnicodeDecodeError as exc:
        raise FormatError(f"Payload is not valid {encoding}: {exc}") from exc


def read_text_payload(data: bytes, encoding: str = SOURCE_ENCODING) -> str:
    """Return the decoded text of the first ``.txt`` entry in a zip archive."""
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except (zipfile.BadZipFile, zipfile.LargeZipFile) as exc:
        raise FormatError(f"Not a readable zip archive: {exc}") from exc

    with archive:
        for info in archive.infolist():
            if info.is_dir() or PurePosixPath(info.filename).suffix != TEXT_SUFFIX:
                continue
            LOGGER.debug("Reading %s (%d bytes)", info.filename, info.file_size)
            try:
                payload = archive.read(info)
            except (zipfile.BadZipFile, NotImplementedError, RuntimeError) as exc:
                # RuntimeError covers encrypted members
                raise FormatError(f"Unable to read {info.filename}: {exc}") from exc
            return decode_text(payload, encoding)

    raise NotFoundError("Archive contains no .txt entry")


class ArchiveExtractor:
    """Fetches an archive and returns its decoded text."""

    def __init__(self, fetcher: Fetcher, *, encoding: str = SOURCE_ENCODING) -> None:
        self.fetcher = fetcher
        self.encoding = encoding

    def extract(self, archive_url: str) -> str:
        data = self.fetcher.get(archive_url)
        return read_text_payload(data, self.encoding)
