"""Content search engine.

Searches the text of files on disk, of archive entries already loaded
in memory, and of documents that are containers themselves: Office
Open XML files (ZIP packages of XML parts) and PDF (converted by an
external utility).

Disk files are read in fixed-size blocks. The tail of each block is
carried into the next one so that a match spanning a block boundary
is still found. A file no larger than one block is read in one pass.

Documents that come from inside an archive are written to a temporary
file first, because both ZIP unpacking and the PDF utility need a
real path. The temporary file is removed before the search returns,
whatever its outcome.
"""

import codecs
import logging
import os
import re
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO

from dirx.archives.zip import ZipAdapter
from dirx.core.settings import SearchSettings
from dirx.listing.errors import (
    ArchiveError,
    ExtractionError,
    TempFileError,
    UtilityNotFoundError,
)
from dirx.listing.kinds import extension_of
from dirx.search.matcher import NO_MATCH, SearchResult, match_text, match_text_buffer
from dirx.search.pdf import PdfTextExtractor, get_pdf_extractor

logger = logging.getLogger(__name__)

# Word processing, spreadsheet, presentation, and diagram packages
OFFICE_EXTENSIONS: frozenset[str] = frozenset({"DOCX", "XLSX", "PPTX", "VSDX"})
PDF_EXTENSION = "PDF"

TEMP_PREFIX = "dirx-"


@contextmanager
def materialized(data: bytes, name: str) -> Iterator[Path]:
    """Write bytes to a temporary file for the duration of a block.

    The file keeps the extension of ``name`` and is deleted when the
    block exits, normally or by exception.

    Args:
        data: Bytes to write.
        name: Entry name the bytes came from.

    Yields:
        Path to the temporary file.

    Raises:
        TempFileError: If the file cannot be created or written.
    """
    extension = extension_of(name)
    suffix = f".{extension.lower()}" if extension else ""
    try:
        fd, temp_name = tempfile.mkstemp(prefix=TEMP_PREFIX, suffix=suffix)
    except OSError as e:
        msg = f"Could not create temporary file for {name}: {e}"
        raise TempFileError(msg) from e

    temp_path = Path(temp_name)
    try:
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
        except OSError as e:
            msg = f"Could not write temporary file for {name}: {e}"
            raise TempFileError(msg) from e
        yield temp_path
    finally:
        temp_path.unlink(missing_ok=True)


class ContentSearcher:
    """Searches file and archive-entry content for a compiled pattern.

    Attributes:
        pattern: Compiled search pattern.
        find_all: Collect every excerpt instead of stopping at the first match.
        settings: Block sizes and excerpt context.
    """

    def __init__(
        self,
        pattern: re.Pattern[str],
        *,
        find_all: bool = False,
        settings: SearchSettings | None = None,
        pdf_extractor: PdfTextExtractor | None = None,
    ) -> None:
        self.pattern = pattern
        self.find_all = find_all
        self.settings = settings or SearchSettings()
        self._pdf = pdf_extractor or get_pdf_extractor(self.settings.pdf_utility)
        self._zip = ZipAdapter()

    def search_file(self, path: Path) -> SearchResult:
        """Search a file on disk, unpacking Office and PDF documents.

        Args:
            path: Path to the file.

        Returns:
            SearchResult for the file.
        """
        extension = extension_of(path.name)
        if extension in OFFICE_EXTENSIONS:
            logger.debug("Embedded zip text search on %s", path)
            return self.search_office(path)
        if extension == PDF_EXTENSION:
            return self.search_pdf(path)
        return self.search_chunked(path)

    def search_entry_bytes(self, name: str, data: bytes) -> SearchResult:
        """Search the bytes of an archive entry.

        Office and PDF entries are materialized to a temporary file and
        searched like the disk versions; everything else is scanned in
        memory.

        Args:
            name: Entry name inside the archive.
            data: Full entry contents.

        Returns:
            SearchResult for the entry.
        """
        extension = extension_of(name)
        if extension not in OFFICE_EXTENSIONS and extension != PDF_EXTENSION:
            return self.search_bytes(data)
        if extension == PDF_EXTENSION and not self._pdf.available:
            return NO_MATCH

        try:
            with materialized(data, name) as temp_path:
                if extension == PDF_EXTENSION:
                    return self.search_pdf(temp_path)
                return self.search_office(temp_path)
        except TempFileError as e:
            logger.info("Could not create temp file for text search on %s: %s", name, e)
            return NO_MATCH

    def search_bytes(self, data: bytes) -> SearchResult:
        """Search an in-memory buffer."""
        return match_text_buffer(
            self.pattern,
            data,
            find_all=self.find_all,
            before=self.settings.excerpt_before,
            after=self.settings.excerpt_after,
        )

    def search_chunked(self, path: Path) -> SearchResult:
        """Search a disk file in fixed-size blocks.

        Args:
            path: Path to the file.

        Returns:
            SearchResult; NO_MATCH if the file cannot be read.
        """
        try:
            size = path.stat().st_size
            with open(path, "rb") as f:
                if size <= self.settings.chunk_size:
                    return self.search_bytes(f.read())
                return self._scan_blocks(f)
        except OSError as e:
            logger.info("Could not open file for text search: %s - %s", path, e)
            return NO_MATCH

    def _scan_blocks(self, f: BinaryIO) -> SearchResult:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        overlap = self.settings.overlap_size
        excerpts: list[str] = []
        carry = ""
        reported_end = 0

        while True:
            block = f.read(self.settings.chunk_size)
            text = carry + decoder.decode(block, final=not block)
            # Matches starting in the carried tail are left to the next block
            max_start = len(text) - overlap if block and overlap else None
            result = match_text(
                self.pattern,
                text,
                find_all=self.find_all,
                before=self.settings.excerpt_before,
                after=self.settings.excerpt_after,
                min_end=reported_end,
                max_start=max_start,
            )
            if result.matched:
                if not self.find_all:
                    return result
                excerpts.append(result.excerpt)
                reported_end = result.end
            if not block:
                break
            carry = text[-overlap:] if overlap else ""
            reported_end = max(reported_end - (len(text) - len(carry)), 0)

        if not excerpts:
            return NO_MATCH
        return SearchResult(matched=True, excerpt="".join(excerpts))

    def search_office(self, path: Path) -> SearchResult:
        """Search every part of an Office Open XML package.

        If the package cannot be unpacked the raw file is scanned as
        plain text instead. A package that unpacks cleanly but has no
        matching part does not match. In find-all mode, a part failing
        after earlier parts matched ends the search with the excerpts
        found so far.

        Args:
            path: Path to the document.

        Returns:
            SearchResult for the document.
        """
        try:
            return self._search_parts(path)
        except (ArchiveError, ExtractionError) as e:
            logger.info("Could not unzip %s, searching raw bytes: %s", path, e)
            return self.search_chunked(path)

    def _search_parts(self, path: Path) -> SearchResult:
        excerpts: list[str] = []
        try:
            for _, data in self._zip.iter_contents(path):
                result = self.search_bytes(data)
                if not result.matched:
                    continue
                if not self.find_all:
                    return result
                excerpts.append(result.excerpt)
        except (ArchiveError, ExtractionError) as e:
            if not excerpts:
                raise
            logger.info("Stopped reading parts of %s: %s", path, e)

        if not excerpts:
            return NO_MATCH
        return SearchResult(matched=True, excerpt="".join(excerpts))

    def search_pdf(self, path: Path) -> SearchResult:
        """Search the text of a PDF document.

        Text that cannot be extracted (utility missing or failing)
        means no match; the raw bytes are not scanned.

        Args:
            path: Path to the PDF file.

        Returns:
            SearchResult for the document.
        """
        try:
            text = self._pdf.extract_text(path)
        except UtilityNotFoundError:
            return NO_MATCH
        except ExtractionError as e:
            logger.info("Could not extract text from %s: %s", path, e)
            return NO_MATCH

        return match_text(
            self.pattern,
            text,
            find_all=self.find_all,
            before=self.settings.excerpt_before,
            after=self.settings.excerpt_after,
        )
