"""Line-scanning text matcher.

Splits a buffer into lines and applies a compiled pattern to each.
In first-match mode the scan returns on the first matching line
without building any excerpt. In find-all mode every match yields
an excerpt with a little context, clipped to its line.
"""

import re
from dataclasses import dataclass, replace

from dirx.listing.models import Entry

DEFAULT_BEFORE = 5
DEFAULT_AFTER = 60


@dataclass(frozen=True, slots=True)
class SearchResult:
    """Outcome of a content check.

    Attributes:
        matched: Whether the content satisfied the query.
        excerpt: Newline-terminated excerpts, collected in find-all mode only.
        end: Offset just past the last excerpted match (find-all mode only).
    """

    matched: bool
    excerpt: str = ""
    end: int = 0

    def apply(self, entry: Entry) -> Entry:
        """Return the entry carrying this result's excerpts, if any."""
        if not self.excerpt:
            return entry
        return replace(entry, matched_excerpt=self.excerpt)


NO_MATCH = SearchResult(matched=False)
MATCH = SearchResult(matched=True)


def match_text(
    pattern: re.Pattern[str],
    text: str,
    *,
    find_all: bool = False,
    before: int = DEFAULT_BEFORE,
    after: int = DEFAULT_AFTER,
    min_end: int = 0,
    max_start: int | None = None,
) -> SearchResult:
    """Scan text line by line for the pattern.

    Args:
        pattern: Compiled search pattern.
        text: Text to scan.
        find_all: Collect every match instead of stopping at the first.
        before: Characters of context kept before each match.
        after: Characters of context kept after each match.
        min_end: Ignore matches ending at or before this offset in
            ``text`` (already seen in a previous block).
        max_start: Ignore matches starting at or after this offset (left
            for the next block, which sees them whole).

    Returns:
        SearchResult; excerpt is empty unless find_all is set.
    """
    excerpts: list[str] = []
    last_end = 0
    line_start = 0
    for raw_line in text.split("\n"):
        offset = line_start
        line_start += len(raw_line) + 1
        if line_start <= min_end:
            continue
        if max_start is not None and offset >= max_start:
            break
        line = raw_line.removesuffix("\r")
        for match in pattern.finditer(line):
            if offset + match.end() <= min_end:
                continue
            if max_start is not None and offset + match.start() >= max_start:
                break
            if not find_all:
                return MATCH
            start = max(match.start() - before, 0)
            excerpts.append(line[start : match.end() + after] + "\n")
            last_end = offset + match.end()

    if not excerpts:
        return NO_MATCH
    return SearchResult(matched=True, excerpt="".join(excerpts), end=last_end)


def match_text_buffer(
    pattern: re.Pattern[str],
    buffer: bytes,
    *,
    find_all: bool = False,
    before: int = DEFAULT_BEFORE,
    after: int = DEFAULT_AFTER,
) -> SearchResult:
    """Decode a byte buffer as UTF-8 and scan it line by line.

    Undecodable bytes become replacement characters, so binary files
    are searched for whatever text they contain.
    """
    text = buffer.decode("utf-8", errors="replace")
    return match_text(pattern, text, find_all=find_all, before=before, after=after)
