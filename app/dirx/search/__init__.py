"""Content search: line matcher, document unpacking, and PDF conversion."""

from dirx.search.content import ContentSearcher
from dirx.search.matcher import NO_MATCH, SearchResult, match_text, match_text_buffer
from dirx.search.pdf import PdfTextExtractor, get_pdf_extractor

__all__ = [
    "NO_MATCH",
    "ContentSearcher",
    "PdfTextExtractor",
    "SearchResult",
    "get_pdf_extractor",
    "match_text",
    "match_text_buffer",
]
