"""Error kinds raised while listing directories and archives.

Adapters and the content search engine raise these; the traversal
driver and the search engine decide which of them degrade to
"no match" and which are reported to the user.
"""

from pathlib import Path


class ListingError(Exception):
    """Base exception for listing and search errors."""


class ArchiveError(ListingError):
    """Base exception for archives that cannot be read.

    Attributes:
        path: Path to the archive file.
    """

    def __init__(self, path: Path | str, message: str) -> None:
        super().__init__(message)
        self.path = Path(path)


class ArchiveOpenError(ArchiveError):
    """Raised when an archive is missing, corrupt, or has the wrong format."""


class ArchiveAuthError(ArchiveError):
    """Raised when an encrypted archive cannot be decrypted with the given password."""


class ExtractionError(ListingError):
    """Raised when the bytes of an archive entry cannot be retrieved."""


class UtilityNotFoundError(ListingError):
    """Raised when the external text-extraction utility is not available."""


class TempFileError(ListingError):
    """Raised when entry bytes cannot be materialized to a temporary file."""
