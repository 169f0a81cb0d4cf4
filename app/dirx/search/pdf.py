"""PDF text extraction through an external utility.

The utility (pdftotext by default) is invoked as ``<utility> <file> -``
and its standard output is taken as the document text. The utility
is resolved at most once per process: first next to the running
program, then on PATH. The result, including "not found", is cached.
"""

import logging
import subprocess
from pathlib import Path

from dirx.listing.errors import ExtractionError, UtilityNotFoundError
from dirx.utils.shell import resolve_command, run_command

logger = logging.getLogger(__name__)

DEFAULT_UTILITY = "pdftotext"


class PdfTextExtractor:
    """Converts PDF files to text with an external utility.

    Attributes:
        utility: Command name of the text-extraction utility.
        timeout: Seconds to wait for one conversion.
    """

    def __init__(self, utility: str = DEFAULT_UTILITY, timeout: float | None = 120.0) -> None:
        self.utility = utility
        self.timeout = timeout
        self._resolved = False
        self._path: Path | None = None

    def resolve(self) -> Path | None:
        """Resolve the utility path, once.

        Returns:
            Path to the utility, or None if it is not installed.
        """
        if not self._resolved:
            self._path = resolve_command(self.utility)
            self._resolved = True
            if self._path is None:
                logger.info("%s not found; PDF content will not be searched", self.utility)
        return self._path

    @property
    def available(self) -> bool:
        """Check if the utility can be used."""
        return self.resolve() is not None

    def extract_text(self, pdf_path: Path) -> str:
        """Convert a PDF file to text.

        Args:
            pdf_path: Path to the PDF file.

        Returns:
            The document text.

        Raises:
            UtilityNotFoundError: If the utility is not installed.
            ExtractionError: If the utility fails or exits non-zero.
        """
        executable = self.resolve()
        if executable is None:
            msg = f"{self.utility} not found next to dirx or on PATH"
            raise UtilityNotFoundError(msg)

        try:
            result = run_command([str(executable), str(pdf_path), "-"], timeout=self.timeout)
        except (OSError, subprocess.SubprocessError) as e:
            msg = f"{self.utility} failed on {pdf_path}: {e}"
            raise ExtractionError(msg) from e

        if not result.success:
            detail = result.stderr.strip() or f"exit code {result.returncode}"
            msg = f"{self.utility} failed on {pdf_path}: {detail}"
            raise ExtractionError(msg)
        return result.stdout


# Module-level cache: one extractor per utility name for the whole run
_extractors: dict[str, PdfTextExtractor] = {}


def get_pdf_extractor(utility: str = DEFAULT_UTILITY) -> PdfTextExtractor:
    """Get the process-wide extractor for a utility name.

    Args:
        utility: Command name of the text-extraction utility.

    Returns:
        Cached PdfTextExtractor instance.
    """
    extractor = _extractors.get(utility)
    if extractor is None:
        extractor = PdfTextExtractor(utility)
        _extractors[utility] = extractor
    return extractor


def clear_pdf_extractors() -> None:
    """Forget cached extractors so the utility is resolved again."""
    _extractors.clear()
