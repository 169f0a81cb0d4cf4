"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import zipfile
from collections.abc import Iterator
from pathlib import Path

import pytest
from dirx.search.pdf import clear_pdf_extractors


@pytest.fixture(autouse=True)
def _fresh_pdf_extractors() -> Iterator[None]:
    """Resolve the PDF utility anew in every test."""
    clear_pdf_extractors()
    yield
    clear_pdf_extractors()


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Small directory tree with files of several kinds.

    Layout::

        notes.txt        "meeting notes\\nbudget: 42\\n"
        readme.md        "# Project\\n"
        photo.jpg        1000 zero bytes
        .hidden          "secret\\n"
        sub/
            deep.txt     "budget in sub\\n"
            skip/
                inner.txt "budget again\\n"
    """
    (tmp_path / "notes.txt").write_text("meeting notes\nbudget: 42\n")
    (tmp_path / "readme.md").write_text("# Project\n")
    (tmp_path / "photo.jpg").write_bytes(b"\x00" * 1000)
    (tmp_path / ".hidden").write_text("secret\n")
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "deep.txt").write_text("budget in sub\n")
    skip = sub / "skip"
    skip.mkdir()
    (skip / "inner.txt").write_text("budget again\n")
    return tmp_path


@pytest.fixture
def docs_zip(tmp_path: Path) -> Path:
    """ZIP archive with a directory entry and two text files."""
    path = tmp_path / "docs.zip"
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr("guide/", "")
        archive.writestr("guide/intro.txt", "introduction\nquarterly figures\n")
        archive.writestr("readme.txt", "nothing to see\n")
    return path
