"""File kind classification by extension and mode.

The extension tables decide the kind of an entry for coloring and
for the "type" sort order. Tables are value judgements; see
https://docs.fileformat.com for a broader list.
"""

import os
import stat
from enum import Enum


class FileKind(str, Enum):
    """Classification of a listed entry.

    Attributes:
        DIRECTORY: Directory (on disk or inside an archive).
        HIDDEN: Name starts with a dot and no other kind applies.
        DEFAULT: Regular file with an unrecognized extension.
        CODE: Source code and scripts.
        EXECUTABLE: Any execute bit set, or a Windows executable extension.
        CONFIG: Configuration files.
        DATA: Structured data files.
        DOCUMENT: Text, office, and publishing documents.
        AUDIO: Audio files.
        IMAGE: Image files.
        VIDEO: Video files.
        ARCHIVE: Compressed and packaged archives.
    """

    DIRECTORY = "directory"
    HIDDEN = "hidden"
    DEFAULT = "default"
    CODE = "code"
    EXECUTABLE = "executable"
    CONFIG = "config"
    DATA = "data"
    DOCUMENT = "document"
    AUDIO = "audio"
    IMAGE = "image"
    VIDEO = "video"
    ARCHIVE = "archive"


def _table(extensions: str) -> frozenset[str]:
    return frozenset(ext.upper() for ext in extensions.split())


# Checked in this order; the first table containing the extension wins.
EXTENSIONS: dict[FileKind, frozenset[str]] = {
    FileKind.AUDIO: _table("aac au flac mid midi mka mp3 mpc ogg ra wav axa oga opus spx xspf"),
    FileKind.ARCHIVE: _table(
        "7z ace apk arj bz bz2 cpio deb dmg dz gz jar lz lzh lzma msi rar rpm rz tar taz "
        "tbz tbz2 tgz tlz txz tz xz z zip zoo"
    ),
    FileKind.IMAGE: _table(
        "bmp cgm dib dl emf gif gl jpeg jpg mng pbm pcx pdn pgm png ppm svg svgz tga tif "
        "tiff xbm xcf xpm xwd"
    ),
    FileKind.VIDEO: _table(
        "3g2 3gp anx asf avi axv flc fli flv m2ts m2v m4v mkv mov mp4 mp4v mpeg mpg mts nuv "
        "ogm ogv ogx qt rm rmvb vob webm wmv yuv"
    ),
    FileKind.DOCUMENT: _table(
        "doc docx ebk epub html htm markdown mbox mbp md mht mhtml mobi msg odt ofx one "
        "pages pdf ppt pptx ps pub rtf tex txt vsdx xls xlsx"
    ),
    FileKind.DATA: _table("cdb csv dat db3 dbf graphql json log m3u8 rpt sdf sql xml"),
    FileKind.CONFIG: _table("adp ant cfg conf ini prefs rc tcl toml yaml yml"),
    FileKind.CODE: _table(
        "ahk applescript asm au3 bas bash c cmake coffee cpp cs cxx dockerfile elf es go "
        "gradle groovy gvy h hpp hxx inc ino java js kt ktm kts lua m mak mm perl ph php pl "
        "pp ps1 psm1 py rake rb rbw rbuild rbx rs ru ruby scpt sh ts tsx v vb vbs vhd vhdl zsh"
    ),
}

# Extensions Windows treats as directly executable.
WINDOWS_EXECUTABLE_EXTENSIONS: frozenset[str] = frozenset({"EXE", "BAT", "CMD", "COM"})

# Rank used by the "type" sort. Rank 2 belongs to unclassified entries,
# which cannot occur once classification runs at construction.
KIND_SORT_RANK: dict[FileKind, int] = {
    FileKind.DIRECTORY: 0,
    FileKind.HIDDEN: 1,
    FileKind.DEFAULT: 3,
    FileKind.CODE: 4,
    FileKind.EXECUTABLE: 5,
    FileKind.CONFIG: 6,
    FileKind.DATA: 7,
    FileKind.DOCUMENT: 8,
    FileKind.AUDIO: 9,
    FileKind.IMAGE: 10,
    FileKind.VIDEO: 11,
    FileKind.ARCHIVE: 12,
}


def extension_of(name: str) -> str:
    """Return the upper-case extension of a name, without the dot.

    Only the last path segment is considered, so archive entries such
    as ``docs/readme.txt`` yield ``TXT``. Dot-files like ``.bashrc``
    have no extension.

    Args:
        name: File name, possibly with archive subdirectory segments.

    Returns:
        Upper-case extension, or an empty string.
    """
    base = name.rstrip("/").rsplit("/", 1)[-1]
    _, ext = os.path.splitext(base)
    return ext[1:].upper()


def classify(is_directory: bool, mode: int, name: str) -> FileKind:
    """Classify an entry from its directory flag, mode bits, and name.

    Args:
        is_directory: Whether the entry is a directory.
        mode: Permission and type bits (``st_mode`` layout).
        name: Entry name.

    Returns:
        The FileKind for the entry.
    """
    if is_directory:
        return FileKind.DIRECTORY

    ext = extension_of(name)
    if mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH) or ext in WINDOWS_EXECUTABLE_EXTENSIONS:
        return FileKind.EXECUTABLE

    if ext:
        for kind, extensions in EXTENSIONS.items():
            if ext in extensions:
                return kind

    base = name.rstrip("/").rsplit("/", 1)[-1]
    if base.startswith("."):
        return FileKind.HIDDEN

    return FileKind.DEFAULT

