"""File mode bits: type field and permission bits."""

from __future__ import annotations

from enum import IntEnum

__all__ = [
    "FileType",
    "file_type",
    "s_isreg",
    "s_isdir",
    "s_ischr",
    "s_isblk",
    "s_isfifo",
    "permission_string",
]

BUFFER_END = 0x200000

S_IFMT = 0o170000
S_ISUID = 0o004000
S_ISGID = 0o002000
S_ISVTX = 0o001000

S_IRWXU = 0o0700
S_IRUSR = 0o0400
S_IWUSR = 0o0200
S_IXUSR = 0o0100
S_IRWXG = 0o0070
S_IRGRP = 0o0040
S_IWGRP = 0o0020
S_IXGRP = 0o0010
S_IRWXO = 0o0007
S_IROTH = 0o0004
S_IWOTH = 0o0002
S_IXOTH = 0o0001


class FileType(IntEnum):
    """Values of the file-type field of a mode."""

    FIFO = 0o010000
    CHAR = 0o020000
    DIRECTORY = 0o040000
    BLOCK = 0o060000
    REGULAR = 0o100000


def file_type(mode: int) -> FileType:
    """The file type held in ``mode``; raises ValueError if it names none."""
    try:
        return FileType(mode & S_IFMT)
    except ValueError:
        raise ValueError(f"unknown file type in mode {mode:#o}") from None


def _is(mode: int, kind: FileType) -> bool:
    return (mode & S_IFMT) == kind


def s_isreg(mode: int) -> bool:
    """True for a regular file."""
    return _is(mode, FileType.REGULAR)


def s_isdir(mode: int) -> bool:
    """True for a directory."""
    return _is(mode, FileType.DIRECTORY)


def s_ischr(mode: int) -> bool:
    """True for a character device."""
    return _is(mode, FileType.CHAR)


def s_isblk(mode: int) -> bool:
    """True for a block device."""
    return _is(mode, FileType.BLOCK)


def s_isfifo(mode: int) -> bool:
    """True for a named pipe."""
    return _is(mode, FileType.FIFO)


_TRIADS = (
    (S_IRUSR, S_IWUSR, S_IXUSR, S_ISUID, "s"),
    (S_IRGRP, S_IWGRP, S_IXGRP, S_ISGID, "s"),
    (S_IROTH, S_IWOTH, S_IXOTH, S_ISVTX, "t"),
)


def permission_string(mode: int) -> str:
    """Nine-character ``rwxrwxrwx`` form, with set-id and sticky bits shown."""
    parts = []
    for read, write, execute, special, letter in _TRIADS:
        parts.append("r" if mode & read else "-")
        parts.append("w" if mode & write else "-")
        if mode & special:
            parts.append(letter if mode & execute else letter.upper())
        else:
            parts.append("x" if mode & execute else "-")
    return "".join(parts)