"""List files and directories with their type, inode number and size."""

from __future__ import annotations

import os
import stat
import sys
from enum import IntEnum
from typing import IO

DIRSIZ = 14
"""Names shorter than this are padded with blanks to this width."""

BUFSIZE = 512
"""Directory paths must leave room for a separator and a name in this size."""


class FileType(IntEnum):
    """File types as reported in a listing."""

    DIR = 1
    FILE = 2
    DEVICE = 3


def _file_type(mode: int) -> FileType:
    if stat.S_ISDIR(mode):
        return FileType.DIR
    if stat.S_ISREG(mode):
        return FileType.FILE
    return FileType.DEVICE


def fmtname(path: str) -> str:
    """Return the last component of *path*, blank-padded to DIRSIZ."""
    name = path[path.rfind("/") + 1:]
    if len(name) >= DIRSIZ:
        return name
    return name.ljust(DIRSIZ)


def _line(path: str, st: os.stat_result) -> str:
    kind = _file_type(st.st_mode)
    return f"{fmtname(path)} {int(kind)} {st.st_ino} {st.st_size}\n"


def ls(path: str, out: IO[str]) -> None:
    """Write a listing of *path* to *out*.

    A directory is listed entry by entry, ``.`` and ``..`` first.  Raises
    OSError if *path* cannot be examined and ValueError if a directory's
    path is too long.
    """
    st = os.stat(path)
    if _file_type(st.st_mode) is not FileType.DIR:
        out.write(_line(path, st))
        return
    if len(path) + 1 + DIRSIZ + 1 > BUFSIZE:
        raise ValueError("path too long")
    names = [".", ".."] + os.listdir(path)
    for name in names:
        full = f"{path}/{name}"
        try:
            entry = os.stat(full)
        except OSError:
            out.write(f"ls: cannot stat {full}\n")
            continue
        out.write(_line(full, entry))


def main(argv: list[str] | None = None) -> int:
    """Run ls: ``ls [path ...]``, listing the current directory by default."""
    args = sys.argv[1:] if argv is None else list(argv)
    for path in args or ["."]:
        try:
            ls(path, sys.stdout)
        except ValueError as exc:
            sys.stdout.write(f"ls: {exc}\n")
        except OSError:
            sys.stderr.write(f"ls: cannot open {path}\n")
    return 0