"""Search a directory tree for regular files with a given name."""

from __future__ import annotations

import errno
import os
import stat
import sys
from collections.abc import Callable, Iterator
from typing import Optional

_ErrorHandler = Optional[Callable[[str], None]]


def _report(onerror: _ErrorHandler, message: str) -> None:
    if onerror is not None:
        onerror(message)


def _walk(directory: str, name: str, onerror: _ErrorHandler = None) -> Iterator[str]:
    try:
        st = os.stat(directory)
    except OSError:
        _report(onerror, f"cannot open {directory}")
        return
    if not stat.S_ISDIR(st.st_mode):
        _report(onerror, f"{directory} is not a directory")
        return
    try:
        entries = os.listdir(directory)
    except OSError:
        _report(onerror, f"cannot open {directory}")
        return
    for entry in entries:
        if entry in (".", ".."):
            continue
        path = f"{directory}/{entry}"
        try:
            st = os.stat(path)
        except OSError:
            _report(onerror, f"cannot stat {path}")
            continue
        if stat.S_ISREG(st.st_mode) and entry == name:
            yield path
        elif stat.S_ISDIR(st.st_mode) and not os.path.islink(path):
            yield from _walk(path, name, onerror)


def find(directory: str, name: str) -> Iterator[str]:
    """Return an iterator over the paths of regular files called *name*.

    Paths are built as ``directory/entry/...``.  A missing starting point
    raises FileNotFoundError and one that is not a directory raises
    NotADirectoryError; unreadable entries further down are skipped.
    """
    st = os.stat(directory)
    if not stat.S_ISDIR(st.st_mode):
        raise NotADirectoryError(errno.ENOTDIR, "is not a directory", directory)
    return _walk(directory, name)


def main(argv: list[str] | None = None) -> int:
    """Run find: ``find <directory> <filename>``."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 2:
        sys.stdout.write("Usage: find <directory> <filename>\n")
        return 1

    def report(message: str) -> None:
        sys.stdout.write(f"find: {message}\n")

    for path in _walk(args[0], args[1], report):
        sys.stdout.write(f"{path}\n")
    return 0