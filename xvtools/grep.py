"""A simple grep supporting only the ^ . * $ operators."""

from __future__ import annotations

import sys
from typing import IO

BUFSIZE = 1024
"""Lines longer than ``BUFSIZE - 1`` characters, newline included, end the search."""


def match(pattern: str, text: str) -> bool:
    """Return True if *pattern* matches anywhere in *text*."""
    if pattern.startswith("^"):
        return _matchhere(pattern, 1, text, 0)
    return any(_matchhere(pattern, 0, text, start) for start in range(len(text) + 1))


def _matchhere(pattern: str, pi: int, text: str, ti: int) -> bool:
    while True:
        if pi == len(pattern):
            return True
        if pi + 1 < len(pattern) and pattern[pi + 1] == "*":
            return _matchstar(pattern[pi], pattern, pi + 2, text, ti)
        if pattern[pi] == "$" and pi + 1 == len(pattern):
            return ti == len(text)
        if ti < len(text) and pattern[pi] in (".", text[ti]):
            pi += 1
            ti += 1
            continue
        return False


def _matchstar(c: str, pattern: str, pi: int, text: str, ti: int) -> bool:
    while True:
        if _matchhere(pattern, pi, text, ti):
            return True
        if ti < len(text) and (text[ti] == c or c == "."):
            ti += 1
            continue
        return False


def grep(pattern: str, stream: IO[str], out: IO[str]) -> None:
    """Write each newline-terminated line of *stream* that matches to *out*.

    A final line without a newline is not examined, and an overlong line
    stops the search.
    """
    for line in stream:
        if not line.endswith("\n") or len(line) > BUFSIZE - 1:
            return
        if match(pattern, line[:-1]):
            out.write(line)


def main(argv: list[str] | None = None) -> int:
    """Run grep: ``grep pattern [file ...]``."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        sys.stderr.write("usage: grep pattern [file ...]\n")
        return 1
    pattern, files = args[0], args[1:]
    if not files:
        grep(pattern, sys.stdin, sys.stdout)
        return 0
    for name in files:
        try:
            stream = open(name, encoding="utf-8", errors="replace")
        except OSError:
            sys.stdout.write(f"grep: cannot open {name}\n")
            return 1
        with stream:
            grep(pattern, stream, sys.stdout)
    return 0