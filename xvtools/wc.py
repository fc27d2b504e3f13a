"""Count lines, words and bytes."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import IO

_CHUNK = 512
# A NUL byte also separates words.
_SEPARATORS = frozenset(b" \r\t\n\v\0")


@dataclass
class Counts:
    """Line, word and byte totals of one input."""

    lines: int = 0
    words: int = 0
    chars: int = 0


def count(stream: IO[bytes]) -> Counts:
    """Count the lines, words and bytes of a binary *stream*."""
    result = Counts()
    inword = False
    while True:
        chunk = stream.read(_CHUNK)
        if not chunk:
            break
        data = chunk.encode() if isinstance(chunk, str) else chunk
        result.chars += len(data)
        result.lines += data.count(b"\n")
        for byte in data:
            if byte in _SEPARATORS:
                inword = False
            elif not inword:
                result.words += 1
                inword = True
    return result


def _report(stream: IO[bytes], name: str) -> bool:
    try:
        counts = count(stream)
    except OSError:
        sys.stdout.write("wc: read error\n")
        return False
    sys.stdout.write(f"{counts.lines} {counts.words} {counts.chars} {name}\n")
    return True


def main(argv: list[str] | None = None) -> int:
    """Run wc: ``wc [file ...]``, reading standard input without files."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        return 0 if _report(sys.stdin.buffer, "") else 1
    for name in args:
        try:
            stream = open(name, "rb")
        except OSError:
            sys.stdout.write(f"wc: cannot open {name}\n")
            return 1
        with stream:
            if not _report(stream, name):
                return 1
    return 0