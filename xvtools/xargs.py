"""Run a command once for each line of standard input.

Input is read in chunks of ``MAXLEN - 1`` bytes; each newline-terminated
line in a chunk becomes the last argument of one command.  Text after
the last newline of a chunk, and anything after a NUL byte, is dropped.
Commands are the tools of this package that read and write through the
standard streams.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterator, Sequence
from typing import IO

from xvtools import cat, echo, grep, wc

MAXARGS = 10
MAXLEN = 512

_COMMANDS: dict[str, Callable[[list[str]], int]] = {
    "echo": echo.main,
    "cat": cat.main,
    "grep": grep.main,
    "wc": wc.main,
}


def command_lines(base: Sequence[str], stream: IO[bytes]) -> Iterator[list[str]]:
    """Yield *base* extended by each input line of *stream*."""
    base = list(base)
    if len(base) + 2 > MAXARGS:
        raise ValueError("too many arguments")
    while True:
        chunk = stream.read(MAXLEN - 1)
        if not chunk:
            return
        if isinstance(chunk, str):
            chunk = chunk.encode()
        lines = chunk.split(b"\0", 1)[0].split(b"\n")[:-1]
        for line in lines:
            yield base + [line.decode("utf-8", errors="replace")]


def main(argv: list[str] | None = None) -> int:
    """Run xargs: ``xargs command [args...]``."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        sys.stdout.write("Usage: xargs <command> [args...]\n")
        return 1
    base = args[: MAXARGS - 2]
    for cmd in command_lines(base, sys.stdin.buffer):
        tool = _COMMANDS.get(cmd[0])
        if tool is None:
            sys.stdout.write(f"xargs: exec {cmd[0]} failed\n")
            continue
        sys.stdout.flush()
        tool(cmd[1:])
        sys.stdout.flush()
    return 0