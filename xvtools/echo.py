"""Print arguments separated by spaces."""

from __future__ import annotations

import sys
from collections.abc import Sequence


def echo(args: Sequence[str]) -> str:
    """Return *args* joined by spaces with a newline, or nothing if empty."""
    if not args:
        return ""
    return " ".join(args) + "\n"


def main(argv: list[str] | None = None) -> int:
    """Run echo: ``echo [word ...]``."""
    args = sys.argv[1:] if argv is None else list(argv)
    sys.stdout.write(echo(args))
    return 0