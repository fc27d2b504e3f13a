"""A small printf that understands %d, %u, %x, %p, %s and %%.

Integer conversions work on 32-bit values, the ``l`` and ``ll`` length
prefixes included; hexadecimal digits are upper case.
"""

from __future__ import annotations

import re
import sys
from typing import IO, Any

_SPEC = re.compile(r"%(?:(l{0,2})([dux])|(.)|$)", re.S)
_MASK32 = 0xFFFFFFFF
_MASK64 = 0xFFFFFFFFFFFFFFFF


def _integer(value: Any, base: int, signed: bool) -> str:
    x = int(value) & _MASK32
    sign = ""
    if signed and x >= 0x80000000:
        sign = "-"
        x = 0x100000000 - x
    digits = f"{x:X}" if base == 16 else str(x)
    return sign + digits


def format(fmt: str, *args: Any) -> str:
    """Return *fmt* with its conversions replaced by *args*, in order."""
    values = iter(args)

    def take() -> Any:
        try:
            return next(values)
        except StopIteration:
            raise TypeError("not enough arguments for format string") from None

    def replace(m: re.Match) -> str:
        _length, conv, other = m.groups()
        if conv is not None:
            return _integer(take(), 16 if conv == "x" else 10, conv == "d")
        if other is None:
            return ""
        if other == "p":
            return f"0x{int(take()) & _MASK64:016X}"
        if other == "s":
            value = take()
            return "(null)" if value is None else str(value)
        if other == "%":
            return "%"
        return "%" + other

    return _SPEC.sub(replace, fmt)


def fprintf(file: IO[str], fmt: str, *args: Any) -> None:
    """Write the formatted text to *file*."""
    file.write(format(fmt, *args))


def printf(fmt: str, *args: Any) -> None:
    """Write the formatted text to standard output."""
    fprintf(sys.stdout, fmt, *args)