"""Prime sieve: each number passes through a chain of filters, one per prime."""

from __future__ import annotations

import sys
from collections.abc import Iterator

MAX_NUM = 280


def sieve(limit: int = MAX_NUM) -> Iterator[int]:
    """Yield the primes from 2 up to and including *limit*.

    Every candidate is checked against the primes found so far, in the
    order they were found, as it would pass along a pipeline of filters.
    """
    filters: list[int] = []
    for n in range(2, limit + 1):
        if all(n % p for p in filters):
            filters.append(n)
            yield n


def main(argv: list[str] | None = None) -> int:
    """Print ``prime N`` for every prime up to the fixed limit."""
    for prime in sieve(MAX_NUM):
        sys.stdout.write(f"prime {prime}\n")
    return 0