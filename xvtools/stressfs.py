"""Several workers write and read back their own files at the same time."""

from __future__ import annotations

import os
import sys
from concurrent.futures import ThreadPoolExecutor

BLOCK = 512
"""Bytes per write and per read."""

WRITES = 20
"""Writes (and reads) done by each worker."""

WORKERS = 5
"""Workers started by the command."""


def _path(directory: str, index: int) -> str:
    return os.path.join(directory, "stressfs" + chr(ord("0") + index))


def _worker(path: str) -> int:
    data = b"a" * BLOCK
    fd = os.open(path, os.O_CREAT | os.O_RDWR, 0o666)
    try:
        for _ in range(WRITES):
            os.write(fd, data)
    finally:
        os.close(fd)
    total = 0
    fd = os.open(path, os.O_RDONLY)
    try:
        for _ in range(WRITES):
            total += len(os.read(fd, BLOCK))
    finally:
        os.close(fd)
    return total


def stress(directory: str, workers: int = WORKERS) -> list[int]:
    """Run *workers* concurrent workers in *directory*.

    Worker ``i`` writes and then reads ``stressfs<i>``; the bytes each
    worker read back are returned in worker order.
    """
    if workers < 0:
        raise ValueError("workers must not be negative")
    if workers == 0:
        return []
    paths = [_path(directory, i) for i in range(workers)]
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(_worker, paths))


def main(argv: list[str] | None = None) -> int:
    """Run the stress test in the current directory."""
    sys.stdout.write("stressfs starting\n")
    for i in range(WORKERS):
        sys.stdout.write(f"write {i}\n")
    for _ in stress(os.curdir, WORKERS):
        sys.stdout.write("read\n")
    return 0