"""Run random file system operations in parallel to shake out bugs.

Each worker keeps its own working directory inside a root directory.
It picks one of ``NOPS`` operations at random, using the Park-Miller
generator, and applies it to the files ``a``, ``b`` and ``c`` and the
directory ``grindir``.  Short-lived helper processes are played by
threads that get a copy of the worker's working directory.  Failures are
ignored, except for the few checks that must always hold; these raise
RuntimeError.
"""

from __future__ import annotations

import contextlib
import os
import sys
import threading
import time
from collections import Counter
from collections.abc import Callable
from typing import Optional

from xvtools import cat, echo
from xvtools.umalloc import Heap

NOPS = 23
"""Number of distinct operation codes; some of them do nothing."""

BUFSIZE = 999
"""Bytes written and read by the plain read and write operations."""

HEAP_LIMIT = 128 * 1024 * 1024
"""Largest break a worker's simulated heap may reach."""

PROGRESS_EVERY = 500
"""A worker with a tag prints it once per this many steps."""

ROUND_PAUSE = 2.0
"""Seconds to wait between two rounds of the command."""

_MASK64 = (1 << 64) - 1
_CREATE = os.O_CREAT | os.O_RDWR


def do_rand(ctx: int) -> int:
    """Return the successor of the generator state *ctx*.

    Computes ``16807 * x mod (2**31 - 1)`` without overflow, as given by
    Park and Miller; the result, in ``[0, 0x7ffffffd]``, is also the next
    state.
    """
    x = (ctx & _MASK64) % 0x7FFFFFFE + 1
    hi, lo = divmod(x, 127773)
    x = 16807 * lo - 2836 * hi
    if x < 0:
        x += 0x7FFFFFFF
    return x - 1


class Rand:
    """A Park-Miller random number generator."""

    def __init__(self, seed: int = 1) -> None:
        self.state = seed & _MASK64

    def next(self) -> int:
        """Advance the state and return it."""
        self.state = do_rand(self.state)
        return self.state


def _remove(path: str) -> None:
    """Remove a file or an empty directory; failures are ignored."""
    with contextlib.suppress(OSError):
        if os.path.isdir(path) and not os.path.islink(path):
            os.rmdir(path)
        else:
            os.unlink(path)


def _close(fd: Optional[int]) -> None:
    if fd is not None:
        with contextlib.suppress(OSError):
            os.close(fd)


class Grinder:
    """One worker applying random operations below *root*."""

    def __init__(self, root: str | os.PathLike[str], seed: int = 1) -> None:
        self.root = os.fspath(root)
        self.rand = Rand(seed)
        self.cwd: list[str] = []
        self.tag = ""
        self.halted = threading.Event()
        self._fd: Optional[int] = None
        self._buf = bytearray(BUFSIZE)
        self._heap = Heap(HEAP_LIMIT)
        self._break0 = self._heap.sbrk(0)
        self._iters = 0
        self._ops: dict[int, Callable[[], None]] = {
            1: lambda: self._touch("grindir/../a", self.cwd),
            2: lambda: self._touch("grindir/../grindir/../b", self.cwd),
            3: lambda: self._unlink("grindir/../a", self.cwd),
            4: self._op_visit_grindir,
            5: lambda: self._reopen("/grindir/../a"),
            6: lambda: self._reopen("/./grindir/./../b"),
            7: self._op_write,
            8: self._op_read,
            9: self._op_dir_a,
            10: self._op_dir_b,
            11: self._op_link_b,
            12: self._op_link_a,
            # 13, 14 and 18 start processes that exit at once; they leave
            # no trace in the file system.
            15: self._op_grow,
            16: self._op_shrink,
            17: self._op_child_create,
            19: self._op_pipe,
            20: self._op_child_dir,
            21: self._op_check_c,
            22: self._op_pipeline,
        }
        self._mkdir("grindir", self.cwd)
        try:
            self._chdir("grindir", self.cwd)
        except OSError as exc:
            raise RuntimeError("chdir grindir failed") from exc

    # Path handling ------------------------------------------------------

    def _resolve(self, path: str, cwd: list[str]) -> tuple[str, list[str]]:
        """Return the host path for *path* and its normalised components.

        ``..`` in the root stays in the root; elsewhere it is kept in the
        host path so that the host checks the intermediate directories.
        """
        parts = [] if path.startswith("/") else list(cwd)
        host = list(parts)
        for comp in path.split("/"):
            if comp in ("", "."):
                continue
            if comp == "..":
                if parts:
                    parts.pop()
                    host.append("..")
                continue
            parts.append(comp)
            host.append(comp)
        return os.path.join(self.root, *host), parts

    def _chdir(self, path: str, cwd: list[str]) -> list[str]:
        host, parts = self._resolve(path, cwd)
        if not os.path.isdir(host):
            raise NotADirectoryError(path)
        return parts

    def _open(self, path: str, cwd: list[str]) -> Optional[int]:
        host, _ = self._resolve(path, cwd)
        try:
            return os.open(host, _CREATE, 0o666)
        except OSError:
            return None

    def _touch(self, path: str, cwd: list[str]) -> None:
        _close(self._open(path, cwd))

    def _unlink(self, path: str, cwd: list[str]) -> None:
        _remove(self._resolve(path, cwd)[0])

    def _mkdir(self, path: str, cwd: list[str]) -> None:
        with contextlib.suppress(OSError):
            os.mkdir(self._resolve(path, cwd)[0])

    def _link(self, old: str, new: str, cwd: list[str]) -> None:
        with contextlib.suppress(OSError):
            os.link(self._resolve(old, cwd)[0], self._resolve(new, cwd)[0])

    @staticmethod
    def _start(target: Callable[[], None]) -> threading.Thread:
        thread = threading.Thread(target=target, daemon=True)
        thread.start()
        return thread

    # Operations ---------------------------------------------------------

    def _op_visit_grindir(self) -> None:
        try:
            cwd = self._chdir("grindir", self.cwd)
        except OSError as exc:
            raise RuntimeError("chdir grindir failed") from exc
        self._unlink("../b", cwd)
        self.cwd = []

    def _reopen(self, path: str) -> None:
        _close(self._fd)
        self._fd = self._open(path, self.cwd)

    def _op_write(self) -> None:
        if self._fd is not None:
            with contextlib.suppress(OSError):
                os.write(self._fd, bytes(self._buf))

    def _op_read(self) -> None:
        if self._fd is not None:
            with contextlib.suppress(OSError):
                data = os.read(self._fd, BUFSIZE)
                self._buf[: len(data)] = data

    def _op_dir_a(self) -> None:
        self._mkdir("grindir/../a", self.cwd)
        self._touch("a/../a/./a", self.cwd)
        self._unlink("a/a", self.cwd)

    def _op_dir_b(self) -> None:
        self._mkdir("/../b", self.cwd)
        self._touch("grindir/../b/b", self.cwd)
        self._unlink("b/b", self.cwd)

    def _op_link_b(self) -> None:
        self._unlink("b", self.cwd)
        self._link("../grindir/./../a", "../b", self.cwd)

    def _op_link_a(self) -> None:
        self._unlink("../grindir/../a", self.cwd)
        self._link(".././b", "/grindir/../a", self.cwd)

    def _op_grow(self) -> None:
        with contextlib.suppress(MemoryError):
            self._heap.sbrk(6011)

    def _op_shrink(self) -> None:
        top = self._heap.sbrk(0)
        if top > self._break0:
            self._heap.sbrk(-(top - self._break0))

    def _op_child_create(self) -> None:
        child_cwd = list(self.cwd)
        child = self._start(lambda: self._touch("a", child_cwd))
        try:
            self.cwd = self._chdir("../grindir/..", self.cwd)
        except OSError as exc:
            raise RuntimeError("chdir failed") from exc
        finally:
            child.join()

    def _op_pipe(self) -> None:
        try:
            read_fd, write_fd = os.pipe()
        except OSError as exc:
            raise RuntimeError("pipe failed") from exc

        def worker() -> None:
            try:
                wrote = os.write(write_fd, b"x")
            except OSError:
                wrote = 0
            if wrote != 1:
                sys.stdout.write("grind: pipe write failed\n")
            try:
                got = len(os.read(read_fd, 1))
            except OSError:
                got = 0
            if got != 1:
                sys.stdout.write("grind: pipe read failed\n")

        # The child forks twice, so four processes share the pipe.
        workers = [self._start(worker) for _ in range(4)]
        for thread in workers:
            thread.join()
        _close(read_fd)
        _close(write_fd)

    def _op_child_dir(self) -> None:
        def child() -> None:
            cwd = list(self.cwd)
            self._unlink("a", cwd)
            self._mkdir("a", cwd)
            with contextlib.suppress(OSError):
                cwd = self._chdir("a", cwd)
            self._unlink("../a", cwd)
            fd = self._open("x", cwd)
            self._unlink("x", cwd)
            _close(fd)

        self._start(child).join()

    def _op_check_c(self) -> None:
        self._unlink("c", self.cwd)
        fd = self._open("c", self.cwd)
        if fd is None:
            raise RuntimeError("create c failed")
        try:
            try:
                wrote = os.write(fd, b"x")
            except OSError:
                wrote = -1
            if wrote != 1:
                raise RuntimeError("write c failed")
            try:
                size = os.fstat(fd).st_size
            except OSError as exc:
                raise RuntimeError("fstat failed") from exc
            if size != 1:
                raise RuntimeError(f"fstat reports wrong size {size}")
        finally:
            _close(fd)
        self._unlink("c", self.cwd)

    def _op_pipeline(self) -> None:
        try:
            aa_r, aa_w = os.pipe()
        except OSError as exc:
            raise RuntimeError("pipe failed") from exc
        try:
            bb_r, bb_w = os.pipe()
        except OSError as exc:
            _close(aa_r)
            _close(aa_w)
            raise RuntimeError("pipe failed") from exc
        status = [0, 0]

        def producer() -> None:
            try:
                with open(aa_w, "w", encoding="utf-8") as out:
                    out.write(echo.echo(["hi"]))
            except OSError:
                status[0] = 1

        def filter_() -> None:
            try:
                with open(aa_r, "rb") as src, open(bb_w, "wb", buffering=0) as dst:
                    cat.cat(src, dst)
            except OSError:
                status[1] = 1

        first = self._start(producer)
        second = self._start(filter_)
        got = bytearray()
        with open(bb_r, "rb", buffering=0) as src:
            for _ in range(3):
                got += src.read(1) or b""
        first.join()
        second.join()
        text = got.decode("utf-8", errors="replace")
        if status != [0, 0] or text != "hi\n":
            raise RuntimeError(
                f'exec pipeline failed {status[0]} {status[1]} "{text}"'
            )

    # Driving ------------------------------------------------------------

    def step(self) -> int:
        """Apply one random operation and return its code."""
        self._iters += 1
        if self.tag and self._iters % PROGRESS_EVERY == 0:
            sys.stdout.write(self.tag)
            sys.stdout.flush()
        what = self.rand.next() % NOPS
        operation = self._ops.get(what)
        if operation is not None:
            operation()
        return what

    def run(self, iterations: Optional[int] = None) -> Counter[int]:
        """Apply *iterations* operations, or run until halted.

        Returns how often each operation code was chosen.  The worker's
        open file is closed when the run ends.
        """
        done: Counter[int] = Counter()
        count = 0
        try:
            while iterations is None or count < iterations:
                if self.halted.is_set():
                    break
                done[self.step()] += 1
                count += 1
        finally:
            _close(self._fd)
            self._fd = None
        return done


def _round(root: str, seed: int) -> None:
    _remove(os.path.join(root, "a"))
    _remove(os.path.join(root, "b"))
    try:
        first = Grinder(root, seed ^ 31)
        second = Grinder(root, seed ^ 7177)
    except RuntimeError as exc:
        sys.stdout.write(f"grind: {exc}\n")
        return
    first.tag, second.tag = "A", "B"
    second.halted = first.halted

    def drive(grinder: Grinder) -> None:
        try:
            grinder.run()
        except RuntimeError as exc:
            sys.stdout.write(f"grind: {exc}\n")
            grinder.halted.set()

    threads = [threading.Thread(target=drive, args=(g,)) for g in (first, second)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()


def main(argv: list[str] | None = None) -> int:
    """Run grind: ``grind [directory]``, round after round, forever."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) > 1:
        sys.stdout.write("Usage: grind [directory]\n")
        return 1
    root = args[0] if args else os.curdir
    seed = 1
    while True:
        _round(root, seed)
        time.sleep(ROUND_PAUSE)
        seed += 1