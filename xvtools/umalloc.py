"""A first-fit free-list allocator over a simulated, growable heap."""

from __future__ import annotations

HEADER = 16
"""Size in bytes of a block header; every block is a multiple of it."""

MIN_GROW = 4096
"""Smallest number of header units requested from the break at a time."""

_BASE = -1


class Heap:
    """A heap whose break can grow up to *limit* bytes.

    Addresses are byte offsets from the start of the heap.  Free blocks
    are kept on a circular list ordered by address and are coalesced with
    their neighbours when released.
    """

    def __init__(self, limit: int) -> None:
        if limit < 0:
            raise ValueError("limit must not be negative")
        self.limit = limit
        self._brk = 0
        self._size: dict[int, int] = {}
        self._next: dict[int, int] = {}
        self._freep: int | None = None
        self._allocated: set[int] = set()

    def sbrk(self, n: int) -> int:
        """Move the break by *n* bytes and return the previous break."""
        old = self._brk
        new = old + n
        if new < 0 or new > self.limit:
            raise MemoryError(f"cannot move break by {n} bytes")
        self._brk = new
        return old

    def malloc(self, nbytes: int) -> int:
        """Allocate *nbytes* and return the address of the block's data."""
        if nbytes < 0:
            raise ValueError("size must not be negative")
        nunits = (nbytes + HEADER - 1) // HEADER + 1
        if self._freep is None:
            self._next[_BASE] = _BASE
            self._size[_BASE] = 0
            self._freep = _BASE
        prevp = self._freep
        p = self._next[prevp]
        while True:
            if self._size[p] >= nunits:
                if self._size[p] == nunits:
                    self._next[prevp] = self._next[p]
                    del self._next[p]
                else:
                    self._size[p] -= nunits
                    p += self._size[p]
                    self._size[p] = nunits
                self._freep = prevp
                self._allocated.add(p)
                return (p + 1) * HEADER
            if p == self._freep:
                p = self._morecore(nunits)
            prevp, p = p, self._next[p]

    def free(self, addr: int) -> None:
        """Release the block whose data starts at *addr*."""
        if addr % HEADER or addr // HEADER - 1 not in self._allocated:
            raise ValueError(f"address {addr} was not allocated")
        bp = addr // HEADER - 1
        self._allocated.discard(bp)
        self._release(bp)

    def _morecore(self, nunits: int) -> int:
        nu = max(nunits, MIN_GROW)
        pad = -self._brk % HEADER
        start = self.sbrk(nu * HEADER + pad) + pad
        hp = start // HEADER
        self._size[hp] = nu
        self._release(hp)
        assert self._freep is not None
        return self._freep

    def _release(self, bp: int) -> None:
        size, nxt = self._size, self._next
        p = self._freep
        assert p is not None
        while not (p < bp < nxt[p]):
            if p >= nxt[p] and (bp > p or bp < nxt[p]):
                break
            p = nxt[p]
        following = nxt[p]
        if bp + size[bp] == following:
            size[bp] += size[following]
            nxt[bp] = nxt[following]
            del size[following], nxt[following]
        else:
            nxt[bp] = following
        if p + size[p] == bp:
            size[p] += size[bp]
            nxt[p] = nxt[bp]
            del size[bp], nxt[bp]
        else:
            nxt[p] = bp
        self._freep = p