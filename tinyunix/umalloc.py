"""A first-fit free-list allocator over a break-extended arena."""

from __future__ import annotations

from typing import NamedTuple, Optional

HEADER_SIZE = 8
MIN_CORE_UNITS = 4096
_BASE = 0


class FreeBlock(NamedTuple):
    """A free block: header address and size in bytes, header included."""

    address: int
    size: int


class Heap:
    """Allocator whose arena starts just above a zero-sized sentinel block.

    Addresses are byte offsets; ``limit`` is how far the break may grow.
    """

    def __init__(self, limit: int = 1 << 20) -> None:
        if limit < 0:
            raise ValueError("limit must not be negative")
        self.start = HEADER_SIZE
        self.limit = limit
        self.brk = self.start
        self._next: dict[int, int] = {}
        self._units: dict[int, int] = {}
        self._freep: Optional[int] = None
        self._allocated: set[int] = set()

    def sbrk(self, n: int) -> int:
        """Move the break by ``n`` bytes and return the old break."""
        old = self.brk
        new = old + n
        if new < self.start:
            raise ValueError("cannot shrink below the start of the heap")
        if new > self.start + self.limit:
            raise MemoryError("heap limit reached")
        self.brk = new
        return old

    def malloc(self, nbytes: int) -> int:
        """Allocate ``nbytes`` and return the address of the usable space."""
        if nbytes < 0:
            raise ValueError("size must not be negative")
        nunits = (nbytes + HEADER_SIZE - 1) // HEADER_SIZE + 1
        if self._freep is None:
            self._next[_BASE] = _BASE
            self._units[_BASE] = 0
            self._freep = _BASE
        prevp = self._freep
        p = self._next[prevp]
        while True:
            size = self._units[p]
            if size >= nunits:
                if size == nunits:
                    self._next[prevp] = self._next.pop(p)
                else:
                    self._units[p] = size - nunits
                    p += (size - nunits) * HEADER_SIZE
                    self._units[p] = nunits
                self._freep = prevp
                self._allocated.add(p)
                return p + HEADER_SIZE
            if p == self._freep:
                p = self._morecore(nunits)
            prevp, p = p, self._next[p]

    def free(self, address: int) -> None:
        """Return a block obtained from ``malloc`` to the free list."""
        header = address - HEADER_SIZE
        if header not in self._allocated:
            raise ValueError(f"address {address} is not an allocated block")
        self._allocated.remove(header)
        self._release(header)

    def free_blocks(self) -> list[FreeBlock]:
        """The free list in address order, without the sentinel."""
        if self._freep is None:
            return []
        blocks = []
        p = self._next[_BASE]
        while p != _BASE:
            blocks.append(FreeBlock(p, self._units[p] * HEADER_SIZE))
            p = self._next[p]
        return blocks

    def _morecore(self, nunits: int) -> int:
        nu = max(nunits, MIN_CORE_UNITS)
        header = self.sbrk(nu * HEADER_SIZE)
        self._units[header] = nu
        self._release(header)
        return self._freep

    def _release(self, bp: int) -> None:
        nxt, units = self._next, self._units
        p = self._freep
        while not (p < bp < nxt[p]):
            if p >= nxt[p] and (bp > p or bp < nxt[p]):
                break
            p = nxt[p]
        q = nxt[p]
        if bp + units[bp] * HEADER_SIZE == q:
            units[bp] += units.pop(q)
            nxt[bp] = nxt.pop(q)
        else:
            nxt[bp] = q
        if p + units[p] * HEADER_SIZE == bp:
            units[p] += units.pop(bp)
            nxt[p] = nxt.pop(bp)
        else:
            nxt[p] = bp
        self._freep = p