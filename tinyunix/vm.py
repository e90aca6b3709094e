"""Two-level x86 page tables over a pool of simulated physical frames."""

from __future__ import annotations

from typing import Optional

from tinyunix.locks import KernelPanic
from tinyunix.mmu import (
    KERNBASE,
    NPDENTRIES,
    PDXSHIFT,
    PGSIZE,
    PTE_P,
    PTE_U,
    PTE_W,
    pdx,
    pgrounddown,
    pgroundup,
    pte_addr,
    pte_flags,
    ptx,
)

_MASK = 0xFFFFFFFF


class FramePool:
    """Physical memory as page-sized frames; frame addresses start at ``PGSIZE``."""

    def __init__(self, nframes: int) -> None:
        if nframes < 0:
            raise ValueError("frame count must not be negative")
        self.nframes = nframes
        self._free = [PGSIZE * (i + 1) for i in reversed(range(nframes))]
        self._frames: dict[int, bytearray] = {}

    @property
    def available(self) -> int:
        """Number of frames not handed out."""
        return len(self._free)

    def alloc(self) -> Optional[int]:
        """Take a zero-filled frame and return its address, or None when exhausted."""
        if not self._free:
            return None
        pa = self._free.pop()
        self._frames[pa] = bytearray(PGSIZE)
        return pa

    def free(self, pa: int) -> None:
        if pa % PGSIZE or pa not in self._frames:
            raise KernelPanic("kfree")
        del self._frames[pa]
        self._free.append(pa)

    def _locate(self, pa: int, n: int) -> tuple[bytearray, int]:
        base = pgrounddown(pa)
        off = pa - base
        frame = self._frames.get(base)
        if frame is None:
            raise ValueError(f"address {pa:#x} is not in an allocated frame")
        if n < 0 or off + n > PGSIZE:
            raise ValueError("access crosses a frame boundary")
        return frame, off

    def read(self, pa: int, n: int) -> bytes:
        frame, off = self._locate(pa, n)
        return bytes(frame[off:off + n])

    def write(self, pa: int, data: bytes) -> None:
        data = bytes(data)
        frame, off = self._locate(pa, len(data))
        frame[off:off + len(data)] = data


class PageDirectory:
    """A user address space: a page directory and its page tables."""

    def __init__(self, pool: FramePool) -> None:
        pa = pool.alloc()
        if pa is None:
            raise MemoryError("no frame for page directory")
        self.pool = pool
        self.pa = pa

    def _load(self, addr: int) -> int:
        return int.from_bytes(self.pool.read(addr, 4), "little")

    def _store(self, addr: int, value: int) -> None:
        self.pool.write(addr, (value & _MASK).to_bytes(4, "little"))

    def walk(self, va: int, alloc: bool = False) -> Optional[int]:
        """Physical address of the PTE for ``va``, creating its table if ``alloc``."""
        pde_at = self.pa + 4 * pdx(va)
        pde = self._load(pde_at)
        if pde & PTE_P:
            table = pte_addr(pde)
        else:
            if not alloc:
                return None
            table = self.pool.alloc()
            if table is None:
                return None
            self._store(pde_at, table | PTE_P | PTE_W | PTE_U)
        return table + 4 * ptx(va)

    def map_pages(self, va: int, size: int, pa: int, perm: int) -> None:
        """Map ``[va, va+size)`` onto frames starting at ``pa``."""
        a = pgrounddown(va)
        last = pgrounddown(va + size - 1)
        while True:
            pte = self.walk(a, True)
            if pte is None:
                raise MemoryError("no frame for page table")
            if self._load(pte) & PTE_P:
                raise KernelPanic("remap")
            self._store(pte, pa | perm | PTE_P)
            if a == last:
                break
            a += PGSIZE
            pa += PGSIZE

    def init_uvm(self, init: bytes) -> None:
        """Load a first program, smaller than a page, at address 0."""
        init = bytes(init)
        if len(init) >= PGSIZE:
            raise KernelPanic("inituvm: more than a page")
        mem = self.pool.alloc()
        if mem is None:
            raise MemoryError("no frame for initial program")
        self.map_pages(0, PGSIZE, mem, PTE_W | PTE_U)
        self.pool.write(mem, init)

    def load_uvm(self, addr: int, data: bytes, offset: int, sz: int) -> None:
        """Copy ``sz`` bytes of ``data`` from ``offset`` into mapped pages at ``addr``."""
        if addr % PGSIZE:
            raise KernelPanic("loaduvm: addr must be page aligned")
        for i in range(0, sz, PGSIZE):
            pte = self.walk(addr + i)
            if pte is None:
                raise KernelPanic("loaduvm: address should exist")
            pa = pte_addr(self._load(pte))
            n = min(sz - i, PGSIZE)
            chunk = bytes(data[offset + i:offset + i + n])
            if len(chunk) != n:
                raise ValueError("segment extends beyond the data")
            self.pool.write(pa, chunk)

    def alloc_uvm(self, oldsz: int, newsz: int) -> int:
        """Grow the user part from ``oldsz`` to ``newsz``; return the new size."""
        if newsz >= KERNBASE:
            raise MemoryError("size reaches kernel space")
        if newsz < oldsz:
            return oldsz
        for a in range(pgroundup(oldsz), newsz, PGSIZE):
            mem = self.pool.alloc()
            if mem is None:
                self.dealloc_uvm(newsz, oldsz)
                raise MemoryError("allocuvm out of memory")
            try:
                self.map_pages(a, PGSIZE, mem, PTE_W | PTE_U)
            except MemoryError:
                self.dealloc_uvm(newsz, oldsz)
                self.pool.free(mem)
                raise MemoryError("allocuvm out of memory (2)") from None
        return newsz

    def dealloc_uvm(self, oldsz: int, newsz: int) -> int:
        """Shrink the user part from ``oldsz`` to ``newsz``; return the new size."""
        if newsz >= oldsz:
            return oldsz
        a = pgroundup(newsz)
        while a < oldsz:
            pte = self.walk(a)
            if pte is None:
                a = ((pdx(a) + 1) << PDXSHIFT) - PGSIZE
            else:
                entry = self._load(pte)
                if entry & PTE_P:
                    pa = pte_addr(entry)
                    if pa == 0:
                        raise KernelPanic("kfree")
                    self.pool.free(pa)
                    self._store(pte, 0)
            a += PGSIZE
        return newsz

    def free(self) -> None:
        """Release every user page, every page table and the directory."""
        self.dealloc_uvm(KERNBASE, 0)
        for i in range(NPDENTRIES):
            pde = self._load(self.pa + 4 * i)
            if pde & PTE_P:
                self.pool.free(pte_addr(pde))
        self.pool.free(self.pa)

    def clear_pteu(self, uva: int) -> None:
        """Make a page inaccessible to user code."""
        pte = self.walk(uva)
        if pte is None:
            raise KernelPanic("clearpteu")
        self._store(pte, self._load(pte) & ~PTE_U)

    def copy(self, sz: int) -> PageDirectory:
        """A new address space holding a copy of the first ``sz`` bytes."""
        d = PageDirectory(self.pool)
        for i in range(0, sz, PGSIZE):
            pte = self.walk(i)
            if pte is None:
                raise KernelPanic("copyuvm: pte should exist")
            entry = self._load(pte)
            if not entry & PTE_P:
                raise KernelPanic("copyuvm: page not present")
            mem = self.pool.alloc()
            if mem is None:
                d.free()
                raise MemoryError("out of frames while copying")
            self.pool.write(mem, self.pool.read(pte_addr(entry), PGSIZE))
            try:
                d.map_pages(i, PGSIZE, mem, pte_flags(entry))
            except MemoryError:
                self.pool.free(mem)
                d.free()
                raise
        return d

    def uva2ka(self, uva: int) -> Optional[int]:
        """Frame address behind a user page, or None if absent or not user-accessible."""
        pte = self.walk(uva)
        if pte is None:
            return None
        entry = self._load(pte)
        if not entry & PTE_P or not entry & PTE_U:
            return None
        return pte_addr(entry)

    def copyout(self, va: int, data: bytes) -> None:
        """Copy ``data`` to user address ``va``."""
        buf = bytes(data)
        while buf:
            va0 = pgrounddown(va)
            pa0 = self.uva2ka(va0)
            if pa0 is None:
                raise ValueError(f"user address {va:#x} is not mapped")
            n = min(PGSIZE - (va - va0), len(buf))
            self.pool.write(pa0 + (va - va0), buf[:n])
            buf = buf[n:]
            va = va0 + PGSIZE