"""x86 paging arithmetic, memory layout and segment/gate descriptors."""

from __future__ import annotations

import struct
from dataclasses import dataclass, fields
from typing import ClassVar

_MASK = 0xFFFFFFFF

# Memory layout.
EXTMEM = 0x100000
PHYSTOP = 0xE000000
DEVSPACE = 0xFE000000
KERNBASE = 0x80000000
KERNLINK = KERNBASE + EXTMEM

# Eflags and control registers.
FL_IF = 0x00000200
CR0_PE = 0x00000001
CR0_WP = 0x00010000
CR0_PG = 0x80000000
CR4_PSE = 0x00000010

# Segment selectors.
SEG_KCODE = 1
SEG_KDATA = 2
SEG_UCODE = 3
SEG_UDATA = 4
SEG_TSS = 5
NSEGS = 6

DPL_USER = 0x3

STA_X = 0x8
STA_W = 0x2
STA_R = 0x2

STS_T32A = 0x9
STS_IG32 = 0xE
STS_TG32 = 0xF

# Paging.
NPDENTRIES = 1024
NPTENTRIES = 1024
PGSIZE = 4096
PTXSHIFT = 12
PDXSHIFT = 22

PTE_P = 0x001
PTE_W = 0x002
PTE_U = 0x004
PTE_PS = 0x080


def pdx(va: int) -> int:
    """Page directory index of a virtual address."""
    return ((va & _MASK) >> PDXSHIFT) & 0x3FF


def ptx(va: int) -> int:
    """Page table index of a virtual address."""
    return ((va & _MASK) >> PTXSHIFT) & 0x3FF


def pgaddr(d: int, t: int, o: int) -> int:
    """Build a virtual address from directory index, table index and offset."""
    return ((d << PDXSHIFT) | (t << PTXSHIFT) | o) & _MASK


def pgroundup(sz: int) -> int:
    return (sz + PGSIZE - 1) & ~(PGSIZE - 1) & _MASK


def pgrounddown(a: int) -> int:
    return a & ~(PGSIZE - 1) & _MASK


def pte_addr(pte: int) -> int:
    """Physical address held in a page table entry."""
    return pte & ~0xFFF & _MASK


def pte_flags(pte: int) -> int:
    return pte & 0xFFF


def v2p(a: int) -> int:
    """Kernel virtual address to physical address."""
    return (a - KERNBASE) & _MASK


def p2v(a: int) -> int:
    """Physical address to kernel virtual address."""
    return (a + KERNBASE) & _MASK


def _check_widths(record, widths) -> None:
    for f, width in zip(fields(record), widths):
        value = getattr(record, f.name)
        if not 0 <= value < (1 << width):
            raise ValueError(f"{f.name}={value} does not fit in {width} bits")


def _pack_bits(record, widths) -> bytes:
    word = 0
    shift = 0
    for f, width in zip(fields(record), widths):
        word |= getattr(record, f.name) << shift
        shift += width
    return word.to_bytes(8, "little")


def _unpack_bits(data: bytes, widths) -> list[int]:
    if len(data) != 8:
        raise ValueError(f"descriptor must be 8 bytes, got {len(data)}")
    word = int.from_bytes(data, "little")
    values = []
    for width in widths:
        values.append(word & ((1 << width) - 1))
        word >>= width
    return values


@dataclass(frozen=True)
class SegmentDescriptor:
    """An entry of the global descriptor table."""

    lim_15_0: int
    base_15_0: int
    base_23_16: int
    type: int
    s: int
    dpl: int
    p: int
    lim_19_16: int
    avl: int
    rsv1: int
    db: int
    g: int
    base_31_24: int

    _WIDTHS: ClassVar[tuple[int, ...]] = (16, 16, 8, 4, 1, 2, 1, 4, 1, 1, 1, 1, 8)

    def __post_init__(self) -> None:
        _check_widths(self, self._WIDTHS)

    @property
    def base(self) -> int:
        return self.base_15_0 | (self.base_23_16 << 16) | (self.base_31_24 << 24)

    def pack(self) -> bytes:
        return _pack_bits(self, self._WIDTHS)

    @classmethod
    def unpack(cls, data: bytes) -> SegmentDescriptor:
        return cls(*_unpack_bits(bytes(data), cls._WIDTHS))


def seg(type_: int, base: int, limit: int, dpl: int) -> SegmentDescriptor:
    """A normal 32-bit segment whose limit is counted in pages."""
    base &= _MASK
    limit &= _MASK
    return SegmentDescriptor(
        (limit >> 12) & 0xFFFF, base & 0xFFFF, (base >> 16) & 0xFF,
        type_, 1, dpl, 1, limit >> 28, 0, 0, 1, 1, base >> 24,
    )


def seg16(type_: int, base: int, limit: int, dpl: int) -> SegmentDescriptor:
    """A segment whose limit is counted in bytes."""
    base &= _MASK
    limit &= _MASK
    return SegmentDescriptor(
        limit & 0xFFFF, base & 0xFFFF, (base >> 16) & 0xFF,
        type_, 1, dpl, 1, (limit >> 16) & 0xF, 0, 0, 1, 0, base >> 24,
    )


def seg_asm(type_: int, base: int, limit: int) -> bytes:
    """The 8 bytes the boot assembler emits for a flat segment."""
    base &= _MASK
    limit &= _MASK
    return struct.pack(
        "<HHBBBB",
        (limit >> 12) & 0xFFFF,
        base & 0xFFFF,
        (base >> 16) & 0xFF,
        0x90 | type_,
        0xC0 | ((limit >> 28) & 0xF),
        (base >> 24) & 0xFF,
    )


@dataclass(frozen=True)
class GateDescriptor:
    """An entry of the interrupt descriptor table."""

    off_15_0: int
    cs: int
    args: int
    rsv1: int
    type: int
    s: int
    dpl: int
    p: int
    off_31_16: int

    _WIDTHS: ClassVar[tuple[int, ...]] = (16, 16, 5, 3, 4, 1, 2, 1, 16)

    def __post_init__(self) -> None:
        _check_widths(self, self._WIDTHS)

    @property
    def offset(self) -> int:
        return self.off_15_0 | (self.off_31_16 << 16)

    def pack(self) -> bytes:
        return _pack_bits(self, self._WIDTHS)

    @classmethod
    def unpack(cls, data: bytes) -> GateDescriptor:
        return cls(*_unpack_bits(bytes(data), cls._WIDTHS))


def set_gate(istrap: bool, sel: int, off: int, dpl: int) -> GateDescriptor:
    """A trap gate if ``istrap`` (interrupts stay on), else an interrupt gate."""
    off &= _MASK
    return GateDescriptor(
        off & 0xFFFF, sel, 0, 0, STS_TG32 if istrap else STS_IG32, 0, dpl, 1, off >> 16,
    )