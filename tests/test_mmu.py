import pytest
from hypothesis import given
from hypothesis import strategies as st

from tinyunix.mmu import (
    EXTMEM,
    KERNBASE,
    KERNLINK,
    PGSIZE,
    SEG_KCODE,
    STA_R,
    STA_W,
    STA_X,
    STS_IG32,
    STS_TG32,
    GateDescriptor,
    SegmentDescriptor,
    p2v,
    pdx,
    pgaddr,
    pgrounddown,
    pgroundup,
    pte_addr,
    pte_flags,
    ptx,
    seg,
    seg16,
    seg_asm,
    set_gate,
    v2p,
)

u32 = st.integers(0, 0xFFFFFFFF)


@given(u32)
def test_address_split_round_trip(va):
    assert pgaddr(pdx(va), ptx(va), va & (PGSIZE - 1)) == va


@given(st.integers(0, 0xFFFFFFFF - PGSIZE))
def test_pgroundup(sz):
    r = pgroundup(sz)
    assert r % PGSIZE == 0
    assert 0 <= r - sz < PGSIZE


@given(u32)
def test_pgrounddown(a):
    r = pgrounddown(a)
    assert r % PGSIZE == 0
    assert 0 <= a - r < PGSIZE


@given(u32)
def test_v2p_p2v_round_trip(a):
    assert v2p(p2v(a)) == a


def test_kernel_link_address():
    assert v2p(KERNLINK) == EXTMEM
    assert p2v(0) == KERNBASE


@given(u32)
def test_pte_split(pte):
    assert pte_addr(pte) | pte_flags(pte) == pte
    assert pte_addr(pte) & pte_flags(pte) == 0


def test_flat_kernel_code_segment_bytes():
    assert seg(STA_X | STA_R, 0, 0xFFFFFFFF, 0).pack() == bytes.fromhex("ffff0000009acf00")


@given(st.integers(0, 15), u32, u32)
def test_seg_asm_matches_descriptor(type_, base, limit):
    assert seg_asm(type_, base, limit) == seg(type_, base, limit, 0).pack()


@given(st.integers(0, 15), u32, u32, st.integers(0, 3))
def test_segment_round_trip(type_, base, limit, dpl):
    d = seg(type_, base, limit, dpl)
    assert SegmentDescriptor.unpack(d.pack()) == d
    assert d.base == base


def test_seg16_is_byte_granular():
    d = seg16(STA_W, 0x1234, 0x67, 0)
    assert d.g == 0
    assert d.lim_15_0 == 0x67
    assert d.base == 0x1234


def test_descriptor_field_overflow():
    with pytest.raises(ValueError):
        SegmentDescriptor(0x10000, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0)


def test_unpack_wrong_length():
    with pytest.raises(ValueError):
        GateDescriptor.unpack(b"\x00" * 7)


@given(st.booleans(), st.integers(0, 0xFFFF), u32, st.integers(0, 3))
def test_gate_round_trip(istrap, sel, off, dpl):
    g = set_gate(istrap, sel, off, dpl)
    assert g.type == (STS_TG32 if istrap else STS_IG32)
    assert g.offset == off
    assert g.p == 1
    assert GateDescriptor.unpack(g.pack()) == g


def test_syscall_gate_selector():
    g = set_gate(True, SEG_KCODE << 3, 0x80105000, 3)
    assert g.cs == SEG_KCODE << 3
    assert g.dpl == 3