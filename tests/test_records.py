import datetime

import pytest
from hypothesis import given
from hypothesis import strategies as st

from tinyunix.constants import FileType
from tinyunix.records import Buf, BufFlag, RtcDate, Stat, TrapFrame

u32 = st.integers(0, 0xFFFFFFFF)
u16 = st.integers(0, 0xFFFF)


def test_trapframe_size():
    assert len(TrapFrame().pack()) == 76


@given(u32, u32, u16, u16, u32)
def test_trapframe_round_trip(eax, esp, cs, ss, trapno):
    tf = TrapFrame(eax=eax, esp=esp, cs=cs, ss=ss, trapno=trapno, eip=0x1234)
    assert TrapFrame.unpack(tf.pack()) == tf


def test_trapframe_privilege():
    assert TrapFrame(cs=0x1B).privilege == 3
    assert TrapFrame(cs=0x08).privilege == 0


def test_trapframe_bad_length():
    with pytest.raises(ValueError):
        TrapFrame.unpack(b"\x00" * 10)


def test_trapframe_overflow():
    with pytest.raises(ValueError):
        TrapFrame(cs=0x10000).pack()


def test_buf_flags():
    b = Buf(dev=1, blockno=7)
    assert not b.valid and not b.dirty
    b.flags |= BufFlag.VALID
    assert b.valid and not b.dirty
    b.flags |= BufFlag.DIRTY
    assert b.dirty
    b.flags &= ~BufFlag.DIRTY
    assert b.valid and not b.dirty


def test_rtcdate_to_datetime():
    d = RtcDate(second=5, minute=4, hour=3, day=2, month=1, year=2020)
    assert d.to_datetime() == datetime.datetime(2020, 1, 2, 3, 4, 5)


def test_stat_size():
    assert len(Stat(FileType.FILE, 1, 2, 1, 0).pack()) == 20


@given(st.sampled_from(list(FileType)), st.integers(-(2**31), 2**31 - 1), u32,
       st.integers(-(2**15), 2**15 - 1), u32)
def test_stat_round_trip(type_, dev, ino, nlink, size):
    s = Stat(type_, dev, ino, nlink, size)
    assert Stat.unpack(s.pack()) == s


def test_stat_unpack_dir():
    s = Stat.unpack(Stat(FileType.DIR, 1, 1, 2, 512).pack())
    assert s.type is FileType.DIR
    assert s.is_dir


def test_stat_out_of_range():
    with pytest.raises(ValueError):
        Stat(FileType.FILE, 1, -1, 1, 0).pack()


def test_stat_bad_length():
    with pytest.raises(ValueError):
        Stat.unpack(b"\x00" * 19)