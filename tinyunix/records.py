"""Fixed-layout kernel records: trap frames, block buffers, dates and stat."""

from __future__ import annotations

import datetime
import enum
import struct
from dataclasses import astuple, dataclass, field

from tinyunix.constants import FileType

_TRAPFRAME = struct.Struct("<8IHxxHxxHxxHxxIIIHxxIIHxx")
_STAT = struct.Struct("<hxxiIhxxI")

TRAPFRAME_SIZE = _TRAPFRAME.size
STAT_SIZE = _STAT.size


@dataclass
class TrapFrame:
    """Registers saved on the kernel stack when a trap is taken."""

    edi: int = 0
    esi: int = 0
    ebp: int = 0
    oesp: int = 0
    ebx: int = 0
    edx: int = 0
    ecx: int = 0
    eax: int = 0
    gs: int = 0
    fs: int = 0
    es: int = 0
    ds: int = 0
    trapno: int = 0
    err: int = 0
    eip: int = 0
    cs: int = 0
    eflags: int = 0
    esp: int = 0
    ss: int = 0

    @property
    def privilege(self) -> int:
        """Privilege level the trap came from (low two bits of %cs)."""
        return self.cs & 3

    def pack(self) -> bytes:
        try:
            return _TRAPFRAME.pack(*astuple(self))
        except struct.error as exc:
            raise ValueError(str(exc)) from exc

    @classmethod
    def unpack(cls, data: bytes) -> TrapFrame:
        if len(data) != TRAPFRAME_SIZE:
            raise ValueError(f"trap frame must be {TRAPFRAME_SIZE} bytes")
        return cls(*_TRAPFRAME.unpack(bytes(data)))


class BufFlag(enum.IntFlag):
    VALID = 0x2
    DIRTY = 0x4


@dataclass
class Buf:
    """A cached disk block."""

    dev: int
    blockno: int
    data: bytearray = field(default_factory=bytearray)
    flags: BufFlag = BufFlag(0)
    refcnt: int = 0

    @property
    def valid(self) -> bool:
        return bool(self.flags & BufFlag.VALID)

    @property
    def dirty(self) -> bool:
        return bool(self.flags & BufFlag.DIRTY)


@dataclass(frozen=True)
class RtcDate:
    second: int
    minute: int
    hour: int
    day: int
    month: int
    year: int

    def to_datetime(self) -> datetime.datetime:
        return datetime.datetime(
            self.year, self.month, self.day, self.hour, self.minute, self.second
        )


@dataclass(frozen=True)
class Stat:
    type: int
    dev: int
    ino: int
    nlink: int
    size: int

    @property
    def is_dir(self) -> bool:
        return self.type == FileType.DIR

    def pack(self) -> bytes:
        try:
            return _STAT.pack(self.type, self.dev, self.ino, self.nlink, self.size)
        except struct.error as exc:
            raise ValueError(str(exc)) from exc

    @classmethod
    def unpack(cls, data: bytes) -> Stat:
        if len(data) != STAT_SIZE:
            raise ValueError(f"stat record must be {STAT_SIZE} bytes")
        type_, dev, ino, nlink, size = _STAT.unpack(bytes(data))
        if type_ in FileType._value2member_map_:
            type_ = FileType(type_)
        return cls(type_, dev, ino, nlink, size)