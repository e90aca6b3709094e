"""Kernel parameters and the numbers shared by the kernel and user programs."""

from __future__ import annotations

import enum

NPROC = 64
KSTACKSIZE = 4096
NCPU = 8
NOFILE = 16
NFILE = 100
NINODE = 50
NDEV = 10
ROOTDEV = 1
MAXARG = 32
MAXOPBLOCKS = 10
LOGSIZE = MAXOPBLOCKS * 3
NBUF = MAXOPBLOCKS * 3
FSSIZE = 1000

UINT_MASK = 0xFFFFFFFF
USHORT_MASK = 0xFFFF
UCHAR_MASK = 0xFF


class OpenFlag(enum.IntFlag):
    """Mode bits accepted by ``open``."""

    RDONLY = 0x000
    WRONLY = 0x001
    RDWR = 0x002
    CREATE = 0x200


class FileType(enum.IntEnum):
    """Kind of object an inode describes."""

    DIR = 1
    FILE = 2
    DEV = 3


class Syscall(enum.IntEnum):
    """System call numbers, passed in %eax."""

    FORK = 1
    EXIT = 2
    WAIT = 3
    PIPE = 4
    READ = 5
    KILL = 6
    EXEC = 7
    FSTAT = 8
    CHDIR = 9
    DUP = 10
    GETPID = 11
    SBRK = 12
    SLEEP = 13
    UPTIME = 14
    OPEN = 15
    WRITE = 16
    MKNOD = 17
    UNLINK = 18
    LINK = 19
    MKDIR = 20
    CLOSE = 21
    GETSIBLINGS = 22
    WAITPID = 23


class Trap(enum.IntEnum):
    """Processor exceptions and the vectors chosen by the kernel."""

    DIVIDE = 0
    DEBUG = 1
    NMI = 2
    BRKPT = 3
    OFLOW = 4
    BOUND = 5
    ILLOP = 6
    DEVICE = 7
    DBLFLT = 8
    TSS = 10
    SEGNP = 11
    STACK = 12
    GPFLT = 13
    PGFLT = 14
    FPERR = 16
    ALIGN = 17
    MCHK = 18
    SIMDERR = 19
    IRQ0 = 32
    SYSCALL = 64
    DEFAULT = 500


class Irq(enum.IntEnum):
    """Hardware interrupt lines, relative to ``Trap.IRQ0``."""

    TIMER = 0
    KBD = 1
    COM1 = 4
    IDE = 14
    ERROR = 19
    SPURIOUS = 31


def open_mode_access(omode: int) -> tuple[bool, bool]:
    """Return ``(readable, writable)`` for an ``open`` mode."""
    omode = int(omode)
    readable = not omode & OpenFlag.WRONLY
    writable = bool(omode & OpenFlag.WRONLY or omode & OpenFlag.RDWR)
    return readable, writable