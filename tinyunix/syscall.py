"""System call argument fetching, dispatch and the process-related calls."""

from __future__ import annotations

import threading
from typing import Callable

from tinyunix.constants import Syscall
from tinyunix.mmu import KERNBASE
from tinyunix.records import TrapFrame

_MASK = 0xFFFFFFFF


class BadAddress(ValueError):
    """A user pointer lies outside the process's memory."""


class Ticks:
    """The clock tick counter, with sleepers waiting on it."""

    def __init__(self) -> None:
        self._count = 0
        self._cond = threading.Condition()

    def tick(self) -> None:
        with self._cond:
            self._count = (self._count + 1) & _MASK
            self._cond.notify_all()

    def now(self) -> int:
        with self._cond:
            return self._count


class Process:
    """The parts of a process the system calls use: pid, name, memory, trap frame."""

    def __init__(self, pid: int, name: str = "", memory: bytes = b"") -> None:
        self.pid = pid
        self.name = name
        self.memory = bytearray(memory)
        self.tf = TrapFrame()
        self.killed = False

    @property
    def sz(self) -> int:
        return len(self.memory)

    def fetch_int(self, addr: int) -> int:
        if addr < 0 or addr >= self.sz or addr + 4 > self.sz:
            raise BadAddress(f"int at {addr:#x}")
        return int.from_bytes(self.memory[addr:addr + 4], "little", signed=True)

    def fetch_str(self, addr: int) -> bytes:
        """The NUL-terminated string at ``addr``, without the NUL."""
        if addr < 0 or addr >= self.sz:
            raise BadAddress(f"string at {addr:#x}")
        end = self.memory.find(0, addr)
        if end < 0:
            raise BadAddress(f"unterminated string at {addr:#x}")
        return bytes(self.memory[addr:end])

    def arg_int(self, n: int) -> int:
        """The ``n``th 32-bit argument on the user stack."""
        return self.fetch_int(self.tf.esp + 4 + 4 * n)

    def arg_ptr(self, n: int, size: int) -> int:
        """The ``n``th argument as an address of ``size`` valid bytes."""
        addr = self.arg_int(n) & _MASK
        if size < 0 or addr >= self.sz or addr + size > self.sz:
            raise BadAddress(f"buffer at {addr:#x}")
        return addr

    def arg_str(self, n: int) -> bytes:
        return self.fetch_str(self.arg_int(n) & _MASK)


Handler = Callable[[Process], int]


def sys_getpid(proc: Process) -> int:
    return proc.pid


def sys_sbrk(proc: Process) -> int:
    """Grow or shrink memory by the first argument; return the old size."""
    n = proc.arg_int(0)
    addr = proc.sz
    newsz = addr + n
    if newsz < 0 or newsz >= KERNBASE:
        return -1
    if n >= 0:
        proc.memory.extend(bytes(n))
    else:
        del proc.memory[newsz:]
    return addr


def sys_uptime(ticks: Ticks) -> int:
    return ticks.now()


def sys_sleep(proc: Process, ticks: Ticks) -> int:
    """Wait for the number of ticks in the first argument; -1 if killed meanwhile."""
    n = proc.arg_int(0)
    with ticks._cond:
        start = ticks._count
        while ((ticks._count - start) & _MASK) < n:
            if proc.killed:
                return -1
            ticks._cond.wait(0.05)
    return 0


class SyscallTable:
    """Maps system call numbers to handlers and runs them."""

    def __init__(self, ticks: Ticks) -> None:
        self.ticks = ticks
        self._handlers: dict[int, Handler] = {}
        self.register(Syscall.GETPID, sys_getpid)
        self.register(Syscall.SBRK, sys_sbrk)
        self.register(Syscall.UPTIME, lambda proc: sys_uptime(ticks))
        self.register(Syscall.SLEEP, lambda proc: sys_sleep(proc, ticks))

    def register(self, number: int, handler: Handler) -> None:
        if number <= 0:
            raise ValueError("system call numbers start at 1")
        self._handlers[int(number)] = handler

    def dispatch(self, proc: Process) -> int:
        """Run the call named by %eax and store its result there."""
        num = proc.tf.eax & _MASK
        if num >= 1 << 31:
            num -= 1 << 32
        handler = self._handlers.get(num)
        if handler is None:
            print(f"{proc.pid} {proc.name}: unknown sys call {num}")
            result = -1
        else:
            try:
                result = handler(proc)
            except BadAddress:
                result = -1
        proc.tf.eax = result & _MASK
        return result