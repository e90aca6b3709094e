"""Spin locks with interrupt bookkeeping per CPU, and sleeping locks."""

from __future__ import annotations

import threading
from typing import Optional


class KernelPanic(RuntimeError):
    """An invariant of the kernel was broken."""


class Cpu:
    """Interrupt-enable state of one processor, with nested disabling."""

    def __init__(self, cpu_id: int = 0, interrupts_enabled: bool = True) -> None:
        self.id = cpu_id
        self.interrupts_enabled = interrupts_enabled
        self.ncli = 0
        self.intena = False

    def push_cli(self) -> None:
        """Disable interrupts; matched by ``pop_cli``."""
        enabled = self.interrupts_enabled
        self.interrupts_enabled = False
        if self.ncli == 0:
            self.intena = enabled
        self.ncli += 1

    def pop_cli(self) -> None:
        """Undo one ``push_cli``; re-enable interrupts when the outermost one ends."""
        if self.interrupts_enabled:
            raise KernelPanic("popcli - interruptible")
        self.ncli -= 1
        if self.ncli < 0:
            raise KernelPanic("popcli")
        if self.ncli == 0 and self.intena:
            self.interrupts_enabled = True

    def __repr__(self) -> str:
        return f"Cpu({self.id})"


class SpinLock:
    """Mutual exclusion between CPUs; interrupts stay off while held."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.cpu: Optional[Cpu] = None
        self._word = threading.Lock()

    @property
    def locked(self) -> bool:
        return self._word.locked()

    def acquire(self, cpu: Cpu) -> None:
        """Wait until the lock is free, then take it for ``cpu``."""
        cpu.push_cli()
        if self.holding(cpu):
            raise KernelPanic("acquire")
        self._word.acquire()
        self.cpu = cpu

    def release(self, cpu: Cpu) -> None:
        if not self.holding(cpu):
            raise KernelPanic("release")
        self.cpu = None
        self._word.release()
        cpu.pop_cli()

    def holding(self, cpu: Cpu) -> bool:
        """Whether ``cpu`` holds this lock."""
        cpu.push_cli()
        result = self.locked and self.cpu is cpu
        cpu.pop_cli()
        return result


class SleepLock:
    """A long-term lock; waiters sleep until it is released."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.locked = False
        self.pid = 0
        self._cond = threading.Condition()

    def acquire(self, pid: int) -> None:
        with self._cond:
            while self.locked:
                self._cond.wait()
            self.locked = True
            self.pid = pid

    def release(self) -> None:
        with self._cond:
            self.locked = False
            self.pid = 0
            self._cond.notify_all()

    def holding(self, pid: int) -> bool:
        with self._cond:
            return self.locked and self.pid == pid