"""Trap handling: system calls, device interrupts and faults."""

from __future__ import annotations

import enum
from typing import Callable, Optional, Sequence

from tinyunix.constants import Irq, Trap
from tinyunix.locks import KernelPanic
from tinyunix.mmu import DPL_USER, SEG_KCODE, GateDescriptor, set_gate
from tinyunix.records import TrapFrame
from tinyunix.syscall import Process, SyscallTable, Ticks


class TrapAction(enum.Enum):
    """What the caller must do with the current process after a trap."""

    RESUME = "resume"
    EXIT = "exit"
    YIELD = "yield"


def build_idt(vectors: Sequence[int]) -> list[GateDescriptor]:
    """The 256 interrupt gates; only the system call gate is reachable from user mode."""
    if len(vectors) != 256:
        raise ValueError("need 256 vector addresses")
    idt = [set_gate(False, SEG_KCODE << 3, v, 0) for v in vectors]
    idt[Trap.SYSCALL] = set_gate(True, SEG_KCODE << 3, vectors[Trap.SYSCALL], DPL_USER)
    return idt


class TrapDispatcher:
    def __init__(self, syscalls: SyscallTable, ticks: Ticks) -> None:
        self.syscalls = syscalls
        self.ticks = ticks
        self._irq: dict[int, Callable[[], None]] = {}

    def on_irq(self, irq: int, handler: Callable[[], None]) -> None:
        """Install the handler for a device interrupt line."""
        self._irq[int(irq)] = handler

    def handle(self, tf: TrapFrame, proc: Optional[Process], cpu_id: int = 0) -> TrapAction:
        if tf.trapno == Trap.SYSCALL:
            if proc is None:
                raise KernelPanic("syscall without a process")
            if proc.killed:
                return TrapAction.EXIT
            proc.tf = tf
            self.syscalls.dispatch(proc)
            return TrapAction.EXIT if proc.killed else TrapAction.RESUME

        irq = tf.trapno - Trap.IRQ0
        if irq == Irq.TIMER:
            if cpu_id == 0:
                self.ticks.tick()
        elif irq in (Irq.IDE, Irq.KBD, Irq.COM1):
            handler = self._irq.get(irq)
            if handler is not None:
                handler()
        elif irq == Irq.IDE + 1:
            pass  # spurious secondary disk interrupts
        elif irq in (7, Irq.SPURIOUS):
            print(f"cpu{cpu_id}: spurious interrupt at {tf.cs:x}:{tf.eip:x}")
        else:
            if proc is None or tf.privilege == 0:
                print(f"unexpected trap {tf.trapno} from cpu {cpu_id} eip {tf.eip:x}")
                raise KernelPanic("trap")
            print(
                f"pid {proc.pid} {proc.name}: trap {tf.trapno} err {tf.err} "
                f"on cpu {cpu_id} eip 0x{tf.eip:x}--kill proc"
            )
            proc.killed = True

        if proc is not None and proc.killed and tf.privilege == DPL_USER:
            return TrapAction.EXIT
        if proc is not None and irq == Irq.TIMER:
            return TrapAction.YIELD
        return TrapAction.RESUME