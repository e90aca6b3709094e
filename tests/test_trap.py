import pytest

from tinyunix.constants import Irq, Syscall, Trap
from tinyunix.locks import KernelPanic
from tinyunix.mmu import DPL_USER, STS_IG32, STS_TG32
from tinyunix.records import TrapFrame
from tinyunix.syscall import Process, SyscallTable, Ticks
from tinyunix.trap import TrapAction, TrapDispatcher, build_idt


def dispatcher():
    ticks = Ticks()
    return TrapDispatcher(SyscallTable(ticks), ticks), ticks


def test_syscall_trap_sets_eax():
    d, _ = dispatcher()
    p = Process(9, "p", bytes(16))
    tf = TrapFrame(trapno=Trap.SYSCALL, eax=Syscall.GETPID, cs=DPL_USER)
    assert d.handle(tf, p) is TrapAction.RESUME
    assert tf.eax == 9


def test_killed_process_exits_on_syscall():
    d, _ = dispatcher()
    p = Process(1)
    p.killed = True
    assert d.handle(TrapFrame(trapno=Trap.SYSCALL), p) is TrapAction.EXIT


def test_timer_ticks_only_on_cpu0():
    d, ticks = dispatcher()
    tf = TrapFrame(trapno=Trap.IRQ0 + Irq.TIMER, cs=DPL_USER)
    assert d.handle(tf, Process(1), 0) is TrapAction.YIELD
    d.handle(tf, None, 1)
    assert ticks.now() == 1


def test_irq_handler_called():
    d, _ = dispatcher()
    seen = []
    d.on_irq(Irq.KBD, lambda: seen.append("kbd"))
    assert d.handle(TrapFrame(trapno=Trap.IRQ0 + Irq.KBD), None) is TrapAction.RESUME
    assert seen == ["kbd"]


def test_user_fault_kills():
    d, _ = dispatcher()
    p = Process(3, "bad")
    tf = TrapFrame(trapno=Trap.PGFLT, cs=DPL_USER)
    assert d.handle(tf, p) is TrapAction.EXIT
    assert p.killed


def test_kernel_fault_panics():
    d, _ = dispatcher()
    with pytest.raises(KernelPanic):
        d.handle(TrapFrame(trapno=Trap.GPFLT, cs=0), Process(1))


def test_build_idt():
    idt = build_idt(list(range(0, 256 * 4, 4)))
    assert len(idt) == 256
    assert idt[Trap.SYSCALL].type == STS_TG32
    assert idt[Trap.SYSCALL].dpl == DPL_USER
    assert idt[0].type == STS_IG32
    assert idt[5].offset == 20
    with pytest.raises(ValueError):
        build_idt([0])