"""The 8250 serial port, driven through an I/O port bus."""

from __future__ import annotations

from typing import Callable, Optional, Union

COM1 = 0x3F8
_LSR = COM1 + 5
_LSR_DATA_READY = 0x01
_LSR_TX_EMPTY = 0x20


class PortBus:
    """I/O ports: reads return the configured value (0xFF if absent); writes are logged."""

    def __init__(self, values: Optional[dict[int, int]] = None) -> None:
        self.values = dict(values or {})
        self.writes: list[tuple[int, int]] = []

    def inb(self, port: int) -> int:
        return self.values.get(port, 0xFF) & 0xFF

    def outb(self, port: int, value: int) -> None:
        self.writes.append((port, value & 0xFF))


class Uart:
    GREETING = "xv6...\n"

    def __init__(self, bus: PortBus) -> None:
        self.bus = bus
        self.present = False

    def init(self) -> bool:
        """Program 9600 baud 8N1 with receive interrupts; return whether a port exists."""
        out = self.bus.outb
        out(COM1 + 2, 0)
        out(COM1 + 3, 0x80)
        out(COM1 + 0, 115200 // 9600)
        out(COM1 + 1, 0)
        out(COM1 + 3, 0x03)
        out(COM1 + 4, 0)
        out(COM1 + 1, 0x01)
        if self.bus.inb(_LSR) == 0xFF:
            return False
        self.present = True
        self.bus.inb(COM1 + 2)
        self.bus.inb(COM1 + 0)
        for ch in self.GREETING:
            self.putc(ch)
        return True

    def putc(self, c: Union[int, str]) -> None:
        if not self.present:
            return
        value = ord(c) if isinstance(c, str) else c
        for _ in range(128):
            if self.bus.inb(_LSR) & _LSR_TX_EMPTY:
                break
        self.bus.outb(COM1, value)

    def getc(self) -> Optional[int]:
        """The received byte, or None if there is none."""
        if not self.present:
            return None
        if not self.bus.inb(_LSR) & _LSR_DATA_READY:
            return None
        return self.bus.inb(COM1)

    def intr(self, console: Callable[[Callable[[], Optional[int]]], None]) -> None:
        """Hand the console a way to drain received bytes."""
        console(self.getc)