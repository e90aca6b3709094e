"""Models of a small x86 Unix-like teaching kernel: paging, descriptors, ELF,
locks, system calls, traps, a serial port, a heap allocator, a shell parser
and wc."""

__version__ = "0.1.0"