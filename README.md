# tinyunix

`tinyunix` models, in plain Python, the moving parts of a small
Unix-like teaching kernel for 32-bit x86 and of the library its user
programs link against: paging arithmetic and page tables, segment and
gate descriptors, ELF headers, spin and sleep locks, system-call
argument fetching and dispatch, trap handling, a serial port driver, a
first-fit heap allocator, the shell's command-line parser and `wc`.

No hardware is touched. Physical memory, I/O ports, CPUs and processes
are Python objects that you create and inspect. The package has no
dependencies beyond the standard library.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

| Module | Contents |
| --- | --- |
| `tinyunix.constants` | kernel limits (`NPROC`, `NOFILE`, `MAXARG`, ...), `OpenFlag`, `FileType`, `Syscall`, `Trap`, `Irq`, `open_mode_access` |
| `tinyunix.mmu` | memory layout constants, `pdx`, `ptx`, `pgaddr`, `pgroundup`, `pgrounddown`, `pte_addr`, `pte_flags`, `v2p`, `p2v`, `SegmentDescriptor`, `GateDescriptor`, `seg`, `seg16`, `seg_asm`, `set_gate` |
| `tinyunix.elf` | `ElfHeader`, `ProgramHeader`, `ProgFlag`, `read_program_headers`, `ElfFormatError` |
| `tinyunix.cstring` | NUL-terminated string and memory routines over bytes: `memcmp`, `strcmp`, `strncmp`, `strncpy`, `safestrcpy`, `memmove`, `atoi`, `gets` |
| `tinyunix.records` | `TrapFrame`, `Buf`, `BufFlag`, `RtcDate`, `Stat` |
| `tinyunix.shell` | `Scanner`, `parse_cmd`, the command tree `ExecCmd`, `RedirCmd`, `PipeCmd`, `ListCmd`, `BackCmd`, and `ShellSyntaxError` |
| `tinyunix.wc` | `count`, `WordCount` and `main`, behind the `tinyunix-wc` command |
| `tinyunix.umalloc` | `Heap`, a first-fit free-list allocator that grows its arena with `sbrk` |
| `tinyunix.locks` | `Cpu`, `SpinLock`, `SleepLock`, `KernelPanic` |
| `tinyunix.vm` | `FramePool` (page-sized simulated physical frames) and `PageDirectory` (two-level x86 page tables) |
| `tinyunix.syscall` | `Process`, `SyscallTable`, `Ticks`, `sys_getpid`, `sys_sbrk`, `sys_uptime`, `sys_sleep`, `BadAddress` |
| `tinyunix.trap` | `TrapDispatcher`, `TrapAction`, `build_idt` |
| `tinyunix.uart` | `Uart` and the `PortBus` it talks through |

## Examples

Parse a shell command line into a command tree:

```python
from tinyunix.shell import parse_cmd

tree = parse_cmd("cat README | grep unix > out; echo done &")
```

The result is a `ListCmd` whose left side is a `PipeCmd` and whose
right side is a `BackCmd`. Both `>` and `>>` become a `RedirCmd` on
descriptor 1 with `OpenFlag.WRONLY | OpenFlag.CREATE`; `<` becomes one
on descriptor 0 with `OpenFlag.RDONLY`. A malformed line such as
`"echo )"` raises `ShellSyntaxError`, whose `leftover` attribute holds
the unparsed text; a command with ten or more words is rejected too.

Count lines, words and bytes:

```python
from tinyunix.wc import count

result = count(b"hello world\nsecond line\n")
print(result.format("input"))   # 2 4 24 input
```

Words are separated by space, tab, carriage return, newline, vertical
tab and NUL.

Map pages in a simulated address space:

```python
from tinyunix.vm import FramePool, PageDirectory

pool = FramePool(64)
pgdir = PageDirectory(pool)
size = pgdir.alloc_uvm(0, 8192)   # two zeroed, user-writable pages
pgdir.copyout(0, b"hi")
child = pgdir.copy(size)          # a separate copy of those pages
```

Running out of frames raises `MemoryError`; broken invariants such as
remapping a present page raise `KernelPanic`.

Allocate and release memory from a bounded heap:

```python
from tinyunix.umalloc import Heap

heap = Heap(1 << 20)
address = heap.malloc(100)
heap.free(address)
print(heap.free_blocks())
```

Dispatch a system call for a process:

```python
from tinyunix.constants import Syscall
from tinyunix.syscall import Process, SyscallTable, Ticks

table = SyscallTable(Ticks())
proc = Process(7, "demo", bytes(64))
proc.tf.eax = Syscall.GETPID
table.dispatch(proc)              # returns 7 and stores it in proc.tf.eax
```

## Command line

`tinyunix-wc` prints line, word and byte counts for each file named on
the command line, or for standard input when none is given:

```
tinyunix-wc README.md
```

If a file cannot be opened it prints `wc: cannot open NAME` and stops.

## What the package does not do

- It has no file system, block cache, disk driver or log; `Buf` and
  `Stat` are records only.
- It has no scheduler, `fork`, `exec` or `wait`. `SyscallTable`
  installs only `getpid`, `sbrk`, `uptime` and `sleep`; other calls
  must be supplied with `register`, and unknown numbers return -1.
- `TrapDispatcher.handle` does not switch processes itself; it returns
  a `TrapAction` telling the caller to resume, yield or exit.
- The shell is a parser only: it builds a command tree but runs
  nothing and has no interactive prompt.
- There is no console or keyboard driver; `Uart.intr` hands its
  `getc` to a console callback that you provide.