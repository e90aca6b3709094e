"""Reading and writing 32-bit ELF file and program headers."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass

ELF_MAGIC = 0x464C457F
ELF_PROG_LOAD = 1

_ELF_HEADER = struct.Struct("<I12sHHIIIIIHHHHHH")
_PROGRAM_HEADER = struct.Struct("<8I")
ELF_HEADER_SIZE = _ELF_HEADER.size
PROGRAM_HEADER_SIZE = _PROGRAM_HEADER.size


class ProgFlag(enum.IntFlag):
    EXEC = 1
    WRITE = 2
    READ = 4


class ElfFormatError(ValueError):
    """The data is not a well-formed ELF image."""


@dataclass(frozen=True)
class ElfHeader:
    magic: int = ELF_MAGIC
    ident: bytes = bytes(12)
    type: int = 0
    machine: int = 0
    version: int = 0
    entry: int = 0
    phoff: int = 0
    shoff: int = 0
    flags: int = 0
    ehsize: int = 0
    phentsize: int = 0
    phnum: int = 0
    shentsize: int = 0
    shnum: int = 0
    shstrndx: int = 0

    def __post_init__(self) -> None:
        if len(self.ident) != 12:
            raise ValueError("ident must be 12 bytes")

    @classmethod
    def parse(cls, data: bytes) -> ElfHeader:
        data = bytes(data)
        if len(data) < ELF_HEADER_SIZE:
            raise ElfFormatError("truncated ELF header")
        header = cls(*_ELF_HEADER.unpack_from(data, 0))
        if header.magic != ELF_MAGIC:
            raise ElfFormatError("bad ELF magic")
        return header

    def pack(self) -> bytes:
        try:
            return _ELF_HEADER.pack(
                self.magic, self.ident, self.type, self.machine, self.version,
                self.entry, self.phoff, self.shoff, self.flags, self.ehsize,
                self.phentsize, self.phnum, self.shentsize, self.shnum, self.shstrndx,
            )
        except struct.error as exc:
            raise ValueError(str(exc)) from exc


@dataclass(frozen=True)
class ProgramHeader:
    type: int = 0
    off: int = 0
    vaddr: int = 0
    paddr: int = 0
    filesz: int = 0
    memsz: int = 0
    flags: int = 0
    align: int = 0

    @property
    def is_loadable(self) -> bool:
        return self.type == ELF_PROG_LOAD

    @classmethod
    def parse(cls, data: bytes) -> ProgramHeader:
        data = bytes(data)
        if len(data) < PROGRAM_HEADER_SIZE:
            raise ElfFormatError("truncated program header")
        return cls(*_PROGRAM_HEADER.unpack_from(data, 0))

    def pack(self) -> bytes:
        try:
            return _PROGRAM_HEADER.pack(
                self.type, self.off, self.vaddr, self.paddr,
                self.filesz, self.memsz, self.flags, self.align,
            )
        except struct.error as exc:
            raise ValueError(str(exc)) from exc


def read_program_headers(data: bytes, header: ElfHeader) -> list[ProgramHeader]:
    """Parse the program header table that ``header`` points into."""
    data = bytes(data)
    result = []
    for i in range(header.phnum):
        start = header.phoff + i * PROGRAM_HEADER_SIZE
        chunk = data[start:start + PROGRAM_HEADER_SIZE]
        if len(chunk) < PROGRAM_HEADER_SIZE:
            raise ElfFormatError(f"program header {i} lies outside the image")
        result.append(ProgramHeader.parse(chunk))
    return result