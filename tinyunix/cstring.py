"""NUL-terminated string and memory helpers over bytes."""

from __future__ import annotations

from itertools import islice, takewhile, zip_longest
from typing import BinaryIO, Union

BytesLike = Union[bytes, bytearray, memoryview, str]


def _raw(s: BytesLike) -> bytes:
    if isinstance(s, str):
        return s.encode("latin-1")
    return bytes(s)


def _cstr(s: BytesLike) -> bytes:
    """The bytes of ``s`` up to, not including, the first NUL."""
    raw = _raw(s)
    end = raw.find(b"\0")
    return raw if end < 0 else raw[:end]


def memcmp(a: BytesLike, b: BytesLike, n: int) -> int:
    """Compare the first ``n`` bytes; return the difference at the first mismatch."""
    a, b = _raw(a), _raw(b)
    if n > len(a) or n > len(b):
        raise ValueError("memcmp length exceeds a buffer")
    for x, y in zip(a[:n], b[:n]):
        if x != y:
            return x - y
    return 0


def strcmp(p: BytesLike, q: BytesLike) -> int:
    for x, y in zip_longest(_cstr(p), _cstr(q), fillvalue=0):
        if x != y:
            return x - y
    return 0


def strncmp(p: BytesLike, q: BytesLike, n: int) -> int:
    for x, y in islice(zip_longest(_cstr(p), _cstr(q), fillvalue=0), max(n, 0)):
        if x != y:
            return x - y
    return 0


def strncpy(src: BytesLike, n: int) -> bytes:
    """The ``n`` bytes written: ``src`` truncated or NUL-padded, maybe unterminated."""
    if n <= 0:
        return b""
    return _cstr(src)[:n].ljust(n, b"\0")


def safestrcpy(src: BytesLike, n: int) -> bytes:
    """At most ``n - 1`` bytes of ``src`` followed by a NUL."""
    if n <= 0:
        return b""
    return _cstr(src)[:n - 1] + b"\0"


def memmove(buf: bytearray, dst: int, src: int, n: int) -> bytearray:
    """Copy ``n`` bytes within ``buf`` from ``src`` to ``dst``; regions may overlap."""
    if n < 0 or min(dst, src) < 0 or max(dst, src) + n > len(buf):
        raise IndexError("memmove range outside buffer")
    buf[dst:dst + n] = buf[src:src + n]
    return buf


def atoi(s: BytesLike) -> int:
    """Value of the leading decimal digits; no sign or whitespace is accepted."""
    text = s if isinstance(s, str) else bytes(s).decode("latin-1")
    value = 0
    for ch in takewhile(lambda c: "0" <= c <= "9", text):
        value = value * 10 + ord(ch) - ord("0")
    return value


def gets(stream: BinaryIO, max_len: int) -> bytes:
    """Read up to ``max_len - 1`` bytes, stopping after a newline or carriage return."""
    line = bytearray()
    while len(line) + 1 < max_len:
        c = stream.read(1)
        if not c:
            break
        line += c
        if c in (b"\n", b"\r"):
            break
    return bytes(line)