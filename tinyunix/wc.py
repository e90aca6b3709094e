"""Count lines, words and bytes."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import BinaryIO, Optional, Sequence

_CHUNK = 512
# A NUL byte separates words as well as the usual whitespace.
_SEPARATORS = frozenset(b" \r\t\n\v\0")
_NEWLINE = ord("\n")


@dataclass
class WordCount:
    lines: int = 0
    words: int = 0
    chars: int = 0
    in_word: bool = field(default=False, repr=False, compare=False)

    def feed(self, chunk: bytes) -> None:
        """Count another piece of input; words may span pieces."""
        for byte in chunk:
            self.chars += 1
            if byte == _NEWLINE:
                self.lines += 1
            if byte in _SEPARATORS:
                self.in_word = False
            elif not self.in_word:
                self.words += 1
                self.in_word = True

    def format(self, name: str) -> str:
        return f"{self.lines} {self.words} {self.chars} {name}"


def count(data: bytes) -> WordCount:
    result = WordCount()
    result.feed(bytes(data))
    return result


def _count_stream(stream: BinaryIO) -> WordCount:
    result = WordCount()
    while chunk := stream.read(_CHUNK):
        result.feed(chunk)
    return result


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Print counts for each named file, or for standard input when none are named."""
    names = list(sys.argv[1:] if argv is None else argv)
    if not names:
        try:
            print(_count_stream(sys.stdin.buffer).format(""))
        except OSError:
            print("wc: read error")
        return 0
    for name in names:
        try:
            stream = open(name, "rb")
        except OSError:
            print(f"wc: cannot open {name}")
            return 0
        with stream:
            try:
                result = _count_stream(stream)
            except OSError:
                print("wc: read error")
                return 0
        print(result.format(name))
    return 0