"""Command-line parser for the shell: pipes, lists, background jobs and redirections."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple, Optional, Union

from tinyunix.constants import OpenFlag

MAXARGS = 10

WHITESPACE = " \t\r\n\v"
SYMBOLS = "<|>&;()"

WORD = "a"
APPEND = "+"
END = ""


class ShellSyntaxError(ValueError):
    """The command line cannot be parsed."""

    def __init__(self, message: str, leftover: Optional[str] = None) -> None:
        super().__init__(message)
        self.leftover = leftover


@dataclass
class ExecCmd:
    """Run a program with arguments; ``argv`` may be empty for a blank line."""

    argv: list[str] = field(default_factory=list)


@dataclass
class RedirCmd:
    """Run ``cmd`` with descriptor ``fd`` reopened on ``file``."""

    cmd: Command
    file: str
    mode: OpenFlag
    fd: int


@dataclass
class PipeCmd:
    left: Command
    right: Command


@dataclass
class ListCmd:
    """Run ``left`` to completion, then ``right``."""

    left: Command
    right: Command


@dataclass
class BackCmd:
    """Run ``cmd`` without waiting for it."""

    cmd: Command


Command = Union[ExecCmd, RedirCmd, PipeCmd, ListCmd, BackCmd]


class Token(NamedTuple):
    """A token: ``kind`` is a symbol, ``"+"`` for ``>>``, ``"a"`` for a word, ``""`` at the end."""

    kind: str
    text: str


class Scanner:
    """Splits a command line into tokens."""

    def __init__(self, text: str) -> None:
        end = text.find("\0")
        self.text = text if end < 0 else text[:end]
        self.pos = 0

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    @property
    def rest(self) -> str:
        return self.text[self.pos:]

    def _skip_whitespace(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos] in WHITESPACE:
            self.pos += 1

    def peek(self, toks: str) -> bool:
        """Skip whitespace and tell whether the next character is one of ``toks``."""
        self._skip_whitespace()
        return not self.at_end and self.text[self.pos] in toks

    def gettoken(self) -> Token:
        """Consume and return the next token."""
        self._skip_whitespace()
        start = self.pos
        if self.at_end:
            kind = END
        else:
            c = self.text[self.pos]
            if c in "|();&<":
                self.pos += 1
                kind = c
            elif c == ">":
                self.pos += 1
                kind = ">"
                if not self.at_end and self.text[self.pos] == ">":
                    self.pos += 1
                    kind = APPEND
            else:
                kind = WORD
                while not self.at_end and self.text[self.pos] not in WHITESPACE + SYMBOLS:
                    self.pos += 1
        token = Token(kind, self.text[start:self.pos])
        self._skip_whitespace()
        return token


def parse_cmd(text: str) -> Command:
    """Parse a whole command line."""
    scanner = Scanner(text)
    cmd = _parse_line(scanner)
    scanner.peek("")
    if not scanner.at_end:
        raise ShellSyntaxError("syntax", leftover=scanner.rest)
    return cmd


def _parse_line(scanner: Scanner) -> Command:
    cmd = _parse_pipe(scanner)
    while scanner.peek("&"):
        scanner.gettoken()
        cmd = BackCmd(cmd)
    if scanner.peek(";"):
        scanner.gettoken()
        cmd = ListCmd(cmd, _parse_line(scanner))
    return cmd


def _parse_pipe(scanner: Scanner) -> Command:
    cmd = _parse_exec(scanner)
    if scanner.peek("|"):
        scanner.gettoken()
        cmd = PipeCmd(cmd, _parse_pipe(scanner))
    return cmd


def _parse_redirs(cmd: Command, scanner: Scanner) -> Command:
    while scanner.peek("<>"):
        tok = scanner.gettoken()
        target = scanner.gettoken()
        if target.kind != WORD:
            raise ShellSyntaxError("missing file for redirection")
        if tok.kind == "<":
            cmd = RedirCmd(cmd, target.text, OpenFlag.RDONLY, 0)
        else:
            cmd = RedirCmd(cmd, target.text, OpenFlag.WRONLY | OpenFlag.CREATE, 1)
    return cmd


def _parse_block(scanner: Scanner) -> Command:
    if not scanner.peek("("):
        raise ShellSyntaxError("parseblock")
    scanner.gettoken()
    cmd = _parse_line(scanner)
    if not scanner.peek(")"):
        raise ShellSyntaxError("syntax - missing )")
    scanner.gettoken()
    return _parse_redirs(cmd, scanner)


def _parse_exec(scanner: Scanner) -> Command:
    if scanner.peek("("):
        return _parse_block(scanner)
    ecmd = ExecCmd()
    ret = _parse_redirs(ecmd, scanner)
    while not scanner.peek("|)&;"):
        tok = scanner.gettoken()
        if tok.kind == END:
            break
        if tok.kind != WORD:
            raise ShellSyntaxError("syntax")
        ecmd.argv.append(tok.text)
        if len(ecmd.argv) >= MAXARGS:
            raise ShellSyntaxError("too many args")
        ret = _parse_redirs(ret, scanner)
    return ret