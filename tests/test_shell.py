import pytest

from tinyunix.constants import OpenFlag
from tinyunix.shell import (
    MAXARGS,
    BackCmd,
    ExecCmd,
    ListCmd,
    PipeCmd,
    RedirCmd,
    Scanner,
    ShellSyntaxError,
    parse_cmd,
)


def test_simple_exec_with_newline():
    assert parse_cmd("echo hello world\n") == ExecCmd(["echo", "hello", "world"])


def test_blank_line_gives_empty_exec():
    assert parse_cmd("") == ExecCmd([])
    assert parse_cmd("   \n") == ExecCmd([])


def test_redirections_nest_outermost_last():
    cmd = parse_cmd("cat < in > out")
    inner = RedirCmd(ExecCmd(["cat"]), "in", OpenFlag.RDONLY, 0)
    assert cmd == RedirCmd(inner, "out", OpenFlag.WRONLY | OpenFlag.CREATE, 1)


def test_append_uses_same_mode_as_write():
    cmd = parse_cmd("echo x >> log")
    assert cmd == RedirCmd(ExecCmd(["echo", "x"]), "log", OpenFlag.WRONLY | OpenFlag.CREATE, 1)


def test_redirection_before_arguments():
    cmd = parse_cmd("< in wc")
    assert isinstance(cmd, RedirCmd)
    assert cmd.cmd == ExecCmd(["wc"])
    assert cmd.file == "in"


def test_pipes_associate_right():
    cmd = parse_cmd("a | b | c")
    assert cmd == PipeCmd(ExecCmd(["a"]), PipeCmd(ExecCmd(["b"]), ExecCmd(["c"])))


def test_list_and_background():
    assert parse_cmd("a ; b") == ListCmd(ExecCmd(["a"]), ExecCmd(["b"]))
    assert parse_cmd("a &") == BackCmd(ExecCmd(["a"]))
    assert parse_cmd("a & &") == BackCmd(BackCmd(ExecCmd(["a"])))


def test_trailing_semicolon_gives_empty_right():
    assert parse_cmd("a ;") == ListCmd(ExecCmd(["a"]), ExecCmd([]))


def test_block_with_redirection():
    cmd = parse_cmd("(a; b) > f")
    expected = RedirCmd(
        ListCmd(ExecCmd(["a"]), ExecCmd(["b"])), "f", OpenFlag.WRONLY | OpenFlag.CREATE, 1
    )
    assert cmd == expected


def test_symbols_split_words_without_spaces():
    assert parse_cmd("ls|wc") == PipeCmd(ExecCmd(["ls"]), ExecCmd(["wc"]))


def test_nul_ends_the_line():
    assert parse_cmd("echo a\0b") == ExecCmd(["echo", "a"])


def test_missing_redirection_file():
    with pytest.raises(ShellSyntaxError, match="missing file for redirection"):
        parse_cmd("echo >")


def test_missing_close_paren():
    with pytest.raises(ShellSyntaxError, match=r"syntax - missing \)"):
        parse_cmd("(a")


def test_leftovers_are_reported():
    with pytest.raises(ShellSyntaxError) as info:
        parse_cmd("a )")
    assert str(info.value) == "syntax"
    assert info.value.leftover == ")"


def test_unexpected_symbol_in_arguments():
    with pytest.raises(ShellSyntaxError, match="syntax"):
        parse_cmd("echo (")


def test_argument_limit():
    words = [f"w{i}" for i in range(MAXARGS - 1)]
    assert parse_cmd(" ".join(words)) == ExecCmd(words)
    with pytest.raises(ShellSyntaxError, match="too many args"):
        parse_cmd(" ".join(words + ["extra"]))


def test_scanner_token_stream():
    scanner = Scanner("ls>>f|x")
    tokens = [scanner.gettoken() for _ in range(6)]
    assert tokens == [
        ("a", "ls"), ("+", ">>"), ("a", "f"), ("|", "|"), ("a", "x"), ("", ""),
    ]


def test_scanner_peek():
    scanner = Scanner("   ; x")
    assert scanner.peek(";")
    assert not scanner.peek("|")
    assert not scanner.peek("")
    assert scanner.rest == "; x"