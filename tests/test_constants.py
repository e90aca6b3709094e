import pytest

from tinyunix.constants import OpenFlag, Syscall, open_mode_access


@pytest.mark.parametrize(
    ("mode", "expected"),
    [
        (OpenFlag.RDONLY, (True, False)),
        (OpenFlag.WRONLY, (False, True)),
        (OpenFlag.RDWR, (True, True)),
        (OpenFlag.CREATE | OpenFlag.RDWR, (True, True)),
        (OpenFlag.CREATE | OpenFlag.WRONLY, (False, True)),
        (OpenFlag.CREATE, (True, False)),
    ],
)
def test_open_mode_access(mode, expected):
    assert open_mode_access(mode) == expected


def test_open_mode_access_accepts_plain_int():
    assert open_mode_access(int(OpenFlag.CREATE | OpenFlag.WRONLY)) == (False, True)


def test_syscall_lookup_by_number():
    assert Syscall(23) is Syscall.WAITPID


@pytest.mark.parametrize(
    ("number", "name"),
    [
        (1, "FORK"),
        (7, "EXEC"),
        (15, "OPEN"),
        (22, "GETSIBLINGS"),
        (23, "WAITPID"),
    ],
)
def test_syscall_numbers_match_names(number, name):
    assert Syscall(number).name == name


@pytest.mark.parametrize("number", [0, 24])
def test_syscall_unknown_number_rejected(number):
    with pytest.raises(ValueError):
        Syscall(number)