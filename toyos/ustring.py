"""String helpers with NUL-terminated string semantics."""

from __future__ import annotations

from itertools import chain, islice, repeat
from typing import Iterator


def _c_string(text: str) -> str:
    return text.split("\x00", 1)[0]


def _padded(text: str, n: int) -> Iterator[str]:
    """The first ``n`` characters of ``text``, NUL past its end."""
    return islice(chain(_c_string(text), repeat("\x00")), max(n, 0))


def tolower(char: str) -> str:
    """Lower-case an ASCII upper-case letter; other characters are unchanged."""
    return char.lower() if "A" <= char <= "Z" else char


def ctoi(char: str) -> int:
    """The value of a digit character (its code minus that of ``0``)."""
    return ord(char) - ord("0")


def is_digit(char: str) -> bool:
    """Whether ``char`` is an ASCII digit."""
    return "0" <= char <= "9"


def strnlen(text: str, limit: int) -> int:
    """Length of ``text`` up to its first NUL, at most ``limit``."""
    return min(len(_c_string(text)), max(limit, 0))


def strnlen_terminator(text: str, limit: int, terminator: str) -> int:
    """Length up to the first NUL or ``terminator``, at most ``limit``."""
    head = _c_string(text)
    if terminator:
        head = head.split(terminator, 1)[0]
    return min(len(head), max(limit, 0))


def strncpy(text: str, n: int) -> str:
    """The string a buffer of ``n`` characters holds after copying ``text``."""
    return _c_string(text)[: max(n - 1, 0)]


def strncmp(first: str, second: str, n: int) -> int:
    """Compare up to ``n`` characters: 0 if equal, -2 on a mismatch.

    Returns -1 when either string is missing or ``n`` is zero.
    """
    if first is None or second is None or n == 0:
        return -1
    for a, b in zip(_padded(first, n), _padded(second, n)):
        if a != b:
            return -2
        if a == "\x00":
            return 0
    return 0


def istrncmp(first: str, second: str, n: int) -> int:
    """Case-insensitive compare of up to ``n`` characters: 0 if equal, else -1."""
    for a, b in zip(_padded(first, n), _padded(second, n)):
        if a != b and tolower(a) != tolower(b):
            return -1
        if a == "\x00":
            return 0
    return 0


def tokenize(text: str, delimiters: str) -> Iterator[str]:
    """Yield the non-empty runs of ``text`` separated by any delimiter character."""
    delims = set(_c_string(delimiters))
    token: list[str] = []
    for char in _c_string(text):
        if char in delims:
            if token:
                yield "".join(token)
                token = []
        else:
            token.append(char)
    if token:
        yield "".join(token)