"""User-space library helpers: integer conversion and formatted output."""

from __future__ import annotations

import sys
from typing import Optional, TextIO

from .errors import InvalidArgument

_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1


def itoa(value: int) -> str:
    """Decimal text of a 32-bit signed integer."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"not an integer: {value!r}")
    if not _INT_MIN <= value <= _INT_MAX:
        raise InvalidArgument(f"integer out of 32-bit range: {value}")
    return str(value)


def _c_string(text: str) -> str:
    return text.split("\x00", 1)[0]


def format_string(fmt: str, *args: object) -> str:
    """Expand ``%i`` and ``%s``; ``%`` before any other character emits it.

    A ``%`` at the very end of the format emits nothing.
    """
    pieces: list[str] = []
    remaining = iter(args)
    chars = iter(_c_string(fmt))
    for char in chars:
        if char != "%":
            pieces.append(char)
            continue
        spec = next(chars, None)
        if spec is None:
            break
        if spec in "is":
            try:
                arg = next(remaining)
            except StopIteration:
                raise InvalidArgument(f"missing argument for %{spec}") from None
            if spec == "i":
                pieces.append(itoa(arg))
            else:
                if not isinstance(arg, str):
                    raise InvalidArgument(f"%s needs a string, got {arg!r}")
                pieces.append(_c_string(arg))
        else:
            pieces.append(spec)
    return "".join(pieces)


def printf(fmt: str, *args: object, out: Optional[TextIO] = None) -> int:
    """Write the formatted text to ``out`` (standard output by default).

    Returns the number of characters written.
    """
    text = format_string(fmt, *args)
    stream = out if out is not None else sys.stdout
    stream.write(text)
    return len(text)