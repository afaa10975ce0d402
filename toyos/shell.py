"""Command parsing, line input and the small user programs of the shell."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import islice
from typing import Callable, Iterable, Optional, Union

from .config import MAX_PROCESSES
from .errors import InvalidArgument
from .ulib import format_string, itoa
from .ustring import strncpy, tokenize

PROMPT = "ToyOS $ "
COMMAND_BUFFER_SIZE = 1025
ARGUMENT_SIZE = 512
PROCESS_FILENAME_SIZE = 64
CARRIAGE_RETURN = "\r"
BACKSPACE = "\x08"
ECHO_USAGE = "[Err-1] Usage: echo < string >\n\n"


@dataclass
class ProcessInfo:
    """A process id and the file it was loaded from; a negative id is a free slot."""

    id: int
    filename: str = ""

    def __post_init__(self) -> None:
        self.filename = strncpy(self.filename, PROCESS_FILENAME_SIZE)


def parse_command(command: str, limit: int) -> list[str]:
    """Split a command line on spaces into its arguments.

    The command is cut to the command buffer and each argument to the
    argument buffer. Raises ``InvalidArgument`` if ``limit`` does not fit
    the command buffer.
    """
    if limit >= COMMAND_BUFFER_SIZE:
        raise InvalidArgument(f"command limit {limit} exceeds the command buffer")
    text = strncpy(command, COMMAND_BUFFER_SIZE)
    return [strncpy(token, ARGUMENT_SIZE) for token in tokenize(text, " ")]


def _next_key(getkey: Callable[[], Union[str, int]]) -> str:
    """Wait for a key, skipping empty results."""
    while True:
        key = getkey()
        if isinstance(key, int):
            key = chr(key)
        if key and key != "\x00":
            return key


def read_line(
    getkey: Callable[[], Union[str, int]],
    limit: int,
    putchar: Optional[Callable[[str], object]] = None,
) -> str:
    """Read keys until a carriage return or ``limit - 1`` characters.

    Each key is echoed to ``putchar`` when given. Backspace removes the last
    character; a backspace on an empty line is kept as a character.
    """
    line: list[str] = []
    while len(line) < limit - 1:
        key = _next_key(getkey)
        if key == CARRIAGE_RETURN:
            break
        if putchar is not None:
            putchar(key)
        if key == BACKSPACE and line:
            line.pop()
            continue
        line.append(key)
    return "".join(line)


def run_echo(argv: list[str]) -> tuple[int, str]:
    """Run the echo program; return its exit status and the text it prints."""
    if len(argv) == 1:
        return -1, ECHO_USAGE
    words = "".join(format_string("%s ", arg) for arg in argv[1:])
    return 0, words + "\n\n"


def format_process_table(processes: Iterable[ProcessInfo]) -> str:
    """Render the process list as the ps program prints it."""
    live = [p for p in islice(processes, MAX_PROCESSES) if p.id >= 0]
    width = max((len(itoa(p.id)) for p in live), default=0)
    padding = strncpy("     ", width)
    lines = [
        format_string(" PID  %sPATH\n", padding),
        format_string(" ---  %s----\n", padding),
    ]
    lines.extend(
        format_string("  %i   %s%s\n", p.id, p.filename, padding) for p in live
    )
    return "".join(lines) + "\n"