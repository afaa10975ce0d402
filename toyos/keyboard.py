"""Keyboard devices, their registry and the per-process input buffer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable, Iterator, Optional

from .config import KEYBOARD_BUFFER_SIZE
from .errors import InvalidArgument, KernelError


class CapsLock(IntEnum):
    """State of the caps lock key."""

    OFF = 0
    ON = 1


@dataclass(eq=False)
class Keyboard:
    """A keyboard device.

    ``initializer`` performs device set-up; drivers may instead override
    :meth:`init`.
    """

    name: str = ""
    capslock_state: CapsLock = CapsLock.OFF
    initializer: Optional[Callable[[], None]] = None

    def init(self) -> None:
        """Initialise the device; raises on failure."""
        if self.initializer is None:
            raise InvalidArgument(f"keyboard {self.name!r} has no initializer")
        self.initializer()

    def _can_init(self) -> bool:
        return self.initializer is not None or type(self).init is not Keyboard.init


class KeyboardRegistry:
    """The ordered list of registered keyboard devices."""

    def __init__(self) -> None:
        self._keyboards: list[Keyboard] = []

    def __iter__(self) -> Iterator[Keyboard]:
        return iter(self._keyboards)

    def __len__(self) -> int:
        return len(self._keyboards)

    def insert(self, keyboard: Keyboard) -> None:
        """Register ``keyboard`` and initialise it.

        A keyboard without an initializer is rejected. A keyboard whose
        initialisation fails stays registered and the error propagates.
        """
        if keyboard is None or not keyboard._can_init():
            raise InvalidArgument("keyboard cannot be initialised")
        self._keyboards.append(keyboard)
        keyboard.init()

    def init_all(self) -> list[Keyboard]:
        """Initialise every keyboard in order; return those that failed."""
        failed = []
        for keyboard in self._keyboards:
            try:
                keyboard.init()
            except KernelError:
                failed.append(keyboard)
        return failed


@dataclass
class KeyboardBuffer:
    """A process's ring buffer of typed characters; an empty slot holds NUL."""

    size: int = KEYBOARD_BUFFER_SIZE
    head: int = 0
    tail: int = 0
    slots: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.size <= 0:
            raise InvalidArgument("buffer size must be positive")
        if not self.slots:
            self.slots = ["\x00"] * self.size

    def push(self, char: str) -> None:
        """Append a character at the tail."""
        if len(char) != 1:
            raise InvalidArgument("exactly one character is pushed at a time")
        self.slots[self.tail % self.size] = char
        self.tail += 1

    def pop(self) -> Optional[str]:
        """Take the character at the head, or None if the slot is empty."""
        index = self.head % self.size
        char = self.slots[index]
        if char == "\x00":
            return None
        self.slots[index] = "\x00"
        self.head += 1
        return char

    def backspace(self) -> None:
        """Remove the most recently pushed character."""
        self.tail -= 1
        self.slots[self.tail % self.size] = "\x00"