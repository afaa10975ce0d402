"""PS/2 keyboard driver: scancode translation and caps lock handling."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from .errors import InvalidArgument
from .keyboard import CapsLock, Keyboard, KeyboardRegistry

PS2_PORT = 0x64
PS2_COMMAND_ENABLE_FIRST_PORT = 0xAE
PS2_KEYBOARD_INPUT_PORT = 0x60
PS2_ISR_KEYBOARD_INTERRUPT = 0x21

KEY_RELEASED = 0x80
CAPSLOCK = 0x3A
ARROW_UP = 0x48
ARROW_DOWN = 0x50

# Scan code set 1, indexed by scancode; NUL marks keys with no character.
SCAN_SET_ONE = (
    "\x00\x1b12345"
    "67890-="
    "\x08\tQWERT"
    "YUIOP[]"
    "\r\x00ASDFG"
    "HJKL;'`"
    "\x00\\ZXCVB"
    "NM,./\x00*"
    "\x00 \x00\x00\x00\x00"
    "\x00\x00\x00\x00\x00\x00"
    "\x00789-45"
    "6+1230."
)


@dataclass(eq=False)
class Ps2Keyboard(Keyboard):
    """A PS/2 keyboard that turns scancodes into characters for a sink."""

    name: str = "ps2"
    sink: Optional[Callable[[str], None]] = None

    def init(self) -> None:
        """Prepare the keyboard for input with caps lock off."""
        self.capslock_state = CapsLock.OFF

    def scancode_to_char(self, scancode: int) -> str:
        """Translate a scancode; NUL when the key has no character."""
        if not 0 <= scancode <= 0xFF:
            raise InvalidArgument(f"scancode out of range: {scancode}")
        if scancode >= len(SCAN_SET_ONE):
            return "\x00"
        char = SCAN_SET_ONE[scancode]
        if self.capslock_state == CapsLock.OFF and "A" <= char <= "Z":
            char = char.lower()
        return char

    def handle_scancode(self, scancode: int) -> Optional[str]:
        """Process one scancode from the device.

        Key releases are ignored and the caps lock key toggles its state.
        A resulting character is handed to the sink and returned.
        """
        if not 0 <= scancode <= 0xFF:
            raise InvalidArgument(f"scancode out of range: {scancode}")
        if scancode & KEY_RELEASED:
            return None
        if scancode == CAPSLOCK:
            self.capslock_state = (
                CapsLock.OFF if self.capslock_state == CapsLock.ON else CapsLock.ON
            )
        char = self.scancode_to_char(scancode)
        if char == "\x00":
            return None
        if self.sink is not None:
            self.sink(char)
        return char


def register(
    registry: KeyboardRegistry, sink: Optional[Callable[[str], None]]
) -> Ps2Keyboard:
    """Create a PS/2 keyboard feeding ``sink`` and register it."""
    keyboard = Ps2Keyboard(sink=sink)
    registry.insert(keyboard)
    return keyboard