"""Parsing of drive-qualified paths such as ``0:/dir/file.txt``."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import takewhile

from .config import MAX_PATH
from .errors import BadPath


@dataclass(frozen=True)
class ParsedPath:
    """A drive number and the path components that follow the root."""

    drive_no: int
    parts: tuple[str, ...] = ()

    @property
    def is_root(self) -> bool:
        return not self.parts


def _c_string(text: str) -> str:
    return text.split("\x00", 1)[0]


def is_valid_format(path: str) -> bool:
    """Whether ``path`` starts with a single digit drive followed by ``:/``."""
    text = _c_string(path)[:MAX_PATH]
    return len(text) >= 3 and "0" <= text[0] <= "9" and text[1:3] == ":/"


def parse_path(path: str, current_directory: str | None = None) -> ParsedPath:
    """Split ``path`` into its drive and components.

    Parsing stops at the first empty component, so ``0:/a//b`` yields only
    ``a``. ``current_directory`` is accepted but relative paths are not
    resolved against it. Raises ``BadPath`` for over-long or malformed paths.
    """
    text = _c_string(path)
    if len(text) > MAX_PATH:
        raise BadPath(f"path longer than {MAX_PATH} characters")
    if not is_valid_format(text):
        raise BadPath(f"malformed path: {text!r}")

    drive_no = ord(text[0]) - ord("0")
    parts = tuple(takewhile(bool, text[3:].split("/")))
    return ParsedPath(drive_no, parts)