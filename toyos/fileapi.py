"""File modes, seek modes, file status and the filesystem driver interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum, IntFlag
from typing import Any


class FileMode(IntEnum):
    """How a file is opened."""

    READ = 0
    WRITE = 1
    APPEND = 2
    INVALID = 3

    @classmethod
    def from_string(cls, text: str) -> "FileMode":
        """Map a mode string by its first letter: ``r``, ``w`` or ``a``."""
        return {"r": cls.READ, "w": cls.WRITE, "a": cls.APPEND}.get(
            text[:1], cls.INVALID
        )


class SeekMode(IntEnum):
    """Reference point for a seek offset."""

    SET = 0
    CUR = 1
    END = 2


class StatFlag(IntFlag):
    """Flags reported in a file's status."""

    NONE = 0
    READ_ONLY = 0b00000001


@dataclass
class FileStat:
    """Size and flags of an open file."""

    flags: StatFlag = StatFlag.NONE
    filesize: int = 0

    @property
    def read_only(self) -> bool:
        return bool(self.flags & StatFlag.READ_ONLY)


class Filesystem(ABC):
    """A filesystem driver that the virtual file layer dispatches to.

    Operations raise ``KernelError`` subclasses on failure.
    """

    name: str = ""

    @abstractmethod
    def resolve(self, disk: Any) -> bool:
        """Return True if ``disk`` holds this filesystem, binding it to the disk."""

    @abstractmethod
    def open(self, disk: Any, parts: tuple[str, ...], mode: FileMode) -> Any:
        """Open the file named by ``parts`` and return a driver handle."""

    @abstractmethod
    def read(self, disk: Any, handle: Any, size: int, nmemb: int) -> bytes:
        """Read ``nmemb`` elements of ``size`` bytes from the handle."""

    @abstractmethod
    def write(self, disk: Any, handle: Any, data: bytes) -> int:
        """Write ``data`` at the handle's position and return the bytes written."""

    @abstractmethod
    def seek(self, handle: Any, offset: int, whence: SeekMode) -> None:
        """Move the handle's position."""

    @abstractmethod
    def stat(self, disk: Any, handle: Any) -> FileStat:
        """Return the status of the open file."""

    @abstractmethod
    def close(self, handle: Any) -> None:
        """Release the handle."""