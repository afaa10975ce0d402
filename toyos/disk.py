"""A sector-addressed disk backed by an in-memory image."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from os import PathLike
from pathlib import Path
from typing import Any, Union

from .config import SECTOR_SIZE
from .errors import InvalidArgument, IOFailure

StrPath = Union[str, "PathLike[str]"]


class DiskType(IntEnum):
    """Kinds of disk the kernel knows about."""

    REAL = 0


@dataclass(eq=False)
class Disk:
    """A disk whose contents live in a byte image.

    ``fs`` and ``fs_private`` are set by the filesystem that claims the disk.
    """

    image: bytearray = field(default_factory=bytearray)
    id: int = 0
    sector_size: int = SECTOR_SIZE
    type: DiskType = DiskType.REAL
    fs: Any = None
    fs_private: Any = None

    def __post_init__(self) -> None:
        self.image = bytearray(self.image)
        if self.sector_size <= 0:
            raise InvalidArgument("sector size must be positive")

    @classmethod
    def from_file(cls, path: StrPath) -> "Disk":
        """Load a disk image from ``path``."""
        return cls(bytearray(Path(path).read_bytes()))

    @property
    def total_sectors(self) -> int:
        """Number of whole sectors in the image."""
        return len(self.image) // self.sector_size

    def _span(self, lba: int, total: int) -> slice:
        if lba < 0 or total < 0:
            raise InvalidArgument("sector address and count must not be negative")
        start = lba * self.sector_size
        end = start + total * self.sector_size
        if end > len(self.image):
            raise IOFailure(f"sectors {lba}..{lba + total - 1} lie beyond the disk")
        return slice(start, end)

    def read_block(self, lba: int, total: int) -> bytes:
        """Return ``total`` sectors starting at sector ``lba``."""
        return bytes(self.image[self._span(lba, total)])

    def write_block(self, lba: int, data: bytes) -> None:
        """Write whole sectors of ``data`` starting at sector ``lba``."""
        if len(data) % self.sector_size:
            raise InvalidArgument("data must be a whole number of sectors")
        span = self._span(lba, len(data) // self.sector_size)
        self.image[span] = data

    def save(self, path: StrPath) -> None:
        """Write the disk image to ``path``."""
        Path(path).write_bytes(bytes(self.image))