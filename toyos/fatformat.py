"""On-disk structures of the FAT16 filesystem: boot sector and directory entries."""

from __future__ import annotations

import struct
from dataclasses import astuple, dataclass
from enum import IntFlag
from itertools import takewhile

from .errors import InvalidArgument, InvalidFormat

SIGNATURE = 0x29
FAT_ENTRY_SIZE = 0x02
BAD_SECTOR = 0xFF7
UNUSED = 0x00
DIRECTORY_ENTRY_AVAILABLE = 0xE5
END_OF_CHAIN = (0xFF8, 0xFFF)
RESERVED_CLUSTERS = (0xFF0, 0xFF6)

_HEADER = struct.Struct("<3s8sHBHBHHBHHHIIBBBI11s8s")
HEADER_SIZE = _HEADER.size

_ENTRY = struct.Struct("<8s3sBBBHHHHHHHI")
DIRECTORY_ENTRY_SIZE = _ENTRY.size


class Attribute(IntFlag):
    """Attribute bits of a directory entry."""

    NONE = 0x00
    READ_ONLY = 0x01
    HIDDEN = 0x02
    SYSTEM = 0x04
    VOLUME_LABEL = 0x08
    SUBDIRECTORY = 0x10
    ARCHIVED = 0x20
    DEVICE = 0x40
    RESERVED = 0x80


@dataclass
class BootSector:
    """The primary and extended FAT16 boot sector headers."""

    short_jmp_ins: bytes = b"\x00" * 3
    oem_identifier: bytes = b"\x00" * 8
    bytes_per_sector: int = 512
    sectors_per_cluster: int = 1
    reserved_sectors: int = 1
    fat_copies: int = 2
    root_dir_entries: int = 0
    number_of_sectors: int = 0
    media_type: int = 0
    sectors_per_fat: int = 0
    sectors_per_track: int = 0
    number_of_heads: int = 0
    hidden_sectors: int = 0
    sectors_big: int = 0
    drive_number: int = 0
    win_nt_bit: int = 0
    signature: int = SIGNATURE
    volume_id: int = 0
    volume_id_string: bytes = b"\x00" * 11
    system_id_string: bytes = b"\x00" * 8

    @classmethod
    def parse(cls, data: bytes) -> "BootSector":
        """Decode the headers from the start of ``data``."""
        data = bytes(data)
        if len(data) < HEADER_SIZE:
            raise InvalidFormat(f"boot sector needs {HEADER_SIZE} bytes")
        return cls(*_HEADER.unpack_from(data))

    def pack(self) -> bytes:
        """Encode the headers in their on-disk layout."""
        try:
            return _HEADER.pack(*astuple(self))
        except struct.error as exc:
            raise InvalidArgument(f"boot sector field out of range: {exc}") from None

    def root_dir_sector(self) -> int:
        """First sector of the root directory."""
        return self.fat_copies * self.sectors_per_fat + self.reserved_sectors

    def root_dir_size(self) -> int:
        """Size of the root directory in bytes."""
        return self.root_dir_entries * DIRECTORY_ENTRY_SIZE

    def cluster_size(self, sector_size: int) -> int:
        """Size of one cluster in bytes."""
        return self.sectors_per_cluster * sector_size


@dataclass
class DirectoryEntry:
    """A 32-byte FAT16 directory entry."""

    filename: bytes = b"\x00" * 8
    ext: bytes = b"\x00" * 3
    attribute: Attribute = Attribute.NONE
    reserved: int = 0
    creation_time_tenths_of_a_sec: int = 0
    creation_time: int = 0
    creation_date: int = 0
    last_access: int = 0
    high_16_bits_first_cluster: int = 0
    last_mod_time: int = 0
    last_mod_date: int = 0
    low_16_bits_first_cluster: int = 0
    filesize: int = 0

    def __post_init__(self) -> None:
        self.attribute = Attribute(self.attribute)

    @classmethod
    def parse(cls, data: bytes) -> "DirectoryEntry":
        """Decode an entry from the start of ``data``."""
        data = bytes(data)
        if len(data) < DIRECTORY_ENTRY_SIZE:
            raise InvalidFormat(f"directory entry needs {DIRECTORY_ENTRY_SIZE} bytes")
        return cls(*_ENTRY.unpack_from(data))

    def pack(self) -> bytes:
        """Encode the entry in its on-disk layout."""
        try:
            return _ENTRY.pack(*astuple(self))
        except struct.error as exc:
            raise InvalidArgument(f"directory entry field out of range: {exc}") from None

    def first_cluster(self) -> int:
        """The entry's first cluster, combining both halves with a bitwise OR."""
        return self.high_16_bits_first_cluster | self.low_16_bits_first_cluster

    def is_directory(self) -> bool:
        return bool(self.attribute & Attribute.SUBDIRECTORY)

    def full_name(self) -> str:
        """The name as ``NAME.EXT``, without padding; no dot when there is no extension."""
        name = proper_string(self.filename)
        if self.ext and self.ext[0] not in (0x00, 0x20):
            name += "." + proper_string(self.ext)
        return name


def proper_string(raw: bytes) -> str:
    """The characters of a padded name field before the first NUL or space."""
    return bytes(takewhile(lambda b: b not in (0x00, 0x20), raw)).decode("latin-1")


def parse_directory(data: bytes) -> list[tuple[int, DirectoryEntry]]:
    """Return ``(slot, entry)`` for each live entry before the end marker.

    Slots are entry indexes within ``data``; deleted entries are skipped and
    a trailing partial entry is ignored.
    """
    data = bytes(data)
    usable = len(data) - len(data) % DIRECTORY_ENTRY_SIZE
    entries: list[tuple[int, DirectoryEntry]] = []
    for slot, values in enumerate(_ENTRY.iter_unpack(data[:usable])):
        first = values[0][0]
        if first == 0x00:
            break
        if first == DIRECTORY_ENTRY_AVAILABLE:
            continue
        entries.append((slot, DirectoryEntry(*values)))
    return entries