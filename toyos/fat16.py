"""The FAT16 filesystem driver."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Optional, Sequence

from .config import MAX_PATH
from .disk import Disk
from .errors import (
    FilesystemNotRecognised,
    InvalidArgument,
    InvalidFormat,
    IOFailure,
    KernelError,
    OutOfMemory,
    ReadOnly,
)
from .fatformat import (
    BAD_SECTOR,
    DIRECTORY_ENTRY_AVAILABLE,
    DIRECTORY_ENTRY_SIZE,
    END_OF_CHAIN,
    FAT_ENTRY_SIZE,
    HEADER_SIZE,
    RESERVED_CLUSTERS,
    SIGNATURE,
    UNUSED,
    Attribute,
    BootSector,
    DirectoryEntry,
    parse_directory,
)
from .fileapi import FileMode, FileStat, Filesystem, SeekMode, StatFlag
from .streamer import DiskStream
from .ustring import istrncmp

END_OF_CHAIN_MARK = 0xFFF

_FAT_VALUE = struct.Struct("<H")

Listing = list[tuple[int, DirectoryEntry]]


@dataclass(eq=False)
class _FatItem:
    """A located directory entry: its parent, its slot there, and its listing."""

    entry: DirectoryEntry
    slot: int
    parent_cluster: Optional[int]
    listing: Optional[Listing] = None

    @property
    def is_directory(self) -> bool:
        return self.entry.is_directory()


class FatVolume:
    """The FAT16 state of one disk: its boot sector, root directory and streams.

    Raises ``FilesystemNotRecognised`` when the boot sector lacks the FAT16
    signature, and ``IOFailure`` when the disk is too small to hold it.
    """

    def __init__(self, disk: Disk) -> None:
        self.disk = disk
        self.cluster_stream = DiskStream(disk)
        self.fat_stream = DiskStream(disk)
        self.directory_stream = DiskStream(disk)

        self.header = BootSector.parse(DiskStream(disk).read(HEADER_SIZE))
        if self.header.signature != SIGNATURE:
            raise FilesystemNotRecognised("no FAT16 signature in the boot sector")
        if self.header.sectors_per_cluster == 0:
            raise InvalidFormat("clusters of zero sectors")

        sector_size = disk.sector_size
        self.root_sector = self.header.root_dir_sector()
        root_size = self.header.root_dir_size()
        self.directory_stream.seek(self.root_sector * sector_size)
        self.root: Listing = parse_directory(self.directory_stream.read(root_size))
        self.data_sector = self.root_sector + root_size // sector_size

    @property
    def cluster_size(self) -> int:
        return self.header.cluster_size(self.disk.sector_size)

    def _cluster_to_sector(self, cluster: int) -> int:
        return self.data_sector + (cluster - 2) * self.header.sectors_per_cluster

    def _fat_position(self, cluster: int) -> int:
        return (
            self.header.reserved_sectors * self.disk.sector_size
            + cluster * FAT_ENTRY_SIZE
        )

    def fat_entry(self, cluster: int) -> int:
        """The FAT table value for ``cluster``."""
        self.fat_stream.seek(self._fat_position(cluster))
        (value,) = _FAT_VALUE.unpack(self.fat_stream.read(FAT_ENTRY_SIZE))
        return value

    def set_fat_entry(self, cluster: int, value: int) -> None:
        """Store ``value`` as the FAT table entry of ``cluster``."""
        self.fat_stream.seek(self._fat_position(cluster))
        self.fat_stream.write(_FAT_VALUE.pack(value & 0xFFFF))

    def cluster_for_offset(self, starting_cluster: int, offset: int) -> int:
        """Follow the chain from ``starting_cluster`` to the cluster holding ``offset``."""
        if offset < 0:
            raise InvalidArgument("offset must not be negative")
        cluster = starting_cluster
        for _ in range(offset // self.cluster_size):
            entry = self.fat_entry(cluster)
            if entry in END_OF_CHAIN:
                raise IOFailure("offset lies past the end of the cluster chain")
            if entry == BAD_SECTOR:
                raise IOFailure(f"cluster {cluster} is followed by a bad sector")
            if entry in RESERVED_CLUSTERS:
                raise IOFailure(f"cluster {cluster} is followed by a reserved cluster")
            if entry == UNUSED:
                raise IOFailure(f"cluster chain broken after cluster {cluster}")
            cluster = entry
        return cluster

    def allocate_cluster(self, current_cluster: int) -> int:
        """Claim the first free cluster, chain it after ``current_cluster`` and return it."""
        for candidate in range(2, self.header.number_of_sectors):
            if self.fat_entry(candidate) == UNUSED:
                self.set_fat_entry(current_cluster, candidate)
                self.set_fat_entry(candidate, END_OF_CHAIN_MARK)
                return candidate
        raise OutOfMemory("no free cluster left")

    def read_data(self, starting_cluster: int, offset: int, total: int) -> bytes:
        """Read ``total`` bytes at ``offset`` of the chain, cluster by cluster."""
        if total < 0:
            raise InvalidArgument("read size must not be negative")
        cluster_size = self.cluster_size
        chunks = []
        while total > 0:
            cluster = self.cluster_for_offset(starting_cluster, offset)
            within = offset % cluster_size
            count = min(total, cluster_size - within)
            self.cluster_stream.seek(
                self._cluster_to_sector(cluster) * self.disk.sector_size + within
            )
            chunks.append(self.cluster_stream.read(count))
            offset += count
            total -= count
        return b"".join(chunks)

    def _count_entries(self, position: int) -> int:
        self.directory_stream.seek(position)
        count = 0
        while True:
            first = self.directory_stream.read(DIRECTORY_ENTRY_SIZE)[0]
            if first == 0x00:
                return count
            if first != DIRECTORY_ENTRY_AVAILABLE:
                count += 1

    def _load_directory(self, entry: DirectoryEntry) -> Listing:
        cluster = entry.first_cluster()
        sector = self._cluster_to_sector(cluster)
        count = self._count_entries(sector * self.disk.sector_size)
        if count == 0:
            return []
        return parse_directory(self.read_data(cluster, 0, count * DIRECTORY_ENTRY_SIZE))

    def _find_in(
        self, listing: Listing, name: str, parent_cluster: Optional[int]
    ) -> Optional[_FatItem]:
        match = None
        for slot, entry in listing:
            if istrncmp(entry.full_name(), name, MAX_PATH) == 0:
                match = (slot, entry)
        if match is None:
            return None
        slot, entry = match
        listing_of_item = self._load_directory(entry) if entry.is_directory() else None
        return _FatItem(entry, slot, parent_cluster, listing_of_item)

    def find(self, parts: Sequence[str]) -> Optional[_FatItem]:
        """Locate the item named by the path components, or None if absent."""
        if not parts:
            raise InvalidArgument("no path to look up")
        item = self._find_in(self.root, parts[0], None)
        for part in parts[1:]:
            if item is None or not item.is_directory:
                return None
            item = self._find_in(item.listing or [], part, item.entry.first_cluster())
        return item

    def _entry_position(self, item: _FatItem) -> int:
        offset = item.slot * DIRECTORY_ENTRY_SIZE
        if item.parent_cluster is None:
            return self.root_sector * self.disk.sector_size + offset
        cluster = self.cluster_for_offset(item.parent_cluster, offset)
        return (
            self._cluster_to_sector(cluster) * self.disk.sector_size
            + offset % self.cluster_size
        )

    def _store_entry(self, item: _FatItem) -> None:
        self.directory_stream.seek(self._entry_position(item))
        self.directory_stream.write(item.entry.pack())

    def _write_at(self, item: _FatItem, pos: int, data: bytes) -> int:
        first = item.entry.first_cluster()
        if data and first < 2:
            raise IOFailure("file has no clusters to write into")
        cluster_size = self.cluster_size
        written = 0
        while written < len(data):
            offset = pos + written
            cluster = self.cluster_for_offset(first, offset)
            within = offset % cluster_size
            count = min(len(data) - written, cluster_size - within)
            self.cluster_stream.seek(
                self._cluster_to_sector(cluster) * self.disk.sector_size + within
            )
            self.cluster_stream.write(data[written : written + count])
            written += count
            if within + count >= cluster_size and self.fat_entry(cluster) in END_OF_CHAIN:
                self.allocate_cluster(cluster)
        return written


@dataclass(eq=False)
class FatFileHandle:
    """An open FAT16 item and the position within it."""

    item: Optional[_FatItem]
    pos: int = 0

    @property
    def closed(self) -> bool:
        return self.item is None

    def _open_item(self) -> _FatItem:
        if self.item is None:
            raise InvalidArgument("handle is closed")
        return self.item

    def _file_item(self) -> _FatItem:
        item = self._open_item()
        if item.is_directory:
            raise InvalidArgument("handle refers to a directory")
        return item


class Fat16(Filesystem):
    """The FAT16 filesystem driver."""

    name = "FAT16"

    def resolve(self, disk: Disk) -> bool:
        """Bind the disk to this driver if it holds a FAT16 volume."""
        try:
            volume = FatVolume(disk)
        except KernelError:
            disk.fs_private = None
            return False
        disk.fs_private = volume
        disk.fs = self
        return True

    @staticmethod
    def _volume(disk: Disk) -> FatVolume:
        if disk is None or not isinstance(disk.fs_private, FatVolume):
            raise InvalidArgument("disk holds no resolved FAT16 volume")
        return disk.fs_private

    def open(self, disk: Disk, parts: Sequence[str], mode: FileMode) -> FatFileHandle:
        """Open a file or directory for reading or writing; appending is refused."""
        if disk is None or parts is None:
            raise InvalidArgument("disk and path are required")
        if mode not in (FileMode.READ, FileMode.WRITE):
            raise InvalidArgument(f"unsupported file mode: {mode!r}")
        item = self._volume(disk).find(tuple(parts))
        if item is None:
            raise IOFailure("no such file or directory")
        return FatFileHandle(item)

    def read(self, disk: Disk, handle: FatFileHandle, size: int, nmemb: int) -> bytes:
        """Read ``nmemb`` elements of ``size`` bytes at the handle's position.

        The position is not advanced. Any failure during the read yields
        no data at all.
        """
        if handle is None:
            raise InvalidArgument("no handle")
        volume = self._volume(disk)
        item = handle._file_item()
        if size < 0 or nmemb < 0:
            raise InvalidArgument("size and count must not be negative")
        try:
            return volume.read_data(item.entry.first_cluster(), handle.pos, size * nmemb)
        except KernelError:
            return b""

    def write(self, disk: Disk, handle: FatFileHandle, data: bytes) -> int:
        """Write at the handle's position, growing the file and its chain as needed."""
        if handle is None or data is None:
            raise InvalidArgument("handle and data are required")
        volume = self._volume(disk)
        item = handle._file_item()
        if item.entry.attribute & Attribute.READ_ONLY:
            raise ReadOnly("file is read-only")
        try:
            written = volume._write_at(item, handle.pos, bytes(data))
            if handle.pos + written > item.entry.filesize:
                item.entry.filesize = handle.pos + written
            volume._store_entry(item)
        except KernelError as exc:
            raise IOFailure(str(exc)) from exc
        handle.pos += written
        return written

    def seek(self, handle: FatFileHandle, offset: int, whence: SeekMode) -> None:
        """Move the position; the offset may not exceed the file size."""
        if handle is None:
            raise InvalidArgument("no handle")
        item = handle._file_item()
        filesize = item.entry.filesize
        if offset < 0 or offset > filesize:
            raise IOFailure(f"offset {offset} outside file of {filesize} bytes")
        try:
            mode = SeekMode(whence)
        except ValueError:
            raise InvalidArgument(f"unknown seek mode: {whence!r}") from None
        if mode is SeekMode.SET:
            handle.pos = offset
        elif mode is SeekMode.CUR:
            handle.pos += offset
        else:
            handle.pos = filesize + offset

    def stat(self, disk: Disk, handle: FatFileHandle) -> FileStat:
        """Size and read-only flag of an open file."""
        if disk is None or handle is None:
            raise InvalidArgument("disk and handle are required")
        entry = handle._file_item().entry
        flags = StatFlag.READ_ONLY if entry.attribute & Attribute.READ_ONLY else StatFlag.NONE
        return FileStat(flags=flags, filesize=entry.filesize)

    def close(self, handle: FatFileHandle) -> None:
        """Release the handle; it cannot be used afterwards."""
        if handle is None:
            raise InvalidArgument("no handle")
        handle._open_item()
        handle.item = None