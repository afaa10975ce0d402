"""The virtual file layer: filesystem registry, disk binding and descriptors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from .config import MAX_FILE_DESCRIPTORS, MAX_FILESYSTEMS
from .disk import Disk
from .errors import BadPath, InvalidArgument, IOFailure, NoFileMemory, OutOfMemory
from .fat16 import Fat16
from .fileapi import FileMode, FileStat, Filesystem, SeekMode
from .pathparser import parse_path


@dataclass(eq=False)
class _Descriptor:
    """An open file: its number, its driver, the driver's handle and the disk."""

    index: int
    fs: Filesystem
    handle: Any
    disk: Disk


class VirtualFileSystem:
    """Dispatches file operations to the filesystem that owns each disk.

    With no ``filesystems`` given, the FAT16 driver is registered.
    Descriptor numbers start at 1.
    """

    def __init__(self, filesystems: Optional[Iterable[Filesystem]] = None) -> None:
        self._filesystems: list[Filesystem] = []
        self._descriptors: dict[int, _Descriptor] = {}
        self._disk: Optional[Disk] = None
        for filesystem in filesystems if filesystems is not None else (Fat16(),):
            self.insert_filesystem(filesystem)

    @property
    def filesystems(self) -> tuple[Filesystem, ...]:
        return tuple(self._filesystems)

    def insert_filesystem(self, filesystem: Filesystem) -> None:
        """Register a filesystem driver; fails when every slot is taken."""
        if filesystem is None:
            raise InvalidArgument("no filesystem to insert")
        if len(self._filesystems) >= MAX_FILESYSTEMS:
            raise OutOfMemory("problem inserting filesystem: no free slot")
        self._filesystems.append(filesystem)

    def resolve(self, disk: Disk) -> Optional[Filesystem]:
        """The first registered filesystem that recognises ``disk``, or None."""
        return next((fs for fs in self._filesystems if fs.resolve(disk)), None)

    def attach_disk(self, disk: Disk) -> Optional[Filesystem]:
        """Make ``disk`` the primary disk and bind the filesystem that claims it."""
        disk.id = 0
        disk.fs = self.resolve(disk)
        self._disk = disk
        return disk.fs

    def get_disk(self, index: int) -> Optional[Disk]:
        """The disk with ``index``; only the primary disk, index 0, exists."""
        return self._disk if index == 0 else None

    def _free_index(self) -> Optional[int]:
        return next(
            (
                index
                for index in range(1, MAX_FILE_DESCRIPTORS + 1)
                if index not in self._descriptors
            ),
            None,
        )

    def _descriptor(self, fd: int) -> _Descriptor:
        if fd <= 0 or fd >= MAX_FILE_DESCRIPTORS:
            raise InvalidArgument(f"invalid file descriptor: {fd}")
        descriptor = self._descriptors.get(fd)
        if descriptor is None:
            raise InvalidArgument(f"file descriptor {fd} is not open")
        return descriptor

    def fopen(self, filename: str, mode: str) -> int:
        """Open ``filename`` (such as ``0:/dir/file.txt``) and return its descriptor."""
        try:
            path = parse_path(filename)
        except BadPath as exc:
            raise InvalidArgument(str(exc)) from exc
        if path.is_root:
            raise InvalidArgument("cannot open a bare drive root")

        disk = self.get_disk(path.drive_no)
        if disk is None or disk.fs is None:
            raise IOFailure(f"no usable disk {path.drive_no}")

        file_mode = FileMode.from_string(mode)
        if file_mode is FileMode.INVALID:
            raise IOFailure(f"invalid file mode: {mode!r}")

        handle = disk.fs.open(disk, path.parts, file_mode)
        index = self._free_index()
        if index is None:
            disk.fs.close(handle)
            raise NoFileMemory("no free file descriptor")
        self._descriptors[index] = _Descriptor(index, disk.fs, handle, disk)
        return index

    def fread(self, size: int, nmemb: int, fd: int) -> bytes:
        """Read ``nmemb`` elements of ``size`` bytes from the open file."""
        if size == 0 or nmemb == 0 or fd < 0:
            raise InvalidArgument("size, count and descriptor must be valid")
        descriptor = self._descriptor(fd)
        return descriptor.fs.read(descriptor.disk, descriptor.handle, size, nmemb)

    def fwrite(self, data: bytes, size: int, nmemb: int, fd: int) -> int:
        """Write ``nmemb`` elements of ``size`` bytes taken from ``data``."""
        if size == 0 or nmemb == 0 or fd < 0:
            raise InvalidArgument("size, count and descriptor must be valid")
        descriptor = self._descriptor(fd)
        total = size * nmemb
        payload = bytes(data)
        if len(payload) < total:
            raise InvalidArgument(f"need {total} bytes, got {len(payload)}")
        return descriptor.fs.write(descriptor.disk, descriptor.handle, payload[:total])

    def fseek(self, fd: int, offset: int, whence: SeekMode) -> None:
        """Move the position of the open file."""
        if fd < 0:
            raise InvalidArgument("descriptor must not be negative")
        descriptor = self._descriptor(fd)
        descriptor.fs.seek(descriptor.handle, offset, whence)

    def fstat(self, fd: int) -> FileStat:
        """Size and flags of the open file."""
        if fd < 0:
            raise InvalidArgument("descriptor must not be negative")
        descriptor = self._descriptor(fd)
        return descriptor.fs.stat(descriptor.disk, descriptor.handle)

    def fclose(self, fd: int) -> None:
        """Close the file and free its descriptor number."""
        if fd < 0:
            raise InvalidArgument("descriptor must not be negative")
        descriptor = self._descriptor(fd)
        descriptor.fs.close(descriptor.handle)
        del self._descriptors[fd]