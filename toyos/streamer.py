"""Byte-granular reading and writing on top of a sector disk."""

from __future__ import annotations

from .disk import Disk
from .errors import InvalidArgument


class DiskStream:
    """A cursor over a disk that reads and writes arbitrary byte ranges."""

    def __init__(self, disk: Disk, pos: int = 0) -> None:
        if disk is None:
            raise InvalidArgument("a stream needs a disk")
        self.disk = disk
        self.pos = 0
        self.seek(pos)

    def __repr__(self) -> str:
        return f"DiskStream(disk_id={self.disk.id}, pos={self.pos})"

    def seek(self, pos: int) -> None:
        """Move the stream to byte offset ``pos``."""
        if pos < 0:
            raise InvalidArgument("stream position must not be negative")
        self.pos = pos

    def _sector_spans(self, total: int):
        """Yield (sector, offset, count) for the next ``total`` bytes, advancing pos."""
        sector_size = self.disk.sector_size
        remaining = total
        while remaining > 0:
            sector, offset = divmod(self.pos, sector_size)
            count = min(remaining, sector_size - offset)
            yield sector, offset, count
            self.pos += count
            remaining -= count

    def read(self, total: int) -> bytes:
        """Read ``total`` bytes from the current position."""
        if total < 0:
            raise InvalidArgument("read size must not be negative")
        chunks = [
            self.disk.read_block(sector, 1)[offset : offset + count]
            for sector, offset, count in self._sector_spans(total)
        ]
        return b"".join(chunks)

    def write(self, data: bytes) -> None:
        """Write ``data`` at the current position, preserving surrounding bytes."""
        if data is None:
            raise InvalidArgument("nothing to write")
        view = memoryview(bytes(data))
        sector_size = self.disk.sector_size
        done = 0
        for sector, offset, count in self._sector_spans(len(view)):
            if offset == 0 and count == sector_size:
                block = bytearray(view[done : done + count])
            else:
                block = bytearray(self.disk.read_block(sector, 1))
                block[offset : offset + count] = view[done : done + count]
            self.disk.write_block(sector, bytes(block))
            done += count