import dataclasses
import struct

import pytest

from toyos.disk import Disk
from toyos.errors import InvalidArgument, IOFailure, OutOfMemory, ReadOnly
from toyos.fat16 import Fat16, FatFileHandle, FatVolume
from toyos.fatformat import HEADER_SIZE, Attribute, BootSector, DirectoryEntry
from toyos.fileapi import FileMode, SeekMode

SS = 512
BIG = (bytes(range(256)) * 3)[:600]


def _entry(name, ext, cluster, size, attr=Attribute.NONE):
    return DirectoryEntry(
        filename=name.encode().ljust(8, b" "),
        ext=ext.encode().ljust(3, b" "),
        attribute=attr,
        low_16_bits_first_cluster=cluster,
        filesize=size,
    )


def _cluster_offset(cluster):
    # reserved 1 + fat 1 + root 1 -> data starts at sector 3 with cluster 2
    return SS * (cluster + 1)


def build_image(number_of_sectors=20, deleted=False, signature=None):
    boot = BootSector(
        sectors_per_cluster=1,
        reserved_sectors=1,
        fat_copies=1,
        sectors_per_fat=1,
        root_dir_entries=16,
        number_of_sectors=number_of_sectors,
    )
    if signature is not None:
        boot = dataclasses.replace(boot, signature=signature)
    image = bytearray(SS * 32)
    image[:HEADER_SIZE] = boot.pack()
    for cluster, value in {2: 0xFFF, 3: 4, 4: 0xFFF, 5: 0xFFF, 6: 0xFFF, 7: 0xFFF}.items():
        struct.pack_into("<H", image, SS + 2 * cluster, value)

    root = []
    if deleted:
        gone = _entry("GONE", "TXT", 9, 3)
        gone.filename = b"\xe5" + gone.filename[1:]
        root.append(gone)
    root += [
        _entry("HELLO", "TXT", 2, 5),
        _entry("BIG", "BIN", 3, 600),
        _entry("SUBDIR", "", 5, 0, Attribute.SUBDIRECTORY),
        _entry("RO", "TXT", 7, 4, Attribute.READ_ONLY),
    ]
    root_bytes = b"".join(e.pack() for e in root)
    image[2 * SS : 2 * SS + len(root_bytes)] = root_bytes

    image[_cluster_offset(2) : _cluster_offset(2) + 5] = b"01234"
    image[_cluster_offset(3) : _cluster_offset(3) + 600] = BIG
    inner = _entry("INNER", "TXT", 6, 5).pack()
    image[_cluster_offset(5) : _cluster_offset(5) + len(inner)] = inner
    image[_cluster_offset(6) : _cluster_offset(6) + 5] = b"inner"
    image[_cluster_offset(7) : _cluster_offset(7) + 4] = b"ro!!"
    return image


@pytest.fixture
def mounted():
    disk = Disk(build_image())
    fs = Fat16()
    assert fs.resolve(disk)
    return fs, disk


def test_resolve_binds_disk():
    disk = Disk(build_image())
    fs = Fat16()
    assert fs.resolve(disk) is True
    assert disk.fs is fs
    assert isinstance(disk.fs_private, FatVolume)
    assert fs.name == "FAT16"


def test_resolve_rejects_bad_signature():
    disk = Disk(build_image(signature=0))
    assert Fat16().resolve(disk) is False
    assert disk.fs_private is None
    assert disk.fs is None


def test_resolve_rejects_short_disk():
    disk = Disk(bytearray(100))
    assert Fat16().resolve(disk) is False


def test_open_and_read(mounted):
    fs, disk = mounted
    handle = fs.open(disk, ("HELLO.TXT",), FileMode.READ)
    assert fs.read(disk, handle, 5, 1) == b"01234"
    assert fs.read(disk, handle, 1, 5) == b"01234"
    assert handle.pos == 0


def test_names_match_case_insensitively(mounted):
    fs, disk = mounted
    handle = fs.open(disk, ("hello.txt",), FileMode.READ)
    assert fs.read(disk, handle, 5, 1) == b"01234"


def test_read_follows_cluster_chain(mounted):
    fs, disk = mounted
    handle = fs.open(disk, ("BIG.BIN",), FileMode.READ)
    assert fs.read(disk, handle, 600, 1) == BIG


def test_read_in_subdirectory(mounted):
    fs, disk = mounted
    handle = fs.open(disk, ("SUBDIR", "INNER.TXT"), FileMode.READ)
    assert fs.read(disk, handle, 5, 1) == b"inner"


def test_read_past_chain_yields_nothing(mounted):
    fs, disk = mounted
    handle = fs.open(disk, ("HELLO.TXT",), FileMode.READ)
    assert fs.read(disk, handle, 600, 1) == b""


def test_open_errors(mounted):
    fs, disk = mounted
    with pytest.raises(IOFailure):
        fs.open(disk, ("MISSING.TXT",), FileMode.READ)
    with pytest.raises(IOFailure):
        fs.open(disk, ("HELLO.TXT", "X"), FileMode.READ)
    with pytest.raises(InvalidArgument):
        fs.open(disk, ("HELLO.TXT",), FileMode.APPEND)
    with pytest.raises(InvalidArgument):
        fs.open(disk, (), FileMode.READ)


def test_deleted_entries_are_hidden():
    disk = Disk(build_image(deleted=True))
    fs = Fat16()
    assert fs.resolve(disk)
    with pytest.raises(IOFailure):
        fs.open(disk, ("GONE.TXT",), FileMode.READ)
    handle = fs.open(disk, ("HELLO.TXT",), FileMode.READ)
    assert fs.read(disk, handle, 5, 1) == b"01234"


def test_seek_modes(mounted):
    fs, disk = mounted
    handle = fs.open(disk, ("HELLO.TXT",), FileMode.READ)
    fs.seek(handle, 2, SeekMode.SET)
    assert fs.read(disk, handle, 3, 1) == b"234"
    fs.seek(handle, 1, SeekMode.CUR)
    assert handle.pos == 3
    fs.seek(handle, 0, SeekMode.END)
    assert handle.pos == 5


def test_seek_errors(mounted):
    fs, disk = mounted
    handle = fs.open(disk, ("HELLO.TXT",), FileMode.READ)
    with pytest.raises(IOFailure):
        fs.seek(handle, 6, SeekMode.SET)
    with pytest.raises(IOFailure):
        fs.seek(handle, -1, SeekMode.SET)
    with pytest.raises(InvalidArgument):
        fs.seek(handle, 0, 7)


def test_directory_handles_reject_seek_and_stat(mounted):
    fs, disk = mounted
    handle = fs.open(disk, ("SUBDIR",), FileMode.READ)
    with pytest.raises(InvalidArgument):
        fs.seek(handle, 0, SeekMode.SET)
    with pytest.raises(InvalidArgument):
        fs.stat(disk, handle)


def test_stat(mounted):
    fs, disk = mounted
    plain = fs.stat(disk, fs.open(disk, ("HELLO.TXT",), FileMode.READ))
    assert plain.filesize == 5
    assert plain.read_only is False
    locked = fs.stat(disk, fs.open(disk, ("RO.TXT",), FileMode.READ))
    assert locked.filesize == 4
    assert locked.read_only is True


def test_write_overwrites_and_persists(mounted):
    fs, disk = mounted
    handle = fs.open(disk, ("HELLO.TXT",), FileMode.WRITE)
    assert fs.write(disk, handle, b"ab") == 2
    assert handle.pos == 2
    assert fs.stat(disk, handle).filesize == 5

    other = Fat16()
    assert other.resolve(disk)
    reopened = other.open(disk, ("HELLO.TXT",), FileMode.READ)
    assert other.read(disk, reopened, 5, 1) == b"ab234"


@pytest.mark.parametrize("deleted", [False, True])
def test_write_extends_file_size_on_disk(deleted):
    disk = Disk(build_image(deleted=deleted))
    fs = Fat16()
    assert fs.resolve(disk)
    handle = fs.open(disk, ("HELLO.TXT",), FileMode.WRITE)
    fs.seek(handle, 0, SeekMode.END)
    assert fs.write(disk, handle, b"567") == 3
    assert fs.stat(disk, handle).filesize == 8

    other = Fat16()
    assert other.resolve(disk)
    reopened = other.open(disk, ("HELLO.TXT",), FileMode.READ)
    assert other.stat(disk, reopened).filesize == 8
    assert other.read(disk, reopened, 8, 1) == b"01234567"


def test_write_allocates_new_cluster(mounted):
    fs, disk = mounted
    volume = disk.fs_private
    payload = bytes(range(200)) * 3
    handle = fs.open(disk, ("HELLO.TXT",), FileMode.WRITE)
    fs.seek(handle, 5, SeekMode.SET)
    assert fs.write(disk, handle, payload) == len(payload)
    assert fs.stat(disk, handle).filesize == 5 + len(payload)

    added = volume.fat_entry(2)
    assert added not in (0, 0xFFF, 3, 4, 5, 6, 7)
    assert volume.fat_entry(added) == 0xFFF

    fs.seek(handle, 5, SeekMode.SET)
    assert fs.read(disk, handle, len(payload), 1) == payload
    big = fs.open(disk, ("BIG.BIN",), FileMode.READ)
    assert fs.read(disk, big, 600, 1) == BIG


def test_write_in_subdirectory_persists(mounted):
    fs, disk = mounted
    handle = fs.open(disk, ("SUBDIR", "INNER.TXT"), FileMode.WRITE)
    fs.seek(handle, 0, SeekMode.END)
    fs.write(disk, handle, b"++")

    other = Fat16()
    assert other.resolve(disk)
    reopened = other.open(disk, ("SUBDIR", "INNER.TXT"), FileMode.READ)
    assert other.stat(disk, reopened).filesize == 7
    assert other.read(disk, reopened, 7, 1) == b"inner++"


def test_write_read_only_refused(mounted):
    fs, disk = mounted
    handle = fs.open(disk, ("RO.TXT",), FileMode.WRITE)
    with pytest.raises(ReadOnly):
        fs.write(disk, handle, b"x")
    assert fs.read(disk, handle, 4, 1) == b"ro!!"


def test_close(mounted):
    fs, disk = mounted
    handle = fs.open(disk, ("HELLO.TXT",), FileMode.READ)
    fs.close(handle)
    assert handle.closed is True
    with pytest.raises(InvalidArgument):
        fs.read(disk, handle, 1, 1)
    with pytest.raises(InvalidArgument):
        fs.close(handle)


def test_fat_entry_round_trip(mounted):
    _, disk = mounted
    volume = disk.fs_private
    volume.set_fat_entry(10, 0x1234)
    assert volume.fat_entry(10) == 0x1234
    assert volume.fat_entry(3) == 4


def test_cluster_for_offset(mounted):
    _, disk = mounted
    volume = disk.fs_private
    assert volume.cluster_for_offset(3, 0) == 3
    assert volume.cluster_for_offset(3, 512) == 4
    with pytest.raises(IOFailure):
        volume.cluster_for_offset(3, 1024)


@pytest.mark.parametrize("entry", [0xFF7, 0xFF0, 0xFF6, 0x000, 0xFF8])
def test_cluster_for_offset_rejects_special_entries(mounted, entry):
    _, disk = mounted
    volume = disk.fs_private
    volume.set_fat_entry(2, entry)
    with pytest.raises(IOFailure):
        volume.cluster_for_offset(2, 512)


def test_allocate_cluster_links_chain(mounted):
    _, disk = mounted
    volume = disk.fs_private
    added = volume.allocate_cluster(4)
    assert volume.fat_entry(4) == added
    assert volume.fat_entry(added) == 0xFFF
    assert volume.cluster_for_offset(3, 1024) == added


def test_allocate_cluster_when_full():
    disk = Disk(build_image(number_of_sectors=8))
    assert Fat16().resolve(disk)
    with pytest.raises(OutOfMemory):
        disk.fs_private.allocate_cluster(2)


def test_read_data_spans_clusters(mounted):
    _, disk = mounted
    volume = disk.fs_private
    assert volume.read_data(3, 510, 4) == BIG[510:514]
    with pytest.raises(InvalidArgument):
        volume.read_data(3, 0, -1)


def test_find(mounted):
    _, disk = mounted
    volume = disk.fs_private
    item = volume.find(("SUBDIR", "INNER.TXT"))
    assert item.entry.full_name() == "INNER.TXT"
    assert volume.find(("NOPE",)) is None
    assert volume.find(("SUBDIR",)).is_directory is True


def test_handle_starts_at_zero(mounted):
    fs, disk = mounted
    handle = fs.open(disk, ("BIG.BIN",), FileMode.READ)
    assert isinstance(handle, FatFileHandle)
    assert handle.pos == 0
    assert handle.closed is False