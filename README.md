# toyos

A small library for working with FAT16 disk images and the pieces around them:
sector disks, byte streams that cross sector boundaries, a file-descriptor
layer with drive-qualified paths, a keyboard and PS/2 scancode model,
x86 global descriptor table encoding, and a few user-space helpers such as
string routines, a minimal `printf`, command-line parsing and the output of
the `echo` and `ps` programs.

It depends only on the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

### Storage

- `toyos.disk.Disk` holds a disk image in memory, by default in 512-byte
  sectors. `Disk.from_file(path)` loads an image and `save(path)` writes it
  back. `read_block(lba, total)` returns whole sectors. `write_block(lba, data)`
  writes whole sectors. Access beyond the image raises `IOFailure`.
- `toyos.streamer.DiskStream(disk, pos=0)` is a byte cursor over a disk.
  `seek(pos)`, `read(total)` and `write(data)` split their work across sector
  boundaries. A write keeps the bytes around it in each sector it touches.
- `toyos.fatformat` holds the on-disk FAT16 structures.
  - `BootSector.parse` and `BootSector.pack` handle the boot sector, with
    `root_dir_sector()`, `root_dir_size()` and `cluster_size(sector_size)`.
  - `DirectoryEntry.parse` and `DirectoryEntry.pack` handle the 32-byte
    directory entries, with `first_cluster()`, `is_directory()` and
    `full_name()`, which gives `NAME.EXT`.
  - `Attribute` holds the entry attribute flags.
  - `parse_directory(data)` lists the live entries before the end marker.
  - `proper_string(raw)` strips the padding from a name field.
- `toyos.fat16.Fat16` is the FAT16 driver. It implements the
  `toyos.fileapi.Filesystem` interface: `resolve`, `open`, `read`, `write`,
  `seek`, `stat` and `close`.
  - `resolve(disk)` binds a `FatVolume` to the disk when the boot sector
    carries the FAT16 signature.
  - `FatVolume` gives direct access to the FAT table, the cluster chain and
    path lookup: `fat_entry`, `set_fat_entry`, `cluster_for_offset`,
    `allocate_cluster`, `read_data` and `find`.
  - A write extends the cluster chain as needed and stores the updated file
    size back into the directory entry.
- `toyos.vfs.VirtualFileSystem` dispatches file operations to the filesystem
  that owns a disk.
  - By default it registers the FAT16 driver. `attach_disk(disk)` makes a disk
    drive 0.
  - `fopen`, `fread`, `fwrite`, `fseek`, `fstat` and `fclose` work on integer
    descriptors, which start at 1.
  - Paths take the form `0:/dir/file.txt`. Mode strings are matched by their
    first letter: `r`, `w` or `a`.
- `toyos.pathparser.parse_path(path)` returns a `ParsedPath` with `drive_no`
  and `parts`. `is_valid_format(path)` checks for the `N:/` prefix.
- `toyos.fileapi` defines `FileMode`, `SeekMode`, `FileStat` (`filesize`,
  `flags`, `read_only`) and the abstract `Filesystem` class.

### Input

- `toyos.keyboard` provides `Keyboard`, `KeyboardRegistry` (`insert`,
  `init_all`), `CapsLock`, and `KeyboardBuffer`, a ring buffer with `push`,
  `pop` and `backspace`.
- `toyos.ps2.Ps2Keyboard` translates scan code set 1 into characters.
  - Letters are lower-case unless caps lock is on.
  - `handle_scancode` ignores key releases, toggles caps lock, and hands each
    character to its `sink`.
  - `register(registry, sink)` creates one and registers it.

### Descriptor tables

- `toyos.gdt.encode_entry(SegmentDescriptor(base, limit, type))` returns the
  8-byte GDT entry. Limits above 64 KiB use 4 KiB granularity and must end
  in `0xfff`.
- `encode_table` joins several entries into one table.
- `default_table(tss_base, tss_size)` returns the six standard segments: null,
  kernel code and data, user code and data, and the TSS.

### User-space helpers

- `toyos.ustring` provides string routines with NUL-terminated semantics:
  `strnlen`, `strnlen_terminator`, `strncpy`, `strncmp`, `istrncmp`,
  `tolower`, `ctoi`, `is_digit`, and `tokenize`, a generator over delimited
  tokens.
- `toyos.ulib` provides the following:
  - `itoa(value)` for 32-bit integers.
  - `format_string(fmt, *args)`, which understands `%i` and `%s`.
  - `printf(fmt, *args, out=None)`, which writes to standard output or to
    `out` and returns the number of characters written.
- `toyos.shell` provides the following:
  - `parse_command(command, limit)` splits a command line on spaces.
  - `read_line(getkey, limit, putchar=None)` reads a line from a key source,
    with backspace editing and optional echo.
  - `run_echo(argv)` returns the exit status and text of `echo`.
  - `format_process_table(processes)` renders a list of `ProcessInfo` the way
    `ps` prints it.
- `toyos.config` holds the fixed limits, such as `SECTOR_SIZE`, `MAX_PATH` and
  `MAX_FILE_DESCRIPTORS`.

## Example

```python
from toyos.disk import Disk
from toyos.vfs import VirtualFileSystem

disk = Disk.from_file("os.bin")
vfs = VirtualFileSystem()
vfs.attach_disk(disk)

fd = vfs.fopen("0:/test.txt", "r")
print(vfs.fstat(fd).filesize, vfs.fread(5, 1, fd))
vfs.fclose(fd)

fd = vfs.fopen("0:/test.txt", "w")
vfs.fwrite(b"hello", 5, 1, fd)
vfs.fclose(fd)
disk.save("os.bin")
```

## Errors

Failures raise subclasses of `toyos.errors.KernelError`, such as
`InvalidArgument`, `IOFailure`, `BadPath`, `ReadOnly` and `OutOfMemory`.
Each exception carries a `Status` and a negative `code`.
`toyos.errors.error_for(code)` returns an instance of the exception for a
numeric status code, whether the code is positive or negated.

## Limitations

- There is no command-line program and no interactive shell. `toyos.shell`
  only parses input and produces program output as strings.
- The FAT16 driver opens existing files and directories only. It cannot
  create, delete or rename them, and append mode is refused.
- `Fat16.read` does not advance the file position. If a read fails it
  returns empty bytes.
- Only one disk, drive 0, can be attached to a `VirtualFileSystem`.
- Nothing here talks to real hardware. Disks are byte images, and keyboard
  input arrives as scancodes or characters passed in by the caller.
- There is no interrupt handling, paging, process loading or scheduling.