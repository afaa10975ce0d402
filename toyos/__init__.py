"""FAT16 disk images, sector streams, file descriptors, keyboard input and GDT encoding."""

__version__ = "0.1.0"