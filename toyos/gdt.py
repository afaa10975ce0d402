"""Encoding of global descriptor table entries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .errors import InvalidArgument

ENTRY_SIZE = 8

NULL_TYPE = 0x00
KERNEL_CODE_TYPE = 0x9A
KERNEL_DATA_TYPE = 0x92
USER_CODE_TYPE = 0xF8
USER_DATA_TYPE = 0xF2
TSS_TYPE = 0xE9

FLAT_LIMIT = 0xFFFFFFFF

_FLAGS_32BIT = 0x40
_FLAGS_32BIT_4K = 0xC0
_BYTE_GRANULAR_MAX = 65536


@dataclass(frozen=True)
class SegmentDescriptor:
    """A segment described by its base address, limit and access type."""

    base: int = 0
    limit: int = 0
    type: int = 0


def encode_entry(descriptor: SegmentDescriptor) -> bytes:
    """Encode one descriptor into its eight raw bytes.

    Limits above 64 KiB are stored in 4 KiB units and must therefore end
    in ``0xfff``.
    """
    base, limit, access = descriptor.base, descriptor.limit, descriptor.type
    if not 0 <= base <= 0xFFFFFFFF:
        raise InvalidArgument(f"segment base out of range: {base:#x}")
    if not 0 <= limit <= 0xFFFFFFFF:
        raise InvalidArgument(f"segment limit out of range: {limit:#x}")
    if not 0 <= access <= 0xFF:
        raise InvalidArgument(f"segment type out of range: {access:#x}")
    if limit > _BYTE_GRANULAR_MAX and (limit & 0xFFF) != 0xFFF:
        raise InvalidArgument(f"unaligned segment limit: {limit:#x}")

    flags = _FLAGS_32BIT
    if limit > _BYTE_GRANULAR_MAX:
        limit >>= 12
        flags = _FLAGS_32BIT_4K

    return bytes(
        (
            limit & 0xFF,
            (limit >> 8) & 0xFF,
            base & 0xFF,
            (base >> 8) & 0xFF,
            (base >> 16) & 0xFF,
            access,
            flags | ((limit >> 16) & 0x0F),
            (base >> 24) & 0xFF,
        )
    )


def encode_table(descriptors: Iterable[SegmentDescriptor]) -> bytes:
    """Encode descriptors one after another into a raw table."""
    return b"".join(encode_entry(descriptor) for descriptor in descriptors)


def default_table(tss_base: int, tss_size: int) -> list[SegmentDescriptor]:
    """The kernel's six segments: null, kernel code/data, user code/data, TSS."""
    return [
        SegmentDescriptor(0, 0, NULL_TYPE),
        SegmentDescriptor(0, FLAT_LIMIT, KERNEL_CODE_TYPE),
        SegmentDescriptor(0, FLAT_LIMIT, KERNEL_DATA_TYPE),
        SegmentDescriptor(0, FLAT_LIMIT, USER_CODE_TYPE),
        SegmentDescriptor(0, FLAT_LIMIT, USER_DATA_TYPE),
        SegmentDescriptor(tss_base, tss_size, TSS_TYPE),
    ]