"""Kernel status codes and the exceptions that carry them."""

from __future__ import annotations

from enum import IntEnum
from typing import ClassVar


class Status(IntEnum):
    """Numeric status codes; failures are reported as their negation."""

    OK = 0
    EINVARG = 1
    ENOMEM = 2
    EIO = 3
    EBADPATH = 4
    ENOFILEMEM = 5
    EFSNOTUS = 6
    ERDONLY = 7
    EISTKN = 8
    EINFORMAT = 9
    EBUSY = 10


class KernelError(Exception):
    """Base class for every error the kernel components raise."""

    status: ClassVar[Status]
    description: ClassVar[str] = "kernel error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message if message is not None else self.description)

    @property
    def code(self) -> int:
        """The negative status code used by the original calling convention."""
        return -int(self.status)


class InvalidArgument(KernelError):
    status = Status.EINVARG
    description = "invalid argument"


class OutOfMemory(KernelError):
    status = Status.ENOMEM
    description = "out of memory"


class IOFailure(KernelError):
    status = Status.EIO
    description = "input/output error"


class BadPath(KernelError):
    status = Status.EBADPATH
    description = "bad path"


class NoFileMemory(KernelError):
    status = Status.ENOFILEMEM
    description = "no free file descriptors"


class FilesystemNotRecognised(KernelError):
    status = Status.EFSNOTUS
    description = "filesystem not recognised"


class ReadOnly(KernelError):
    status = Status.ERDONLY
    description = "resource is read-only"


class SlotTaken(KernelError):
    status = Status.EISTKN
    description = "slot is already taken"


class InvalidFormat(KernelError):
    status = Status.EINFORMAT
    description = "invalid format"


class Busy(KernelError):
    status = Status.EBUSY
    description = "resource is busy"


_BY_STATUS: dict[Status, type[KernelError]] = {
    cls.status: cls
    for cls in (
        InvalidArgument,
        OutOfMemory,
        IOFailure,
        BadPath,
        NoFileMemory,
        FilesystemNotRecognised,
        ReadOnly,
        SlotTaken,
        InvalidFormat,
        Busy,
    )
}


def error_for(code: int) -> KernelError:
    """Return the exception matching a status code, given positive or negated."""
    try:
        status = Status(abs(int(code)))
    except ValueError:
        raise ValueError(f"unknown status code: {code}") from None
    if status is Status.OK:
        raise ValueError("status OK is not an error")
    return _BY_STATUS[status]()