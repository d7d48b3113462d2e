"""Assembly of a bootable disk image from boot sector, setup and system files.

The boot sector and setup files carry a 32-byte Minix a.out header that is
checked and stripped. The boot sector must be exactly 512 bytes and end in
the boot flag; the root device numbers are stored just before the flag.
Setup is padded to four sectors and the system image is copied as it is.
"""

from __future__ import annotations

import os
import struct
import sys
from dataclasses import dataclass
from functools import partial
from typing import BinaryIO, TextIO

__all__ = [
    "BuildError",
    "MinixHeader",
    "major",
    "minor",
    "root_device_numbers",
    "build_image",
    "main",
    "MINIX_HEADER",
    "MINIX_MAGIC",
    "SETUP_SECTS",
    "SYS_SIZE",
    "BOOT_FLAG",
    "DEFAULT_MAJOR_ROOT",
    "DEFAULT_MINOR_ROOT",
]

MINIX_HEADER = 32
MINIX_MAGIC = 0x04100301
SETUP_SECTS = 4
SECTOR_SIZE = 512
SYS_SIZE = 0x3000
BOOT_FLAG = 0xAA55
DEFAULT_MAJOR_ROOT = 3
DEFAULT_MINOR_ROOT = 1
_ALLOWED_MAJORS = (0, 2, 3)
_CHUNK = 1024
_HEADER = struct.Struct("<8I")
USAGE = "Usage: build bootsect setup system [rootdev] [> image]"


class BuildError(Exception):
    """The image could not be built from the given files."""


@dataclass(frozen=True)
class MinixHeader:
    """The 32-byte header in front of a Minix a.out file."""

    magic: int
    header_length: int
    text: int
    data: int
    bss: int
    entry: int
    total: int
    syms: int

    SIZE = MINIX_HEADER

    @classmethod
    def from_bytes(cls, data: bytes) -> MinixHeader:
        """Decode the header from the first 32 bytes of ``data``."""
        if len(data) < _HEADER.size:
            raise ValueError(f"Minix header needs {_HEADER.size} bytes, got {len(data)}")
        return cls(*_HEADER.unpack_from(data))

    def validate(self, name: str) -> None:
        """Raise BuildError unless this is a plain Minix header for ``name``."""
        checks = (
            (self.magic == MINIX_MAGIC, "Non-Minix header of '{}'"),
            (self.header_length == MINIX_HEADER, "Non-Minix header of '{}'"),
            (self.data == 0, "Illegal data segment in '{}'"),
            (self.bss == 0, "Illegal bss in '{}'"),
            (self.entry == 0, "Non-Minix header of '{}'"),
            (self.syms == 0, "Illegal symbol table in '{}'"),
        )
        for ok, message in checks:
            if not ok:
                raise BuildError(message.format(name))


def major(dev: int) -> int:
    """Major number of a device number."""
    return (dev & 0xFFFFFFFF) >> 8


def minor(dev: int) -> int:
    """Minor number of a device number."""
    return dev & 0xFF


def root_device_numbers(rootdev: str | None) -> tuple[int, int]:
    """Major and minor number of the root device.

    ``None`` gives the default device, ``"FLOPPY"`` gives (0, 0) and anything
    else is a path whose device number is looked up.
    """
    if rootdev is None:
        return DEFAULT_MAJOR_ROOT, DEFAULT_MINOR_ROOT
    if rootdev == "FLOPPY":
        return 0, 0
    try:
        rdev = os.stat(rootdev).st_rdev
    except OSError as exc:
        raise BuildError("Couldn't stat root device.") from exc
    return major(rdev) & 0xFF, minor(rdev)


def _open(path: str | os.PathLike, name: str) -> BinaryIO:
    try:
        return open(path, "rb")
    except OSError:
        raise BuildError(f"Unable to open '{name}'") from None


def _read_header(stream: BinaryIO, name: str) -> MinixHeader:
    raw = stream.read(MINIX_HEADER)
    if len(raw) != MINIX_HEADER:
        raise BuildError(f"Unable to read header of '{name}'")
    header = MinixHeader.from_bytes(raw)
    header.validate(name)
    return header


def _copy(source: BinaryIO, out: BinaryIO) -> int:
    total = 0
    for chunk in iter(partial(source.read, _CHUNK), b""):
        out.write(chunk)
        total += len(chunk)
    return total


def build_image(
    bootsect: str | os.PathLike,
    setup: str | os.PathLike,
    system: str | os.PathLike,
    rootdev: str | None = None,
    out: BinaryIO | None = None,
    log: TextIO | None = None,
) -> tuple[int, int, int]:
    """Write the image to ``out`` and report progress to ``log``.

    Returns the sizes of the boot sector, the setup code before padding and
    the system image.
    """
    if out is None:
        out = sys.stdout.buffer
    if log is None:
        log = sys.stderr

    try:
        major_root, minor_root = root_device_numbers(rootdev)
    except BuildError as exc:
        cause = exc.__cause__
        if isinstance(cause, OSError):
            print(f"{rootdev}: {cause.strerror}", file=log)
        raise
    print(f"Root device is ({major_root}, {minor_root})", file=log)
    if major_root not in _ALLOWED_MAJORS:
        print(f"Illegal root device (major = {major_root})", file=log)
        raise BuildError("Bad root device --- major #")

    with _open(bootsect, "boot") as stream:
        _read_header(stream, "boot")
        block = bytearray(stream.read(_CHUNK))
    print(f"Boot sector {len(block)} bytes.", file=log)
    if len(block) != SECTOR_SIZE:
        raise BuildError("Boot block must be exactly 512 bytes")
    if int.from_bytes(block[510:512], "little") != BOOT_FLAG:
        raise BuildError("Boot block hasn't got boot flag (0xAA55)")
    block[508] = minor_root
    block[509] = major_root
    out.write(bytes(block))

    with _open(setup, "setup") as stream:
        _read_header(stream, "setup")
        setup_size = _copy(stream, out)
    setup_limit = SETUP_SECTS * SECTOR_SIZE
    if setup_size > setup_limit:
        raise BuildError(
            f"Setup exceeds {SETUP_SECTS} sectors - rewrite build/boot/setup"
        )
    print(f"Setup is {setup_size} bytes.", file=log)
    out.write(bytes(setup_limit - setup_size))

    with _open(system, "system") as stream:
        system_size = _copy(stream, out)
    print(f"System is {system_size} bytes.", file=log)
    if system_size > SYS_SIZE * 16:
        raise BuildError("System is too big")

    return SECTOR_SIZE, setup_size, system_size


def main(argv: list[str] | None = None) -> int:
    """Build an image to standard output from the files named in ``argv``."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) not in (3, 4):
        print(USAGE, file=sys.stderr)
        return 1
    rootdev = args[3] if len(args) == 4 else None
    try:
        build_image(
            args[0], args[1], args[2], rootdev, out=sys.stdout.buffer, log=sys.stderr
        )
    except BuildError as exc:
        print(exc, file=sys.stderr)
        return 1
    sys.stdout.buffer.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())