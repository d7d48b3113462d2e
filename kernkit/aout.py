"""The a.out executable header and relocation records."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum

__all__ = [
    "Magic",
    "SymbolType",
    "ExecHeader",
    "RelocationInfo",
    "PAGE_SIZE",
    "SEGMENT_SIZE",
    "N_EXT",
    "N_TYPE",
    "N_STAB",
]

PAGE_SIZE = 4096
SEGMENT_SIZE = 1024

N_EXT = 1
N_TYPE = 0o36
N_STAB = 0o340

_HEADER = struct.Struct("<8I")
_RELOC = struct.Struct("<iI")
_U32 = 0xFFFFFFFF


class Magic(IntEnum):
    """Kinds of executable named by the magic number."""

    OMAGIC = 0o407
    NMAGIC = 0o410
    ZMAGIC = 0o413


class SymbolType(IntEnum):
    """Symbol types stored in a symbol table entry."""

    UNDF = 0
    ABS = 2
    TEXT = 4
    DATA = 6
    BSS = 8
    INDR = 0xA
    FN = 15
    COMM = 18
    SETA = 0x14
    SETT = 0x16
    SETD = 0x18
    SETB = 0x1A
    SETV = 0x1C


def _segment_round(x: int) -> int:
    return (x + SEGMENT_SIZE - 1) & ~(SEGMENT_SIZE - 1)


@dataclass(frozen=True)
class ExecHeader:
    """The fixed 32-byte header at the start of an a.out file."""

    magic: int
    text: int = 0
    data: int = 0
    bss: int = 0
    syms: int = 0
    entry: int = 0
    trsize: int = 0
    drsize: int = 0

    SIZE = _HEADER.size

    def __post_init__(self) -> None:
        for name in ("magic", "text", "data", "bss", "syms", "entry", "trsize", "drsize"):
            value = getattr(self, name)
            if not 0 <= value <= _U32:
                raise ValueError(f"{name} does not fit in 32 bits: {value}")

    @classmethod
    def from_bytes(cls, data: bytes) -> ExecHeader:
        """Decode the header from the first 32 bytes of ``data``."""
        if len(data) < _HEADER.size:
            raise ValueError(f"a.out header needs {_HEADER.size} bytes, got {len(data)}")
        return cls(*_HEADER.unpack_from(data))

    def to_bytes(self) -> bytes:
        """Encode the header as 32 little-endian bytes."""
        return _HEADER.pack(
            self.magic, self.text, self.data, self.bss,
            self.syms, self.entry, self.trsize, self.drsize,
        )

    def is_bad_magic(self) -> bool:
        """True when the magic number names no known kind of executable."""
        return self.magic not in {m.value for m in Magic}

    def text_offset(self) -> int:
        """File offset of the text segment."""
        if self.magic == Magic.ZMAGIC:
            return SEGMENT_SIZE - _HEADER.size + _HEADER.size
        return _HEADER.size

    def data_offset(self) -> int:
        """File offset of the data segment."""
        return self.text_offset() + self.text

    def text_reloc_offset(self) -> int:
        """File offset of the text relocation records."""
        return self.data_offset() + self.data

    def data_reloc_offset(self) -> int:
        """File offset of the data relocation records."""
        return self.text_reloc_offset() + self.trsize

    def symbol_offset(self) -> int:
        """File offset of the symbol table."""
        return self.data_reloc_offset() + self.drsize

    def string_offset(self) -> int:
        """File offset of the string table."""
        return self.symbol_offset() + self.syms

    def text_address(self) -> int:
        """Load address of the text segment."""
        return 0

    def data_address(self) -> int:
        """Load address of the data segment."""
        text_end = self.text_address() + self.text
        if self.magic == Magic.OMAGIC:
            return text_end
        return _segment_round(text_end)

    def bss_address(self) -> int:
        """Load address of the bss segment."""
        return self.data_address() + self.data


@dataclass(frozen=True)
class RelocationInfo:
    """One relocation to apply to the text or data segment."""

    address: int
    symbolnum: int = 0
    pcrel: bool = False
    length: int = 0
    extern: bool = False
    pad: int = 0

    SIZE = _RELOC.size

    def __post_init__(self) -> None:
        if not -(1 << 31) <= self.address < (1 << 31):
            raise ValueError(f"address does not fit in 32 bits: {self.address}")
        if not 0 <= self.symbolnum < (1 << 24):
            raise ValueError(f"symbol number does not fit in 24 bits: {self.symbolnum}")
        if not 0 <= self.length < 4:
            raise ValueError(f"length exponent must be 0..3: {self.length}")
        if not 0 <= self.pad < 16:
            raise ValueError(f"pad does not fit in 4 bits: {self.pad}")

    @property
    def byte_length(self) -> int:
        """Size in bytes of the field to relocate."""
        return 1 << self.length

    @classmethod
    def from_bytes(cls, data: bytes) -> RelocationInfo:
        """Decode a relocation record from the first 8 bytes of ``data``."""
        if len(data) < _RELOC.size:
            raise ValueError(f"relocation record needs {_RELOC.size} bytes, got {len(data)}")
        address, bits = _RELOC.unpack_from(data)
        return cls(
            address=address,
            symbolnum=bits & 0xFFFFFF,
            pcrel=bool((bits >> 24) & 1),
            length=(bits >> 25) & 3,
            extern=bool((bits >> 27) & 1),
            pad=(bits >> 28) & 0xF,
        )

    def to_bytes(self) -> bytes:
        """Encode the record as 8 little-endian bytes."""
        bits = (
            self.symbolnum
            | int(self.pcrel) << 24
            | self.length << 25
            | int(self.extern) << 27
            | self.pad << 28
        )
        return _RELOC.pack(self.address, bits)