"""Terminal character queues and terminal settings."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

__all__ = [
    "TtyQueue",
    "ControlChar",
    "Termios",
    "TTY_BUF_SIZE",
    "NCCS",
    "INIT_C_CC",
    "ISIG",
    "ICANON",
    "XCASE",
    "ECHO",
    "ECHOE",
    "ECHOK",
    "ECHONL",
    "NOFLSH",
    "TOSTOP",
    "ECHOCTL",
    "ECHOPRT",
    "ECHOKE",
    "IGNCR",
    "ICRNL",
    "INLCR",
    "IUCLC",
    "OPOST",
    "ONLCR",
    "OCRNL",
    "OLCUC",
]

TTY_BUF_SIZE = 1024
NCCS = 17

# intr=^C quit=^\ erase=del kill=^U eof=^D vtime=0 vmin=1 swtc=0
# start=^Q stop=^S susp=^Z eol=0 reprint=^R discard=^O werase=^W lnext=^V eol2=0
INIT_C_CC = b"\003\034\177\025\004\0\1\0\021\023\032\0\022\017\027\026\0"

# c_lflag bits
ISIG = 0o000001
ICANON = 0o000002
XCASE = 0o000004
ECHO = 0o000010
ECHOE = 0o000020
ECHOK = 0o000040
ECHONL = 0o000100
NOFLSH = 0o000200
TOSTOP = 0o000400
ECHOCTL = 0o001000
ECHOPRT = 0o002000
ECHOKE = 0o004000

# c_iflag bits
INLCR = 0o000100
IGNCR = 0o000200
ICRNL = 0o000400
IUCLC = 0o001000

# c_oflag bits
OPOST = 0o000001
OLCUC = 0o000002
ONLCR = 0o000004
OCRNL = 0o000010

_MASK = TTY_BUF_SIZE - 1


class TtyQueue:
    """A ring buffer of bytes; one slot stays empty, so it holds 1023 bytes."""

    def __init__(self) -> None:
        self._buf = bytearray(TTY_BUF_SIZE)
        self._head = 0
        self._tail = 0

    def put(self, c: int) -> None:
        """Append byte ``c``; raises BufferError when the queue is full."""
        if not 0 <= c <= 0xFF:
            raise ValueError(f"not a byte value: {c}")
        if self.is_full():
            raise BufferError("tty queue is full")
        self._buf[self._head] = c
        self._head = (self._head + 1) & _MASK

    def get(self) -> int:
        """Remove and return the oldest byte; raises IndexError when empty."""
        if self.is_empty():
            raise IndexError("get from an empty tty queue")
        c = self._buf[self._tail]
        self._tail = (self._tail + 1) & _MASK
        return c

    def is_empty(self) -> bool:
        """True when no byte is queued."""
        return self._head == self._tail

    def is_full(self) -> bool:
        """True when no more bytes fit."""
        return not self.left()

    def left(self) -> int:
        """Number of bytes that still fit."""
        return (self._tail - self._head - 1) & _MASK

    def chars(self) -> int:
        """Number of bytes queued."""
        return (self._head - self._tail) & _MASK

    def last(self) -> int:
        """The most recently queued byte; raises IndexError when empty."""
        if self.is_empty():
            raise IndexError("last of an empty tty queue")
        return self._buf[(self._head - 1) & _MASK]

    def __len__(self) -> int:
        return self.chars()


class ControlChar(IntEnum):
    """Indexes of the special characters in ``Termios.cc``."""

    INTR = 0
    QUIT = 1
    ERASE = 2
    KILL = 3
    EOF = 4
    TIME = 5
    MIN = 6
    SWTC = 7
    START = 8
    STOP = 9
    SUSP = 10
    EOL = 11
    REPRINT = 12
    DISCARD = 13
    WERASE = 14
    LNEXT = 15
    EOL2 = 16


@dataclass
class Termios:
    """Terminal mode flags, line discipline and special characters."""

    iflag: int = 0
    oflag: int = 0
    cflag: int = 0
    lflag: int = 0
    line: int = 0
    cc: bytearray = field(default_factory=lambda: bytearray(INIT_C_CC))

    def __post_init__(self) -> None:
        self.cc = bytearray(self.cc)
        if len(self.cc) != NCCS:
            raise ValueError(f"expected {NCCS} control characters, got {len(self.cc)}")

    def control_char(self, which: int) -> int:
        """The special character stored at index ``which``."""
        try:
            index = ControlChar(which)
        except ValueError:
            raise ValueError(f"unknown control character index: {which}") from None
        return self.cc[index]