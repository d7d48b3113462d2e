"""Signal numbers and 32-bit signal sets."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator

__all__ = [
    "Signal",
    "SignalSet",
    "SigHow",
    "NSIG",
    "SA_NOCLDSTOP",
    "SA_NOMASK",
    "SA_ONESHOT",
    "SIG_DFL",
    "SIG_IGN",
]

NSIG = 32

SA_NOCLDSTOP = 1
SA_NOMASK = 0x40000000
SA_ONESHOT = 0x80000000

SIG_DFL = 0
SIG_IGN = 1

_FULL = (1 << NSIG) - 1


class Signal(IntEnum):
    """Signal numbers."""

    SIGHUP = 1
    SIGINT = 2
    SIGQUIT = 3
    SIGILL = 4
    SIGTRAP = 5
    SIGABRT = 6
    SIGIOT = 6
    SIGUNUSED = 7
    SIGFPE = 8
    SIGKILL = 9
    SIGUSR1 = 10
    SIGSEGV = 11
    SIGUSR2 = 12
    SIGPIPE = 13
    SIGALRM = 14
    SIGTERM = 15
    SIGSTKFLT = 16
    SIGCHLD = 17
    SIGCONT = 18
    SIGSTOP = 19
    SIGTSTP = 20
    SIGTTIN = 21
    SIGTTOU = 22


class SigHow(IntEnum):
    """How a signal mask is changed."""

    BLOCK = 0
    UNBLOCK = 1
    SETMASK = 2


def _bit(signo: int) -> int:
    if not 1 <= signo <= NSIG:
        raise ValueError(f"signal number out of range: {signo}")
    return 1 << (signo - 1)


@dataclass
class SignalSet:
    """A set of signals held as a 32-bit mask, signal n at bit n-1."""

    mask: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.mask <= _FULL:
            raise ValueError(f"signal mask does not fit in {NSIG} bits: {self.mask:#x}")

    @classmethod
    def of(cls, *signals: int) -> SignalSet:
        """A set holding the given signals."""
        result = cls()
        for signo in signals:
            result.add(signo)
        return result

    def add(self, signo: int) -> None:
        """Put ``signo`` in the set."""
        self.mask |= _bit(signo)

    def discard(self, signo: int) -> None:
        """Take ``signo`` out of the set."""
        self.mask &= ~_bit(signo)

    def is_member(self, signo: int) -> bool:
        """True when ``signo`` is in the set."""
        return bool(self.mask & _bit(signo))

    def fill(self) -> None:
        """Put every signal in the set."""
        self.mask = _FULL

    def clear(self) -> None:
        """Empty the set."""
        self.mask = 0

    def apply(self, how: int, other: SignalSet) -> SignalSet:
        """Change this mask by ``other`` as ``how`` says; return the previous set."""
        try:
            how = SigHow(how)
        except ValueError:
            raise ValueError(f"unknown mask operation: {how}") from None
        previous = SignalSet(self.mask)
        if how is SigHow.BLOCK:
            self.mask |= other.mask
        elif how is SigHow.UNBLOCK:
            self.mask &= ~other.mask
        else:
            self.mask = other.mask
        return previous

    def __contains__(self, signo: object) -> bool:
        return isinstance(signo, int) and 1 <= signo <= NSIG and self.is_member(signo)

    def __iter__(self) -> Iterator[int]:
        return (signo for signo in range(1, NSIG + 1) if self.mask & _bit(signo))

    def __len__(self) -> int:
        return bin(self.mask).count("1")