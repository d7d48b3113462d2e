"""Decoding of the status word reported for a waited-for child."""

from __future__ import annotations

__all__ = [
    "WNOHANG",
    "WUNTRACED",
    "wifexited",
    "wifstopped",
    "wifsignaled",
    "wexitstatus",
    "wtermsig",
    "wstopsig",
]

WNOHANG = 1
WUNTRACED = 2


def wifexited(status: int) -> bool:
    """True when the low byte is zero: the child exited normally."""
    return not status & 0xFF


def wifstopped(status: int) -> bool:
    """True when the low byte is 0x7f: the child is stopped."""
    return (status & 0xFF) == 0x7F


def wifsignaled(status: int) -> bool:
    """True when the low 16 bits hold a value from 1 to 0xff."""
    return ((status - 1) & 0xFFFF) < 0xFF


def wexitstatus(status: int) -> int:
    """Exit code from the second byte."""
    return (status >> 8) & 0xFF


def wtermsig(status: int) -> int:
    """Signal number that ended the child."""
    return status & 0x7F


def wstopsig(status: int) -> int:
    """Signal number that stopped the child."""
    return (status >> 8) & 0xFF