"""Character classification driven by the kernel's fixed character table."""

from __future__ import annotations

from enum import IntFlag

__all__ = [
    "CharClass",
    "isalnum",
    "isalpha",
    "iscntrl",
    "isdigit",
    "isgraph",
    "islower",
    "isprint",
    "ispunct",
    "isspace",
    "isupper",
    "isxdigit",
    "isascii",
    "toascii",
    "tolower",
    "toupper",
]

EOF = -1


class CharClass(IntFlag):
    """Class bits stored for each character in the table."""

    NONE = 0x00
    UPPER = 0x01
    LOWER = 0x02
    DIGIT = 0x04
    CNTRL = 0x08
    PUNCT = 0x10
    SPACE = 0x20
    HEX = 0x40
    HARD_SPACE = 0x80


def _build_table() -> tuple[CharClass, ...]:
    table = [CharClass.NONE] * 256

    def mark(codes, cls: CharClass) -> None:
        for code in codes:
            table[code] |= cls

    mark(range(0, 32), CharClass.CNTRL)
    mark((127,), CharClass.CNTRL)
    mark(range(9, 14), CharClass.SPACE)
    mark((32,), CharClass.SPACE | CharClass.HARD_SPACE)
    for span in (range(33, 48), range(58, 65), range(91, 97), range(123, 127)):
        mark(span, CharClass.PUNCT)
    mark(range(48, 58), CharClass.DIGIT)
    mark(range(65, 91), CharClass.UPPER)
    mark(range(65, 71), CharClass.HEX)
    mark(range(97, 123), CharClass.LOWER)
    mark(range(97, 103), CharClass.HEX)
    return tuple(table)


_TABLE = _build_table()


def _code(c: int | str) -> int:
    if isinstance(c, str):
        if len(c) != 1:
            raise ValueError(f"expected a single character, got {c!r}")
        c = ord(c)
    if not EOF <= c <= 255:
        raise ValueError(f"character code out of range: {c}")
    return c


def _classes(c: int | str) -> CharClass:
    code = _code(c)
    return CharClass.NONE if code == EOF else _TABLE[code]


def _has(c: int | str, mask: CharClass) -> bool:
    return bool(_classes(c) & mask)


def isalnum(c: int | str) -> bool:
    """True for letters and digits."""
    return _has(c, CharClass.UPPER | CharClass.LOWER | CharClass.DIGIT)


def isalpha(c: int | str) -> bool:
    """True for letters."""
    return _has(c, CharClass.UPPER | CharClass.LOWER)


def iscntrl(c: int | str) -> bool:
    """True for control characters."""
    return _has(c, CharClass.CNTRL)


def isdigit(c: int | str) -> bool:
    """True for decimal digits."""
    return _has(c, CharClass.DIGIT)


def isgraph(c: int | str) -> bool:
    """True for printable characters other than space."""
    return _has(c, CharClass.PUNCT | CharClass.UPPER | CharClass.LOWER | CharClass.DIGIT)


def islower(c: int | str) -> bool:
    """True for lower-case letters."""
    return _has(c, CharClass.LOWER)


def isprint(c: int | str) -> bool:
    """True for printable characters including space."""
    return _has(
        c,
        CharClass.PUNCT
        | CharClass.UPPER
        | CharClass.LOWER
        | CharClass.DIGIT
        | CharClass.HARD_SPACE,
    )


def ispunct(c: int | str) -> bool:
    """True for punctuation."""
    return _has(c, CharClass.PUNCT)


def isspace(c: int | str) -> bool:
    """True for space, tab, newline, vertical tab, form feed and carriage return."""
    return _has(c, CharClass.SPACE)


def isupper(c: int | str) -> bool:
    """True for upper-case letters."""
    return _has(c, CharClass.UPPER)


def isxdigit(c: int | str) -> bool:
    """True for hexadecimal digits."""
    return _has(c, CharClass.DIGIT | CharClass.HEX)


def isascii(c: int | str) -> bool:
    """True when the code, taken as unsigned, is at most 0x7f."""
    code = ord(c) if isinstance(c, str) else c
    return (code & 0xFFFFFFFF) <= 0x7F


def toascii(c: int | str) -> int:
    """Keep only the low seven bits of the code."""
    code = ord(c) if isinstance(c, str) else c
    return code & 0x7F


def tolower(c: int | str) -> int | str:
    """Lower-case an upper-case letter; anything else is returned unchanged."""
    if not isupper(c):
        return c
    if isinstance(c, str):
        return chr(ord(c) - (ord("A") - ord("a")))
    return c - (ord("A") - ord("a"))


def toupper(c: int | str) -> int | str:
    """Upper-case a lower-case letter; anything else is returned unchanged."""
    if not islower(c):
        return c
    if isinstance(c, str):
        return chr(ord(c) - (ord("a") - ord("A")))
    return c - (ord("a") - ord("A"))