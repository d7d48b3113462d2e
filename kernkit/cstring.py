"""C string and memory routines over byte strings.

A C string is the bytes up to the first NUL, or the whole object if it has
none. Searches return indexes instead of pointers and ``None`` where a null
pointer would come back. Comparisons treat bytes as signed chars and return
-1, 0 or 1.
"""

from __future__ import annotations

__all__ = [
    "Tokenizer",
    "strlen",
    "strcmp",
    "strncmp",
    "strncpy",
    "strcat",
    "strncat",
    "strchr",
    "strrchr",
    "strspn",
    "strcspn",
    "strpbrk",
    "strstr",
    "memcmp",
    "memchr",
    "memmove",
    "memset",
]

BytesLike = bytes | bytearray | memoryview


def _cstr(s: BytesLike) -> bytes:
    return bytes(s).split(b"\0", 1)[0]


def _byte(c: int | BytesLike) -> int:
    if isinstance(c, int):
        return c & 0xFF
    data = bytes(c)
    if len(data) != 1:
        raise ValueError(f"expected a single byte, got {data!r}")
    return data[0]


def _signed(b: int) -> int:
    return b - 256 if b & 0x80 else b


def _compare(a: bytes, b: bytes, stop_at_nul: bool) -> int:
    for x, y in zip(a, b):
        if x != y:
            return 1 if _signed(x) > _signed(y) else -1
        if stop_at_nul and x == 0:
            break
    return 0


def strlen(s: BytesLike) -> int:
    """Length of the C string."""
    return len(_cstr(s))


def strcmp(cs: BytesLike, ct: BytesLike) -> int:
    """Compare two C strings."""
    return _compare(_cstr(cs) + b"\0", _cstr(ct) + b"\0", stop_at_nul=True)


def strncmp(cs: BytesLike, ct: BytesLike, count: int) -> int:
    """Compare at most ``count`` bytes of two C strings."""
    if count <= 0:
        return 0
    a = (_cstr(cs) + b"\0")[:count]
    b = (_cstr(ct) + b"\0")[:count]
    return _compare(a, b, stop_at_nul=True)


def strncpy(src: BytesLike, count: int) -> bytes:
    """The ``count`` bytes that a bounded copy stores: padded with NUL, unterminated if too long."""
    if count <= 0:
        return b""
    return (_cstr(src) + b"\0" * count)[:count]


def strcat(dest: BytesLike, src: BytesLike) -> bytes:
    """Concatenate two C strings."""
    return _cstr(dest) + _cstr(src)


def strncat(dest: BytesLike, src: BytesLike, count: int) -> bytes:
    """Append at most ``count`` bytes of ``src`` to ``dest``."""
    return _cstr(dest) + _cstr(src)[: max(count, 0)]


def strchr(s: BytesLike, c: int | BytesLike) -> int | None:
    """Index of the first ``c`` in the C string; NUL finds the terminator."""
    data = _cstr(s)
    value = _byte(c)
    if value == 0:
        return len(data)
    index = data.find(bytes([value]))
    return None if index < 0 else index


def strrchr(s: BytesLike, c: int | BytesLike) -> int | None:
    """Index of the last ``c`` in the C string; NUL finds the terminator."""
    data = _cstr(s)
    value = _byte(c)
    if value == 0:
        return len(data)
    index = data.rfind(bytes([value]))
    return None if index < 0 else index


def strspn(cs: BytesLike, ct: BytesLike) -> int:
    """Length of the leading run of ``cs`` made only of bytes in ``ct``."""
    data = _cstr(cs)
    return len(data) - len(data.lstrip(_cstr(ct)))


def _first_in(data: bytes, accept: bytes) -> int | None:
    wanted = set(accept)
    return next((i for i, b in enumerate(data) if b in wanted), None)


def strcspn(cs: BytesLike, ct: BytesLike) -> int:
    """Length of the leading run of ``cs`` holding no byte of ``ct``."""
    data = _cstr(cs)
    index = _first_in(data, _cstr(ct))
    return len(data) if index is None else index


def strpbrk(cs: BytesLike, ct: BytesLike) -> int | None:
    """Index of the first byte of ``cs`` that occurs in ``ct``."""
    return _first_in(_cstr(cs), _cstr(ct))


def strstr(cs: BytesLike, ct: BytesLike) -> int | None:
    """Index of the first occurrence of ``ct`` in ``cs``; an empty ``ct`` matches at 0."""
    index = _cstr(cs).find(_cstr(ct))
    return None if index < 0 else index


def _check_span(size: int, start: int, count: int) -> None:
    if count < 0 or start < 0 or start + count > size:
        raise IndexError(f"span [{start}, {start + count}) outside buffer of {size} bytes")


def memcmp(cs: BytesLike, ct: BytesLike, count: int) -> int:
    """Compare the first ``count`` bytes of two buffers, NUL included."""
    a, b = bytes(cs), bytes(ct)
    if count < 0 or count > len(a) or count > len(b):
        raise ValueError(f"count {count} exceeds a buffer")
    return _compare(a[:count], b[:count], stop_at_nul=False)


def memchr(cs: BytesLike, c: int | BytesLike, count: int) -> int | None:
    """Index of the first ``c`` among the first ``count`` bytes."""
    data = bytes(cs)
    if count < 0 or count > len(data):
        raise ValueError(f"count {count} exceeds buffer of {len(data)} bytes")
    index = data.find(bytes([_byte(c)]), 0, count)
    return None if index < 0 else index


def memmove(buf: bytearray, dest: int, src: int, n: int) -> None:
    """Copy ``n`` bytes inside ``buf`` from ``src`` to ``dest``; overlap is safe."""
    _check_span(len(buf), dest, n)
    _check_span(len(buf), src, n)
    buf[dest : dest + n] = buf[src : src + n]


def memset(buf: bytearray, start: int, c: int | BytesLike, count: int) -> None:
    """Fill ``count`` bytes of ``buf`` from ``start`` with ``c``."""
    _check_span(len(buf), start, count)
    buf[start : start + count] = bytes([_byte(c)]) * count


class Tokenizer:
    """Successive tokens of a C string, split on a delimiter set given per call."""

    def __init__(self, s: BytesLike) -> None:
        self._data = _cstr(s)
        self._pos: int | None = 0

    def next(self, ct: BytesLike) -> bytes | None:
        """Return the next token, or ``None`` once the string is used up.

        An empty delimiter set ends tokenizing at once.
        """
        if self._pos is None:
            return None
        delims = _cstr(ct)
        if not delims:
            self._pos = None
            return None
        rest = self._data[self._pos :]
        start = strspn(rest, delims)
        if start == len(rest):
            self._pos = None
            return None
        length = strcspn(rest[start:], delims)
        end = self._pos + start + length
        self._pos = end + 1 if end < len(self._data) else None
        return rest[start : start + length]