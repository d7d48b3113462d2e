"""Models of a small Unix-like kernel's character table, string routines, paging, allocator, headers, signals, tty queues and image builder."""

__version__ = "0.1.0"

__all__ = [
    "aout",
    "ctype",
    "cstring",
    "errors",
    "imagebuild",
    "kmalloc",
    "modes",
    "physmem",
    "sigset",
    "status",
    "ttyqueue",
]