"""Kernel object allocator built on whole pages split into fixed-size buckets.

Every page given to a bucket holds objects of one size only; the free objects
of a page are chained through their first word in simulated memory. Pages
that hold bucket descriptors are never given back.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from kernkit.physmem import PAGE_SIZE, KernelPanic, OutOfMemory, PhysicalMemory

__all__ = ["BucketAllocator", "BUCKET_SIZES"]

BUCKET_SIZES = (16, 32, 64, 128, 256, 512, 1024, 2048, 4096)
_DESCRIPTOR_SIZE = 16
_PAGE_MASK = 0xFFFFF000


@dataclass(eq=False)
class _BucketDesc:
    page: int = 0
    freeptr: int = 0
    refcnt: int = 0
    bucket_size: int = 0


@dataclass
class _BucketDir:
    size: int
    chain: list[_BucketDesc] = field(default_factory=list)


class BucketAllocator:
    """Allocates objects of up to one page from a ``PhysicalMemory``."""

    def __init__(self, memory: PhysicalMemory) -> None:
        self._memory = memory
        self._dirs = [_BucketDir(size) for size in BUCKET_SIZES]
        self._free_descs: list[_BucketDesc] = []

    def _init_bucket_desc(self) -> None:
        try:
            self._memory.get_free_page()
        except OutOfMemory as exc:
            raise KernelPanic("Out of memory in init_bucket_desc()") from exc
        count = PAGE_SIZE // _DESCRIPTOR_SIZE
        self._free_descs.extend(_BucketDesc() for _ in range(count))

    def _new_bucket(self, bdir: _BucketDir) -> _BucketDesc:
        if not self._free_descs:
            self._init_bucket_desc()
        bdesc = self._free_descs.pop()
        try:
            page = self._memory.get_free_page()
        except OutOfMemory as exc:
            self._free_descs.append(bdesc)
            raise KernelPanic("Out of memory in kernel malloc()") from exc
        bdesc.refcnt = 0
        bdesc.bucket_size = bdir.size
        bdesc.page = bdesc.freeptr = page
        objects = range(page, page + PAGE_SIZE, bdir.size)
        for obj, following in zip(objects, objects[1:]):
            self._memory.write_word(obj, following)
        self._memory.write_word(objects[-1], 0)
        bdir.chain.insert(0, bdesc)
        return bdesc

    def malloc(self, length: int) -> int:
        """Allocate an object of at least ``length`` bytes and return its address."""
        length &= 0xFFFFFFFF
        bdir = next((d for d in self._dirs if d.size >= length), None)
        if bdir is None:
            raise KernelPanic(f"malloc: bad arg ({length})")
        bdesc = next((d for d in bdir.chain if d.freeptr), None)
        if bdesc is None:
            bdesc = self._new_bucket(bdir)
        obj = bdesc.freeptr
        bdesc.freeptr = self._memory.read_word(obj)
        bdesc.refcnt += 1
        return obj

    def _find(self, page: int, size: int) -> tuple[_BucketDir, _BucketDesc]:
        for bdir in self._dirs:
            if bdir.size < size:
                continue
            for bdesc in bdir.chain:
                if bdesc.page == page:
                    return bdir, bdesc
        raise KernelPanic("Bad address passed to kernel free_s()")

    def free_s(self, obj: int, size: int) -> None:
        """Release ``obj``; a nonzero ``size`` skips buckets of smaller objects."""
        bdir, bdesc = self._find(obj & _PAGE_MASK, size)
        self._memory.write_word(obj, bdesc.freeptr)
        bdesc.freeptr = obj
        bdesc.refcnt -= 1
        if bdesc.refcnt == 0:
            if bdesc not in bdir.chain:
                raise KernelPanic("malloc bucket chains corrupted")
            bdir.chain.remove(bdesc)
            self._memory.free_page(bdesc.page)
            bdesc.page = bdesc.freeptr = 0
            self._free_descs.append(bdesc)

    def free(self, obj: int) -> None:
        """Release ``obj`` without a size hint."""
        self.free_s(obj, 0)

    def buckets_in_use(self, size: int) -> int:
        """Number of pages currently serving objects of ``size`` bytes."""
        for bdir in self._dirs:
            if bdir.size == size:
                return len(bdir.chain)
        raise ValueError(f"{size} is not a bucket size")