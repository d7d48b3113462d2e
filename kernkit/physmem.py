"""Paged physical memory: page frame map, page tables and copy-on-write.

Memory above ``LOW_MEM`` is handed out one 4 KiB page at a time and each page
has a reference count. The page directory sits at physical address 0 and
directory and table entries use the i386 layout: frame address in the top 20
bits, present bit 0, writable bit 1, user bit 2.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

__all__ = [
    "KernelPanic",
    "OutOfMemory",
    "MemoryReport",
    "PhysicalMemory",
    "PAGE_SIZE",
    "LOW_MEM",
    "PAGING_MEMORY",
    "PAGING_PAGES",
    "USED",
]

_log = logging.getLogger(__name__)

PAGE_SIZE = 4096
LOW_MEM = 0x100000
PAGING_MEMORY = 15 * 1024 * 1024
PAGING_PAGES = PAGING_MEMORY >> 12
USED = 100

PAGE_MASK = 0xFFFFF000
PG_DIR = 0
PRESENT = 1
WRITABLE = 2
USER = 4
DIRTY = 0x40
_PAGE_FLAGS = PRESENT | WRITABLE | USER
_TABLE_SPAN = 0x400000
_WORDS_PER_PAGE = PAGE_SIZE // 4
_ADDRESS_LIMIT = 1 << 32
_ZERO_PAGE = (0,) * _WORDS_PER_PAGE


class KernelPanic(RuntimeError):
    """An inconsistency that stops the kernel."""


class OutOfMemory(MemoryError):
    """No free page was left to satisfy a request."""


@dataclass
class MemoryReport:
    """Free pages and, per page-directory slot from 2 on, pages in use."""

    free_pages: int
    total_pages: int
    tables: dict[int, int] = field(default_factory=dict)


def _map_nr(addr: int) -> int:
    return (addr - LOW_MEM) >> 12


def _dir_entry(address: int) -> int:
    return PG_DIR + ((address >> 20) & 0xFFC)


def _table_offset(address: int) -> int:
    return (address >> 10) & 0xFFC


class PhysicalMemory:
    """Physical memory between ``start_mem`` and ``end_mem`` managed in pages."""

    def __init__(self, start_mem: int, end_mem: int) -> None:
        if not LOW_MEM <= start_mem <= end_mem <= LOW_MEM + PAGING_MEMORY:
            raise ValueError(
                f"memory range {start_mem:#x}-{end_mem:#x} outside the paging area"
            )
        self.high_memory = end_mem
        self._frames: dict[int, list[int]] = {}
        self._mem_map = bytearray([USED]) * PAGING_PAGES
        first = _map_nr(start_mem)
        count = (end_mem - start_mem) >> 12
        self._mem_map[first : first + count] = bytes(count)

    # -- raw word access -------------------------------------------------

    @staticmethod
    def _check_address(addr: int) -> None:
        if addr & 3 or not 0 <= addr < _ADDRESS_LIMIT:
            raise ValueError(f"bad word address {addr:#x}")

    def read_word(self, addr: int) -> int:
        """The 32-bit word stored at ``addr``."""
        self._check_address(addr)
        frame = self._frames.get(addr & PAGE_MASK)
        return frame[(addr & 0xFFF) >> 2] if frame else 0

    def write_word(self, addr: int, value: int) -> None:
        """Store a 32-bit word at ``addr``."""
        self._check_address(addr)
        base = addr & PAGE_MASK
        frame = self._frames.get(base)
        if frame is None:
            frame = self._frames[base] = [0] * _WORDS_PER_PAGE
        frame[(addr & 0xFFF) >> 2] = value & 0xFFFFFFFF

    def _words(self, page: int) -> tuple[int, ...] | list[int]:
        return self._frames.get(page & PAGE_MASK, _ZERO_PAGE)

    def _copy_page(self, source: int, target: int) -> None:
        frame = self._frames.get(source)
        if frame is None:
            self._frames.pop(target, None)
        else:
            self._frames[target] = list(frame)

    # -- page frame map --------------------------------------------------

    def refcount(self, addr: int) -> int:
        """Reference count of the page holding ``addr``."""
        if not LOW_MEM <= addr < LOW_MEM + PAGING_MEMORY:
            raise ValueError(f"address {addr:#x} outside the paging area")
        return self._mem_map[_map_nr(addr)]

    def free_page_count(self) -> int:
        """Number of pages not in use."""
        return self._mem_map.count(0)

    def get_free_page(self) -> int:
        """Take the highest free page, zero it and mark it used; return its address."""
        nr = self._mem_map.rfind(b"\0")
        if nr < 0:
            raise OutOfMemory("no free page left")
        self._mem_map[nr] = 1
        page = LOW_MEM + (nr << 12)
        self._frames.pop(page, None)
        return page

    def free_page(self, addr: int) -> None:
        """Drop one reference to the page at ``addr``; low memory is ignored."""
        if addr < LOW_MEM:
            return
        if addr >= self.high_memory:
            raise KernelPanic("trying to free nonexistent page")
        nr = _map_nr(addr)
        if self._mem_map[nr]:
            self._mem_map[nr] -= 1
            return
        raise KernelPanic("trying to free free page")

    # -- page tables -----------------------------------------------------

    def free_page_tables(self, from_: int, size: int) -> None:
        """Release the page tables, and the pages they map, of a 4 MiB-aligned range."""
        if from_ & 0x3FFFFF:
            raise KernelPanic("free_page_tables called with wrong alignment")
        if not from_:
            raise KernelPanic("Trying to free up swapper memory space")
        blocks = (size + 0x3FFFFF) >> 22
        first = _dir_entry(from_)
        for dir_addr in range(first, first + 4 * blocks, 4):
            entry = self.read_word(dir_addr)
            if not entry & PRESENT:
                continue
            table = entry & PAGE_MASK
            for slot in range(table, table + PAGE_SIZE, 4):
                page_entry = self.read_word(slot)
                if page_entry & PRESENT:
                    self.free_page(page_entry & PAGE_MASK)
                self.write_word(slot, 0)
            self.free_page(table)
            self.write_word(dir_addr, 0)

    def copy_page_tables(self, from_: int, to: int, size: int) -> None:
        """Share the pages of one 4 MiB-aligned range with another, write-protected."""
        if from_ & 0x3FFFFF or to & 0x3FFFFF:
            raise KernelPanic("copy_page_tables called with wrong alignment")
        blocks = ((size + 0x3FFFFF) & 0xFFFFFFFF) >> 22
        from_dir = _dir_entry(from_)
        to_dir = _dir_entry(to)
        for step in range(blocks):
            source_dir = from_dir + 4 * step
            target_dir = to_dir + 4 * step
            if self.read_word(target_dir) & PRESENT:
                raise KernelPanic("copy_page_tables: already exist")
            source_entry = self.read_word(source_dir)
            if not source_entry & PRESENT:
                continue
            source_table = source_entry & PAGE_MASK
            target_table = self.get_free_page()
            self.write_word(target_dir, target_table | _PAGE_FLAGS)
            entries = 0xA0 if from_ == 0 else 1024
            for index in range(entries):
                this_page = self.read_word(source_table + 4 * index)
                if not this_page & PRESENT:
                    continue
                this_page &= ~WRITABLE
                self.write_word(target_table + 4 * index, this_page)
                if this_page > LOW_MEM:
                    self.write_word(source_table + 4 * index, this_page)
                    nr = _map_nr(this_page)
                    self._mem_map[nr] = (self._mem_map[nr] + 1) & 0xFF

    def put_page(self, page: int, address: int) -> int:
        """Map ``page`` at linear ``address``, creating the page table if needed."""
        if page < LOW_MEM or page >= self.high_memory:
            _log.warning("Trying to put page %#x at %#x", page, address)
        elif self._mem_map[_map_nr(page)] != 1:
            _log.warning("mem_map disagrees with %#x at %#x", page, address)
        dir_addr = _dir_entry(address)
        entry = self.read_word(dir_addr)
        if entry & PRESENT:
            table = entry & PAGE_MASK
        else:
            table = self.get_free_page()
            self.write_word(dir_addr, table | _PAGE_FLAGS)
        self.write_word(table + 4 * ((address >> 12) & 0x3FF), page | _PAGE_FLAGS)
        return page

    def un_wp_page(self, entry_addr: int) -> None:
        """Make the page named by the table entry at ``entry_addr`` writable, copying if shared."""
        entry = self.read_word(entry_addr)
        old_page = entry & PAGE_MASK
        if old_page >= LOW_MEM and self._mem_map[_map_nr(old_page)] == 1:
            self.write_word(entry_addr, entry | WRITABLE)
            return
        new_page = self.get_free_page()
        if old_page >= LOW_MEM:
            self._mem_map[_map_nr(old_page)] -= 1
        self.write_word(entry_addr, new_page | _PAGE_FLAGS)
        self._copy_page(old_page, new_page)

    def do_wp_page(self, error_code: int, address: int) -> None:
        """Handle a write to a write-protected page at linear ``address``."""
        table = self.read_word(_dir_entry(address)) & PAGE_MASK
        self.un_wp_page(table + _table_offset(address))

    def write_verify(self, address: int) -> None:
        """Before a kernel write to ``address``, unshare its page if it is read-only."""
        entry = self.read_word(_dir_entry(address))
        if not entry & PRESENT:
            return
        slot = (entry & PAGE_MASK) + _table_offset(address)
        if (self.read_word(slot) & 3) == PRESENT:
            self.un_wp_page(slot)

    def get_empty_page(self, address: int) -> None:
        """Map a fresh zeroed page at linear ``address``."""
        page = self.get_free_page()
        try:
            self.put_page(page, address)
        except OutOfMemory:
            self.free_page(page)
            raise

    def calc_mem(self) -> MemoryReport:
        """Count free pages and the present pages behind each directory slot from 2 on."""
        report = MemoryReport(self.free_page_count(), PAGING_PAGES)
        for index in range(2, 1024):
            entry = self.read_word(PG_DIR + 4 * index)
            if entry & PRESENT:
                words = self._words(entry & PAGE_MASK)
                report.tables[index] = sum(1 for word in words if word & PRESENT)
        return report