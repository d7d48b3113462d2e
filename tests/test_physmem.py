import pytest

from kernkit.physmem import (
    LOW_MEM,
    PAGE_SIZE,
    USED,
    KernelPanic,
    OutOfMemory,
    PhysicalMemory,
)

START = LOW_MEM + 16 * PAGE_SIZE
END = LOW_MEM + 512 * PAGE_SIZE
PAGE_MASK = 0xFFFFF000


@pytest.fixture
def mem():
    return PhysicalMemory(START, END)


def test_init_marks_free_and_used(mem):
    assert mem.free_page_count() == (END - START) // PAGE_SIZE
    assert mem.refcount(LOW_MEM) == USED
    assert mem.refcount(START) == 0
    assert mem.refcount(END) == USED


def test_init_rejects_bad_range():
    with pytest.raises(ValueError):
        PhysicalMemory(LOW_MEM - PAGE_SIZE, END)
    with pytest.raises(ValueError):
        PhysicalMemory(END, START)


def test_get_free_page_takes_highest(mem):
    before = mem.free_page_count()
    page = mem.get_free_page()
    assert page == END - PAGE_SIZE
    assert mem.refcount(page) == 1
    assert mem.free_page_count() == before - 1
    assert mem.get_free_page() == END - 2 * PAGE_SIZE


def test_page_is_zeroed_on_reuse(mem):
    page = mem.get_free_page()
    mem.write_word(page + 8, 1234)
    assert mem.read_word(page + 8) == 1234
    mem.free_page(page)
    again = mem.get_free_page()
    assert again == page
    assert mem.read_word(page + 8) == 0


def test_exhaustion_raises():
    small = PhysicalMemory(START, START + 2 * PAGE_SIZE)
    small.get_free_page()
    small.get_free_page()
    with pytest.raises(OutOfMemory):
        small.get_free_page()


def test_free_page_errors(mem):
    mem.free_page(0x1000)
    assert mem.free_page_count() == (END - START) // PAGE_SIZE
    with pytest.raises(KernelPanic):
        mem.free_page(START)
    with pytest.raises(KernelPanic):
        mem.free_page(END)


def test_unaligned_word_rejected(mem):
    with pytest.raises(ValueError):
        mem.read_word(2)
    with pytest.raises(ValueError):
        mem.write_word(START + 1, 5)


def _entry(mem, address):
    table = mem.read_word((address >> 20) & 0xFFC) & PAGE_MASK
    return mem.read_word(table + ((address >> 10) & 0xFFC))


def test_put_page_maps_page(mem):
    page = mem.get_free_page()
    assert mem.put_page(page, 0x400000) == page
    entry = _entry(mem, 0x400000)
    assert entry & PAGE_MASK == page
    assert entry & 3 == 3
    assert mem.read_word((0x400000 >> 20) & 0xFFC) & 1 == 1


def test_get_empty_page_maps_zero_page(mem):
    before = mem.free_page_count()
    mem.get_empty_page(0x401000)
    entry = _entry(mem, 0x401000)
    assert entry & 1
    assert mem.read_word(entry & PAGE_MASK) == 0
    assert mem.free_page_count() == before - 2


def test_copy_on_write_cycle(mem):
    initial = mem.free_page_count()
    page = mem.get_free_page()
    mem.put_page(page, 0x400000)
    mem.write_word(page, 77)

    mem.copy_page_tables(0x400000, 0x800000, 0x400000)
    assert mem.refcount(page) == 2
    shared = _entry(mem, 0x800000)
    assert shared & PAGE_MASK == page
    assert not shared & 2
    assert not _entry(mem, 0x400000) & 2

    mem.do_wp_page(0, 0x800000)
    private = _entry(mem, 0x800000)
    assert private & PAGE_MASK != page
    assert private & 2
    assert mem.read_word(private & PAGE_MASK) == 77
    assert mem.refcount(page) == 1

    mem.write_verify(0x400000)
    original = _entry(mem, 0x400000)
    assert original & PAGE_MASK == page
    assert original & 2

    mem.free_page_tables(0x800000, 0x400000)
    mem.free_page_tables(0x400000, 0x400000)
    assert mem.free_page_count() == initial


def test_copy_page_tables_errors(mem):
    mem.get_empty_page(0x400000)
    with pytest.raises(KernelPanic):
        mem.copy_page_tables(0x400100, 0x800000, 0x400000)
    mem.copy_page_tables(0x400000, 0x800000, 0x400000)
    with pytest.raises(KernelPanic):
        mem.copy_page_tables(0x400000, 0x800000, 0x400000)


def test_free_page_tables_errors(mem):
    with pytest.raises(KernelPanic):
        mem.free_page_tables(0, 0x400000)
    with pytest.raises(KernelPanic):
        mem.free_page_tables(0x401000, 0x400000)


def test_write_verify_ignores_unmapped(mem):
    before = mem.free_page_count()
    mem.write_verify(0xC00000)
    assert mem.free_page_count() == before


def test_calc_mem_report(mem):
    mem.get_empty_page(0x800000)
    mem.get_empty_page(0x801000)
    report = mem.calc_mem()
    assert report.free_pages == mem.free_page_count()
    assert report.tables == {0x800000 >> 22: 2}