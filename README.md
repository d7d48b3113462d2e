# kernkit

Pure-Python models of the pieces of a small Unix-like kernel: its character
table, string routines, paged physical memory, object allocator, executable
headers, signal sets and terminal queues, plus a tool that joins the boot
files into a disk image.

## Modules

- `kernkit.ctype`: the fixed character classification table (`CharClass`
  flags) and `isalnum`, `isalpha`, `iscntrl`, `isdigit`, `isgraph`,
  `islower`, `isprint`, `ispunct`, `isspace`, `isupper`, `isxdigit`,
  `isascii`, `toascii`, `tolower`, `toupper`. Each takes a one-character
  string or a code from -1 (EOF) to 255; codes above 127 have no class.
- `kernkit.cstring`: C string and memory routines over byte strings. A C
  string ends at the first NUL. Searches (`strchr`, `strrchr`, `strpbrk`,
  `strstr`, `memchr`) return an index or `None`; comparisons (`strcmp`,
  `strncmp`, `memcmp`) treat bytes as signed and return -1, 0 or 1.
  `strncpy`, `strcat` and `strncat` return new bytes; `memmove` and `memset`
  work in place on a `bytearray`. `Tokenizer(s).next(delims)` hands out
  tokens one at a time and returns `None` when the string is used up.
- `kernkit.modes`: `FileType`, `file_type`, `s_isreg`, `s_isdir`,
  `s_ischr`, `s_isblk`, `s_isfifo` and `permission_string`, which gives the
  `rwxrwxrwx` form with set-id and sticky bits.
- `kernkit.status`: decoding of wait status words: `wifexited`,
  `wifstopped`, `wifsignaled`, `wexitstatus`, `wtermsig`, `wstopsig`.
- `kernkit.physmem`: `PhysicalMemory`, a simulated memory of up to 16 MiB
  with a reference count per 4 KiB page above 1 MiB, a page directory at
  address 0 and i386-style page tables. It offers `read_word`/`write_word`,
  `get_free_page`, `free_page`, `free_page_tables`, `copy_page_tables`
  (which write-protects the shared pages), `put_page`, `un_wp_page`,
  `do_wp_page`, `write_verify`, `get_empty_page`, `refcount`,
  `free_page_count` and `calc_mem`, which returns a `MemoryReport`.
  Inconsistencies raise `KernelPanic`; running out of pages raises
  `OutOfMemory`.
- `kernkit.kmalloc`: `BucketAllocator`, which hands out objects of 16 to
  4096 bytes from pages of a `PhysicalMemory`, one object size per page.
  `malloc`, `free`, `free_s` (with a size hint) and `buckets_in_use`.
- `kernkit.errors`: `Errno`, the `Syscall` numbers, `SyscallError` and
  `check_result`, which turns a negative raw result into `SyscallError`.
- `kernkit.aout`: `ExecHeader` and `RelocationInfo`, read from and written
  to bytes, with segment file offsets and load addresses; `Magic` and
  `SymbolType`.
- `kernkit.sigset`: `Signal` numbers and `SignalSet`, a 32-bit mask with
  `add`, `discard`, `is_member`, `fill`, `clear` and `apply` (block,
  unblock or set the mask, returning the previous set).
- `kernkit.ttyqueue`: `TtyQueue`, a 1024-slot ring buffer that holds up to
  1023 bytes, and `Termios` with its `ControlChar` special characters,
  which default to ^C, ^\, DEL, ^U, ^D and so on.
- `kernkit.imagebuild`: `build_image` and the `kernkit-build` command.

## Example

```python
from kernkit.physmem import PhysicalMemory
from kernkit.kmalloc import BucketAllocator

mem = PhysicalMemory(0x400000, 0x1000000)
heap = BucketAllocator(mem)
obj = heap.malloc(100)        # comes from the 128-byte bucket
heap.free(obj)
print(mem.free_page_count())
```

## Building a boot image

```
kernkit-build bootsect setup system [rootdev] > Image
```

The boot sector and setup files must start with a 32-byte Minix executable
header, which is checked and stripped. The boot sector must then be exactly
512 bytes and end in `0xAA55`; the root device's minor and major numbers are
written into bytes 508 and 509. Setup may take at most four sectors and is
padded with zeros to that size. The system file is copied as it is and may
be at most 0x30000 bytes. `rootdev` is `FLOPPY` (device 0, 0) or a device
file whose number is looked up; without it the root device is (3, 1). Only
major numbers 0, 2 and 3 are accepted. Progress messages and errors go to
standard error, and the command exits with status 1 on any error.

From Python, `build_image(bootsect, setup, system, rootdev, out, log)`
writes to a binary stream and returns the sizes of the boot sector, the
unpadded setup code and the system image; failures raise `BuildError`.

## What it does not do

kernkit models data structures and routines one at a time. It does not run
processes or schedule tasks, has no file system, buffer cache or device
drivers, and does not load pages on demand from executables. The `Syscall`
and `Errno` values are numbers only; nothing here carries out system calls.

## Tests

```
pip install -e .[test]
pytest
```