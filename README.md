# rvsparsemem

A sparse, byte-addressable 32-bit memory model for instruction-set emulators,
such as an RV32 emulator. The 4 GiB little-endian address space is split into
64 KiB chunks. A chunk is allocated only when something is first written to
it, so only the memory a guest actually touches takes up room.

Everything lives in one module, `rvsparsemem.memory`, which provides the
`Memory` class and the `MemoryAccessError` exception.

## Installation

```
pip install rvsparsemem
```

## Usage

```python
from rvsparsemem.memory import Memory, MemoryAccessError

mem = Memory()

# Bulk writes and reads; both may span chunk boundaries.
mem.write(0x1000, b"Hello, guest!\0")
assert mem.read(0x1000, 5) == b"Hello"

# NUL-terminated strings. read_str returns the first `limit` bytes of the
# string (terminator included when it fits) and the string's full length,
# terminator included.
text, length = mem.read_str(0x1000, 64)
assert text == b"Hello, guest!\0"
assert length == 14

truncated, length = mem.read_str(0x1000, 5)
assert truncated == b"Hello"
assert length == 14

# Little-endian word, halfword and byte access.
mem.write_w(0x2000, 0x03800513)
mem.write_s(0x2004, 0xBEEF)
mem.write_b(0x2006, 0x7F)
assert mem.read_w(0x2000) == 0x03800513
assert mem.read_s(0x2004) == 0xBEEF
assert mem.read_b(0x2006) == 0x7F

# Instruction fetch of a 32-bit word at a 2-byte aligned address.
assert mem.ifetch(0x2000) == 0x03800513

# Fill a region with one byte value.
mem.fill(0x3000, 256, 0xAA)
assert mem.read(0x3000, 4) == b"\xaa\xaa\xaa\xaa"

# Release every chunk.
mem.clear()
```

## Reads from unallocated memory

`read` and `read_str` return zero bytes for memory that was never written; a
string that starts in an unallocated chunk reads as empty. The typed reads
(`read_w`, `read_s`, `read_b`) and `ifetch` raise `MemoryAccessError` when
the chunk holding the starting address was never allocated. `ifetch` also
raises `MemoryAccessError` for an odd address.

## Addresses, sizes and values

Addresses wrap modulo 2**32, so an access running past `0xFFFFFFFF` continues
at address 0. Values passed to `write_w`, `write_s`, `write_b` and `fill` are
truncated to 32, 16, 8 and 8 bits respectively. A negative size for `read` or
`fill`, or a negative limit for `read_str`, raises `ValueError`.

## What this package does not do

It is only the memory. It has no CPU, instruction decoder, executable loader,
system calls or command-line program; those are left to the emulator that
uses it.

## Running the tests

```
pip install -e ".[test]"
pytest
```