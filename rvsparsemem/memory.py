"""Sparse 32-bit guest memory backed by lazily allocated 64 KiB chunks."""

from __future__ import annotations

from collections.abc import Iterator

ADDRESS_MASK = 0xFFFFFFFF
CHUNK_BITS = 16
CHUNK_SIZE = 1 << CHUNK_BITS
CHUNK_MASK = CHUNK_SIZE - 1


class MemoryAccessError(Exception):
    """Raised for accesses the memory cannot satisfy."""


class Memory:
    """A 4 GiB little-endian address space that only stores touched chunks.

    Chunks are allocated on the first write that reaches them. Bulk reads
    treat unallocated chunks as zero-filled; the fixed-size loads and
    instruction fetches require the chunk to exist.
    """

    def __init__(self) -> None:
        self._chunks: dict[int, bytearray] = {}

    @staticmethod
    def _spans(addr: int, size: int) -> Iterator[tuple[int, int, int, int]]:
        """Split a range into (chunk index, chunk offset, length, data offset)."""
        offset = 0
        pos = addr & ADDRESS_MASK
        while offset < size:
            lo = pos & CHUNK_MASK
            n = min(CHUNK_SIZE - lo, size - offset)
            yield pos >> CHUNK_BITS, lo, n, offset
            offset += n
            pos = (pos + n) & ADDRESS_MASK

    def _chunk_for_write(self, index: int) -> bytearray:
        chunk = self._chunks.get(index)
        if chunk is None:
            chunk = bytearray(CHUNK_SIZE)
            self._chunks[index] = chunk
        return chunk

    def _load(self, addr: int, size: int) -> int:
        addr &= ADDRESS_MASK
        if (addr >> CHUNK_BITS) not in self._chunks:
            raise MemoryAccessError(f"access to unmapped address {addr:#010x}")
        return int.from_bytes(self.read(addr, size), "little")

    def _store(self, addr: int, value: int, size: int) -> None:
        mask = (1 << (8 * size)) - 1
        self.write(addr, (value & mask).to_bytes(size, "little"))

    def read(self, addr: int, size: int) -> bytes:
        """Return ``size`` bytes at ``addr``; unmapped memory reads as zero."""
        if size < 0:
            raise ValueError("size must not be negative")
        out = bytearray(size)
        for index, lo, n, offset in self._spans(addr, size):
            chunk = self._chunks.get(index)
            if chunk is not None:
                out[offset:offset + n] = chunk[lo:lo + n]
        return bytes(out)

    def read_str(self, addr: int, limit: int) -> tuple[bytes, int]:
        """Read a NUL-terminated string starting at ``addr``.

        Returns the first ``limit`` bytes of the string (terminator included
        when it fits) and the full length of the string including its
        terminator.
        """
        if limit < 0:
            raise ValueError("limit must not be negative")
        collected = bytearray()
        length = 0
        pos = addr & ADDRESS_MASK
        while True:
            if length > ADDRESS_MASK:
                raise MemoryAccessError("no string terminator in address space")
            index, lo = pos >> CHUNK_BITS, pos & CHUNK_MASK
            chunk = self._chunks.get(index)
            if chunk is None:
                segment = b"\x00"
                found = True
            else:
                end = chunk.find(0, lo)
                found = end != -1
                segment = chunk[lo:end + 1] if found else chunk[lo:]
            room = limit - len(collected)
            if room > 0:
                collected += segment[:room]
            length += len(segment)
            if found:
                return bytes(collected), length
            pos = (pos + len(segment)) & ADDRESS_MASK

    def ifetch(self, addr: int) -> int:
        """Fetch a 32-bit instruction word; ``addr`` must be 2-byte aligned."""
        if addr & 1:
            raise MemoryAccessError(f"misaligned instruction fetch at {addr:#010x}")
        return self._load(addr, 4)

    def read_w(self, addr: int) -> int:
        """Load a little-endian 32-bit word."""
        return self._load(addr, 4)

    def read_s(self, addr: int) -> int:
        """Load a little-endian 16-bit halfword."""
        return self._load(addr, 2)

    def read_b(self, addr: int) -> int:
        """Load a single byte."""
        return self._load(addr, 1)

    def write(self, addr: int, data: bytes) -> None:
        """Store ``data`` at ``addr``, allocating chunks as needed."""
        view = memoryview(bytes(data))
        for index, lo, n, offset in self._spans(addr, len(view)):
            self._chunk_for_write(index)[lo:lo + n] = view[offset:offset + n]

    def write_w(self, addr: int, value: int) -> None:
        """Store the low 32 bits of ``value`` little-endian."""
        self._store(addr, value, 4)

    def write_s(self, addr: int, value: int) -> None:
        """Store the low 16 bits of ``value`` little-endian."""
        self._store(addr, value, 2)

    def write_b(self, addr: int, value: int) -> None:
        """Store the low 8 bits of ``value``."""
        self._store(addr, value, 1)

    def fill(self, addr: int, size: int, value: int) -> None:
        """Set ``size`` bytes starting at ``addr`` to the low byte of ``value``."""
        if size < 0:
            raise ValueError("size must not be negative")
        byte = value & 0xFF
        for index, lo, n, _ in self._spans(addr, size):
            self._chunk_for_write(index)[lo:lo + n] = bytes((byte,)) * n

    def clear(self) -> None:
        """Release every allocated chunk."""
        self._chunks.clear()