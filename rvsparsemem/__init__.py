"""Sparse, chunked 32-bit guest memory for instruction-set emulators."""

__version__ = "0.1.0"
__all__ = ["memory"]