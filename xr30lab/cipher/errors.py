from __future__ import annotations

from typing import Optional


class XR30Error(Exception):
    """Base class for every error raised by the XR30256 core."""


class InvalidLength(XR30Error, ValueError):
    """A key, plaintext or ciphertext was not exactly 256 bits wide."""

    def __init__(self, what: str, actual_bits: Optional[int], expected_bits: int = 256):
        self.what = what
        self.expected_bits = expected_bits
        self.actual_bits = actual_bits
        if actual_bits is None:
            msg = f"{what} must be exactly {expected_bits} bits"
        else:
            msg = f"{what} must be exactly {expected_bits} bits, got {actual_bits}"
        super().__init__(msg)


class AllocationFailure(XR30Error, MemoryError):
    """Building a scheduled key or working register ran out of memory."""
