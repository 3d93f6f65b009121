"""256-bit circular register made of four 64-bit limbs.

Limb 0 is the most significant limb. Bit position 0 is the most
significant bit of limb 0 and position 255 the least significant bit of
limb 3, so "left" means towards lower positions / more significant bits.
The two ends of the register are joined: rotations carry the bit that
falls off one limb into the neighbouring limb and the last limb wraps
back into the first.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Any, Sequence, Tuple, Union

from .errors import InvalidLength

WORD_BITS = 64
LIMBS = 4
REGISTER_BITS = WORD_BITS * LIMBS
REGISTER_BYTES = REGISTER_BITS // 8

WORD_MASK = (1 << WORD_BITS) - 1
REGISTER_MASK = (1 << REGISTER_BITS) - 1

_PACK = ">%dQ" % LIMBS

Half = Tuple[int, int]
BlockLike = Union["Register", bytes, bytearray, memoryview, Sequence[int]]


def _check_word(word: Any) -> int:
    if not isinstance(word, int):
        raise TypeError(f"limbs must be int, got {type(word).__name__}")
    if word < 0 or word > WORD_MASK:
        raise ValueError(f"limb {word:#x} does not fit in {WORD_BITS} bits")
    return word


@dataclass(frozen=True)
class Register:
    """Immutable 256-bit value; every operation returns a new Register."""

    limbs: Tuple[int, int, int, int]

    def __post_init__(self):
        limbs = tuple(self.limbs)
        if len(limbs) != LIMBS:
            raise InvalidLength("register", len(limbs) * WORD_BITS)
        for word in limbs:
            _check_word(word)
        object.__setattr__(self, "limbs", limbs)

    # ------------------------------------------------------------------
    # Construction / conversion
    # ------------------------------------------------------------------

    @classmethod
    def zero(cls) -> "Register":
        return cls((0, 0, 0, 0))

    @classmethod
    def from_int(cls, value: int) -> "Register":
        if value < 0 or value > REGISTER_MASK:
            raise ValueError(f"value does not fit in {REGISTER_BITS} bits")
        return cls(tuple(
            (value >> (WORD_BITS * (LIMBS - 1 - i))) & WORD_MASK for i in range(LIMBS)
        ))

    def to_int(self) -> int:
        value = 0
        for word in self.limbs:
            value = (value << WORD_BITS) | word
        return value

    @classmethod
    def from_bytes(cls, data: bytes, what: str = "register") -> "Register":
        """Big-endian limbs: the first 8 bytes become limb 0."""
        if len(data) != REGISTER_BYTES:
            raise InvalidLength(what, len(data) * 8)
        return cls(struct.unpack(_PACK, bytes(data)))

    def to_bytes(self) -> bytes:
        return struct.pack(_PACK, *self.limbs)

    @classmethod
    def from_words(cls, words: Sequence[int], what: str = "register") -> "Register":
        if len(words) != LIMBS:
            raise InvalidLength(what, len(words) * WORD_BITS)
        for word in words:
            if not isinstance(word, int):
                raise TypeError(f"{what} words must be int, got {type(word).__name__}")
            if word < 0 or word > WORD_MASK:
                # a wider word makes the whole value wider than 256 bits
                raise InvalidLength(what, None)
        return cls(tuple(words))

    @property
    def words(self) -> Tuple[int, int, int, int]:
        return self.limbs

    @classmethod
    def from_hex(cls, text: str, what: str = "register") -> "Register":
        cleaned = "".join(text.split())
        if cleaned[:2].lower() == "0x":
            cleaned = cleaned[2:]
        return cls.from_bytes(bytes.fromhex(cleaned), what=what)

    def to_hex(self, sep: str = "") -> str:
        return sep.join(f"{w:016x}" for w in self.limbs)

    def to_binary(self, sep: str = "") -> str:
        """Bit string, most significant bit of limb 0 first."""
        return sep.join(format(w, "064b") for w in self.limbs)

    @classmethod
    def single_bit(cls, position: int) -> "Register":
        if not 0 <= position < REGISTER_BITS:
            raise IndexError("bit position out of range")
        return cls.from_int(1 << (REGISTER_BITS - 1 - position))

    # ------------------------------------------------------------------
    # Halves
    # ------------------------------------------------------------------

    @property
    def left(self) -> Half:
        return self.limbs[0], self.limbs[1]

    @property
    def right(self) -> Half:
        return self.limbs[2], self.limbs[3]

    @classmethod
    def from_halves(cls, left: Half, right: Half) -> "Register":
        return cls(tuple(left) + tuple(right))

    @classmethod
    def duplicate(cls, half: Half) -> "Register":
        """Place the same 128-bit value in both halves."""
        return cls.from_halves(half, half)

    def fold(self) -> Half:
        """XOR the left 128 bits onto the right 128 bits."""
        a, b, c, d = self.limbs
        return a ^ c, b ^ d

    # ------------------------------------------------------------------
    # Bit operations
    # ------------------------------------------------------------------

    def bit(self, position: int) -> int:
        if not 0 <= position < REGISTER_BITS:
            raise IndexError("bit position out of range")
        limb, offset = divmod(position, WORD_BITS)
        return (self.limbs[limb] >> (WORD_BITS - 1 - offset)) & 1

    def popcount(self) -> int:
        return sum(w.bit_count() for w in self.limbs)

    def __xor__(self, other: "Register") -> "Register":
        if not isinstance(other, Register):
            return NotImplemented
        return Register(tuple(a ^ b for a, b in zip(self.limbs, other.limbs)))

    def rotate_right(self, count: int = 1) -> "Register":
        """Rotate towards higher positions; position 255 wraps to position 0."""
        limbs = list(self.limbs)
        for _ in range(count % REGISTER_BITS):
            carry = limbs[-1] & 1
            for i in range(LIMBS):
                next_carry = limbs[i] & 1
                limbs[i] = (limbs[i] >> 1) | (carry << (WORD_BITS - 1))
                carry = next_carry
        return Register(tuple(limbs))

    def rotate_left(self, count: int = 1) -> "Register":
        """Rotate towards lower positions; position 0 wraps to position 255."""
        limbs = list(self.limbs)
        for _ in range(count % REGISTER_BITS):
            carry = limbs[0] >> (WORD_BITS - 1)
            for i in reversed(range(LIMBS)):
                next_carry = limbs[i] >> (WORD_BITS - 1)
                limbs[i] = ((limbs[i] << 1) & WORD_MASK) | carry
                carry = next_carry
        return Register(tuple(limbs))

    def __repr__(self) -> str:
        return f"Register({self.to_hex(' ')})"


def as_register(value: BlockLike, what: str = "block") -> Register:
    """Accept a Register, 32 bytes, or four 64-bit words."""
    if isinstance(value, Register):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return Register.from_bytes(bytes(value), what=what)
    if isinstance(value, (list, tuple)):
        return Register.from_words(value, what=what)
    raise TypeError(f"{what} must be bytes, a sequence of four ints or a Register, "
                    f"got {type(value).__name__}")


def like(template: BlockLike, register: Register) -> BlockLike:
    """Return `register` in the same representation as `template`."""
    if isinstance(template, Register):
        return register
    if isinstance(template, (bytes, bytearray, memoryview)):
        return register.to_bytes()
    return register.words
