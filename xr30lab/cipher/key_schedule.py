"""XR30256 key schedule.

The 256-bit master key k0|k1|k2|k3 is expanded into four 256-bit subkeys.
Subkey Kj starts from a mixing vector that keeps kj in its own limb and
puts kj + kj*ki (mod 2**64) in every other limb i:

    K1 <- CA256( k0 | k0+k0*k1 | k0+k0*k2 | k0+k0*k3 )
    K2 <- CA256( k1+k1*k0 | k1 | k1+k1*k2 | k1+k1*k3 )
    ...

CA256 is one 255-generation rule-30 pass over the circular register.

Weak keys are not filtered. The all-zero key, for example, produces four
all-zero subkeys because rule 30 maps the empty register to itself, and
any key whose mixing vectors fall into a short CA cycle yields subkeys
with very little diversity.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from .automaton import CA256, evolve
from .errors import AllocationFailure
from .register import LIMBS, WORD_MASK, Register
from .rules import RULE30, RuleTable


@dataclass(frozen=True)
class ScheduledKey:
    k1: Register
    k2: Register
    k3: Register
    k4: Register

    @property
    def subkeys(self) -> Tuple[Register, Register, Register, Register]:
        return self.k1, self.k2, self.k3, self.k4

    def encryption_order(self) -> Tuple[Register, ...]:
        return self.subkeys

    def decryption_order(self) -> Tuple[Register, ...]:
        return tuple(reversed(self.subkeys))

    def __iter__(self):
        return iter(self.subkeys)


def mixing_vector(words: Sequence[int], index: int) -> Register:
    """Pre-CA mixing vector for subkey number `index` (0-based)."""
    kj = words[index]
    return Register(tuple(
        kj if i == index else (kj + kj * ki) & WORD_MASK
        for i, ki in enumerate(words)
    ))


def derive(
    key: Sequence[int],
    rule_table: RuleTable = RULE30,
    generations: int = CA256,
) -> ScheduledKey:
    """Expand four 64-bit key words into a ScheduledKey."""
    words = Register.from_words(key, what="key").words
    try:
        subkeys = [evolve(mixing_vector(words, j), rule_table, generations) for j in range(LIMBS)]
    except MemoryError as exc:
        raise AllocationFailure("out of memory while scheduling key") from exc
    return ScheduledKey(*subkeys)
