"""Subkey diversity probe for the XR30256 weak-key classes.

The key schedule is not hardened against weak keys: some master keys give
subkeys that are all zero, nearly constant, or identical to each other, and
some mixing vectors fall into a short rule-30 cycle during their CA256
pass. This module measures those symptoms; it never changes the schedule.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

from dataclasses import dataclass, field, asdict
from itertools import combinations
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from xr30lab.cipher.automaton import evolve_int
from xr30lab.cipher.key_schedule import ScheduledKey, derive, mixing_vector
from xr30lab.cipher.register import LIMBS, REGISTER_BITS, Register, WORD_MASK
from xr30lab.cipher.registry import RuleRegistry
from xr30lab.cipher.rules import RuleTable
from xr30lab.cipher.spec import CipherSpec

# A 256-bit subkey is considered degenerate when its weight or its distance
# to another subkey is further than this from the ideal 128.
MIN_WEIGHT = 64
MIN_DISTANCE = 64

KNOWN_WEAK_KEYS: Dict[str, Tuple[int, int, int, int]] = {
    "all-zero": (0, 0, 0, 0),
    "all-ones": (WORD_MASK, WORD_MASK, WORD_MASK, WORD_MASK),
    "single-word": (1, 0, 0, 0),
    "alternating": (0x5555555555555555,) * LIMBS,
}


@dataclass
class SubkeyDiversityResult:
    label: str
    key_hex: str
    popcounts: List[int] = field(default_factory=list)
    pairwise_distances: List[int] = field(default_factory=list)
    min_pairwise_distance: int = 0
    zero_subkeys: int = 0
    cycles: List[Optional[int]] = field(default_factory=list)  # period per mixing vector, None if no cycle

    @property
    def is_degenerate(self) -> bool:
        return (
            self.zero_subkeys > 0
            or any(p < MIN_WEIGHT or p > REGISTER_BITS - MIN_WEIGHT for p in self.popcounts)
            or self.min_pairwise_distance < MIN_DISTANCE
            or any(c is not None for c in self.cycles)
        )

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["is_degenerate"] = self.is_degenerate
        return d

    def summary(self) -> str:
        status = "WEAK" if self.is_degenerate else "OK"
        return (
            f"[{status}] {self.label}: weights={self.popcounts}, "
            f"min distance={self.min_pairwise_distance}, zero subkeys={self.zero_subkeys}"
        )


def subkey_bits(scheduled_key: ScheduledKey) -> np.ndarray:
    """4 x 256 array of subkey bits, most significant bit first."""
    raw = b"".join(k.to_bytes() for k in scheduled_key)
    return np.unpackbits(np.frombuffer(raw, dtype=np.uint8)).reshape(LIMBS, REGISTER_BITS)


def find_cycle(register: Register, rule_table: RuleTable, generations: int) -> Optional[int]:
    """Period of the first cycle entered within `generations` steps, if any."""
    seen: Dict[int, int] = {}
    state = register.to_int()
    for gen in range(generations + 1):
        if state in seen:
            return gen - seen[state]
        seen[state] = gen
        state = evolve_int(state, rule_table, 1)
    return None


def analyze_subkeys(
    key: Tuple[int, int, int, int],
    *,
    label: str = "",
    rule_table: Optional[RuleTable] = None,
    generations: int = 255,
) -> SubkeyDiversityResult:
    rule_table = rule_table or RuleRegistry().get(30)
    words = Register.from_words(key, what="key").words
    skey = derive(words, rule_table, generations)

    bits = subkey_bits(skey)
    popcounts = [int(n) for n in bits.sum(axis=1)]
    distances = [int(np.count_nonzero(bits[i] != bits[j])) for i, j in combinations(range(LIMBS), 2)]
    cycles = [find_cycle(mixing_vector(words, j), rule_table, generations) for j in range(LIMBS)]

    return SubkeyDiversityResult(
        label=label or Register(words).to_hex()[:16],
        key_hex=Register(words).to_hex(),
        popcounts=popcounts,
        pairwise_distances=distances,
        min_pairwise_distance=min(distances),
        zero_subkeys=sum(1 for p in popcounts if p == 0),
        cycles=cycles,
    )


def probe_known_weak_keys(
    spec: Optional[CipherSpec] = None,
    *,
    registry: Optional[RuleRegistry] = None,
) -> List[SubkeyDiversityResult]:
    spec = spec or CipherSpec()
    reg = registry or RuleRegistry()
    table = reg.get(spec.rule)
    return [
        analyze_subkeys(key, label=label, rule_table=table, generations=spec.key_generations)
        for label, key in KNOWN_WEAK_KEYS.items()
    ]
