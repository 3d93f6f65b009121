"""Elementary (3-neighbour) cellular-automaton rule tables.

A rule maps the neighbourhood value ``left*4 + center*2 + right`` (0-7)
to the next state of the center cell. Tables are identified by their
Wolfram rule number: output for neighbourhood n is bit n of the number.

Rule 30 is the one the cipher uses. 110, 90 and 10 are kept for
experiments with other class III/IV automata.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Sequence, Tuple


@dataclass(frozen=True)
class RuleTable:
    number: int
    name: str = ""

    def __post_init__(self):
        if not isinstance(self.number, int) or not 0 <= self.number <= 0xFF:
            raise ValueError(f"rule number must be in 0..255, got {self.number!r}")
        if not self.name:
            object.__setattr__(self, "name", f"rule{self.number}")

    @classmethod
    def from_table(cls, outputs: Sequence[int], name: str = "") -> "RuleTable":
        """Build from eight outputs indexed by neighbourhood value 0..7."""
        if len(outputs) != 8:
            raise ValueError("a rule table needs exactly 8 entries")
        number = 0
        for neighbourhood, out in enumerate(outputs):
            if out not in (0, 1):
                raise ValueError("rule table entries must be 0 or 1")
            number |= out << neighbourhood
        return cls(number, name)

    @property
    def table(self) -> Tuple[int, ...]:
        return tuple((self.number >> n) & 1 for n in range(8))

    @property
    def minterms(self) -> Tuple[int, ...]:
        """Neighbourhood values whose output is 1."""
        return tuple(n for n in range(8) if (self.number >> n) & 1)

    def __getitem__(self, neighbourhood: int) -> int:
        if not 0 <= neighbourhood <= 7:
            raise IndexError("neighbourhood must be in 0..7")
        return (self.number >> neighbourhood) & 1

    def apply(self, left: int, center: int, right: int) -> int:
        return self[(left << 2) | (center << 1) | right]


RULE30 = RuleTable(0x1E, "rule30")
RULE110 = RuleTable(0x6E, "rule110")
RULE90 = RuleTable(0x5A, "rule90")
RULE10 = RuleTable(0x0A, "rule10")


def builtins() -> Dict[str, RuleTable]:
    """Return all built-in rule tables keyed by name."""
    return {r.name: r for r in (RULE30, RULE110, RULE90, RULE10)}
