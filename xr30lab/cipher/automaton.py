"""Table-driven cellular-automaton engine over the 256-bit circular register.

Each generation recomputes every cell from the previous generation only:

    new[i] = rule[ old[i-1]*4 + old[i]*2 + old[i+1] ]      (indices mod 256)

The register is evolved as one packed integer. Bit position i lives at
integer bit 255-i, so the left neighbour of every cell is obtained by a
one-bit right rotation of the whole integer and the right neighbour by a
one-bit left rotation.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

from typing import List

from .register import REGISTER_BITS, REGISTER_MASK, BlockLike, Register, as_register, like
from .rules import RULE30, RuleTable

# Generations in one "CA256" pass, used by both the key schedule and the
# Feistel round function.
CA256 = 255

_TOP = REGISTER_BITS - 1


def _left_neighbours(state: int) -> int:
    return (state >> 1) | ((state & 1) << _TOP)


def _right_neighbours(state: int) -> int:
    return ((state << 1) & REGISTER_MASK) | (state >> _TOP)


def _step_rule30(state: int) -> int:
    return _left_neighbours(state) ^ (state | _right_neighbours(state))


def _step_generic(state: int, minterms) -> int:
    left = _left_neighbours(state)
    right = _right_neighbours(state)
    out = 0
    for n in minterms:
        term = left if n & 4 else ~left
        term &= state if n & 2 else ~state
        term &= right if n & 1 else ~right
        out |= term
    return out & REGISTER_MASK


def evolve_int(state: int, rule_table: RuleTable, generations: int) -> int:
    """Evolve a packed 256-bit integer; see `evolve`."""
    if generations < 0:
        raise ValueError("generations must be non-negative")
    if rule_table.number == RULE30.number:
        for _ in range(generations):
            state = _step_rule30(state)
    else:
        minterms = rule_table.minterms
        for _ in range(generations):
            state = _step_generic(state, minterms)
    return state


def evolve(register: BlockLike, rule_table: RuleTable, generations: int) -> BlockLike:
    """Run `generations` synchronous updates of `register` under `rule_table`.

    Accepts a Register, 32 bytes or four 64-bit words and returns the result
    in the same representation. Zero generations return the register
    unchanged. The function keeps no state between calls.

    Raises:
        InvalidLength: if `register` is not exactly 256 bits.
    """
    start = as_register(register, what="register")
    if generations == 0:
        return like(register, start)
    return like(register, Register.from_int(evolve_int(start.to_int(), rule_table, generations)))


def step(register: BlockLike, rule_table: RuleTable = RULE30) -> BlockLike:
    return evolve(register, rule_table, 1)


def trace(register: BlockLike, rule_table: RuleTable, generations: int) -> List[Register]:
    """Every generation from the initial register up to `generations`."""
    if generations < 0:
        raise ValueError("generations must be non-negative")
    start = as_register(register, what="register")
    history = [start]
    state = start.to_int()
    for _ in range(generations):
        state = evolve_int(state, rule_table, 1)
        history.append(Register.from_int(state))
    return history
