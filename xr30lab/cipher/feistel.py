"""Generalized Feistel network of XR30256.

Every outer round runs four steps with the subkeys in order. A step takes
the half updated last (the right half on the very first step), expands it
to 256 bits, mixes it with the step's subkey and pushes it through one
CA256 pass. The evolved register folded back to 128 bits is XORed into the
other half:

    L ^= F(K1, R);  R ^= F(K2, L);  L ^= F(K3, R);  R ^= F(K4, L)

    F(K, V) = fold( CA256( (V || V) ^ K ) )

There is no swap inside the network, so the output block is written as
right || left. Decryption is the same network fed the subkeys in reverse
order (K4, K3, K2, K1).

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

from typing import Sequence

from .automaton import CA256, evolve
from .errors import AllocationFailure
from .key_schedule import ScheduledKey
from .register import Half, Register
from .rules import RULE30, RuleTable

ROUNDS = 16
STEPS_PER_ROUND = 4


def round_function(
    source: Half,
    subkey: Register,
    rule_table: RuleTable = RULE30,
    generations: int = CA256,
) -> Half:
    working = Register.duplicate(source) ^ subkey
    return evolve(working, rule_table, generations).fold()


def _xor_half(a: Half, b: Half) -> Half:
    return a[0] ^ b[0], a[1] ^ b[1]


def run_network(
    block: Register,
    subkeys: Sequence[Register],
    *,
    rounds: int = ROUNDS,
    rule_table: RuleTable = RULE30,
    generations: int = CA256,
) -> Register:
    if len(subkeys) != STEPS_PER_ROUND:
        raise ValueError(f"expected {STEPS_PER_ROUND} subkeys, got {len(subkeys)}")
    if rounds < 1:
        raise ValueError("rounds must be positive")

    left, right = block.left, block.right
    try:
        for _ in range(rounds):
            for step_index, subkey in enumerate(subkeys):
                if step_index % 2 == 0:
                    left = _xor_half(left, round_function(right, subkey, rule_table, generations))
                else:
                    right = _xor_half(right, round_function(left, subkey, rule_table, generations))
    except MemoryError as exc:
        raise AllocationFailure("out of memory in the Feistel network") from exc

    return Register.from_halves(right, left)


def encrypt(
    block: Register,
    scheduled_key: ScheduledKey,
    *,
    rounds: int = ROUNDS,
    rule_table: RuleTable = RULE30,
    generations: int = CA256,
) -> Register:
    return run_network(
        block, scheduled_key.encryption_order(),
        rounds=rounds, rule_table=rule_table, generations=generations,
    )


def decrypt(
    block: Register,
    scheduled_key: ScheduledKey,
    *,
    rounds: int = ROUNDS,
    rule_table: RuleTable = RULE30,
    generations: int = CA256,
) -> Register:
    return run_network(
        block, scheduled_key.decryption_order(),
        rounds=rounds, rule_table=rule_table, generations=generations,
    )
