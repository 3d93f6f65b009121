from __future__ import annotations

import random
from typing import Dict

from .builder import BlockCipher


def _hamming_distance_bytes(a: bytes, b: bytes) -> int:
    if len(a) != len(b):
        raise ValueError("hamming distance length mismatch")
    dist = 0
    for x, y in zip(a, b):
        dist += (x ^ y).bit_count()
    return dist


def _flip_bit(data: bytes, bit_index: int) -> bytes:
    byte_i = bit_index // 8
    bit_i = bit_index % 8
    if byte_i < 0 or byte_i >= len(data):
        raise IndexError("bit_index out of range")
    mask = 1 << bit_i
    out = bytearray(data)
    out[byte_i] ^= mask
    return bytes(out)


def _rand_bytes(rng: random.Random, n: int) -> bytes:
    return bytes(rng.randrange(0, 256) for _ in range(n))


def avalanche_plaintext(
    cipher: BlockCipher,
    *,
    block_size_bytes: int = 32,
    key_size_bytes: int = 32,
    trials: int = 16,
    flips_per_trial: int = 1,
    seed: int = 1337,
) -> Dict[str, float]:
    rng = random.Random(seed)
    total_frac = 0.0
    min_frac = 1.0
    total_bits = block_size_bytes * 8
    for _ in range(trials):
        key = _rand_bytes(rng, key_size_bytes)
        pt = _rand_bytes(rng, block_size_bytes)
        ct = cipher.encrypt_block(pt, key)
        for _ in range(flips_per_trial):
            bit = rng.randrange(0, total_bits)
            ct2 = cipher.encrypt_block(_flip_bit(pt, bit), key)
            frac = _hamming_distance_bytes(ct, ct2) / total_bits
            total_frac += frac
            min_frac = min(min_frac, frac)
    denom = trials * flips_per_trial
    return {
        "mean": total_frac / denom if denom else 0.0,
        "min": min_frac if denom else 0.0,
    }


def avalanche_key(
    cipher: BlockCipher,
    *,
    block_size_bytes: int = 32,
    key_size_bytes: int = 32,
    trials: int = 16,
    flips_per_trial: int = 1,
    seed: int = 1337,
) -> Dict[str, float]:
    rng = random.Random(seed + 1)
    total_frac = 0.0
    min_frac = 1.0
    total_bits = block_size_bytes * 8
    key_bits = key_size_bytes * 8
    for _ in range(trials):
        key = _rand_bytes(rng, key_size_bytes)
        pt = _rand_bytes(rng, block_size_bytes)
        ct = cipher.encrypt_block(pt, key)
        for _ in range(flips_per_trial):
            bit = rng.randrange(0, key_bits)
            ct2 = cipher.encrypt_block(pt, _flip_bit(key, bit))
            frac = _hamming_distance_bytes(ct, ct2) / total_bits
            total_frac += frac
            min_frac = min(min_frac, frac)
    denom = trials * flips_per_trial
    return {
        "mean": total_frac / denom if denom else 0.0,
        "min": min_frac if denom else 0.0,
    }


def evaluate_cipher(cipher: BlockCipher, *, rounds: int, trials: int, seed: int) -> Dict[str, object]:
    pt = avalanche_plaintext(cipher, trials=trials, seed=seed)
    kk = avalanche_key(cipher, trials=trials, seed=seed)
    return {
        "block_size_bits": 256,
        "key_size_bits": 256,
        "rounds": rounds,
        "trials": trials,
        "plaintext_avalanche": pt,
        "key_avalanche": kk,
    }
