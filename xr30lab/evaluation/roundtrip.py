"""Algebraic unit testing: roundtrip verification P = D(E(P, K), K).

Generates randomized test vectors and verifies that decryption perfectly
inverts encryption for every vector.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import random
import time
from dataclasses import dataclass, field, asdict
from typing import Any, Callable, Dict, List, Optional

from xr30lab.cipher.builder import build_cipher
from xr30lab.cipher.register import REGISTER_BYTES
from xr30lab.cipher.registry import RuleRegistry
from xr30lab.cipher.spec import CipherSpec


@dataclass
class RoundtripFailure:
    """Details of a single failed roundtrip test vector."""
    vector_index: int
    plaintext_hex: str
    key_hex: str
    ciphertext_hex: str
    decrypted_hex: str       # What decrypt returned (should equal plaintext)
    error: Optional[str]     # Exception message if decrypt/encrypt threw


@dataclass
class RoundtripResult:
    """Aggregate result of roundtrip testing for one parameterization."""
    algorithm_name: str
    rule: int
    rounds: int
    generations: int
    total_vectors: int
    passed: int
    failed: int
    failures: List[RoundtripFailure] = field(default_factory=list)
    elapsed_seconds: float = 0.0
    seed: int = 1337

    @property
    def success_rate(self) -> float:
        return self.passed / self.total_vectors if self.total_vectors > 0 else 0.0

    @property
    def is_perfect(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def summary(self) -> str:
        status = "PASS" if self.is_perfect else "FAIL"
        return (
            f"[{status}] {self.algorithm_name} (rule {self.rule}, {self.rounds} rounds): "
            f"{self.passed}/{self.total_vectors} vectors passed "
            f"({self.elapsed_seconds:.2f}s)"
        )


def _rand_bytes(rng: random.Random, n: int) -> bytes:
    return bytes(rng.randrange(0, 256) for _ in range(n))


def run_roundtrip_tests(
    spec: CipherSpec,
    *,
    num_vectors: int = 16,
    seed: int = 1337,
    max_failures_recorded: int = 10,
    registry: Optional[RuleRegistry] = None,
) -> RoundtripResult:
    """Run roundtrip verification P = D(E(P, K), K) across many test vectors.

    Args:
        spec: Cipher parameters to test.
        num_vectors: Number of random (plaintext, key) pairs to test.
        seed: Random seed for deterministic reproducibility.
        max_failures_recorded: Maximum number of failure details to keep.
        registry: Optional rule registry; uses default if not provided.

    Returns:
        RoundtripResult with pass/fail counts and failure details.
    """
    cipher = build_cipher(spec, registry)

    rng = random.Random(seed)
    passed = 0
    failed = 0
    failures: List[RoundtripFailure] = []

    start = time.perf_counter()

    for i in range(num_vectors):
        pt = _rand_bytes(rng, REGISTER_BYTES)
        key = _rand_bytes(rng, REGISTER_BYTES)

        try:
            ctx = cipher.context(key)
            ct = ctx.encrypt(pt)
            pt2 = ctx.decrypt(ct)

            if pt == pt2:
                passed += 1
            else:
                failed += 1
                if len(failures) < max_failures_recorded:
                    failures.append(RoundtripFailure(
                        vector_index=i,
                        plaintext_hex=pt.hex(),
                        key_hex=key.hex(),
                        ciphertext_hex=ct.hex(),
                        decrypted_hex=pt2.hex(),
                        error=None,
                    ))
        except Exception as exc:
            failed += 1
            if len(failures) < max_failures_recorded:
                failures.append(RoundtripFailure(
                    vector_index=i,
                    plaintext_hex=pt.hex(),
                    key_hex=key.hex(),
                    ciphertext_hex="<error>",
                    decrypted_hex="<error>",
                    error=str(exc),
                ))

    elapsed = time.perf_counter() - start

    return RoundtripResult(
        algorithm_name=spec.name,
        rule=spec.rule,
        rounds=spec.rounds,
        generations=spec.generations,
        total_vectors=num_vectors,
        passed=passed,
        failed=failed,
        failures=failures,
        elapsed_seconds=round(elapsed, 4),
        seed=seed,
    )


def run_all_rules(
    base: Optional[CipherSpec] = None,
    *,
    num_vectors: int = 16,
    seed: int = 1337,
    progress_callback: Optional[Callable[[str, int, int], None]] = None,
) -> List[RoundtripResult]:
    """Run roundtrip tests with every registered rule swapped into `base`.

    Args:
        base: Parameters to vary (default: XR30256).
        num_vectors: Number of test vectors per rule.
        seed: Random seed for reproducibility.
        progress_callback: Optional callback(rule_name, current_index, total).

    Returns:
        List of RoundtripResult sorted by rule number.
    """
    base = base or CipherSpec()
    registry = RuleRegistry()
    rules = registry.list()
    results: List[RoundtripResult] = []

    for idx, table in enumerate(rules):
        if progress_callback:
            progress_callback(table.name, idx, len(rules))

        spec = base.model_copy(update={"rule": table.number, "name": f"{base.name}-{table.name}"})
        results.append(run_roundtrip_tests(
            spec,
            num_vectors=num_vectors,
            seed=seed,
            registry=registry,
        ))

    return sorted(results, key=lambda r: r.rule)
