"""Throughput benchmark and evaluation-suite orchestrator.

The throughput loop mirrors the classic "encryptions per second" harness:
encrypt continuously for a fixed wall-clock window, count the blocks, and
repeat for several windows. Blocks can be fanned out over a thread pool;
the core keeps no shared mutable state, so every thread reuses the same
CipherContext.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import logging
import random
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, asdict
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np
from pydantic import BaseModel, Field

from xr30lab.cipher.builder import CipherContext, build_cipher
from xr30lab.cipher.register import REGISTER_BITS, REGISTER_BYTES, BlockLike
from xr30lab.cipher.spec import CipherSpec
from xr30lab.config import Settings
from xr30lab.utils.repro import make_run_dir, write_json

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Configuration data structures
# ---------------------------------------------------------------------------

class BenchmarkConfig(BaseModel):
    """Throughput measurement parameters."""
    spec: CipherSpec = Field(default_factory=CipherSpec)
    seconds: float = Field(default=1.0, gt=0.0)
    windows: int = Field(default=3, ge=1, le=100)
    threads: int = Field(default=1, ge=1, le=64)
    seed: int = Field(default=1337)


class SuiteConfig(BaseModel):
    """What a full evaluation run covers."""
    suite_name: str = "xr30256"
    benchmark: BenchmarkConfig = Field(default_factory=BenchmarkConfig)
    roundtrip_vectors: int = Field(default=16, ge=1)
    all_rules: bool = Field(default=False, description="Also roundtrip every registered rule")
    avalanche_trials: int = Field(default=16, ge=1)
    sac_trials: int = Field(default=0, ge=0, description="0 skips SAC")
    weak_keys: bool = True
    output_dir: str = "runs"


# ---------------------------------------------------------------------------
# Metrics data structures
# ---------------------------------------------------------------------------

@dataclass
class ThroughputResult:
    algorithm_name: str
    threads: int
    seconds_per_window: float
    window_counts: List[int] = field(default_factory=list)
    total_blocks: int = 0
    elapsed_seconds: float = 0.0
    blocks_per_second: float = 0.0
    blocks_per_second_std: float = 0.0

    @property
    def bits_per_second(self) -> float:
        return self.blocks_per_second * REGISTER_BITS

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["bits_per_second"] = self.bits_per_second
        return d

    def summary(self) -> str:
        return (
            f"{self.algorithm_name}: {self.blocks_per_second:.1f} encryptions/sec "
            f"(+/- {self.blocks_per_second_std:.1f}, {self.threads} thread(s), "
            f"{len(self.window_counts)} window(s))"
        )


# ---------------------------------------------------------------------------
# Throughput
# ---------------------------------------------------------------------------

def encrypt_blocks(context: CipherContext, blocks: Sequence[BlockLike], *, threads: int = 1) -> List[BlockLike]:
    """Encrypt independent blocks, optionally on a thread pool; order is preserved."""
    if threads <= 1:
        return [context.encrypt(b) for b in blocks]
    with ThreadPoolExecutor(max_workers=threads) as pool:
        return list(pool.map(context.encrypt, blocks))


def _rand_bytes(rng: random.Random, n: int) -> bytes:
    return bytes(rng.randrange(0, 256) for _ in range(n))


def measure_throughput(
    config: BenchmarkConfig,
    *,
    progress_callback: Optional[Callable[[str, int, int], None]] = None,
    clock: Callable[[], float] = time.perf_counter,
) -> ThroughputResult:
    rng = random.Random(config.seed)
    context = build_cipher(config.spec).context(_rand_bytes(rng, REGISTER_BYTES))
    block = _rand_bytes(rng, REGISTER_BYTES)

    counts: List[int] = []
    pool = ThreadPoolExecutor(max_workers=config.threads) if config.threads > 1 else None
    started = clock()
    try:
        for window in range(config.windows):
            if progress_callback:
                progress_callback("throughput", window, config.windows)

            window_start = clock()
            count = 0
            while clock() - window_start < config.seconds:
                if pool is None:
                    block = context.encrypt(block)
                    count += 1
                else:
                    count += len(list(pool.map(context.encrypt, [block] * config.threads)))
            counts.append(count)
            logger.info("%d encryptions/sec", int(count / config.seconds))
    finally:
        if pool is not None:
            pool.shutdown()

    rates = np.asarray(counts, dtype=float) / config.seconds
    return ThroughputResult(
        algorithm_name=config.spec.name,
        threads=config.threads,
        seconds_per_window=config.seconds,
        window_counts=counts,
        total_blocks=int(sum(counts)),
        elapsed_seconds=round(clock() - started, 4),
        blocks_per_second=float(rates.mean()),
        blocks_per_second_std=float(rates.std()),
    )


# ---------------------------------------------------------------------------
# Suite runner
# ---------------------------------------------------------------------------

def build_default_suite(
    settings: Settings,
    *,
    spec: Optional[CipherSpec] = None,
    seconds: Optional[float] = None,
    threads: Optional[int] = None,
    sac_trials: Optional[int] = None,
    all_rules: bool = False,
) -> SuiteConfig:
    spec = spec or CipherSpec(seed=settings.global_seed)
    return SuiteConfig(
        suite_name=spec.name,
        benchmark=BenchmarkConfig(
            spec=spec,
            seconds=seconds if seconds is not None else settings.bench_seconds,
            threads=threads if threads is not None else settings.bench_threads,
            seed=settings.global_seed,
        ),
        roundtrip_vectors=settings.roundtrip_vectors,
        all_rules=all_rules,
        avalanche_trials=settings.avalanche_trials,
        sac_trials=sac_trials if sac_trials is not None else settings.sac_trials,
        output_dir=settings.runs_dir,
    )


def run_evaluation_suite(
    suite: SuiteConfig,
    *,
    progress_callback: Optional[Callable[[str, int, int], None]] = None,
    write_results: bool = True,
):
    """Run roundtrip, avalanche, optional SAC, weak-key probe and throughput.

    Args:
        suite: What to run.
        progress_callback: Optional callback(stage, current, total).
        write_results: Save `report.json` under a timestamped run directory.

    Returns:
        The EvaluationReport; `report.run_dir` is set when results were written.
    """
    from .avalanche import compute_sac
    from .report import EvaluationReport
    from .roundtrip import run_all_rules, run_roundtrip_tests
    from .weak_keys import probe_known_weak_keys
    from xr30lab.cipher.metrics import evaluate_and_score

    spec = suite.benchmark.spec
    stages = 5
    report = EvaluationReport()

    def _progress(stage: str, idx: int) -> None:
        logger.info("Stage %d/%d: %s", idx + 1, stages, stage)
        if progress_callback:
            progress_callback(stage, idx, stages)

    _progress("roundtrip", 0)
    if suite.all_rules:
        report.roundtrip_results = run_all_rules(spec, num_vectors=suite.roundtrip_vectors, seed=spec.seed)
    else:
        report.roundtrip_results = [
            run_roundtrip_tests(spec, num_vectors=suite.roundtrip_vectors, seed=spec.seed)
        ]
    for r in report.roundtrip_results:
        if not r.is_perfect:
            logger.error("Roundtrip failed: %s", r.summary())

    _progress("avalanche", 1)
    report.avalanche = evaluate_and_score(spec, trials=suite.avalanche_trials)

    _progress("sac", 2)
    if suite.sac_trials > 0:
        cipher = build_cipher(spec)
        for input_type in ("plaintext", "key"):
            report.sac_results.append(compute_sac(
                cipher,
                input_type=input_type,
                trials=suite.sac_trials,
                seed=spec.seed,
                algorithm_name=spec.name,
            ))
    else:
        logger.debug("SAC skipped (sac_trials=0)")

    _progress("weak keys", 3)
    if suite.weak_keys:
        report.weak_key_results = probe_known_weak_keys(spec)
        for label in report.weak_keys():
            logger.warning("Degenerate subkeys for weak-key probe %r", label)

    _progress("throughput", 4)
    report.throughput = measure_throughput(suite.benchmark)

    if write_results:
        paths = make_run_dir(suite.output_dir, suite.suite_name)
        write_json(paths.spec_json, spec.model_dump())
        write_json(paths.report_json, report.to_dict())
        report.run_dir = str(paths.run_dir)
        logger.info("Results saved to %s", paths.run_dir)

    return report
