"""Deterministic evaluation framework for XR30256.

Provides algebraic unit testing (roundtrip verification), statistical
analysis (avalanche, SAC), the weak-key probe and a throughput benchmark.

Research / education only. Do NOT use in production.
"""

from .roundtrip import RoundtripResult, RoundtripFailure, run_roundtrip_tests, run_all_rules
from .avalanche import SACResult, compute_sac
from .weak_keys import (
    KNOWN_WEAK_KEYS,
    SubkeyDiversityResult,
    analyze_subkeys,
    find_cycle,
    probe_known_weak_keys,
)
from .benchmark_runner import (
    BenchmarkConfig,
    SuiteConfig,
    ThroughputResult,
    build_default_suite,
    encrypt_blocks,
    measure_throughput,
    run_evaluation_suite,
)
from .report import EvaluationReport

__all__ = [
    "RoundtripResult",
    "RoundtripFailure",
    "run_roundtrip_tests",
    "run_all_rules",
    "SACResult",
    "compute_sac",
    "KNOWN_WEAK_KEYS",
    "SubkeyDiversityResult",
    "analyze_subkeys",
    "find_cycle",
    "probe_known_weak_keys",
    "BenchmarkConfig",
    "SuiteConfig",
    "ThroughputResult",
    "build_default_suite",
    "encrypt_blocks",
    "measure_throughput",
    "run_evaluation_suite",
    "EvaluationReport",
]
