"""CLI entry point for the XR30256 evaluation suite.

Usage:
    python scripts/run_benchmarks.py                                  # reference cipher
    python scripts/run_benchmarks.py --all-rules --vectors 4          # every registered rule
    python scripts/run_benchmarks.py --seconds 0.5 --threads 4        # quick threaded run
    python scripts/run_benchmarks.py --rounds 8 --rule 110 --no-save  # experimental variant

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Ensure project root is on path
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from xr30lab.config import load_settings
from xr30lab.cipher.spec import CipherSpec
from xr30lab.evaluation.benchmark_runner import build_default_suite, run_evaluation_suite
from xr30lab.utils.repro import set_global_seed


def _cli_progress(message: str, current: int, total: int) -> None:
    """Print progress to stderr."""
    pct = (current / total * 100) if total > 0 else 0
    print(f"  [{current + 1}/{total}] ({pct:.0f}%) {message}", file=sys.stderr)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="XR30256 evaluation suite - roundtrip, avalanche, weak keys, throughput",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python scripts/run_benchmarks.py --seconds 0.2 --vectors 2   # quick test\n"
            "  python scripts/run_benchmarks.py --sac-trials 2              # include SAC\n"
        ),
    )

    parser.add_argument(
        "--rule", type=int, default=30,
        help="Wolfram rule number for the round CA (default: 30)",
    )
    parser.add_argument(
        "--rounds", type=int, default=16,
        help="Outer Feistel rounds (default: 16)",
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Random seed (default: GLOBAL_SEED)",
    )
    parser.add_argument(
        "--vectors", type=int, default=None,
        help="Roundtrip test vectors (default: XR30_ROUNDTRIP_VECTORS)",
    )
    parser.add_argument(
        "--all-rules", action="store_true",
        help="Roundtrip every registered rule, not only the selected one",
    )
    parser.add_argument(
        "--sac-trials", type=int, default=None,
        help="SAC trials per input bit, 0 skips SAC (default: XR30_SAC_TRIALS)",
    )
    parser.add_argument(
        "--seconds", type=float, default=None,
        help="Throughput window in seconds (default: XR30_BENCH_SECONDS)",
    )
    parser.add_argument(
        "--threads", type=int, default=None,
        help="Throughput worker threads (default: XR30_BENCH_THREADS)",
    )
    parser.add_argument(
        "--no-save", action="store_true",
        help="Do not write report.json under the runs directory",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    settings = load_settings()

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    seed = args.seed if args.seed is not None else settings.global_seed
    set_global_seed(seed)
    spec = CipherSpec(rule=args.rule, rounds=args.rounds, seed=seed)
    if not spec.is_reference:
        spec = spec.model_copy(update={"name": f"XR30256-r{spec.rule}-{spec.rounds}rd"})
        print(f"WARNING: {spec.name} is an experimental variant, not XR30256.", file=sys.stderr)

    if args.vectors is not None:
        settings = settings.model_copy(update={"roundtrip_vectors": args.vectors})

    suite = build_default_suite(
        settings,
        spec=spec,
        seconds=args.seconds,
        threads=args.threads,
        sac_trials=args.sac_trials,
        all_rules=args.all_rules,
    )

    print(f"Evaluation suite: {suite.suite_name}")
    print(f"  Rule: {spec.rule}, rounds: {spec.rounds}, generations: {spec.generations}")
    print(f"  Roundtrip vectors: {suite.roundtrip_vectors}{' (all rules)' if suite.all_rules else ''}")
    print(f"  SAC trials per bit: {suite.sac_trials}")
    print(f"  Throughput: {suite.benchmark.windows} x {suite.benchmark.seconds}s, "
          f"{suite.benchmark.threads} thread(s)")
    print()

    report = run_evaluation_suite(
        suite, progress_callback=_cli_progress, write_results=not args.no_save,
    )

    print()
    print(report.to_summary())

    if report.run_dir:
        print(f"\nAll results saved to: {report.run_dir}")

    if report.failing_variants():
        sys.exit(1)


if __name__ == "__main__":
    main()
