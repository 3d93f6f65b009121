import itertools
import sys
from pathlib import Path

import pytest

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from xr30lab.cipher.builder import build_cipher
from xr30lab.cipher.cryptanalysis import _flip_bit, _hamming_distance_bytes
from xr30lab.cipher.metrics import evaluate_and_score, evaluate_full, heuristic_issues, score_avalanche
from xr30lab.cipher.register import Register
from xr30lab.cipher.rules import RULE30
from xr30lab.cipher.spec import CipherSpec
from xr30lab.config import Settings
from xr30lab.utils.repro import read_json
from xr30lab.evaluation import (
    BenchmarkConfig,
    EvaluationReport,
    SuiteConfig,
    analyze_subkeys,
    build_default_suite,
    compute_sac,
    encrypt_blocks,
    find_cycle,
    measure_throughput,
    probe_known_weak_keys,
    run_evaluation_suite,
)

KEY_WORDS = (0xA59535D07E192F12, 0x82734FB3084C5E05, 0x385B8A038D28E669, 0xD2BC44A82C395D8E)


# ---------------------------------------------------------------------------
# Helpers and scoring
# ---------------------------------------------------------------------------

def test_bit_helpers():
    assert _flip_bit(b"\x00\x00", 9) == b"\x00\x02"
    assert _hamming_distance_bytes(b"\x0f", b"\xf0") == 8
    with pytest.raises(ValueError):
        _hamming_distance_bytes(b"\x00", b"\x00\x00")
    with pytest.raises(IndexError):
        _flip_bit(b"\x00", 8)


def test_score_avalanche():
    assert score_avalanche(0.5) == 1.0
    assert score_avalanche(0.0) == 0.0
    assert score_avalanche(1.0) == 0.0


def test_heuristic_issues_flags_low_diffusion():
    metrics = {"plaintext_avalanche": {"mean": 0.1}, "key_avalanche": {"mean": 0.5}}
    issues = heuristic_issues(metrics)
    assert len(issues) == 1
    assert "Plaintext" in issues[0]


# ---------------------------------------------------------------------------
# Avalanche / SAC
# ---------------------------------------------------------------------------

def test_reference_cipher_avalanche():
    metrics = evaluate_and_score(CipherSpec(), trials=8)
    assert metrics["plaintext_avalanche"]["mean"] > 0.35
    assert metrics["key_avalanche"]["mean"] > 0.35
    assert 0.0 <= metrics["scores"]["overall"] <= 1.0


@pytest.mark.parametrize("position", [0, 97, 128, 255])
def test_single_plaintext_bit_flip_changes_over_a_quarter(position):
    ctx = build_cipher().context(KEY_WORDS)
    plaintext = Register((0x0101010101010101, 0x0202020202020202, 0x0303030303030303, 0x0404040404040404))
    flipped = plaintext ^ Register.single_bit(position)
    changed = (ctx.encrypt(plaintext) ^ ctx.encrypt(flipped)).popcount()
    assert changed > 64, f"bit {position}: only {changed} of 256 output bits changed"


def test_sac_on_selected_bits():
    cipher = build_cipher()
    result = compute_sac(cipher, input_type="plaintext", trials=1, input_bits=[0, 128, 255])
    assert result.num_input_bits == 3
    assert len(result.per_input_bit_mean) == 3
    assert 0.3 < result.global_mean < 0.7
    assert result.to_dict()["input_type"] == "plaintext"


def test_sac_rejects_unknown_input():
    with pytest.raises(ValueError):
        compute_sac(build_cipher(), input_type="nonce", trials=1, input_bits=[0])


# ---------------------------------------------------------------------------
# Weak keys
# ---------------------------------------------------------------------------

def test_known_weak_keys_are_flagged():
    results = {r.label: r for r in probe_known_weak_keys()}
    zero = results["all-zero"]
    assert zero.is_degenerate
    assert zero.zero_subkeys == 4
    assert zero.cycles == [1, 1, 1, 1]
    # k1 = k2 = k3 = 0 makes three of the mixing vectors empty
    assert results["single-word"].zero_subkeys == 3


def test_reference_key_subkeys_are_diverse():
    result = analyze_subkeys(KEY_WORDS, label="reference")
    assert result.zero_subkeys == 0
    assert len(result.pairwise_distances) == 6
    assert not result.is_degenerate, result.summary()


def test_find_cycle():
    assert find_cycle(Register.zero(), RULE30, 10) == 1
    ones = Register((0xFFFFFFFFFFFFFFFF,) * 4)
    # all ones dies in one step and then stays empty
    assert find_cycle(ones, RULE30, 10) == 1
    assert find_cycle(ones, RULE30, 0) is None


# ---------------------------------------------------------------------------
# Throughput
# ---------------------------------------------------------------------------

def test_threaded_encryption_matches_sequential():
    ctx = build_cipher().context(KEY_WORDS)
    blocks = [bytes([i]) * 32 for i in range(3)]
    assert encrypt_blocks(ctx, blocks, threads=3) == encrypt_blocks(ctx, blocks)


def test_measure_throughput_with_fake_clock():
    ticks = itertools.count()
    calls = []
    config = BenchmarkConfig(seconds=2.5, windows=2, threads=1)
    result = measure_throughput(
        config,
        progress_callback=lambda stage, i, n: calls.append((stage, i, n)),
        clock=lambda: float(next(ticks)),
    )
    assert result.window_counts == [2, 2]
    assert result.total_blocks == 4
    assert result.blocks_per_second == pytest.approx(0.8)
    assert result.bits_per_second == pytest.approx(0.8 * 256)
    assert calls == [("throughput", 0, 2), ("throughput", 1, 2)]
    assert "encryptions/sec" in result.summary()


def test_build_default_suite_uses_settings():
    settings = Settings(global_seed=7, roundtrip_vectors=3, bench_seconds=0.5, bench_threads=2, runs_dir="out")
    suite = build_default_suite(settings, sac_trials=0)
    assert isinstance(suite, SuiteConfig)
    assert suite.benchmark.spec.seed == 7
    assert suite.benchmark.threads == 2
    assert suite.roundtrip_vectors == 3
    assert suite.output_dir == "out"


def test_evaluation_suite_writes_report(tmp_path):
    suite = SuiteConfig(
        benchmark=BenchmarkConfig(seconds=0.01, windows=1),
        roundtrip_vectors=1,
        avalanche_trials=1,
        sac_trials=0,
        output_dir=str(tmp_path),
    )
    stages = []
    report = run_evaluation_suite(suite, progress_callback=lambda s, i, n: stages.append(s))

    assert isinstance(report, EvaluationReport)
    assert stages == ["roundtrip", "avalanche", "sac", "weak keys", "throughput"]
    assert report.failing_variants() == []
    assert "all-zero" in report.weak_keys()
    assert report.throughput.total_blocks >= 1

    saved = read_json(Path(report.run_dir) / "report.json")
    assert saved["summary"]["roundtrip_all_pass"] is True
    assert (Path(report.run_dir) / "cipher_spec.json").exists()
    assert "Roundtrip Tests: 1/1" in report.to_summary()


def test_evaluate_full_on_short_variant():
    spec = CipherSpec(rounds=2, generations=32, key_generations=32)
    stages = []
    result = evaluate_full(
        spec,
        avalanche_trials=1,
        sac_trials=1,
        sac_bits=[0, 255],
        progress_callback=lambda s, i, n: stages.append(s),
    )
    assert stages == ["SAC (plaintext)", "SAC (key)", "Weak keys"]
    assert result["sac_plaintext"]["num_input_bits"] == 2
    assert len(result["weak_keys"]) == 4
    assert set(result["scores"]) >= {"plaintext_avalanche", "key_avalanche", "overall"}
