from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from .builder import build_cipher
from .cryptanalysis import evaluate_cipher
from .registry import RuleRegistry
from .spec import CipherSpec


def score_avalanche(mean: float) -> float:
    # 1.0 is perfect (0.5), 0.0 is terrible (0 or 1)
    return max(0.0, 1.0 - abs(mean - 0.5) / 0.5)


def evaluate_and_score(spec: CipherSpec, *, trials: int = 16, registry: Optional[RuleRegistry] = None) -> Dict[str, object]:
    cipher = build_cipher(spec, registry)
    metrics = evaluate_cipher(cipher, rounds=spec.rounds, trials=trials, seed=spec.seed)
    pt_mean = float(metrics["plaintext_avalanche"]["mean"])
    key_mean = float(metrics["key_avalanche"]["mean"])

    metrics["scores"] = {
        "plaintext_avalanche": score_avalanche(pt_mean),
        "key_avalanche": score_avalanche(key_mean),
        "overall": (score_avalanche(pt_mean) + score_avalanche(key_mean)) / 2.0,
    }
    return metrics


def heuristic_issues(metrics: Dict[str, object]) -> List[str]:
    issues: List[str] = []
    pt = float(metrics["plaintext_avalanche"]["mean"])
    kk = float(metrics["key_avalanche"]["mean"])
    if pt < 0.40:
        issues.append("Plaintext avalanche is low (<0.40). Diffusion likely insufficient.")
    if kk < 0.40:
        issues.append("Key avalanche is low (<0.40). Key schedule or mixing may be weak.")
    return issues


def evaluate_full(
    spec: CipherSpec,
    *,
    registry: Optional[RuleRegistry] = None,
    avalanche_trials: int = 16,
    sac_trials: int = 2,
    sac_bits: Optional[List[int]] = None,
    seed: Optional[int] = None,
    progress_callback: Optional[Callable[[str, int, int], None]] = None,
) -> Dict[str, Any]:
    """Run basic avalanche, SAC for plaintext and key, and the weak-key probe.

    Args:
        spec: Cipher parameters to evaluate.
        registry: Optional rule registry.
        avalanche_trials: Random (key, plaintext) pairs for the basic avalanche.
        sac_trials: Trials per input bit for SAC (256 bits each, so keep small).
        sac_bits: Restrict SAC to these input bit indices (default: all 256).
        seed: Random seed (defaults to spec.seed).
        progress_callback: Optional callback(stage, current, total).

    Returns:
        Dict with basic_avalanche, sac_plaintext, sac_key, weak_keys and scores.
    """
    from xr30lab.evaluation.avalanche import compute_sac
    from xr30lab.evaluation.weak_keys import probe_known_weak_keys

    reg = registry or RuleRegistry()
    actual_seed = seed if seed is not None else spec.seed

    basic = evaluate_and_score(spec, trials=avalanche_trials, registry=reg)
    cipher = build_cipher(spec, reg)

    if progress_callback:
        progress_callback("SAC (plaintext)", 0, 3)
    sac_pt = compute_sac(
        cipher,
        input_type="plaintext",
        trials=sac_trials,
        seed=actual_seed,
        input_bits=sac_bits,
        algorithm_name=spec.name,
    )

    if progress_callback:
        progress_callback("SAC (key)", 1, 3)
    sac_key = compute_sac(
        cipher,
        input_type="key",
        trials=sac_trials,
        seed=actual_seed,
        input_bits=sac_bits,
        algorithm_name=spec.name,
    )

    if progress_callback:
        progress_callback("Weak keys", 2, 3)
    weak = probe_known_weak_keys(spec, registry=reg)

    pt_score = score_avalanche(float(basic["plaintext_avalanche"]["mean"]))
    key_score = score_avalanche(float(basic["key_avalanche"]["mean"]))

    return {
        "basic_avalanche": basic,
        "sac_plaintext": sac_pt.to_dict(),
        "sac_key": sac_key.to_dict(),
        "weak_keys": [w.to_dict() for w in weak],
        "scores": {
            "plaintext_avalanche": pt_score,
            "key_avalanche": key_score,
            "sac_deviation_pt": sac_pt.sac_deviation,
            "sac_deviation_key": sac_key.sac_deviation,
            "overall": (pt_score + key_score) / 2.0,
        },
    }
