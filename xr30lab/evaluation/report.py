"""Structured evaluation report builder.

Aggregates results from roundtrip tests, SAC analysis, the weak-key probe
and throughput runs into a single serializable report for export and UI
display.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .avalanche import SACResult
from .benchmark_runner import ThroughputResult
from .roundtrip import RoundtripResult
from .weak_keys import SubkeyDiversityResult


@dataclass
class EvaluationReport:
    """Complete evaluation report aggregating all analysis results."""
    timestamp: str = ""
    roundtrip_results: List[RoundtripResult] = field(default_factory=list)
    sac_results: List[SACResult] = field(default_factory=list)
    weak_key_results: List[SubkeyDiversityResult] = field(default_factory=list)
    throughput: Optional[ThroughputResult] = None
    avalanche: Optional[Dict[str, Any]] = None
    run_dir: Optional[str] = None

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize full report for JSON export."""
        return {
            "timestamp": self.timestamp,
            "roundtrip": [r.to_dict() for r in self.roundtrip_results],
            "sac": [s.to_dict() for s in self.sac_results],
            "weak_keys": [w.to_dict() for w in self.weak_key_results],
            "throughput": self.throughput.to_dict() if self.throughput else None,
            "avalanche": self.avalanche,
            "summary": {
                "roundtrip_all_pass": all(r.is_perfect for r in self.roundtrip_results),
                "sac_all_pass": all(s.passes_sac for s in self.sac_results),
                "failing_variants": self.failing_variants(),
                "weak_keys": self.weak_keys(),
            },
        }

    def to_summary(self) -> str:
        """Human-readable summary for terminal / Streamlit display."""
        lines = [f"Evaluation Report - {self.timestamp}", "=" * 50]

        if self.roundtrip_results:
            rt_pass = sum(1 for r in self.roundtrip_results if r.is_perfect)
            lines.append(f"\nRoundtrip Tests: {rt_pass}/{len(self.roundtrip_results)} variants pass")
            for r in self.roundtrip_results:
                lines.append(f"  {r.summary()}")

        if self.avalanche:
            pt = self.avalanche["plaintext_avalanche"]["mean"]
            kk = self.avalanche["key_avalanche"]["mean"]
            lines.append(f"\nAvalanche: plaintext={pt:.4f}, key={kk:.4f}")

        if self.sac_results:
            sac_pass = sum(1 for s in self.sac_results if s.passes_sac)
            lines.append(f"\nSAC Analysis: {sac_pass}/{len(self.sac_results)} pass")
            for s in self.sac_results:
                lines.append(f"  {s.summary()}")

        if self.weak_key_results:
            lines.append(f"\nWeak-key probe: {len(self.weak_keys())}/{len(self.weak_key_results)} degenerate")
            for w in self.weak_key_results:
                lines.append(f"  {w.summary()}")

        if self.throughput:
            lines.append(f"\nThroughput: {self.throughput.summary()}")

        return "\n".join(lines)

    def failing_variants(self) -> List[str]:
        return [r.algorithm_name for r in self.roundtrip_results if not r.is_perfect]

    def weak_keys(self) -> List[str]:
        return [w.label for w in self.weak_key_results if w.is_degenerate]
