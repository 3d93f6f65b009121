from __future__ import annotations

import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class Settings(BaseModel):
    # Reproducibility
    global_seed: int = Field(default=1337)

    # Evaluation (the round function is slow in pure Python; keep these small)
    roundtrip_vectors: int = Field(default=16, ge=1)
    avalanche_trials: int = Field(default=16, ge=1)
    sac_trials: int = Field(default=2, ge=0)

    # Throughput benchmark
    bench_seconds: float = Field(default=1.0, gt=0.0)
    bench_threads: int = Field(default=1, ge=1, le=64)

    # Paths / logging
    runs_dir: str = Field(default="runs")
    log_level: str = Field(default="INFO")


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    # Load .env if present
    load_dotenv()

    return Settings(
        global_seed=int(os.getenv("GLOBAL_SEED", "1337")),
        roundtrip_vectors=int(os.getenv("XR30_ROUNDTRIP_VECTORS", "16")),
        avalanche_trials=int(os.getenv("XR30_AVALANCHE_TRIALS", "16")),
        sac_trials=int(os.getenv("XR30_SAC_TRIALS", "2")),
        bench_seconds=float(os.getenv("XR30_BENCH_SECONDS", "1.0")),
        bench_threads=int(os.getenv("XR30_BENCH_THREADS", "1")),
        runs_dir=os.getenv("XR30_RUNS_DIR", "runs"),
        log_level=os.getenv("XR30_LOG_LEVEL", "INFO").upper(),
    )
