#!/usr/bin/env python3
"""Collect baseline calculation timings for every configured fee profile."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from time import perf_counter

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from goldenvisa.backend.app.services.calculation_service import calculate_costs  # noqa: E402
from goldenvisa.backend.config.fee_config import available_profiles  # noqa: E402

SAMPLE_PAYLOAD = {
    "tier_id": "tier-250",
    "custom_price": 500000,
    "locale": "en",
    "family": {"adults": 2, "children_15_plus": 1, "children_under_15": 1},
    "options": {
        "express_processing": True,
        "power_of_attorney": True,
        "max_health_insurance": True,
    },
}


def measure_profile(profile_id: str, iterations: int) -> dict[str, float]:
    """Return timing statistics for repeated calculations under ``profile_id``."""

    payload = {**SAMPLE_PAYLOAD, "profile": profile_id}
    calculate_costs(payload)  # Warm caches
    start = perf_counter()
    for _ in range(iterations):
        calculate_costs(payload)
    elapsed = perf_counter() - start
    return {
        "iterations": iterations,
        "total_ms": elapsed * 1000,
        "average_ms": (elapsed / iterations) * 1000,
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--iterations", type=int, default=500)
    args = parser.parse_args(argv)

    snapshot = {
        profile_id: measure_profile(profile_id, args.iterations)
        for profile_id in available_profiles()
    }
    print(json.dumps(snapshot, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
