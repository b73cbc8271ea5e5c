#!/usr/bin/env python3
"""
Generate samples/bias_responses.json from a few representative rating batches.
Runs the bias detectors in-memory (no DB/API needed).
Usage: python scripts/generate_sample_responses.py
"""

import json
import sys
from pathlib import Path

# Add project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from hrsignals.engine.bias_detector import (
    INSUFFICIENT_SAMPLE_MESSAGE,
    detect_patterns,
    has_sufficient_sample,
    summarize_severity,
)
from hrsignals.engine.nudges import build_nudge
from hrsignals.engine.thresholds import DEFAULT_DETECTOR_CONFIG
from hrsignals.schemas.bias import BiasDetectionRequest, EnrichedPattern

MANAGER_ID = "00000000-0000-4000-8000-000000000001"
COMPANY_ID = "00000000-0000-4000-8000-000000000002"


def _rating(employee_id, overall, scores=(), review_date=None):
    return {
        "employeeId": employee_id,
        "overallScore": overall,
        "scores": [{"dimension": f"dimension_{i}", "score": s} for i, s in enumerate(scores)],
        "reviewDate": review_date,
    }


SAMPLE_REQUESTS = {
    "lenient_manager": {
        "action": "analyze_manager_patterns",
        "ratings": [_rating(f"emp-{i}", s) for i, s in enumerate([5, 5, 4.5, 4.8])],
    },
    "halo_single_review": {
        "action": "detect_halo_horn",
        "ratings": [
            _rating("emp-0", 3.2, (3, 4, 2.5)),
            _rating("emp-1", 5, (5, 5, 4.9)),
            _rating("emp-2", 3.0, (2, 3, 4)),
        ],
    },
    "rushed_reviews": {
        "action": "detect_recency_bias",
        "ratings": [
            _rating(f"emp-{i}", 3.5, review_date=f"2026-03-01T{9 + i:02d}:00:00Z") for i in range(6)
        ],
    },
    "too_few_ratings": {
        "action": "analyze_manager_patterns",
        "ratings": [_rating("emp-0", 5), _rating("emp-1", 5)],
    },
}


def main():
    samples_dir = Path(__file__).resolve().parent.parent / "samples"
    samples_dir.mkdir(exist_ok=True)
    responses_path = samples_dir / "bias_responses.json"

    responses = {}
    for name, payload in SAMPLE_REQUESTS.items():
        body = BiasDetectionRequest.model_validate(
            {**payload, "managerId": MANAGER_ID, "companyId": COMPANY_ID}
        )
        if not has_sufficient_sample(body.ratings):
            responses[name] = {
                "patterns": [],
                "message": INSUFFICIENT_SAMPLE_MESSAGE.format(
                    minimum=DEFAULT_DETECTOR_CONFIG.minimum_sample_size
                ),
            }
            continue

        patterns = detect_patterns(body.ratings, body.action)
        enriched = [
            EnrichedPattern(**p.model_dump(), nudge=build_nudge(p, None)) for p in patterns
        ]
        responses[name] = {
            "patterns": [p.model_dump(mode="json", by_alias=True) for p in enriched],
            "summary": summarize_severity(patterns).model_dump(by_alias=True),
        }

    with open(responses_path, "w") as f:
        json.dump(responses, f, indent=2)

    print(f"Generated {len(responses)} sample responses -> {responses_path}")


if __name__ == "__main__":
    main()
