"""Stress scoring — pure functions plus configurable fusion policies."""

from stress_monitor.scoring.model import (
    classify,
    fuse,
    normalize,
    normalize_gsr,
    normalize_hrv_for_stress,
    score_sample,
    smooth,
    temperature_contribution,
)
from stress_monitor.scoring.policy import (
    OVERALL_POLICY,
    POLICIES,
    PRIMARY_POLICY,
    ScoringPolicy,
    get_policy,
)

__all__ = [
    "OVERALL_POLICY",
    "POLICIES",
    "PRIMARY_POLICY",
    "ScoringPolicy",
    "classify",
    "fuse",
    "get_policy",
    "normalize",
    "normalize_gsr",
    "normalize_hrv_for_stress",
    "score_sample",
    "smooth",
    "temperature_contribution",
]
