"""Stress model — raw sample → normalised sub-scores → composite score → band.

Every function here is pure and total: out-of-range, infinite or NaN inputs
are clamped, never raised on.

Composite score (weights from the active :class:`ScoringPolicy`)::

    score = w_gsr * gsr_pct
          + w_hrv * (100 - hrv_stress_pct)
          + w_temp * temp_contribution

clamped to ``[0, 100]``.  HRV enters as its complement because higher HRV
means lower stress.
"""

from __future__ import annotations

import math

from stress_monitor.models import NormalizedMetrics, RawSample, StressBand
from stress_monitor.scoring.policy import PRIMARY_POLICY, ScoringPolicy

SCORE_MIN = 0.0
SCORE_MAX = 100.0


def clamp(value: float, low: float = SCORE_MIN, high: float = SCORE_MAX) -> float:
    """Clamp *value* into ``[low, high]``; NaN maps to *low*."""
    if math.isnan(value):
        return low
    return max(low, min(high, value))


# ── Sub-scores ────────────────────────────────────────────────


def normalize_gsr(gsr: float, policy: ScoringPolicy = PRIMARY_POLICY) -> float:
    """GSR as a percentage of the ADC full scale."""
    return clamp(gsr / policy.gsr_max * 100.0)


def normalize_hrv_for_stress(hrv_ms: float, policy: ScoringPolicy = PRIMARY_POLICY) -> float:
    """Map HRV linearly over the policy's reference range onto ``[0, 100]``.

    Values outside the range clamp rather than extrapolate.
    """
    span = policy.hrv_max_ms - policy.hrv_min_ms
    return clamp((hrv_ms - policy.hrv_min_ms) / span * 100.0)


def temperature_contribution(temp_c: float, policy: ScoringPolicy = PRIMARY_POLICY) -> float:
    """Penalty points for deviating from the euthermic baseline.

    Not clamped unless the policy sets ``temp_cap``; the fused score is
    clamped instead.
    """
    if math.isnan(temp_c):
        return 0.0
    points = abs(temp_c - policy.temp_baseline_c) * policy.temp_points_per_degree
    if policy.temp_cap is not None:
        points = min(points, policy.temp_cap)
    return points


# ── Fusion & classification ───────────────────────────────────


def fuse(
    gsr_pct: float,
    hrv_stress_pct: float,
    temp_contribution: float,
    policy: ScoringPolicy = PRIMARY_POLICY,
) -> float:
    """Weighted sum of the sub-scores, clamped to ``[0, 100]``."""
    raw = (
        policy.gsr_weight * gsr_pct
        + policy.hrv_weight * (100.0 - hrv_stress_pct)
        + policy.temp_weight * temp_contribution
    )
    return clamp(raw)


def classify(score: float, policy: ScoringPolicy = PRIMARY_POLICY) -> StressBand:
    """Map a score onto a band.  Total: NaN falls through to NORMAL."""
    if score > policy.high_above:
        return StressBand.HIGH
    if score > policy.moderate_above:
        return StressBand.MODERATE
    return StressBand.NORMAL


def normalize(sample: RawSample, policy: ScoringPolicy = PRIMARY_POLICY) -> NormalizedMetrics:
    return NormalizedMetrics(
        gsr_pct=normalize_gsr(sample.gsr, policy),
        hrv_stress_pct=normalize_hrv_for_stress(sample.hrv_ms, policy),
        temp_contribution=temperature_contribution(sample.temperature_c, policy),
    )


def score_sample(
    sample: RawSample,
    policy: ScoringPolicy = PRIMARY_POLICY,
) -> tuple[NormalizedMetrics, float, StressBand]:
    """Run the full model on one sample."""
    metrics = normalize(sample, policy)
    score = fuse(metrics.gsr_pct, metrics.hrv_stress_pct, metrics.temp_contribution, policy)
    return metrics, score, classify(score, policy)


def smooth(previous: float | None, current: float, alpha: float) -> float:
    """Exponentially smoothed display score (EWMA).

    ``alpha`` is the weight of the new value; ``previous=None`` seeds with
    *current*.
    """
    if previous is None:
        return current
    return clamp(alpha * current + (1.0 - alpha) * previous)
