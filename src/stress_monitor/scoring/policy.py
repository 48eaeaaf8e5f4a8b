"""Scoring policies — fusion weights and reference ranges as data.

Two weighting schemes are in use for the same signals.  Rather than keep two
code paths, both are expressed as :class:`ScoringPolicy` instances and the
active one is picked by the ``scoring_policy`` setting.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ScoringPolicy(BaseModel):
    """Weights, reference ranges and band thresholds for the stress score."""

    model_config = ConfigDict(frozen=True)

    name: str

    # ── Fusion weights ────────────────────────────────────────
    gsr_weight: float = Field(ge=0.0)
    hrv_weight: float = Field(ge=0.0)  # applied to the HRV complement
    temp_weight: float = Field(ge=0.0)

    # ── Reference ranges ──────────────────────────────────────
    gsr_max: float = Field(default=1023.0, gt=0.0)
    hrv_min_ms: float = 0.0
    hrv_max_ms: float = 100.0
    temp_baseline_c: float = 37.0
    temp_points_per_degree: float = Field(default=20.0, ge=0.0)
    temp_cap: float | None = None  # None = contribution left uncapped before fusion

    # ── Band thresholds (score > threshold) ───────────────────
    moderate_above: float = 40.0
    high_above: float = 70.0

    @model_validator(mode="after")
    def _check_ranges(self) -> ScoringPolicy:
        if self.hrv_max_ms <= self.hrv_min_ms:
            raise ValueError("hrv_max_ms must be greater than hrv_min_ms")
        if self.moderate_above >= self.high_above:
            raise ValueError("moderate_above must be lower than high_above")
        return self


PRIMARY_POLICY = ScoringPolicy(
    name="primary",
    gsr_weight=0.2,
    hrv_weight=0.5,
    temp_weight=0.3,
)

# "Overall stress" variant: GSR-dominant, HRV deficit and temperature
# deviation as secondary terms, each sub-score capped at 100.
OVERALL_POLICY = ScoringPolicy(
    name="overall",
    gsr_weight=0.6,
    hrv_weight=0.2,
    temp_weight=0.2,
    hrv_min_ms=20.0,
    hrv_max_ms=100.0,
    temp_cap=100.0,
)

POLICIES: dict[str, ScoringPolicy] = {
    PRIMARY_POLICY.name: PRIMARY_POLICY,
    OVERALL_POLICY.name: OVERALL_POLICY,
}


def get_policy(name: str) -> ScoringPolicy:
    """Look up a named policy.

    Raises :class:`ValueError` if no policy is registered under *name*.
    """
    policy = POLICIES.get(name)
    if policy is None:
        raise ValueError(f"Unknown scoring policy {name!r}. Available: {sorted(POLICIES)}")
    return policy
