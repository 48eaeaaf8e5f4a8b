"""Tests for the stress model and scoring policies."""

from __future__ import annotations

import math

import pytest
from pydantic import ValidationError

from stress_monitor.models import RawSample, StressBand
from stress_monitor.scoring import (
    OVERALL_POLICY,
    PRIMARY_POLICY,
    ScoringPolicy,
    classify,
    fuse,
    get_policy,
    normalize_gsr,
    normalize_hrv_for_stress,
    score_sample,
    smooth,
    temperature_contribution,
)


class TestNormalisation:
    def test_gsr_range_and_monotonic(self):
        values = [normalize_gsr(g) for g in range(0, 1024)]
        assert all(0.0 <= v <= 100.0 for v in values)
        assert values == sorted(values)
        assert values[0] == 0.0
        assert values[-1] == pytest.approx(100.0)

    def test_gsr_clamps_out_of_range(self):
        assert normalize_gsr(-50) == 0.0
        assert normalize_gsr(5000) == 100.0
        assert normalize_gsr(math.inf) == 100.0
        assert normalize_gsr(math.nan) == 0.0

    def test_hrv_maps_reference_range(self):
        assert normalize_hrv_for_stress(0) == 0.0
        assert normalize_hrv_for_stress(50) == pytest.approx(50.0)
        assert normalize_hrv_for_stress(100) == pytest.approx(100.0)

    def test_hrv_clamps_instead_of_extrapolating(self):
        assert normalize_hrv_for_stress(-10) == 0.0
        assert normalize_hrv_for_stress(250) == 100.0

    def test_hrv_uses_policy_range(self):
        assert normalize_hrv_for_stress(60, OVERALL_POLICY) == pytest.approx(50.0)

    def test_temperature_penalty_per_degree(self):
        assert temperature_contribution(37.0) == 0.0
        assert temperature_contribution(38.5) == pytest.approx(30.0)
        assert temperature_contribution(35.0) == pytest.approx(40.0)

    def test_temperature_uncapped_by_default(self):
        assert temperature_contribution(45.0) == pytest.approx(160.0)

    def test_temperature_capped_by_overall_policy(self):
        assert temperature_contribution(45.0, OVERALL_POLICY) == 100.0


class TestFusion:
    @pytest.mark.parametrize(
        "gsr_pct, hrv_pct, temp",
        [(100, 0, 1000), (0, 100, 0), (500, -300, 500), (-100, 400, -50), (math.nan, 50, 0)],
    )
    def test_output_always_in_range(self, gsr_pct, hrv_pct, temp):
        for policy in (PRIMARY_POLICY, OVERALL_POLICY):
            assert 0.0 <= fuse(gsr_pct, hrv_pct, temp, policy) <= 100.0

    def test_hrv_enters_as_complement(self):
        assert fuse(0, 0, 0) == pytest.approx(50.0)
        assert fuse(0, 100, 0) == 0.0


class TestClassify:
    @pytest.mark.parametrize(
        "score, band",
        [
            (0, StressBand.NORMAL),
            (40, StressBand.NORMAL),
            (40.01, StressBand.MODERATE),
            (41, StressBand.MODERATE),
            (70, StressBand.MODERATE),
            (71, StressBand.HIGH),
            (100, StressBand.HIGH),
            (-5, StressBand.NORMAL),
            (1e9, StressBand.HIGH),
        ],
    )
    def test_boundaries(self, score, band):
        assert classify(score) == band

    def test_nan_is_still_classified(self):
        assert classify(math.nan) == StressBand.NORMAL


class TestEndToEnd:
    def test_calm_sample(self, calm_sample):
        metrics, score, band = score_sample(calm_sample)
        assert metrics.gsr_pct == pytest.approx(50.05, abs=0.01)
        assert metrics.hrv_stress_pct == pytest.approx(50.0)
        assert metrics.temp_contribution == 0.0
        assert score == pytest.approx(35.01, abs=0.01)
        assert band == StressBand.NORMAL

    def test_stressed_sample(self, stressed_sample):
        metrics, score, band = score_sample(stressed_sample)
        assert metrics.gsr_pct == pytest.approx(100.0)
        assert metrics.hrv_stress_pct == 0.0
        assert metrics.temp_contribution == pytest.approx(40.0)
        assert score == pytest.approx(82.0)
        assert band == StressBand.HIGH

    def test_overall_policy_saturates_at_100(self):
        sample = RawSample(gsr=1023, temperature_c=42.0, hrv_ms=20)
        _, score, band = score_sample(sample, OVERALL_POLICY)
        assert score == pytest.approx(100.0)
        assert band == StressBand.HIGH

    def test_overall_policy_relaxed(self):
        sample = RawSample(gsr=0, temperature_c=37.0, hrv_ms=100)
        _, score, band = score_sample(sample, OVERALL_POLICY)
        assert score == 0.0
        assert band == StressBand.NORMAL


class TestSmoothing:
    def test_seed_with_first_value(self):
        assert smooth(None, 42.0, 0.3) == 42.0

    def test_moves_towards_new_value(self):
        assert smooth(20.0, 80.0, 0.5) == pytest.approx(50.0)

    def test_alpha_one_follows_input(self):
        assert smooth(20.0, 80.0, 1.0) == pytest.approx(80.0)


class TestPolicies:
    def test_lookup(self):
        assert get_policy("primary") is PRIMARY_POLICY
        assert get_policy("overall") is OVERALL_POLICY

    def test_unknown_policy(self):
        with pytest.raises(ValueError, match="Unknown scoring policy"):
            get_policy("mystery")

    def test_rejects_empty_hrv_range(self):
        with pytest.raises(ValidationError):
            ScoringPolicy(name="bad", gsr_weight=1, hrv_weight=0, temp_weight=0,
                          hrv_min_ms=50, hrv_max_ms=50)

    def test_rejects_negative_weight(self):
        with pytest.raises(ValidationError):
            ScoringPolicy(name="bad", gsr_weight=-0.1, hrv_weight=0.5, temp_weight=0.3)

    def test_custom_thresholds(self):
        policy = ScoringPolicy(name="strict", gsr_weight=1, hrv_weight=0, temp_weight=0,
                               moderate_above=20, high_above=50)
        assert classify(30, policy) == StressBand.MODERATE
        assert classify(51, policy) == StressBand.HIGH
