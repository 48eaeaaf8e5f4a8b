"""Tests for the in-memory session state."""

from __future__ import annotations

import pytest

from stress_monitor.models import (
    ConnectionState,
    MonitoringState,
    RawSample,
    ScoredSample,
    StressBand,
)
from stress_monitor.scoring import score_sample
from stress_monitor.session import SessionState


def _scored(gsr: float) -> ScoredSample:
    sample = RawSample(gsr=gsr, temperature_c=37.0, hrv_ms=50)
    metrics, score, band = score_sample(sample)
    return ScoredSample(sample=sample, metrics=metrics, score=score, band=band)


class TestSessionState:
    def test_initial_snapshot(self, session, user):
        snap = session.snapshot()
        assert snap.user == user
        assert snap.connection_state == ConnectionState.DISCONNECTED
        assert snap.monitoring_state == MonitoringState.IDLE
        assert snap.latest is None
        assert snap.latest_score is None
        assert snap.recent == ()

    def test_record_updates_current_values(self, session):
        scored = _scored(1023)
        snap = session.record(scored)
        assert snap.latest == scored
        assert snap.latest_score == scored.score
        assert snap.band == scored.band
        assert session.snapshot() is snap

    def test_ring_buffer_evicts_oldest(self, session):
        for gsr in range(12):
            session.record(_scored(gsr * 50))
        recent = session.snapshot().recent
        assert len(recent) == 10
        assert recent[0].sample.gsr == 100
        assert recent[-1].sample.gsr == 550

    def test_custom_buffer_size(self, user):
        state = SessionState(user, recent_limit=3)
        for gsr in range(5):
            state.record(_scored(gsr))
        assert [s.sample.gsr for s in state.snapshot().recent] == [2, 3, 4]

    def test_rejects_empty_buffer(self, user):
        with pytest.raises(ValueError):
            SessionState(user, recent_limit=0)

    def test_old_snapshots_are_not_mutated(self, session):
        before = session.snapshot()
        session.record(_scored(900))
        session.set_connection(ConnectionState.CONNECTED, address="http://x")
        assert before.recent == ()
        assert before.latest_score is None
        assert before.connection_state == ConnectionState.DISCONNECTED

    def test_smoothing(self, user):
        state = SessionState(user, smoothing_alpha=0.5)
        first = state.record(_scored(0))
        second = state.record(_scored(1023))
        assert first.smoothed_score == pytest.approx(first.latest_score)
        expected = 0.5 * second.latest_score + 0.5 * first.latest_score
        assert second.smoothed_score == pytest.approx(expected)

    def test_connection_keeps_address_unless_given(self, session):
        session.set_connection(ConnectionState.CONNECTED, address="http://10.0.0.2")
        snap = session.set_connection(ConnectionState.FAILED, diagnostic="gone")
        assert snap.device_address == "http://10.0.0.2"
        assert snap.diagnostic == "gone"

    def test_band_follows_latest(self, session):
        session.record(_scored(1023))
        assert session.snapshot().band == StressBand.MODERATE
        session.record(_scored(0))
        assert session.snapshot().band == StressBand.NORMAL
